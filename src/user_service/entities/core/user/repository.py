"""User repository for data access operations."""

from sqlmodel import Session, select

from src.user_service.entities.core.user.entity import User
from src.user_service.entities.core.user.table import UserTable


class UserRepository:
    """Data-access layer for users.

    Converts between ``UserTable`` rows and ``User`` entities. The repository
    only flushes; committing or rolling back is the caller's decision.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_all(self) -> list[User]:
        statement = select(UserTable).order_by(UserTable.user_id)
        rows = self._session.exec(statement).all()
        return [User.model_validate(row, from_attributes=True) for row in rows]

    def get(self, user_id: int) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def create(self, entity: User) -> User:
        """Insert a new row; the database assigns ``user_id``."""
        row = UserTable.model_validate(entity.model_dump(exclude={"user_id"}))
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def update(self, entity: User) -> User:
        """Rewrite every column of an existing row.

        Raises:
            ValueError: If no row with ``entity.user_id`` exists.
        """
        row = self._session.get(UserTable, entity.user_id)
        if row is None:
            raise ValueError(f"User with id {entity.user_id} not found")

        for field, value in entity.model_dump(exclude={"user_id"}).items():
            setattr(row, field, value)

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def delete(self, user_id: int) -> bool:
        """Delete a row, returning False when it does not exist."""
        row = self._session.get(UserTable, user_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
