from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.user_service.core.errors import (
    BirthdayParseError,
    PersistenceError,
    UserNotFoundError,
)
from src.user_service.core.security import PasswordHasher
from src.user_service.core.validation import (
    CREATE_RULES,
    UPDATE_RULES,
    parse_birthday,
    validate,
)
from src.user_service.entities.core.user.entity import User
from src.user_service.entities.core.user.repository import UserRepository
from src.user_service.entities.core.user.schemas import (
    UserCreateRequest,
    UserUpdateRequest,
)

# Request fields copied verbatim onto the stored user when non-empty
_PLAIN_UPDATE_FIELDS = ("email", "first_name", "last_name", "username", "phone")


class UserManagementService:
    """CRUD operations on users.

    Every operation runs against the session it was constructed with and
    commits on success. Database failures roll the session back and are
    re-raised as ``PersistenceError`` so that nothing is partially written.
    """

    def __init__(self, db_session: Session, password_hasher: PasswordHasher):
        self._db_session = db_session
        self._user_repo = UserRepository(db_session)
        self._hasher = password_hasher

    @contextmanager
    def _persistence(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self._db_session.rollback()
            logger.bind(action=action, error_type=type(e).__name__).error(
                "Database operation failed: {}", e
            )
            raise PersistenceError(str(e)) from e

    def _get_existing(self, user_id: int) -> User:
        with self._persistence("get"):
            user = self._user_repo.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def list_users(self) -> list[User]:
        """Return every stored user, ordered by id."""
        with self._persistence("list"):
            return self._user_repo.list_all()

    def get_user(self, user_id: int) -> User:
        """Return one user.

        Raises:
            UserNotFoundError: If no such user exists.
            PersistenceError: On any other database failure.
        """
        return self._get_existing(user_id)

    def create_user(self, request: UserCreateRequest) -> User:
        """Validate, hash and persist a new user.

        ``birthday`` is optional; when empty the user is stored without one.

        Raises:
            UserValidationError: If a required field is missing or malformed.
            PasswordHashingError: If the password cannot be hashed.
            PersistenceError: If the insert fails, e.g. on a duplicate
                username, phone or email.
        """
        validate(request, CREATE_RULES).raise_for_violations()

        hashed = self._hasher.hash(request.password)
        birthday = parse_birthday(request.birthday)

        new_user = User(
            username=request.username,
            password=hashed,
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone,
            email=request.email,
            birthday=birthday,
            is_active=False,
        )

        with self._persistence("create"):
            created = self._user_repo.create(new_user)
            self._db_session.commit()

        logger.bind(user_id=created.user_id).info("User created")
        return created

    def update_user(self, user_id: int, request: UserUpdateRequest) -> User:
        """Overwrite the stored fields for which the request carries a value.

        Hashing and date parsing happen before anything is modified, so a
        failure there rejects the whole request.

        Raises:
            UserValidationError: If ``email`` or ``birthday`` is malformed.
            UserNotFoundError: If no such user exists.
            PasswordHashingError: If a new password cannot be hashed.
            PersistenceError: On database failure.
        """
        validate(request, UPDATE_RULES).raise_for_violations()

        user = self._get_existing(user_id)
        supplied = request.supplied_fields()

        changes: dict[str, object] = {
            name: supplied[name] for name in _PLAIN_UPDATE_FIELDS if name in supplied
        }
        if "password" in supplied:
            changes["password"] = self._hasher.hash(supplied["password"])
        if "birthday" in supplied:
            try:
                changes["birthday"] = parse_birthday(supplied["birthday"])
            except BirthdayParseError:
                logger.bind(user_id=user_id).warning("Rejecting update with bad birthday")
                raise

        updated = user.model_copy(update=changes)

        with self._persistence("update"):
            try:
                saved = self._user_repo.update(updated)
            except ValueError as e:
                # Deleted concurrently between fetch and update
                raise UserNotFoundError(user_id) from e
            self._db_session.commit()

        logger.bind(user_id=user_id, fields=sorted(changes)).info("User updated")
        return saved

    def delete_user(self, user_id: int) -> User:
        """Delete a user and return its last stored values.

        Raises:
            UserNotFoundError: If no such user exists.
            PersistenceError: If the fetch or the delete fails.
        """
        user = self._get_existing(user_id)

        with self._persistence("delete"):
            if not self._user_repo.delete(user_id):
                # Deleted concurrently between fetch and delete
                raise UserNotFoundError(user_id)
            self._db_session.commit()

        logger.bind(user_id=user_id).info("User deleted")
        return user
