"""User database table model."""

from datetime import date

from sqlmodel import Field, SQLModel


class UserTable(SQLModel, table=True):
    """Database persistence model for users.

    This represents how the User entity is stored in the database.
    Uniqueness of ``username``, ``phone`` and ``email`` is enforced here by
    the database, not by the request handlers.
    """

    __tablename__ = "users"

    user_id: int | None = Field(default=None, primary_key=True)
    username: str = Field(unique=True)
    password: str
    first_name: str = ""
    last_name: str = ""
    phone: str = Field(unique=True)
    email: str = Field(unique=True)
    birthday: date | None = None
    is_active: bool = Field(default=False)
