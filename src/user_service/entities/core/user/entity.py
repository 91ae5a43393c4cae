"""User domain entity."""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


class User(BaseModel):
    """User entity representing a stored user record.

    ``password`` always holds a hash produced by the password hasher, never
    the plaintext. ``user_id`` is assigned by the database on creation and is
    ``None`` until then.
    """

    user_id: int | None = Field(default=None, description="Primary key")
    username: str = Field(description="Unique login name")
    password: str = Field(description="Password hash")
    first_name: str = Field(default="", description="User's first name")
    last_name: str = Field(default="", description="User's last name")
    phone: str = Field(description="Unique phone number")
    email: str = Field(description="Unique email address")
    birthday: date | None = Field(default=None, description="Date of birth")
    is_active: bool = Field(default=False, description="Activation flag")

    def __eq__(self, other: Any) -> bool:
        """Compare users by every stored attribute."""
        if not isinstance(other, User):
            return False

        return self.model_dump() == other.model_dump()

    def __hash__(self) -> int:
        return hash((
            self.user_id,
            self.username,
            self.phone,
            self.email,
        ))
