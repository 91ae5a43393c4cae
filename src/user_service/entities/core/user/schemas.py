"""Request payloads accepted by the user endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _UserPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str = ""
    password: str = Field(default="", repr=False)
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""
    birthday: str = Field(default="", description="Date in YYYY-MM-DD format")

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        # JSON null means "not supplied", same as an absent key
        return "" if value is None else value


class UserCreateRequest(_UserPayload):
    """Payload for creating a user.

    ``username``, ``password``, ``phone`` and ``email`` are required, which
    is checked by the validation rules rather than by the model so that a
    missing field is reported as a validation failure (422).
    """


class UserUpdateRequest(_UserPayload):
    """Payload for a partial update; empty or absent fields are left untouched."""

    def supplied_fields(self) -> dict[str, str]:
        """Fields carrying a non-empty value."""
        return {name: value for name, value in self.model_dump().items() if value}
