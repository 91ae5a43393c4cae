"""Error taxonomy raised by the user service and mapped to HTTP by the API layer."""

from dataclasses import dataclass


class UserServiceError(Exception):
    """Base class for user service failures."""


class UserNotFoundError(UserServiceError):
    """No user row exists for the requested identifier."""

    def __init__(self, user_id: int):
        super().__init__(f"User with id {user_id} not found")
        self.user_id = user_id


@dataclass(frozen=True)
class Violation:
    """A single failed field rule."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class UserValidationError(UserServiceError):
    """The request payload failed one or more field rules."""

    def __init__(self, violations: list[Violation]):
        self.violations = violations
        super().__init__("; ".join(str(v) for v in violations))


class PasswordHashingError(UserServiceError):
    """The password hasher could not produce a hash."""


class BirthdayParseError(UserServiceError):
    """A birthday string could not be parsed as YYYY-MM-DD."""


class PersistenceError(UserServiceError):
    """The database rejected or failed an operation (including uniqueness)."""
