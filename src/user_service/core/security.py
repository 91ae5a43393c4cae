"""Password hashing utilities."""

from loguru import logger
from passlib.context import CryptContext

from src.user_service.core.errors import PasswordHashingError
from src.user_service.runtime.context import get_config


class PasswordHasher:
    """One-way password hashing with a fresh random salt per call.

    Wraps a passlib ``CryptContext``; the first configured scheme is used for
    new hashes and every configured scheme is accepted on verification.
    """

    def __init__(self, schemes: list[str] | None = None):
        if schemes is None:
            schemes = get_config().security.password_schemes
        self._context = CryptContext(schemes=schemes, deprecated="auto")

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Raises:
            PasswordHashingError: If the underlying scheme rejects the input.
        """
        try:
            return self._context.hash(password)
        except (ValueError, TypeError) as e:
            logger.bind(error_type=type(e).__name__).error("Password hashing failed")
            raise PasswordHashingError(f"failed to hash password: {e}") from e

    def verify(self, password: str | None, hashed: str | None) -> bool:
        """Check a plaintext password against a stored hash."""
        if password is None or hashed is None:
            return False
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError):
            # Unknown or malformed hash
            return False
