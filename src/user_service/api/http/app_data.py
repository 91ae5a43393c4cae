from dataclasses import dataclass

from src.user_service.core.security import PasswordHasher
from src.user_service.core.services import DbSessionService


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    password_hasher: PasswordHasher
