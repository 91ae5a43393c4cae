"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Domain entity
- UserTable: Database persistence model
- UserRepository: Data access layer
- UserCreateRequest, UserUpdateRequest: Incoming payloads
"""

from .entity import User
from .repository import UserRepository
from .schemas import UserCreateRequest, UserUpdateRequest
from .table import UserTable

__all__ = [
    "User",
    "UserTable",
    "UserRepository",
    "UserCreateRequest",
    "UserUpdateRequest",
]
