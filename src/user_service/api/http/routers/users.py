"""User API router with CRUD operations.

Domain errors raised by the service are turned into responses by the
exception handlers registered in ``src.user_service.api.http.app``:
a missing user becomes ``204 No Content``, a validation failure ``422``,
and any other service failure ``500``.
"""

from fastapi import APIRouter, Depends, Path, status

from src.user_service.api.http.deps import get_user_service
from src.user_service.core.services import UserManagementService
from src.user_service.entities.core.user import (
    User,
    UserCreateRequest,
    UserUpdateRequest,
)

router = APIRouter()

_NOT_FOUND = {status.HTTP_204_NO_CONTENT: {"description": "User not found"}}

# Ids are stored as signed 64-bit integers; anything outside is a malformed path
MIN_USER_ID = -(2**63)
MAX_USER_ID = 2**63 - 1


@router.get("", response_model=list[User])
def list_users(
    service: UserManagementService = Depends(get_user_service),
) -> list[User]:
    """List all users."""
    return service.list_users()


@router.get("/{user_id}", response_model=User, responses=_NOT_FOUND)
def get_user(
    user_id: int = Path(..., ge=MIN_USER_ID, le=MAX_USER_ID, description="User ID"),
    service: UserManagementService = Depends(get_user_service),
) -> User:
    """Get a user by ID."""
    return service.get_user(user_id)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(
    request: UserCreateRequest,
    service: UserManagementService = Depends(get_user_service),
) -> User:
    """Create a new user."""
    return service.create_user(request)


@router.patch("/{user_id}", response_model=User, responses=_NOT_FOUND)
def update_user(
    request: UserUpdateRequest,
    user_id: int = Path(..., ge=MIN_USER_ID, le=MAX_USER_ID, description="User ID"),
    service: UserManagementService = Depends(get_user_service),
) -> User:
    """Partially update a user; empty or absent fields are left unchanged."""
    return service.update_user(user_id, request)


@router.delete("/{user_id}", response_model=User, responses=_NOT_FOUND)
def delete_user(
    user_id: int = Path(..., ge=MIN_USER_ID, le=MAX_USER_ID, description="User ID"),
    service: UserManagementService = Depends(get_user_service),
) -> User:
    """Delete a user and return its last stored values."""
    return service.delete_user(user_id)
