"""FastAPI dependencies resolving the collaborators injected into the app."""

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.user_service.api.http.app_data import ApplicationDependencies
from src.user_service.core.security import PasswordHasher
from src.user_service.core.services import UserManagementService


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the dependencies the application was created with."""
    return request.app.state.app_dependencies


def get_db_session(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> Iterator[Session]:
    """Open one database session per request and close it afterwards."""
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_password_hasher(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> PasswordHasher:
    """Get the password hasher instance."""
    return app_deps.password_hasher


def get_user_service(
    session: Session = Depends(get_db_session),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserManagementService:
    """Build the user service bound to this request's session."""
    return UserManagementService(session, password_hasher)
