"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.responses import JSONResponse

from src.user_service.api.http.app_data import ApplicationDependencies
from src.user_service.api.http.routers.health import router as health_router
from src.user_service.api.http.routers.users import router as users_router
from src.user_service.api.utils.app_startup import configure_logging
from src.user_service.core.errors import (
    UserNotFoundError,
    UserServiceError,
    UserValidationError,
)
from src.user_service.core.security import PasswordHasher
from src.user_service.core.services import DbManageService, DbSessionService
from src.user_service.runtime.context import get_config

__all__ = ["app", "create_app"]


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error_response(
    request: Request, status_code: int, content: dict
) -> JSONResponse:
    request_id = _request_id(request)
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(
        status_code=status_code,
        content={**content, "request_id": request_id},
        headers=headers,
    )


# --- Exception handlers ---
async def handle_not_found(request: Request, exc: UserNotFoundError) -> Response:
    logger.bind(user_id=exc.user_id).info("User not found")
    return Response(status_code=204)


async def handle_validation_failure(
    request: Request, exc: UserValidationError
) -> JSONResponse:
    logger.bind(error_type=type(exc).__name__).info("Validation failed: {}", exc)
    return _error_response(
        request,
        422,
        {
            "detail": str(exc),
            "errors": [
                {"field": v.field, "message": v.message} for v in exc.violations
            ],
        },
    )


async def handle_internal_failure(
    request: Request, exc: UserServiceError
) -> JSONResponse:
    logger.bind(error_type=type(exc).__name__).error("Request failed: {}", exc)
    detail = (
        str(exc) if get_config().app.expose_error_details else "Internal Server Error"
    )
    return _error_response(request, 500, {"detail": detail})


async def handle_malformed_request(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.bind(error_type=type(exc).__name__).info("Malformed request")
    return _error_response(
        request,
        400,
        {"detail": "Malformed request", "errors": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Strip non-serializable context from pydantic error entries."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "unknown",
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            detail = (
                str(exc)
                if get_config().app.expose_error_details
                else "Internal Server Error"
            )
            return JSONResponse(
                status_code=500,
                content={"detail": detail, "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


def create_app(dependencies: ApplicationDependencies | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        dependencies: Collaborators to serve requests with. When omitted they
            are built from the configuration on startup and disposed of on
            shutdown.
    """
    configure_logging()
    config = get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_dependencies = getattr(app.state, "app_dependencies", None) is None
        if owns_dependencies:
            app.state.app_dependencies = ApplicationDependencies(
                database_service=DbSessionService(),
                password_hasher=PasswordHasher(),
            )

        deps: ApplicationDependencies = app.state.app_dependencies
        logger.info("Starting up application in {} environment", config.app.environment)
        DbManageService(deps.database_service.engine).create_all()
        try:
            yield
        finally:
            logger.info("Shutting down application")
            if owns_dependencies:
                deps.database_service.dispose()

    app = FastAPI(
        title="User Service",
        description="Create, read, update and delete user records",
        lifespan=lifespan,
        docs_url=None if config.app.environment == "production" else "/docs",
        redoc_url=None if config.app.environment == "production" else "/redoc",
    )

    if dependencies is not None:
        app.state.app_dependencies = dependencies

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(UserNotFoundError, handle_not_found)
    app.add_exception_handler(UserValidationError, handle_validation_failure)
    app.add_exception_handler(UserServiceError, handle_internal_failure)
    app.add_exception_handler(RequestValidationError, handle_malformed_request)

    app.include_router(users_router, prefix="/users", tags=["users"])
    app.include_router(health_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
