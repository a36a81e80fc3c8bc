import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.libs.result import Error

from .error import ClientError, ServerError
from .utils.dispatch import error_envelope

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.base_error, exc.details),
        headers=exc.headers,
    )


async def handle_server_error(request: Request, exc: ServerError):
    logger.error(f"Server error: {exc.base_error.code} - {exc.base_error.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(Error(exc.base_error.code, "Internal server error")),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    fields = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    logger.warning(f"Validation error on {request.url.path}: {fields}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_envelope(
            Error("VALIDATION_ERROR", "Invalid request"), {"fields": fields}
        ),
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(Error(code, str(exc.detail))),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(Error("INTERNAL_ERROR", "Internal server error")),
    )


def build_lifespan(ApplicationConfig):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if ApplicationConfig.SEED_SYSTEM_ROLES:
            from src.adapter.services.unit_of_work import SessionScopedUnitOfWork
            from src.app.use_cases.roles import SeedSystemRolesUseCase
            from src.depends import AsyncSessionLocal, engine

            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
            await SeedSystemRolesUseCase(SessionScopedUnitOfWork(AsyncSessionLocal())).execute()
        yield

    return lifespan


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(title="Admin Console API", version="0.1.0", lifespan=build_lifespan(ApplicationConfig))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import (
        admin_audit,
        admin_dashboard,
        admin_roles,
        admin_security,
        admin_users,
        auth,
        health_check,
    )

    prefix = ApplicationConfig.API_PREFIX
    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, prefix=prefix, tags=["Authentication"])
    app.include_router(admin_users.router, prefix=prefix, tags=["Admin Users"])
    app.include_router(admin_roles.router, prefix=prefix, tags=["Admin Roles"])
    app.include_router(admin_security.router, prefix=prefix, tags=["Admin Security"])
    app.include_router(admin_audit.router, prefix=prefix, tags=["Admin Audit"])
    app.include_router(admin_dashboard.router, prefix=prefix, tags=["Admin Dashboard"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app
