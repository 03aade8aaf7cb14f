"""FastAPI server for the maritime tracking dashboard"""

from __future__ import annotations

import os
import sqlite3
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from maritime_tracking.api.routes.admin import router as admin_router
from maritime_tracking.api.routes.auth import router as auth_router
from maritime_tracking.api.routes.comments import router as comments_router
from maritime_tracking.api.routes.companies import router as companies_router
from maritime_tracking.api.routes.diagnostics import router as diagnostics_router
from maritime_tracking.api.routes.health import router as health_router
from maritime_tracking.api.routes.notifications import router as notifications_router
from maritime_tracking.api.routes.session import router as session_router
from maritime_tracking.api.routes.trackings import router as trackings_router
from maritime_tracking.asana.client import (
    AsanaAPIError,
    AsanaConfigurationError,
    ProjectNotFoundError,
)
from maritime_tracking.config import APP_VERSION, is_production
from maritime_tracking.infrastructure.database import init_database
from maritime_tracking.observability.logging import configure_logging, get_logger
from maritime_tracking.observability.telemetry import counter, log_event
from maritime_tracking.tracking.service import TrackingNotFoundError
from maritime_tracking.users.errors import UserAdminError
from maritime_tracking.users.tenancy import TenancyViolationError
from maritime_tracking.utils.error_sanitizer import get_safe_error_detail, sanitize_error_message

# Load environment variables from .env file
load_dotenv()
configure_logging()

logger = get_logger(__name__)

app = FastAPI(title="Maritime Tracking API", version=APP_VERSION)


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """Uniform error envelope: {"success": false, "error": ...}."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, **extra},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Only field names are exposed, never the validation rules."""
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    counter("api.validation_errors")
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Formato de requisição inválido. Verifique os dados enviados.",
        error_count=len(exc.errors()),
        invalid_fields=[str(err["loc"][-1]) for err in exc.errors()],
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(exc.status_code, sanitize_error_message(str(exc.detail), exc.status_code))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(UserAdminError)
async def user_admin_exception_handler(request: Request, exc: UserAdminError) -> JSONResponse:
    logger.info("User admin error on %s: %s", request.url.path, exc)
    return error_response(exc.status_code, sanitize_error_message(str(exc), exc.status_code))


@app.exception_handler(TrackingNotFoundError)
async def tracking_not_found_handler(request: Request, exc: TrackingNotFoundError) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, "Tracking não encontrado")


@app.exception_handler(TenancyViolationError)
async def tenancy_exception_handler(request: Request, exc: TenancyViolationError) -> JSONResponse:
    logger.warning("Tenancy violation on %s: %s", request.url.path, exc)
    return error_response(status.HTTP_403_FORBIDDEN, "Acesso negado a esta empresa")


@app.exception_handler(AsanaAPIError)
async def asana_exception_handler(request: Request, exc: AsanaAPIError) -> JSONResponse:
    counter("api.asana_errors")
    if isinstance(exc, ProjectNotFoundError):
        return error_response(
            status.HTTP_404_NOT_FOUND,
            "Projeto operacional não encontrado",
            available_projects=exc.available,
        )
    if isinstance(exc, AsanaConfigurationError):
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Token Asana não configurado")
    return error_response(
        status.HTTP_502_BAD_GATEWAY,
        get_safe_error_detail(exc, status.HTTP_502_BAD_GATEWAY, context="Erro ao buscar dados do Asana"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    counter("api.unhandled_errors")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, sanitize_error_message(str(exc), 500))


ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("TRACKING_ALLOWED_ORIGINS", "").split(",") if origin.strip()]

if not is_production():
    ALLOWED_ORIGINS.extend(
        [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Company-Id"],
)

app.include_router(health_router)
app.include_router(diagnostics_router)
app.include_router(trackings_router)
app.include_router(comments_router)
app.include_router(notifications_router)
app.include_router(companies_router)
app.include_router(admin_router)
app.include_router(auth_router)
app.include_router(session_router)


@app.on_event("startup")
async def initialize_database() -> None:
    """Create the schema (idempotent) and refuse to start unprotected in production."""
    if is_production() and not os.getenv("TRACKING_ADMIN_API_KEY"):
        logger.critical("TRACKING_ADMIN_API_KEY is not set in production - admin endpoints would be unprotected")
        raise RuntimeError("Security misconfiguration: TRACKING_ADMIN_API_KEY not set in production")

    try:
        init_database()
        logger.info("Database initialization complete")
    except sqlite3.OperationalError as e:
        logger.critical("Database schema error: %s", e)
        raise RuntimeError(f"Database initialization failed: {e}") from e

    log_event("api.startup", service="maritime-tracking", version=APP_VERSION)


@app.get("/")
def root() -> dict[str, Any]:
    return {
        "service": "Maritime Tracking API",
        "version": APP_VERSION,
        "status": "running",
        "endpoints": {
            "trackings": "/api/trackings",
            "kpis": "/api/trackings/kpis",
            "comments": "/api/comments?taskId=",
            "notifications": "/api/notifications",
            "companies": "/api/companies",
            "health": "/health",
        },
    }


def main() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "maritime_tracking.api.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=not is_production(),
    )
