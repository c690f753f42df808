"""VersionStack FastAPI application."""

import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from versionstack import __version__
from versionstack.config import settings as app_settings
from versionstack.db import init_db
from versionstack.exceptions import InternalError, RegistryError, ValidationError
from versionstack.routes import apps, audit, auth, health, stats, versions
from versionstack.utils.log_redaction import sanitize_for_log

# Configure logging
logging.basicConfig(
    level=getattr(logging, app_settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


# Filter to exclude health check endpoints from access logs
class EndpointFilter(logging.Filter):
    """Filter to exclude specific endpoints from Granian access logs."""

    def __init__(self, excluded_paths: list[str]) -> None:
        super().__init__()
        self.excluded_paths = excluded_paths

    def filter(self, record: logging.LogRecord) -> bool:
        """Return False if the log record is for an excluded endpoint."""
        message = record.getMessage()
        return not any(path in message for path in self.excluded_paths)


logging.getLogger("granian.access").addFilter(EndpointFilter(["/api/v1/health"]))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting {app_settings.app_name} {__version__}...")
    for directory in (app_settings.files_dir, app_settings.tmp_upload_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)
    await init_db()

    if not app_settings.admin_api_key:
        logger.warning("ADMIN_API_KEY is not set; only database API keys can log in")

    yield

    logger.info(f"Shutting down {app_settings.app_name}...")


def _validation_details(exc: RequestValidationError) -> dict[str, list[str]]:
    details: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "request"
        details.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return details


async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{exc.code} on {request.method} {sanitize_for_log(request.url.path)}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError("Validation failed", details=_validation_details(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    """Build the application with all routers and handlers."""
    application = FastAPI(
        title=app_settings.app_name,
        description="Self-hosted file versioning registry for app releases",
        version=__version__,
        lifespan=lifespan,
    )

    application.add_exception_handler(RegistryError, registry_error_handler)  # type: ignore[arg-type]
    application.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    application.add_exception_handler(Exception, unhandled_error_handler)

    cors_origins_default = ["http://localhost:5173"]
    try:
        cors_origins = json.loads(app_settings.cors_origins)
    except json.JSONDecodeError:
        cors_origins = cors_origins_default

    logger.info(f"CORS allowed origins: {cors_origins}")

    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    application.include_router(health.router, prefix="/api/v1/health", tags=["Health"])
    application.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
    application.include_router(apps.router, prefix="/api/v1/apps", tags=["Apps"])
    application.include_router(versions.router, prefix="/api/v1/apps", tags=["Versions"])
    application.include_router(audit.router, prefix="/api/v1/audit", tags=["Audit"])
    application.include_router(stats.router, prefix="/api/v1/stats", tags=["Stats"])

    return application


app = create_app()
