"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timekeeping import __version__
from timekeeping.api.routes import (
    attendance_router,
    employees_router,
    health_router,
    payroll_router,
)
from timekeeping.config import settings
from timekeeping.database import create_schema, dispose_db
from timekeeping.exceptions import (
    DuplicateScanError,
    EmployeeExistsError,
    EmployeeNotFoundError,
    SlotFilledError,
    ValidationError,
)
from timekeeping.logging_setup import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    configure_logging(settings.log_level)
    await create_schema()
    logger.info("Timekeeping API started (tz=%s)", settings.civil_timezone)
    yield
    # Shutdown
    await dispose_db()


def _error(status_code: int, detail: str, code: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code},
        headers=headers,
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Timekeeping API",
        description="Attendance scanning and semi-monthly payroll",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(422, str(exc), "VALIDATION_ERROR")

    @app.exception_handler(EmployeeNotFoundError)
    async def employee_not_found_handler(
        request: Request, exc: EmployeeNotFoundError
    ) -> JSONResponse:
        code = "EMPLOYEE_INACTIVE" if exc.inactive else "EMPLOYEE_NOT_FOUND"
        return _error(status.HTTP_404_NOT_FOUND, str(exc), code)

    @app.exception_handler(EmployeeExistsError)
    async def employee_exists_handler(request: Request, exc: EmployeeExistsError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), "EMPLOYEE_EXISTS")

    @app.exception_handler(DuplicateScanError)
    async def duplicate_scan_handler(request: Request, exc: DuplicateScanError) -> JSONResponse:
        return _error(
            status.HTTP_409_CONFLICT,
            str(exc),
            "DUPLICATE_SCAN",
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )

    @app.exception_handler(SlotFilledError)
    async def slot_filled_handler(request: Request, exc: SlotFilledError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), "SLOT_FILLED")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            "INTERNAL_ERROR",
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(attendance_router, prefix="/api/v1")
    app.include_router(payroll_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
