"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from statutory_payroll import __version__
from statutory_payroll.api.routes import health_router, payroll_router
from statutory_payroll.database import create_schema, dispose_db, init_db
from statutory_payroll.exceptions import (
    DuplicateRecordError,
    InvalidBracketTableError,
    InvalidInputError,
    PayrollError,
    RecordNotFoundError,
    RecordSupersededError,
    ScheduleNotFoundError,
)

logger = logging.getLogger(__name__)

UNPROCESSABLE = 422

# Most specific first; the first isinstance match wins
ERROR_STATUS: tuple[tuple[type[PayrollError], int, str], ...] = (
    (InvalidInputError, UNPROCESSABLE, "INVALID_INPUT"),
    (InvalidBracketTableError, UNPROCESSABLE, "INVALID_BRACKET_TABLE"),
    (ScheduleNotFoundError, UNPROCESSABLE, "SCHEDULE_NOT_FOUND"),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND, "RECORD_NOT_FOUND"),
    (DuplicateRecordError, status.HTTP_409_CONFLICT, "DUPLICATE_RECORD"),
    (RecordSupersededError, status.HTTP_409_CONFLICT, "RECORD_SUPERSEDED"),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    engine, _ = init_db()
    await create_schema(engine)
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Statutory Payroll API",
        description="Gross-to-net payroll with statutory deductions",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PayrollError)
    async def payroll_exception_handler(request: Request, exc: PayrollError) -> JSONResponse:
        """Map domain errors to HTTP status codes."""
        for error_type, status_code, code in ERROR_STATUS:
            if isinstance(exc, error_type):
                return JSONResponse(
                    status_code=status_code,
                    content={"detail": str(exc), "code": code},
                )
        logger.error("Unmapped payroll error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "code": "PAYROLL_ERROR"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    app.include_router(health_router)
    app.include_router(payroll_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
