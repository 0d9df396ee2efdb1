"""Terminal exception handlers: every error leaves as the same JSON envelope."""

from typing import Any, Dict, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ...shared.exceptions.base import JournalError
from ...shared.utils.time import utcnow

logger = structlog.get_logger()


def error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "code": code,
        "message": message,
        "timestamp": utcnow().isoformat(),
    }
    if details:
        body["details"] = details
    return {"error": body}


def first_validation_message(exc: RequestValidationError) -> str:
    """Human readable message for the first violated constraint."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    message = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    # drop the "body"/"query"/"path" prefix
    location = [str(part) for part in first.get("loc", ())[1:]]
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


def register_error_handlers(app: FastAPI) -> None:
    """Register error handlers for the FastAPI application."""

    @app.exception_handler(JournalError)
    async def handle_journal_error(request: Request, exc: JournalError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Request failed",
            path=request.url.path,
            status_code=exc.status_code,
            **exc.to_dict(),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = first_validation_message(exc)
        logger.info("Request validation failed", path=request.url.path, error=message)
        return JSONResponse(
            status_code=400,
            content=error_body("VALIDATION_ERROR", message),
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error", path=request.url.path, error=str(exc), exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_body("DATABASE_ERROR", "A database error occurred"),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception", path=request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
