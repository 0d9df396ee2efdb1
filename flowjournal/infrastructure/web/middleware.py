"""Request correlation and access logging."""

import time
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request

logger = structlog.get_logger()


def register_request_logging(app: FastAPI, header: str = "X-Correlation-ID") -> None:
    """Bind a correlation id to every log line of a request and echo it back."""

    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        correlation_id = request.headers.get(header) or str(uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[header] = correlation_id
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        return response
