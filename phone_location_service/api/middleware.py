"""Middleware for FastAPI application."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from phone_location_service.config.logging import (
    generate_correlation_id,
    set_correlation_id,
    LoggingService
)

logger = logging.getLogger(__name__)
logging_service = LoggingService(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to handle correlation IDs for request tracing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or generate_correlation_id()
        set_correlation_id(correlation_id)

        logging_service.log_operation(
            "info",
            f"Request started: {request.method} {request.url.path}",
            operation="request_start",
            method=request.method,
            path=str(request.url.path),
            query_params=str(request.query_params) if request.query_params else None
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logging_service.log_error(
                f"Request failed: {request.method} {request.url.path}",
                e,
                operation="request_error",
                method=request.method,
                path=str(request.url.path)
            )
            response = JSONResponse(
                status_code=500,
                content={"error": "Internal Server Error"}
            )

        response.headers[CORRELATION_HEADER] = correlation_id

        logging_service.log_operation(
            "info",
            f"Request completed: {request.method} {request.url.path}",
            operation="request_complete",
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code
        )

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        logging_service.log_operation(
            "info",
            "Request processed",
            operation="request_metrics",
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code,
            process_time_ms=round(process_time * 1000, 2),
            content_length=response.headers.get("content-length")
        )

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling.

    Routes translate the errors they expect themselves. Anything reaching this
    point is logged in full and answered with a generic body.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            logging_service.log_error(
                "Unexpected error",
                e,
                operation="error_handling",
                path=str(request.url.path),
                method=request.method
            )
            return JSONResponse(
                status_code=500,
                content={"error": "Internal Server Error"}
            )
