"""API middleware for the catalog service.

Provides:
- Request ID correlation
- Bearer token gate for write requests
- Error handling
"""

import time
from typing import Callable, Protocol
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from catalog_api.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None

        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Auth Gate
# ============================================================================


# Methods that mutate state and therefore need a bearer token
WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class TokenVerifier(Protocol):
    """Decides whether a bearer token may perform writes.

    Token issuance lives outside this service; a verifier only
    accepts or rejects.
    """

    def verify(self, token: str) -> bool:
        ...


class StaticTokenVerifier:
    """Accepts any token from a fixed set."""

    def __init__(self, tokens: list[str]) -> None:
        self._tokens = frozenset(t for t in tokens if t)

    def verify(self, token: str) -> bool:
        return token in self._tokens


def _unauthorized(error_code: str, message: str, request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={
            "error_code": error_code,
            "message": message,
            "details": [],
            "request_id": getattr(request.state, "request_id", None),
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthGateMiddleware(BaseHTTPMiddleware):
    """Rejects write requests that lack a valid bearer token.

    Reads pass through untouched. A rejected write never reaches the
    route handler, so the target product is left unchanged.
    Supports Bearer token format: "Authorization: Bearer <token>"
    """

    def __init__(self, app, verifier: TokenVerifier | None = None) -> None:
        super().__init__(app)
        self._verifier = verifier

    def _get_verifier(self, request: Request) -> TokenVerifier:
        verifier = getattr(request.app.state, "token_verifier", None)
        if verifier is not None:
            return verifier
        if self._verifier is None:
            self._verifier = StaticTokenVerifier(settings.catalog_api_tokens)
        return self._verifier

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Validate the bearer token for write requests.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or 401 error.
        """
        if request.method not in WRITE_METHODS:
            return await call_next(request)

        path = request.url.path
        auth_header = request.headers.get("Authorization")

        if not auth_header:
            logger.warning(
                "Missing authorization header",
                path=path,
                method=request.method,
            )
            return _unauthorized(
                "UNAUTHORIZED", "Missing Authorization header", request
            )

        parts = auth_header.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
            logger.warning(
                "Invalid authorization format",
                path=path,
                method=request.method,
            )
            return _unauthorized(
                "UNAUTHORIZED",
                "Invalid Authorization header format. Use 'Bearer <token>'",
                request,
            )

        if not self._get_verifier(request).verify(parts[1].strip()):
            logger.warning(
                "Invalid bearer token",
                path=path,
                method=request.method,
            )
            return _unauthorized("INVALID_TOKEN", "Invalid token", request)

        request.state.authenticated = True
        return await call_next(request)


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns a 500 response. The raw
    exception message is included under ``error`` unless
    ``expose_internal_errors`` is turned off.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Handle errors uniformly.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or error response.
        """
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=internal_error_content(e, request_id),
            )


def internal_error_content(exc: Exception, request_id: str | None) -> dict:
    """Build the body of a 500 response."""
    error = str(exc) if settings.expose_internal_errors else "Internal server error"
    return {
        "error_code": "INTERNAL_ERROR",
        "error": error,
        "message": "An internal error occurred",
        "details": [],
        "request_id": request_id,
    }


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Error handling (innermost - wraps route handlers)
    app.add_middleware(ErrorHandlerMiddleware)

    # Bearer token gate for writes
    app.add_middleware(AuthGateMiddleware)

    # Request ID correlation (outermost - every response gets an ID)
    app.add_middleware(RequestIdMiddleware)
