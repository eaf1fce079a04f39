"""
HTTP middleware - request correlation, access logging and response hardening.

Every request gets a request ID (taken from an incoming X-Request-ID header
when the caller provides one). It is echoed back in the response headers,
included in every error body, and written on every log line of the chat
path, so a `requestId` a user reports leads straight to the provider error
behind it.
"""
import logging
import secrets
import time
from typing import Callable, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from omanx.core.logging_config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Polled by load balancers and dashboards; logged at DEBUG only
DIAGNOSTIC_PATHS = frozenset({"/health", "/ready", "/metrics"})

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def get_request_id(request: Request) -> str:
    """Request ID assigned by RequestIDMiddleware, or '-' outside of it."""
    return getattr(request.state, "request_id", "-")


def _new_request_id() -> str:
    return secrets.token_hex(8)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to request.state and to the response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or _new_request_id()
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Access log: one line per request with status, latency, client and
    request ID.

    For event streams the latency is time to first byte; the stream's own
    completion is logged by the chat service.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        client = request.client.host if request.client else "unknown"
        target = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{target} failed after {time.perf_counter() - started:.3f}s: "
                f"request_id={get_request_id(request)} client={client} error={e!r}"
            )
            raise

        elapsed = time.perf_counter() - started
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"

        if request.url.path in DIAGNOSTIC_PATHS:
            logger.debug(f"{target} -> {response.status_code} ({elapsed:.3f}s)")
        else:
            logger.log(
                _level_for(response.status_code),
                f"{target} -> {response.status_code} ({elapsed:.3f}s) "
                f"request_id={get_request_id(request)} client={client}",
            )

        return response


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add SECURITY_HEADERS to every response that does not already set them."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
