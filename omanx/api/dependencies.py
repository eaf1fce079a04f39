"""
FastAPI dependencies - access to the objects built by create_app().

Every shared object (settings, knowledge store, cache, rate limiter, chat
service) is constructed once per application and stored on `app.state`;
routes receive them through Depends() instead of module globals.
"""
import secrets

from fastapi import Request, Response

from omanx.cache.response_cache import ResponseCache
from omanx.core.audit import get_request_id
from omanx.core.config import Settings
from omanx.core.exceptions import AdminAuthError, RateLimitExceeded
from omanx.core.logging_config import get_logger
from omanx.core.rate_limiter import RateLimiter
from omanx.knowledge.store import KnowledgeStore
from omanx.services.chat_service import ChatService

logger = get_logger(__name__)

ADMIN_KEY_HEADER = "x-admin-key"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_knowledge_store(request: Request) -> KnowledgeStore:
    return request.app.state.knowledge_store


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def enforce_rate_limit(request: Request, response: Response) -> None:
    """
    Apply the per-client sliding window to the current request.

    Raises:
        RateLimitExceeded: The client used up its window
    """
    limiter: RateLimiter = request.app.state.rate_limiter
    client_ip = request.client.host if request.client else "unknown"

    is_allowed, remaining = limiter.is_allowed(client_ip)

    response.headers["X-RateLimit-Limit"] = str(limiter.limit)
    response.headers["X-RateLimit-Remaining"] = str(remaining)

    if not is_allowed:
        raise RateLimitExceeded(retry_after=limiter.retry_after(client_ip))


async def require_admin(request: Request) -> None:
    """
    Shared-secret gate for /admin endpoints.

    Open outside production. In production the key comes from the
    X-Admin-Key header or an `adminKey` field in the JSON body, and an
    unset ADMIN_KEY locks the endpoints entirely.

    Raises:
        AdminAuthError: Missing or wrong key
    """
    settings: Settings = request.app.state.settings
    if not settings.is_production():
        return

    key = request.headers.get(ADMIN_KEY_HEADER, "")
    if not key:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            key = str(body.get("adminKey") or "")

    if not settings.admin_key or not secrets.compare_digest(
        key.encode("utf-8"), settings.admin_key.encode("utf-8")
    ):
        logger.warning(
            f"Rejected admin request: path={request.url.path}, "
            f"request_id={get_request_id(request)}"
        )
        raise AdminAuthError()
