"""
FastAPI Application Entry Point.

create_app() builds the application and every object it depends on:
1. Knowledge store, response cache, rate limiter, LLM client, chat service
   (constructed once, stored on app.state)
2. Router registration
3. Middleware configuration (request IDs, audit, security headers, CORS)
4. Exception handlers (custom exceptions -> JSON with requestId)
5. Lifespan: initial knowledge load and the periodic reload task

Run with: uvicorn omanx.api.main:app --reload
"""
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from omanx.api.routes import admin_router, chat_router, health_router
from omanx.cache.response_cache import ResponseCache
from omanx.core.audit import (
    AuditMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    get_request_id,
)
from omanx.core.config import Settings, get_settings
from omanx.core.exceptions import (
    ChatbotException,
    KnowledgeLoadError,
    RateLimitExceeded,
    ValidationError,
)
from omanx.core.logging_config import get_logger, setup_logging
from omanx.core.rate_limiter import RateLimiter
from omanx.knowledge.store import KnowledgeStore
from omanx.llm.client import LLMClient
from omanx.services.chat_service import ChatService

logger = get_logger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: mandatory first knowledge load (a failure is logged and the
      service keeps running so /health can report it), then the reload timer
    - Shutdown: stop the reload timer
    """
    settings: Settings = app.state.settings
    store: KnowledgeStore = app.state.knowledge_store

    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")
    logger.info(f"LLM Model: {settings.llm_model}")
    logger.info(
        f"Rate Limit: {settings.rate_limit_max} req/{settings.rate_limit_window_seconds}s"
    )

    try:
        await store.load(force=True)
    except KnowledgeLoadError as e:
        logger.error(f"Failed to load knowledge at startup: {e.message} ({e.details})")

    store.start_auto_reload(settings.knowledge_reload_seconds)

    yield  # Application runs here

    logger.info(f"Shutting down {settings.app_name}")
    await store.stop_auto_reload()


def _error_response(request: Request, exc: ChatbotException, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_dict(), "requestId": get_request_id(request)},
        headers=headers,
    )


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        """Handle client rate limit errors."""
        return _error_response(request, exc, headers={"Retry-After": str(exc.retry_after)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies are client errors like any other validation failure."""
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request body: {field or 'body'} {first.get('msg', 'is invalid')}".strip()
        return _error_response(request, ValidationError(message, field=field or None))

    @app.exception_handler(ChatbotException)
    async def chatbot_exception_handler(request: Request, exc: ChatbotException):
        """Handle all custom exceptions (validation, upstream, admin)."""
        return _error_response(request, exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Handle uncaught exceptions globally.

        Detailed error information is only included in development mode.
        """
        logger.exception(
            f"Unhandled exception: request_id={get_request_id(request)}, error={exc}"
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": str(exc) if settings.is_development() else "Internal server error",
                "code": "internal_error",
                "requestId": get_request_id(request),
            }
        )


def create_app(
    settings: Optional[Settings] = None,
    provider=None,
) -> FastAPI:
    """
    Build a fully wired application.

    Args:
        settings: Settings to use (defaults to get_settings())
        provider: Completion provider (defaults to the Groq LLMClient)

    Returns:
        FastAPI application
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, log_to_file=settings.log_to_file)

    app = FastAPI(
        title="OmanX Assistant API",
        description="""
        Policy-gated assistant for Omani scholars in the United States.

        ## Features

        - **Lane routing**: governed topics are answered from approved sources only
        - **Knowledge hot reload**: the knowledge file is re-read when it changes
        - **Response cache**: identical questions are answered without a provider call
        - **Streaming**: server-sent events with `stream: true`
        """,
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ============================================================
    # Shared objects (one per application)
    # ============================================================

    knowledge_store = KnowledgeStore(
        settings.knowledge_path,
        reload_interval_seconds=settings.knowledge_reload_seconds,
    )
    response_cache = ResponseCache(
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
    )
    provider = provider or LLMClient.from_settings(settings)

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.knowledge_store = knowledge_store
    app.state.response_cache = response_cache
    app.state.rate_limiter = RateLimiter(
        max_requests=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.state.chat_service = ChatService(
        knowledge_store=knowledge_store,
        response_cache=response_cache,
        provider=provider,
        model=settings.llm_model,
    )

    # ============================================================
    # Middleware Configuration (last added runs first)
    # ============================================================

    app.add_middleware(SecurityHeadersMiddleware)

    if settings.enable_audit_logging:
        app.add_middleware(AuditMiddleware)

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins) or ["*"],
        allow_credentials=bool(settings.allowed_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    if not settings.allowed_origins:
        logger.warning("CORS configured without ALLOWED_ORIGINS (all origins allowed)")

    _register_exception_handlers(app, settings)

    app.include_router(health_router)
    app.include_router(chat_router)
    app.include_router(admin_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "omanx.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development()
    )
