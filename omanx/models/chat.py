"""
Request and Response models for the HTTP API.

These Pydantic models define the contract between client and server.
Field names on the wire follow the browser client (`requestId`); Python
code uses snake_case attributes with aliases.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """
    Request model for the /chat endpoint.

    Attributes:
        message: The user's question (validated by the chat service).
        stream: Stream the answer as server-sent events.
        mode: User-facing answer mode, 'official' or 'community'.
    """
    message: Optional[Any] = Field(
        default=None,
        description="The user's message (max 10,000 characters)",
        examples=["What documents do I need for OPT?"]
    )
    stream: bool = Field(
        default=False,
        description="Stream the answer as text/event-stream"
    )
    mode: str = Field(
        default="official",
        description="Answer mode: 'official' or 'community'"
    )


class ChatResponse(BaseModel):
    """Response model for a buffered /chat answer."""
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., description="The assistant's answer")
    cached: bool = Field(..., description="True when served from the response cache")
    request_id: str = Field(..., alias="requestId")
    lane: str = Field(..., description="Routing lane: 'scholar' or 'local'")
    usage: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Provider token usage (absent on cache hits)"
    )


class ErrorResponse(BaseModel):
    """Standard error response model."""
    model_config = ConfigDict(populate_by_name=True)

    error: str
    code: Optional[str] = None
    request_id: str = Field(..., alias="requestId")


class ProviderStatus(BaseModel):
    configured: bool
    model: str


class KnowledgeStatus(BaseModel):
    loaded: bool
    path: str
    mtime: Optional[float] = None
    version: int = 0
    entries: int = 0
    last_error: Optional[str] = None


class CacheStats(BaseModel):
    size: int
    max_entries: int
    ttl_seconds: float


class HealthResponse(BaseModel):
    """Response model for the /health endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    env: str
    uptime_s: int
    request_id: str = Field(..., alias="requestId")
    provider: ProviderStatus
    knowledge: KnowledgeStatus
    cache: CacheStats


class ReadyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ready: bool
    request_id: str = Field(..., alias="requestId")


class ServerStats(BaseModel):
    env: str
    uptime_s: int


class MetricsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(..., alias="requestId")
    cache: CacheStats
    knowledge: KnowledgeStatus
    server: ServerStats


class AdminResponse(BaseModel):
    """Response model for the /admin endpoints."""
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    updated: Optional[bool] = None
    request_id: str = Field(..., alias="requestId")
