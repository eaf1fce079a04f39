"""
Custom Exceptions - Application-specific error classes.

This module defines a hierarchy of exceptions for clean error handling:
- Each exception has a status code and error code
- Used by the API layer for consistent error responses
- `details` is for logs only and is never sent to clients
"""
from typing import Optional


class ChatbotException(Exception):
    """
    Base exception for all assistant errors.

    Subclass this for specific error types.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to the client-facing error body."""
        return {
            "error": self.message,
            "code": self.error_code,
        }


class RateLimitExceeded(ChatbotException):
    """Raised when a client exceeds the rate limit."""
    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(self, retry_after: int = 60):
        super().__init__(
            message="Too many requests. Please try again later.",
            details=f"retry_after={retry_after}"
        )
        self.retry_after = retry_after


class ValidationError(ChatbotException):
    """Raised when input validation fails."""
    status_code = 400
    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details=f"field={field}" if field else None)
        self.field = field


class AdminAuthError(ChatbotException):
    """Raised when an admin endpoint is called without the shared secret."""
    status_code = 403
    error_code = "unauthorized"

    def __init__(self):
        super().__init__("Unauthorized")


# ============================================================
# Completion provider failures
# ============================================================

class UpstreamError(ChatbotException):
    """
    Base class for completion provider failures.

    The client only ever sees `message`; the provider's own error text
    travels in `details` and is logged with the request ID.
    """
    status_code = 500
    error_code = "upstream_error"

    def __init__(self, message: str = "Server error.", details: Optional[str] = None):
        super().__init__(message, details=details)


class UpstreamAuthError(UpstreamError):
    """Provider rejected our credentials."""
    error_code = "upstream_auth_error"

    def __init__(self, details: Optional[str] = None):
        super().__init__("Completion provider authentication error.", details=details)


class UpstreamRateLimitError(UpstreamError):
    """Provider is throttling us; passed through so clients back off."""
    status_code = 429
    error_code = "upstream_rate_limited"

    def __init__(self, details: Optional[str] = None):
        super().__init__(
            "Completion provider rate limit exceeded. Try again later.",
            details=details,
        )


class UpstreamRejectedError(UpstreamError):
    """Provider refused the request as malformed."""
    error_code = "upstream_rejected"

    def __init__(self, details: Optional[str] = None):
        super().__init__("Completion provider rejected the request.", details=details)


class UpstreamUnknownError(UpstreamError):
    """Any other provider or transport failure."""
    error_code = "server_error"

    def __init__(self, details: Optional[str] = None):
        super().__init__("Server error.", details=details)


# ============================================================
# Knowledge loading failures
# ============================================================

class KnowledgeLoadError(ChatbotException):
    """
    Raised when the knowledge file cannot be installed.

    Never fatal: the store keeps serving its last good snapshot.
    """
    error_code = "knowledge_load_error"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, details=f"path={path}" if path else None)
        self.path = path


class KnowledgeIOError(KnowledgeLoadError):
    """Knowledge file is missing or unreadable."""
    error_code = "knowledge_io_error"


class KnowledgeParseError(KnowledgeLoadError):
    """Knowledge file is not valid UTF-8 JSON."""
    error_code = "knowledge_parse_error"


class KnowledgeFormatError(KnowledgeLoadError):
    """Knowledge JSON matches neither the sections nor the items shape."""
    error_code = "knowledge_format_error"
