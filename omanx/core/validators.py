"""
Input Validators - Chat request validation utilities.

The message is validated but never rewritten: the exact text the client
sent is what reaches the provider and what the cache fingerprint covers.
"""
from typing import Any, Optional, Tuple

from omanx.core.logging_config import get_logger

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 10_000

VALID_MODES = ("official", "community")


def validate_message(message: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate a chat message.

    Args:
        message: Raw value of the `message` field

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(message, str) or not message:
        return False, "Missing 'message' string."

    if len(message) > MAX_MESSAGE_LENGTH:
        logger.debug(f"Rejected oversized message: length={len(message)}")
        return False, "Message too long (max 10,000 chars)."

    return True, None


def validate_mode(mode: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate the user-facing answer mode.

    Args:
        mode: 'official' or 'community'

    Returns:
        Tuple of (is_valid, error_message)
    """
    if mode not in VALID_MODES:
        return False, f"Invalid mode: {mode}. Must be one of: {', '.join(VALID_MODES)}"

    return True, None
