"""
Services module - Business logic and orchestration.

Services contain the core application logic:
- No HTTP concerns (those belong in api/)
- Orchestrate between the classifier, cache, knowledge store and LLM
"""
from omanx.services.chat_service import ChatResult, ChatService, ChatTurn

__all__ = [
    "ChatResult",
    "ChatService",
    "ChatTurn",
]
