"""
Chat Service - The request lifecycle of the assistant.

Each request runs through:

    Validating -> Classifying -> CacheLookup
        -> hit:  respond with the cached text
        -> miss: PromptAssembly -> Invoking
                   -> buffered: store in cache, respond
                   -> streamed: emit deltas, store in cache, emit done

prepare() covers validation and classification so the HTTP layer can
reject bad input before it opens an event stream. reply() and stream()
are the two completion paths.

Why a service layer:
1. Routes stay thin (no prompt or cache logic in HTTP handlers)
2. Testable without HTTP, with a fake provider
3. Every dependency is passed in explicitly at construction
"""
import asyncio
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Optional

from omanx.cache.response_cache import ResponseCache
from omanx.core.exceptions import UpstreamError, UpstreamUnknownError, ValidationError
from omanx.core.logging_config import get_logger
from omanx.core.validators import validate_message, validate_mode
from omanx.knowledge.store import KnowledgeStore
from omanx.llm.prompts.policies import build_system_prompt
from omanx.routing.lane_classifier import Lane, classify_lane

logger = get_logger(__name__)

FALLBACK_TEXT = "I couldn't generate a response right now."
STREAM_ERROR_TEXT = "Stream error."


@dataclass(frozen=True)
class ChatTurn:
    """A validated, classified request ready for a completion path."""
    message: str
    mode: str
    lane: Lane
    cache_key: str


@dataclass(frozen=True)
class ChatResult:
    """Outcome of the buffered path."""
    text: str
    cached: bool
    lane: Lane
    usage: Optional[Dict[str, Any]] = None


class ChatService:
    """
    Orchestrates classification, caching, prompt assembly and completion.

    Example:
        >>> service = ChatService(knowledge, cache, LLMClient.from_settings(settings),
        ...                       model="llama-3.3-70b-versatile")
        >>> turn = service.prepare("What documents do I need for OPT?")
        >>> result = await service.reply(turn, request_id="a1b2c3")
        >>> result.lane
        <Lane.SCHOLAR: 'scholar'>
    """

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        response_cache: ResponseCache,
        provider,
        model: str,
        classifier: Callable[[str], Lane] = classify_lane,
    ):
        """
        Initialize the chat service.

        Args:
            knowledge_store: Source of the scholar-lane knowledge text
            response_cache: Answer cache shared by all requests
            provider: Completion provider with create() and stream()
            model: Model identifier (part of the cache fingerprint)
            classifier: Lane classifier
        """
        self.knowledge_store = knowledge_store
        self.response_cache = response_cache
        self.provider = provider
        self.model = model
        self.classifier = classifier
        logger.info(f"ChatService initialized: model={model}")

    def prepare(self, message: Any, mode: Any = "official") -> ChatTurn:
        """
        Validate and classify a request.

        Raises:
            ValidationError: Missing, blank or oversized message, unknown mode
        """
        is_valid, error = validate_message(message)
        if not is_valid:
            raise ValidationError(error, field="message")

        is_valid, error = validate_mode(mode)
        if not is_valid:
            raise ValidationError(error, field="mode")

        lane = self.classifier(message)
        return ChatTurn(
            message=message,
            mode=mode,
            lane=lane,
            cache_key=self.response_cache.key_for(self.model, message, mode, lane.value),
        )

    def build_system_prompt(self, lane: Lane, mode: str) -> str:
        """Lane policy, plus MODE and knowledge for the scholar lane."""
        if lane is Lane.LOCAL:
            return build_system_prompt(lane, mode)
        return build_system_prompt(lane, mode, self.knowledge_store.get_text())

    async def reply(self, turn: ChatTurn, request_id: str = "-") -> ChatResult:
        """
        Buffered completion with cache lookup.

        Raises:
            UpstreamError: Provider failure (the real error is logged here)
        """
        cached = self.response_cache.get(turn.cache_key)
        if cached is not None:
            logger.info(f"Cache hit: request_id={request_id}, lane={turn.lane.value}")
            return ChatResult(text=cached, cached=True, lane=turn.lane)

        logger.info(
            f"Chat request: request_id={request_id}, mode={turn.mode}, "
            f"lane={turn.lane.value}, stream=False, length={len(turn.message)}"
        )

        system_text = self.build_system_prompt(turn.lane, turn.mode)

        try:
            completion = await self.provider.create(self.model, system_text, turn.message)
        except UpstreamError as e:
            logger.error(
                f"Completion failed: request_id={request_id}, "
                f"error={e.error_code}, details={e.details}"
            )
            raise
        except Exception as e:
            logger.exception(f"Completion failed: request_id={request_id}, error={e}")
            raise UpstreamUnknownError(details=str(e)) from e

        text = completion.text or FALLBACK_TEXT
        self.response_cache.set(turn.cache_key, text)

        return ChatResult(text=text, cached=False, lane=turn.lane, usage=completion.usage)

    async def stream(self, turn: ChatTurn, request_id: str = "-") -> AsyncIterator[Dict[str, Any]]:
        """
        Streamed completion as a sequence of event dicts.

        Yields `{delta, requestId, lane}` per provider delta, then exactly one
        terminal event: `{done: True, ...}` on success or
        `{error, done: True, ...}` on failure. The accumulated text is cached
        under the same fingerprint as the buffered path before `done` is sent.

        Closing this generator (client disconnect) closes the provider stream.
        """
        lane = turn.lane.value
        logger.info(
            f"Chat request: request_id={request_id}, mode={turn.mode}, "
            f"lane={lane}, stream=True, length={len(turn.message)}"
        )

        system_text = self.build_system_prompt(turn.lane, turn.mode)
        upstream = self.provider.stream(self.model, system_text, turn.message)
        parts = []

        try:
            async for delta in upstream:
                parts.append(delta)
                yield {"delta": delta, "requestId": request_id, "lane": lane}
        except (asyncio.CancelledError, GeneratorExit):
            logger.info(
                f"Stream closed by client: request_id={request_id}, "
                f"received={len(parts)} deltas"
            )
            raise
        except Exception as e:
            details = e.details if isinstance(e, UpstreamError) else repr(e)
            logger.error(f"Stream error: request_id={request_id}, lane={lane}, error={details}")
            yield {"error": STREAM_ERROR_TEXT, "requestId": request_id, "lane": lane, "done": True}
            return
        finally:
            await upstream.aclose()

        text = "".join(parts)
        if text:
            self.response_cache.set(turn.cache_key, text)

        logger.info(f"Stream complete: request_id={request_id}, lane={lane}, out_len={len(text)}")
        yield {"done": True, "requestId": request_id, "lane": lane}
