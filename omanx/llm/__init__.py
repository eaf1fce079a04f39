"""
LLM module - Language model integration.

This module handles all LLM interactions:
- Prompt construction (lane policies)
- Buffered and streamed calls to Groq
- Translation of provider failures into UpstreamError
"""
from omanx.llm.client import Completion, LLMClient, translate_provider_error

__all__ = [
    "Completion",
    "LLMClient",
    "translate_provider_error",
]
