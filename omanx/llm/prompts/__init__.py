"""
Prompts module - LLM prompt templates.

Prompts are stored as separate Python files for:
- Version control of prompt changes
- Clear documentation of prompt purpose
"""
from omanx.llm.prompts.policies import (
    KNOWLEDGE_HEADER,
    KNOWLEDGE_NOT_LOADED,
    SYSTEM_POLICY_LOCAL,
    SYSTEM_POLICY_SCHOLAR,
    build_system_prompt,
)

__all__ = [
    "KNOWLEDGE_HEADER",
    "KNOWLEDGE_NOT_LOADED",
    "SYSTEM_POLICY_LOCAL",
    "SYSTEM_POLICY_SCHOLAR",
    "build_system_prompt",
]
