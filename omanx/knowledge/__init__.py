"""
Knowledge Package - The approved-sources corpus injected into scholar prompts.

- document.py : Immutable document model and shape detection
- renderer.py : Document -> prompt text
- store.py    : Hot-reloading snapshot store over the knowledge JSON file
"""
from omanx.knowledge.document import (
    ItemsDocument,
    KnowledgeDocument,
    KnowledgeItem,
    SectionRecord,
    SectionsDocument,
    parse_document,
)
from omanx.knowledge.renderer import render_document
from omanx.knowledge.store import KnowledgeSnapshot, KnowledgeStore

__all__ = [
    "ItemsDocument",
    "KnowledgeDocument",
    "KnowledgeItem",
    "SectionRecord",
    "SectionsDocument",
    "parse_document",
    "render_document",
    "KnowledgeSnapshot",
    "KnowledgeStore",
]
