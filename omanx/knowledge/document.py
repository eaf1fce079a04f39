"""
Knowledge document model - the approved-sources corpus as immutable values.

A knowledge file comes in one of two JSON shapes, detected structurally:

Sections (object), in file order:
    {
      "opt": {"summary": "...", "bullets": ["..."], "links": ["https://..."]},
      "housing": "Free text guidance",
      "year": 2025
    }

Items (array):
    [
      {"title": "OPT basics", "summary": "...", "bullets": [...], "links": [...]}
    ]

parse_document() turns decoded JSON into a SectionsDocument or an
ItemsDocument, or raises KnowledgeFormatError. It never returns a partial
document.
"""
import json
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from omanx.core.exceptions import KnowledgeFormatError


@dataclass(frozen=True)
class SectionRecord:
    """Structured section content. Every part is optional."""
    summary: Optional[str] = None
    bullets: Tuple[str, ...] = ()
    links: Tuple[str, ...] = ()


@dataclass(frozen=True)
class KnowledgeItem:
    """One entry of an items-shaped document."""
    title: str
    summary: Optional[str] = None
    bullets: Tuple[str, ...] = ()
    links: Tuple[str, ...] = ()


# A section is free text (scalars are kept as their JSON text) or a record
SectionContent = Union[str, SectionRecord]


@dataclass(frozen=True)
class SectionsDocument:
    """Section identifier -> content, in the order of the source object."""
    sections: Tuple[Tuple[str, SectionContent], ...]

    @property
    def entry_count(self) -> int:
        return len(self.sections)

    def get(self, section_id: str) -> Optional[SectionContent]:
        for key, content in self.sections:
            if key == section_id:
                return content
        return None


@dataclass(frozen=True)
class ItemsDocument:
    """Ordered list of titled knowledge items."""
    items: Tuple[KnowledgeItem, ...]

    @property
    def entry_count(self) -> int:
        return len(self.items)


KnowledgeDocument = Union[SectionsDocument, ItemsDocument]


def parse_document(data: Any) -> KnowledgeDocument:
    """
    Detect the document shape and build the matching immutable value.

    Args:
        data: Decoded JSON (output of json.loads)

    Returns:
        SectionsDocument for a JSON object, ItemsDocument for a JSON array

    Raises:
        KnowledgeFormatError: If the structure fits neither shape
    """
    if isinstance(data, dict):
        return SectionsDocument(
            sections=tuple(
                (str(key), _parse_section(str(key), value))
                for key, value in data.items()
            )
        )

    if isinstance(data, list):
        return ItemsDocument(
            items=tuple(_parse_item(index, raw) for index, raw in enumerate(data))
        )

    raise KnowledgeFormatError(
        f"Knowledge document must be a JSON object or array, got {type(data).__name__}"
    )


def _parse_section(key: str, value: Any) -> SectionContent:
    if isinstance(value, str):
        return value

    if isinstance(value, dict):
        return SectionRecord(
            summary=_optional_text(value.get("summary"), f"section '{key}' summary"),
            bullets=_text_list(value.get("bullets"), f"section '{key}' bullets"),
            links=_text_list(value.get("links"), f"section '{key}' links"),
        )

    if value is None or isinstance(value, (bool, int, float)):
        # Verbatim JSON text: true, null, 3.5
        return json.dumps(value)

    raise KnowledgeFormatError(
        f"Section '{key}' must be text, an object or a scalar, got {type(value).__name__}"
    )


def _parse_item(index: int, raw: Any) -> KnowledgeItem:
    if not isinstance(raw, dict):
        raise KnowledgeFormatError(f"Item {index} must be an object")

    title = raw.get("title")
    if not isinstance(title, str) or not title.strip():
        raise KnowledgeFormatError(f"Item {index} needs a non-empty string 'title'")

    return KnowledgeItem(
        title=title,
        summary=_optional_text(raw.get("summary"), f"item {index} summary"),
        bullets=_text_list(raw.get("bullets"), f"item {index} bullets"),
        links=_text_list(raw.get("links"), f"item {index} links"),
    )


def _optional_text(value: Any, label: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise KnowledgeFormatError(f"{label} must be a string")
    return value


def _text_list(value: Any, label: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise KnowledgeFormatError(f"{label} must be a list of strings")
    return tuple(value)
