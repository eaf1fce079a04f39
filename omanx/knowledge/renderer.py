"""
Knowledge renderer - turn a KnowledgeDocument into prompt text.

Output layout per entry:

    ## <title or section id>
    <summary>
    - <bullet>
    References:
    - <link>

Entries are separated by one blank line. The renderer is a pure function
of the document, so an unchanged document always yields byte-identical
text (and therefore identical prompts).
"""
from typing import List, Optional, Sequence

from omanx.knowledge.document import (
    ItemsDocument,
    KnowledgeDocument,
    SectionRecord,
    SectionsDocument,
)


def render_document(document: Optional[KnowledgeDocument]) -> str:
    """Render a document; None renders as the empty string."""
    if document is None:
        return ""

    if isinstance(document, ItemsDocument):
        blocks = [
            _render_block(item.title, item.summary, item.bullets, item.links)
            for item in document.items
        ]
    elif isinstance(document, SectionsDocument):
        blocks = []
        for section_id, content in document.sections:
            if isinstance(content, SectionRecord):
                blocks.append(
                    _render_block(section_id, content.summary, content.bullets, content.links)
                )
            else:
                blocks.append(_render_block(section_id, content.strip()))
    else:
        raise TypeError(f"Unsupported knowledge document: {type(document).__name__}")

    return "\n\n".join(blocks).strip()


def _render_block(
    heading: str,
    summary: Optional[str] = None,
    bullets: Sequence[str] = (),
    links: Sequence[str] = (),
) -> str:
    lines: List[str] = [f"## {heading}"]

    summary = (summary or "").strip()
    if summary:
        lines.append(summary)

    lines.extend(f"- {bullet}" for bullet in bullets)

    if links:
        lines.append("References:")
        lines.extend(f"- {link}" for link in links)

    return "\n".join(lines)
