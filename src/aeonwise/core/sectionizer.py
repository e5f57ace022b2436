"""Lesson content sectionizer.

Splits a lesson's markdown-like text into an ordered list of typed
blocks (heading, paragraph, code, list, quote) so the player can render
and narrate each block independently.

Single left-to-right scan over lines:
- "#..." lines close the open paragraph and emit a heading
- ``` opens a code block that runs to the closing fence or end of input
- "-", "*" and "N." lines are merged greedily into one list block
- ">" lines emit one quote block each (merge_quotes=True merges runs)
- any other non-blank line joins the open paragraph

The scan is total: it never raises, and an unterminated fence simply
consumes the rest of the input.
"""

from __future__ import annotations

import re

import structlog

from aeonwise.core.models import ContentSection, SectionType

logger = structlog.get_logger(__name__)

HEADING_PATTERN = re.compile(r"^(#+)\s*(.*)$")
FENCE_MARKER = "```"
LIST_PATTERNS = [
    re.compile(r"^\s*[-*]\s+"),  # bullets
    re.compile(r"^\s*\d+\.\s+"),  # ordinals
]


def is_list_line(line: str) -> bool:
    """Check whether a line is a bullet or ordinal list item."""
    return any(p.match(line) for p in LIST_PATTERNS)


def _is_fence(line: str) -> bool:
    return line.strip().startswith(FENCE_MARKER)


def _is_quote(line: str) -> bool:
    return line.strip().startswith(">")


class _SectionBuilder:
    """Accumulates emitted sections and the open paragraph."""

    def __init__(self) -> None:
        self.sections: list[ContentSection] = []
        self._paragraph: list[str] = []

    def emit(
        self,
        section_type: SectionType,
        content: str,
        level: int | None = None,
        language: str | None = None,
    ) -> None:
        self.sections.append(
            ContentSection(
                id=f"section-{len(self.sections)}",
                type=section_type,
                content=content,
                level=level,
                language=language,
            )
        )

    def add_text(self, line: str) -> None:
        self._paragraph.append(line.strip())

    def flush(self) -> None:
        if self._paragraph:
            self.emit("paragraph", "\n".join(self._paragraph))
            self._paragraph = []


def sectionize(text: str, merge_quotes: bool = False) -> list[ContentSection]:
    """Split lesson text into typed content sections.

    Args:
        text: Raw lesson content
        merge_quotes: Merge consecutive ">" lines into a single quote block

    Returns:
        Ordered list of ContentSection; empty for empty input
    """
    if not text or not text.strip():
        return []

    lines = [line.rstrip("\r") for line in text.split("\n")]
    builder = _SectionBuilder()
    i = 0

    while i < len(lines):
        line = lines[i]

        if _is_fence(line):
            builder.flush()
            language = line.strip()[len(FENCE_MARKER):].strip() or None
            i += 1
            code_lines: list[str] = []
            while i < len(lines) and not _is_fence(lines[i]):
                code_lines.append(lines[i])
                i += 1
            i += 1  # closing fence (no-op past end of input)
            builder.emit("code", "\n".join(code_lines), language=language)
            continue

        heading = HEADING_PATTERN.match(line)
        if heading:
            builder.flush()
            builder.emit(
                "heading",
                heading.group(2).strip(),
                level=len(heading.group(1)),
            )
            i += 1
            continue

        if is_list_line(line):
            builder.flush()
            items: list[str] = []
            while i < len(lines) and is_list_line(lines[i]):
                items.append(lines[i].strip())
                i += 1
            builder.emit("list", "\n".join(items))
            continue

        if _is_quote(line):
            builder.flush()
            quoted = [line.strip()[1:].strip()]
            i += 1
            if merge_quotes:
                while i < len(lines) and _is_quote(lines[i]):
                    quoted.append(lines[i].strip()[1:].strip())
                    i += 1
            builder.emit("quote", "\n".join(quoted))
            continue

        if line.strip():
            builder.add_text(line)
        i += 1

    builder.flush()

    logger.debug(
        "sectionizer.done",
        lines=len(lines),
        sections=len(builder.sections),
    )
    return builder.sections


def sections_to_text(sections: list[ContentSection]) -> str:
    """Join section contents back into plain text, one block per paragraph."""
    return "\n\n".join(s.content for s in sections if s.content)
