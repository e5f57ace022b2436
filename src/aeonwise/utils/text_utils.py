"""Text processing utilities.

Helpers for cleaning model output before it is parsed.
"""

import json
import re
from typing import Any

# Patterns for removing thinking/reasoning blocks from LLM output
THINK_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<thinking>.*?</thinking>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<analysis>.*?</analysis>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]

CODE_FENCE_PATTERN = re.compile(r"```(?:[A-Za-z0-9_-]+)?\s*([\s\S]*?)```")


def strip_think(text: str) -> str:
    """Remove thinking/reasoning tags from LLM output.

    Removes <think>, <thinking>, <analysis> and <reasoning> blocks.

    Args:
        text: Raw LLM output text

    Returns:
        Cleaned text without thinking artifacts
    """
    result = text
    for pattern in THINK_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the text unchanged."""
    match = CODE_FENCE_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _balanced_span(text: str, open_char: str, close_char: str) -> str | None:
    """Find the first balanced open/close span, skipping string literals."""
    start = text.find(open_char)
    while start >= 0:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == open_char:
                depth += 1
            elif ch == close_char:
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        start = text.find(open_char, start + 1)
    return None


def _extract(text: str, open_char: str, close_char: str, kind: type) -> Any:
    cleaned = strip_think(text)

    for candidate in (cleaned, strip_code_fences(cleaned)):
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(value, kind):
            return value

    span = _balanced_span(cleaned, open_char, close_char)
    if span is not None:
        try:
            value = json.loads(span)
        except json.JSONDecodeError:
            return None
        if isinstance(value, kind):
            return value
    return None


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Parse the first JSON object in model output.

    Tries, in order: the whole text, the first fenced block, and the
    first balanced {...} span. Thinking blocks are removed first.

    Returns:
        Parsed dict, or None if nothing parses
    """
    return _extract(text, "{", "}", dict)


def extract_json_array(text: str) -> list[Any] | None:
    """Parse the first JSON array in model output, like extract_json_object."""
    return _extract(text, "[", "]", list)
