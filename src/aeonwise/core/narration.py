"""Narration scripts for text-to-speech.

Turns lesson text and content sections into plain sentences that read
well aloud: markdown markers removed, code replaced by a spoken
placeholder, acronyms spelled out.
"""

from __future__ import annotations

import re

from aeonwise.core.models import ContentSection, Lesson

CODE_PLACEHOLDER = "Code example."

# Applied in order
_NARRATION_RULES: list[tuple[re.Pattern[str], str]] = [
    # Pauses after headings and list items
    (re.compile(r"^(#{1,6})\s+(.+)$", re.MULTILINE), r"\2. "),
    (re.compile(r"^\s*[-*+]\s+(.+)$", re.MULTILINE), r"\1. "),
    (re.compile(r"^\s*\d+\.\s+(.+)$", re.MULTILINE), r"\1. "),
    # Code
    (re.compile(r"```[\s\S]*?```"), f" {CODE_PLACEHOLDER} "),
    (re.compile(r"`([^`]+)`"), r"\1"),
    # Acronyms
    (re.compile(r"\bAPI\b"), "A P I"),
    (re.compile(r"\bHTML\b"), "H T M L"),
    (re.compile(r"\bCSS\b"), "C S S"),
    (re.compile(r"\bJSON\b"), "J S O N"),
    (re.compile(r"\bSQL\b"), "S Q L"),
    # Inline markup
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"^>\s?", re.MULTILINE), ""),
]

_WHITESPACE = re.compile(r"\s+")
_REPEATED_PERIODS = re.compile(r"\.(\s*\.)+")


def _sentence(text: str) -> str:
    text = text.strip()
    if not text:
        return ""
    if text[-1] not in ".!?:":
        text += "."
    return text


def format_for_narration(text: str) -> str:
    """Convert markdown-like text into narration-friendly plain text."""
    result = text
    for pattern, replacement in _NARRATION_RULES:
        result = pattern.sub(replacement, result)
    result = _WHITESPACE.sub(" ", result).strip()
    return _REPEATED_PERIODS.sub(".", result)


def section_script(section: ContentSection) -> str:
    """Narration text for a single content section."""
    if section.type == "code":
        return CODE_PLACEHOLDER
    if section.type == "heading":
        return _sentence(format_for_narration(section.content))
    if section.type == "list":
        return " ".join(_sentence(format_for_narration(item)) for item in section.items)
    return _sentence(format_for_narration(section.content))


def lesson_script(lesson: Lesson) -> str:
    """Full narration script for a lesson.

    Welcome, key points, main content, exercise with hints, closing.
    """
    parts = [f"Welcome to lesson {lesson.title}."]

    if lesson.key_points:
        parts.append("Here are the key points we will cover:")
        for i, point in enumerate(lesson.key_points, start=1):
            parts.append(f"Key point {i}: {_sentence(point)}")

    if lesson.content:
        parts.append("Now, let us begin with the main lesson content.")
        parts.append(format_for_narration(lesson.content))

    if lesson.exercise:
        parts.append("Now it is time for the practical exercise.")
        parts.append(f"Exercise: {_sentence(lesson.exercise.description)}")
        if lesson.exercise.hints:
            parts.append("Here are some hints to help you:")
            for i, hint in enumerate(lesson.exercise.hints, start=1):
                parts.append(f"Hint {i}: {_sentence(hint)}")

    parts.append(
        f"This concludes the lesson on {lesson.title}. "
        "Great job on completing this section!"
    )
    return " ".join(parts)
