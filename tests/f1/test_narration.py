"""Tests for narration scripts."""

from aeonwise.core.models import ContentSection, Exercise, Lesson
from aeonwise.core.narration import (
    CODE_PLACEHOLDER,
    format_for_narration,
    lesson_script,
    section_script,
)


class TestFormatForNarration:
    """Tests for markdown stripping."""

    def test_heading_becomes_sentence(self):
        assert format_for_narration("# Title\nSome **bold** text") == "Title. Some bold text"

    def test_code_block_replaced(self):
        result = format_for_narration("Look:\n```python\nx = 1\n```\nDone")

        assert "x = 1" not in result
        assert CODE_PLACEHOLDER in result

    def test_inline_code_and_links(self):
        result = format_for_narration("Use `print` and [the docs](https://docs.python.org)")

        assert result == "Use print and the docs"

    def test_acronyms_spelled_out(self):
        assert format_for_narration("Call the API with JSON") == "Call the A P I with J S O N"

    def test_list_items(self):
        assert format_for_narration("- one\n- two") == "one. two."

    def test_quote_marker_removed(self):
        assert format_for_narration("> Careful") == "Careful"


class TestSectionScript:
    """Tests for per-section narration."""

    def test_code_section(self):
        section = ContentSection(id="section-0", type="code", content="x = 1", language="python")

        assert section_script(section) == CODE_PLACEHOLDER

    def test_heading_section(self):
        section = ContentSection(id="section-0", type="heading", content="Loops", level=2)

        assert section_script(section) == "Loops."

    def test_list_section(self):
        section = ContentSection(id="section-0", type="list", content="- break\n2. continue")

        assert section_script(section) == "break. continue."

    def test_paragraph_keeps_punctuation(self):
        section = ContentSection(id="section-0", type="paragraph", content="Is it true?")

        assert section_script(section) == "Is it true?"


class TestLessonScript:
    """Tests for full-lesson narration."""

    def test_minimal_lesson(self):
        lesson = Lesson(id="l1", title="Loops", content="")

        assert lesson_script(lesson) == (
            "Welcome to lesson Loops. This concludes the lesson on Loops. "
            "Great job on completing this section!"
        )

    def test_full_lesson_order(self):
        lesson = Lesson(
            id="l1",
            title="Loops",
            content="Loops repeat work",
            key_points=["for loops"],
            exercise=Exercise(description="Count to ten", hints=["use range"]),
        )

        script = lesson_script(lesson)

        assert script.index("Key point 1: for loops.") < script.index("Loops repeat work")
        assert script.index("Loops repeat work") < script.index("Exercise: Count to ten.")
        assert "Hint 1: use range." in script
        assert script.endswith("Great job on completing this section!")
