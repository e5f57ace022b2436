"""Tests for the lesson content sectionizer."""

from aeonwise.core.sectionizer import is_list_line, sectionize, sections_to_text


class TestBasicBlocks:
    """Tests for each block type on its own."""

    def test_empty_text(self):
        """Empty or blank input yields no sections."""
        assert sectionize("") == []
        assert sectionize("   \n\n  ") == []

    def test_heading_then_paragraph(self):
        """A heading line closes nothing and starts a new block."""
        sections = sectionize("# Title\nBody")

        assert [s.type for s in sections] == ["heading", "paragraph"]
        assert sections[0].content == "Title"
        assert sections[0].level == 1
        assert sections[1].content == "Body"

    def test_heading_levels(self):
        """Level equals the number of leading #."""
        sections = sectionize("# One\n## Two\n###### Six")

        assert [s.level for s in sections] == [1, 2, 6]
        assert [s.content for s in sections] == ["One", "Two", "Six"]

    def test_fenced_code_block(self):
        """Fenced code keeps its lines verbatim and records the language."""
        sections = sectionize("```python\nx = 1\n  y = 2\n```")

        assert len(sections) == 1
        assert sections[0].type == "code"
        assert sections[0].content == "x = 1\n  y = 2"
        assert sections[0].language == "python"

    def test_code_without_language(self):
        """A bare fence gives a code block with no language."""
        sections = sectionize("```\ncode\n```")

        assert len(sections) == 1
        assert sections[0].type == "code"
        assert sections[0].content == "code"
        assert sections[0].language is None

    def test_unterminated_fence_consumes_rest(self):
        """An unclosed fence runs to the end of the input."""
        sections = sectionize("Intro\n```\nline 1\n# not a heading\n- not a list")

        assert [s.type for s in sections] == ["paragraph", "code"]
        assert sections[1].content == "line 1\n# not a heading\n- not a list"

    def test_list_merges_consecutive_items(self):
        """Bullets and ordinals in a row form one list block."""
        sections = sectionize("- a\n* b\n1. c\n2. d")

        assert len(sections) == 1
        assert sections[0].type == "list"
        assert sections[0].content == "- a\n* b\n1. c\n2. d"
        assert sections[0].items == ["a", "b", "c", "d"]

    def test_quote_lines_are_separate_by_default(self):
        """Each > line is its own quote block."""
        sections = sectionize("> first\n> second")

        assert [s.type for s in sections] == ["quote", "quote"]
        assert [s.content for s in sections] == ["first", "second"]

    def test_quote_lines_merge_when_requested(self):
        """merge_quotes joins a run of > lines."""
        sections = sectionize("> first\n> second\nafter", merge_quotes=True)

        assert [s.type for s in sections] == ["quote", "paragraph"]
        assert sections[0].content == "first\nsecond"


class TestParagraphs:
    """Tests for paragraph accumulation."""

    def test_lines_join_into_one_paragraph(self):
        """Consecutive text lines are stripped and joined with newlines."""
        sections = sectionize("  first line  \nsecond line")

        assert len(sections) == 1
        assert sections[0].content == "first line\nsecond line"

    def test_blank_lines_do_not_split_paragraphs(self):
        """Only structural lines close a paragraph."""
        sections = sectionize("one\n\ntwo")

        assert len(sections) == 1
        assert sections[0].content == "one\ntwo"

    def test_structural_line_closes_paragraph(self):
        """A list after text flushes the paragraph first."""
        sections = sectionize("text\n- item\nmore text")

        assert [s.type for s in sections] == ["paragraph", "list", "paragraph"]
        assert sections[2].content == "more text"


class TestSectionInvariants:
    """Tests for ids, ordering and determinism."""

    SAMPLE = (
        "# Loops\n\nLoops repeat work.\n\n```python\nfor i in range(3):\n    print(i)\n```\n\n"
        "- break\n- continue\n\n> Careful with while loops.\n"
    )

    def test_ids_are_sequential(self):
        """Ids follow emission order starting at section-0."""
        sections = sectionize(self.SAMPLE)

        assert [s.id for s in sections] == [f"section-{i}" for i in range(len(sections))]

    def test_block_order(self):
        """Blocks come out in source order."""
        sections = sectionize(self.SAMPLE)

        assert [s.type for s in sections] == ["heading", "paragraph", "code", "list", "quote"]

    def test_deterministic(self):
        """Same input, same output."""
        first = [s.to_dict() for s in sectionize(self.SAMPLE)]
        second = [s.to_dict() for s in sectionize(self.SAMPLE)]

        assert first == second

    def test_resectionizing_joined_text_is_stable(self):
        """Paragraph-only text survives a sectionize/join round."""
        text = "alpha beta\ngamma"
        once = sectionize(text)
        twice = sectionize(sections_to_text(once))

        assert [s.to_dict() for s in once] == [s.to_dict() for s in twice]

    def test_to_dict_omits_unset_fields(self):
        """Only headings carry level and only code carries language."""
        heading, paragraph = sectionize("# H\nP")

        assert heading.to_dict() == {"id": "section-0", "type": "heading", "content": "H", "level": 1}
        assert paragraph.to_dict() == {"id": "section-1", "type": "paragraph", "content": "P"}


class TestIsListLine:
    """Tests for list marker detection."""

    def test_markers(self):
        assert is_list_line("- item")
        assert is_list_line("  * item")
        assert is_list_line("12. item")

    def test_non_markers(self):
        assert not is_list_line("-item")
        assert not is_list_line("1.5 is a number")
        assert not is_list_line("plain text")
