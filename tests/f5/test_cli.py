"""Tests for the aeonwise CLI."""

import json

import pytest
import structlog
from typer.testing import CliRunner

from aeonwise.cli.commands import app
from aeonwise.core.catalog import load_courses
from aeonwise.db.profiles_repository import create_profile

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """The CLI reconfigures structlog; restore defaults for other tests."""
    yield
    structlog.reset_defaults()


class TestSectionizeCommand:
    """Tests for aeonwise sectionize."""

    def test_json_output(self, tmp_path):
        lesson = tmp_path / "lesson.md"
        lesson.write_text("# Title\nBody text\n```python\nx = 1\n```\n")

        result = runner.invoke(app, ["sectionize", str(lesson), "--json"])

        assert result.exit_code == 0
        sections = json.loads(result.stdout)
        assert [s["type"] for s in sections] == ["heading", "paragraph", "code"]
        assert sections[2]["language"] == "python"

    def test_json_output_has_no_log_lines(self, tmp_path):
        lesson = tmp_path / "lesson.md"
        lesson.write_text("# Title\nBody\n")

        result = runner.invoke(app, ["sectionize", str(lesson), "--json"])

        assert result.exit_code == 0
        assert "sectionizer.done" not in result.output
        assert len(json.loads(result.stdout)) == 2

    def test_verbose_logs_debug_events(self, tmp_path):
        lesson = tmp_path / "lesson.md"
        lesson.write_text("# Title\nBody\n")

        result = runner.invoke(app, ["--verbose", "sectionize", str(lesson)])

        assert result.exit_code == 0
        assert "sectionizer.done" in result.output

    def test_table_output(self, tmp_path):
        lesson = tmp_path / "lesson.md"
        lesson.write_text("> one\n> two\n")

        result = runner.invoke(app, ["sectionize", str(lesson), "--merge-quotes"])

        assert result.exit_code == 0
        assert "1 sections" in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["sectionize", str(tmp_path / "missing.md")])

        assert result.exit_code == 1
        assert "File not found" in result.stdout


class TestRankCommands:
    """Tests for score, rank and ranks."""

    def test_score(self, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("username: ana\nbio: Hello\nskills: [a, b]\n")

        result = runner.invoke(app, ["score", str(profile)])

        assert result.exit_code == 0
        assert "70" in result.stdout
        assert "Starspark" in result.stdout
        assert "181" in result.stdout

    def test_score_invalid_file(self, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("- just\n- a list\n")

        result = runner.invoke(app, ["score", str(profile)])

        assert result.exit_code == 1

    def test_rank(self):
        result = runner.invoke(app, ["rank", "300"])

        assert result.exit_code == 0
        assert "Nebula Novice" in result.stdout
        assert "Astral Apprentice" in result.stdout

    def test_ranks(self):
        result = runner.invoke(app, ["ranks"])

        assert result.exit_code == 0
        assert "Cosmic Sage" in result.stdout


class TestDatabaseCommands:
    """Tests for init-db and leaderboard."""

    def test_init_db(self, tmp_path):
        db_path = tmp_path / "new.db"

        result = runner.invoke(app, ["init-db", "--db", str(db_path)])

        assert result.exit_code == 0
        assert db_path.exists()

    def test_leaderboard_empty(self, tmp_path):
        result = runner.invoke(app, ["leaderboard", "--db", str(tmp_path / "empty.db")])

        assert result.exit_code == 0
        assert "No profiles yet" in result.stdout

    def test_leaderboard(self, db):
        create_profile(db, username="ana", skills=["Python"])

        result = runner.invoke(app, ["leaderboard", "--db", str(db.path)])

        assert result.exit_code == 0
        assert "ana" in result.stdout

    def test_leaderboard_invalid_filter(self, tmp_path):
        result = runner.invoke(
            app, ["leaderboard", "--filter", "weekly", "--db", str(tmp_path / "x.db")]
        )

        assert result.exit_code == 1
        assert "Unknown filter" in result.stdout


class TestLessonCommands:
    """Tests for lesson, narrate, ask and path."""

    def test_lesson(self):
        result = runner.invoke(app, ["lesson", "python-basics", "loops"])

        assert result.exit_code == 0
        assert "Loops and Iteration" in result.stdout

    def test_unknown_lesson(self):
        result = runner.invoke(app, ["lesson", "python-basics", "nope"])

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_narrate_dry_run(self):
        result = runner.invoke(app, ["narrate", "python-basics", "loops", "--dry-run"])

        assert result.exit_code == 0
        assert "Welcome to lesson Loops and Iteration." in result.stdout

    def test_narrate_section_dry_run(self):
        result = runner.invoke(
            app, ["narrate", "python-basics", "loops", "-s", "section-0", "--dry-run"]
        )

        assert result.exit_code == 0
        assert result.stdout.strip() == "Loops and Iteration."

    def test_narrate_section_dry_run_with_cold_catalog(self):
        load_courses(force_reload=True)

        result = runner.invoke(
            app, ["narrate", "python-basics", "loops", "-s", "section-0", "--dry-run"]
        )

        assert result.exit_code == 0
        assert result.stdout.strip() == "Loops and Iteration."

    def test_narrate_unknown_section(self):
        result = runner.invoke(
            app, ["narrate", "python-basics", "loops", "-s", "section-999", "--dry-run"]
        )

        assert result.exit_code == 1

    def test_ask_mock(self):
        result = runner.invoke(app, ["ask", "What is a loop?", "--lesson", "loops", "--mock"])

        assert result.exit_code == 0
        assert "great question" in result.stdout
        assert "0.75" in result.stdout

    def test_path_mock(self):
        result = runner.invoke(app, ["path", "Data Science", "--mock"])

        assert result.exit_code == 0
        assert "Learning path: Data Science" in result.stdout
        assert "1. Data Science Fundamentals" in result.stdout
