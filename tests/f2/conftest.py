"""Fixtures for F2 tests - SQLite repositories."""

import pytest

from aeonwise.core.catalog import get_lesson
from aeonwise.db.database import init_db
from aeonwise.db.profiles_repository import create_profile


@pytest.fixture
def db(tmp_path):
    """Fresh database in a temp directory."""
    return init_db(tmp_path / "test.db")


@pytest.fixture
def learner(db):
    """Profile with no skills and zero points."""
    return create_profile(db, username="ana")


@pytest.fixture
def variables_lesson():
    """First lesson of the bundled Python course (skill: Python)."""
    return get_lesson("python-basics", "variables")
