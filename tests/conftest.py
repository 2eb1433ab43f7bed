import pytest

from flashquiz.db import init_db
from flashquiz.models import Flashcard
from flashquiz.seed import seed_all


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_flashquiz.db")
    return db_path


@pytest.fixture
def seeded_db(tmp_db):
    """A database holding the bundled catalog."""
    init_db(tmp_db)
    seed_all(tmp_db)
    return tmp_db


@pytest.fixture
def cards():
    """Three in-memory flashcards whose correct answers are 1, 0 and 2."""
    return [
        Flashcard(1, 1, "Q1", ("a", "b", "c", "d"), 1, "E1", 0),
        Flashcard(2, 1, "Q2", ("a", "b", "c", "d"), 0, "E2", 1),
        Flashcard(3, 1, "Q3", ("a", "b", "c", "d"), 2, "E3", 2),
    ]
