from flashquiz.catalog import find_category_by_slug
from flashquiz.dashboard import (
    badge_for, get_badge_color, get_category_overview,
    get_quiz_progress_by_subcategory, summarize_subcategories,
)
from flashquiz.models import Flashcard, Outcome, Subcategory, SubcategorySummary
from flashquiz.progress import upsert_outcome

OPTIONS = ("a", "b", "c", "d")


def _cards(subcategory_id, ids):
    return [Flashcard(i, subcategory_id, f"Q{i}", OPTIONS, 0) for i in ids]


def test_summary_for_completed_subcategory():
    subs = [Subcategory(1, 1, "Hooks", "hooks")]
    outcomes = [
        Outcome("u", 1, "correct"), Outcome("u", 2, "correct"), Outcome("u", 3, "incorrect"),
    ]
    result = summarize_subcategories(subs, _cards(1, [1, 2, 3]), outcomes)
    assert result == {1: SubcategorySummary(completed=True, score=67)}


def test_summary_for_partial_attempt():
    subs = [Subcategory(1, 1, "Hooks", "hooks")]
    result = summarize_subcategories(subs, _cards(1, [1, 2, 3]), [Outcome("u", 1, "correct")])
    assert result[1] == SubcategorySummary(completed=False, score=33)


def test_summary_for_untouched_and_empty_subcategories():
    subs = [Subcategory(1, 1, "Hooks", "hooks"), Subcategory(2, 1, "Empty", "empty")]
    result = summarize_subcategories(subs, _cards(1, [1, 2]), [])
    assert result[1] == SubcategorySummary(completed=False, score=0)
    assert result[2] == SubcategorySummary(completed=False, score=0)


def test_summary_ignores_outcomes_for_other_cards():
    subs = [Subcategory(1, 1, "Hooks", "hooks")]
    outcomes = [Outcome("u", 1, "correct"), Outcome("u", 42, "incorrect")]
    result = summarize_subcategories(subs, _cards(1, [1]), outcomes)
    assert result[1] == SubcategorySummary(completed=True, score=100)


def test_summarize_is_idempotent():
    subs = [Subcategory(1, 1, "Hooks", "hooks")]
    cards = _cards(1, [1, 2])
    outcomes = [Outcome("u", 1, "correct")]
    assert summarize_subcategories(subs, cards, outcomes) == summarize_subcategories(subs, cards, outcomes)


def test_badge_for():
    assert badge_for(None) is None
    assert badge_for(SubcategorySummary(completed=False, score=50)) is None
    assert badge_for(SubcategorySummary(completed=True, score=100)) == "correct"
    assert badge_for(SubcategorySummary(completed=True, score=0)) == "incorrect"
    assert badge_for(SubcategorySummary(completed=True, score=67)) == "partial"


def test_get_badge_color():
    assert get_badge_color("correct") == "green"
    assert get_badge_color("partial") == "yellow"
    assert get_badge_color("incorrect") == "red"
    assert get_badge_color(None) == "dim"


def test_progress_by_subcategory_without_user(seeded_db):
    assert get_quiz_progress_by_subcategory(seeded_db, None) == {}


def test_progress_by_subcategory(seeded_db):
    for card_id in range(1, 6):
        upsert_outcome(seeded_db, "user_1", card_id, "correct")
    upsert_outcome(seeded_db, "user_1", 9, "incorrect")
    result = get_quiz_progress_by_subcategory(seeded_db, "user_1")
    assert len(result) == 4
    assert result[1] == SubcategorySummary(completed=True, score=100)
    assert result[2] == SubcategorySummary(completed=False, score=0)
    assert result[3] == SubcategorySummary(completed=False, score=0)


def test_category_overview_rows(seeded_db):
    for card_id in (6, 7, 8):
        upsert_outcome(seeded_db, "user_1", card_id, "correct" if card_id != 8 else "incorrect")
    react = find_category_by_slug(seeded_db, "react")
    rows = get_category_overview(seeded_db, "user_1", react.id)
    assert [r["slug"] for r in rows] == ["hooks", "state-management"]
    assert rows[0]["card_count"] == 5
    assert rows[0]["badge"] is None
    assert rows[1]["summary"] == SubcategorySummary(completed=True, score=67)
    assert rows[1]["badge"] == "partial"


def test_category_overview_without_user(seeded_db):
    react = find_category_by_slug(seeded_db, "react")
    rows = get_category_overview(seeded_db, None, react.id)
    assert all(r["summary"] is None and r["badge"] is None for r in rows)
