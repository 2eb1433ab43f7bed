"""Per-subcategory completion and score summaries."""
import logging

from flashquiz.catalog import (
    find_subcategories_by_category, list_flashcards, list_subcategories,
)
from flashquiz.models import STATUS_CORRECT, SubcategorySummary, percent
from flashquiz.progress import find_outcomes

logger = logging.getLogger(__name__)

BADGE_CORRECT = "correct"
BADGE_INCORRECT = "incorrect"
BADGE_PARTIAL = "partial"


def summarize_subcategories(subcategories: list, flashcards: list, outcomes: list) -> dict:
    """Roll outcomes up into a SubcategorySummary per subcategory id.

    Score is measured against every card in the subcategory, not only the
    attempted ones, so partial runs show a partial score.
    """
    cards_by_subcategory: dict[int, list[int]] = {}
    for card in flashcards:
        cards_by_subcategory.setdefault(card.subcategory_id, []).append(card.id)
    status_by_card = {o.flashcard_id: o.status for o in outcomes}

    result = {}
    for sub in subcategories:
        card_ids = cards_by_subcategory.get(sub.id, [])
        if not card_ids:
            result[sub.id] = SubcategorySummary(completed=False, score=0)
            continue
        attempted = sum(1 for cid in card_ids if cid in status_by_card)
        correct = sum(1 for cid in card_ids if status_by_card.get(cid) == STATUS_CORRECT)
        result[sub.id] = SubcategorySummary(
            completed=attempted == len(card_ids),
            score=percent(correct, len(card_ids)) if attempted else 0,
        )
    return result


def badge_for(summary: SubcategorySummary | None) -> str | None:
    if summary is None or not summary.completed:
        return None
    if summary.score == 100:
        return BADGE_CORRECT
    if summary.score == 0:
        return BADGE_INCORRECT
    return BADGE_PARTIAL


def get_badge_color(badge: str | None) -> str:
    if badge == BADGE_CORRECT:
        return "green"
    elif badge == BADGE_PARTIAL:
        return "yellow"
    elif badge == BADGE_INCORRECT:
        return "red"
    return "dim"


def get_quiz_progress_by_subcategory(db_path: str, user_id: str | None) -> dict:
    """Summaries for every subcategory; empty when nobody is signed in."""
    if not user_id:
        return {}
    subcategories = list_subcategories(db_path)
    flashcards = list_flashcards(db_path, [s.id for s in subcategories])
    outcomes = find_outcomes(db_path, user_id, [c.id for c in flashcards])
    return summarize_subcategories(subcategories, flashcards, outcomes)


def get_category_overview(db_path: str, user_id: str | None, category_id: int) -> list[dict]:
    subcategories = find_subcategories_by_category(db_path, category_id)
    flashcards = list_flashcards(db_path, [s.id for s in subcategories])
    if user_id:
        outcomes = find_outcomes(db_path, user_id, [c.id for c in flashcards])
        summaries = summarize_subcategories(subcategories, flashcards, outcomes)
    else:
        summaries = {}
    rows = []
    for sub in subcategories:
        summary = summaries.get(sub.id)
        rows.append({
            "subcategory_id": sub.id,
            "name": sub.name,
            "slug": sub.slug,
            "card_count": sum(1 for c in flashcards if c.subcategory_id == sub.id),
            "summary": summary,
            "badge": badge_for(summary),
        })
    logger.debug("Overview for category %s: %d subcategories", category_id, len(rows))
    return rows
