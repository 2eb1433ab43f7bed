"""Loaders that fetch everything a category or quiz screen needs."""
import logging
import sqlite3
from dataclasses import dataclass, field

from flashquiz.catalog import (
    find_category_by_slug, find_flashcards_by_subcategory, find_subcategory_by_slug,
)
from flashquiz.dashboard import get_category_overview
from flashquiz.exceptions import CatalogNotFoundError
from flashquiz.models import Category, Subcategory
from flashquiz.progress import find_outcomes

logger = logging.getLogger(__name__)


@dataclass
class CategoryPageData:
    category: Category
    rows: list = field(default_factory=list)


@dataclass
class QuizPageData:
    category: Category
    subcategory: Subcategory
    flashcards: list = field(default_factory=list)
    outcomes: list = field(default_factory=list)


def load_category_page(db_path: str, category_slug: str, user_id: str | None) -> CategoryPageData:
    category = find_category_by_slug(db_path, category_slug)
    if category is None:
        raise CatalogNotFoundError(f"Category {category_slug!r} not found")
    try:
        rows = get_category_overview(db_path, user_id, category.id)
    except sqlite3.Error:
        logger.exception("Database error fetching subcategories for %s", category.slug)
        rows = []
    return CategoryPageData(category=category, rows=rows)


def load_quiz_page(
    db_path: str, category_slug: str, subcategory_slug: str, user_id: str | None
) -> QuizPageData:
    category = find_category_by_slug(db_path, category_slug)
    if category is None:
        raise CatalogNotFoundError(f"Category {category_slug!r} not found")
    subcategory = find_subcategory_by_slug(db_path, category.id, subcategory_slug)
    if subcategory is None:
        raise CatalogNotFoundError(
            f"Subcategory {subcategory_slug!r} not found under category {category.name!r}"
        )
    flashcards = find_flashcards_by_subcategory(db_path, subcategory.id)
    outcomes = find_outcomes(db_path, user_id, [c.id for c in flashcards]) if user_id else []
    logger.info(
        "Loaded %d flashcards and %d progress records for %s/%s",
        len(flashcards), len(outcomes), category.slug, subcategory.slug,
    )
    return QuizPageData(category, subcategory, flashcards, outcomes)
