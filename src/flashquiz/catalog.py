"""Catalog of categories, subcategories and flashcards."""
import json
import logging

from flashquiz.db import get_connection
from flashquiz.exceptions import InvalidFlashcardError
from flashquiz.models import OPTIONS_PER_CARD, Category, Flashcard, Subcategory

logger = logging.getLogger(__name__)


def normalize_slug(slug: str) -> str:
    cleaned = (slug or "").strip().lower()
    if not cleaned:
        raise InvalidFlashcardError("Slug must not be empty.")
    return cleaned


def validate_flashcard(options: list, correct_answer_index: int) -> None:
    """Reject cards that do not have exactly 4 options and a valid answer index."""
    if not isinstance(options, (list, tuple)) or len(options) != OPTIONS_PER_CARD:
        raise InvalidFlashcardError(f"Flashcards must have exactly {OPTIONS_PER_CARD} options.")
    if not all(isinstance(o, str) and o.strip() for o in options):
        raise InvalidFlashcardError("Flashcard options must be non-empty strings.")
    if not isinstance(correct_answer_index, int) or isinstance(correct_answer_index, bool):
        raise InvalidFlashcardError("Correct answer index must be an integer.")
    if not 0 <= correct_answer_index < len(options):
        raise InvalidFlashcardError(
            "Correct answer index must be a valid index within the options array."
        )


def _validate_order(order: int) -> None:
    if order < 0:
        raise InvalidFlashcardError("Order must be zero or greater.")


# --- Authoring ---


def insert_category(conn, name: str, slug: str, order: int, description: str = "") -> int:
    """Insert on an open connection; the caller commits."""
    _validate_order(order)
    cursor = conn.execute(
        "INSERT INTO categories (name, slug, description, sort_order) VALUES (?, ?, ?, ?)",
        (name.strip(), normalize_slug(slug), (description or "").strip(), order),
    )
    return cursor.lastrowid


def insert_subcategory(conn, category_id: int, name: str, slug: str, order: int) -> int:
    _validate_order(order)
    cursor = conn.execute(
        "INSERT INTO subcategories (category_id, name, slug, sort_order) VALUES (?, ?, ?, ?)",
        (category_id, name.strip(), normalize_slug(slug), order),
    )
    return cursor.lastrowid


def insert_flashcard(
    conn,
    subcategory_id: int,
    question: str,
    options: list,
    correct_answer_index: int,
    explanation: str,
    order: int,
) -> int:
    validate_flashcard(options, correct_answer_index)
    _validate_order(order)
    cursor = conn.execute(
        """INSERT INTO flashcards
        (subcategory_id, question, options, correct_answer_index, explanation, sort_order)
        VALUES (?, ?, ?, ?, ?, ?)""",
        (subcategory_id, question.strip(), json.dumps(list(options)),
         correct_answer_index, (explanation or "").strip(), order),
    )
    return cursor.lastrowid


def add_category(db_path: str, name: str, slug: str, order: int, description: str = "") -> int:
    conn = get_connection(db_path)
    try:
        new_id = insert_category(conn, name, slug, order, description)
        conn.commit()
    finally:
        conn.close()
    return new_id


def add_subcategory(db_path: str, category_id: int, name: str, slug: str, order: int) -> int:
    conn = get_connection(db_path)
    try:
        new_id = insert_subcategory(conn, category_id, name, slug, order)
        conn.commit()
    finally:
        conn.close()
    return new_id


def add_flashcard(
    db_path: str,
    subcategory_id: int,
    question: str,
    options: list,
    correct_answer_index: int,
    explanation: str,
    order: int,
) -> int:
    conn = get_connection(db_path)
    try:
        new_id = insert_flashcard(
            conn, subcategory_id, question, options, correct_answer_index, explanation, order,
        )
        conn.commit()
    finally:
        conn.close()
    return new_id


# --- Reads ---


def find_category_by_slug(db_path: str, slug: str) -> Category | None:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM categories WHERE slug = ?", ((slug or "").strip().lower(),)
    ).fetchone()
    conn.close()
    return Category.from_row(row) if row else None


def find_subcategory_by_slug(db_path: str, category_id: int, slug: str) -> Subcategory | None:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM subcategories WHERE category_id = ? AND slug = ?",
        (category_id, (slug or "").strip().lower()),
    ).fetchone()
    conn.close()
    return Subcategory.from_row(row) if row else None


def find_subcategories_by_category(db_path: str, category_id: int) -> list[Subcategory]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM subcategories WHERE category_id = ? ORDER BY sort_order, name",
        (category_id,),
    ).fetchall()
    conn.close()
    return [Subcategory.from_row(r) for r in rows]


def find_flashcards_by_subcategory(db_path: str, subcategory_id: int) -> list[Flashcard]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM flashcards WHERE subcategory_id = ? ORDER BY sort_order, id",
        (subcategory_id,),
    ).fetchall()
    conn.close()
    return [Flashcard.from_row(r) for r in rows]


def list_categories(db_path: str) -> list[Category]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM categories ORDER BY sort_order, name").fetchall()
    conn.close()
    return [Category.from_row(r) for r in rows]


def list_subcategories(db_path: str) -> list[Subcategory]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM subcategories ORDER BY sort_order, name").fetchall()
    conn.close()
    return [Subcategory.from_row(r) for r in rows]


def list_flashcards(db_path: str, subcategory_ids: list[int]) -> list[Flashcard]:
    """All flashcards under the given subcategories, in display order."""
    if not subcategory_ids:
        return []
    placeholders = ",".join("?" for _ in subcategory_ids)
    conn = get_connection(db_path)
    rows = conn.execute(
        f"SELECT * FROM flashcards WHERE subcategory_id IN ({placeholders}) "
        "ORDER BY subcategory_id, sort_order, id",
        tuple(subcategory_ids),
    ).fetchall()
    conn.close()
    return [Flashcard.from_row(r) for r in rows]


def get_navigation(db_path: str) -> list[dict]:
    """Categories with their subcategory links, for the browse menu."""
    categories = list_categories(db_path)
    subcategories = list_subcategories(db_path)
    nav = []
    for category in categories:
        url = f"/flashcards/{category.slug}"
        items = [
            {
                "title": sub.name,
                "slug": sub.slug,
                "url": f"{url}/{sub.slug}",
                "subcategory_id": sub.id,
            }
            for sub in subcategories
            if sub.category_id == category.id
        ]
        nav.append({"title": category.name, "slug": category.slug, "url": url, "items": items})
    logger.debug("Built navigation for %d categories", len(nav))
    return nav
