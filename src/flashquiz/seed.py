"""Seed the database with the bundled flashcard catalog."""
import json
from pathlib import Path

from flashquiz.catalog import insert_category, insert_flashcard, insert_subcategory, normalize_slug
from flashquiz.db import get_connection

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the database already holds any categories."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]
    conn.close()
    return count > 0


def load_bundled_catalog() -> dict:
    return json.loads((CONTENT_DIR / "catalog.json").read_text(encoding="utf-8"))


def seed_catalog(db_path: str, data: dict) -> dict:
    """Insert categories, subcategories and flashcards from a catalog dict.

    Categories and subcategories that already exist (by slug) are reused and
    cards whose question is already in their subcategory are skipped, so the
    same file can be loaded again without duplicates. Everything runs in one
    transaction: an error leaves the database untouched.
    """
    counts = {"categories": 0, "subcategories": 0, "flashcards": 0}
    conn = get_connection(db_path)
    try:
        for c_index, cat in enumerate(data.get("categories", [])):
            row = conn.execute(
                "SELECT id FROM categories WHERE slug = ?", (normalize_slug(cat["slug"]),)
            ).fetchone()
            if row:
                category_id = row["id"]
            else:
                category_id = insert_category(
                    conn, cat["name"], cat["slug"], cat.get("order", c_index),
                    description=cat.get("description", ""),
                )
                counts["categories"] += 1
            for s_index, sub in enumerate(cat.get("subcategories", [])):
                row = conn.execute(
                    "SELECT id FROM subcategories WHERE category_id = ? AND slug = ?",
                    (category_id, normalize_slug(sub["slug"])),
                ).fetchone()
                if row:
                    subcategory_id = row["id"]
                else:
                    subcategory_id = insert_subcategory(
                        conn, category_id, sub["name"], sub["slug"], sub.get("order", s_index),
                    )
                    counts["subcategories"] += 1
                existing = {
                    r["question"] for r in conn.execute(
                        "SELECT question FROM flashcards WHERE subcategory_id = ?", (subcategory_id,)
                    )
                }
                next_order = len(existing)
                for card in sub.get("flashcards", []):
                    question = card["question"].strip()
                    if question in existing:
                        continue
                    insert_flashcard(
                        conn, subcategory_id, question, card["options"],
                        card["correct_answer_index"], card.get("explanation", ""),
                        card.get("order", next_order),
                    )
                    existing.add(question)
                    next_order += 1
                    counts["flashcards"] += 1
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    return counts


def seed_all(db_path: str) -> None:
    """Load the bundled catalog once."""
    if is_seeded(db_path):
        return
    seed_catalog(db_path, load_bundled_catalog())
