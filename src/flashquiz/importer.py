"""Import flashcard catalogs from JSON or YAML files."""
import json
import logging
from pathlib import Path

from flashquiz.catalog import normalize_slug, validate_flashcard
from flashquiz.exceptions import InvalidFlashcardError
from flashquiz.seed import seed_catalog

logger = logging.getLogger(__name__)


def read_catalog_file(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    else:
        raise InvalidFlashcardError(f"Unsupported catalog format: {suffix or path.name}")
    if not isinstance(data, dict) or not isinstance(data.get("categories"), list):
        raise InvalidFlashcardError("Catalog must contain a 'categories' list.")
    return data


def validate_catalog(data: dict) -> None:
    """Check every entry before anything is written."""
    names, slugs = set(), set()
    for cat in data["categories"]:
        if not cat.get("name"):
            raise InvalidFlashcardError("Every category needs a name.")
        name = cat["name"].strip()
        cat_slug = normalize_slug(cat.get("slug", ""))
        if name in names:
            raise InvalidFlashcardError(f"Duplicate category name {name!r}.")
        if cat_slug in slugs:
            raise InvalidFlashcardError(f"Duplicate category slug {cat_slug!r}.")
        names.add(name)
        slugs.add(cat_slug)
        seen = set()
        for sub in cat.get("subcategories", []):
            if not sub.get("name"):
                raise InvalidFlashcardError(f"Subcategory without a name in {cat['name']!r}.")
            slug = normalize_slug(sub.get("slug", ""))
            if slug in seen:
                raise InvalidFlashcardError(f"Duplicate subcategory slug {slug!r} in {cat['name']!r}.")
            seen.add(slug)
            for card in sub.get("flashcards", []):
                if not card.get("question"):
                    raise InvalidFlashcardError(f"Flashcard without a question in {sub['name']!r}.")
                validate_flashcard(card.get("options"), card.get("correct_answer_index"))


def import_catalog(db_path: str, file_path: str) -> dict:
    """Validate and load a catalog file; returns counts of inserted rows."""
    data = read_catalog_file(file_path)
    validate_catalog(data)
    counts = seed_catalog(db_path, data)
    logger.info("Imported %s: %s", Path(file_path).name, counts)
    return {"filename": Path(file_path).name, **counts}
