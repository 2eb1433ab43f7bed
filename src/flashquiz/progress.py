"""Per-user flashcard outcome records, one per (user, flashcard)."""
from datetime import datetime

from flashquiz.db import get_connection
from flashquiz.models import OUTCOME_STATUSES, Outcome


def _now() -> str:
    return datetime.now().isoformat()


def find_outcomes(db_path: str, user_id: str, flashcard_ids: list[int]) -> list[Outcome]:
    if not user_id or not flashcard_ids:
        return []
    placeholders = ",".join("?" for _ in flashcard_ids)
    conn = get_connection(db_path)
    rows = conn.execute(
        f"SELECT * FROM flashcard_progress WHERE user_id = ? AND flashcard_id IN ({placeholders})",
        (user_id, *flashcard_ids),
    ).fetchall()
    conn.close()
    return [Outcome.from_row(r) for r in rows]


def upsert_outcome(
    db_path: str,
    user_id: str,
    flashcard_id: int,
    status: str,
    selected_option_index: int | None = None,
) -> Outcome:
    """Insert or overwrite the outcome for (user_id, flashcard_id).

    The selected option is only overwritten when a new one is given;
    created_at is kept from the first write.
    """
    if status not in OUTCOME_STATUSES:
        raise ValueError(f"Unknown outcome status: {status!r}")
    now = _now()
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO flashcard_progress
        (user_id, flashcard_id, status, selected_option_index, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(user_id, flashcard_id) DO UPDATE SET
            status = excluded.status,
            selected_option_index = COALESCE(excluded.selected_option_index, selected_option_index),
            updated_at = excluded.updated_at""",
        (user_id, flashcard_id, status, selected_option_index, now, now),
    )
    conn.commit()
    row = conn.execute(
        "SELECT * FROM flashcard_progress WHERE user_id = ? AND flashcard_id = ?",
        (user_id, flashcard_id),
    ).fetchone()
    conn.close()
    return Outcome.from_row(row)


def delete_outcomes_for_user(db_path: str, user_id: str) -> int:
    conn = get_connection(db_path)
    cursor = conn.execute("DELETE FROM flashcard_progress WHERE user_id = ?", (user_id,))
    conn.commit()
    deleted = cursor.rowcount
    conn.close()
    return deleted
