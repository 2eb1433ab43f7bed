"""Write-back of session answers and resumable session snapshots."""
import json
import logging

from flashquiz.models import SyncResult
from flashquiz.progress import upsert_outcome
from flashquiz.quiz import QuizSession
from flashquiz.users import delete_setting, get_setting, set_setting

logger = logging.getLogger(__name__)


def sync_session_progress(db_path: str, user_id: str | None, answers: list) -> SyncResult:
    """Upsert one outcome per answer; a failed upsert does not stop the rest."""
    if not user_id:
        logger.warning("No signed-in user, skipping progress sync")
        return SyncResult(skipped=True)

    result = SyncResult()
    for answer in answers:
        try:
            upsert_outcome(
                db_path, user_id, answer.flashcard_id, answer.status,
                selected_option_index=answer.selected_option_index,
            )
            result.saved += 1
        except Exception:
            logger.exception("Failed to save progress for flashcard %s", answer.flashcard_id)
            result.failed += 1
            result.failed_ids.append(answer.flashcard_id)
    logger.info(
        "Saved %d progress records for %s (%d failed)", result.saved, user_id, result.failed
    )
    return result


def sync_quiz(db_path: str, user_id: str | None, session: QuizSession) -> SyncResult:
    return sync_session_progress(db_path, user_id, session.answers)


def _snapshot_key(user_id: str, subcategory_id: int) -> str:
    return f"quiz_snapshot:{user_id}:{subcategory_id}"


def save_session_snapshot(db_path: str, user_id: str, subcategory_id: int, session: QuizSession) -> None:
    set_setting(db_path, _snapshot_key(user_id, subcategory_id), json.dumps(session.snapshot()))


def load_session_snapshot(db_path: str, user_id: str, subcategory_id: int) -> dict | None:
    raw = get_setting(db_path, _snapshot_key(user_id, subcategory_id))
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Discarding unreadable quiz snapshot for subcategory %s", subcategory_id)
        return None


def clear_session_snapshot(db_path: str, user_id: str, subcategory_id: int) -> None:
    delete_setting(db_path, _snapshot_key(user_id, subcategory_id))
