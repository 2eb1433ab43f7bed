import sqlite3
from unittest.mock import patch

from flashquiz.models import AnswerRecord
from flashquiz.progress import find_outcomes, upsert_outcome
from flashquiz.quiz import QuizSession
from flashquiz.sync import (
    clear_session_snapshot, load_session_snapshot, save_session_snapshot,
    sync_quiz, sync_session_progress,
)
from flashquiz.users import set_setting


def test_sync_saves_each_answer(seeded_db):
    answers = [AnswerRecord(1, 1, True), AnswerRecord(2, 0, False)]
    result = sync_session_progress(seeded_db, "user_1", answers)
    assert result.saved == 2
    assert result.failed == 0
    outcomes = {o.flashcard_id: o for o in find_outcomes(seeded_db, "user_1", [1, 2])}
    assert outcomes[1].status == "correct"
    assert outcomes[2].status == "incorrect"
    assert outcomes[2].selected_option_index == 0


def test_sync_skipped_without_user(seeded_db):
    result = sync_session_progress(seeded_db, None, [AnswerRecord(1, 1, True)])
    assert result.skipped is True
    assert result.saved == 0


def test_sync_continues_after_failure(seeded_db):
    def flaky_upsert(db_path, user_id, flashcard_id, status, selected_option_index=None):
        if flashcard_id == 2:
            raise sqlite3.OperationalError("database is locked")
        return upsert_outcome(db_path, user_id, flashcard_id, status, selected_option_index)

    answers = [AnswerRecord(1, 1, True), AnswerRecord(2, 0, False), AnswerRecord(3, 2, True)]
    with patch("flashquiz.sync.upsert_outcome", side_effect=flaky_upsert):
        result = sync_session_progress(seeded_db, "user_1", answers)
    assert result.saved == 2
    assert result.failed == 1
    assert result.failed_ids == [2]
    assert {o.flashcard_id for o in find_outcomes(seeded_db, "user_1", [1, 2, 3])} == {1, 3}


def test_sync_quiz_overwrites_previous_outcome(seeded_db, cards):
    upsert_outcome(seeded_db, "user_1", 1, "incorrect", selected_option_index=0)
    session = QuizSession()
    session.initialize(cards, find_outcomes(seeded_db, "user_1", [1, 2, 3]))
    session.select_answer(1)
    sync_quiz(seeded_db, "user_1", session)
    [outcome] = find_outcomes(seeded_db, "user_1", [1])
    assert outcome.status == "correct"
    assert outcome.selected_option_index == 1


def test_snapshot_save_load_clear(seeded_db, cards):
    session = QuizSession()
    session.initialize(cards)
    session.select_answer(1)
    save_session_snapshot(seeded_db, "user_1", 1, session)

    snapshot = load_session_snapshot(seeded_db, "user_1", 1)
    assert snapshot["flashcard_ids"] == [1, 2, 3]
    assert snapshot["answers"] == [{"flashcard_id": 1, "selected_option_index": 1}]
    assert load_session_snapshot(seeded_db, "user_2", 1) is None

    clear_session_snapshot(seeded_db, "user_1", 1)
    assert load_session_snapshot(seeded_db, "user_1", 1) is None


def test_unreadable_snapshot_is_discarded(seeded_db):
    set_setting(seeded_db, "quiz_snapshot:user_1:1", "{not json")
    assert load_session_snapshot(seeded_db, "user_1", 1) is None
