"""Quiz session state machine for one pass through a list of flashcards.

Every transition is synchronous and total: calls that do not apply to the
current state are ignored rather than raising, so the UI can dispatch input
without pre-checking it.
"""
from dataclasses import replace
from datetime import datetime

from flashquiz.models import (
    AnswerRecord, Flashcard, Outcome, ScoreSnapshot, percent,
)

UNINITIALIZED = "uninitialized"
PLAYING = "playing"
COMPLETED = "completed"


class QuizSession:
    """Owns the minimal state of one quiz attempt.

    :param require_reveal: when True, ``advance`` only moves on once the
        current answer has been revealed.
    """

    def __init__(self, require_reveal: bool = True):
        self.require_reveal = require_reveal
        self.clear()

    def clear(self) -> None:
        """Drop everything and return to the uninitialized state."""
        self._flashcards: tuple = ()
        self._position = 0
        self._answers: dict[int, AnswerRecord] = {}
        self._progress: dict[int, Outcome] = {}
        self._completed = False
        self._show_results = False
        self._initialized = False

    # --- Transitions ---

    def initialize(
        self,
        flashcards: list[Flashcard],
        prior_outcomes: list[Outcome] | None = None,
        snapshot: dict | None = None,
    ) -> bool:
        """Replace the session with a new flashcard list.

        Returns False when the session already holds the same list and no
        snapshot is given; nothing changes in that case.
        """
        flashcards = tuple(flashcards or ())
        ids = tuple(card.id for card in flashcards)
        if self._initialized and snapshot is None and ids == self._flashcard_ids():
            return False

        card_ids = set(ids)
        self._flashcards = flashcards
        self._position = 0
        self._answers = {}
        self._progress = {
            o.flashcard_id: o for o in (prior_outcomes or []) if o.flashcard_id in card_ids
        }
        self._completed = not flashcards
        self._initialized = True
        if snapshot is not None:
            self._restore(snapshot)
        self._show_results = self.is_current_answered
        return True

    def select_answer(self, option_index: int) -> None:
        card = self.current_flashcard
        if card is None or card.id in self._answers:
            return
        if not isinstance(option_index, int) or isinstance(option_index, bool):
            return
        if not 0 <= option_index < len(card.options):
            return
        is_correct = option_index == card.correct_answer_index
        answer = AnswerRecord(card.id, option_index, is_correct)
        self._answers[card.id] = answer
        self._show_results = True
        self._record_progress(answer)

    def advance(self) -> None:
        if self.status != PLAYING:
            return
        if self.require_reveal and not self._show_results:
            return
        if self._position + 1 >= len(self._flashcards):
            self._completed = True
            return
        self._move_to(self._position + 1)

    next_flashcard = advance

    def previous(self) -> None:
        if self.status != PLAYING:
            return
        self._move_to(max(0, self._position - 1))

    def jump_to_question(self, index: int) -> None:
        if self.status != PLAYING:
            return
        if not isinstance(index, int) or not 0 <= index < len(self._flashcards):
            return
        self._move_to(index)

    def reset(self) -> None:
        """Start over on the same flashcards, forgetting this session's answers."""
        if not self._initialized:
            return
        self._position = 0
        self._answers = {}
        self._completed = not self._flashcards
        self._show_results = False

    def show_current_results(self) -> None:
        if self.status == PLAYING:
            self._show_results = True

    def hide_current_results(self) -> None:
        if self.status == PLAYING:
            self._show_results = False

    # --- Read-only accessors ---

    @property
    def status(self) -> str:
        if not self._initialized:
            return UNINITIALIZED
        return COMPLETED if self._completed else PLAYING

    @property
    def flashcards(self) -> tuple:
        return self._flashcards

    @property
    def total(self) -> int:
        return len(self._flashcards)

    @property
    def position(self) -> int:
        return self._position

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED

    @property
    def show_results(self) -> bool:
        return self._show_results

    @property
    def current_flashcard(self) -> Flashcard | None:
        if self.status != PLAYING:
            return None
        return self._flashcards[self._position]

    @property
    def current_answer(self) -> AnswerRecord | None:
        card = self.current_flashcard
        return self._answers.get(card.id) if card else None

    @property
    def is_current_answered(self) -> bool:
        return self.current_answer is not None

    @property
    def answers(self) -> list[AnswerRecord]:
        return list(self._answers.values())

    @property
    def progress(self) -> list[Outcome]:
        return list(self._progress.values())

    def answered_indices(self) -> set[int]:
        return {i for i, card in enumerate(self._flashcards) if card.id in self._answers}

    def correct_indices(self) -> set[int]:
        return {
            i for i, card in enumerate(self._flashcards)
            if card.id in self._answers and self._answers[card.id].is_correct
        }

    def question_status(self, index: int) -> str | None:
        """Status shown for a question: this session's answer, else the prior outcome."""
        if not 0 <= index < len(self._flashcards):
            return None
        card_id = self._flashcards[index].id
        if card_id in self._answers:
            return self._answers[card_id].status
        prior = self._progress.get(card_id)
        return prior.status if prior else None

    def score(self) -> ScoreSnapshot:
        total = len(self._flashcards)
        correct = sum(1 for a in self._answers.values() if a.is_correct)
        answered = len(self._answers)
        return ScoreSnapshot(
            current=self._position + 1 if total else 0,
            total=total,
            answered_count=answered,
            correct_count=correct,
            incorrect_count=answered - correct,
            percentage=percent(correct, total),
        )

    # --- Snapshots ---

    def snapshot(self) -> dict:
        """JSON-ready state for resuming this session later."""
        return {
            "flashcard_ids": list(self._flashcard_ids()),
            "position": self._position,
            "answers": [
                {"flashcard_id": a.flashcard_id, "selected_option_index": a.selected_option_index}
                for a in self._answers.values()
            ],
            "completed": self._completed,
            "total": len(self._flashcards),
        }

    # --- Internals ---

    def _flashcard_ids(self) -> tuple:
        return tuple(card.id for card in self._flashcards)

    def _move_to(self, index: int) -> None:
        self._position = index
        self._show_results = self.is_current_answered

    def _record_progress(self, answer: AnswerRecord) -> None:
        now = datetime.now().isoformat()
        existing = self._progress.get(answer.flashcard_id)
        if existing:
            self._progress[answer.flashcard_id] = replace(
                existing,
                status=answer.status,
                selected_option_index=answer.selected_option_index,
                updated_at=now,
            )
        else:
            self._progress[answer.flashcard_id] = Outcome(
                user_id="",
                flashcard_id=answer.flashcard_id,
                status=answer.status,
                selected_option_index=answer.selected_option_index,
                created_at=now,
                updated_at=now,
            )

    def _restore(self, snapshot: dict) -> None:
        ids = list(self._flashcard_ids())
        if list(snapshot.get("flashcard_ids") or []) != ids or not ids:
            return
        cards = {card.id: card for card in self._flashcards}
        for entry in snapshot.get("answers") or []:
            card = cards.get(entry.get("flashcard_id"))
            selected = entry.get("selected_option_index")
            if card is None or card.id in self._answers:
                continue
            if not isinstance(selected, int) or isinstance(selected, bool):
                continue
            if not 0 <= selected < len(card.options):
                continue
            self._answers[card.id] = AnswerRecord(
                card.id, selected, selected == card.correct_answer_index
            )
        position = snapshot.get("position", 0)
        if not isinstance(position, int):
            position = 0
        self._position = min(max(position, 0), len(ids) - 1)
        self._completed = bool(snapshot.get("completed"))
