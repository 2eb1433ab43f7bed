"""Data classes for the flashcard domain model."""
import json
from dataclasses import dataclass, field
from typing import Optional

STATUS_CORRECT = "correct"
STATUS_INCORRECT = "incorrect"
OUTCOME_STATUSES = (STATUS_CORRECT, STATUS_INCORRECT)

OPTIONS_PER_CARD = 4


@dataclass
class Category:
    id: int
    name: str
    slug: str
    order: int = 0
    description: str = ""

    @classmethod
    def from_row(cls, row) -> "Category":
        return cls(
            id=row["id"], name=row["name"], slug=row["slug"],
            order=row["sort_order"], description=row["description"] or "",
        )


@dataclass
class Subcategory:
    id: int
    category_id: int
    name: str
    slug: str
    order: int = 0

    @classmethod
    def from_row(cls, row) -> "Subcategory":
        return cls(
            id=row["id"], category_id=row["category_id"], name=row["name"],
            slug=row["slug"], order=row["sort_order"],
        )


@dataclass(frozen=True)
class Flashcard:
    id: int
    subcategory_id: int
    question: str
    options: tuple
    correct_answer_index: int
    explanation: str = ""
    order: int = 0

    @classmethod
    def from_row(cls, row) -> "Flashcard":
        return cls(
            id=row["id"], subcategory_id=row["subcategory_id"],
            question=row["question"], options=tuple(json.loads(row["options"])),
            correct_answer_index=row["correct_answer_index"],
            explanation=row["explanation"], order=row["sort_order"],
        )


@dataclass
class Outcome:
    """Latest result of one user on one flashcard."""
    user_id: str
    flashcard_id: int
    status: str
    selected_option_index: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Outcome":
        return cls(
            user_id=row["user_id"], flashcard_id=row["flashcard_id"],
            status=row["status"], selected_option_index=row["selected_option_index"],
            created_at=row["created_at"], updated_at=row["updated_at"],
        )


@dataclass
class User:
    id: int
    external_id: str
    email: str
    plan: str = "free"
    customer_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "User":
        return cls(
            id=row["id"], external_id=row["external_id"], email=row["email"],
            plan=row["plan"], customer_id=row["customer_id"],
            created_at=row["created_at"], updated_at=row["updated_at"],
        )


@dataclass(frozen=True)
class AnswerRecord:
    flashcard_id: int
    selected_option_index: int
    is_correct: bool

    @property
    def status(self) -> str:
        return STATUS_CORRECT if self.is_correct else STATUS_INCORRECT


@dataclass(frozen=True)
class ScoreSnapshot:
    current: int
    total: int
    answered_count: int
    correct_count: int
    incorrect_count: int
    percentage: int


@dataclass(frozen=True)
class SubcategorySummary:
    completed: bool = False
    score: int = 0


@dataclass
class SyncResult:
    saved: int = 0
    failed: int = 0
    skipped: bool = False
    failed_ids: list = field(default_factory=list)


def percent(part: int, whole: int) -> int:
    """Integer percentage rounded half up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (2 * whole)
