"""
Domain models for spaced-repetition review scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from studypals.domain.constants import DEFAULT_EASE, DEFAULT_INTERVAL_DAYS


class ReviewGrade(str, Enum):
    """Self-reported recall quality for one review."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @property
    def qualified_name(self) -> str:
        """Stored form of the grade, e.g. `ReviewGrade.good`."""
        return f"{type(self).__name__}.{self.value}"


@dataclass(frozen=True)
class ReviewState:
    """
    Scheduling state of one studied item for one user.

    Attributes:
        card_id: The item this state schedules.
        user_id: Owner of the state.
        due_at: Next time the item should be reviewed.
        ease: SM-2 ease factor, kept within [1.3, 2.5] by the scheduler.
        interval: Current interval in days (>= 1).
        reps: Successful repetitions; reset to 0 on failure.
        last_grade: Grade of the most recent review, if any.
        last_reviewed_at: Time of the most recent review, if any.
    """

    card_id: str
    user_id: str
    due_at: datetime
    ease: float = DEFAULT_EASE
    interval: int = DEFAULT_INTERVAL_DAYS
    reps: int = 0
    last_grade: ReviewGrade | None = None
    last_reviewed_at: datetime | None = None
