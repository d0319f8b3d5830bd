"""
Domain models for study sessions and derived analytics.

These are pure data structures with no I/O or external dependencies.
The free-form `data`/`metadata` maps of the persisted schema are modelled as
typed extension records: the keys the aggregator reads are real fields, and
everything else rides along in `extra`.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from studypals.domain.constants import WEEKS_ANALYZED


class ActivityType(str, Enum):
    CARD_VIEW = "card_view"
    ANSWER = "answer"
    HINT_USED = "hint_used"
    SKIP = "skip"


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass(frozen=True)
class ActivityData:
    """Known keys of an activity's `data` map plus an escape hatch."""

    subject: str | None = None
    grade: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionActivity:
    """
    An immutable timestamped event within a study session.

    Attributes:
        type: What happened (card_view, answer, hint_used, skip).
        timestamp: When it happened.
        card_id: Card involved, if any.
        was_correct: Only meaningful for answers.
        response_time_ms: Time to answer, if recorded.
    """

    type: ActivityType
    timestamp: datetime
    card_id: str | None = None
    was_correct: bool | None = None
    response_time_ms: int | None = None
    data: ActivityData = field(default_factory=ActivityData)


@dataclass(frozen=True)
class SessionMetadata:
    """Known keys of a session's `metadata` map plus an escape hatch."""

    card_difficulties: dict[str, int] | None = None
    learning_style: str | None = None
    source: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StudySession:
    """
    A bounded sequence of activities by a single user.

    `end_time` is None while the session is in progress.
    """

    id: str
    user_id: str
    start_time: datetime
    end_time: datetime | None = None
    deck_id: str | None = None
    subject: str | None = None
    activities: tuple[SessionActivity, ...] = ()
    metadata: SessionMetadata = field(default_factory=SessionMetadata)

    def duration_minutes(self, now: datetime) -> int:
        """Whole minutes from start to end, or to `now` while in progress."""
        end = self.end_time if self.end_time is not None else now
        return int((end - self.start_time).total_seconds() // 60)


@dataclass(frozen=True)
class QuizResult:
    """A completed quiz as seen by the aggregator."""

    deck_id: str | None
    start_time: datetime
    final_score: float | None = None
    subject: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class SubjectPerformance:
    subject: str
    accuracy: float
    total_cards: int
    total_quizzes: int
    study_time_minutes: int
    last_studied: datetime
    recent_scores: list[float] = field(default_factory=list)  # newest first
    difficulty_breakdown: dict[str, int] = field(default_factory=dict)
    average_response_time: float = 0.0  # seconds


@dataclass(frozen=True)
class LearningPatterns:
    preferred_study_hours: dict[str, int] = field(default_factory=dict)
    learning_style_effectiveness: dict[str, float] = field(default_factory=dict)
    average_session_length: float = 0.0  # minutes
    preferred_cards_per_session: int = 0
    topic_interest: dict[str, float] = field(default_factory=dict)
    common_mistake_patterns: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class WeeklyStats:
    week_start: datetime
    average_accuracy: float = 0.0
    total_study_time: int = 0  # minutes
    cards_studied: int = 0
    quizzes_completed: int = 0


@dataclass(frozen=True)
class PerformanceTrend:
    direction: TrendDirection = TrendDirection.STABLE
    change_rate: float = 0.0  # percent per week
    weeks_analyzed: int = WEEKS_ANALYZED
    weekly_data: list[WeeklyStats] = field(default_factory=list)  # oldest first


@dataclass(frozen=True)
class StudyAnalytics:
    """
    Aggregate statistics for one user.

    `total_answers_given`/`total_correct_answers` are raw counters so that
    incremental folds stay exact; `overall_accuracy` is always derived from
    them.
    """

    user_id: str
    last_updated: datetime
    overall_accuracy: float = 0.0
    total_study_time: int = 0  # minutes
    total_cards_studied: int = 0
    total_quizzes_taken: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    total_answers_given: int = 0
    total_correct_answers: int = 0
    subject_performance: dict[str, SubjectPerformance] = field(default_factory=dict)
    learning_patterns: LearningPatterns = field(default_factory=LearningPatterns)
    recent_trend: PerformanceTrend = field(default_factory=PerformanceTrend)
