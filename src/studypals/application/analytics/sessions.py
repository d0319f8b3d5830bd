"""Study session lifecycle and synthetic sessions for quiz/review results."""

import logging
from dataclasses import replace
from datetime import datetime, timedelta

from ulid import ULID

from studypals.application.utils.rounding import round_half_up
from studypals.domain.analytics.models import (
    ActivityData,
    ActivityType,
    SessionActivity,
    SessionMetadata,
    StudySession,
)
from studypals.domain.review.models import ReviewGrade

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    """Generate a sortable session ID using ULID."""
    return f"session_{ULID()}"


def start_session(
    user_id: str,
    now: datetime,
    deck_id: str | None = None,
    subject: str | None = None,
    metadata: SessionMetadata | None = None,
) -> StudySession:
    session = StudySession(
        id=generate_session_id(),
        user_id=user_id,
        start_time=now,
        deck_id=deck_id,
        subject=subject,
        metadata=metadata or SessionMetadata(),
    )
    logger.info(f"Started session {session.id} for {user_id} (subject={subject})")
    return session


def add_activity(session: StudySession, activity: SessionActivity) -> StudySession:
    """Return a copy of `session` with `activity` appended."""
    if session.end_time is not None:
        raise ValueError(f"Session {session.id} has already ended")
    return replace(session, activities=session.activities + (activity,))


def end_session(session: StudySession, now: datetime) -> StudySession:
    """Stamp `end_time`. A session can only be ended once."""
    if session.end_time is not None:
        raise ValueError(f"Session {session.id} has already ended")
    logger.info(f"Ended session {session.id} with {len(session.activities)} activities")
    return replace(session, end_time=now)


def _spread_answers(
    user_id: str,
    subject: str,
    now: datetime,
    time_spent_minutes: int,
    outcomes: list[tuple[str, bool, str | None]],
    source: str,
) -> StudySession:
    """
    Build an ended session whose answers are spread evenly over the time spent.

    Args:
        outcomes: (card_id, was_correct, grade) per answer, in order.
    """
    count = len(outcomes)
    step = time_spent_minutes // count if count else 0
    response_ms = (time_spent_minutes * 60 * 1000) // count if count else 0

    activities = tuple(
        SessionActivity(
            type=ActivityType.ANSWER,
            timestamp=now - timedelta(minutes=time_spent_minutes - i * step),
            card_id=card_id,
            was_correct=was_correct,
            response_time_ms=response_ms,
            data=ActivityData(subject=subject, grade=grade),
        )
        for i, (card_id, was_correct, grade) in enumerate(outcomes)
    )

    return StudySession(
        id=generate_session_id(),
        user_id=user_id,
        subject=subject,
        start_time=now - timedelta(minutes=time_spent_minutes),
        end_time=now,
        activities=activities,
        metadata=SessionMetadata(source=source),
    )


def session_from_quiz_completion(
    user_id: str,
    subject: str,
    accuracy: float,
    time_spent_minutes: int,
    cards_count: int,
    now: datetime,
) -> StudySession:
    """
    Synthesize a session for a finished quiz.

    The first round(cards_count * accuracy) answers are marked correct.
    """
    correct = round_half_up(cards_count * accuracy)
    outcomes = [(f"quiz_card_{i}", i < correct, None) for i in range(cards_count)]
    return _spread_answers(
        user_id, subject, now, time_spent_minutes, outcomes, source="quiz_completion"
    )


def session_from_review_grades(
    user_id: str,
    subject: str,
    grades: list[ReviewGrade],
    time_spent_minutes: int,
    now: datetime,
) -> StudySession:
    """Synthesize a session for a batch of reviews; good/easy count as correct."""
    outcomes = [
        (
            f"review_card_{i}",
            grade in (ReviewGrade.GOOD, ReviewGrade.EASY),
            grade.qualified_name,
        )
        for i, grade in enumerate(grades)
    ]
    return _spread_answers(
        user_id, subject, now, time_spent_minutes, outcomes, source="review_session"
    )
