from datetime import datetime, timedelta, timezone

import pytest

from studypals.domain.analytics.models import (
    ActivityType,
    SessionActivity,
    SessionMetadata,
    StudySession,
)

NOW = datetime(2025, 1, 3, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed reference time: 2025-01-03 18:00 UTC."""
    return NOW


@pytest.fixture
def answer():
    """Factory for answer activities."""

    def _answer(
        at: datetime,
        correct: bool,
        card_id: str | None = "c1",
        response_time_ms: int | None = None,
    ) -> SessionActivity:
        return SessionActivity(
            type=ActivityType.ANSWER,
            timestamp=at,
            card_id=card_id,
            was_correct=correct,
            response_time_ms=response_time_ms,
        )

    return _answer


@pytest.fixture
def view():
    """Factory for card_view activities."""

    def _view(at: datetime, card_id: str = "c1") -> SessionActivity:
        return SessionActivity(type=ActivityType.CARD_VIEW, timestamp=at, card_id=card_id)

    return _view


@pytest.fixture
def make_session():
    """Factory for ended sessions; `minutes=None` leaves the session open."""
    counter = iter(range(1, 10_000))

    def _make(
        start: datetime,
        minutes: int | None = 30,
        subject: str | None = "Math",
        deck_id: str | None = None,
        activities: list[SessionActivity] | None = None,
        metadata: SessionMetadata | None = None,
        user_id: str = "u1",
    ) -> StudySession:
        return StudySession(
            id=f"s{next(counter)}",
            user_id=user_id,
            start_time=start,
            end_time=start + timedelta(minutes=minutes) if minutes is not None else None,
            deck_id=deck_id,
            subject=subject,
            activities=tuple(activities or ()),
            metadata=metadata or SessionMetadata(),
        )

    return _make
