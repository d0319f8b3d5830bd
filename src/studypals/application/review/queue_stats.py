"""Due-review selection and summary counts over a set of review states."""

from datetime import datetime

from studypals.domain.constants import LEARNING_INTERVAL_DAYS, MATURE_INTERVAL_DAYS
from studypals.domain.review.models import ReviewState


def due_reviews(states: list[ReviewState], now: datetime) -> list[ReviewState]:
    """States whose due time has passed."""
    return [s for s in states if s.due_at < now]


def review_stats(states: list[ReviewState], now: datetime) -> dict[str, int]:
    """
    Summarize review progress.

    Returns:
        Dict with `total`, `due`, `reviewedToday`, `learning` (interval < 7d)
        and `mature` (interval >= 21d).
    """
    today = now.date()
    reviewed_today = [
        s for s in states if s.last_reviewed_at is not None and s.last_reviewed_at.date() == today
    ]
    return {
        "total": len(states),
        "due": len(due_reviews(states, now)),
        "reviewedToday": len(reviewed_today),
        "learning": sum(1 for s in states if s.interval < LEARNING_INTERVAL_DAYS),
        "mature": sum(1 for s in states if s.interval >= MATURE_INTERVAL_DAYS),
    }
