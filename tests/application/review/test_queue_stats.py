from datetime import timedelta

from studypals.application.review.queue_stats import due_reviews, review_stats
from studypals.domain.review.models import ReviewGrade, ReviewState


def _state(card_id, now, due_in_days, interval, reviewed_days_ago=None):
    return ReviewState(
        card_id=card_id,
        user_id="u1",
        due_at=now + timedelta(days=due_in_days),
        interval=interval,
        last_grade=ReviewGrade.GOOD if reviewed_days_ago is not None else None,
        last_reviewed_at=(
            now - timedelta(days=reviewed_days_ago) if reviewed_days_ago is not None else None
        ),
    )


def test_due_reviews_only_returns_past_due(now):
    overdue = _state("a", now, -1, 1)
    upcoming = _state("b", now, 3, 3)
    assert due_reviews([overdue, upcoming], now) == [overdue]


def test_review_stats_counts(now):
    states = [
        _state("a", now, -1, 1, reviewed_days_ago=1),
        _state("b", now, 5, 6, reviewed_days_ago=0),
        _state("c", now, 20, 21, reviewed_days_ago=0),
        _state("d", now, 10, 10),
    ]

    stats = review_stats(states, now)

    assert stats == {
        "total": 4,
        "due": 1,
        "reviewedToday": 2,
        "learning": 2,
        "mature": 1,
    }


def test_review_stats_empty(now):
    assert review_stats([], now) == {
        "total": 0,
        "due": 0,
        "reviewedToday": 0,
        "learning": 0,
        "mature": 0,
    }
