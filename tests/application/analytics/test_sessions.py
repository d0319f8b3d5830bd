from datetime import timedelta

import pytest

from studypals.application.analytics.calculator import compute_analytics
from studypals.application.analytics.sessions import (
    add_activity,
    end_session,
    generate_session_id,
    session_from_quiz_completion,
    session_from_review_grades,
    start_session,
)
from studypals.domain.analytics.models import ActivityType, SessionMetadata
from studypals.domain.review.models import ReviewGrade


def test_session_ids_are_unique_and_prefixed():
    first, second = generate_session_id(), generate_session_id()
    assert first.startswith("session_")
    assert len(first) == len("session_") + 26
    assert first != second


class TestLifecycle:
    def test_start_session(self, now):
        session = start_session(
            "u1", now, deck_id="d1", subject="Math", metadata=SessionMetadata(learning_style="visual")
        )

        assert session.user_id == "u1"
        assert session.start_time == now
        assert session.end_time is None
        assert session.deck_id == "d1"
        assert session.subject == "Math"
        assert session.activities == ()
        assert session.metadata.learning_style == "visual"

    def test_add_activity_appends_in_order(self, now, view, answer):
        session = start_session("u1", now)
        session = add_activity(session, view(now))
        session = add_activity(session, answer(now + timedelta(seconds=5), True))

        assert [a.type for a in session.activities] == [ActivityType.CARD_VIEW, ActivityType.ANSWER]

    def test_add_activity_does_not_mutate(self, now, view):
        session = start_session("u1", now)
        add_activity(session, view(now))
        assert session.activities == ()

    def test_end_session_stamps_end_time(self, now):
        session = start_session("u1", now)
        ended = end_session(session, now + timedelta(minutes=12))
        assert ended.end_time == now + timedelta(minutes=12)
        assert session.end_time is None

    def test_end_twice_raises(self, now):
        ended = end_session(start_session("u1", now), now)
        with pytest.raises(ValueError, match="already ended"):
            end_session(ended, now)

    def test_add_after_end_raises(self, now, view):
        ended = end_session(start_session("u1", now), now)
        with pytest.raises(ValueError, match="already ended"):
            add_activity(ended, view(now))


class TestQuizCompletion:
    def test_marks_leading_answers_correct(self, now):
        session = session_from_quiz_completion(
            "u1", "Math", accuracy=0.75, time_spent_minutes=8, cards_count=4, now=now
        )

        assert session.subject == "Math"
        assert session.start_time == now - timedelta(minutes=8)
        assert session.end_time == now
        assert session.metadata.source == "quiz_completion"
        assert [a.was_correct for a in session.activities] == [True, True, True, False]
        assert all(a.type is ActivityType.ANSWER for a in session.activities)
        assert all(a.response_time_ms == 120_000 for a in session.activities)
        assert [a.timestamp for a in session.activities] == [
            now - timedelta(minutes=m) for m in (8, 6, 4, 2)
        ]

    def test_correct_count_rounds_half_up(self, now):
        session = session_from_quiz_completion(
            "u1", "Math", accuracy=0.5, time_spent_minutes=5, cards_count=5, now=now
        )
        assert sum(a.was_correct for a in session.activities) == 3

    def test_no_cards(self, now):
        session = session_from_quiz_completion(
            "u1", "Math", accuracy=1.0, time_spent_minutes=5, cards_count=0, now=now
        )
        assert session.activities == ()

    def test_feeds_the_aggregator(self, now):
        session = session_from_quiz_completion(
            "u1", "Math", accuracy=0.75, time_spent_minutes=8, cards_count=4, now=now
        )
        analytics = compute_analytics("u1", [session], [], now)
        assert analytics.overall_accuracy == 0.75
        assert analytics.total_study_time == 8
        assert analytics.subject_performance["Math"].accuracy == 0.75


def test_session_from_review_grades(now):
    grades = [ReviewGrade.AGAIN, ReviewGrade.HARD, ReviewGrade.GOOD, ReviewGrade.EASY]
    session = session_from_review_grades("u1", "Spanish", grades, time_spent_minutes=4, now=now)

    assert session.metadata.source == "review_session"
    assert [a.was_correct for a in session.activities] == [False, False, True, True]
    assert [a.data.grade for a in session.activities] == [
        "ReviewGrade.again",
        "ReviewGrade.hard",
        "ReviewGrade.good",
        "ReviewGrade.easy",
    ]
    assert all(a.data.subject == "Spanish" for a in session.activities)
    assert session.activities[0].card_id == "review_card_0"
