from datetime import date, datetime, timedelta, timezone

import pytest

from studypals.application.analytics.statistics import (
    accuracy_of,
    current_streak,
    longest_streak,
    session_minutes,
    study_dates,
    trend_from_weeks,
    week_windows,
)
from studypals.domain.analytics.models import TrendDirection, WeeklyStats


def _day(d: int, hour: int = 9) -> datetime:
    return datetime(2025, 1, d, hour, tzinfo=timezone.utc)


class TestStreaks:
    def test_three_consecutive_days_ending_today(self, make_session):
        sessions = [make_session(_day(1)), make_session(_day(2)), make_session(_day(3))]
        dates = study_dates(sessions)

        assert current_streak(dates, date(2025, 1, 3)) == 3
        assert longest_streak(dates) == 3

    def test_gap_breaks_current_streak_but_not_longest(self, make_session):
        sessions = [make_session(_day(d)) for d in (1, 2, 3, 5)]
        dates = study_dates(sessions)

        assert current_streak(dates, date(2025, 1, 5)) == 1
        assert longest_streak(dates) == 3

    def test_streak_counts_from_yesterday(self):
        dates = [date(2025, 1, 4), date(2025, 1, 3)]
        assert current_streak(dates, date(2025, 1, 5)) == 2

    def test_stale_history_has_no_current_streak(self):
        dates = [date(2025, 1, 1)]
        assert current_streak(dates, date(2025, 1, 5)) == 0
        assert longest_streak(dates) == 1

    def test_multiple_sessions_same_day_count_once(self, make_session):
        sessions = [make_session(_day(3, 8)), make_session(_day(3, 20))]
        assert study_dates(sessions) == [date(2025, 1, 3)]

    def test_empty(self):
        assert current_streak([], date(2025, 1, 3)) == 0
        assert longest_streak([]) == 0


class TestSessionHelpers:
    def test_session_minutes_truncates(self, make_session, now):
        session = make_session(now, minutes=None)
        assert session_minutes(session) == 0

        ended = make_session(now, minutes=45)
        assert session_minutes(ended) == 45

    def test_duration_runs_to_now_while_open(self, make_session, now):
        session = make_session(now, minutes=None)
        assert session.duration_minutes(now + timedelta(minutes=12, seconds=40)) == 12
        assert session.duration_minutes(now) == 0

    def test_duration_of_ended_session_ignores_now(self, make_session, now):
        ended = make_session(now, minutes=45)
        assert ended.duration_minutes(now + timedelta(days=1)) == 45
        assert session_minutes(ended) == ended.duration_minutes(now) == 45

    def test_accuracy_ignores_ungraded_answers(self, answer, view, now):
        activities = [
            answer(now, True),
            answer(now, False),
            view(now),
        ]
        assert accuracy_of(activities) == 0.5
        assert accuracy_of([view(now)]) == 0.0


class TestTrend:
    def test_week_windows_are_chronological_and_contiguous(self, now):
        windows = week_windows(now, 4)

        assert len(windows) == 4
        assert windows[0][0] == now - timedelta(days=28)
        assert windows[-1][1] == now
        for (_, end), (start, _) in zip(windows, windows[1:]):
            assert end == start

    def _weeks(self, now, accuracies):
        return [
            WeeklyStats(week_start=now, average_accuracy=a, cards_studied=1 if a else 0)
            for a in accuracies
        ]

    def test_improving(self, now):
        direction, rate = trend_from_weeks(self._weeks(now, [0.5, 0.5, 0.8, 0.8]))
        assert direction is TrendDirection.IMPROVING
        assert rate == pytest.approx(15.0)

    def test_declining(self, now):
        direction, rate = trend_from_weeks(self._weeks(now, [0.9, 0.9, 0.6, 0.6]))
        assert direction is TrendDirection.DECLINING
        assert rate < 0

    def test_small_change_is_stable(self, now):
        direction, _ = trend_from_weeks(self._weeks(now, [0.70, 0.72, 0.73, 0.74]))
        assert direction is TrendDirection.STABLE

    def test_single_active_week_is_stable(self, now):
        assert trend_from_weeks(self._weeks(now, [0, 0, 0, 0.9])) == (TrendDirection.STABLE, 0.0)

    def test_zero_first_half_has_no_rate(self, now):
        weeks = [
            WeeklyStats(week_start=now, average_accuracy=0.0, cards_studied=3),
            WeeklyStats(week_start=now, average_accuracy=0.8, cards_studied=3),
        ]
        direction, rate = trend_from_weeks(weeks)
        assert direction is TrendDirection.IMPROVING
        assert rate == 0.0
