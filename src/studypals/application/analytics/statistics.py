"""
Shared statistical helpers for the aggregator and the incremental updater.

Streak and trend math, plus small reducers over session activities.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from studypals.domain.analytics.models import (
    ActivityType,
    SessionActivity,
    StudySession,
    TrendDirection,
    WeeklyStats,
)
from studypals.domain.constants import TREND_THRESHOLD, WEEKS_ANALYZED

# ---------- Session reducers ----------


def activities_of(sessions: Iterable[StudySession]) -> list[SessionActivity]:
    return [a for s in sessions for a in s.activities]


def graded_answers(activities: Iterable[SessionActivity]) -> list[SessionActivity]:
    """Answer activities that carry a correctness flag."""
    return [a for a in activities if a.type is ActivityType.ANSWER and a.was_correct is not None]


def count_correct(answers: Iterable[SessionActivity]) -> int:
    return sum(1 for a in answers if a.was_correct is True)


def accuracy_of(activities: Iterable[SessionActivity]) -> float:
    """Correct / graded answers, 0.0 when nothing was answered."""
    answers = graded_answers(activities)
    if not answers:
        return 0.0
    return count_correct(answers) / len(answers)


def count_card_views(activities: Iterable[SessionActivity]) -> int:
    return sum(1 for a in activities if a.type is ActivityType.CARD_VIEW)


def response_times_ms(activities: Iterable[SessionActivity]) -> list[int]:
    return [
        a.response_time_ms
        for a in activities
        if a.type is ActivityType.ANSWER and a.response_time_ms is not None
    ]


def mean_seconds(times_ms: list[int]) -> float | None:
    if not times_ms:
        return None
    return sum(times_ms) / len(times_ms) / 1000.0


def session_minutes(session: StudySession) -> int:
    """Whole minutes of an ended session; in-progress sessions count as 0."""
    if session.end_time is None:
        return 0
    return session.duration_minutes(session.end_time)


def ended_minutes(sessions: Iterable[StudySession]) -> int:
    return sum(session_minutes(s) for s in sessions)


# ---------- Streaks ----------


def study_dates(sessions: Iterable[StudySession]) -> list[date]:
    """Distinct calendar dates with at least one session start, newest first."""
    return sorted({s.start_time.date() for s in sessions}, reverse=True)


def current_streak(dates: list[date], today: date) -> int:
    """
    Consecutive study days ending today or yesterday.

    Args:
        dates: Distinct dates sorted newest first.
        today: The reference calendar date.
    """
    if not dates:
        return 0
    if dates[0] not in (today, today - timedelta(days=1)):
        return 0

    streak = 1
    expected = dates[0] - timedelta(days=1)
    for d in dates[1:]:
        if d != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def longest_streak(dates: list[date]) -> int:
    """Longest run of consecutive days anywhere in the history."""
    if not dates:
        return 0

    longest = 1
    run = 1
    for newer, older in zip(dates, dates[1:]):
        if (newer - older).days == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


# ---------- Trend ----------


def week_windows(now: datetime, weeks: int = WEEKS_ANALYZED) -> list[tuple[datetime, datetime]]:
    """
    Trailing fixed 7-day windows, oldest first.

    Window i (before reversal) is [now - 7(i+1) days, now - 7i days).
    """
    windows = [
        (now - timedelta(days=7 * (i + 1)), now - timedelta(days=7 * i)) for i in range(weeks)
    ]
    windows.reverse()
    return windows


def trend_from_weeks(
    weekly: list[WeeklyStats], weeks_analyzed: int = WEEKS_ANALYZED
) -> tuple[TrendDirection, float]:
    """
    Compare the first and second half of the weekly accuracy series.

    Only weeks with activity take part; fewer than two such weeks is stable.

    Returns:
        (direction, change rate in percent per week)
    """
    active = [w for w in weekly if w.average_accuracy > 0 or w.cards_studied > 0]
    if len(active) < 2:
        return TrendDirection.STABLE, 0.0

    accuracies = [w.average_accuracy for w in active]
    half = len(accuracies) // 2
    first, second = accuracies[:half], accuracies[half:]

    first_avg = sum(first) / len(first)
    second_avg = sum(second) / len(second)
    difference = second_avg - first_avg

    change_rate = 0.0
    if first_avg > 0:
        change_rate = (difference / first_avg) * 100 / weeks_analyzed

    if difference > TREND_THRESHOLD:
        return TrendDirection.IMPROVING, change_rate
    if difference < -TREND_THRESHOLD:
        return TrendDirection.DECLINING, change_rate
    return TrendDirection.STABLE, change_rate
