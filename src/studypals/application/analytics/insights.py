"""
Derived labels and summaries over an analytics snapshot.

These feed prompt context and dashboard copy; they never change the snapshot.
"""

from typing import Any

from studypals.domain.analytics.models import (
    LearningPatterns,
    PerformanceTrend,
    StudyAnalytics,
    SubjectPerformance,
    TrendDirection,
)
from studypals.domain.constants import (
    AFTERNOON_END_HOUR,
    CONSISTENT_SCORE,
    MORNING_END_HOUR,
    PERFORMANCE_LEVELS,
    STRONG_ACCURACY,
    STRUGGLING_ACCURACY,
)


def performance_level(analytics: StudyAnalytics) -> str:
    for threshold, label in PERFORMANCE_LEVELS:
        if analytics.overall_accuracy >= threshold:
            return label
    return "Beginner"


def struggling_subjects(analytics: StudyAnalytics) -> list[str]:
    return [
        name
        for name, perf in analytics.subject_performance.items()
        if perf.accuracy < STRUGGLING_ACCURACY
    ]


def strong_subjects(analytics: StudyAnalytics) -> list[str]:
    return [
        name
        for name, perf in analytics.subject_performance.items()
        if perf.accuracy >= STRONG_ACCURACY
    ]


def recommended_difficulty(analytics: StudyAnalytics, subject: str) -> str:
    perf = analytics.subject_performance.get(subject)
    if perf is None:
        return "moderate"
    if perf.accuracy >= 0.9:
        return "challenging"
    if perf.accuracy >= 0.8:
        return "moderate"
    return "easy"


def is_improving(perf: SubjectPerformance) -> bool:
    """
    True when the newest three quiz scores beat the three before them.

    `recent_scores` is newest first.
    """
    if len(perf.recent_scores) < 3:
        return False
    recent = perf.recent_scores[:3]
    older = perf.recent_scores[3:6]
    if not older:
        return False
    return sum(recent) / len(recent) > sum(older) / len(older)


def subject_trend_description(perf: SubjectPerformance) -> str:
    if is_improving(perf):
        return "Improving"
    if perf.recent_scores and perf.recent_scores[0] >= CONSISTENT_SCORE:
        return "Consistent"
    return "Needs Focus"


def preferred_study_time(patterns: LearningPatterns) -> str:
    if not patterns.preferred_study_hours:
        return "flexible"
    # Ties go to the hour seen first.
    hour_key = max(patterns.preferred_study_hours.items(), key=lambda kv: kv[1])[0]
    hour = int(hour_key)
    if hour < MORNING_END_HOUR:
        return "morning"
    if hour < AFTERNOON_END_HOUR:
        return "afternoon"
    return "evening"


def most_effective_learning_style(patterns: LearningPatterns) -> str | None:
    if not patterns.learning_style_effectiveness:
        return None
    return max(patterns.learning_style_effectiveness.items(), key=lambda kv: kv[1])[0]


def trend_description(trend: PerformanceTrend) -> str:
    if trend.direction is TrendDirection.IMPROVING:
        return f"User shows consistent improvement with {trend.change_rate:.1f}% weekly growth"
    if trend.direction is TrendDirection.DECLINING:
        return (
            f"User performance declining by {abs(trend.change_rate):.1f}% weekly - needs support"
        )
    return "User performance is stable with consistent results"


def subject_insights(analytics: StudyAnalytics, subject: str) -> dict[str, Any]:
    """Per-subject summary; empty when the subject has never been studied."""
    perf = analytics.subject_performance.get(subject)
    if perf is None:
        return {}
    return {
        "accuracy": perf.accuracy,
        "trend": subject_trend_description(perf),
        "recommendedDifficulty": recommended_difficulty(analytics, subject),
        "totalCards": perf.total_cards,
        "studyTime": perf.study_time_minutes,
        "lastStudied": perf.last_studied.isoformat(),
        "isImproving": is_improving(perf),
    }


def performance_summary(analytics: StudyAnalytics) -> dict[str, Any]:
    return {
        "performanceLevel": performance_level(analytics),
        "overallAccuracy": analytics.overall_accuracy,
        "currentStreak": analytics.current_streak,
        "totalStudyTime": analytics.total_study_time,
        "strugglingSubjects": struggling_subjects(analytics),
        "strongSubjects": strong_subjects(analytics),
        "preferredStudyTime": preferred_study_time(analytics.learning_patterns),
        "mostEffectiveLearningStyle": most_effective_learning_style(analytics.learning_patterns),
        "recentTrend": trend_description(analytics.recent_trend),
    }
