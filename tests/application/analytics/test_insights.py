from datetime import timedelta

import pytest

from studypals.application.analytics.insights import (
    is_improving,
    most_effective_learning_style,
    performance_level,
    performance_summary,
    preferred_study_time,
    recommended_difficulty,
    strong_subjects,
    struggling_subjects,
    subject_insights,
    subject_trend_description,
    trend_description,
)
from studypals.domain.analytics.models import (
    LearningPatterns,
    PerformanceTrend,
    StudyAnalytics,
    SubjectPerformance,
    TrendDirection,
)


def _perf(subject, accuracy, now, recent_scores=()):
    return SubjectPerformance(
        subject=subject,
        accuracy=accuracy,
        total_cards=20,
        total_quizzes=len(recent_scores),
        study_time_minutes=90,
        last_studied=now,
        recent_scores=list(recent_scores),
    )


@pytest.fixture
def analytics(now):
    return StudyAnalytics(
        user_id="u1",
        last_updated=now,
        overall_accuracy=0.82,
        current_streak=3,
        total_study_time=240,
        subject_performance={
            "Math": _perf("Math", 0.95, now),
            "History": _perf("History", 0.6, now),
            "Biology": _perf("Biology", 0.8, now),
        },
        learning_patterns=LearningPatterns(
            preferred_study_hours={"9": 2, "19": 5},
            learning_style_effectiveness={"visual": 0.7, "reading": 0.9},
        ),
    )


@pytest.mark.parametrize(
    "accuracy,label",
    [
        (0.95, "Expert"),
        (0.9, "Expert"),
        (0.85, "Advanced"),
        (0.7, "Intermediate"),
        (0.65, "Developing"),
        (0.3, "Beginner"),
        (0.0, "Beginner"),
    ],
)
def test_performance_level(now, accuracy, label):
    analytics = StudyAnalytics(user_id="u1", last_updated=now, overall_accuracy=accuracy)
    assert performance_level(analytics) == label


def test_struggling_and_strong_subjects(analytics):
    assert struggling_subjects(analytics) == ["History"]
    assert strong_subjects(analytics) == ["Math"]


def test_recommended_difficulty(analytics):
    assert recommended_difficulty(analytics, "Math") == "challenging"
    assert recommended_difficulty(analytics, "Biology") == "moderate"
    assert recommended_difficulty(analytics, "History") == "easy"
    assert recommended_difficulty(analytics, "Chemistry") == "moderate"


class TestSubjectTrend:
    def test_improving_when_newest_scores_beat_older(self, now):
        perf = _perf("Math", 0.8, now, [0.9, 0.85, 0.8, 0.6, 0.5, 0.55])
        assert is_improving(perf)
        assert subject_trend_description(perf) == "Improving"

    def test_needs_six_scores_worth_of_history(self, now):
        assert not is_improving(_perf("Math", 0.8, now, [0.9, 0.9, 0.9]))
        assert not is_improving(_perf("Math", 0.8, now, [0.9, 0.9]))

    def test_consistent_when_latest_score_is_high(self, now):
        perf = _perf("Math", 0.8, now, [0.85, 0.9, 0.95, 0.99])
        assert not is_improving(perf)
        assert subject_trend_description(perf) == "Consistent"

    def test_needs_focus_otherwise(self, now):
        assert subject_trend_description(_perf("Math", 0.5, now)) == "Needs Focus"
        assert subject_trend_description(_perf("Math", 0.5, now, [0.4])) == "Needs Focus"


@pytest.mark.parametrize(
    "hours,expected",
    [
        ({}, "flexible"),
        ({"8": 3, "14": 1}, "morning"),
        ({"12": 4}, "afternoon"),
        ({"16": 2, "17": 2}, "afternoon"),
        ({"17": 1}, "evening"),
        ({"9": 1, "21": 6}, "evening"),
    ],
)
def test_preferred_study_time(hours, expected):
    assert preferred_study_time(LearningPatterns(preferred_study_hours=hours)) == expected


def test_most_effective_learning_style(analytics):
    assert most_effective_learning_style(analytics.learning_patterns) == "reading"
    assert most_effective_learning_style(LearningPatterns()) is None


def test_trend_description():
    improving = PerformanceTrend(direction=TrendDirection.IMPROVING, change_rate=12.345)
    declining = PerformanceTrend(direction=TrendDirection.DECLINING, change_rate=-4.0)

    assert trend_description(improving) == (
        "User shows consistent improvement with 12.3% weekly growth"
    )
    assert trend_description(declining) == (
        "User performance declining by 4.0% weekly - needs support"
    )
    assert trend_description(PerformanceTrend()) == (
        "User performance is stable with consistent results"
    )


def test_subject_insights(analytics, now):
    insights = subject_insights(analytics, "Math")

    assert insights == {
        "accuracy": 0.95,
        "trend": "Needs Focus",
        "recommendedDifficulty": "challenging",
        "totalCards": 20,
        "studyTime": 90,
        "lastStudied": now.isoformat(),
        "isImproving": False,
    }
    assert subject_insights(analytics, "Chemistry") == {}


def test_performance_summary(analytics):
    summary = performance_summary(analytics)

    assert summary["performanceLevel"] == "Advanced"
    assert summary["overallAccuracy"] == 0.82
    assert summary["currentStreak"] == 3
    assert summary["totalStudyTime"] == 240
    assert summary["strugglingSubjects"] == ["History"]
    assert summary["strongSubjects"] == ["Math"]
    assert summary["preferredStudyTime"] == "evening"
    assert summary["mostEffectiveLearningStyle"] == "reading"
    assert summary["recentTrend"] == "User performance is stable with consistent results"


def test_summary_of_empty_snapshot(now):
    summary = performance_summary(StudyAnalytics(user_id="u1", last_updated=now - timedelta(days=1)))

    assert summary["performanceLevel"] == "Beginner"
    assert summary["strugglingSubjects"] == []
    assert summary["preferredStudyTime"] == "flexible"
    assert summary["mostEffectiveLearningStyle"] is None
