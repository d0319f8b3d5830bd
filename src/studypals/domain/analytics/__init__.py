# Domain Analytics Package
from .models import (
    ActivityData,
    ActivityType,
    LearningPatterns,
    PerformanceTrend,
    QuizResult,
    SessionActivity,
    SessionMetadata,
    StudyAnalytics,
    StudySession,
    SubjectPerformance,
    TrendDirection,
    WeeklyStats,
)
from .ports import StudyHistoryRepository

__all__ = [
    "ActivityData",
    "ActivityType",
    "LearningPatterns",
    "PerformanceTrend",
    "QuizResult",
    "SessionActivity",
    "SessionMetadata",
    "StudyAnalytics",
    "StudySession",
    "SubjectPerformance",
    "TrendDirection",
    "WeeklyStats",
    "StudyHistoryRepository",
]
