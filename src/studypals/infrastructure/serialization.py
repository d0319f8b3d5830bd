"""
JSON codec for the persisted record schema.

Field names are camelCase and timestamps ISO-8601 in the existing store's form:
milliseconds (microseconds when present) and `Z` for UTC. Unknown keys in the free-form
`data`/`metadata` maps are preserved through the `extra` bags.
"""

from datetime import datetime, timedelta
from typing import Any

from studypals.domain.analytics.models import (
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
from studypals.domain.review.models import ReviewGrade, ReviewState

GRADE_PREFIX = "ReviewGrade."

# ---------- Primitives ----------


def format_timestamp(value: datetime) -> str:
    """
    Milliseconds, or microseconds when they are nonzero; UTC is written as `Z`.
    """
    timespec = "microseconds" if value.microsecond % 1000 else "milliseconds"
    text = value.isoformat(timespec=timespec)
    if value.utcoffset() == timedelta(0):
        text = text.removesuffix("+00:00") + "Z"
    return text


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _optional_timestamp(value: str | None) -> datetime | None:
    return parse_timestamp(value) if value else None


def format_grade(grade: ReviewGrade) -> str:
    return grade.qualified_name


def parse_grade(value: str) -> ReviewGrade:
    """Accepts both the stored `ReviewGrade.good` form and a bare `good`."""
    return ReviewGrade(value.removeprefix(GRADE_PREFIX))


# ---------- Review state ----------


def review_state_to_dict(state: ReviewState) -> dict[str, Any]:
    return {
        "cardId": state.card_id,
        "userId": state.user_id,
        "dueAt": format_timestamp(state.due_at),
        "ease": state.ease,
        "interval": state.interval,
        "reps": state.reps,
        "lastGrade": format_grade(state.last_grade) if state.last_grade else None,
        "lastReviewed": (
            format_timestamp(state.last_reviewed_at) if state.last_reviewed_at else None
        ),
    }


def review_state_from_dict(data: dict[str, Any]) -> ReviewState:
    last_grade = data.get("lastGrade")
    return ReviewState(
        card_id=data["cardId"],
        user_id=data["userId"],
        due_at=parse_timestamp(data["dueAt"]),
        ease=float(data.get("ease", 2.5)),
        interval=int(data.get("interval", 1)),
        reps=int(data.get("reps", 0)),
        last_grade=parse_grade(last_grade) if last_grade else None,
        last_reviewed_at=_optional_timestamp(data.get("lastReviewed")),
    )


# ---------- Sessions ----------


def activity_data_to_dict(data: ActivityData) -> dict[str, Any]:
    out = dict(data.extra)
    if data.subject is not None:
        out["subject"] = data.subject
    if data.grade is not None:
        out["grade"] = data.grade
    return out


def activity_data_from_dict(raw: dict[str, Any] | None) -> ActivityData:
    extra = dict(raw or {})
    return ActivityData(
        subject=extra.pop("subject", None),
        grade=extra.pop("grade", None),
        extra=extra,
    )


def activity_to_dict(activity: SessionActivity) -> dict[str, Any]:
    return {
        "type": activity.type.value,
        "timestamp": format_timestamp(activity.timestamp),
        "cardId": activity.card_id,
        "wasCorrect": activity.was_correct,
        "responseTimeMs": activity.response_time_ms,
        "data": activity_data_to_dict(activity.data),
    }


def activity_from_dict(data: dict[str, Any]) -> SessionActivity:
    return SessionActivity(
        type=ActivityType(data["type"]),
        timestamp=parse_timestamp(data["timestamp"]),
        card_id=data.get("cardId"),
        was_correct=data.get("wasCorrect"),
        response_time_ms=data.get("responseTimeMs"),
        data=activity_data_from_dict(data.get("data")),
    )


def metadata_to_dict(metadata: SessionMetadata) -> dict[str, Any]:
    out = dict(metadata.extra)
    if metadata.card_difficulties is not None:
        out["cardDifficulties"] = dict(metadata.card_difficulties)
    if metadata.learning_style is not None:
        out["learningStyle"] = metadata.learning_style
    if metadata.source is not None:
        out["source"] = metadata.source
    return out


def metadata_from_dict(raw: dict[str, Any] | None) -> SessionMetadata:
    extra = dict(raw or {})
    difficulties = extra.pop("cardDifficulties", None)
    return SessionMetadata(
        card_difficulties=(
            {str(k): int(v) for k, v in difficulties.items()} if difficulties else None
        ),
        learning_style=extra.pop("learningStyle", None),
        source=extra.pop("source", None),
        extra=extra,
    )


def session_to_dict(session: StudySession) -> dict[str, Any]:
    return {
        "id": session.id,
        "userId": session.user_id,
        "deckId": session.deck_id,
        "subject": session.subject,
        "startTime": format_timestamp(session.start_time),
        "endTime": format_timestamp(session.end_time) if session.end_time else None,
        "activities": [activity_to_dict(a) for a in session.activities],
        "metadata": metadata_to_dict(session.metadata),
    }


def session_from_dict(data: dict[str, Any]) -> StudySession:
    return StudySession(
        id=data["id"],
        user_id=data["userId"],
        deck_id=data.get("deckId"),
        subject=data.get("subject"),
        start_time=parse_timestamp(data["startTime"]),
        end_time=_optional_timestamp(data.get("endTime")),
        activities=tuple(activity_from_dict(a) for a in data.get("activities") or []),
        metadata=metadata_from_dict(data.get("metadata")),
    )


def quiz_to_dict(quiz: QuizResult) -> dict[str, Any]:
    return {
        "id": quiz.id,
        "deckId": quiz.deck_id,
        "subject": quiz.subject,
        "startTime": format_timestamp(quiz.start_time),
        "finalScore": quiz.final_score,
    }


def quiz_from_dict(data: dict[str, Any]) -> QuizResult:
    """Reads a stored quiz session; fields the aggregator does not use are ignored."""
    score = data.get("finalScore")
    return QuizResult(
        id=data.get("id"),
        deck_id=data.get("deckId"),
        subject=data.get("subject"),
        start_time=parse_timestamp(data["startTime"]),
        final_score=float(score) if score is not None else None,
    )


# ---------- Analytics ----------


def subject_performance_to_dict(perf: SubjectPerformance) -> dict[str, Any]:
    return {
        "subject": perf.subject,
        "accuracy": perf.accuracy,
        "totalCards": perf.total_cards,
        "totalQuizzes": perf.total_quizzes,
        "studyTimeMinutes": perf.study_time_minutes,
        "lastStudied": format_timestamp(perf.last_studied),
        "recentScores": list(perf.recent_scores),
        "difficultyBreakdown": dict(perf.difficulty_breakdown),
        "averageResponseTime": perf.average_response_time,
    }


def subject_performance_from_dict(data: dict[str, Any]) -> SubjectPerformance:
    return SubjectPerformance(
        subject=data["subject"],
        accuracy=float(data["accuracy"]),
        total_cards=int(data["totalCards"]),
        total_quizzes=int(data["totalQuizzes"]),
        study_time_minutes=int(data["studyTimeMinutes"]),
        last_studied=parse_timestamp(data["lastStudied"]),
        recent_scores=[float(s) for s in data.get("recentScores", [])],
        difficulty_breakdown={k: int(v) for k, v in data.get("difficultyBreakdown", {}).items()},
        average_response_time=float(data.get("averageResponseTime", 0.0)),
    )


def learning_patterns_to_dict(patterns: LearningPatterns) -> dict[str, Any]:
    return {
        "preferredStudyHours": dict(patterns.preferred_study_hours),
        "learningStyleEffectiveness": dict(patterns.learning_style_effectiveness),
        "averageSessionLength": patterns.average_session_length,
        "preferredCardsPerSession": patterns.preferred_cards_per_session,
        "topicInterest": dict(patterns.topic_interest),
        "commonMistakePatterns": list(patterns.common_mistake_patterns),
    }


def learning_patterns_from_dict(data: dict[str, Any]) -> LearningPatterns:
    return LearningPatterns(
        preferred_study_hours={k: int(v) for k, v in data["preferredStudyHours"].items()},
        learning_style_effectiveness={
            k: float(v) for k, v in data["learningStyleEffectiveness"].items()
        },
        average_session_length=float(data["averageSessionLength"]),
        preferred_cards_per_session=int(data["preferredCardsPerSession"]),
        topic_interest={k: float(v) for k, v in data["topicInterest"].items()},
        common_mistake_patterns=list(data["commonMistakePatterns"]),
    )


def weekly_stats_to_dict(week: WeeklyStats) -> dict[str, Any]:
    return {
        "weekStart": format_timestamp(week.week_start),
        "averageAccuracy": week.average_accuracy,
        "totalStudyTime": week.total_study_time,
        "cardsStudied": week.cards_studied,
        "quizzesCompleted": week.quizzes_completed,
    }


def weekly_stats_from_dict(data: dict[str, Any]) -> WeeklyStats:
    return WeeklyStats(
        week_start=parse_timestamp(data["weekStart"]),
        average_accuracy=float(data["averageAccuracy"]),
        total_study_time=int(data["totalStudyTime"]),
        cards_studied=int(data["cardsStudied"]),
        quizzes_completed=int(data["quizzesCompleted"]),
    )


def trend_to_dict(trend: PerformanceTrend) -> dict[str, Any]:
    return {
        "direction": trend.direction.value,
        "changeRate": trend.change_rate,
        "weeksAnalyzed": trend.weeks_analyzed,
        "weeklyData": [weekly_stats_to_dict(w) for w in trend.weekly_data],
    }


def trend_from_dict(data: dict[str, Any]) -> PerformanceTrend:
    return PerformanceTrend(
        direction=TrendDirection(data["direction"]),
        change_rate=float(data["changeRate"]),
        weeks_analyzed=int(data["weeksAnalyzed"]),
        weekly_data=[weekly_stats_from_dict(w) for w in data["weeklyData"]],
    )


def analytics_to_dict(analytics: StudyAnalytics) -> dict[str, Any]:
    return {
        "userId": analytics.user_id,
        "lastUpdated": format_timestamp(analytics.last_updated),
        "overallAccuracy": analytics.overall_accuracy,
        "totalStudyTime": analytics.total_study_time,
        "totalCardsStudied": analytics.total_cards_studied,
        "totalQuizzesTaken": analytics.total_quizzes_taken,
        "currentStreak": analytics.current_streak,
        "longestStreak": analytics.longest_streak,
        "totalAnswersGiven": analytics.total_answers_given,
        "totalCorrectAnswers": analytics.total_correct_answers,
        "subjectPerformance": {
            name: subject_performance_to_dict(perf)
            for name, perf in analytics.subject_performance.items()
        },
        "learningPatterns": learning_patterns_to_dict(analytics.learning_patterns),
        "recentTrend": trend_to_dict(analytics.recent_trend),
    }


def analytics_from_dict(data: dict[str, Any]) -> StudyAnalytics:
    # Snapshots written before raw answer counters existed lack the two totals.
    return StudyAnalytics(
        user_id=data["userId"],
        last_updated=parse_timestamp(data["lastUpdated"]),
        overall_accuracy=float(data["overallAccuracy"]),
        total_study_time=int(data["totalStudyTime"]),
        total_cards_studied=int(data["totalCardsStudied"]),
        total_quizzes_taken=int(data["totalQuizzesTaken"]),
        current_streak=int(data["currentStreak"]),
        longest_streak=int(data["longestStreak"]),
        total_answers_given=int(data.get("totalAnswersGiven") or 0),
        total_correct_answers=int(data.get("totalCorrectAnswers") or 0),
        subject_performance={
            name: subject_performance_from_dict(perf)
            for name, perf in data["subjectPerformance"].items()
        },
        learning_patterns=learning_patterns_from_dict(data["learningPatterns"]),
        recent_trend=trend_from_dict(data["recentTrend"]),
    )
