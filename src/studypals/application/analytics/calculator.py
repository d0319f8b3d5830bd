"""
Analytics calculator for deriving study statistics from raw session history.

This is a pure computation module with no I/O.
"""

import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta

from studypals.application.analytics.statistics import (
    accuracy_of,
    activities_of,
    count_card_views,
    count_correct,
    current_streak,
    ended_minutes,
    graded_answers,
    longest_streak,
    mean_seconds,
    response_times_ms,
    study_dates,
    trend_from_weeks,
    week_windows,
)
from studypals.application.utils.rounding import round_half_up
from studypals.domain.analytics.models import (
    ActivityType,
    LearningPatterns,
    PerformanceTrend,
    QuizResult,
    StudyAnalytics,
    StudySession,
    SubjectPerformance,
    WeeklyStats,
)
from studypals.domain.constants import (
    DEFAULT_LEARNING_STYLES,
    DIFFICULTY_BUCKETS,
    EASY_DIFFICULTY_MAX,
    MAX_RECENT_SCORES,
    MODERATE_DIFFICULTY_MAX,
    RECENT_MISTAKE_SHARE,
    RECENT_MISTAKE_WINDOW_DAYS,
    REPEATED_ERROR_MIN_CARDS,
    REPEATED_ERROR_MIN_MISTAKES,
    SLOW_MISTAKE_SHARE,
    SLOW_RESPONSE_MS,
    TOPIC_ACTIVITY_CAP,
    TOPIC_ACTIVITY_WEIGHT,
    TOPIC_FREQUENCY_WEIGHT,
    TOPIC_LENGTH_CAP_MINUTES,
    TOPIC_LENGTH_WEIGHT,
    WEEKS_ANALYZED,
)

logger = logging.getLogger(__name__)


class AnalyticsCalculator:
    """
    Computes a StudyAnalytics snapshot from a user's full history.

    Stateless and side-effect free. Every step reads only its inputs, so the
    same history and `now` always produce the same snapshot.
    """

    def compute(
        self,
        user_id: str,
        sessions: list[StudySession],
        quiz_records: list[QuizResult],
        now: datetime,
    ) -> StudyAnalytics:
        activities = activities_of(sessions)
        answers = graded_answers(activities)

        total_study_time = ended_minutes(sessions)
        total_cards = count_card_views(activities)
        total_correct = count_correct(answers)
        overall_accuracy = total_correct / len(answers) if answers else 0.0

        dates = study_dates(sessions)

        logger.debug(
            f"Computing analytics for {user_id}: {len(sessions)} sessions, "
            f"{len(quiz_records)} quizzes, {len(answers)} answers"
        )

        return StudyAnalytics(
            user_id=user_id,
            last_updated=now,
            overall_accuracy=overall_accuracy,
            total_study_time=total_study_time,
            total_cards_studied=total_cards,
            total_quizzes_taken=len(quiz_records),
            current_streak=current_streak(dates, now.date()),
            longest_streak=longest_streak(dates),
            total_answers_given=len(answers),
            total_correct_answers=total_correct,
            subject_performance=self._subject_performance(sessions, quiz_records),
            learning_patterns=self._learning_patterns(
                sessions, overall_accuracy, total_study_time, total_cards, now
            ),
            recent_trend=self._performance_trend(sessions, quiz_records, now),
        )

    # ---------- Subject performance ----------

    def _subject_performance(
        self, sessions: list[StudySession], quiz_records: list[QuizResult]
    ) -> dict[str, SubjectPerformance]:
        by_subject: dict[str, list[StudySession]] = defaultdict(list)
        for session in sessions:
            if session.subject is not None:
                by_subject[session.subject].append(session)

        result: dict[str, SubjectPerformance] = {}
        for subject, group in by_subject.items():
            activities = activities_of(group)
            quizzes = self._quizzes_for_subject(subject, group, quiz_records)

            result[subject] = SubjectPerformance(
                subject=subject,
                accuracy=accuracy_of(activities),
                total_cards=count_card_views(activities),
                total_quizzes=len(quizzes),
                study_time_minutes=ended_minutes(group),
                last_studied=max(s.start_time for s in group),
                recent_scores=self._recent_scores(quizzes),
                difficulty_breakdown=self._difficulty_breakdown(group),
                average_response_time=mean_seconds(response_times_ms(activities)) or 0.0,
            )
        return result

    def _quizzes_for_subject(
        self, subject: str, group: list[StudySession], quiz_records: list[QuizResult]
    ) -> list[QuizResult]:
        """
        Match quizzes by explicit subject, falling back to deck membership.

        Older quiz records carry no subject; those are attributed to a subject
        when their deck was studied in one of the subject's sessions.
        """
        decks = {s.deck_id for s in group if s.deck_id is not None}
        return [
            q
            for q in quiz_records
            if (q.subject is not None and q.subject == subject)
            or (q.deck_id is not None and q.deck_id in decks)
        ]

    def _recent_scores(self, quizzes: list[QuizResult]) -> list[float]:
        newest_first = sorted(quizzes, key=lambda q: q.start_time, reverse=True)
        return [
            float(q.final_score)
            for q in newest_first[:MAX_RECENT_SCORES]
            if q.final_score is not None
        ]

    def _difficulty_breakdown(self, group: list[StudySession]) -> dict[str, int]:
        easy, moderate, hard = DIFFICULTY_BUCKETS
        breakdown = dict.fromkeys(DIFFICULTY_BUCKETS, 0)
        for session in group:
            difficulties = session.metadata.card_difficulties
            if not difficulties:
                continue
            for value in difficulties.values():
                if value <= EASY_DIFFICULTY_MAX:
                    breakdown[easy] += 1
                elif value <= MODERATE_DIFFICULTY_MAX:
                    breakdown[moderate] += 1
                else:
                    breakdown[hard] += 1
        return breakdown

    # ---------- Learning patterns ----------

    def _learning_patterns(
        self,
        sessions: list[StudySession],
        overall_accuracy: float,
        total_study_time: int,
        total_cards: int,
        now: datetime,
    ) -> LearningPatterns:
        hours = Counter(str(s.start_time.hour) for s in sessions)
        count = len(sessions)

        return LearningPatterns(
            preferred_study_hours=dict(hours),
            learning_style_effectiveness=self._learning_style_effectiveness(
                sessions, overall_accuracy
            ),
            average_session_length=total_study_time / count if count else 0.0,
            preferred_cards_per_session=round_half_up(total_cards / count) if count else 0,
            topic_interest=self._topic_interest(sessions),
            common_mistake_patterns=self._mistake_patterns(sessions, now),
        )

    def _learning_style_effectiveness(
        self, sessions: list[StudySession], overall_accuracy: float
    ) -> dict[str, float]:
        by_style: dict[str, list[StudySession]] = defaultdict(list)
        for session in sessions:
            if session.metadata.learning_style:
                by_style[session.metadata.learning_style].append(session)

        effectiveness: dict[str, float] = {}
        for style, group in by_style.items():
            answers = graded_answers(activities_of(group))
            if answers:
                effectiveness[style] = count_correct(answers) / len(answers)

        if not effectiveness:
            # Keeps the field populated for consumers even without style tags.
            effectiveness = {
                style: overall_accuracy * scale for style, scale in DEFAULT_LEARNING_STYLES.items()
            }
        return effectiveness

    def _topic_interest(self, sessions: list[StudySession]) -> dict[str, float]:
        by_subject: dict[str, list[StudySession]] = defaultdict(list)
        for session in sessions:
            if session.subject is not None:
                by_subject[session.subject].append(session)

        interest: dict[str, float] = {}
        for subject, group in by_subject.items():
            frequency = len(group) / len(sessions)
            avg_length = ended_minutes(group) / len(group)
            avg_activities = sum(len(s.activities) for s in group) / len(group)

            length_score = min(avg_length / TOPIC_LENGTH_CAP_MINUTES, 1.0) if avg_length > 0 else 0.0
            activity_score = (
                min(avg_activities / TOPIC_ACTIVITY_CAP, 1.0) if avg_activities > 0 else 0.0
            )

            interest[subject] = (
                frequency * TOPIC_FREQUENCY_WEIGHT
                + length_score * TOPIC_LENGTH_WEIGHT
                + activity_score * TOPIC_ACTIVITY_WEIGHT
            )
        return interest

    def _mistake_patterns(self, sessions: list[StudySession], now: datetime) -> list[str]:
        mistakes = [
            a
            for a in activities_of(sessions)
            if a.type is ActivityType.ANSWER and a.was_correct is False
        ]
        if not mistakes:
            return []

        patterns: list[str] = []

        per_card = Counter(a.card_id for a in mistakes if a.card_id is not None)
        repeated = [card for card, n in per_card.items() if n >= REPEATED_ERROR_MIN_MISTAKES]
        if len(repeated) >= REPEATED_ERROR_MIN_CARDS:
            patterns.append(f"Repeated errors on {len(repeated)} cards")

        window_start = now - timedelta(days=RECENT_MISTAKE_WINDOW_DAYS)
        recent = sum(1 for a in mistakes if a.timestamp > window_start)
        if recent > len(mistakes) * RECENT_MISTAKE_SHARE:
            patterns.append("High error rate in recent sessions")

        slow = sum(
            1
            for a in mistakes
            if a.response_time_ms is not None and a.response_time_ms > SLOW_RESPONSE_MS
        )
        if slow > len(mistakes) * SLOW_MISTAKE_SHARE:
            patterns.append("Slower response times on incorrect answers")

        return patterns

    # ---------- Trend ----------

    def _performance_trend(
        self, sessions: list[StudySession], quiz_records: list[QuizResult], now: datetime
    ) -> PerformanceTrend:
        weekly: list[WeeklyStats] = []
        for start, end in week_windows(now, WEEKS_ANALYZED):
            week_sessions = [s for s in sessions if start <= s.start_time < end]
            if not week_sessions:
                weekly.append(WeeklyStats(week_start=start))
                continue

            activities = activities_of(week_sessions)
            weekly.append(
                WeeklyStats(
                    week_start=start,
                    average_accuracy=accuracy_of(activities),
                    total_study_time=ended_minutes(week_sessions),
                    cards_studied=count_card_views(activities),
                    quizzes_completed=sum(1 for q in quiz_records if start <= q.start_time < end),
                )
            )

        direction, change_rate = trend_from_weeks(weekly, WEEKS_ANALYZED)
        return PerformanceTrend(
            direction=direction,
            change_rate=change_rate,
            weeks_analyzed=WEEKS_ANALYZED,
            weekly_data=weekly,
        )


def compute_analytics(
    user_id: str,
    sessions: list[StudySession],
    quiz_records: list[QuizResult],
    now: datetime,
) -> StudyAnalytics:
    """
    Full recompute of a user's analytics.

    Args:
        user_id: Owner of the history.
        sessions: All study sessions (ended or in progress).
        quiz_records: All completed quizzes.
        now: Reference time for trends, streaks and `last_updated`.

    Returns:
        A StudyAnalytics snapshot; zero-valued for an empty history.
    """
    return AnalyticsCalculator().compute(user_id, sessions, quiz_records, now)
