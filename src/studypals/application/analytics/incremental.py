"""
Incremental analytics updates.

Folds one new session into an existing snapshot without rescanning history,
so live study sessions can refresh displayed stats cheaply. Callers must fold
onto the most recent snapshot; concurrent folds for one user lose updates.
"""

import logging
from dataclasses import replace
from datetime import datetime

from studypals.application.analytics.statistics import (
    count_card_views,
    count_correct,
    graded_answers,
    mean_seconds,
    response_times_ms,
    session_minutes,
)
from studypals.application.utils.rounding import round_half_up
from studypals.domain.analytics.models import StudyAnalytics, StudySession, SubjectPerformance
from studypals.domain.constants import DIFFICULTY_BUCKETS, PRIOR_SAMPLE_WEIGHT

logger = logging.getLogger(__name__)


def fold_session(current: StudyAnalytics, session: StudySession, now: datetime) -> StudyAnalytics:
    """
    Incorporate one session into `current` and return the new snapshot.

    Overall accuracy is always re-derived from the raw answer counters so that
    repeated folds never drift. Streaks can only be seeded or lifted here; a
    missed day is only discovered by a full recompute.

    Args:
        current: The latest snapshot for the session's user.
        session: The session to fold in.
        now: Reference time for the streak check and `last_updated`.
    """
    answers = graded_answers(session.activities)
    correct = count_correct(answers)

    answers_given = current.total_answers_given + len(answers)
    correct_answers = current.total_correct_answers + correct
    overall_accuracy = (
        correct_answers / answers_given if answers_given > 0 else current.overall_accuracy
    )

    subjects = dict(current.subject_performance)
    if session.subject is not None:
        previous = subjects.get(session.subject)
        if previous is None:
            subjects[session.subject] = _seed_subject(session.subject, session)
        else:
            subjects[session.subject] = _merge_subject(previous, session)

    current_streak = current.current_streak
    longest = current.longest_streak
    if session.start_time.date() == now.date():
        if current_streak <= 0:
            current_streak = 1
        longest = max(longest, current_streak)

    logger.debug(
        f"Folded session {session.id} into {current.user_id}: "
        f"+{len(answers)} answers, streak={current_streak}"
    )

    return replace(
        current,
        last_updated=now,
        overall_accuracy=overall_accuracy,
        total_study_time=current.total_study_time + session_minutes(session),
        total_cards_studied=current.total_cards_studied + count_card_views(session.activities),
        current_streak=current_streak,
        longest_streak=longest,
        total_answers_given=answers_given,
        total_correct_answers=correct_answers,
        subject_performance=subjects,
    )


def _seed_subject(subject: str, session: StudySession) -> SubjectPerformance:
    answers = graded_answers(session.activities)
    return SubjectPerformance(
        subject=subject,
        accuracy=count_correct(answers) / len(answers) if answers else 0.0,
        total_cards=count_card_views(session.activities),
        total_quizzes=0,
        study_time_minutes=session_minutes(session),
        last_studied=session.start_time,
        recent_scores=[],
        difficulty_breakdown=dict.fromkeys(DIFFICULTY_BUCKETS, 0),
        average_response_time=mean_seconds(response_times_ms(session.activities)) or 0.0,
    )


def _merge_subject(previous: SubjectPerformance, session: StudySession) -> SubjectPerformance:
    """
    Blend a subject slice with one more session.

    The slice does not keep raw answer counters, so the prior sample size is
    estimated as `total_cards * PRIOR_SAMPLE_WEIGHT`.
    """
    answers = graded_answers(session.activities)
    correct = count_correct(answers)

    prior_total = round_half_up(previous.total_cards * PRIOR_SAMPLE_WEIGHT)
    prior_correct = round_half_up(prior_total * previous.accuracy)
    combined_total = prior_total + len(answers)
    accuracy = (
        (prior_correct + correct) / combined_total if combined_total > 0 else previous.accuracy
    )

    times = response_times_ms(session.activities)
    session_response = mean_seconds(times)
    if session_response is None:
        session_response = previous.average_response_time
    if previous.total_cards > 0:
        response_time = (
            previous.average_response_time * previous.total_cards + session_response * len(times)
        ) / (previous.total_cards + len(times))
    else:
        response_time = session_response

    return replace(
        previous,
        accuracy=accuracy,
        total_cards=previous.total_cards + count_card_views(session.activities),
        study_time_minutes=previous.study_time_minutes + session_minutes(session),
        last_studied=max(previous.last_studied, session.start_time),
        average_response_time=response_time,
    )
