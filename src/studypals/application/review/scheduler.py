"""
SM-2 variant review scheduler.

This is a pure computation module with no I/O: time is always passed in.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta

from studypals.application.utils.rounding import round_half_up
from studypals.domain.constants import (
    AGAIN_EASE_PENALTY,
    EASY_EASE_BONUS,
    EASY_INTERVAL_BONUS,
    GOOD_FIRST_INTERVAL_DAYS,
    GOOD_SECOND_INTERVAL_DAYS,
    HARD_EASE_PENALTY,
    HARD_INTERVAL_FACTOR,
    MAX_EASE,
    MIN_EASE,
)
from studypals.domain.review.models import ReviewGrade, ReviewState

logger = logging.getLogger(__name__)


def new_review_state(card_id: str, user_id: str, now: datetime) -> ReviewState:
    """Default state for an item studied for the first time (due immediately)."""
    return ReviewState(card_id=card_id, user_id=user_id, due_at=now)


def clamp_ease(ease: float) -> float:
    return min(MAX_EASE, max(MIN_EASE, ease))


def apply_grade(state: ReviewState, grade: ReviewGrade, now: datetime) -> ReviewState:
    """
    Apply one review grade and return the next scheduling state.

    The "good" branch inspects the repetition count *before* this review:
    0 -> first review (1 day), 1 -> second review (6 days), otherwise the
    interval grows by the ease factor.

    Args:
        state: Current state; never mutated.
        grade: Recall quality for the review just completed.
        now: Review time, used for `due_at` and `last_reviewed_at`.

    Returns:
        A new ReviewState.
    """
    ease = state.ease
    interval = state.interval
    reps = state.reps + 1

    if grade is ReviewGrade.AGAIN:
        reps = 0
        interval = 1
        ease = state.ease - AGAIN_EASE_PENALTY
    elif grade is ReviewGrade.HARD:
        interval = round_half_up(state.interval * HARD_INTERVAL_FACTOR)
        ease = state.ease - HARD_EASE_PENALTY
    elif grade is ReviewGrade.GOOD:
        if state.reps == 0:
            interval = GOOD_FIRST_INTERVAL_DAYS
        elif state.reps == 1:
            interval = GOOD_SECOND_INTERVAL_DAYS
        else:
            interval = round_half_up(state.interval * state.ease)
    elif grade is ReviewGrade.EASY:
        interval = round_half_up(state.interval * state.ease * EASY_INTERVAL_BONUS)
        ease = state.ease + EASY_EASE_BONUS

    ease = clamp_ease(ease)
    interval = max(1, interval)

    logger.debug(
        f"Card {state.card_id}: {grade.value} -> interval={interval}d ease={ease:.2f} reps={reps}"
    )

    return replace(
        state,
        ease=ease,
        interval=interval,
        reps=reps,
        due_at=now + timedelta(days=interval),
        last_grade=grade,
        last_reviewed_at=now,
    )
