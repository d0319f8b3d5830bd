"""Centralized constants for the studypals core.

All magic numbers and tunable policy values live here so every layer
imports from a single source of truth.
"""

# ---------- Review Scheduler (SM-2 variant) ----------
DEFAULT_EASE = 2.5
MIN_EASE = 1.3
MAX_EASE = 2.5
DEFAULT_INTERVAL_DAYS = 1
AGAIN_EASE_PENALTY = 0.2
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15
HARD_INTERVAL_FACTOR = 1.2
EASY_INTERVAL_BONUS = 1.3
GOOD_FIRST_INTERVAL_DAYS = 1
GOOD_SECOND_INTERVAL_DAYS = 6

# ---------- Review Queue ----------
LEARNING_INTERVAL_DAYS = 7  # interval below this = still learning
MATURE_INTERVAL_DAYS = 21

# ---------- Subject Performance ----------
MAX_RECENT_SCORES = 10
EASY_DIFFICULTY_MAX = 2
MODERATE_DIFFICULTY_MAX = 3
DIFFICULTY_BUCKETS = ("easy", "moderate", "hard")

# ---------- Learning Patterns ----------
# Synthesized when no session carries a learningStyle tag (scaled off overall accuracy).
DEFAULT_LEARNING_STYLES = {
    "visual": 1.0,
    "reading": 0.95,
    "kinesthetic": 0.90,
}
TOPIC_FREQUENCY_WEIGHT = 0.3
TOPIC_LENGTH_WEIGHT = 0.3
TOPIC_ACTIVITY_WEIGHT = 0.4
TOPIC_LENGTH_CAP_MINUTES = 60.0
TOPIC_ACTIVITY_CAP = 50.0

# ---------- Mistake Patterns ----------
REPEATED_ERROR_MIN_MISTAKES = 2  # per card
REPEATED_ERROR_MIN_CARDS = 2
RECENT_MISTAKE_WINDOW_DAYS = 7
RECENT_MISTAKE_SHARE = 0.5
SLOW_RESPONSE_MS = 10_000
SLOW_MISTAKE_SHARE = 0.3

# ---------- Performance Trend ----------
WEEKS_ANALYZED = 4
TREND_THRESHOLD = 0.05

# ---------- Incremental Folding ----------
# Estimated share of viewed cards that were also answered; used to weight the
# prior accuracy against a new session's answers.
PRIOR_SAMPLE_WEIGHT = 0.8

# ---------- Insights ----------
PERFORMANCE_LEVELS = (
    (0.9, "Expert"),
    (0.8, "Advanced"),
    (0.7, "Intermediate"),
    (0.6, "Developing"),
)
STRUGGLING_ACCURACY = 0.7
STRONG_ACCURACY = 0.85
CONSISTENT_SCORE = 0.8
MORNING_END_HOUR = 12
AFTERNOON_END_HOUR = 17
