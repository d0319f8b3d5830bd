# Application Review Package
from .queue_stats import due_reviews, review_stats
from .scheduler import apply_grade, clamp_ease, new_review_state

__all__ = ["apply_grade", "clamp_ease", "new_review_state", "due_reviews", "review_stats"]
