# Domain Review Package
from .models import ReviewGrade, ReviewState

__all__ = ["ReviewGrade", "ReviewState"]
