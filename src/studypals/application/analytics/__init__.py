# Application Analytics Package
from .calculator import AnalyticsCalculator, compute_analytics
from .incremental import fold_session
from .service import AnalyticsService

__all__ = ["AnalyticsCalculator", "compute_analytics", "fold_session", "AnalyticsService"]
