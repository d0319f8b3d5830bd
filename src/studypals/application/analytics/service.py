"""
Analytics Service: Application layer orchestrator.

Coordinates loading history from the repository, running the pure engines and
storing the resulting snapshot.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from studypals.domain.analytics.models import StudyAnalytics, StudySession
from studypals.domain.analytics.ports import StudyHistoryRepository

from .calculator import AnalyticsCalculator
from .incremental import fold_session
from .insights import performance_summary, subject_insights

logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Application service for computing and maintaining study analytics.

    Follows Dependency Inversion: depends on the StudyHistoryRepository
    abstraction, not on a concrete store.

    Work for one user is serialized with a per-user lock, because a fold is
    only correct when applied to the latest snapshot. Different users never
    wait on each other.
    """

    def __init__(
        self,
        history_repo: StudyHistoryRepository,
        calculator: AnalyticsCalculator | None = None,
    ):
        """
        Args:
            history_repo: The repository (port) for sessions and snapshots.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._repo = history_repo
        self._calc = calculator or AnalyticsCalculator()
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: Counter[str] = Counter()

    @asynccontextmanager
    async def _user_lock(self, user_id: str) -> AsyncIterator[None]:
        """Hold the user's lock; it is dropped once no task holds or awaits it."""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._waiters[user_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[user_id] -= 1
            if not self._waiters[user_id]:
                del self._waiters[user_id]
                del self._locks[user_id]

    async def refresh(self, user_id: str, now: datetime) -> StudyAnalytics:
        """
        Recompute analytics from the full history and store the snapshot.
        """
        async with self._user_lock(user_id):
            return await self._refresh(user_id, now)

    async def _refresh(self, user_id: str, now: datetime) -> StudyAnalytics:
        sessions = await self._repo.get_sessions(user_id)
        quizzes = await self._repo.get_quiz_results(user_id)

        analytics = self._calc.compute(user_id, sessions, quizzes, now)
        await self._repo.save_analytics(analytics)

        logger.info(
            f"Recomputed analytics for {user_id} "
            f"({len(sessions)} sessions, accuracy={analytics.overall_accuracy:.2f})"
        )
        return analytics

    async def get_analytics(self, user_id: str, now: datetime) -> StudyAnalytics:
        """
        Return the stored snapshot, computing one if none exists yet.
        """
        async with self._user_lock(user_id):
            analytics = await self._repo.get_analytics(user_id)
            if analytics is None:
                logger.debug(f"No stored analytics for {user_id}; computing")
                analytics = await self._refresh(user_id, now)
            return analytics

    async def record_session(self, session: StudySession, now: datetime) -> StudyAnalytics:
        """
        Store a finished session and fold it into the user's snapshot.

        Falls back to a full recompute when no snapshot exists yet.
        """
        async with self._user_lock(session.user_id):
            await self._repo.save_session(session)

            current = await self._repo.get_analytics(session.user_id)
            if current is None:
                return await self._refresh(session.user_id, now)

            analytics = fold_session(current, session, now)
            await self._repo.save_analytics(analytics)
            return analytics

    async def get_subject_insights(
        self, user_id: str, subject: str, now: datetime
    ) -> dict[str, Any]:
        analytics = await self.get_analytics(user_id, now)
        return subject_insights(analytics, subject)

    async def get_performance_summary(self, user_id: str, now: datetime) -> dict[str, Any]:
        analytics = await self.get_analytics(user_id, now)
        return performance_summary(analytics)
