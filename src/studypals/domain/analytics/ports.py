"""
Ports (interfaces) for study history storage.

These define the contract that the host's persistence adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import QuizResult, StudyAnalytics, StudySession


class StudyHistoryRepository(ABC):
    """
    Port for loading a user's study history and storing derived analytics.

    Implementations:
        - JsonHistoryStore: Reads/writes the persisted JSON schema on disk.
    """

    @abstractmethod
    async def get_sessions(self, user_id: str) -> list[StudySession]:
        """
        Fetch all study sessions for a user.

        Returns:
            List of StudySession objects; empty if the user has none.
        """
        pass

    @abstractmethod
    async def get_quiz_results(self, user_id: str) -> list[QuizResult]:
        """
        Fetch all completed quizzes for a user.
        """
        pass

    @abstractmethod
    async def save_session(self, session: StudySession) -> None:
        """
        Insert or replace a session (matched by id).
        """
        pass

    @abstractmethod
    async def get_analytics(self, user_id: str) -> StudyAnalytics | None:
        """
        Fetch the last stored analytics snapshot, or None if never computed.
        """
        pass

    @abstractmethod
    async def save_analytics(self, analytics: StudyAnalytics) -> None:
        """
        Store an analytics snapshot, replacing any previous one for the user.
        """
        pass
