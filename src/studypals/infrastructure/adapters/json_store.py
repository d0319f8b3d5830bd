"""
JSON History Store: Infrastructure adapter for exported study data.

Implements StudyHistoryRepository over a directory laid out as:

    <data_dir>/<user_id>/sessions.json    list of session records
    <data_dir>/<user_id>/quizzes.json     list of quiz records
    <data_dir>/<user_id>/analytics.json   latest analytics snapshot
"""

import json
import logging
from pathlib import Path
from typing import Any

from studypals.domain.analytics.models import QuizResult, StudyAnalytics, StudySession
from studypals.domain.analytics.ports import StudyHistoryRepository
from studypals.infrastructure.serialization import (
    analytics_from_dict,
    analytics_to_dict,
    quiz_from_dict,
    session_from_dict,
    session_to_dict,
)

logger = logging.getLogger(__name__)

SESSIONS_FILE = "sessions.json"
QUIZZES_FILE = "quizzes.json"
ANALYTICS_FILE = "analytics.json"


class JsonHistoryStore(StudyHistoryRepository):
    """
    Reads and writes the persisted JSON schema on the local filesystem.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir

    def _user_dir(self, user_id: str) -> Path:
        return self.data_dir / user_id

    def _read(self, path: Path) -> Any:
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, path: Path, payload: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    async def get_sessions(self, user_id: str) -> list[StudySession]:
        raw = self._read(self._user_dir(user_id) / SESSIONS_FILE) or []
        sessions = [session_from_dict(item) for item in raw]
        logger.debug(f"Loaded {len(sessions)} sessions for {user_id}")
        return sessions

    async def get_quiz_results(self, user_id: str) -> list[QuizResult]:
        raw = self._read(self._user_dir(user_id) / QUIZZES_FILE) or []
        return [quiz_from_dict(item) for item in raw]

    async def save_session(self, session: StudySession) -> None:
        path = self._user_dir(session.user_id) / SESSIONS_FILE
        raw = self._read(path) or []
        raw = [item for item in raw if item.get("id") != session.id]
        raw.append(session_to_dict(session))
        self._write(path, raw)
        logger.info(f"Saved session {session.id} to {path}")

    async def get_analytics(self, user_id: str) -> StudyAnalytics | None:
        raw = self._read(self._user_dir(user_id) / ANALYTICS_FILE)
        if raw is None:
            return None
        return analytics_from_dict(raw)

    async def save_analytics(self, analytics: StudyAnalytics) -> None:
        path = self._user_dir(analytics.user_id) / ANALYTICS_FILE
        self._write(path, analytics_to_dict(analytics))
        logger.info(f"Saved analytics for {analytics.user_id} to {path}")
