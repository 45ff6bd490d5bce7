"""
In-Memory Activity Log Repository for testing and development.

NOT FOR PRODUCTION USE - data is lost on restart.
"""

from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import List
from uuid import UUID

from ....domain.entities import ActivityLogEntry


class InMemoryActivityLogRepository:
    """
    In-memory implementation of ActivityLogRepository.

    Entries are appended in arrival order; list_activities returns the most
    recent first, like the Postgres adapter.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._entries: List[ActivityLogEntry] = []

    def record_activity(self, entry: ActivityLogEntry) -> None:
        if entry.created_at is None:
            entry.created_at = datetime.now(timezone.utc)
        with self._lock:
            self._entries.append(entry)

    def list_activities(
        self, *, user_id: UUID | None = None, limit: int = 50
    ) -> list[ActivityLogEntry]:
        if limit <= 0:
            return []
        with self._lock:
            entries = [
                e for e in reversed(self._entries)
                if user_id is None or e.user_id == user_id
            ]
        return entries[:limit]
