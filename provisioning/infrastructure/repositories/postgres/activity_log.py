"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/activity_log.py
============================================================
Class: PostgresActivityLogRepository

Responsibilities:
  - Persistir entradas de activity log (tabla activity_logs).
  - Listar entradas recientes (por autor opcional).

Collaborators:
  - domain.entities.ActivityLogEntry
  - psycopg_pool.ConnectionPool
  - psycopg.types.json.Json (JSONB seguro)
  - crosscutting.exceptions.ActivityLogError / DatabaseError

Constraints / Notes:
  - Append-only: no se edita, no se borra.
  - Si falla la escritura se propaga ActivityLogError; activity.emit_activity
    es quien decide tragarlo (best-effort).
  - Orden: created_at DESC, id DESC.
============================================================
"""

from __future__ import annotations

from uuid import UUID

from psycopg.types.json import Json
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import ActivityLogError, DatabaseError
from ....crosscutting.logger import logger
from ....domain.entities import ActivityLogEntry

_ACTIVITY_COLUMNS = (
    "id, user_id, activity_type, description, entity_id, entity_type, "
    "new_data, created_at"
)


def _row_to_entry(row: tuple) -> ActivityLogEntry:
    return ActivityLogEntry(
        id=row[0],
        user_id=row[1],
        activity_type=row[2],
        description=row[3],
        entity_id=row[4],
        entity_type=row[5],
        new_data=row[6] or {},
        created_at=row[7],
    )


class PostgresActivityLogRepository:
    """Repositorio PostgreSQL para activity_logs."""

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    def record_activity(self, entry: ActivityLogEntry) -> None:
        try:
            with self._get_pool().connection() as conn:
                conn.execute(
                    """
                    INSERT INTO activity_logs
                        (id, user_id, activity_type, description,
                         entity_id, entity_type, new_data)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        entry.id,
                        entry.user_id,
                        entry.activity_type,
                        entry.description,
                        entry.entity_id,
                        entry.entity_type,
                        Json(entry.new_data or {}),
                    ),
                )
        except Exception as exc:
            logger.exception(
                "PostgresActivityLogRepository: Failed to record activity",
                extra={
                    "entry_id": str(entry.id),
                    "activity_type": entry.activity_type,
                    "error": str(exc),
                },
            )
            raise ActivityLogError(
                f"Failed to record activity: {exc}", original_error=exc
            ) from exc

    def list_activities(
        self, *, user_id: UUID | None = None, limit: int = 50
    ) -> list[ActivityLogEntry]:
        if limit <= 0:
            return []

        where = "WHERE user_id = %s" if user_id is not None else ""
        params: list[object] = [user_id] if user_id is not None else []
        params.append(limit)

        try:
            with self._get_pool().connection() as conn:
                rows = conn.execute(
                    f"""
                    SELECT {_ACTIVITY_COLUMNS}
                    FROM activity_logs
                    {where}
                    ORDER BY created_at DESC, id DESC
                    LIMIT %s
                    """,
                    tuple(params),
                ).fetchall()
        except Exception as exc:
            logger.exception(
                "PostgresActivityLogRepository: list_activities failed",
                extra={"user_id": str(user_id) if user_id else None, "error": str(exc)},
            )
            raise DatabaseError(f"Failed to list activities: {exc}") from exc

        return [_row_to_entry(r) for r in rows]
