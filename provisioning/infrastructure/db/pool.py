"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool de conexiones del profile store (un pool por proceso)

Responsabilidades:
  - Abrir el pool a partir de Settings (tamaños + statement_timeout).
  - Entregarlo a los repositorios Postgres (principal, perfil, activity log).
  - Cerrarlo en el shutdown de la app.

Colaboradores:
  - psycopg_pool.ConnectionPool
  - crosscutting.config.Settings
  - crosscutting.exceptions.DatabaseError (base de los errores de pool)

Notas:
  - Los errores del pool son DatabaseError: si un request llega sin pool,
    el handler global responde 500 DATABASE_ERROR.
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Callable

from psycopg import Connection
from psycopg_pool import ConnectionPool

from ...crosscutting.exceptions import DatabaseError
from ...crosscutting.logger import logger


class DatabasePoolError(DatabaseError):
    """Uso incorrecto del ciclo de vida del pool."""

    error_code: str = "DATABASE_POOL_ERROR"


class PoolAlreadyInitializedError(DatabasePoolError):
    """init_pool() llamado con un pool abierto."""


class PoolNotInitializedError(DatabasePoolError):
    """Un repositorio pidió conexión antes del startup."""


_state_lock = threading.Lock()
_pool: ConnectionPool | None = None


def _make_configure(statement_timeout_ms: int) -> Callable[[Connection], None]:
    """Hook `configure` de psycopg_pool: corre una vez por conexión nueva."""

    def configure(conn: Connection) -> None:
        if statement_timeout_ms <= 0:
            return
        conn.execute(f"SET statement_timeout = {int(statement_timeout_ms)}")
        conn.commit()

    return configure


def init_pool(
    database_url: str,
    min_size: int,
    max_size: int,
    *,
    statement_timeout_ms: int = 0,
) -> ConnectionPool:
    global _pool

    with _state_lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("Profile store pool is already open")

        _pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_make_configure(statement_timeout_ms),
            open=True,
        )

    logger.info(
        "Profile store pool opened",
        extra={
            "min_size": min_size,
            "max_size": max_size,
            "statement_timeout_ms": statement_timeout_ms,
        },
    )
    return _pool


def init_pool_from_settings(settings) -> ConnectionPool:
    """Abre el pool con DATABASE_URL / DB_POOL_* / DB_STATEMENT_TIMEOUT_MS."""
    return init_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        statement_timeout_ms=settings.db_statement_timeout_ms,
    )


def is_pool_initialized() -> bool:
    return _pool is not None


def get_pool() -> ConnectionPool:
    pool = _pool
    if pool is None:
        raise PoolNotInitializedError(
            "Profile store pool is not open (init_pool was never called)"
        )
    return pool


def close_pool() -> None:
    """Cierra el pool si está abierto. Idempotente."""
    global _pool

    with _state_lock:
        pool, _pool = _pool, None

    if pool is None:
        return
    pool.close()
    logger.info("Profile store pool closed")
