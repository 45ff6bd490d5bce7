"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/store_errors.py
============================================================
Responsibilities:
  - Separar "Postgres rechazó el dato" de "Postgres no está disponible".

Reglas:
  - Rechazo (IntegrityError: unique / check / FK / not null; DataError):
    el adapter lo reporta como UpstreamError con el mensaje del motor (400).
  - Todo lo demás (OperationalError, PoolTimeout, pool sin abrir, etc.)
    es DatabaseError (500, mensaje oculto en producción). Los DatabaseError
    propios (pool sin abrir) se re-lanzan sin envolver.
============================================================
"""

from __future__ import annotations

from psycopg import errors as pg_errors

from ....crosscutting.exceptions import DatabaseError

REJECTED_BY_STORE: tuple[type[Exception], ...] = (
    pg_errors.IntegrityError,
    pg_errors.DataError,
)


def store_unavailable(operation: str, exc: Exception) -> DatabaseError:
    """DatabaseError para un fallo que no es rechazo del motor."""
    return DatabaseError(f"{operation} failed: {exc}", original_error=exc)
