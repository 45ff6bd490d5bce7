"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/principal.py
============================================================
Class: PostgresIdentityProvider

Responsibilities:
  - Crear principals (email + password hasheado con Argon2) con email
    pre-confirmado.
  - Borrar principals (compensación de la saga de alta).
  - Buscar principals por email.
  - Rechazos del motor (email duplicado, constraints) -> IdentityProviderError;
    DB caída / pool sin abrir -> DatabaseError.

Collaborators:
  - psycopg_pool.ConnectionPool (pool de conexiones)
  - psycopg.errors.UniqueViolation
  - identity.passwords.hash_password
  - domain.entities.Principal
  - crosscutting.exceptions.IdentityProviderError / DatabaseError

Constraints / Notes:
  - El password en claro nunca se loguea ni se persiste.
  - El email se normaliza (trim + lower) en este borde: es la identidad.
  - SQL parametrizado siempre.
============================================================
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError, IdentityProviderError
from ....crosscutting.logger import logger
from ....domain.entities import Principal
from ....identity.passwords import hash_password
from .store_errors import REJECTED_BY_STORE, store_unavailable

MSG_EMAIL_EXISTS = "A user with this email address has already been registered"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class PostgresIdentityProvider:
    """Identity provider respaldado por la tabla auth_principals."""

    def __init__(self, pool: ConnectionPool | None = None):
        # Pool inyectable: tests pueden pasar su pool; prod usa el pool global.
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    def create_principal(
        self, *, email: str, password: str, email_confirmed: bool = True
    ) -> Principal:
        normalized = normalize_email(email)
        principal_id = uuid4()

        try:
            with self._get_pool().connection() as conn:
                row = conn.execute(
                    """
                    INSERT INTO auth_principals
                        (id, email, password_hash, email_confirmed_at)
                    VALUES (%s, %s, %s, CASE WHEN %s THEN now() ELSE NULL END)
                    RETURNING id, email
                    """,
                    (principal_id, normalized, hash_password(password), email_confirmed),
                ).fetchone()
        except pg_errors.UniqueViolation as exc:
            raise IdentityProviderError(MSG_EMAIL_EXISTS, original_error=exc) from exc
        except REJECTED_BY_STORE as exc:
            raise IdentityProviderError(str(exc), original_error=exc) from exc
        except DatabaseError:
            raise
        except Exception as exc:
            logger.exception(
                "PostgresIdentityProvider: create_principal failed",
                extra={"email": normalized, "error": str(exc)},
            )
            raise store_unavailable("create_principal", exc) from exc

        return Principal(id=row[0], email=row[1])

    def delete_principal(self, principal_id: UUID) -> None:
        try:
            with self._get_pool().connection() as conn:
                conn.execute(
                    "DELETE FROM auth_principals WHERE id = %s",
                    (principal_id,),
                )
        except DatabaseError:
            raise
        except Exception as exc:
            logger.exception(
                "PostgresIdentityProvider: delete_principal failed",
                extra={"principal_id": str(principal_id), "error": str(exc)},
            )
            raise store_unavailable("delete_principal", exc) from exc

    def get_principal_by_email(self, email: str) -> Optional[Principal]:
        normalized = normalize_email(email)
        try:
            with self._get_pool().connection() as conn:
                row = conn.execute(
                    "SELECT id, email FROM auth_principals WHERE email = %s",
                    (normalized,),
                ).fetchone()
        except DatabaseError:
            raise
        except Exception as exc:
            logger.exception(
                "PostgresIdentityProvider: get_principal_by_email failed",
                extra={"email": normalized, "error": str(exc)},
            )
            raise store_unavailable("get_principal_by_email", exc) from exc

        return Principal(id=row[0], email=row[1]) if row else None
