"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user_profile.py
============================================================
Class: PostgresUserProfileRepository

Responsibilities:
  - Leer perfiles por id (caller) y por email.
  - Insertar perfiles nuevos (INSERT ... RETURNING) y devolver la fila.
  - Mapear filas crudas -> entidad de dominio `UserProfile` validando enums.
  - Exponer fallos consistentes: ProfileStoreError solo cuando el motor
    rechaza el insert (se reporta al cliente); DatabaseError si la DB no
    responde o el pool no está abierto.

Collaborators:
  - psycopg_pool.ConnectionPool (pool de conexiones)
  - domain.entities.UserProfile / NewUserProfile
  - identity.users (UserRole / UserStatus / ApprovalStatus)
  - crosscutting.logger.logger
  - crosscutting.exceptions.ProfileStoreError / DatabaseError

Constraints / Notes:
  - Repositorio puro: NO decide permisos ni estados.
  - Retorna None cuando no existe el recurso.
  - La unicidad del id la garantiza la PK de `users`, no este código.
  - SQL parametrizado siempre.
============================================================
"""

from __future__ import annotations

from typing import Iterable, Optional
from uuid import UUID

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError, ProfileStoreError
from ....crosscutting.logger import logger
from ....domain.entities import NewUserProfile, UserProfile
from ....identity.users import ApprovalStatus, UserRole, UserStatus
from .store_errors import REJECTED_BY_STORE, store_unavailable

# R: Lista explícita de columnas (contrato con la migración 001).
_PROFILE_COLUMNS = (
    "id, email, full_name, role, phone_number, office_id, is_lead, "
    "reporting_to_id, status, approval_status, added_by, added_time, "
    "approved_by, approved_time"
)


def _row_to_profile(row: tuple) -> UserProfile:
    """
    Convierte una fila de `users` a `UserProfile`.

    Enum casting estricto: valores desconocidos -> DatabaseError (drift de datos).
    """
    try:
        role = UserRole(row[3])
        status = UserStatus(row[8])
        approval_status = ApprovalStatus(row[9])
    except ValueError as exc:
        raise DatabaseError(f"Invalid enum value in users row: {exc}") from exc

    return UserProfile(
        id=row[0],
        email=row[1],
        full_name=row[2],
        role=role,
        phone_number=row[4],
        office_id=row[5],
        is_lead=bool(row[6]),
        reporting_to_id=row[7],
        status=status,
        approval_status=approval_status,
        added_by=row[10],
        added_time=row[11],
        approved_by=row[12],
        approved_time=row[13],
    )


class PostgresUserProfileRepository:
    """Repositorio PostgreSQL para perfiles (tabla users)."""

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    def _fetchone(
        self,
        *,
        query: str,
        params: Iterable[object],
        log_msg: str,
        log_extra: dict[str, object],
    ) -> tuple | None:
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except DatabaseError:
            raise
        except Exception as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc

    # ------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------
    def get_profile(self, user_id: UUID) -> Optional[UserProfile]:
        row = self._fetchone(
            query=f"SELECT {_PROFILE_COLUMNS} FROM users WHERE id = %s",
            params=(user_id,),
            log_msg="PostgresUserProfileRepository: get_profile failed",
            log_extra={"user_id": str(user_id)},
        )
        return _row_to_profile(row) if row else None

    def get_profile_by_email(self, email: str) -> Optional[UserProfile]:
        row = self._fetchone(
            query=f"SELECT {_PROFILE_COLUMNS} FROM users WHERE email = %s",
            params=(email.strip().lower(),),
            log_msg="PostgresUserProfileRepository: get_profile_by_email failed",
            log_extra={"email": email},
        )
        return _row_to_profile(row) if row else None

    def ping(self) -> bool:
        row = self._fetchone(
            query="SELECT 1",
            params=(),
            log_msg="PostgresUserProfileRepository: ping failed",
            log_extra={},
        )
        return bool(row and row[0] == 1)

    # ------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------
    def insert_profile(self, profile: NewUserProfile) -> UserProfile:
        """
        Inserta el perfil y devuelve la fila almacenada.

        Rechazos del motor (PK duplicada, FK al principal, CHECK) -> ProfileStoreError
        con el mensaje de Postgres. DB no disponible -> DatabaseError (500).
        En ambos casos la saga compensa borrando el principal.
        """
        try:
            with self._get_pool().connection() as conn:
                row = conn.execute(
                    f"""
                    INSERT INTO users ({_PROFILE_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_PROFILE_COLUMNS}
                    """,
                    (
                        profile.id,
                        profile.email,
                        profile.full_name,
                        profile.role.value,
                        profile.phone_number,
                        profile.office_id,
                        profile.is_lead,
                        profile.reporting_to_id,
                        profile.status.value,
                        profile.approval_status.value,
                        profile.added_by,
                        profile.added_time,
                        profile.approved_by,
                        profile.approved_time,
                    ),
                ).fetchone()
        except REJECTED_BY_STORE as exc:
            logger.warning(
                "PostgresUserProfileRepository: insert_profile rejected",
                extra={"user_id": str(profile.id), "error": str(exc)},
            )
            raise ProfileStoreError(str(exc), original_error=exc) from exc
        except DatabaseError:
            raise
        except Exception as exc:
            logger.exception(
                "PostgresUserProfileRepository: insert_profile failed",
                extra={"user_id": str(profile.id), "error": str(exc)},
            )
            raise store_unavailable("insert_profile", exc) from exc

        if not row:
            raise DatabaseError("insert_profile returned no row")

        return _row_to_profile(row)
