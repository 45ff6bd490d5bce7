"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user_profile.py
============================================================
Class: InMemoryUserProfileRepository

Responsibilities:
  - Almacenar perfiles en memoria (tests / local dev).
  - Replicar las restricciones de la tabla `users` que el caso de uso
    necesita observar: PK, email único, FK al principal y los CHECK
    (lead => employee, office_id para no-directores).
  - Fallar con ProfileStoreError como lo haría el adapter Postgres.

Collaborators:
  - domain.repositories.UserProfileRepository (contrato a implementar)
  - InMemoryIdentityProvider (opcional, para emular la FK)

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - Sin identity provider asociado no se valida la FK.
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Optional
from uuid import UUID

from ....crosscutting.exceptions import ProfileStoreError
from ....domain.entities import NewUserProfile, UserProfile
from ....identity.users import UserRole
from .principal import InMemoryIdentityProvider


class InMemoryUserProfileRepository:
    """Profile store in-memory (UUID -> UserProfile)."""

    def __init__(self, identity_provider: InMemoryIdentityProvider | None = None):
        self._lock = Lock()
        self._profiles: Dict[UUID, UserProfile] = {}
        self._identity_provider = identity_provider

    def _check_constraints(self, profile: NewUserProfile) -> None:
        if profile.id in self._profiles:
            raise ProfileStoreError(
                'duplicate key value violates unique constraint "pk_users"'
            )
        if any(p.email == profile.email for p in self._profiles.values()):
            raise ProfileStoreError(
                'duplicate key value violates unique constraint "uq_users_email"'
            )
        if self._identity_provider is not None and not self._identity_provider.exists(
            profile.id
        ):
            raise ProfileStoreError(
                'insert or update on table "users" violates foreign key constraint '
                '"fk_users_id__auth_principals"'
            )
        if profile.is_lead and profile.role != UserRole.EMPLOYEE:
            raise ProfileStoreError(
                'new row for relation "users" violates check constraint '
                '"ck_users_lead_is_employee"'
            )
        if profile.role != UserRole.DIRECTOR and not profile.office_id:
            raise ProfileStoreError(
                'new row for relation "users" violates check constraint '
                '"ck_users_office_required"'
            )

    def get_profile(self, user_id: UUID) -> Optional[UserProfile]:
        with self._lock:
            return self._profiles.get(user_id)

    def get_profile_by_email(self, email: str) -> Optional[UserProfile]:
        normalized = (email or "").strip().lower()
        with self._lock:
            for profile in self._profiles.values():
                if profile.email == normalized:
                    return profile
        return None

    def insert_profile(self, profile: NewUserProfile) -> UserProfile:
        with self._lock:
            self._check_constraints(profile)
            stored = UserProfile.from_new(profile)
            self._profiles[stored.id] = stored
            return stored

    def ping(self) -> bool:
        return True

    # R: Helpers para tests (no forman parte del contrato).
    def seed(self, profile: UserProfile) -> UserProfile:
        """R: Inserta un perfil ya construido salteando las restricciones."""
        with self._lock:
            self._profiles[profile.id] = profile
            return profile

    def count(self) -> int:
        with self._lock:
            return len(self._profiles)
