"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/principal.py
============================================================
Class: InMemoryIdentityProvider

Responsibilities:
  - Emular el identity provider en memoria (tests / local dev).
  - Rechazar emails duplicados igual que la restricción UNIQUE de Postgres.
  - Guardar sólo el hash del password, nunca el valor en claro.

Collaborators:
  - domain.repositories.IdentityProvider (contrato a implementar)
  - identity.passwords.hash_password
  - crosscutting.exceptions.IdentityProviderError

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - NOT FOR PRODUCTION: los datos se pierden al reiniciar.
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import IdentityProviderError
from ....domain.entities import Principal
from ....identity.passwords import hash_password
from ..postgres.principal import MSG_EMAIL_EXISTS, normalize_email


class InMemoryIdentityProvider:
    """Identity provider in-memory (UUID -> (Principal, password_hash))."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._principals: Dict[UUID, Principal] = {}
        self._password_hashes: Dict[UUID, str] = {}
        self._confirmed: Dict[UUID, bool] = {}

    def create_principal(
        self, *, email: str, password: str, email_confirmed: bool = True
    ) -> Principal:
        normalized = normalize_email(email)
        with self._lock:
            if any(p.email == normalized for p in self._principals.values()):
                raise IdentityProviderError(MSG_EMAIL_EXISTS)

            principal = Principal(id=uuid4(), email=normalized)
            self._principals[principal.id] = principal
            self._password_hashes[principal.id] = hash_password(password)
            self._confirmed[principal.id] = email_confirmed
            return principal

    def delete_principal(self, principal_id: UUID) -> None:
        with self._lock:
            self._principals.pop(principal_id, None)
            self._password_hashes.pop(principal_id, None)
            self._confirmed.pop(principal_id, None)

    def get_principal_by_email(self, email: str) -> Optional[Principal]:
        normalized = normalize_email(email)
        with self._lock:
            for principal in self._principals.values():
                if principal.email == normalized:
                    return principal
        return None

    # R: Helpers para tests (no forman parte del contrato).
    def exists(self, principal_id: UUID) -> bool:
        with self._lock:
            return principal_id in self._principals

    def is_email_confirmed(self, principal_id: UUID) -> bool:
        with self._lock:
            return self._confirmed.get(principal_id, False)

    def count(self) -> int:
        with self._lock:
            return len(self._principals)

    def seed(self, principal: Principal, *, password: str = "seeded") -> Principal:
        """R: Registra un principal con id fijo (bootstrap de directores en tests)."""
        with self._lock:
            self._principals[principal.id] = principal
            self._password_hashes[principal.id] = hash_password(password)
            self._confirmed[principal.id] = True
            return principal
