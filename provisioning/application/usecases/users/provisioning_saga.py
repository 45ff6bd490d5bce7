"""
===============================================================================
PROVISIONING SAGA (principal + profile, con compensación)
===============================================================================

Business Goal:
    Crear un Principal en el identity provider y su UserProfile en el profile
    store como una única unidad lógica, aunque son dos stores sin
    transacción común. El caller observa éxito total o falla total.

Pasos (estrictamente secuenciales, sin reintentos):
    1) create_principal(email, password, email_confirmed=True)
         falla -> ABORTED (no se intenta el perfil)
    2) insert_profile(build_profile(principal))
         ok    -> COMMITTED
         falla -> compensación: delete_principal(principal.id)
                    ok    -> ROLLED_BACK
                    falla -> ROLLBACK_FAILED (se loguea; el error reportado
                             sigue siendo el del insert)

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    ProvisioningSaga

Responsibilities:
    - Ejecutar los dos pasos y la compensación.
    - Devolver un SagaResult tipado (outcome + error primario).
    - Loguear y contar fallas de compensación (visibilidad operativa).

Collaborators:
    - domain.repositories.IdentityProvider
    - domain.repositories.UserProfileRepository
    - crosscutting.exceptions.UpstreamError
    - crosscutting.metrics.record_provisioning_outcome
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ....crosscutting.exceptions import UpstreamError
from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_provisioning_outcome
from ....domain.entities import NewUserProfile, Principal, UserProfile
from ....domain.repositories import IdentityProvider, UserProfileRepository


class SagaOutcome(str, Enum):
    """Estado terminal de la saga."""

    COMMITTED = "committed"
    ABORTED = "aborted"
    ROLLED_BACK = "rolled_back"
    ROLLBACK_FAILED = "rollback_failed"


@dataclass(frozen=True)
class SagaResult:
    outcome: SagaOutcome
    profile: UserProfile | None = None
    principal: Principal | None = None
    error: UpstreamError | None = None

    @property
    def committed(self) -> bool:
        return self.outcome == SagaOutcome.COMMITTED


class ProvisioningSaga:
    def __init__(
        self,
        identity_provider: IdentityProvider,
        profiles: UserProfileRepository,
    ) -> None:
        self._identity = identity_provider
        self._profiles = profiles

    def run(
        self,
        *,
        email: str,
        password: str,
        build_profile: Callable[[Principal], NewUserProfile],
    ) -> SagaResult:
        try:
            principal = self._identity.create_principal(
                email=email, password=password, email_confirmed=True
            )
        except UpstreamError as exc:
            logger.warning(
                "Identity provider rechazó el alta",
                extra={"email": email, "error": exc.message},
            )
            record_provisioning_outcome("upstream_error")
            return SagaResult(outcome=SagaOutcome.ABORTED, error=exc)

        try:
            profile = self._profiles.insert_profile(build_profile(principal))
        except Exception as exc:
            logger.error(
                "Profile creation error",
                extra={"principal_id": str(principal.id), "error": str(exc)},
            )
            outcome = self._compensate(principal)
            if not isinstance(exc, UpstreamError):
                raise
            return SagaResult(outcome=outcome, principal=principal, error=exc)

        return SagaResult(
            outcome=SagaOutcome.COMMITTED, profile=profile, principal=principal
        )

    def _compensate(self, principal: Principal) -> SagaOutcome:
        """Borra el principal recién creado (best-effort)."""
        try:
            self._identity.delete_principal(principal.id)
        except Exception as exc:
            logger.error(
                "Rollback failed: principal left without profile",
                exc_info=True,
                extra={"principal_id": str(principal.id), "error": str(exc)},
            )
            record_provisioning_outcome("rollback_failed")
            return SagaOutcome.ROLLBACK_FAILED

        logger.info(
            "Principal eliminado tras falla del perfil",
            extra={"principal_id": str(principal.id)},
        )
        record_provisioning_outcome("rolled_back")
        return SagaOutcome.ROLLED_BACK
