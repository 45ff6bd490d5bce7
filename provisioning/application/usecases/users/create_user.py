"""
===============================================================================
USE CASE: Create User (subordinate account)
===============================================================================

Business Goal:
    Permitir que un usuario de la jerarquía (director / manager / lead) dé de
    alta una cuenta subordinada, garantizando:
      - quién puede crear a quién (policy pura)
      - si la cuenta nace aprobada o pendiente de un director
      - consistencia principal <-> perfil aunque falle uno de los dos pasos

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    CreateUserUseCase

Responsibilities:
    - Resolver el perfil del caller (NOT_FOUND si no existe).
    - Aplicar gate de elegibilidad, validación de campos y matriz de roles
      antes de cualquier escritura externa.
    - Ejecutar la saga principal + perfil (con compensación).
    - Emitir la entrada de activity log (best-effort).
    - Devolver CreateUserResult tipado.

Collaborators:
    - domain.provisioning_policy (gate / validate / decide / approval_fields)
    - ProvisioningSaga (IdentityProvider + UserProfileRepository)
    - activity.emit_activity (ActivityLogRepository)
    - clock: Callable[[], datetime] (inyectado; nada de reloj global)

-------------------------------------------------------------------------------
INPUTS / OUTPUTS
-------------------------------------------------------------------------------
Inputs:
    - CreateUserInput(caller_id: UUID, request: AccountRequest)

Outputs:
    - CreateUserResult(user, needs_approval, message, outcome, error)

Error Mapping:
    - NOT_FOUND:        caller sin perfil
    - FORBIDDEN:        caller no elegible / matriz de roles
    - VALIDATION_ERROR: campos faltantes o inválidos
    - UPSTREAM_ERROR:   identity provider / profile store
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable
from uuid import UUID

from ....activity import emit_activity
from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_provisioning_outcome
from ....domain.entities import NewUserProfile, Principal, UserProfile
from ....domain.provisioning_policy import (
    AccountRequest,
    CallerProfile,
    Decision,
    ProvisioningPolicy,
    approval_fields,
    check_caller_eligibility,
    decide,
    validate_account_request,
)
from ....domain.repositories import (
    ActivityLogRepository,
    IdentityProvider,
    UserProfileRepository,
)
from .provisioning_saga import ProvisioningSaga, SagaOutcome
from .user_results import CreateUserResult, UserError, UserErrorCode

ACTIVITY_CREATED_AND_APPROVED = "user_created_and_approved"
ACTIVITY_CREATED_PENDING = "user_created_pending"

MSG_CALLER_NOT_FOUND = "User not found"
MSG_APPROVED = "User created and approved successfully."
MSG_PENDING = (
    "User created successfully. Director approval required before activation."
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CreateUserInput:
    """DTO de entrada: identidad verificada del caller + atributos pedidos."""

    caller_id: UUID
    request: AccountRequest


class CreateUserUseCase:
    """Orquesta el alta de una cuenta subordinada."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        profiles: UserProfileRepository,
        activity_log: ActivityLogRepository | None = None,
        policy: ProvisioningPolicy | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._profiles = profiles
        self._activity_log = activity_log
        self._policy = policy or ProvisioningPolicy()
        self._clock = clock
        self._saga = ProvisioningSaga(identity_provider, profiles)

    def execute(self, input_data: CreateUserInput) -> CreateUserResult:
        request = input_data.request
        self._log_request(request)

        # 1) Perfil del caller.
        caller_profile = self._profiles.get_profile(input_data.caller_id)
        if caller_profile is None:
            return self._error(UserErrorCode.NOT_FOUND, MSG_CALLER_NOT_FOUND)
        caller = CallerProfile.from_profile(caller_profile)

        # 2) Gate de elegibilidad.
        rejection = check_caller_eligibility(caller, self._policy)
        if rejection is not None:
            return self._forbidden(caller, rejection)

        # 3) Validación de campos (400 aun para callers autorizados).
        field_errors = validate_account_request(request)
        if field_errors:
            record_provisioning_outcome("invalid")
            return self._error(
                UserErrorCode.VALIDATION_ERROR,
                field_errors[0].message,
                errors=[e.to_dict() for e in field_errors],
            )

        # 4) Matriz de roles.
        decision = decide(caller, request, self._policy)
        if not decision.permitted:
            return self._forbidden(caller, decision)

        # 5) Saga principal + perfil.
        now = self._clock()
        saga_result = self._saga.run(
            email=request.email.strip(),
            password=request.password,
            build_profile=lambda principal: self._build_profile(
                principal, request, decision, caller_id=caller.id, now=now
            ),
        )
        if not saga_result.committed:
            return CreateUserResult(
                outcome=saga_result.outcome,
                error=UserError(
                    code=UserErrorCode.UPSTREAM_ERROR,
                    message=saga_result.error.message,
                ),
            )

        user = saga_result.profile
        logger.info(
            "User created successfully",
            extra={
                "user_id": str(user.id),
                "role": user.role.value,
                "approval_status": user.approval_status.value,
            },
        )

        # 6) Activity log (best-effort, nunca compensa).
        emit_activity(
            self._activity_log,
            user_id=caller.id,
            activity_type=(
                ACTIVITY_CREATED_AND_APPROVED
                if decision.auto_approve
                else ACTIVITY_CREATED_PENDING
            ),
            description=self._describe(user, decision),
            entity_id=user.id,
            new_data=user.to_dict(),
        )

        record_provisioning_outcome("approved" if decision.auto_approve else "pending")
        return CreateUserResult(
            user=user,
            needs_approval=decision.needs_approval,
            message=MSG_APPROVED if decision.auto_approve else MSG_PENDING,
            outcome=SagaOutcome.COMMITTED,
        )

    # =========================================================================
    # Helpers privados
    # =========================================================================

    def _build_profile(
        self,
        principal: Principal,
        request: AccountRequest,
        decision: Decision,
        *,
        caller_id: UUID,
        now: datetime,
    ) -> NewUserProfile:
        fields = approval_fields(
            decision, caller_id=caller_id, now=now, policy=self._policy
        )
        return NewUserProfile(
            id=principal.id,
            email=principal.email,
            full_name=request.full_name.strip(),
            role=request.parsed_role,
            phone_number=request.phone_number or None,
            office_id=request.office_id or None,
            is_lead=bool(request.is_lead),
            reporting_to_id=request.reporting_to_id,
            status=fields.status,
            approval_status=fields.approval_status,
            added_by=caller_id,
            added_time=now,
            approved_by=fields.approved_by,
            approved_time=fields.approved_time,
        )

    @staticmethod
    def _describe(user: UserProfile, decision: Decision) -> str:
        lead = " (Lead)" if user.is_lead else ""
        approval = " - Auto approved" if decision.auto_approve else " - Pending approval"
        return (
            f"Created user: {user.full_name} ({user.email}) "
            f"with role: {user.role.value}{lead}{approval}"
        )

    @staticmethod
    def _log_request(request: AccountRequest) -> None:
        logger.info(
            "Create user request",
            extra={
                "email": request.email,
                "role": request.role,
                "office_id": request.office_id,
                "is_lead": request.is_lead,
                "full_name": request.full_name,
                "phone_number": request.phone_number,
            },
        )

    @staticmethod
    def _forbidden(caller: CallerProfile, decision: Decision) -> CreateUserResult:
        logger.warning(
            "Alta rechazada",
            extra={
                "caller_id": str(caller.id),
                "caller_role": caller.role.value,
                "reason": decision.reason,
            },
        )
        record_provisioning_outcome("rejected")
        return CreateUserResult(
            error=UserError(code=UserErrorCode.FORBIDDEN, message=decision.reason)
        )

    @staticmethod
    def _error(
        code: UserErrorCode, message: str, errors: list[dict] | None = None
    ) -> CreateUserResult:
        return CreateUserResult(
            error=UserError(code=code, message=message, errors=errors)
        )
