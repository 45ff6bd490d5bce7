"""
===============================================================================
TARJETA CRC — domain/provisioning_policy.py
===============================================================================

Módulo:
    Política de Alta de Usuarios (autorización + aprobación)

Responsabilidades:
    - Decidir si un caller puede crear la cuenta pedida (matriz de roles).
    - Decidir si la cuenta queda aprobada en el acto o pendiente de un director.
    - Validar los campos del pedido (independiente de quién lo pide).
    - Derivar juntos status / approval_status / approved_by / approved_time.
    - Ser 100% testeable: funciones puras, inputs explícitos, sin reloj global.

Colaboradores:
    - identity.users: UserRole, UserStatus, ApprovalStatus
    - domain.entities.UserProfile (origen del CallerProfile)
    - application.usecases.create_user: invoca esta policy antes de tocar
      cualquier colaborador externo.

Reglas (primera que matchea gana; si ninguna, se rechaza):
    - director            -> cualquier rol; auto-aprobado.
    - manager             -> employee de su misma oficina; pendiente.
    - employee con is_lead-> employee de su oficina (lead_scope_rule=office)
                             o que le reporte (lead_scope_rule=reporting_to);
                             siempre pendiente.
    - resto               -> Forbidden.

Gate previo (require_caller_active=True): un caller inactivo o no aprobado
no puede crear a nadie.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from ..identity.users import ApprovalStatus, UserRole, UserStatus
from .entities import UserProfile

MSG_CALLER_NOT_ELIGIBLE = "Forbidden - User not active or approved"
MSG_INSUFFICIENT_PERMISSIONS = "Forbidden - Insufficient permissions"
MSG_MISSING_FIELDS = "Missing required fields"
MSG_OFFICE_REQUIRED = "office_id is required for non-director roles"
MSG_INVALID_ROLE = "Invalid role"
MSG_LEAD_REQUIRES_EMPLOYEE = "Only employees can be leads"


class LeadScopeRule(str, Enum):
    """Qué empleados puede crear un lead."""

    OFFICE = "office"
    REPORTING_TO = "reporting_to"


@dataclass(frozen=True, slots=True)
class ProvisioningPolicy:
    """Set de reglas canónico de la instalación (viene de Settings)."""

    lead_scope_rule: LeadScopeRule = LeadScopeRule.OFFICE
    require_caller_active: bool = True
    pending_status: UserStatus = UserStatus.INACTIVE


@dataclass(frozen=True, slots=True)
class CallerProfile:
    """Atributos del caller relevantes para decidir."""

    id: UUID
    role: UserRole
    is_lead: bool = False
    office_id: str | None = None
    status: UserStatus | None = None
    approval_status: ApprovalStatus | None = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "CallerProfile":
        return cls(
            id=profile.id,
            role=profile.role,
            is_lead=profile.is_lead,
            office_id=profile.office_id,
            status=profile.status,
            approval_status=profile.approval_status,
        )


@dataclass(frozen=True, slots=True)
class AccountRequest:
    """
    Atributos pedidos para la cuenta nueva, tal como llegan.

    `role` queda como string crudo: la validez del enum es una regla de
    validación (400), no de autorización.
    """

    email: str | None = None
    password: str | None = None
    full_name: str | None = None
    role: str | None = None
    phone_number: str | None = None
    office_id: str | None = None
    reporting_to_id: UUID | None = None
    is_lead: bool = False

    @property
    def parsed_role(self) -> UserRole | None:
        return UserRole.parse(self.role)


@dataclass(frozen=True, slots=True)
class Decision:
    """Resultado de la policy."""

    permitted: bool
    auto_approve: bool = False
    reason: str | None = None

    @property
    def needs_approval(self) -> bool:
        return not self.auto_approve

    @classmethod
    def reject(cls, reason: str) -> "Decision":
        return cls(permitted=False, auto_approve=False, reason=reason)


@dataclass(frozen=True, slots=True)
class FieldError:
    """Error de validación de un campo del pedido."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "msg": self.message}


@dataclass(frozen=True, slots=True)
class ApprovalFields:
    """Campos de estado que se persisten siempre juntos."""

    status: UserStatus
    approval_status: ApprovalStatus
    approved_by: UUID | None
    approved_time: datetime | None


# ---------------------------------------------------------------------------
# Gate de elegibilidad
# ---------------------------------------------------------------------------


def check_caller_eligibility(
    caller: CallerProfile, policy: ProvisioningPolicy
) -> Decision | None:
    """Devuelve un rechazo si el caller no puede crear a nadie; None si pasa."""
    if not policy.require_caller_active:
        return None
    if (
        caller.status != UserStatus.ACTIVE
        or caller.approval_status != ApprovalStatus.APPROVED
    ):
        return Decision.reject(MSG_CALLER_NOT_ELIGIBLE)
    return None


# ---------------------------------------------------------------------------
# Matriz de roles
# ---------------------------------------------------------------------------


def _same_office(caller: CallerProfile, request: AccountRequest) -> bool:
    # Una oficina ausente nunca matchea (ni siquiera con otra ausente).
    return caller.office_id is not None and request.office_id == caller.office_id


def _within_lead_scope(
    caller: CallerProfile, request: AccountRequest, rule: LeadScopeRule
) -> bool:
    if rule == LeadScopeRule.REPORTING_TO:
        return request.reporting_to_id is not None and (
            request.reporting_to_id == caller.id
        )
    return _same_office(caller, request)


def decide(
    caller: CallerProfile,
    request: AccountRequest,
    policy: ProvisioningPolicy,
) -> Decision:
    """Evalúa la matriz de roles en orden de precedencia."""
    requested_role = request.parsed_role

    if caller.role == UserRole.DIRECTOR:
        return Decision(permitted=True, auto_approve=True)

    if caller.role == UserRole.MANAGER:
        if requested_role == UserRole.EMPLOYEE and _same_office(caller, request):
            return Decision(permitted=True, auto_approve=False)
        return Decision.reject(MSG_INSUFFICIENT_PERMISSIONS)

    if caller.role == UserRole.EMPLOYEE and caller.is_lead:
        if requested_role == UserRole.EMPLOYEE and _within_lead_scope(
            caller, request, policy.lead_scope_rule
        ):
            return Decision(permitted=True, auto_approve=False)

    return Decision.reject(MSG_INSUFFICIENT_PERMISSIONS)


# ---------------------------------------------------------------------------
# Validación de campos
# ---------------------------------------------------------------------------


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_account_request(request: AccountRequest) -> list[FieldError]:
    """
    Valida el pedido. El primer error es el que se reporta al cliente.

    Orden: campos requeridos, rol válido, oficina requerida, lead => employee.
    """
    missing = [
        name
        for name in ("email", "password", "full_name", "role")
        if _blank(getattr(request, name))
    ]
    if missing:
        return [FieldError(field=name, message=MSG_MISSING_FIELDS) for name in missing]

    errors: list[FieldError] = []
    role = request.parsed_role

    if role is None:
        errors.append(FieldError(field="role", message=MSG_INVALID_ROLE))
    elif role != UserRole.DIRECTOR and _blank(request.office_id):
        errors.append(FieldError(field="office_id", message=MSG_OFFICE_REQUIRED))

    if request.is_lead and role != UserRole.EMPLOYEE:
        errors.append(FieldError(field="is_lead", message=MSG_LEAD_REQUIRES_EMPLOYEE))

    return errors


# ---------------------------------------------------------------------------
# Derivación de estado
# ---------------------------------------------------------------------------


def approval_fields(
    decision: Decision,
    *,
    caller_id: UUID,
    now: datetime,
    policy: ProvisioningPolicy,
) -> ApprovalFields:
    """Deriva status + approval_status + aprobador a partir de la decisión."""
    if decision.auto_approve:
        return ApprovalFields(
            status=UserStatus.ACTIVE,
            approval_status=ApprovalStatus.APPROVED,
            approved_by=caller_id,
            approved_time=now,
        )
    return ApprovalFields(
        status=policy.pending_status,
        approval_status=ApprovalStatus.PENDING,
        approved_by=None,
        approved_time=None,
    )
