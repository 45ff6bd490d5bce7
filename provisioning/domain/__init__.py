"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio

Responsabilidades:
    - Centralizar exports para imports limpios en application/interfaces.
    - Mantener estable el "surface area" del dominio.

Colaboradores:
    - domain.entities: Principal, UserProfile, NewUserProfile, ActivityLogEntry
    - domain.repositories: puertos de los colaboradores externos
    - domain.provisioning_policy: motor de decisión (puro)

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .entities import ActivityLogEntry, NewUserProfile, Principal, UserProfile
from .provisioning_policy import (
    AccountRequest,
    ApprovalFields,
    CallerProfile,
    Decision,
    FieldError,
    LeadScopeRule,
    ProvisioningPolicy,
    approval_fields,
    check_caller_eligibility,
    decide,
    validate_account_request,
)
from .repositories import (
    ActivityLogRepository,
    IdentityProvider,
    UserProfileRepository,
)

__all__ = [
    # Entities
    "Principal",
    "UserProfile",
    "NewUserProfile",
    "ActivityLogEntry",
    # Ports
    "IdentityProvider",
    "UserProfileRepository",
    "ActivityLogRepository",
    # Decision engine
    "AccountRequest",
    "ApprovalFields",
    "CallerProfile",
    "Decision",
    "FieldError",
    "LeadScopeRule",
    "ProvisioningPolicy",
    "approval_fields",
    "check_caller_eligibility",
    "decide",
    "validate_account_request",
]
