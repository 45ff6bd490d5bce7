"""
===============================================================================
TARJETA CRC — provisioning/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer adapters (identity provider, profile store, activity log)
    siguiendo DIP.
  - Construir la ProvisioningPolicy canónica de la instalación desde Settings.
  - Exponer factories para FastAPI (Depends) y para scripts.
  - Mantener singletons con caching (lru_cache).

Colaboradores:
  - crosscutting.config.get_settings
  - domain.repositories.* (puertos)
  - domain.provisioning_policy.ProvisioningPolicy
  - infrastructure.repositories.* (implementaciones)
  - application.usecases.CreateUserUseCase

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO depende de FastAPI (solo expone factories).
  - En APP_ENV test los tres adapters son in-memory y comparten estado
    (la FK perfil -> principal se emula contra el mismo identity provider).
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.usecases import CreateUserUseCase
from .crosscutting.config import get_settings
from .domain.provisioning_policy import LeadScopeRule, ProvisioningPolicy
from .domain.repositories import (
    ActivityLogRepository,
    IdentityProvider,
    UserProfileRepository,
)
from .identity.users import UserStatus
from .infrastructure.repositories import (
    InMemoryActivityLogRepository,
    InMemoryIdentityProvider,
    InMemoryUserProfileRepository,
    PostgresActivityLogRepository,
    PostgresIdentityProvider,
    PostgresUserProfileRepository,
)


# =============================================================================
# Adapters (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_identity_provider() -> IdentityProvider:
    """Identity provider (in-memory en test; Postgres en runtime)."""
    if get_settings().is_test():
        return InMemoryIdentityProvider()
    return PostgresIdentityProvider()


@lru_cache(maxsize=1)
def get_user_profile_repository() -> UserProfileRepository:
    """Profile store (in-memory en test; Postgres en runtime)."""
    if get_settings().is_test():
        return InMemoryUserProfileRepository(identity_provider=get_identity_provider())
    return PostgresUserProfileRepository()


@lru_cache(maxsize=1)
def get_activity_log_repository() -> ActivityLogRepository:
    """Activity log sink (in-memory en test; Postgres en runtime)."""
    if get_settings().is_test():
        return InMemoryActivityLogRepository()
    return PostgresActivityLogRepository()


# =============================================================================
# Policy
# =============================================================================


@lru_cache(maxsize=1)
def get_provisioning_policy() -> ProvisioningPolicy:
    settings = get_settings()
    return ProvisioningPolicy(
        lead_scope_rule=LeadScopeRule(settings.lead_scope_rule),
        require_caller_active=settings.require_caller_active,
        pending_status=UserStatus(settings.pending_status),
    )


# =============================================================================
# Casos de uso (no cacheados: son livianos)
# =============================================================================


def get_create_user_use_case() -> CreateUserUseCase:
    """Caso de uso: alta de cuenta subordinada."""
    return CreateUserUseCase(
        identity_provider=get_identity_provider(),
        profiles=get_user_profile_repository(),
        activity_log=get_activity_log_repository(),
        policy=get_provisioning_policy(),
    )


def reset_container() -> None:
    """Limpia los singletons (tests / recarga de Settings)."""
    for factory in (
        get_identity_provider,
        get_user_profile_repository,
        get_activity_log_repository,
        get_provisioning_policy,
    ):
        factory.cache_clear()
