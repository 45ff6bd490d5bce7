# provisioning/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del servicio (errores de colaboradores externos)
===============================================================================

Objetivo
--------
Que cada adapter (identity provider, profile store, activity log, DB) falle
con una excepción propia que:
- tenga error_code estable
- tenga error_id para correlacionar con logs
- conserve el mensaje del upstream (se devuelve tal cual al cliente en 400)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  ProvisioningError + subclases

Responsabilidades:
  - Estandarizar errores de infraestructura antes de llegar al caso de uso
  - Distinguir "upstream rechazó la operación" de "fallo inesperado"

Colaboradores:
  - infrastructure/* (levantan UpstreamError y derivadas)
  - application/usecases/create_user.py (las traduce a resultados tipados)
  - api/exception_handlers.py (fallback 500)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class ProvisioningError(Exception):
    """Base para errores internos del servicio (error_code + error_id + message)."""

    error_code: str = "PROVISIONING_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class DatabaseError(ProvisioningError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"


class UpstreamError(ProvisioningError):
    """Un colaborador externo rechazó la operación (se reporta como 400)."""

    error_code: str = "UPSTREAM_ERROR"


class IdentityProviderError(UpstreamError):
    """El identity provider no pudo crear/borrar el principal."""

    error_code: str = "IDENTITY_PROVIDER_ERROR"


class ProfileStoreError(UpstreamError):
    """El profile store rechazó el insert (constraint, duplicado, etc.)."""

    error_code: str = "PROFILE_STORE_ERROR"


class ActivityLogError(UpstreamError):
    """El activity log no pudo persistir la entrada (best-effort)."""

    error_code: str = "ACTIVITY_LOG_ERROR"
