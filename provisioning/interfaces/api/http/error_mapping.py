"""
===============================================================================
TARJETA CRC — error_mapping.py (UseCase Error -> HTTP)
===============================================================================

Responsabilidades:
  - Traducir UserErrorCode a AppHTTPException (status + code + mensaje).
  - Centralizar el mapeo para que el router no decida status codes.

Reglas:
  - El mensaje del caso de uso viaja tal cual al cliente (incluidos los
    mensajes de rechazo del identity provider / profile store).

Colaboradores:
  - application.usecases.UserError / UserErrorCode
  - crosscutting.error_responses (factories)
===============================================================================
"""

from __future__ import annotations

from provisioning.application.usecases import UserError, UserErrorCode
from provisioning.crosscutting.error_responses import (
    AppHTTPException,
    forbidden,
    internal_error,
    not_found,
    unauthorized,
    upstream_error,
    validation_error,
)


def to_http_exception(error: UserError) -> AppHTTPException:
    """UserError -> AppHTTPException (no la lanza)."""
    if error.code == UserErrorCode.UNAUTHORIZED:
        return unauthorized(error.message)
    if error.code == UserErrorCode.NOT_FOUND:
        return not_found(error.message)
    if error.code == UserErrorCode.FORBIDDEN:
        return forbidden(error.message)
    if error.code == UserErrorCode.VALIDATION_ERROR:
        return validation_error(error.message, error.errors)
    if error.code == UserErrorCode.UPSTREAM_ERROR:
        return upstream_error(error.message)
    return internal_error(error.message)


def raise_user_error(error: UserError) -> None:
    raise to_http_exception(error)
