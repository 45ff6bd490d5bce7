# provisioning/crosscutting/error_responses.py
"""
===============================================================================
MÓDULO: Respuestas de error estándar
===============================================================================

Objetivo
--------
Uniformar TODOS los errores HTTP del servicio con el contrato que ya consumen
los clientes del alta de usuarios:

    {"error": "<mensaje>", "code": "<ERROR_CODE>", "request_id": "<id>"}

- "error" es el mensaje humano (los clientes existentes leen solo esta clave)
- "code" permite manejar por categoría estable
- "request_id" correlaciona con logs

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  AppHTTPException + factories + handlers

Responsabilidades:
  - Definir catálogo de códigos de error (ErrorCode)
  - Construir el payload (ErrorBody)
  - Proveer factories de errores frecuentes (401/403/404/400/500)
  - Proveer handlers FastAPI

Colaboradores:
  - crosscutting/middleware.py (request_id)
  - api/exception_handlers.py (mapea errores internos)
  - interfaces/api/http/error_mapping.py (resultado de caso de uso -> HTTP)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    # 4xx
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"

    # 5xx
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class ErrorBody(BaseModel):
    """
    Cuerpo de error.

    Campos extra:
    - errors: lista opcional de detalles (ej: [{"field":"email","msg":"..."}])
    """

    error: str
    code: ErrorCode
    request_id: str | None = None
    errors: list[dict[str, Any]] | None = None


_OPENAPI_ERROR_DESCRIPTIONS = {
    "400": "Invalid fields or rejected by identity provider / profile store",
    "401": "Missing or invalid bearer token",
    "403": "Caller not eligible or role not allowed",
    "404": "Caller profile not found",
    "default": "Unexpected error",
}

OPENAPI_ERROR_RESPONSES: dict[str, dict[str, Any]] = {
    status: {"description": description, "model": ErrorBody}
    for status, description in _OPENAPI_ERROR_DESCRIPTIONS.items()
}


class AppHTTPException(HTTPException):
    """HTTPException con ErrorCode estable y errors[] opcional."""

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code
        self.errors = errors


# ---------------------------------------------------------------------------
# Factories de error (helpers)
# ---------------------------------------------------------------------------
def validation_error(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(400, ErrorCode.VALIDATION_ERROR, detail, errors)


def upstream_error(detail: str) -> AppHTTPException:
    return AppHTTPException(400, ErrorCode.UPSTREAM_ERROR, detail)


def not_found(detail: str = "User not found") -> AppHTTPException:
    return AppHTTPException(404, ErrorCode.NOT_FOUND, detail)


def unauthorized(detail: str = "Unauthorized") -> AppHTTPException:
    return AppHTTPException(401, ErrorCode.UNAUTHORIZED, detail)


def forbidden(detail: str = "Forbidden") -> AppHTTPException:
    return AppHTTPException(403, ErrorCode.FORBIDDEN, detail)


def internal_error(detail: str = "Unknown error occurred") -> AppHTTPException:
    return AppHTTPException(500, ErrorCode.INTERNAL_ERROR, detail)


# ---------------------------------------------------------------------------
# Handlers FastAPI
# ---------------------------------------------------------------------------
def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def error_response(
    request: Request,
    *,
    status_code: int,
    code: ErrorCode,
    message: str,
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Construye la respuesta JSON de error (única forma de salida)."""
    body = ErrorBody(
        error=message,
        code=code,
        request_id=_request_id_from(request),
        errors=errors or None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    """Handler para AppHTTPException (propaga headers opcionales)."""
    return error_response(
        request,
        status_code=exc.status_code,
        code=exc.code,
        message=str(exc.detail),
        errors=exc.errors,
        headers=getattr(exc, "headers", None),
    )
