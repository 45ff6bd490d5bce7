"""
===============================================================================
TARJETA CRC — provisioning/api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir excepciones a la respuesta JSON de error {error, code, request_id}.
  - Centralizar logging de errores con request_id + error_id.
  - Evitar filtrar detalles internos en producción.

Patrones aplicados:
  - Exception Mapping (Presentation Layer).
  - Fail-safe: cualquier excepción no tipada -> 500 INTERNAL_ERROR.

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, error_response
  - crosscutting.exceptions: ProvisioningError y derivadas
  - crosscutting.config.get_settings (nivel de detalle)
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    error_response,
)
from ..crosscutting.exceptions import DatabaseError, ProvisioningError, UpstreamError
from ..crosscutting.logger import logger

MSG_INVALID_BODY = "Invalid request body"
MSG_UNKNOWN_ERROR = "Unknown error occurred"


def _public_message(exc: Exception) -> str:
    # R: En producción no se filtran mensajes internos.
    if get_settings().is_production():
        return MSG_UNKNOWN_ERROR
    return str(exc) or MSG_UNKNOWN_ERROR


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body con tipos inválidos / JSON mal formado -> 400."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "msg": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return error_response(
        request,
        status_code=400,
        code=ErrorCode.VALIDATION_ERROR,
        message=MSG_INVALID_BODY,
        errors=errors,
    )


def _service_error_handler(code: ErrorCode, status_code: int, *, expose_message: bool):
    """
    Construye un handler para una familia de ProvisioningError.

    expose_message=True: el mensaje del colaborador viaja tal cual (400 upstream).
    Caso contrario se aplica _public_message (oculto en producción).
    """

    async def handler(request: Request, exc: ProvisioningError) -> JSONResponse:
        logger.error(
            "Error de servicio",
            extra={
                "code": code.value,
                "error_code": exc.error_code,
                "error_id": exc.error_id,
                "error_message": exc.message,
            },
        )
        return error_response(
            request,
            status_code=status_code,
            code=code,
            message=exc.message if expose_message else _public_message(exc),
            errors=[{"error_id": exc.error_id}],
        )

    return handler


upstream_error_handler = _service_error_handler(
    ErrorCode.UPSTREAM_ERROR, 400, expose_message=True
)
database_error_handler = _service_error_handler(
    ErrorCode.DATABASE_ERROR, 500, expose_message=False
)
provisioning_error_handler = _service_error_handler(
    ErrorCode.INTERNAL_ERROR, 500, expose_message=False
)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler para excepciones no tipadas.

    - Log completo (stacktrace).
    - Respuesta genérica en producción.
    """
    logger.error(
        "Excepción no controlada",
        exc_info=True,
        extra={"error": str(exc)},
    )

    return error_response(
        request,
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        message=_public_message(exc),
    )


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    Importante:
      - Exception genérica se registra al final como fallback.
    """
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(ProvisioningError, provisioning_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
