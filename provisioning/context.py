"""
===============================================================================
TARJETA CRC — provisioning/context.py (Contexto por request)
===============================================================================

Responsabilidades:
  - Guardar en ContextVars lo que identifica al request en curso:
    request_id, método, path y el caller autenticado (caller_id).
  - Exponer ese contexto como dict para enriquecer cada línea de log.

Colaboradores:
  - crosscutting.middleware: abre y cierra el contexto por request.
  - identity.auth.require_caller: agrega caller_id cuando el token es válido.
  - crosscutting.logger: lee get_context_dict().

Restricciones:
  - Valores string; vacío significa "no disponible" y no se emite.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")
caller_id_var: ContextVar[str] = ContextVar("caller_id", default="")

# R: clave en el JSON de logs -> ContextVar.
_LOG_FIELDS: tuple[tuple[str, ContextVar[str]], ...] = (
    ("request_id", request_id_var),
    ("method", http_method_var),
    ("path", http_path_var),
    ("caller_id", caller_id_var),
)


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> None:
    request_id_var.set(request_id or "")
    http_method_var.set(method or "")
    http_path_var.set(path or "")


def set_caller_context(caller_id: object) -> None:
    """Registra el caller verificado (UUID o str) para el resto del request."""
    caller_id_var.set(str(caller_id) if caller_id else "")


def get_context_dict() -> dict[str, str]:
    return {key: value for key, var in _LOG_FIELDS if (value := var.get())}


def clear_context() -> None:
    for _, var in _LOG_FIELDS:
        var.set("")
