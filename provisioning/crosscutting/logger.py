# provisioning/crosscutting/logger.py
"""
===============================================================================
MÓDULO: Logger estructurado (JSON) con contexto de request
===============================================================================

Objetivo
--------
Loguear cada alta de usuario de forma:
- Parseable (JSON, una línea por evento)
- Correlacionable (request_id / method / path)
- Segura (passwords y tokens nunca llegan al stdout)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  JSONFormatter + setup_logger()

Responsabilidades:
  - Formatear LogRecord como JSON
  - Enriquecer con el contexto del request (provisioning/context.py)
  - Redactar claves sensibles y recortar valores gigantes

Colaboradores:
  - provisioning/context.py (ContextVars)
  - crosscutting/config.py (log_level / log_json)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

from ..context import get_context_dict

# Atributos estándar del LogRecord: no se copian como "extra".
_RESERVED_RECORD_KEYS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "taskName"}

REDACTED = "***REDACTADO***"
PRESENT = "[PRESENT]"
_MAX_VALUE_CHARS = 4_000
_MAX_DEPTH = 4

# R: credenciales -> REDACTED siempre.
SECRET_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "password_hash",
        "secret",
        "jwt_secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "apikey",
    }
)

# R: datos de contacto -> solo se informa si vinieron.
PRESENCE_KEYS: frozenset[str] = frozenset({"phone_number"})


def scrub(value: Any, key: str | None = None, depth: int = 0) -> Any:
    """Versión loggeable de `value` (sin secretos, acotada en tamaño)."""
    lowered = (key or "").lower()
    if lowered in SECRET_KEYS:
        return REDACTED
    if lowered in PRESENCE_KEYS:
        return PRESENT if value else None

    if depth > _MAX_DEPTH:
        return "***TRUNCADO***"
    if isinstance(value, dict):
        return {str(k): scrub(v, str(k), depth + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [scrub(v, key, depth + 1) for v in value]
    if isinstance(value, str):
        if len(value) > _MAX_VALUE_CHARS:
            return value[:_MAX_VALUE_CHARS] + "…(truncado)"
        return value
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    """LogRecord -> una línea JSON (contexto del request + extras saneados)."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            "pid": os.getpid(),
            **get_context_dict(),
        }
        payload.update(
            (k, scrub(v, k))
            for k, v in record.__dict__.items()
            if k not in _RESERVED_RECORD_KEYS
        )

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(payload, ensure_ascii=False, default=str)


def _formatter(use_json: bool) -> logging.Formatter:
    return JSONFormatter() if use_json else logging.Formatter("%(levelname)s %(message)s")


def _level(name: str | None) -> int:
    return getattr(logging, (name or "INFO").upper(), logging.INFO)


def setup_logger(
    name: str = "provisioning-api",
    *,
    level: str = "INFO",
    use_json: bool = True,
) -> logging.Logger:
    """Logger del servicio con un único handler a stdout (idempotente)."""
    log = logging.getLogger(name)
    log.setLevel(_level(level))
    log.propagate = False
    if not log.handlers:
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(_formatter(use_json))
        log.addHandler(stream)
    return log


def configure_from_settings(settings) -> None:
    """Aplica LOG_LEVEL / LOG_JSON al logger global en el startup."""
    logger.setLevel(_level(settings.log_level))
    for handler in logger.handlers:
        handler.setFormatter(_formatter(settings.log_json))


logger = setup_logger()
