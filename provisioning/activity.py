"""
===============================================================================
TARJETA CRC — provisioning/activity.py (Emisión de activity log)
===============================================================================

Responsabilidades:
  - Construir entradas de activity log con formato consistente
    (user_id / activity_type / description / entity / new_data).
  - Persistir vía ActivityLogRepository (puerto del dominio).
  - "Best-effort": si falla la persistencia, NO rompe el alta ni dispara
    compensación.

Colaboradores:
  - domain.entities.ActivityLogEntry
  - domain.repositories.ActivityLogRepository
  - crosscutting.logger.logger

Patrones aplicados:
  - Best-effort logging (no interrumpe el request)

Decisiones de seguridad:
  - new_data se sanitiza a valores serializables; lo no serializable se
    stringifica. Nunca contiene password (el perfil no lo tiene).
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from .crosscutting.logger import logger
from .domain.entities import ActivityLogEntry
from .domain.repositories import ActivityLogRepository

ENTITY_TYPE_USER = "user"


def _sanitize(value: Any) -> Any:
    """
    Convierte valores a tipos serializables para JSON.
    - primitives -> OK
    - dict/list -> sanitiza recursivamente
    - otros (UUID, datetime, Enum) -> str(value)
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, dict):
        return {str(k): _sanitize(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [_sanitize(v) for v in value]

    if isinstance(value, datetime):
        return value.isoformat()

    return str(value)


def emit_activity(
    repository: ActivityLogRepository | None,
    *,
    user_id: UUID,
    activity_type: str,
    description: str,
    entity_id: UUID | None = None,
    entity_type: str | None = ENTITY_TYPE_USER,
    new_data: dict[str, Any] | None = None,
) -> bool:
    """
    Emite una entrada de activity log.

    Regla clave:
      - Si repository es None o falla al escribir, NO se lanza excepción.

    Retorna True si la entrada quedó persistida.
    """
    if repository is None:
        return False

    entry = ActivityLogEntry(
        id=uuid4(),
        user_id=user_id,
        activity_type=activity_type,
        description=description,
        entity_id=entity_id,
        entity_type=entity_type,
        new_data=_sanitize(new_data or {}),
    )

    try:
        repository.record_activity(entry)
    except Exception as exc:
        # Best-effort: logueamos y seguimos.
        logger.warning(
            "Falló la escritura del activity log",
            extra={
                "activity_type": activity_type,
                "entity_id": str(entity_id) if entity_id else None,
                "error": str(exc),
            },
        )
        return False

    return True
