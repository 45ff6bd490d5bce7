"""
===============================================================================
USER PROVISIONING USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Business Goal:
    Proveer modelos de resultado y error para el alta de usuarios, con un
    contrato estable y explícito para:
      - caller sin identidad / sin perfil
      - autorización (gate de elegibilidad + matriz de roles)
      - validación de campos
      - rechazos del identity provider / profile store

Why (Context / Intención):
    - El caso de uso devuelve resultados tipados en lugar de lanzar
      excepciones "hacia afuera":
        * la API mapea code -> status HTTP en un solo lugar
        * los tests afirman sobre code/outcome sin pasar por HTTP

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    user_results models (module)

Responsibilities:
    - UserErrorCode: categorías estables de error.
    - UserError: code + message (+ detalles de campos).
    - CreateUserResult: perfil creado, needs_approval, mensaje y el outcome
      de la saga de creación.

Collaborators:
    - domain.entities.UserProfile
    - provisioning_saga.SagaOutcome
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ....domain.entities import UserProfile
from .provisioning_saga import SagaOutcome


class UserErrorCode(str, Enum):
    """
    Códigos de error del alta de usuarios.

      - UNAUTHORIZED: no hay identidad verificable del caller.
      - NOT_FOUND: la identidad del caller no tiene perfil.
      - FORBIDDEN: caller no elegible o la matriz de roles lo rechaza.
      - VALIDATION_ERROR: campos faltantes/inválidos.
      - UPSTREAM_ERROR: identity provider o profile store rechazaron la operación.
    """

    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"


@dataclass(frozen=True)
class UserError:
    """Error de caso de uso (sin stack traces ni metadata de infraestructura)."""

    code: UserErrorCode
    message: str
    errors: list[dict[str, Any]] | None = None


@dataclass
class CreateUserResult:
    """
    Resultado del alta.

    Contrato:
      - error is None => user presente; needs_approval y message seteados
      - error != None => user None
      - outcome es None si la saga no llegó a ejecutarse (rechazo previo)
    """

    user: UserProfile | None = None
    needs_approval: bool = False
    message: str | None = None
    outcome: SagaOutcome | None = None
    error: UserError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_response(self) -> dict[str, Any]:
        """Perfil ∪ {needsApproval, message} (solo en éxito)."""
        if self.user is None:
            raise ValueError("CreateUserResult has no user to render")
        return {
            **self.user.to_dict(),
            "needsApproval": self.needs_approval,
            "message": self.message,
        }
