"""
===============================================================================
TARJETA CRC — identity/auth.py
===============================================================================

Módulo:
    Resolución de la identidad del caller (JWT)

Responsabilidades:
    - Extraer el token desde `Authorization: Bearer <token>`.
    - Decodificar y validar el JWT (firma HS256, exp, sub, audience).
    - Traducir token -> Principal (id + email) sin tocar la DB.
    - Exponer la dependencia FastAPI `require_caller`.

Colaboradores:
    - crosscutting.config.get_settings: secreto y audience.
    - crosscutting.error_responses.unauthorized: 401 estándar.
    - crosscutting.logger: logging estructurado.
    - domain.entities.Principal

Decisiones de diseño:
    - verify() no lanza: token inválido o vencido -> None. El 401 lo decide
      la dependencia HTTP, en un solo lugar.
    - El perfil del caller NO se resuelve acá: eso es parte del caso de uso
      (404 "User not found").
    - No loguear tokens.
===============================================================================
"""

from __future__ import annotations

from typing import Callable
from uuid import UUID

import jwt
from fastapi import Header, Request

from ..context import set_caller_context
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import unauthorized
from ..crosscutting.logger import logger
from ..domain.entities import Principal

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_EMAIL: str = "email"
CLAIM_EXP: str = "exp"
CLAIM_AUD: str = "aud"


class AccessTokenVerifier:
    """Valida access tokens firmados por el proveedor de identidad."""

    def __init__(self, secret: str, *, audience: str | None = None) -> None:
        self._secret = secret
        # R: audience vacío desactiva el chequeo.
        self._audience = (audience or "").strip() or None

    @classmethod
    def from_settings(cls) -> "AccessTokenVerifier":
        settings = get_settings()
        return cls(settings.jwt_secret, audience=settings.jwt_audience)

    def verify(self, token: str | None) -> Principal | None:
        """Token -> Principal, o None si el token no es válido."""
        if not token:
            return None

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                audience=self._audience,
                options={
                    "require": [CLAIM_SUB, CLAIM_EXP],
                    "verify_aud": self._audience is not None,
                },
            )
        except jwt.ExpiredSignatureError:
            logger.info("Access token expirado")
            return None
        except jwt.InvalidTokenError as exc:
            logger.info("Access token inválido", extra={"reason": type(exc).__name__})
            return None

        try:
            principal_id = UUID(str(payload[CLAIM_SUB]))
        except ValueError:
            return None

        return Principal(id=principal_id, email=str(payload.get(CLAIM_EMAIL) or ""))


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extrae token desde `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def require_caller() -> Callable:
    """Dependency FastAPI: requiere un caller con token válido."""

    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> Principal:
        principal = AccessTokenVerifier.from_settings().verify(
            extract_bearer_token(authorization)
        )
        if principal is None:
            raise unauthorized()

        request.state.principal = principal
        set_caller_context(principal.id)
        return principal

    return dependency
