"""
===============================================================================
TARJETA CRC — provisioning/interfaces/api/http/routers/users.py
===============================================================================

Class/Module:
    Users Router

Responsibilities:
    - Exponer POST /users (bajo /v1) y la ruta de compatibilidad
      POST /functions/v1/create-user.
    - Responder OPTIONS con 200 y cuerpo vacío en ambas rutas.
    - Convertir request HTTP -> CreateUserInput y UserError -> HTTP.

Collaborators:
    - provisioning.identity.auth.require_caller (401)
    - provisioning.container.get_create_user_use_case
    - error_mapping.raise_user_error
    - schemas.users (DTOs Pydantic)

Patterns:
    - Controller / Router
    - Adapter (HTTP -> UseCase)
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from provisioning.application.usecases import CreateUserInput, CreateUserUseCase
from provisioning.container import get_create_user_use_case
from provisioning.domain.entities import Principal
from provisioning.identity.auth import require_caller

from ..error_mapping import raise_user_error
from ..schemas.users import CreateUserReq, CreateUserRes

COMPAT_CREATE_USER_PATH = "/functions/v1/create-user"

router = APIRouter(tags=["users"])
compat_router = APIRouter(tags=["users"], include_in_schema=False)


def create_user(
    payload: CreateUserReq | None = None,
    caller: Principal = Depends(require_caller()),
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
) -> CreateUserRes:
    """Crea una cuenta subordinada en nombre del caller autenticado."""
    request = (payload or CreateUserReq()).to_account_request()
    result = use_case.execute(CreateUserInput(caller_id=caller.id, request=request))
    if result.error is not None:
        raise_user_error(result.error)
    return CreateUserRes(**result.to_response())


def preflight() -> Response:
    """OPTIONS siempre 200, sin cuerpo."""
    return Response(status_code=200)


router.add_api_route(
    "/users", create_user, methods=["POST"], response_model=CreateUserRes
)
router.add_api_route("/users", preflight, methods=["OPTIONS"])

compat_router.add_api_route(
    COMPAT_CREATE_USER_PATH,
    create_user,
    methods=["POST"],
    response_model=CreateUserRes,
)
compat_router.add_api_route(COMPAT_CREATE_USER_PATH, preflight, methods=["OPTIONS"])
