"""
===============================================================================
TARJETA CRC — schemas/users.py
===============================================================================

Módulo:
    Schemas HTTP para el alta de usuarios

Responsabilidades:
    - Definir el DTO de request (`CreateUserReq`) y de respuesta (`CreateUserRes`).
    - Validar TIPOS (string / bool / uuid). La obligatoriedad de los campos
      la decide el caso de uso, después del gate de permisos.
    - Traducir el DTO a `AccountRequest` (dominio).

Colaboradores:
    - domain.provisioning_policy.AccountRequest
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from provisioning.domain.provisioning_policy import AccountRequest


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class CreateUserReq(BaseModel):
    """Request para crear una cuenta subordinada."""

    model_config = ConfigDict(extra="ignore")

    email: str | None = Field(default=None, max_length=320)
    password: str | None = Field(default=None, max_length=1024)
    full_name: str | None = Field(default=None, max_length=200)
    role: str | None = Field(default=None, max_length=50)
    phone_number: str | None = Field(default=None, max_length=50)
    office_id: str | None = Field(default=None, max_length=100)
    reporting_to_id: UUID | None = None
    is_lead: bool | None = False

    def to_account_request(self) -> AccountRequest:
        return AccountRequest(
            email=self.email,
            password=self.password,
            full_name=self.full_name,
            role=self.role,
            phone_number=self.phone_number,
            office_id=self.office_id,
            reporting_to_id=self.reporting_to_id,
            is_lead=bool(self.is_lead),
        )


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class CreateUserRes(BaseModel):
    """Perfil creado + needsApproval + message."""

    id: UUID
    email: str
    full_name: str
    role: str
    phone_number: str | None = None
    office_id: str | None = None
    is_lead: bool = False
    reporting_to_id: UUID | None = None
    status: str
    approval_status: str
    added_by: UUID | None = None
    added_time: str | None = None
    approved_by: UUID | None = None
    approved_time: str | None = None
    needsApproval: bool
    message: str
