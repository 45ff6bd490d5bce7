"""
Name: Domain Entities

Responsibilities:
  - Define the core records of the provisioning domain
    (Principal, UserProfile, NewUserProfile, ActivityLogEntry)
  - Keep the JSON shape returned by the API in one place (to_dict)
  - Stay framework-agnostic (no FastAPI, no psycopg)

Collaborators:
  - identity.users: UserRole, UserStatus, ApprovalStatus
  - domain.repositories: ports that persist these entities
  - application.usecases.create_user: builds NewUserProfile / ActivityLogEntry

Constraints:
  - Principal is owned by the identity provider; UserProfile only references
    its id (never duplicates credentials)
  - status / approval_status / approved_by / approved_time travel together
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from ..identity.users import ApprovalStatus, UserRole, UserStatus


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _str_or_none(value: object | None) -> str | None:
    return str(value) if value is not None else None


@dataclass(frozen=True, slots=True)
class Principal:
    """R: Authenticated identity (id + email) issued by the identity provider."""

    id: UUID
    email: str


@dataclass(frozen=True, slots=True)
class NewUserProfile:
    """
    R: Insert payload for the profile store.

    Built by the orchestrator once the principal exists; `id` is the
    principal id returned by the identity provider.
    """

    id: UUID
    email: str
    full_name: str
    role: UserRole
    status: UserStatus
    approval_status: ApprovalStatus
    added_by: UUID
    added_time: datetime
    phone_number: str | None = None
    office_id: str | None = None
    is_lead: bool = False
    reporting_to_id: UUID | None = None
    approved_by: UUID | None = None
    approved_time: datetime | None = None


@dataclass(frozen=True, slots=True)
class UserProfile:
    """R: Domain record of a user inside the organization."""

    id: UUID
    email: str
    full_name: str
    role: UserRole
    status: UserStatus
    approval_status: ApprovalStatus
    phone_number: str | None = None
    office_id: str | None = None
    is_lead: bool = False
    reporting_to_id: UUID | None = None
    added_by: UUID | None = None
    added_time: datetime | None = None
    approved_by: UUID | None = None
    approved_time: datetime | None = None

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @classmethod
    def from_new(cls, new: NewUserProfile) -> "UserProfile":
        """R: Materialize the stored record from its insert payload."""
        return cls(
            id=new.id,
            email=new.email,
            full_name=new.full_name,
            role=new.role,
            status=new.status,
            approval_status=new.approval_status,
            phone_number=new.phone_number,
            office_id=new.office_id,
            is_lead=new.is_lead,
            reporting_to_id=new.reporting_to_id,
            added_by=new.added_by,
            added_time=new.added_time,
            approved_by=new.approved_by,
            approved_time=new.approved_time,
        )

    def to_dict(self) -> dict[str, Any]:
        """R: JSON-ready representation (UUIDs/datetimes as strings)."""
        return {
            "id": str(self.id),
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role.value,
            "phone_number": self.phone_number,
            "office_id": self.office_id,
            "is_lead": self.is_lead,
            "reporting_to_id": _str_or_none(self.reporting_to_id),
            "status": self.status.value,
            "approval_status": self.approval_status.value,
            "added_by": _str_or_none(self.added_by),
            "added_time": _iso(self.added_time),
            "approved_by": _str_or_none(self.approved_by),
            "approved_time": _iso(self.approved_time),
        }


@dataclass(slots=True)
class ActivityLogEntry:
    """R: Free-text audit entry written after a successful creation."""

    id: UUID
    user_id: UUID
    activity_type: str
    description: str
    entity_id: UUID | None = None
    entity_type: str | None = None
    new_data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
