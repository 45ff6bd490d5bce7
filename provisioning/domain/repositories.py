"""
CRC — domain/repositories.py

Name
- Domain Ports (Protocols) for the external collaborators

Responsibilities
- Define the contracts of the identity provider, the profile store and the
  activity log sink.
- Keep the decision engine and the orchestrator independent from
  PostgreSQL / in-memory implementations.
- Enable dependency inversion and network-free unit tests.

Collaborators
- domain.entities: Principal, NewUserProfile, UserProfile, ActivityLogEntry
- infrastructure.repositories: postgres/* and in_memory/* implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Failures are reported by raising crosscutting.exceptions.UpstreamError
  subclasses (IdentityProviderError / ProfileStoreError / ActivityLogError).

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
"""

from typing import Optional, Protocol
from uuid import UUID

from .entities import ActivityLogEntry, NewUserProfile, Principal, UserProfile


class IdentityProvider(Protocol):
    """
    R: Creates and deletes authenticated principals.

    Implementations must:
      - hash/store credentials (never expose them back)
      - generate a fresh principal id per create call
      - reject duplicate emails with IdentityProviderError
    """

    def create_principal(
        self, *, email: str, password: str, email_confirmed: bool = True
    ) -> Principal:
        """R: Create a principal; raises IdentityProviderError on rejection."""
        ...

    def delete_principal(self, principal_id: UUID) -> None:
        """R: Delete a principal; raises IdentityProviderError on failure."""
        ...

    def get_principal_by_email(self, email: str) -> Optional[Principal]:
        """R: Lookup by email (None when absent)."""
        ...


class UserProfileRepository(Protocol):
    """R: Profile store keyed by principal id."""

    def get_profile(self, user_id: UUID) -> Optional[UserProfile]:
        """R: Select by id (None when absent)."""
        ...

    def get_profile_by_email(self, email: str) -> Optional[UserProfile]:
        """R: Select by email (None when absent)."""
        ...

    def insert_profile(self, profile: NewUserProfile) -> UserProfile:
        """
        R: Insert a profile and return the stored row.

        Raises:
            ProfileStoreError: duplicate id, constraint violation, store failure
        """
        ...

    def ping(self) -> bool:
        """R: Cheap availability probe for health checks."""
        ...


class ActivityLogRepository(Protocol):
    """R: Append-only sink for free-text audit entries."""

    def record_activity(self, entry: ActivityLogEntry) -> None:
        """R: Persist an entry; raises ActivityLogError on failure."""
        ...

    def list_activities(
        self, *, user_id: UUID | None = None, limit: int = 50
    ) -> list[ActivityLogEntry]:
        """R: Most recent entries first, optionally filtered by author."""
        ...
