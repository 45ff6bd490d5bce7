"""
Name: PostgreSQL Adapter Tests

Responsibilities:
  - Validate SQL parameters and row mapping of the postgres adapters
  - Validate error translation (UniqueViolation / generic -> typed errors)

Notes:
  - The pool is a MagicMock; no real DB
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import psycopg
import pytest
from psycopg import errors as pg_errors
from psycopg_pool import PoolTimeout

from provisioning.crosscutting.exceptions import (
    ActivityLogError,
    DatabaseError,
    IdentityProviderError,
    ProfileStoreError,
    UpstreamError,
)
from provisioning.domain.entities import ActivityLogEntry, NewUserProfile
from provisioning.identity.users import ApprovalStatus, UserRole, UserStatus
from provisioning.infrastructure.db import PoolNotInitializedError, close_pool
from provisioning.infrastructure.repositories.postgres import (
    PostgresActivityLogRepository,
    PostgresIdentityProvider,
    PostgresUserProfileRepository,
)

pytestmark = pytest.mark.unit

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _mock_pool(*, fetchone=None, fetchall=None, side_effect=None):
    mock_pool = MagicMock()
    mock_conn = MagicMock()
    mock_result = MagicMock()
    mock_result.fetchone.return_value = fetchone
    mock_result.fetchall.return_value = fetchall or []
    if side_effect is not None:
        mock_conn.execute.side_effect = side_effect
    else:
        mock_conn.execute.return_value = mock_result
    mock_pool.connection.return_value.__enter__.return_value = mock_conn
    return mock_pool, mock_conn


def _unreachable_pool():
    mock_pool = MagicMock()
    mock_pool.connection.side_effect = OSError(
        'connection to server at "10.0.0.5", port 5432 failed'
    )
    return mock_pool


def _profile_row(profile_id, *, role="employee", status="active", approval="approved"):
    return (
        profile_id,
        "new@example.com",
        "New Person",
        role,
        None,
        "O1",
        False,
        None,
        status,
        approval,
        uuid4(),
        NOW,
        uuid4(),
        NOW,
    )


def _new_profile(profile_id) -> NewUserProfile:
    return NewUserProfile(
        id=profile_id,
        email="new@example.com",
        full_name="New Person",
        role=UserRole.EMPLOYEE,
        status=UserStatus.ACTIVE,
        approval_status=ApprovalStatus.APPROVED,
        added_by=uuid4(),
        added_time=NOW,
        office_id="O1",
        approved_by=uuid4(),
        approved_time=NOW,
    )


# =============================================================================
# IDENTITY PROVIDER
# =============================================================================


class TestPostgresIdentityProvider:
    def test_create_principal_hashes_password_and_normalizes_email(self):
        principal_id = uuid4()
        pool, conn = _mock_pool(fetchone=(principal_id, "new@example.com"))

        principal = PostgresIdentityProvider(pool).create_principal(
            email="  NEW@example.com ", password="Secret123!"
        )

        assert principal.id == principal_id
        params = conn.execute.call_args.args[1]
        assert params[1] == "new@example.com"
        assert params[2] != "Secret123!"
        assert params[2].startswith("$argon2")
        assert params[3] is True

    def test_duplicate_email_raises_identity_error(self):
        pool, _ = _mock_pool(side_effect=pg_errors.UniqueViolation("dup"))

        with pytest.raises(IdentityProviderError, match="already been registered"):
            PostgresIdentityProvider(pool).create_principal(
                email="dup@example.com", password="x"
            )

    def test_delete_failure_is_database_error(self):
        pool, _ = _mock_pool(side_effect=psycopg.OperationalError("connection lost"))

        with pytest.raises(DatabaseError) as exc_info:
            PostgresIdentityProvider(pool).delete_principal(uuid4())

        assert not isinstance(exc_info.value, UpstreamError)

    def test_get_principal_by_email_missing(self):
        pool, _ = _mock_pool(fetchone=None)

        assert PostgresIdentityProvider(pool).get_principal_by_email("x@y.z") is None


# =============================================================================
# PROFILE STORE
# =============================================================================


class TestPostgresUserProfileRepository:
    def test_get_profile_maps_row(self):
        profile_id = uuid4()
        pool, _ = _mock_pool(fetchone=_profile_row(profile_id))

        profile = PostgresUserProfileRepository(pool).get_profile(profile_id)

        assert profile.id == profile_id
        assert profile.role == UserRole.EMPLOYEE
        assert profile.is_active and profile.is_approved

    def test_get_profile_missing_returns_none(self):
        pool, _ = _mock_pool(fetchone=None)

        assert PostgresUserProfileRepository(pool).get_profile(uuid4()) is None

    def test_unknown_enum_value_is_database_error(self):
        pool, _ = _mock_pool(fetchone=_profile_row(uuid4(), role="admin"))

        with pytest.raises(DatabaseError):
            PostgresUserProfileRepository(pool).get_profile(uuid4())

    def test_read_failure_is_database_error(self):
        pool, _ = _mock_pool(side_effect=RuntimeError("timeout"))

        with pytest.raises(DatabaseError):
            PostgresUserProfileRepository(pool).get_profile(uuid4())

    def test_insert_profile_returns_stored_row(self):
        profile_id = uuid4()
        pool, conn = _mock_pool(fetchone=_profile_row(profile_id))

        stored = PostgresUserProfileRepository(pool).insert_profile(
            _new_profile(profile_id)
        )

        assert stored.id == profile_id
        params = conn.execute.call_args.args[1]
        assert params[0] == profile_id
        assert params[3] == "employee"

    def test_insert_failure_is_profile_store_error_with_message(self):
        pool, _ = _mock_pool(
            side_effect=pg_errors.CheckViolation("violates check constraint")
        )

        with pytest.raises(ProfileStoreError, match="violates check constraint"):
            PostgresUserProfileRepository(pool).insert_profile(_new_profile(uuid4()))

    def test_ping(self):
        pool, _ = _mock_pool(fetchone=(1,))

        assert PostgresUserProfileRepository(pool).ping() is True


# =============================================================================
# ACTIVITY LOG
# =============================================================================


class TestPostgresActivityLogRepository:
    def _entry(self) -> ActivityLogEntry:
        return ActivityLogEntry(
            id=uuid4(),
            user_id=uuid4(),
            activity_type="user_created_pending",
            description="Created user",
            entity_id=uuid4(),
            entity_type="user",
            new_data={"email": "new@example.com"},
        )

    def test_record_activity_inserts_row(self):
        pool, conn = _mock_pool()
        entry = self._entry()

        PostgresActivityLogRepository(pool).record_activity(entry)

        params = conn.execute.call_args.args[1]
        assert params[0] == entry.id
        assert params[2] == "user_created_pending"

    def test_record_failure_is_activity_log_error(self):
        pool, _ = _mock_pool(side_effect=RuntimeError("down"))

        with pytest.raises(ActivityLogError):
            PostgresActivityLogRepository(pool).record_activity(self._entry())

    def test_list_activities_with_non_positive_limit(self):
        pool, conn = _mock_pool()

        assert PostgresActivityLogRepository(pool).list_activities(limit=0) == []
        conn.execute.assert_not_called()


# =============================================================================
# REJECTED vs UNAVAILABLE
# =============================================================================


class TestStoreFailureClassification:
    """Only engine rejections are upstream errors; outages are DatabaseError."""

    def test_principal_without_open_pool_is_pool_error(self):
        close_pool()

        with pytest.raises(PoolNotInitializedError):
            PostgresIdentityProvider().create_principal(
                email="new@example.com", password="x"
            )

    def test_principal_connection_failure_is_database_error(self):
        with pytest.raises(DatabaseError) as exc_info:
            PostgresIdentityProvider(_unreachable_pool()).create_principal(
                email="new@example.com", password="x"
            )

        assert not isinstance(exc_info.value, UpstreamError)
        assert isinstance(exc_info.value.original_error, OSError)

    @pytest.mark.parametrize(
        "error",
        [psycopg.OperationalError("server closed the connection"), PoolTimeout("timeout")],
    )
    def test_principal_outage_is_database_error(self, error):
        pool, _ = _mock_pool(side_effect=error)

        with pytest.raises(DatabaseError) as exc_info:
            PostgresIdentityProvider(pool).create_principal(
                email="new@example.com", password="x"
            )

        assert not isinstance(exc_info.value, UpstreamError)

    def test_principal_constraint_rejection_is_identity_error(self):
        pool, _ = _mock_pool(side_effect=pg_errors.CheckViolation("email too long"))

        with pytest.raises(IdentityProviderError, match="email too long"):
            PostgresIdentityProvider(pool).create_principal(
                email="new@example.com", password="x"
            )

    @pytest.mark.parametrize(
        "error",
        [
            pg_errors.UniqueViolation("duplicate key value violates pk_users"),
            pg_errors.ForeignKeyViolation("violates fk_users_id__auth_principals"),
        ],
    )
    def test_profile_rejection_is_profile_store_error(self, error):
        pool, _ = _mock_pool(side_effect=error)

        with pytest.raises(ProfileStoreError):
            PostgresUserProfileRepository(pool).insert_profile(_new_profile(uuid4()))

    def test_profile_connection_failure_is_database_error(self):
        with pytest.raises(DatabaseError) as exc_info:
            PostgresUserProfileRepository(_unreachable_pool()).insert_profile(
                _new_profile(uuid4())
            )

        assert not isinstance(exc_info.value, UpstreamError)

    def test_profile_without_open_pool_is_pool_error(self):
        close_pool()

        with pytest.raises(PoolNotInitializedError):
            PostgresUserProfileRepository().insert_profile(_new_profile(uuid4()))
