"""
Name: Create User Endpoint Tests

Responsibilities:
  - Validate HTTP status mapping (401 / 404 / 403 / 400 / 200 / 500)
  - Validate the JSON error body {error, code}
  - Validate OPTIONS preflight, CORS and the compatibility path
"""

from __future__ import annotations

from unittest.mock import patch
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from provisioning.api.main import app
from provisioning.application.usecases import CreateUserUseCase
from provisioning.container import (
    get_create_user_use_case,
    get_identity_provider,
    get_user_profile_repository,
)
from provisioning.crosscutting.config import Settings
from provisioning.crosscutting.exceptions import DatabaseError, ProfileStoreError
from provisioning.identity.users import ApprovalStatus, UserRole, UserStatus
from provisioning.infrastructure.repositories.in_memory import (
    InMemoryIdentityProvider,
    InMemoryUserProfileRepository,
)

from conftest import make_profile, make_token

pytestmark = pytest.mark.unit

USERS_PATH = "/v1/users"
COMPAT_PATH = "/functions/v1/create-user"


# =============================================================================
# FIXTURES / HELPERS
# =============================================================================


@pytest.fixture
def client(fresh_container):
    yield TestClient(app)
    app.dependency_overrides.clear()


def _seed_caller(**kwargs):
    profile = make_profile(**kwargs)
    get_user_profile_repository().seed(profile)
    return profile


def _auth(profile) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(profile.id, email=profile.email)}"}


def _body(role: str = "employee", **kwargs) -> dict:
    body = {
        "email": "new.person@example.com",
        "password": "Secret123!",
        "full_name": "New Person",
        "role": role,
        "office_id": "O1",
    }
    body.update(kwargs)
    return body


# =============================================================================
# AUTH (401 / 404)
# =============================================================================


class TestCallerIdentity:
    def test_missing_token_is_unauthorized(self, client):
        response = client.post(USERS_PATH, json=_body())

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_token_with_wrong_secret_is_unauthorized(self, client):
        token = make_token(uuid4(), secret="another-secret")

        response = client.post(
            USERS_PATH, json=_body(), headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    def test_token_without_profile_is_not_found(self, client):
        token = make_token(uuid4())

        response = client.post(
            USERS_PATH, json=_body(), headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

    def test_unauthorized_checked_before_body_fields(self, client):
        response = client.post(USERS_PATH, json={})

        assert response.status_code == 401


# =============================================================================
# DECISIONS (403 / 400 / 200)
# =============================================================================


class TestCreateUserDecisions:
    def test_director_creates_approved_employee(self, client):
        director = _seed_caller(role=UserRole.DIRECTOR, office_id="O1")

        response = client.post(USERS_PATH, json=_body(), headers=_auth(director))

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "active"
        assert body["approval_status"] == "approved"
        assert body["approved_by"] == str(director.id)
        assert body["needsApproval"] is False
        assert body["message"] == "User created and approved successfully."
        assert "password" not in body

    def test_manager_other_office_is_forbidden(self, client):
        manager = _seed_caller(role=UserRole.MANAGER, office_id="O1")

        response = client.post(
            USERS_PATH, json=_body(office_id="O2"), headers=_auth(manager)
        )

        assert response.status_code == 403
        assert response.json() == {
            "error": "Forbidden - Insufficient permissions",
            "code": "FORBIDDEN",
            "request_id": response.headers["X-Request-Id"],
        }

    def test_manager_creates_pending_lead(self, client):
        manager = _seed_caller(role=UserRole.MANAGER, office_id="O1")

        response = client.post(
            USERS_PATH, json=_body(is_lead=True), headers=_auth(manager)
        )

        assert response.status_code == 200
        body = response.json()
        assert body["approval_status"] == "pending"
        assert body["is_lead"] is True
        assert body["needsApproval"] is True

    def test_invalid_role_is_bad_request(self, client):
        director = _seed_caller(role=UserRole.DIRECTOR)

        response = client.post(USERS_PATH, json=_body("admin"), headers=_auth(director))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid role"
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_inactive_caller_is_forbidden(self, client):
        manager = _seed_caller(
            role=UserRole.MANAGER,
            status=UserStatus.INACTIVE,
            approval_status=ApprovalStatus.PENDING,
        )

        response = client.post(USERS_PATH, json=_body(), headers=_auth(manager))

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden - User not active or approved"

    def test_empty_body_reports_missing_fields(self, client):
        director = _seed_caller(role=UserRole.DIRECTOR)

        response = client.post(USERS_PATH, json={}, headers=_auth(director))

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields"

    def test_malformed_body_is_bad_request(self, client):
        director = _seed_caller(role=UserRole.DIRECTOR)

        response = client.post(
            USERS_PATH,
            json=_body(reporting_to_id="not-a-uuid"),
            headers=_auth(director),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_duplicate_email_reports_upstream_message(self, client):
        director = _seed_caller(role=UserRole.DIRECTOR)
        client.post(USERS_PATH, json=_body(), headers=_auth(director))

        response = client.post(USERS_PATH, json=_body(), headers=_auth(director))

        assert response.status_code == 400
        assert response.json()["code"] == "UPSTREAM_ERROR"
        assert "already been registered" in response.json()["error"]

    def test_compat_path_creates_user(self, client):
        director = _seed_caller(role=UserRole.DIRECTOR)

        response = client.post(COMPAT_PATH, json=_body(), headers=_auth(director))

        assert response.status_code == 200
        assert response.json()["email"] == "new.person@example.com"


# =============================================================================
# FAILURES (saga / unexpected)
# =============================================================================


class _FailingProfiles(InMemoryUserProfileRepository):
    def insert_profile(self, profile):
        raise ProfileStoreError('violates check constraint "ck_users_office_required"')


class _UnreachableProfiles(InMemoryUserProfileRepository):
    def insert_profile(self, profile):
        raise DatabaseError(
            'insert_profile failed: connection to server at "10.0.0.5", port 5432 failed'
        )


class TestCreateUserFailures:
    def test_profile_failure_removes_principal(self, client):
        director = make_profile(role=UserRole.DIRECTOR)
        identity = InMemoryIdentityProvider()
        profiles = _FailingProfiles()
        profiles.seed(director)
        app.dependency_overrides[get_create_user_use_case] = lambda: CreateUserUseCase(
            identity_provider=identity, profiles=profiles
        )

        response = client.post(USERS_PATH, json=_body(), headers=_auth(director))

        assert response.status_code == 400
        assert "ck_users_office_required" in response.json()["error"]
        assert identity.get_principal_by_email("new.person@example.com") is None

    def test_store_outage_is_server_error_and_removes_principal(self, client):
        director = make_profile(role=UserRole.DIRECTOR)
        identity = InMemoryIdentityProvider()
        profiles = _UnreachableProfiles()
        profiles.seed(director)
        app.dependency_overrides[get_create_user_use_case] = lambda: CreateUserUseCase(
            identity_provider=identity, profiles=profiles
        )

        with patch(
            "provisioning.api.exception_handlers.get_settings",
            return_value=Settings(app_env="production", jwt_secret="s" * 40),
        ):
            response = client.post(USERS_PATH, json=_body(), headers=_auth(director))

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "DATABASE_ERROR"
        assert body["error"] == "Unknown error occurred"
        assert "10.0.0.5" not in response.text
        assert identity.get_principal_by_email("new.person.com") is None

    def test_unexpected_error_is_internal_error(self, fresh_container):
        class _ExplodingUseCase:
            def execute(self, input_data):
                raise RuntimeError("boom")

        director = _seed_caller(role=UserRole.DIRECTOR)
        app.dependency_overrides[get_create_user_use_case] = _ExplodingUseCase
        try:
            client = TestClient(app, raise_server_exceptions=False)
            response = client.post(USERS_PATH, json=_body(), headers=_auth(director))
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"


# =============================================================================
# OPTIONS / CORS / OPS
# =============================================================================


class TestHttpSurface:
    @pytest.mark.parametrize("path", [USERS_PATH, COMPAT_PATH])
    def test_options_returns_empty_ok(self, client, path):
        response = client.options(path)

        assert response.status_code == 200
        assert response.content == b""

    def test_cors_preflight_allows_client_headers(self, client):
        response = client.options(
            USERS_PATH,
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, x-client-info, apikey",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_cors_headers_on_error_response(self, client):
        response = client.post(
            USERS_PATH, json=_body(), headers={"Origin": "https://app.example.com"}
        )

        assert response.status_code == 401
        assert response.headers["access-control-allow-origin"] == "*"

    def test_request_id_is_echoed(self, client):
        response = client.post(
            USERS_PATH, json=_body(), headers={"X-Request-Id": "req-123"}
        )

        assert response.headers["X-Request-Id"] == "req-123"
        assert response.json()["request_id"] == "req-123"

    def test_healthz_pings_profile_store(self, client):
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json()["ok"] is True

    def test_metrics_exposes_provisioning_outcomes(self, client):
        director = _seed_caller(role=UserRole.DIRECTOR)
        client.post(USERS_PATH, json=_body(), headers=_auth(director))

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "provisioning_user_outcomes_total" in response.text

    def test_created_principal_lives_in_identity_provider(self, client):
        director = _seed_caller(role=UserRole.DIRECTOR)

        response = client.post(USERS_PATH, json=_body(), headers=_auth(director))

        assert get_identity_provider().get_principal_by_email(
            "new.person@example.com"
        ).id == UUID(response.json()["id"])
