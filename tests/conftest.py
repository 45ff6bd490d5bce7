"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure test environment (APP_ENV=test, no .env file)
  - Provide profile / token factories shared by unit tests
  - Reset the composition root between tests

Collaborators:
  - pytest: Test framework
  - provisioning.container: in-memory adapters in test mode
  - PyJWT: signs caller access tokens

Notes:
  - APP_ENV must be set before get_settings() is first evaluated
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import UUID, uuid4

import jwt
import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from provisioning.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

os.environ.setdefault("APP_ENV", "test")

from provisioning.domain.entities import UserProfile  # noqa: E402
from provisioning.identity.users import (  # noqa: E402
    ApprovalStatus,
    UserRole,
    UserStatus,
)

TEST_JWT_SECRET = "dev-secret"
TEST_JWT_AUDIENCE = "authenticated"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


# ============================================================================
# Factories
# ============================================================================


def make_profile(
    *,
    role: UserRole = UserRole.DIRECTOR,
    office_id: str | None = "office-1",
    is_lead: bool = False,
    status: UserStatus = UserStatus.ACTIVE,
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED,
    user_id: UUID | None = None,
    email: str | None = None,
) -> UserProfile:
    """R: Build a caller profile with sensible defaults."""
    profile_id = user_id or uuid4()
    return UserProfile(
        id=profile_id,
        email=email or f"{role.value}-{profile_id.hex[:8]}@example.com",
        full_name=f"Test {role.value.title()}",
        role=role,
        status=status,
        approval_status=approval_status,
        office_id=office_id,
        is_lead=is_lead,
    )


def make_token(
    subject: UUID | str,
    *,
    email: str = "caller@example.com",
    secret: str = TEST_JWT_SECRET,
    audience: str | None = TEST_JWT_AUDIENCE,
    expires_in: timedelta = timedelta(minutes=5),
) -> str:
    """R: Sign an HS256 access token like the identity provider would."""
    now = datetime.now(timezone.utc)
    payload: dict[str, object] = {
        "sub": str(subject),
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    if audience is not None:
        payload["aud"] = audience
    return jwt.encode(payload, secret, algorithm="HS256")


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def profile_factory():
    return make_profile


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def fresh_container():
    """R: Fresh in-memory adapters for each test touching the container."""
    from provisioning.container import reset_container

    reset_container()
    yield
    reset_container()
