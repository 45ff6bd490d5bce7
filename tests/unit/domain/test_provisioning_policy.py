"""
Name: Provisioning Policy Tests

Responsibilities:
  - Validate the role matrix (director / manager / lead / employee)
  - Validate the caller eligibility gate
  - Validate field validation order and messages
  - Validate approval field derivation
"""

from dataclasses import replace
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from provisioning.domain.provisioning_policy import (
    MSG_CALLER_NOT_ELIGIBLE,
    MSG_INSUFFICIENT_PERMISSIONS,
    MSG_INVALID_ROLE,
    MSG_LEAD_REQUIRES_EMPLOYEE,
    MSG_MISSING_FIELDS,
    MSG_OFFICE_REQUIRED,
    AccountRequest,
    CallerProfile,
    Decision,
    LeadScopeRule,
    ProvisioningPolicy,
    approval_fields,
    check_caller_eligibility,
    decide,
    validate_account_request,
)
from provisioning.identity.users import ApprovalStatus, UserRole, UserStatus

pytestmark = pytest.mark.unit

POLICY = ProvisioningPolicy()
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# HELPERS
# =============================================================================


def _caller(
    role: UserRole,
    *,
    office_id: str | None = "A",
    is_lead: bool = False,
    status: UserStatus = UserStatus.ACTIVE,
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED,
) -> CallerProfile:
    return CallerProfile(
        id=uuid4(),
        role=role,
        is_lead=is_lead,
        office_id=office_id,
        status=status,
        approval_status=approval_status,
    )


def _request(role: str = "employee", *, office_id: str | None = "A", **kwargs):
    fields = dict(
        email="new@example.com",
        password="Secret123!",
        full_name="New Person",
        role=role,
        office_id=office_id,
    )
    fields.update(kwargs)
    return AccountRequest(**fields)


# =============================================================================
# ROLE MATRIX
# =============================================================================


class TestRoleMatrix:
    @pytest.mark.parametrize("role", ["director", "manager", "employee"])
    def test_director_may_create_any_role_auto_approved(self, role):
        decision = decide(_caller(UserRole.DIRECTOR), _request(role), POLICY)

        assert decision == Decision(permitted=True, auto_approve=True)
        assert decision.needs_approval is False

    def test_director_auto_approves_lead_in_other_office(self):
        decision = decide(
            _caller(UserRole.DIRECTOR, office_id="A"),
            _request("employee", office_id="B", is_lead=True),
            POLICY,
        )

        assert decision.permitted and decision.auto_approve

    def test_manager_creates_employee_in_same_office_pending(self):
        decision = decide(_caller(UserRole.MANAGER), _request("employee"), POLICY)

        assert decision.permitted is True
        assert decision.auto_approve is False
        assert decision.needs_approval is True

    def test_manager_cannot_create_employee_in_other_office(self):
        decision = decide(
            _caller(UserRole.MANAGER, office_id="A"),
            _request("employee", office_id="B"),
            POLICY,
        )

        assert decision.permitted is False
        assert decision.reason == MSG_INSUFFICIENT_PERMISSIONS

    @pytest.mark.parametrize("role", ["manager", "director"])
    def test_manager_cannot_create_non_employee(self, role):
        decision = decide(_caller(UserRole.MANAGER), _request(role), POLICY)

        assert decision.permitted is False
        assert decision.reason == MSG_INSUFFICIENT_PERMISSIONS

    def test_manager_without_office_never_matches(self):
        decision = decide(
            _caller(UserRole.MANAGER, office_id=None),
            _request("employee", office_id=None),
            POLICY,
        )

        assert decision.permitted is False

    def test_lead_creates_employee_in_same_office_pending(self):
        decision = decide(
            _caller(UserRole.EMPLOYEE, is_lead=True), _request("employee"), POLICY
        )

        assert decision.permitted is True
        assert decision.auto_approve is False

    def test_lead_cannot_create_manager(self):
        decision = decide(
            _caller(UserRole.EMPLOYEE, is_lead=True), _request("manager"), POLICY
        )

        assert decision.permitted is False

    def test_lead_cannot_create_employee_in_other_office(self):
        decision = decide(
            _caller(UserRole.EMPLOYEE, is_lead=True, office_id="A"),
            _request("employee", office_id="B"),
            POLICY,
        )

        assert decision.permitted is False

    def test_plain_employee_cannot_create_anyone(self):
        decision = decide(_caller(UserRole.EMPLOYEE), _request("employee"), POLICY)

        assert decision.permitted is False
        assert decision.reason == MSG_INSUFFICIENT_PERMISSIONS


class TestLeadScopeReportingTo:
    POLICY = ProvisioningPolicy(lead_scope_rule=LeadScopeRule.REPORTING_TO)

    def test_lead_may_create_direct_report_in_any_office(self):
        lead = _caller(UserRole.EMPLOYEE, is_lead=True, office_id="A")
        request = _request("employee", office_id="B", reporting_to_id=lead.id)

        decision = decide(lead, request, self.POLICY)

        assert decision.permitted is True
        assert decision.auto_approve is False

    def test_lead_cannot_create_employee_reporting_to_someone_else(self):
        lead = _caller(UserRole.EMPLOYEE, is_lead=True, office_id="A")
        request = _request("employee", office_id="A", reporting_to_id=uuid4())

        assert decide(lead, request, self.POLICY).permitted is False

    def test_lead_without_reporting_to_is_rejected(self):
        lead = _caller(UserRole.EMPLOYEE, is_lead=True)

        assert decide(lead, _request("employee"), self.POLICY).permitted is False

    def test_manager_still_uses_office_rule(self):
        decision = decide(
            _caller(UserRole.MANAGER, office_id="A"),
            _request("employee", office_id="A"),
            self.POLICY,
        )

        assert decision.permitted is True


# =============================================================================
# ELIGIBILITY GATE
# =============================================================================


class TestEligibilityGate:
    @pytest.mark.parametrize(
        "status,approval_status",
        [
            (UserStatus.INACTIVE, ApprovalStatus.APPROVED),
            (UserStatus.ACTIVE, ApprovalStatus.PENDING),
            (UserStatus.PENDING_APPROVAL, ApprovalStatus.PENDING),
        ],
    )
    def test_inactive_or_unapproved_caller_is_rejected(self, status, approval_status):
        caller = _caller(
            UserRole.DIRECTOR, status=status, approval_status=approval_status
        )

        rejection = check_caller_eligibility(caller, POLICY)

        assert rejection is not None
        assert rejection.reason == MSG_CALLER_NOT_ELIGIBLE

    def test_gate_disabled_by_policy(self):
        policy = ProvisioningPolicy(require_caller_active=False)
        caller = _caller(UserRole.DIRECTOR, status=UserStatus.INACTIVE)

        assert check_caller_eligibility(caller, policy) is None
        assert decide(caller, _request("employee"), policy).permitted is True

    def test_active_approved_caller_passes(self):
        assert check_caller_eligibility(_caller(UserRole.MANAGER), POLICY) is None


# =============================================================================
# FIELD VALIDATION
# =============================================================================


class TestValidateAccountRequest:
    def test_valid_request_has_no_errors(self):
        assert validate_account_request(_request("employee")) == []

    def test_director_does_not_need_office(self):
        assert validate_account_request(_request("director", office_id=None)) == []

    @pytest.mark.parametrize("missing", ["email", "password", "full_name", "role"])
    def test_missing_required_field(self, missing):
        request = replace(_request("employee"), **{missing: None})

        errors = validate_account_request(request)

        assert errors[0].message == MSG_MISSING_FIELDS
        assert errors[0].field == missing

    def test_blank_string_counts_as_missing(self):
        errors = validate_account_request(_request("employee", full_name="   "))

        assert errors[0].message == MSG_MISSING_FIELDS

    def test_office_required_for_non_director(self):
        errors = validate_account_request(_request("manager", office_id=None))

        assert [e.message for e in errors] == [MSG_OFFICE_REQUIRED]

    def test_invalid_role_reported_before_office(self):
        errors = validate_account_request(_request("admin", office_id=None))

        assert errors[0].message == MSG_INVALID_ROLE

    def test_lead_must_be_employee(self):
        errors = validate_account_request(_request("manager", is_lead=True))

        assert [e.message for e in errors] == [MSG_LEAD_REQUIRES_EMPLOYEE]

    def test_employee_lead_is_valid(self):
        assert validate_account_request(_request("employee", is_lead=True)) == []

    def test_errors_serialize_with_field_and_msg(self):
        error = validate_account_request(_request("admin"))[0]

        assert error.to_dict() == {"field": "role", "msg": MSG_INVALID_ROLE}


# =============================================================================
# APPROVAL FIELDS
# =============================================================================


class TestApprovalFields:
    def test_auto_approved_fields(self):
        caller_id = uuid4()

        fields = approval_fields(
            Decision(permitted=True, auto_approve=True),
            caller_id=caller_id,
            now=NOW,
            policy=POLICY,
        )

        assert fields.status == UserStatus.ACTIVE
        assert fields.approval_status == ApprovalStatus.APPROVED
        assert fields.approved_by == caller_id
        assert fields.approved_time == NOW

    def test_pending_fields_use_policy_status(self):
        fields = approval_fields(
            Decision(permitted=True, auto_approve=False),
            caller_id=uuid4(),
            now=NOW,
            policy=ProvisioningPolicy(pending_status=UserStatus.PENDING_APPROVAL),
        )

        assert fields.status == UserStatus.PENDING_APPROVAL
        assert fields.approval_status == ApprovalStatus.PENDING
        assert fields.approved_by is None
        assert fields.approved_time is None

    def test_default_pending_status_is_inactive(self):
        fields = approval_fields(
            Decision(permitted=True, auto_approve=False),
            caller_id=uuid4(),
            now=NOW,
            policy=POLICY,
        )

        assert fields.status == UserStatus.INACTIVE
