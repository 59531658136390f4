"""Tests for domain exceptions (error_code, message, details) and their HTTP statuses."""

import pytest

from preschool.core.exception_handlers import status_for
from preschool.domain.exceptions import (
    AlreadyUsedException,
    ConflictException,
    EmailMismatchException,
    EmailTakenException,
    ExpiredException,
    IdentityProviderException,
    InvalidCodeException,
    InvalidStateException,
    PartialFailureException,
    PreschoolException,
    ProviderUnavailableException,
    ResourceNotFoundException,
    UnauthorizedException,
    ValidationException,
    WeakPasswordException,
)


def test_base_exception_default_error_code() -> None:
    exc = PreschoolException("Something failed")
    assert exc.error_code == "PreschoolException"
    assert exc.to_dict() == {
        "error": "PreschoolException",
        "message": "Something failed",
        "details": {},
    }


def test_validation_exception_carries_field() -> None:
    exc = ValidationException("bad email", field="admin_email")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "admin_email"}


def test_partial_failure_names_unpersisted_fields() -> None:
    exc = PartialFailureException(
        "onboarding_request", "req-1", ["onboarding_request.status"], tenant_id="t-1"
    )
    assert exc.error_code == "PARTIAL_FAILURE"
    assert exc.details == {
        "entity_type": "onboarding_request",
        "entity_id": "req-1",
        "fields": ["onboarding_request.status"],
        "tenant_id": "t-1",
    }
    assert "onboarding_request.status" in exc.message


def test_provider_unavailable_details() -> None:
    exc = ProviderUnavailableException("identity_directory", "create_account")
    assert exc.details == {"provider": "identity_directory", "operation": "create_account"}


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (ValidationException("x"), 400),
        (InvalidCodeException(), 400),
        (WeakPasswordException(8), 400),
        (UnauthorizedException(), 403),
        (EmailMismatchException(), 403),
        (ResourceNotFoundException("tenant", "t-1"), 404),
        (InvalidStateException("x"), 409),
        (AlreadyUsedException(), 409),
        (EmailTakenException(), 409),
        (ConflictException("tenant"), 409),
        (ExpiredException(), 410),
        (PartialFailureException("invitation_code", "AB***", ["used_at"]), 500),
        (IdentityProviderException("create_account"), 502),
        (ProviderUnavailableException("notifier", "send"), 503),
    ],
)
def test_error_codes_map_to_http_status(exc: PreschoolException, status: int) -> None:
    assert status_for(exc.error_code) == status


def test_unmapped_error_code_is_bad_request() -> None:
    assert status_for("SOMETHING_NEW") == 400
