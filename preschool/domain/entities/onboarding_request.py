"""Onboarding request domain entity.

A school's application for access. Reviewed exactly once: pending moves to
approved or rejected and never moves again.
"""

from dataclasses import dataclass
from datetime import datetime

from preschool.domain.enums import OnboardingRequestStatus
from preschool.domain.exceptions import InvalidStateException, ValidationException


@dataclass
class OnboardingRequestEntity:
    """Domain entity for an onboarding request. Validation runs on construction."""

    id: str
    tenant_name: str
    admin_name: str
    admin_email: str
    status: OnboardingRequestStatus
    created_at: datetime
    phone: str | None = None
    address: str | None = None
    student_count: int | None = None
    teacher_count: int | None = None
    message: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    tenant_id: str | None = None
    rejection_reason: str | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate request invariants. Raises ValidationException if violated."""
        if not self.id:
            raise ValidationException("Onboarding request ID is required", field="id")
        if (self.reviewed_by is None) != (self.reviewed_at is None):
            raise ValidationException(
                "reviewed_by and reviewed_at must be set together",
                field="reviewed_by",
            )
        if self.status == OnboardingRequestStatus.PENDING and self.reviewed_at is not None:
            raise ValidationException(
                "A pending request cannot carry review fields", field="reviewed_at"
            )

    @property
    def is_pending(self) -> bool:
        return self.status == OnboardingRequestStatus.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == OnboardingRequestStatus.APPROVED

    def ensure_reviewable(self) -> None:
        """Raise InvalidStateException unless the request is still pending."""
        if not self.is_pending:
            raise InvalidStateException(
                f"Onboarding request is already {self.status.value}",
                request_id=self.id,
                status=self.status.value,
            )
