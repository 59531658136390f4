"""Domain entities (business rules independent of persistence)."""

from preschool.domain.entities.invitation_code import InvitationCodeEntity
from preschool.domain.entities.onboarding_request import OnboardingRequestEntity

__all__ = ["InvitationCodeEntity", "OnboardingRequestEntity"]
