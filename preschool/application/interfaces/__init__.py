"""Application ports (Protocols) implemented by infrastructure."""

from preschool.application.interfaces.repositories import (
    IInvitationCodeRepository,
    IOnboardingRequestRepository,
    IRecordStore,
    ITenantRepository,
    IUserProfileRepository,
)
from preschool.application.interfaces.services import IIdentityDirectory, INotifier

__all__ = [
    "IIdentityDirectory",
    "IInvitationCodeRepository",
    "INotifier",
    "IOnboardingRequestRepository",
    "IRecordStore",
    "ITenantRepository",
    "IUserProfileRepository",
]
