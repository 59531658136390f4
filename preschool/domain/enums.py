"""Domain enumerations for the onboarding and invitation workflows."""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings (e.g. for CHECK constraints)."""
        return [member.value for member in cls]


class OnboardingRequestStatus(_ValuesMixin, str, Enum):
    """Review status of a school's onboarding request.

    pending is the only non-terminal state; approved and rejected are final.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TenantOnboardingStatus(_ValuesMixin, str, Enum):
    """Provisioning status of a tenant. completed once its principal exists."""

    PENDING = "pending"
    COMPLETED = "completed"


class UserRole(_ValuesMixin, str, Enum):
    """Application role held by a user profile."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    PRINCIPAL = "principal"
    TEACHER = "teacher"
    PARENT = "parent"


class InvitationState(_ValuesMixin, str, Enum):
    """Derived lifecycle state of an invitation code (not persisted)."""

    ISSUED = "issued"
    USED = "used"
    EXPIRED = "expired"


# Roles that may be granted through an invitation code.
INVITABLE_ROLES: frozenset[UserRole] = frozenset(
    {UserRole.ADMIN, UserRole.TEACHER, UserRole.PARENT}
)

# Roles allowed to issue, revoke and resend invitations (tenant-scoped unless superadmin).
ISSUER_ROLES: frozenset[UserRole] = frozenset(
    {UserRole.SUPERADMIN, UserRole.PRINCIPAL, UserRole.ADMIN}
)

# Seniority used for member administration: tenant callers may only act on
# members ranked strictly below them.
ROLE_RANK: dict[UserRole, int] = {
    UserRole.SUPERADMIN: 4,
    UserRole.PRINCIPAL: 3,
    UserRole.ADMIN: 2,
    UserRole.TEACHER: 1,
    UserRole.PARENT: 1,
}
