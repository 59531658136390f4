"""Member administration endpoints (tenant principal/admin or superadmin)."""

from fastapi import APIRouter

from preschool.api.v1.dependencies import CallerProfileId, WorkflowApiDep
from preschool.schemas.member import OkResponse, PasswordResetResponse

router = APIRouter()


@router.post("/{profile_id}/reset-password", response_model=PasswordResetResponse)
async def reset_member_password(
    profile_id: str,
    workflow: WorkflowApiDep,
    caller_profile_id: CallerProfileId,
) -> PasswordResetResponse:
    """Set a fresh temporary password on the member's account and email it to them."""
    sent = await workflow.reset_member_password(caller_profile_id, profile_id)
    return PasswordResetResponse(profile_id=profile_id, sent=sent)


@router.post("/{profile_id}/deactivate", response_model=OkResponse)
async def deactivate_member(
    profile_id: str,
    workflow: WorkflowApiDep,
    caller_profile_id: CallerProfileId,
) -> OkResponse:
    await workflow.deactivate_member(caller_profile_id, profile_id)
    return OkResponse()
