"""Invitation code endpoints: issue, list, preview, redeem, revoke and resend."""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Query, Request

from preschool.api.v1.dependencies import CallerProfileId, WorkflowApiDep
from preschool.core.limiter import limit_preview, limit_redeem
from preschool.schemas.invitation import (
    InvitationCreateRequest,
    InvitationPreviewResponse,
    InvitationResponse,
    RedeemRequest,
    RedeemResponse,
    ResendResponse,
)
from preschool.schemas.member import OkResponse

router = APIRouter()


@router.post("", response_model=InvitationResponse, status_code=201)
async def issue_invitation(
    body: InvitationCreateRequest,
    workflow: WorkflowApiDep,
    caller_profile_id: CallerProfileId,
) -> InvitationResponse:
    """Issue a single-use code for a role in a tenant (principal/admin of it, or superadmin)."""
    invitation = await workflow.issue_invitation(
        caller_profile_id,
        tenant_id=body.tenant_id,
        role=body.role,
        target_email=body.target_email,
        ttl=timedelta(hours=body.ttl_hours) if body.ttl_hours is not None else None,
    )
    return InvitationResponse.from_entity(invitation)


@router.get("", response_model=list[InvitationResponse])
async def list_invitations(
    workflow: WorkflowApiDep,
    caller_profile_id: CallerProfileId,
    tenant_id: Annotated[str, Query(min_length=1)],
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[InvitationResponse]:
    invitations = await workflow.list_invitations(
        caller_profile_id, tenant_id, skip=skip, limit=limit
    )
    return [InvitationResponse.from_entity(i) for i in invitations]


@router.post("/redeem", response_model=RedeemResponse)
@limit_redeem
async def redeem_invitation(
    request: Request,
    body: RedeemRequest,
    workflow: WorkflowApiDep,
) -> RedeemResponse:
    """Redeem a code. No authentication; rate limited per IP."""
    result = await workflow.redeem_invitation(
        body.code, body.email, body.name, body.password
    )
    return RedeemResponse.model_validate(result)


@router.get("/{code}", response_model=InvitationPreviewResponse)
@limit_preview
async def preview_invitation(
    request: Request,
    code: str,
    workflow: WorkflowApiDep,
) -> InvitationPreviewResponse:
    """What a code grants (role, school, expiry). The target email is never disclosed."""
    preview = await workflow.preview_invitation(code)
    return InvitationPreviewResponse.model_validate(preview)


@router.post("/{code}/revoke", response_model=OkResponse)
async def revoke_invitation(
    code: str,
    workflow: WorkflowApiDep,
    caller_profile_id: CallerProfileId,
) -> OkResponse:
    await workflow.revoke_invitation(caller_profile_id, code)
    return OkResponse()


@router.post("/{code}/resend", response_model=ResendResponse)
async def resend_invitation(
    code: str,
    workflow: WorkflowApiDep,
    caller_profile_id: CallerProfileId,
) -> ResendResponse:
    """Re-send the invitation email of an issued, email-restricted code."""
    sent = await workflow.resend_invitation(caller_profile_id, code)
    return ResendResponse(sent=sent)
