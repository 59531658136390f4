"""Onboarding request endpoints: anonymous submission and superadmin review."""

from typing import Annotated

from fastapi import APIRouter, Query, Request

from preschool.api.v1.dependencies import CallerProfileId, WorkflowApiDep
from preschool.core.limiter import limit_onboarding_request
from preschool.domain.enums import OnboardingRequestStatus
from preschool.schemas.member import OkResponse
from preschool.schemas.onboarding import (
    ApprovalResponse,
    OnboardingRequestCreateRequest,
    OnboardingRequestCreateResponse,
    OnboardingRequestResponse,
    RejectRequest,
)

router = APIRouter()


@router.post("", response_model=OnboardingRequestCreateResponse, status_code=201)
@limit_onboarding_request
async def create_onboarding_request(
    request: Request,
    body: OnboardingRequestCreateRequest,
    workflow: WorkflowApiDep,
) -> OnboardingRequestCreateResponse:
    """Submit a school's request for access. No authentication; rate limited per IP."""
    request_id = await workflow.request_onboarding(
        tenant_name=body.tenant_name,
        admin_name=body.admin_name,
        admin_email=body.admin_email,
        phone=body.phone,
        address=body.address,
        student_count=body.student_count,
        teacher_count=body.teacher_count,
        message=body.message,
    )
    return OnboardingRequestCreateResponse(request_id=request_id)


@router.get("", response_model=list[OnboardingRequestResponse])
async def list_onboarding_requests(
    workflow: WorkflowApiDep,
    caller_profile_id: CallerProfileId,
    status: OnboardingRequestStatus | None = None,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[OnboardingRequestResponse]:
    """List requests, newest first (superadmin only)."""
    requests = await workflow.list_onboarding_requests(
        caller_profile_id, status=status, skip=skip, limit=limit
    )
    return [OnboardingRequestResponse.model_validate(r) for r in requests]


@router.post("/{request_id}/approve", response_model=ApprovalResponse)
async def approve_onboarding_request(
    request_id: str,
    workflow: WorkflowApiDep,
    caller_profile_id: CallerProfileId,
) -> ApprovalResponse:
    """Provision the tenant and its principal account (superadmin only).

    Safe to repeat: an already approved request answers with the existing
    tenant id and no password.
    """
    result = await workflow.approve_onboarding(caller_profile_id, request_id)
    return ApprovalResponse.model_validate(result)


@router.post("/{request_id}/reject", response_model=OkResponse)
async def reject_onboarding_request(
    request_id: str,
    workflow: WorkflowApiDep,
    caller_profile_id: CallerProfileId,
    body: RejectRequest | None = None,
) -> OkResponse:
    """Reject a pending request (superadmin only)."""
    await workflow.reject_onboarding(
        caller_profile_id, request_id, body.reason if body else None
    )
    return OkResponse()
