"""Admin review of profile update requests: list pending, approve, decline."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_workflow
from app.api.v1.auth import authorize_route
from app.schemas.auth import Identity
from app.schemas.profile import (
    ProfileRequestItem,
    ProfileRequestsResponse,
    RequestActionResponse,
)
from app.services.profile_workflow import ProfileWorkflow

router = APIRouter()


@router.get("", response_model=ProfileRequestsResponse)
def list_pending_requests(
    admin: Annotated[Identity, Depends(authorize_route)],
    workflow: Annotated[ProfileWorkflow, Depends(get_workflow)],
) -> ProfileRequestsResponse:
    """Pending requests, oldest first (admin only)."""
    pending = workflow.list_pending(admin)
    return ProfileRequestsResponse(
        requests=[ProfileRequestItem.model_validate(r) for r in pending]
    )


@router.post("/{request_id}/approve", response_model=RequestActionResponse)
def approve_request(
    request_id: int,
    admin: Annotated[Identity, Depends(authorize_route)],
    workflow: Annotated[ProfileWorkflow, Depends(get_workflow)],
) -> RequestActionResponse:
    """Apply the requested changes to the user. 404 if unknown or already resolved."""
    resolved = workflow.approve(admin, request_id)
    return RequestActionResponse(
        message="Profile update approved.",
        request=ProfileRequestItem.model_validate(resolved),
    )


@router.post("/{request_id}/decline", response_model=RequestActionResponse)
def decline_request(
    request_id: int,
    admin: Annotated[Identity, Depends(authorize_route)],
    workflow: Annotated[ProfileWorkflow, Depends(get_workflow)],
) -> RequestActionResponse:
    """Decline the request; the user's profile is not changed. 404 if unknown or already resolved."""
    resolved = workflow.decline(admin, request_id)
    return RequestActionResponse(
        message="Profile update declined.",
        request=ProfileRequestItem.model_validate(resolved),
    )
