"""Role dashboards. Role requirements come from ROUTE_POLICY, not from these handlers."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.auth import authorize_route
from app.schemas.auth import Identity, MessageResponse

router = APIRouter()


@router.get("/dashboard", response_model=MessageResponse)
def dashboard(identity: Annotated[Identity, Depends(authorize_route)]) -> MessageResponse:
    return MessageResponse(message=f"Welcome {identity.name}, Role: {identity.role}")


@router.get("/admin", response_model=MessageResponse)
def admin_dashboard(_identity: Annotated[Identity, Depends(authorize_route)]) -> MessageResponse:
    return MessageResponse(message="Admin dashboard")


@router.get("/employer", response_model=MessageResponse)
def employer_dashboard(_identity: Annotated[Identity, Depends(authorize_route)]) -> MessageResponse:
    return MessageResponse(message="Employer dashboard")
