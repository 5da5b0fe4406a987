"""Registration, JWT login and the auth dependencies (get_current_user, authorize_route)."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.api.deps import get_workflow
from app.core.access import authenticate, authorize, required_role_for
from app.core.config import get_settings
from app.core.errors import ServiceError
from app.schemas.auth import Identity, LoginRequest, LoginResponse, MessageResponse
from app.services.profile_workflow import ProfileWorkflow

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Identity:
    """Dependency: require a valid Bearer JWT and return the caller's identity. Raises 401."""
    token = credentials.credentials if credentials is not None else None
    return authenticate(token)


def authorize_route(
    request: Request,
    identity: Annotated[Identity, Depends(get_current_user)],
) -> Identity:
    """Dependency: authenticate, then apply ROUTE_POLICY for the matched route. Raises 401/403."""
    route = request.scope.get("route")
    template = getattr(route, "path", request.url.path)
    path = template.removeprefix(get_settings().API_V1_PREFIX) or "/"
    required = required_role_for(request.method, path)
    if required is not None:
        authorize(identity, required)
    return identity


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: Annotated[dict[str, Any], Body()],
    workflow: Annotated[ProfileWorkflow, Depends(get_workflow)],
) -> MessageResponse:
    """Create a non-admin account. Admin accounts are created out-of-band only."""
    workflow.register(payload)
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    workflow: Annotated[ProfileWorkflow, Depends(get_workflow)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns a JWT and the public user.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        return workflow.login(body)
    except ServiceError:
        raise
    except Exception:
        logger.exception("Login failed unexpectedly")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed",
        ) from None
