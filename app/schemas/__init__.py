"""Pydantic request/response schemas."""

from app.schemas.auth import (
    Identity,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PublicUser,
    RegisterRequest,
)
from app.schemas.health import HealthResponse
from app.schemas.profile import (
    ProfileChanges,
    ProfileRequestItem,
    ProfileRequestsResponse,
    ProfileResponse,
    RequestActionResponse,
    UploadResponse,
)

__all__ = [
    "HealthResponse",
    "Identity",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "ProfileChanges",
    "ProfileRequestItem",
    "ProfileRequestsResponse",
    "ProfileResponse",
    "PublicUser",
    "RegisterRequest",
    "RequestActionResponse",
    "UploadResponse",
]
