"""Schemas for profiles, profile update requests and picture uploads."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.auth import PublicUser


class ProfileChanges(BaseModel):
    """
    Requested profile edits. Only name, state and profilePic may be changed;
    any other key is rejected.
    """

    name: str | None = Field(default=None, max_length=255)
    state: str | None = Field(default=None, max_length=64)
    profile_pic: str | None = Field(default=None, alias="profilePic", max_length=2048)

    class Config:
        extra = "forbid"

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip()

    @field_validator("profile_pic")
    @classmethod
    def validate_profile_pic(cls, v: str | None) -> str | None:
        if v is None:
            return None
        s = v.strip()
        if not (s.lower().startswith("http://") or s.lower().startswith("https://")):
            raise ValueError("profilePic must be an http(s) URL")
        return s

    def as_changes(self) -> dict[str, str]:
        """Changes keyed by request field name, omitting fields that were not sent."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ProfileResponse(PublicUser):
    """Own profile plus whether an update is awaiting approval (derived at read time)."""

    pending_approval: bool = Field(alias="pendingApproval")
    pending_changes: dict[str, str] | None = Field(
        default=None, alias="pendingChanges"
    )


class RequestOwner(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True
        populate_by_name = True


class ProfileRequestItem(BaseModel):
    """One profile update request as shown to administrators."""

    id: int
    user_id: int = Field(alias="userId")
    user: RequestOwner | None = None
    changes: dict[str, str]
    status: str
    created_at: datetime = Field(alias="createdAt")
    resolved_at: datetime | None = Field(default=None, alias="resolvedAt")
    resolved_by: int | None = Field(default=None, alias="resolvedBy")

    class Config:
        from_attributes = True
        populate_by_name = True


class ProfileRequestsResponse(BaseModel):
    """Pending requests, oldest first."""

    requests: list[ProfileRequestItem]


class RequestActionResponse(BaseModel):
    """Outcome message plus the affected request."""

    message: str
    request: ProfileRequestItem


class UploadResponse(BaseModel):
    """Reference to a stored picture."""

    url: str
