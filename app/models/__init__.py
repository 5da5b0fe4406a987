"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.profile_update_request import ProfileUpdateRequest, RequestStatus
from app.models.user import Role, User

__all__ = ["Base", "ProfileUpdateRequest", "RequestStatus", "Role", "User"]
