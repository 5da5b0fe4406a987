"""ORM model for profile edits awaiting (or resolved by) an administrator."""

from datetime import UTC, datetime
from enum import StrEnum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import relationship

from app.models.base import Base

# Fields a user may change through the approval workflow (request payload names).
ALLOWED_CHANGE_FIELDS = ("name", "state", "profilePic")

# Request payload name -> User column.
CHANGE_FIELD_COLUMNS = {
    "name": "name",
    "state": "state",
    "profilePic": "profile_picture",
}


class RequestStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class ProfileUpdateRequest(Base):
    """
    One submitted profile edit. Rows are never deleted; resolved rows are history.

    The partial unique index allows at most one pending request per user.
    """

    __tablename__ = "profile_update_requests"
    __table_args__ = (
        Index(
            "uq_profile_update_requests_user_pending",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_profile_update_requests_status_created", "status", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    changes = Column(JSON, nullable=False)
    status = Column(String(16), nullable=False, default=RequestStatus.PENDING.value)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolved_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    user = relationship("User", foreign_keys=[user_id])
