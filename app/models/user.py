"""ORM model for application users (auth, RBAC and profile data)."""

from datetime import UTC, datetime
from enum import StrEnum

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String

from app.models.base import Base


class Role(StrEnum):
    ADMIN = "admin"
    EMPLOYER = "employer"
    STANDARD = "standard"


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin', 'employer' or 'standard'; fixed at creation. Admin accounts
    are only created out-of-band (app.scripts.create_user).

    pending_changes is write-only: stamped on submit and cleared on approve,
    left stale by a decline (which never mutates the user). Reads of pending
    state always go to the profile_update_requests table.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.STANDARD.value)
    state = Column(String(64), nullable=True)
    active = Column(Boolean, nullable=False, default=False)
    profile_picture = Column(String(2048), nullable=True)
    pending_changes = Column(JSON, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
