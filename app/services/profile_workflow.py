"""
Profile update workflow: registration, login and the admin approval lifecycle.

A user's edit becomes a pending ProfileUpdateRequest; only an administrator's
approve/decline resolves it. Resolution is a compare-and-set on the request's
status so two racing admins can never apply the same request twice. At most
one pending request per user is enforced by a partial unique index; a second
submission is rejected rather than replacing the first.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.access import authorize
from app.core.database import store_call
from app.core.errors import (
    AdminSelfRegistrationForbidden,
    AdminsCannotSelfUpdate,
    InputValidationError,
    InvalidCredentials,
    PendingRequestAlreadyExists,
    RequestNotFound,
    ServiceError,
    UserNotFound,
    format_validation_errors,
)
from app.core.security import (
    burn_password_check,
    create_access_token,
    hash_password,
    verify_password,
)
from app.models.profile_update_request import (
    CHANGE_FIELD_COLUMNS,
    ProfileUpdateRequest,
    RequestStatus,
)
from app.models.user import Role, User
from app.schemas.auth import Identity, LoginRequest, LoginResponse, PublicUser, RegisterRequest
from app.schemas.profile import ProfileChanges, ProfileResponse
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def parse_changes(raw: dict[str, Any], allow_empty: bool = False) -> dict[str, str]:
    """Validate requested edits against the allow-list; reject unknown fields and empty sets."""
    try:
        changes = ProfileChanges.model_validate(raw).as_changes()
    except ValidationError as e:
        raise InputValidationError(format_validation_errors(e.errors())) from e
    if not changes and not allow_empty:
        raise InputValidationError("No profile changes supplied (allowed: name, state, profilePic).")
    return changes


def _is_admin_role(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() == Role.ADMIN.value


class ProfileWorkflow:
    """Account and profile-change operations over one database session."""

    def __init__(self, db: Session, users: CredentialStore | None = None) -> None:
        self.db = db
        self.users = users or CredentialStore(db)

    # ─── Accounts ─────────────────────────────────────────

    def register(self, payload: dict[str, Any]) -> User:
        """
        Create a non-admin account (inactive by default).

        The admin check runs before any other validation so an admin
        self-registration is refused whatever else the payload contains.
        """
        if not isinstance(payload, dict):
            raise InputValidationError("Request body must be a JSON object.")
        if _is_admin_role(payload.get("role")):
            logger.warning("Admin self-registration refused")
            raise AdminSelfRegistrationForbidden()
        try:
            body = RegisterRequest.model_validate(payload)
        except ValidationError as e:
            raise InputValidationError(format_validation_errors(e.errors())) from e

        user = self.users.create(
            {
                "name": body.name,
                "email": body.email,
                "password_hash": hash_password(body.password),
                "role": body.role,
                "state": body.state,
                "active": False,
            }
        )
        with store_call(self.db, "register"):
            self.db.commit()
        logger.info("User registered", extra={"user_id": user.id, "role": user.role})
        return user

    def login(self, body: LoginRequest) -> LoginResponse:
        """Verify credentials and issue a session token. Raises InvalidCredentials."""
        user = self.users.find_by_email(body.email)
        if user is None:
            burn_password_check(body.password)
            logger.info("Login failed")
            raise InvalidCredentials()
        if not verify_password(body.password, user.password_hash):
            logger.info("Login failed")
            raise InvalidCredentials()
        token = create_access_token(user)
        logger.info("Login succeeded", extra={"user_id": user.id})
        return LoginResponse(token=token, user=PublicUser.model_validate(user))

    # ─── Profile ──────────────────────────────────────────

    def pending_request_for(self, user_id: int) -> ProfileUpdateRequest | None:
        with store_call(self.db, "find_pending_request"):
            return (
                self.db.query(ProfileUpdateRequest)
                .filter(
                    ProfileUpdateRequest.user_id == user_id,
                    ProfileUpdateRequest.status == RequestStatus.PENDING.value,
                )
                .first()
            )

    def get_profile(self, identity: Identity) -> ProfileResponse:
        """Own profile; pendingApproval is recomputed from the request table on every read."""
        user = self.users.find_by_id(identity.id)
        if user is None:
            raise UserNotFound()
        pending = self.pending_request_for(user.id)
        public = PublicUser.model_validate(user).model_dump()
        return ProfileResponse(
            **public,
            pending_approval=pending is not None,
            pending_changes=dict(pending.changes) if pending is not None else None,
        )

    def ensure_can_submit(self, identity: Identity) -> User:
        """Pre-checks for SubmitUpdate, run before any picture is uploaded."""
        if identity.role == Role.ADMIN.value:
            raise AdminsCannotSelfUpdate()
        user = self.users.find_by_id(identity.id)
        if user is None:
            raise UserNotFound()
        if self.pending_request_for(user.id) is not None:
            raise PendingRequestAlreadyExists()
        return user

    def submit_update(self, identity: Identity, raw_changes: dict[str, Any]) -> ProfileUpdateRequest:
        """
        Hold requested edits for admin approval; the user record keeps its current values.

        Raises AdminsCannotSelfUpdate, InputValidationError or PendingRequestAlreadyExists.
        """
        user = self.ensure_can_submit(identity)
        changes = parse_changes(raw_changes)

        request = ProfileUpdateRequest(
            user_id=user.id,
            changes=changes,
            status=RequestStatus.PENDING.value,
        )
        with store_call(self.db, "submit_profile_update"):
            self.db.add(request)
            try:
                self.db.flush()
            except IntegrityError as e:
                # Another submission for this user won the race to the unique index.
                self.db.rollback()
                raise PendingRequestAlreadyExists() from e
            user.pending_changes = changes
            self.db.commit()
            self.db.refresh(request)
        logger.info(
            "Profile update submitted",
            extra={"user_id": user.id, "request_id": request.id, "fields": sorted(changes)},
        )
        return request

    def delete_picture(self, identity: Identity) -> User:
        """Remove the picture reference immediately; no approval needed."""
        if identity.role == Role.ADMIN.value:
            raise AdminsCannotSelfUpdate()
        user = self.users.unset_field(identity.id, "profile_picture")
        with store_call(self.db, "delete_profile_picture"):
            self.db.commit()
        logger.info("Profile picture deleted", extra={"user_id": identity.id})
        return user

    # ─── Administration ───────────────────────────────────

    def list_pending(self, admin: Identity) -> list[ProfileUpdateRequest]:
        """Pending requests, oldest first, for FIFO review."""
        authorize(admin, Role.ADMIN)
        with store_call(self.db, "list_pending_requests"):
            return (
                self.db.query(ProfileUpdateRequest)
                .options(joinedload(ProfileUpdateRequest.user))
                .filter(ProfileUpdateRequest.status == RequestStatus.PENDING.value)
                .order_by(ProfileUpdateRequest.created_at.asc(), ProfileUpdateRequest.id.asc())
                .all()
            )

    def approve(self, admin: Identity, request_id: int) -> ProfileUpdateRequest:
        """Apply exactly the requested fields and mark the request approved, in one transaction."""
        return self._resolve(admin, request_id, RequestStatus.APPROVED)

    def decline(self, admin: Identity, request_id: int) -> ProfileUpdateRequest:
        """Mark the request declined; the user record is left untouched."""
        return self._resolve(admin, request_id, RequestStatus.DECLINED)

    def _resolve(
        self, admin: Identity, request_id: int, outcome: RequestStatus
    ) -> ProfileUpdateRequest:
        authorize(admin, Role.ADMIN)
        now = datetime.now(UTC)
        with store_call(self.db, f"resolve_profile_request_{outcome.value}"):
            claimed = (
                self.db.query(ProfileUpdateRequest)
                .filter(
                    ProfileUpdateRequest.id == request_id,
                    ProfileUpdateRequest.status == RequestStatus.PENDING.value,
                )
                .update(
                    {
                        ProfileUpdateRequest.status: outcome.value,
                        ProfileUpdateRequest.resolved_at: now,
                        ProfileUpdateRequest.resolved_by: admin.id,
                    },
                    synchronize_session=False,
                )
            )
            if claimed != 1:
                self.db.rollback()
                raise RequestNotFound()

            request = self.db.get(ProfileUpdateRequest, request_id, populate_existing=True)
            if outcome is RequestStatus.APPROVED:
                updates: dict[str, Any] = {
                    CHANGE_FIELD_COLUMNS[field]: value
                    for field, value in request.changes.items()
                    if field in CHANGE_FIELD_COLUMNS
                }
                updates["pending_changes"] = None
                try:
                    self.users.apply_update(request.user_id, updates)
                except ServiceError:
                    self.db.rollback()
                    raise
            self.db.commit()
            self.db.refresh(request)

        logger.info(
            "Profile update resolved",
            extra={
                "request_id": request.id,
                "user_id": request.user_id,
                "admin_id": admin.id,
                "outcome": outcome.value,
            },
        )
        return request
