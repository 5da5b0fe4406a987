"""SQLAlchemy-backed credential store: the canonical home of User records."""

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import store_call
from app.core.errors import DuplicateEmail, UserNotFound
from app.models.user import User
from app.schemas.auth import normalize_email

# Columns that may be unset directly (outside the approval workflow).
UNSETTABLE_FIELDS = frozenset({"profile_picture", "pending_changes"})


class CredentialStore:
    """
    Lookup and mutation of users.

    Methods flush but do not commit; the caller owns the transaction so a
    workflow step can combine user and request writes atomically.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_email(self, email: str) -> User | None:
        with store_call(self.db, "find_user_by_email"):
            return (
                self.db.query(User)
                .filter(User.email == normalize_email(email))
                .first()
            )

    def find_by_id(self, user_id: int) -> User | None:
        with store_call(self.db, "find_user_by_id"):
            return self.db.get(User, user_id)

    def create(self, fields: dict[str, Any]) -> User:
        """Insert a user. Raises DuplicateEmail when the email is taken."""
        user = User(**fields)
        user.email = normalize_email(user.email)
        with store_call(self.db, "create_user"):
            if self.find_by_email(user.email) is not None:
                raise DuplicateEmail()
            self.db.add(user)
            try:
                self.db.flush()
            except IntegrityError as e:
                # Lost a race against a concurrent registration for the same email.
                self.db.rollback()
                raise DuplicateEmail() from e
        return user

    def apply_update(self, user_id: int, fields: dict[str, Any]) -> User:
        """Set the given columns on a user. Raises UserNotFound."""
        user = self.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        for column, value in fields.items():
            if not hasattr(User, column):
                raise ValueError(f"Unknown user field: {column}")
            setattr(user, column, value)
        with store_call(self.db, "apply_user_update"):
            self.db.flush()
        return user

    def unset_field(self, user_id: int, field_name: str) -> User:
        """Clear a nullable column on a user. Raises UserNotFound."""
        if field_name not in UNSETTABLE_FIELDS:
            raise ValueError(f"Field cannot be unset: {field_name}")
        return self.apply_update(user_id, {field_name: None})
