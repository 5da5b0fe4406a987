"""Service error taxonomy. Each error carries the HTTP status it maps to."""


class ServiceError(Exception):
    """Base for errors that surface to clients with a specific, non-sensitive message."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InputValidationError(ServiceError):
    """Bad or missing input, e.g. a disallowed field in an update."""

    status_code = 400
    default_message = "Invalid input."


class Unauthenticated(ServiceError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidCredentials(Unauthenticated):
    """Unknown email and wrong password are deliberately indistinguishable."""

    default_message = "Invalid credentials"


class TokenError(Unauthenticated):
    default_message = "Invalid or expired token"


class InvalidToken(TokenError):
    pass


class ExpiredToken(TokenError):
    pass


class MalformedToken(TokenError):
    pass


class Forbidden(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class AdminSelfRegistrationForbidden(Forbidden):
    default_message = "Admin accounts cannot be self-registered"


class AdminsCannotSelfUpdate(Forbidden):
    default_message = "Admins cannot update profile."


class Conflict(ServiceError):
    status_code = 409
    default_message = "Conflict"


class DuplicateEmail(Conflict):
    default_message = "Email is already registered"


class PendingRequestAlreadyExists(Conflict):
    default_message = "A profile update is already awaiting admin approval."


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class UserNotFound(NotFound):
    default_message = "User not found"


class RequestNotFound(NotFound):
    """Unknown request id, or a request that is no longer pending."""

    default_message = "Profile update request not found or already resolved"


class StoreUnavailable(ServiceError):
    """Transient backing-store failure; the caller may retry."""

    status_code = 503
    default_message = "Service temporarily unavailable, please retry."


class BlobStoreError(ServiceError):
    """Picture storage failed (upstream error or misconfiguration)."""

    status_code = 500
    default_message = "Image upload failed"


def format_validation_errors(errors: list[dict]) -> str:
    """Flatten pydantic error dicts into one client-facing message."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or InputValidationError.default_message
