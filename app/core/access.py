"""
Access guard: token -> identity resolution and the role policy for every protected route.

Authorization is strict role equality; there is no hierarchy, so an admin is
not implicitly allowed on employer-only routes. All role requirements live in
ROUTE_POLICY so they can be reviewed in one place.
"""

from app.core.errors import Forbidden, TokenError, Unauthenticated
from app.core.security import decode_access_token
from app.models.user import Role
from app.schemas.auth import Identity

# (HTTP method, route path template without API prefix) -> required role.
# Protected routes not listed here only require a valid session token.
ROUTE_POLICY: dict[tuple[str, str], Role] = {
    ("GET", "/profile-requests"): Role.ADMIN,
    ("POST", "/profile-requests/{request_id}/approve"): Role.ADMIN,
    ("POST", "/profile-requests/{request_id}/decline"): Role.ADMIN,
    ("GET", "/admin"): Role.ADMIN,
    ("GET", "/employer"): Role.EMPLOYER,
}


def authenticate(token: str | None) -> Identity:
    """Resolve a bearer token into the request identity. Raises Unauthenticated."""
    if not token:
        raise Unauthenticated()
    try:
        claims = decode_access_token(token)
    except TokenError:
        # Expired, forged and garbled tokens all look the same to the client.
        raise Unauthenticated("Invalid or expired token") from None
    return Identity(id=claims["id"], role=claims["role"], name=claims.get("name") or "")


def authorize(identity: Identity, required_role: Role | str) -> None:
    """Raise Forbidden unless the identity holds exactly the required role."""
    if identity.role != str(required_role):
        raise Forbidden(f"{str(required_role).capitalize()} access required")


def required_role_for(method: str, path: str) -> Role | None:
    """Look up the role a route requires; None means any authenticated identity."""
    return ROUTE_POLICY.get((method.upper(), path))
