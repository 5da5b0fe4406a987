"""Password hashing and JWT creation/verification for authentication."""

import logging
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.config import Settings, get_settings
from app.core.errors import ExpiredToken, InvalidToken, MalformedToken

if TYPE_CHECKING:
    from app.models.user import User

logger = logging.getLogger(__name__)

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for name, email and password validation.
NAME_MIN_LEN = 1
NAME_MAX_LEN = 255
EMAIL_MAX_LEN = 320
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Used only outside prod when JWT_SECRET is unset; never safe for production.
INSECURE_FALLBACK_SECRET = "insecure-dev-secret-do-not-use-in-production"

# Claims every session token must carry.
REQUIRED_CLAIMS = ("id", "role", "name", "exp", "iat")

# Compared against when the login email is unknown so both failure paths cost one bcrypt check.
_DUMMY_HASH = bcrypt.hashpw(b"timing-equalizer", bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode(
    "utf-8"
)


class InsecureConfigurationError(RuntimeError):
    """Raised at startup when a production deployment is missing its signing secret."""


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash; a missing or malformed hash is a mismatch."""
    if not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def burn_password_check(plain_password: str) -> None:
    """Spend one bcrypt comparison on a throwaway hash (unknown-user login path)."""
    verify_password(plain_password, _DUMMY_HASH)


def resolve_signing_secret(config: Settings) -> str:
    """
    Return the JWT signing secret for this configuration.

    prod without JWT_SECRET raises InsecureConfigurationError; dev/test fall back
    to a fixed secret and log a security warning.
    """
    if config.JWT_SECRET is not None:
        return config.JWT_SECRET.get_secret_value()
    if config.APP_ENV == "prod":
        raise InsecureConfigurationError(
            "JWT_SECRET must be set when APP_ENV=prod; refusing to start."
        )
    logger.warning(
        "JWT_SECRET is not set; using an insecure fallback signing secret. "
        "This configuration is unsafe for production.",
        extra={"app_env": config.APP_ENV, "security_misconfiguration": "jwt_secret_missing"},
    )
    return INSECURE_FALLBACK_SECRET


@lru_cache
def get_signing_secret() -> str:
    """Process-wide signing secret, resolved once."""
    return resolve_signing_secret(get_settings())


def create_access_token(user: "User", expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token carrying id, role and name, valid for JWT_EXPIRE_MINUTES."""
    config = get_settings()
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "id": user.id,
        "role": user.role,
        "name": user.name,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, get_signing_secret(), algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT; return its claims (id, role, name, iat, exp).

    Raises ExpiredToken, InvalidToken (bad signature or claims) or MalformedToken.
    """
    config = get_settings()
    try:
        payload = jwt.decode(
            token,
            get_signing_secret(),
            algorithms=[config.JWT_ALGORITHM],
            options={"require": list(REQUIRED_CLAIMS)},
        )
    except jwt.ExpiredSignatureError as e:
        raise ExpiredToken("Token has expired") from e
    except jwt.InvalidSignatureError as e:
        raise InvalidToken("Token signature mismatch") from e
    except jwt.MissingRequiredClaimError as e:
        raise MalformedToken(f"Token is missing claim '{e.claim}'") from e
    except jwt.DecodeError as e:
        raise MalformedToken("Token could not be decoded") from e
    except jwt.PyJWTError as e:
        raise InvalidToken("Token is invalid") from e

    if not isinstance(payload.get("id"), int) or not isinstance(payload.get("role"), str):
        raise MalformedToken("Token claims have unexpected types")
    return payload
