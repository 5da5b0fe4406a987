"""
Create a user out-of-band (the only way to create an admin). Run from project root:
  python -m app.scripts.create_user NAME EMAIL PASSWORD [role] [--state STATE] [--active]
Example:
  python -m app.scripts.create_user "Site Admin" admin@example.com your-secure-password admin --active
"""
import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.errors import DuplicateEmail, StoreUnavailable
from app.core.security import (
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
)
from app.models.user import Role
from app.schemas.auth import EMAIL_PATTERN, normalize_email
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=get_settings().LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    parser = argparse.ArgumentParser(description="Create a user, including admin accounts.")
    parser.add_argument("name", help=f"Display name (1-{NAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.STANDARD.value,
        choices=[r.value for r in Role],
    )
    parser.add_argument("--state", default=None, help="Account state/region")
    parser.add_argument("--active", action="store_true", help="Create the account as active")
    args = parser.parse_args(argv)

    name = args.name.strip()
    if not name or len(name) > NAME_MAX_LEN:
        print("Invalid name length.", file=sys.stderr)
        return 1
    email = normalize_email(args.email)
    if not EMAIL_PATTERN.match(email):
        print("Invalid email address.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        users = CredentialStore(db)
        try:
            users.create(
                {
                    "name": name,
                    "email": email,
                    "password_hash": hash_password(args.password),
                    "role": args.role,
                    "state": args.state,
                    "active": args.active,
                }
            )
            db.commit()
        except DuplicateEmail:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        except StoreUnavailable as e:
            print(e.message, file=sys.stderr)
            return 1
        logger.info("User created out-of-band", extra={"role": args.role})
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
