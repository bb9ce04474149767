"""
Create a staff user. Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD [role] [--permission NAME ...]
Example:
  python -m app.scripts.create_user reception s3cret staff --permission view_reports
"""
import argparse
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.security import PASSWORD_MAX_LEN, USERNAME_MAX_LEN, hash_password
from app.models.user import User
from app.services.permissions import build_registry


def main(argv: list[str] | None = None) -> int:
    registry = build_registry(get_settings())
    parser = argparse.ArgumentParser(description="Create a Readers Den user (no registration UI).")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password (1-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="staff", choices=sorted(registry.roles))
    parser.add_argument(
        "--permission",
        action="append",
        default=None,
        dest="permissions",
        metavar="NAME",
        help="Explicit permission granted on top of the role (repeatable).",
    )
    parser.add_argument("--full-name", default=None)
    parser.add_argument("--email", default=None)
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not args.password or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be 1-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    permissions = sorted(set(args.permissions)) if args.permissions else None
    unknown = sorted(set(permissions or []) - registry.known_permissions)
    if unknown:
        print(f"Unknown permissions: {', '.join(unknown)}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.username == username).first()
        if existing:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        user = User(
            username=username,
            password_hash=hash_password(args.password),
            role=args.role,
            full_name=args.full_name,
            email=args.email,
            permissions=permissions,
        )
        db.add(user)
        db.commit()
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
