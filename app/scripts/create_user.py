"""
Create a user (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user admin@example.com your-secure-password Admin
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.permissions import DEFAULT_ROLE, RoleName
from app.core.security import (
    EMAIL_MAX_LEN,
    EMAIL_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
    normalize_email,
)
from app.models import User, UserRole
from app.services.catalog import get_role_by_name, seed_catalog


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Create a HealthSync user without e-mail verification."
    )
    parser.add_argument("email", help=f"E-mail address ({EMAIL_MIN_LEN}-{EMAIL_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=DEFAULT_ROLE.value,
        choices=[r.value for r in RoleName],
    )
    args = parser.parse_args()

    email = normalize_email(args.email)
    if len(email) < EMAIL_MIN_LEN or len(email) > EMAIL_MAX_LEN or "@" not in email:
        print("Invalid e-mail address.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    db = SessionLocal()
    try:
        seed_catalog(db)
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        role = get_role_by_name(db, args.role)
        user = User(email=email, password_hash=hash_password(args.password))
        db.add(user)
        db.flush()
        db.add(UserRole(user_id=user.id, role_id=role.id))
        db.commit()
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
