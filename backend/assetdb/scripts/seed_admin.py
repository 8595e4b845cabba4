"""
Create (or re-enable) the first ADMIN account.

Usage (from backend/):
    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=... python -m assetdb.scripts.seed_admin
"""

import os
import sys

from sqlalchemy.orm import Session

from assetdb.database import SessionLocal
from assetdb.security import get_password_hash
from assetdb.apps.accounts import services as account_services
from assetdb.apps.accounts.models import AccountRole, User
from assetdb.apps.accounts.schemas import UserCreate

EMAIL = os.getenv("ADMIN_EMAIL", "")
PASSWORD = os.getenv("ADMIN_PASSWORD", "")
FULL_NAME = os.getenv("ADMIN_FULL_NAME", "System Administrator")


def ensure_admin(db: Session) -> User:
    existing = account_services.get_user_by_email(db, EMAIL)
    if existing:
        existing.role = AccountRole.ADMIN
        existing.is_active = True
        existing.is_superuser = True
        existing.hashed_password = get_password_hash(PASSWORD)
        db.add(existing)
        db.commit()
        db.refresh(existing)
        return existing

    user = account_services.create_user(
        db,
        payload=UserCreate(
            email=EMAIL,
            full_name=FULL_NAME,
            password=PASSWORD,
            role=AccountRole.ADMIN,
            is_superuser=True,
        ),
    )
    db.commit()
    db.refresh(user)
    return user


def main() -> int:
    if not EMAIL or not PASSWORD:
        print("ADMIN_EMAIL and ADMIN_PASSWORD must be set.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = ensure_admin(db)
        print("OK:", user.email, "role =", user.role.value, "superuser =", user.is_superuser)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
