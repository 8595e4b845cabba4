from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from assetdb.security import get_password_hash, verify_password

from . import models, schemas

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return (
        db.query(models.User)
        .filter(models.User.email == _normalize_email(email))
        .first()
    )


def create_user(db: Session, *, payload: schemas.UserCreate) -> models.User:
    if get_user_by_email(db, payload.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this email already exists.",
        )
    user = models.User(
        email=_normalize_email(payload.email),
        full_name=payload.full_name.strip(),
        role=payload.role,
        is_superuser=payload.is_superuser,
        is_active=True,
        hashed_password=get_password_hash(payload.password),
    )
    db.add(user)
    db.flush()
    return user


def authenticate_user(db: Session, *, email: str, password: str) -> Optional[models.User]:
    """
    Return the user when the credentials match an active account, else None.

    Successful logins stamp `last_login_at`; the caller commits.
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        logger.info("Rejected login", extra={"email": _normalize_email(email)})
        return None
    if not user.is_active:
        return None
    user.last_login_at = datetime.now(timezone.utc)
    db.add(user)
    return user
