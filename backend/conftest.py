from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
# Keep password hashing cheap in tests.
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "8192")
os.environ.setdefault("ARGON2_PARALLELISM", "1")

import assetdb  # noqa: E402,F401  registers every table on Base.metadata
from assetdb.database import Base, enable_sqlite_savepoints  # noqa: E402
from assetdb.apps.accounts import models as account_models  # noqa: E402
from assetdb.security import get_password_hash  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass-123"


def make_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def engine():
    engine = make_engine()
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def create_test_user(
    db,
    *,
    email: str,
    password: str = "secret-pass",
    role: account_models.AccountRole = account_models.AccountRole.STAFF,
    is_superuser: bool = False,
    is_active: bool = True,
) -> account_models.User:
    user = account_models.User(
        email=email,
        full_name=email.split("@")[0].title(),
        role=role,
        is_superuser=is_superuser,
        is_active=is_active,
        hashed_password=get_password_hash(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def user_factory(db_session):
    def _create(**kwargs) -> account_models.User:
        return create_test_user(db_session, **kwargs)

    return _create


@pytest.fixture()
def admin_user(db_session):
    return create_test_user(
        db_session,
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD,
        role=account_models.AccountRole.ADMIN,
    )
