# backend/assetdb/alembic/env.py

from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from alembic import context

# ---------------------------------------------------------------------------
# PYTHONPATH SETUP
# ---------------------------------------------------------------------------
# __file__  = backend/assetdb/alembic/env.py
# BASE_DIR  = backend/
# package   = assetdb
# ---------------------------------------------------------------------------

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _is_placeholder_url(url: str) -> bool:
    u = (url or "").strip()
    return not u or u.startswith("driver://")


def _resolve_url() -> str:
    """
    Prefer DATABASE_WRITE_URL / DATABASE_URL like the application does;
    fall back to sqlalchemy.url from alembic.ini when it is a real URL.
    """
    url = (os.getenv("DATABASE_WRITE_URL") or os.getenv("DATABASE_URL") or "").strip()
    if not url:
        url = (config.get_main_option("sqlalchemy.url") or "").strip()
        if _is_placeholder_url(url):
            raise RuntimeError(
                "No database URL found.\n"
                "Set DATABASE_WRITE_URL / DATABASE_URL or sqlalchemy.url in alembic.ini."
            )
        # database.py reads the URL from env at import time.
        os.environ["DATABASE_WRITE_URL"] = url
    config.set_main_option("sqlalchemy.url", url)
    return url


DATABASE_URL = _resolve_url()

# Import AFTER the URL is settled; the package import registers every table.
import assetdb  # noqa: F401, E402
from assetdb.database import Base, write_engine  # noqa: E402

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Render SQL without connecting to the database."""
    context.configure(
        url=DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run against the same write_engine as the application."""
    with write_engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
