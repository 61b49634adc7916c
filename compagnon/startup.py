"""
startup.py — Database schema sync on boot (idempotent)

Tables and indexes are defined in the ORM models and created with
Base.metadata.create_all(checkfirst=True). Alembic migrations under
alembic/ remain the path for deployed databases.

Called by: main.py lifespan
Depends on: database.py (engine), models (Base)
"""

import logging
import os

from .database import engine

log = logging.getLogger(__name__)


def run_startup_migrations() -> None:
    """Create missing tables. Safe to call on every app boot."""
    if os.environ.get("TESTING"):
        log.info("TESTING mode — skipping startup migrations")
        return

    from .models import Base

    Base.metadata.create_all(bind=engine, checkfirst=True)
    log.info("ORM schema sync complete (create_all checkfirst=True)")
