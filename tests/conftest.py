"""
conftest.py — Shared Test Fixtures for Compagnon

Provides an in-memory SQLite database, a FastAPI TestClient with the
auth dependency overridden, and factories for profiles and tenders.

Business Rules:
- All tests run against an isolated in-memory DB
- Auth is overridden so tests don't need a session cookie
- Dashboard sessions are process-local and reset between tests

Called by: all test files via pytest autodiscovery
Depends on: compagnon.models (Base), compagnon.database (get_db), compagnon.dependencies
"""

import os
os.environ["TESTING"] = "1"  # Must be set before importing compagnon modules

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from compagnon.models import Base, UserProfile
from compagnon.models.profiles import SCOPE_FRANCE, SUB_ACTIVE
from compagnon.schemas.tenders import Tender
from compagnon.services import dashboard_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _enable_fk(dbapi_conn, _):
    """SQLite ignores FKs by default — turn them on."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _reset_dashboards():
    dashboard_service.reset_sessions()
    yield
    dashboard_service.reset_sessions()


@pytest.fixture()
def test_profile(db_session: Session) -> UserProfile:
    """An active BTP firm working nationwide."""
    profile = UserProfile(
        id="user-001",
        company_name="Rénov Atlantique",
        specialization="rénovation énergétique",
        negative_keywords="nettoyage, gardiennage",
        scope=SCOPE_FRANCE,
        target_departments="",
        subscription_status=SUB_ACTIVE,
        created_at=datetime.now(timezone.utc),
    )
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture()
def make_tender():
    """Factory: make_tender("t-1", compatibility_score=80) → Tender."""

    def _make(tender_id: str, **overrides) -> Tender:
        data = {
            "id": tender_id,
            "id_web": tender_id,
            "title": f"Travaux {tender_id}",
            "buyer": "Commune de Test",
            "deadline": "2099-01-01",
            "compatibility_score": 50,
        }
        data.update(overrides)
        return Tender(**data)

    return _make


@pytest.fixture()
def client(db_session: Session, test_profile: UserProfile) -> TestClient:
    """FastAPI TestClient with auth overridden to return test_profile."""
    from compagnon.database import get_db
    from compagnon.dependencies import require_user
    from compagnon.main import app

    def _override_db():
        yield db_session

    def _override_user():
        return test_profile

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[require_user] = _override_user

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def anon_client(db_session: Session) -> TestClient:
    """TestClient with only the DB overridden — real session auth."""
    from compagnon.database import get_db
    from compagnon.main import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
