"""
Pytest configuration and fixtures for all tests.

Tests run against an in-memory SQLite database seeded with two
organizations, three sites and one profile per role.
"""

import os
import sys
import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure markup_backend is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from markup_backend.database import get_db
from markup_backend.model import Base, MarkupDocument, Organization, Profile, Site, User
from markup_backend.permissions.auth import AuthenticationResult, PrincipalBuilder, get_current_permissions
from markup_backend.permissions.principal import Principal
from markup_backend.server import app

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

# (user id, role, status, organization, site)
PROFILES = [
    ("worker-1", "worker", "active", "org-1", "site-1"),
    ("worker-2", "worker", "active", "org-1", "site-1"),
    ("worker-3", "site_manager", "active", "org-1", "site-1"),
    ("worker-4", "customer_manager", "active", "org-1", "site-2"),
    ("worker-nosite", "worker", "active", "org-1", None),
    ("worker-inactive", "worker", "inactive", "org-1", "site-1"),
    ("admin-1", "admin", "active", "org-1", None),
    ("admin-2", "admin", "active", "org-2", None),
    ("sysadmin", "system_admin", "active", None, None),
]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(session):
    """Organizations, sites, users and profiles shared by all scenarios."""
    session.add_all([
        Organization(id="org-1", name="Builder One"),
        Organization(id="org-2", name="Builder Two"),
    ])
    session.add_all([
        Site(id="site-1", organization_id="org-1", name="North Tower"),
        Site(id="site-2", organization_id="org-1", name="South Tower"),
        Site(id="site-3", organization_id="org-2", name="Harbour"),
    ])
    for user_id, role, status, organization_id, site_id in PROFILES:
        session.add(User(id=user_id, email=f"{user_id}@example.com", username=user_id))
        session.add(Profile(
            id=user_id,
            email=f"{user_id}@example.com",
            full_name=user_id.replace("-", " ").title(),
            role=role,
            status=status,
            organization_id=organization_id,
            site_id=site_id,
        ))
    # Authenticated user without a profile row
    session.add(User(id="no-profile", email="no-profile@example.com", username="no-profile"))
    session.commit()
    return session


def principal_for(session, user_id: str) -> Principal:
    return PrincipalBuilder.build(AuthenticationResult(user_id, f"{user_id}@example.com"), session)


_counter = {"value": 0}


def make_document(session, created_by: str, location: str = "personal", site_id=None,
                  title: str = None, is_deleted: bool = False, minutes: int = None, **kwargs) -> MarkupDocument:
    """Insert a document directly, bypassing the API."""
    _counter["value"] += 1
    offset = minutes if minutes is not None else _counter["value"]
    document = MarkupDocument(
        title=title or f"Document {_counter['value']}",
        original_blueprint_url="https://files.example.com/blueprint.pdf",
        original_blueprint_filename="blueprint.pdf",
        markup_data=kwargs.pop("markup_data", []),
        location=location,
        created_by=created_by,
        site_id=site_id,
        is_deleted=is_deleted,
        created_at=BASE_TIME + timedelta(minutes=offset),
        updated_at=BASE_TIME + timedelta(minutes=offset),
        **kwargs,
    )
    session.add(document)
    session.commit()
    return document


@pytest.fixture
def documents(seeded):
    """A fixed set of documents covering every visibility case."""
    return {
        "personal-w1": make_document(seeded, "worker-1", "personal", "site-1", title="W1 personal"),
        "personal-w2": make_document(seeded, "worker-2", "personal", "site-1", title="W2 personal"),
        "shared-site1": make_document(seeded, "worker-1", "shared", "site-1", title="Site 1 shared"),
        "shared-site2": make_document(seeded, "worker-4", "shared", "site-2", title="Site 2 shared"),
        "shared-site3": make_document(seeded, "sysadmin", "shared", "site-3", title="Harbour shared"),
        "unassigned": make_document(seeded, "worker-nosite", "personal", None, title="Unassigned legacy"),
        "deleted-w1": make_document(seeded, "worker-1", "personal", "site-1", title="W1 deleted", is_deleted=True),
    }


@pytest.fixture
def client_for(seeded):
    """Return a factory creating a TestClient authenticated as a given user id."""

    def override_get_db():
        yield seeded

    def _client(user_id: str | None) -> TestClient:
        app.dependency_overrides[get_db] = override_get_db

        if user_id is None:
            app.dependency_overrides.pop(get_current_permissions, None)
        else:
            principal = principal_for(seeded, user_id)
            app.dependency_overrides[get_current_permissions] = lambda: principal

        return TestClient(app)

    yield _client

    app.dependency_overrides.clear()
