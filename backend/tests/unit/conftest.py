# backend/tests/unit/conftest.py
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bizworx import models
from bizworx.auth import get_password_hash
from bizworx.db import Base, get_db
from bizworx.enums import UserRole
from bizworx.main import app
from bizworx.services.auth_service import AuthService
from bizworx.services.storage import TenantStorage


@pytest.fixture
def engine():
    """A fresh in-memory DB per test, shared across threads (TestClient) via StaticPool."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enforce FKs in SQLite (off by default otherwise)
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def _override_get_db(request):
    if "db_session" not in request.fixturenames:
        yield
        return
    db_session = request.getfixturevalue("db_session")

    def _get_db():
        yield db_session
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(db_session):
    return TestClient(app)


def create_business(db_session, name="Sparkle Cleaning", email="owner@sparkle.test", password="supersecret1"):
    business = models.Business(name=name, email=email, password_hash=get_password_hash(password))
    db_session.add(business)
    db_session.commit()
    db_session.refresh(business)
    return business


def create_member(db_session, business, username="jdoe", pin="1234", role=UserRole.MEMBER, **fields):
    user = models.User(
        business_id=business.id,
        username=username,
        pin_hash=get_password_hash(pin),
        role=role,
        first_name=fields.pop("first_name", "Jane"),
        last_name=fields.pop("last_name", "Doe"),
        is_active=fields.pop("is_active", True),
        **fields,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def business(db_session):
    return create_business(db_session)


@pytest.fixture
def other_business(db_session):
    """A second tenant for isolation tests"""
    return create_business(db_session, name="Other Plumbing", email="owner@other.test")


@pytest.fixture
def auth_headers(business):
    token = AuthService.create_access_token_for(business)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(other_business):
    token = AuthService.create_access_token_for(other_business)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def team_member(db_session, business):
    return create_member(db_session, business)


@pytest.fixture
def member_headers(business, team_member):
    token = AuthService.create_access_token_for(business, team_member)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def storage(db_session, business):
    return TenantStorage(db_session, business.id)


@pytest.fixture
def other_storage(db_session, other_business):
    return TenantStorage(db_session, other_business.id)


@pytest.fixture
def customer(db_session, business):
    """A client row of the main test business"""
    row = models.Client(business_id=business.id, name="Acme Homes", email="billing@acme.test")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture
def other_customer(db_session, other_business):
    row = models.Client(business_id=other_business.id, name="Other Customer")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


SAMPLE_LINE_ITEMS = [
    {"description": "Deep clean", "quantity": "2", "rate": "50.00"},
    {"description": "Window wash", "quantity": "1", "rate": "50.00"},
]


@pytest.fixture
def line_items():
    """Line items with a 150.00 subtotal"""
    return [dict(item) for item in SAMPLE_LINE_ITEMS]


def money(value) -> Decimal:
    return Decimal(str(value))


@pytest.fixture
def make_business(db_session):
    def _make(**kwargs):
        return create_business(db_session, **kwargs)
    return _make


@pytest.fixture
def make_member(db_session, business):
    def _make(**kwargs):
        return create_member(db_session, business, **kwargs)
    return _make
