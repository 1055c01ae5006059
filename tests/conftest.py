"""Pytest configuration and fixtures."""
import os

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pulseconnect.core.security import create_access_token
from pulseconnect.database.database import Base, build_engine, get_db
from pulseconnect.main import app
from pulseconnect.models import User, Donor, BloodGroup, BloodRequest, Urgency, RequestStatus


@pytest.fixture
def engine():
    """Fresh in-memory database per test; StaticPool keeps it on one connection."""
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for a subject, as the identity provider would."""
    def _auth_headers(subject: str, **claims) -> dict:
        token = create_access_token({"sub": subject, **claims})
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def make_user(db):
    def _make_user(subject: str = "user-1", email: str = None) -> User:
        user = User(subject=subject, email=email)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_donor(db, make_user):
    counter = {"n": 0}

    def _make_donor(
        latitude: float = 0.0,
        longitude: float = 0.0,
        blood_group: BloodGroup = BloodGroup.O_POS,
        is_available: bool = True,
        credits: int = 0,
        user: User = None,
        **fields,
    ) -> Donor:
        counter["n"] += 1
        if user is None:
            user = make_user(subject=f"donor-{counter['n']}")
        donor = Donor(
            user_id=user.id,
            full_name=fields.pop("full_name", f"Donor {counter['n']}"),
            age=fields.pop("age", 30),
            blood_group=blood_group,
            weight=fields.pop("weight", 70.0),
            whatsapp_number=fields.pop("whatsapp_number", "+15550000000"),
            latitude=latitude,
            longitude=longitude,
            address=fields.pop("address", "1 Main Street"),
            is_available=is_available,
            credits=credits,
            total_donations=0,
            **fields,
        )
        db.add(donor)
        db.commit()
        db.refresh(donor)
        return donor
    return _make_donor


@pytest.fixture
def make_request(db, make_user):
    counter = {"n": 0}

    def _make_request(requester: User = None, status: RequestStatus = RequestStatus.ACTIVE, **fields) -> BloodRequest:
        counter["n"] += 1
        if requester is None:
            requester = make_user(subject=f"requester-{counter['n']}")
        blood_request = BloodRequest(
            requester_id=requester.id,
            blood_group=fields.pop("blood_group", BloodGroup.O_POS),
            urgency=fields.pop("urgency", Urgency.HIGH),
            latitude=fields.pop("latitude", 0.0),
            longitude=fields.pop("longitude", 0.0),
            address=fields.pop("address", "City Hospital"),
            contact_number=fields.pop("contact_number", "+15551112222"),
            status=status,
            radius_km=fields.pop("radius_km", 5),
            **fields,
        )
        db.add(blood_request)
        db.commit()
        db.refresh(blood_request)
        return blood_request
    return _make_request
