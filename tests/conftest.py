# tests/conftest.py
import os
import tempfile
from datetime import datetime
from itertools import count

import pytest

# settings are read at import time
os.environ.setdefault("EVENTS_ENABLED", "0")
os.environ.setdefault("RATE_LIMIT_PUBLIC", "0")
os.environ.setdefault("RATE_LIMIT_AUTHENTICATED", "0")

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from office_booking.config import settings
from office_booking.database import get_db, init_db, make_engine
from office_booking.main import app
from office_booking.models import Bookings, BookingStatus, OfficeAvailability, Offices, UserRole, Users
from office_booking.security import create_access_token, hash_password
from office_booking.services import events as events_module
from office_booking.services.authorization import Caller

DAY = datetime(2030, 1, 7)
_seq = count(1)


def at(hour: int, minute: int = 0, day: datetime = DAY) -> datetime:
    return day.replace(hour=hour, minute=minute)


@pytest.fixture(scope="function")
def engine():
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()

    engine = make_engine(f"sqlite:///{tmp.name}")
    init_db(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()
        os.unlink(tmp.name)


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


class RecordingRedis:
    """Captures rpush calls of the event emitter."""

    def __init__(self):
        self.pushed = []

    def rpush(self, key, value):
        self.pushed.append((key, value))
        return len(self.pushed)


@pytest.fixture
def events(monkeypatch):
    recorder = RecordingRedis()
    monkeypatch.setattr(events_module, "redis_client", recorder)
    monkeypatch.setattr(settings, "events_enabled", True)
    return recorder


# —— Factories ——

@pytest.fixture
def make_user(db):
    def _make_user(role=UserRole.VISITOR, email=None, name="User", password="secret123", is_active=True):
        n = next(_seq)
        user = Users(
            name=f"{name} {n}",
            email=email or f"user{n}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user
    return _make_user


@pytest.fixture
def make_office(db):
    def _make_office(number=None, company_name="Acme", owners=(), is_active=True):
        office = Offices(
            number=number or f"{100 + next(_seq)}",
            company_name=company_name,
            is_active=is_active,
            owners=list(owners),
        )
        db.add(office)
        db.commit()
        return office
    return _make_office


@pytest.fixture
def make_window(db):
    def _make_window(office, start=None, end=None):
        window = OfficeAvailability(
            office_id=office.id,
            available_from=start or at(9),
            available_to=end or at(17),
        )
        db.add(window)
        db.commit()
        return window
    return _make_window


@pytest.fixture
def make_booking(db):
    def _make_booking(office, start=None, end=None, status=BookingStatus.REQUESTED,
                      visitor_email="guest@example.com", visitor_name="Guest"):
        booking = Bookings(
            office_id=office.id,
            start_at=start or at(10),
            end_at=end or at(11),
            status=status,
            visitor_name=visitor_name,
            visitor_email=visitor_email,
        )
        db.add(booking)
        db.commit()
        return booking
    return _make_booking


@pytest.fixture
def caller_for():
    def _caller_for(user):
        return Caller(identity=user.id, role=user.role, email=user.email)
    return _caller_for


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token(user.id, user.role.value, user.email)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
