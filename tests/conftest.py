"""Shared fixtures: in-memory SQLite, a fake external calendar and a TestClient."""
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies import get_current_admin
from app.config.database import get_db
from app.core.exceptions import ExternalSyncError
from app.main import create_app
from app.models import AdminUser, Base, Service
from app.services.availability.availability_service import AvailabilityService
from app.services.calendar.calendar_bridge import CalendarBridge, get_calendar_bridge
from app.tasks import calendar_tasks

# Far enough ahead that the real clock never reaches it
DAY = date(2099, 3, 2)
NOW = datetime(2099, 3, 1, 8, 0)


class FakeCalendarBridge(CalendarBridge):
    """In-memory external calendar with switchable failures"""

    def __init__(self):
        self.events = {}
        self.busy = []
        self.fail_push = False
        self.fail_remove = False
        self.fail_list = False
        self._next_id = 0

    def push_event(self, booking) -> str:
        if self.fail_push:
            raise ExternalSyncError("calendar unavailable")
        self._next_id += 1
        event_id = f"evt-{self._next_id}"
        self.events[event_id] = booking.id
        return event_id

    def remove_event(self, event_id: str) -> None:
        if self.fail_remove:
            raise ExternalSyncError("calendar unavailable")
        self.events.pop(event_id, None)

    def list_busy(self, start_date, end_date):
        if self.fail_list:
            raise ExternalSyncError("calendar unavailable")
        return list(self.busy)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def bridge():
    return FakeCalendarBridge()


@pytest.fixture(autouse=True)
def queued_retries():
    """Keep calendar retries off the broker; yields the mocked .delay"""
    with patch.object(calendar_tasks.sync_booking_to_calendar, "delay") as delay:
        yield delay


@pytest.fixture
def admin(db):
    user = AdminUser(username="owner", is_active=True)
    user.set_password("correct-horse")
    db.add(user)
    db.commit()
    return user


def _build_client(db, bridge, admin=None):
    app = create_app()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_calendar_bridge] = lambda: bridge
    if admin is not None:
        app.dependency_overrides[get_current_admin] = lambda: admin
    return TestClient(app)


@pytest.fixture
def client(db, bridge, admin):
    """Client with admin routes unlocked"""
    return _build_client(db, bridge, admin)


@pytest.fixture
def public_client(db, bridge):
    """Client without admin credentials"""
    return _build_client(db, bridge)


@pytest.fixture
def manicure(db):
    service = Service(name="Gel Manicure", price=Decimal("120"), duration=60, display_order=1)
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def nail_art(db):
    addon = Service(name="Nail Art", price=Decimal("30"), duration=30, is_addon=True)
    db.add(addon)
    db.commit()
    return addon


@pytest.fixture
def open_day(db):
    """DAY open 09:00-12:00"""
    AvailabilityService.set_open_hours(db, DAY, ("09:00", "12:00"))
    return DAY


def booking_payload(service, time="09:00", day=DAY, **overrides):
    payload = {
        "service_id": str(service.id),
        "date": day.isoformat(),
        "time": time,
        "client_name": "Dana Levi",
        "client_phone": "+972501234567",
        "client_email": "dana@example.com",
    }
    payload.update(overrides)
    return payload
