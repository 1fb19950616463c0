"""Tests for AvailabilityService against an in-memory database."""
from datetime import datetime, time, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.exceptions import NotFoundError, ServiceNotFoundError, ValidationError
from app.models import Booking, BOOKING_ACTIVE, BOOKING_CANCELLED, Service
from app.services.availability.availability_service import AvailabilityService
from app.services.scheduling.intervals import TimeRange
from tests.conftest import DAY, NOW


def add_booking(db, service, at, duration=60, status=BOOKING_ACTIVE, day=DAY):
    booking = Booking(
        service_id=service.id,
        date=day,
        time=at,
        duration_minutes=duration,
        client_name="Existing Client",
        client_email="existing@example.com",
        client_phone="0500000000",
        token=uuid4().hex,
        status=status,
    )
    db.add(booking)
    db.commit()
    return booking


class TestOpenHours:
    def test_set_then_get_round_trips(self, db):
        AvailabilityService.set_open_hours(db, DAY, ("09:00", "17:00"))
        assert AvailabilityService.get_open_hours(db, DAY) == [TimeRange.parse("09:00", "17:00")]

    def test_set_replaces_previous_window(self, db):
        AvailabilityService.set_open_hours(db, DAY, ("09:00", "17:00"))
        AvailabilityService.set_open_hours(db, DAY, ("10:00", "14:00"))
        assert AvailabilityService.get_open_hours(db, DAY) == [TimeRange.parse("10:00", "14:00")]

    def test_bulk_applies_to_every_day(self, db):
        days = [DAY, DAY + timedelta(days=1), DAY + timedelta(days=2)]
        rows = AvailabilityService.set_open_hours_bulk(db, days, ("09:00", "12:00"))
        assert len(rows) == 3
        for day in days:
            assert AvailabilityService.get_open_hours(db, day) == [TimeRange.parse("09:00", "12:00")]

    def test_rejects_inverted_window(self, db):
        with pytest.raises(ValidationError):
            AvailabilityService.set_open_hours(db, DAY, ("12:00", "09:00"))
        assert AvailabilityService.get_open_hours(db, DAY) == []

    def test_clear_closes_the_day(self, db, manicure):
        AvailabilityService.set_open_hours(db, DAY, ("09:00", "12:00"))
        assert AvailabilityService.clear_open_hours(db, DAY) == 1
        assert AvailabilityService.get_available_times(db, DAY, manicure.id, now=NOW) == []


class TestBlocks:
    def test_block_removes_slots(self, db, manicure, open_day):
        AvailabilityService.add_block(db, DAY, ("10:00", "11:00"), reason="Lunch")
        assert AvailabilityService.get_available_times(db, DAY, manicure.id, now=NOW) == ["09:00", "11:00"]

    def test_unblock_restores_slots(self, db, manicure, open_day):
        block = AvailabilityService.add_block(db, DAY, ("09:00", "12:00"))
        assert AvailabilityService.get_available_times(db, DAY, manicure.id, now=NOW) == []

        AvailabilityService.remove_block(db, block.id)
        assert AvailabilityService.get_available_times(db, DAY, manicure.id, now=NOW) == ["09:00", "09:30", "10:00", "10:30", "11:00"]

    def test_remove_unknown_block(self, db):
        with pytest.raises(NotFoundError):
            AvailabilityService.remove_block(db, uuid4())

    def test_day_state(self, db, open_day):
        AvailabilityService.add_block(db, DAY, ("10:00", "10:30"), reason="Break")
        state = AvailabilityService.get_day_state(db, DAY)
        assert state["day"] == "2099-03-02"
        assert state["availableSlots"] == [{"start_time": "09:00", "end_time": "12:00"}]
        assert state["blockedSlots"][0]["start_time"] == "10:00"
        assert state["blockedSlots"][0]["reason"] == "Break"
        assert state["blockedSlots"][0]["source"] == "admin"


class TestAvailableTimes:
    def test_no_open_hours_means_no_slots(self, db, manicure):
        assert AvailabilityService.get_available_times(db, DAY, manicure.id, now=NOW) == []

    def test_active_booking_blocks_its_range(self, db, manicure, open_day):
        add_booking(db, manicure, time(10, 0))
        assert AvailabilityService.get_available_times(db, DAY, manicure.id, now=NOW) == ["09:00", "11:00"]

    def test_cancelled_booking_is_ignored(self, db, manicure, open_day):
        add_booking(db, manicure, time(10, 0), status=BOOKING_CANCELLED)
        assert "10:00" in AvailabilityService.get_available_times(db, DAY, manicure.id, now=NOW)

    def test_addons_extend_duration(self, db, manicure, nail_art, open_day):
        times = AvailabilityService.get_available_times(db, DAY, manicure.id, [nail_art.id], now=NOW)
        assert times == ["09:00", "09:30", "10:00", "10:30"]

    def test_zero_minute_addon_keeps_slots(self, db, manicure, open_day):
        oil = Service(name="Cuticle Oil", price=Decimal("5"), duration=0, is_addon=True)
        db.add(oil)
        db.commit()

        with_addon = AvailabilityService.get_available_times(db, DAY, manicure.id, [oil.id], now=NOW)
        assert with_addon == AvailabilityService.get_available_times(db, DAY, manicure.id, now=NOW)
        assert with_addon[-1] == "11:00"

    def test_unknown_service(self, db, open_day):
        with pytest.raises(ServiceNotFoundError):
            AvailabilityService.get_available_times(db, DAY, uuid4(), now=NOW)

    def test_addon_is_not_bookable_alone(self, db, nail_art, open_day):
        with pytest.raises(ServiceNotFoundError):
            AvailabilityService.get_available_times(db, DAY, nail_art.id, now=NOW)

    def test_main_service_is_not_an_addon(self, db, manicure, open_day):
        with pytest.raises(ValidationError):
            AvailabilityService.get_available_times(db, DAY, manicure.id, [manicure.id], now=NOW)

    def test_unknown_addon(self, db, manicure, open_day):
        with pytest.raises(NotFoundError):
            AvailabilityService.get_available_times(db, DAY, manicure.id, [uuid4()], now=NOW)

    def test_same_day_lead(self, db, manicure, open_day):
        now = datetime.combine(DAY, time(9, 5))
        assert AvailabilityService.get_available_times(db, DAY, manicure.id, now=now) == ["10:00", "10:30", "11:00"]


class TestAvailableDates:
    def test_without_service_lists_open_days(self, db):
        AvailabilityService.set_open_hours_bulk(db, [DAY, DAY + timedelta(days=2)], ("09:00", "12:00"))
        dates = AvailabilityService.list_available_dates(db, from_date=DAY, to_date=DAY + timedelta(days=6), now=NOW)
        assert dates == ["2099-03-02", "2099-03-04"]

    def test_with_service_skips_full_days(self, db, manicure):
        AvailabilityService.set_open_hours_bulk(db, [DAY, DAY + timedelta(days=1)], ("09:00", "10:00"))
        add_booking(db, manicure, time(9, 0))
        dates = AvailabilityService.list_available_dates(
            db, manicure.id, from_date=DAY, to_date=DAY + timedelta(days=6), now=NOW
        )
        assert dates == ["2099-03-03"]

    def test_default_window_starts_today(self, db):
        AvailabilityService.set_open_hours_bulk(
            db, [NOW.date(), NOW.date() + timedelta(days=13), NOW.date() + timedelta(days=14)], ("09:00", "12:00")
        )
        dates = AvailabilityService.list_available_dates(db, now=NOW)
        assert dates == ["2099-03-01", "2099-03-14"]

    def test_inverted_range(self, db):
        with pytest.raises(ValidationError):
            AvailabilityService.list_available_dates(db, from_date=DAY, to_date=DAY - timedelta(days=1), now=NOW)

    def test_range_too_long(self, db):
        with pytest.raises(ValidationError):
            AvailabilityService.list_available_dates(db, from_date=DAY, to_date=DAY + timedelta(days=200), now=NOW)
