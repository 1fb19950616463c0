"""Tests for CalendarSyncService reconciliation."""
from datetime import datetime, time, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from app.core.exceptions import ValidationError
from app.models import BlockedTime, Booking, Service
from app.schemas.booking import BookingCreate
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.booking_service import BookingService
from app.services.calendar.calendar_bridge import BusyPeriod, NullCalendarBridge
from app.services.calendar.calendar_sync_service import CalendarSyncService, clip_busy_period
from tests.conftest import DAY, NOW, booking_payload


def create(db, bridge, service, at):
    return BookingService.create_booking(db, BookingCreate(**booking_payload(service, time=at)), bridge, now=NOW)


class TestSyncRange:
    def test_pushes_unsynced_bookings(self, db, bridge, manicure, open_day):
        bridge.fail_push = True
        booking = create(db, bridge, manicure, "09:00")
        assert booking.sync_status == "failed"

        bridge.fail_push = False
        summary = CalendarSyncService(bridge).sync_range(db, DAY, DAY)

        assert summary["pushed"] == 1
        assert summary["failed"] == 0
        assert booking.external_event_id == "evt-1"
        assert booking.sync_status == "synced"

    def test_running_twice_creates_no_duplicates(self, db, bridge, manicure, open_day):
        bridge.fail_push = True
        create(db, bridge, manicure, "09:00")
        create(db, bridge, manicure, "11:00")
        bridge.fail_push = False

        sync = CalendarSyncService(bridge)
        first = sync.sync_range(db, DAY, DAY)
        second = sync.sync_range(db, DAY, DAY)

        assert first["pushed"] == 2
        assert second["pushed"] == 0
        event_ids = [b.external_event_id for b in db.query(Booking).all()]
        assert len(set(event_ids)) == 2
        assert len(bridge.events) == 2

    def test_removes_events_of_cancelled_bookings(self, db, bridge, manicure, open_day):
        booking = create(db, bridge, manicure, "09:00")
        bridge.fail_remove = True
        BookingService.cancel_booking(db, booking.id, bridge)
        assert booking.external_event_id == "evt-1"

        bridge.fail_remove = False
        summary = CalendarSyncService(bridge).sync_range(db, DAY, DAY)

        assert summary["removed"] == 1
        assert booking.external_event_id is None
        assert bridge.events == {}

    def test_pulls_busy_time_as_blocks(self, db, bridge, manicure, open_day):
        bridge.busy = [BusyPeriod(datetime.combine(DAY, time(10, 0)), datetime.combine(DAY, time(11, 0)), "Dentist")]

        summary = CalendarSyncService(bridge).sync_range(db, DAY, DAY)

        assert summary["blocks"] == 1
        block = db.query(BlockedTime).one()
        assert block.source == "calendar"
        assert block.reason == "Dentist"
        assert AvailabilityService.get_available_times(db, DAY, manicure.id, now=NOW) == ["09:00", "11:00"]

    def test_busy_blocks_are_replaced_not_added(self, db, bridge, open_day):
        AvailabilityService.add_block(db, DAY, ("09:00", "09:30"), reason="Admin block")
        bridge.busy = [BusyPeriod(datetime.combine(DAY, time(10, 0)), datetime.combine(DAY, time(11, 0)))]
        sync = CalendarSyncService(bridge)
        sync.sync_range(db, DAY, DAY)

        bridge.busy = []
        sync.sync_range(db, DAY, DAY)

        blocks = db.query(BlockedTime).all()
        assert [b.source for b in blocks] == ["admin"]

    def test_pull_failure_is_reported(self, db, bridge, open_day):
        bridge.fail_list = True
        summary = CalendarSyncService(bridge).sync_range(db, DAY, DAY)
        assert summary["blocks"] is None
        assert summary["failed"] == 1

    def test_unexpected_pull_error_is_reported(self, db, bridge, open_day):
        with patch.object(bridge, "list_busy", side_effect=RuntimeError("bad payload")):
            summary = CalendarSyncService(bridge).sync_range(db, DAY, DAY)
        assert summary["blocks"] is None
        assert summary["failed"] == 1

    def test_unexpected_push_error_is_recorded(self, db, bridge, manicure, open_day):
        with patch.object(bridge, "push_event", side_effect=RuntimeError("bad payload")):
            booking = create(db, bridge, manicure, "09:00")
            summary = CalendarSyncService(bridge).sync_range(db, DAY, DAY)

        assert summary["failed"] == 1
        assert booking.sync_status == "failed"
        assert booking.sync_attempts == 2
        assert booking.last_sync_error == "bad payload"

    def test_unexpected_remove_error_is_recorded(self, db, bridge, manicure, open_day):
        booking = create(db, bridge, manicure, "09:00")
        with patch.object(bridge, "remove_event", side_effect=RuntimeError("bad payload")):
            BookingService.cancel_booking(db, booking.id, bridge)

        assert booking.sync_status == "failed"
        assert booking.external_event_id == "evt-1"

    def test_busy_until_midnight_blocks_late_slots(self, db, bridge):
        quick = Service(name="Polish Change", price=Decimal("40"), duration=15)
        db.add(quick)
        db.commit()
        AvailabilityService.set_open_hours(db, DAY, ("22:00", "23:59"))
        assert "23:30" in AvailabilityService.get_available_times(db, DAY, quick.id, now=NOW)

        bridge.busy = [BusyPeriod(datetime.combine(DAY, time(22, 0)), datetime.combine(DAY + timedelta(days=1), time.min))]
        CalendarSyncService(bridge).sync_range(db, DAY, DAY)

        assert AvailabilityService.get_available_times(db, DAY, quick.id, now=NOW) == []

    def test_disabled_bridge(self, db, open_day):
        summary = CalendarSyncService(NullCalendarBridge()).sync_range(db, DAY, DAY)
        assert summary["enabled"] is False
        assert summary["pushed"] == 0

    def test_invalid_range(self, db, bridge):
        with pytest.raises(ValidationError):
            CalendarSyncService(bridge).sync_range(db, DAY, DAY - timedelta(days=1))


class TestClipBusyPeriod:
    def test_multi_day_event_is_split(self):
        period = BusyPeriod(datetime.combine(DAY, time(22, 0)), datetime.combine(DAY + timedelta(days=1), time(2, 0)))
        assert clip_busy_period(period, DAY, DAY + timedelta(days=1)) == [
            (DAY, 22 * 60, 24 * 60 - 1),
            (DAY + timedelta(days=1), 0, 120),
        ]

    def test_outside_range_is_dropped(self):
        period = BusyPeriod(datetime.combine(DAY, time(9, 0)), datetime.combine(DAY, time(10, 0)))
        assert clip_busy_period(period, DAY + timedelta(days=1), DAY + timedelta(days=2)) == []

    def test_all_day_event(self):
        period = BusyPeriod(datetime.combine(DAY, time.min), datetime.combine(DAY + timedelta(days=1), time.min))
        assert clip_busy_period(period, DAY, DAY + timedelta(days=5)) == [(DAY, 0, 24 * 60 - 1)]
