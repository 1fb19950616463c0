# ============================================================================
# app/services/calendar/calendar_sync_service.py
# Best-effort reconciliation between the booking ledger and the external calendar
# ============================================================================
"""
Nothing in here may fail a booking. Provider errors are logged, recorded on
the booking (sync_status / last_sync_error) and picked up again by the next
sync_range run.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import ExternalSyncError, ValidationError
from app.models.availability import BlockedTime
from app.models.booking import Booking, BOOKING_ACTIVE, BOOKING_CANCELLED
from app.services.calendar.calendar_bridge import BusyPeriod, CalendarBridge
from app.services.scheduling.intervals import MINUTES_PER_DAY, minutes_from_time, time_from_minutes
import logging

logger = logging.getLogger(__name__)

CALENDAR_BLOCK_SOURCE = "calendar"
# Time columns cannot hold 24:00. Busy time up to midnight is stored as ending
# at 23:59; open hours never reach past 23:59 either (parse_time rejects 24:00),
# so the uncovered last minute can never be booked.
LAST_STORABLE_MINUTE = MINUTES_PER_DAY - 1


def clip_busy_period(period: BusyPeriod, start_date: date, end_date: date) -> List[tuple]:
    """Split a busy period into (day, start_minute, end_minute) pieces inside [start_date, end_date]"""
    pieces = []
    day = max(period.start.date(), start_date)
    last_day = min(period.end.date(), end_date)

    while day <= last_day:
        day_start = datetime.combine(day, time.min)
        day_end = day_start + timedelta(days=1)

        start = max(period.start, day_start)
        end = min(period.end, day_end)
        if end > start:
            start_minute = minutes_from_time(start.time())
            end_minute = MINUTES_PER_DAY if end == day_end else minutes_from_time(end.time())
            end_minute = min(end_minute, LAST_STORABLE_MINUTE)
            if end_minute > start_minute:
                pieces.append((day, start_minute, end_minute))
        day += timedelta(days=1)

    return pieces


class CalendarSyncService:
    """Keeps one external calendar in step with the booking ledger"""

    def __init__(self, bridge: CalendarBridge):
        self.bridge = bridge

    def push_booking(self, db: Session, booking: Booking) -> Optional[str]:
        """Create the external event for a booking. Never raises."""
        if not self.bridge.enabled:
            booking.sync_status = "sync_disabled"
            db.commit()
            return None

        if booking.external_event_id:
            return booking.external_event_id

        booking.sync_attempts = (booking.sync_attempts or 0) + 1
        try:
            event_id = self.bridge.push_event(booking)
        except ExternalSyncError as e:
            logger.error(f"Calendar push failed for booking {booking.id}: {e.message}")
            self._record_failure(db, booking, e.message)
            return None
        except Exception as e:
            logger.error(f"Unexpected calendar push error for booking {booking.id}: {e}", exc_info=True)
            self._record_failure(db, booking, str(e) or type(e).__name__)
            return None

        booking.external_event_id = event_id or None
        booking.sync_status = "synced"
        booking.last_sync_error = None
        booking.last_synced_at = datetime.now(timezone.utc)
        db.commit()

        logger.info(f"Synced booking {booking.id} to external calendar as {event_id}")
        return event_id

    def remove_booking(self, db: Session, booking: Booking) -> bool:
        """Delete the external event of a cancelled booking. Never raises."""
        if not booking.external_event_id or not self.bridge.enabled:
            return True

        booking.sync_attempts = (booking.sync_attempts or 0) + 1
        try:
            self.bridge.remove_event(booking.external_event_id)
        except ExternalSyncError as e:
            logger.error(f"Calendar delete failed for booking {booking.id}: {e.message}")
            self._record_failure(db, booking, e.message)
            return False
        except Exception as e:
            logger.error(f"Unexpected calendar delete error for booking {booking.id}: {e}", exc_info=True)
            self._record_failure(db, booking, str(e) or type(e).__name__)
            return False

        logger.info(f"Removed external event {booking.external_event_id} for booking {booking.id}")
        booking.external_event_id = None
        booking.sync_status = "removed"
        booking.last_sync_error = None
        booking.last_synced_at = datetime.now(timezone.utc)
        db.commit()
        return True

    @staticmethod
    def _record_failure(db: Session, booking: Booking, error: str):
        booking.sync_status = "failed"
        booking.last_sync_error = error[:500]
        db.commit()

    def sync_range(self, db: Session, start_date: date, end_date: date) -> Dict:
        """
        Reconcile bookings and external busy time for [start_date, end_date].

        Safe to re-run: bookings that already carry an external event id are
        not pushed again, and calendar-sourced blocks are replaced, not added.
        """
        settings = get_settings()
        if end_date < start_date:
            raise ValidationError("endDate must not be before startDate")
        if (end_date - start_date).days + 1 > settings.MAX_AVAILABILITY_RANGE_DAYS:
            raise ValidationError(f"Sync range cannot exceed {settings.MAX_AVAILABILITY_RANGE_DAYS} days")

        summary = {
            "startDate": start_date.isoformat(),
            "endDate": end_date.isoformat(),
            "enabled": self.bridge.enabled,
            "pushed": 0,
            "removed": 0,
            "failed": 0,
            "blocks": None,
        }
        if not self.bridge.enabled:
            logger.info("Calendar sync skipped: no external calendar configured")
            return summary

        unsynced = db.query(Booking).filter(
            Booking.date.between(start_date, end_date),
            Booking.status == BOOKING_ACTIVE,
            Booking.external_event_id.is_(None)
        ).order_by(Booking.date, Booking.time).all()

        for booking in unsynced:
            if self.push_booking(db, booking):
                summary["pushed"] += 1
            else:
                summary["failed"] += 1

        stale = db.query(Booking).filter(
            Booking.date.between(start_date, end_date),
            Booking.status == BOOKING_CANCELLED,
            Booking.external_event_id.isnot(None)
        ).all()

        for booking in stale:
            if self.remove_booking(db, booking):
                summary["removed"] += 1
            else:
                summary["failed"] += 1

        if settings.CALENDAR_PULL_BUSY:
            summary["blocks"] = self._pull_busy_blocks(db, start_date, end_date)
            if summary["blocks"] is None:
                summary["failed"] += 1

        logger.info(
            f"Calendar sync {start_date}..{end_date}: pushed={summary['pushed']} "
            f"removed={summary['removed']} failed={summary['failed']} blocks={summary['blocks']}"
        )
        return summary

    def _pull_busy_blocks(self, db: Session, start_date: date, end_date: date) -> Optional[int]:
        """Replace calendar-sourced blocks in the range. Returns None when the pull failed."""
        try:
            busy = self.bridge.list_busy(start_date, end_date)
        except ExternalSyncError as e:
            logger.error(f"Could not pull busy time from external calendar: {e.message}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error pulling busy time from external calendar: {e}", exc_info=True)
            return None

        db.query(BlockedTime).filter(
            BlockedTime.day.between(start_date, end_date),
            BlockedTime.source == CALENDAR_BLOCK_SOURCE
        ).delete(synchronize_session=False)

        blocks = []
        for period in busy:
            for day, start_minute, end_minute in clip_busy_period(period, start_date, end_date):
                blocks.append(BlockedTime(
                    day=day,
                    start_time=time_from_minutes(start_minute),
                    end_time=time_from_minutes(end_minute),
                    reason=period.summary or "Busy (external calendar)",
                    source=CALENDAR_BLOCK_SOURCE,
                ))

        db.add_all(blocks)
        db.commit()
        return len(blocks)
