# ============================================================================
# app/services/availability/availability_service.py
# Open hours, blocked time and slot queries - no FastAPI dependencies
# ============================================================================
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import NotFoundError, ServiceNotFoundError, ValidationError
from app.models.availability import OpenHours, BlockedTime
from app.models.booking import Booking, BOOKING_ACTIVE
from app.models.service import Service
from app.services.scheduling.intervals import (
    MINUTES_PER_DAY,
    TimeRange,
    free_intervals,
    minutes_from_time,
    time_from_minutes,
)
from app.services.scheduling.slots import generate_slots, total_duration
from app.utils.clock import business_now
import logging

logger = logging.getLogger(__name__)


def _booked_range(booking: Booking) -> TimeRange:
    start = minutes_from_time(booking.time)
    return TimeRange.starting_at(start, min(booking.duration_minutes, MINUTES_PER_DAY - start))


def _to_range(row) -> TimeRange:
    return TimeRange.from_times(row.start_time, row.end_time)


def _check_range(window) -> TimeRange:
    """Accept a TimeRange or (start, end) "HH:mm" pair; reject start >= end"""
    if isinstance(window, TimeRange):
        return window
    try:
        start, end = window
        return TimeRange.parse(start, end)
    except ValueError as e:
        raise ValidationError(str(e))


class AvailabilityService:
    """Reads and writes the day-level availability model and answers slot queries"""

    # ------------------------------------------------------------------
    # Open hours
    # ------------------------------------------------------------------

    @staticmethod
    def get_open_hours(db: Session, day: date) -> List[TimeRange]:
        rows = db.query(OpenHours).filter(OpenHours.day == day).order_by(OpenHours.start_time).all()
        return [_to_range(row) for row in rows]

    @staticmethod
    def set_open_hours(db: Session, day: date, window) -> List[OpenHours]:
        """Replace the open-hours window for `day`"""
        return AvailabilityService.set_open_hours_bulk(db, [day], window)

    @staticmethod
    def set_open_hours_bulk(db: Session, days: Sequence[date], window) -> List[OpenHours]:
        """Apply the same open-hours window to several days in one transaction"""
        time_range = _check_range(window)
        if not days:
            raise ValidationError("At least one day is required")

        unique_days = sorted(set(days))
        db.query(OpenHours).filter(OpenHours.day.in_(unique_days)).delete(synchronize_session=False)

        rows = [
            OpenHours(
                day=day,
                start_time=time_from_minutes(time_range.start),
                end_time=time_from_minutes(time_range.end),
            )
            for day in unique_days
        ]
        db.add_all(rows)
        db.commit()

        logger.info(f"Set open hours {time_range} for {len(rows)} day(s): {unique_days[0]}..{unique_days[-1]}")
        return rows

    @staticmethod
    def clear_open_hours(db: Session, day: date) -> int:
        """Close a day completely. Returns the number of rows removed."""
        count = db.query(OpenHours).filter(OpenHours.day == day).delete(synchronize_session=False)
        db.commit()
        logger.info(f"Cleared {count} open-hours row(s) for {day}")
        return count

    # ------------------------------------------------------------------
    # Blocked time
    # ------------------------------------------------------------------

    @staticmethod
    def get_blocked_ranges(db: Session, day: date) -> List[BlockedTime]:
        return db.query(BlockedTime).filter(
            BlockedTime.day == day
        ).order_by(BlockedTime.start_time).all()

    @staticmethod
    def add_block(db: Session, day: date, window, reason: Optional[str] = None) -> BlockedTime:
        time_range = _check_range(window)
        block = BlockedTime(
            day=day,
            start_time=time_from_minutes(time_range.start),
            end_time=time_from_minutes(time_range.end),
            reason=reason,
            source="admin",
        )
        db.add(block)
        db.commit()
        db.refresh(block)

        logger.info(f"Blocked {day} {time_range} ({reason or 'no reason'})")
        return block

    @staticmethod
    def remove_block(db: Session, block_id: UUID) -> BlockedTime:
        block = db.query(BlockedTime).filter(BlockedTime.id == block_id).first()
        if not block:
            raise NotFoundError("Blocked time not found")

        db.delete(block)
        db.commit()

        logger.info(f"Unblocked {block.day} {block.start_time}-{block.end_time}")
        return block

    @staticmethod
    def get_day_state(db: Session, day: date) -> Dict:
        """Raw open hours and blocks for the admin availability console"""
        return {
            "day": day.isoformat(),
            "availableSlots": [r.to_dict() for r in AvailabilityService.get_open_hours(db, day)],
            "blockedSlots": [
                {
                    "id": str(b.id),
                    "start_time": b.start_time.strftime("%H:%M"),
                    "end_time": b.end_time.strftime("%H:%M"),
                    "reason": b.reason,
                    "source": b.source,
                }
                for b in AvailabilityService.get_blocked_ranges(db, day)
            ],
        }

    # ------------------------------------------------------------------
    # Slot queries
    # ------------------------------------------------------------------

    @staticmethod
    def get_bookable_service(db: Session, service_id: UUID) -> Service:
        service = db.query(Service).filter(
            Service.id == service_id,
            Service.is_active == True
        ).first()
        if not service or service.is_addon:
            raise ServiceNotFoundError(service_id)
        return service

    @staticmethod
    def get_addons(db: Session, addon_ids: Iterable[UUID]) -> List[Service]:
        addon_ids = list(dict.fromkeys(addon_ids))
        if not addon_ids:
            return []

        addons = db.query(Service).filter(
            Service.id.in_(addon_ids),
            Service.is_active == True
        ).all()
        found = {addon.id for addon in addons}
        missing = [str(a) for a in addon_ids if a not in found]
        if missing:
            raise NotFoundError(f"Add-on not found: {', '.join(missing)}")

        not_addons = [a.name for a in addons if not a.is_addon]
        if not_addons:
            raise ValidationError(f"Not an add-on service: {', '.join(not_addons)}")
        return addons

    @staticmethod
    def _load_range(db: Session, start: date, end: date, exclude_booking_id: Optional[UUID] = None):
        """Open hours, blocks and active bookings for [start, end], grouped by day"""
        open_by_day = defaultdict(list)
        for row in db.query(OpenHours).filter(OpenHours.day.between(start, end)).all():
            open_by_day[row.day].append(_to_range(row))

        blocked_by_day = defaultdict(list)
        for row in db.query(BlockedTime).filter(BlockedTime.day.between(start, end)).all():
            blocked_by_day[row.day].append(_to_range(row))

        bookings_query = db.query(Booking).filter(
            Booking.date.between(start, end),
            Booking.status == BOOKING_ACTIVE
        )
        if exclude_booking_id is not None:
            bookings_query = bookings_query.filter(Booking.id != exclude_booking_id)

        booked_by_day = defaultdict(list)
        for booking in bookings_query.all():
            booked_by_day[booking.date].append(_booked_range(booking))

        return open_by_day, blocked_by_day, booked_by_day

    @staticmethod
    def compute_slots(
            db: Session,
            day: date,
            duration_minutes: int,
            now: Optional[datetime] = None,
            exclude_booking_id: Optional[UUID] = None
    ) -> List[str]:
        """Slots for an appointment footprint of `duration_minutes` on `day`"""
        settings = get_settings()
        now = now or business_now()

        open_by_day, blocked_by_day, booked_by_day = AvailabilityService._load_range(
            db, day, day, exclude_booking_id
        )
        if not open_by_day[day]:
            return []

        return generate_slots(
            day,
            duration_minutes,
            free_intervals(open_by_day[day], blocked_by_day[day]),
            booked_by_day[day],
            now,
            step=settings.SLOT_INTERVAL_MINUTES,
            lead_minutes=settings.SAME_DAY_LEAD_MINUTES,
        )

    @staticmethod
    def get_available_times(
            db: Session,
            day: date,
            service_id: UUID,
            addon_ids: Iterable[UUID] = (),
            now: Optional[datetime] = None
    ) -> List[str]:
        """Offerable start times for a service (plus add-ons) on a day"""
        service = AvailabilityService.get_bookable_service(db, service_id)
        addons = AvailabilityService.get_addons(db, addon_ids)
        duration = total_duration(service, addons)

        times = AvailabilityService.compute_slots(db, day, duration, now)
        logger.debug(f"{len(times)} slot(s) for service {service.name} ({duration} min) on {day}")
        return times

    @staticmethod
    def list_available_dates(
            db: Session,
            service_id: Optional[UUID] = None,
            from_date: Optional[date] = None,
            to_date: Optional[date] = None,
            now: Optional[datetime] = None
    ) -> List[str]:
        """
        Days in [from_date, to_date] the booking calendar should enable.

        Without a service every day with open hours qualifies (admin view);
        with a service a day must also yield at least one slot.
        """
        settings = get_settings()
        now = now or business_now()

        from_date = from_date or now.date()
        to_date = to_date or from_date + timedelta(days=settings.AVAILABLE_DATES_WINDOW_DAYS - 1)
        if to_date < from_date:
            raise ValidationError("toDate must not be before fromDate")
        if (to_date - from_date).days + 1 > settings.MAX_AVAILABILITY_RANGE_DAYS:
            raise ValidationError(f"Date range cannot exceed {settings.MAX_AVAILABILITY_RANGE_DAYS} days")

        if service_id is None:
            days = db.query(OpenHours.day).filter(
                OpenHours.day.between(from_date, to_date)
            ).distinct().order_by(OpenHours.day).all()
            return [row.day.isoformat() for row in days]

        service = AvailabilityService.get_bookable_service(db, service_id)
        duration = total_duration(service)

        open_by_day, blocked_by_day, booked_by_day = AvailabilityService._load_range(db, from_date, to_date)

        available = []
        for day in sorted(open_by_day):
            slots = generate_slots(
                day,
                duration,
                free_intervals(open_by_day[day], blocked_by_day[day]),
                booked_by_day[day],
                now,
                step=settings.SLOT_INTERVAL_MINUTES,
                lead_minutes=settings.SAME_DAY_LEAD_MINUTES,
            )
            if slots:
                available.append(day.isoformat())

        logger.info(f"Found {len(available)} available day(s) for {service.name} between {from_date} and {to_date}")
        return available
