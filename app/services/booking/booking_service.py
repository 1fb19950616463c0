# ============================================================================
# app/services/booking/booking_service.py
# Booking ledger - pure business logic, no FastAPI dependencies
# ============================================================================
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging
import secrets

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.booking import Booking, BOOKING_ACTIVE, BOOKING_CANCELLED
from app.schemas.booking import BookingCreate, BookingUpdate
from app.services.availability.availability_service import AvailabilityService
from app.services.calendar.calendar_bridge import CalendarBridge
from app.services.calendar.calendar_sync_service import CalendarSyncService
from app.services.scheduling.intervals import parse_time, time_from_minutes
from app.services.scheduling.slots import total_duration
from app.utils.clock import business_now

logger = logging.getLogger(__name__)


def _total_price(service, addons) -> Decimal:
    return (service.price or Decimal("0")) + sum((a.price or Decimal("0") for a in addons), Decimal("0"))


def _generate_token() -> str:
    return secrets.token_urlsafe(24)


class BookingService:
    """Creates, edits and cancels bookings"""

    @staticmethod
    def _ensure_slot_free(
            db: Session,
            day: date,
            start: str,
            duration_minutes: int,
            now: datetime,
            exclude_booking_id: Optional[UUID] = None
    ):
        if day < now.date():
            raise ValidationError("Cannot book a date in the past")

        offered = AvailabilityService.compute_slots(
            db, day, duration_minutes, now, exclude_booking_id=exclude_booking_id
        )
        if start not in offered:
            logger.info(f"Rejected {day} {start} ({duration_minutes} min): not among {len(offered)} free slot(s)")
            raise ConflictError()

    @staticmethod
    def _commit(db: Session):
        """Commit, turning a unique-slot violation into a ConflictError"""
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Slot claimed by a concurrent booking: {e.orig}")
            raise ConflictError()

    @staticmethod
    def _queue_calendar_retry(booking: Booking):
        """Hand a failed calendar push or delete to the worker for retries"""
        if booking.sync_status != "failed":
            return

        from app.tasks.calendar_tasks import sync_booking_to_calendar
        try:
            sync_booking_to_calendar.delay(str(booking.id))
        except Exception as e:
            # Broker down: the nightly window sync still picks the booking up
            logger.warning(f"Could not queue calendar retry for booking {booking.id}: {e}")

    @staticmethod
    def create_booking(
            db: Session,
            data: BookingCreate,
            bridge: CalendarBridge,
            now: Optional[datetime] = None
    ) -> Booking:
        """Create a booking and push it to the external calendar (best-effort)"""
        now = now or business_now()

        service = AvailabilityService.get_bookable_service(db, data.service_id)
        addons = AvailabilityService.get_addons(db, data.addon_ids)
        duration = total_duration(service, addons)

        BookingService._ensure_slot_free(db, data.date, data.time, duration, now)

        booking = Booking(
            service_id=service.id,
            date=data.date,
            time=time_from_minutes(parse_time(data.time)),
            duration_minutes=duration,
            price=_total_price(service, addons),
            client_name=data.client_name,
            client_email=str(data.client_email),
            client_phone=data.client_phone,
            language=data.language.value,
            custom_request=data.custom_request,
            custom_image=data.custom_image,
            token=_generate_token(),
            status=BOOKING_ACTIVE,
        )
        booking.addons = addons

        db.add(booking)
        BookingService._commit(db)
        db.refresh(booking)

        logger.info(f"Booking {booking.id} created: {service.name} on {booking.date} at {data.time} ({duration} min)")

        CalendarSyncService(bridge).push_booking(db, booking)
        BookingService._queue_calendar_retry(booking)
        return booking

    @staticmethod
    def get_booking(db: Session, booking_id: UUID) -> Booking:
        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def get_booking_by_token(db: Session, token: str) -> Booking:
        booking = db.query(Booking).filter(Booking.token == token).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def _cancel(db: Session, booking: Booking, bridge: CalendarBridge) -> Booking:
        booking.status = BOOKING_CANCELLED
        booking.cancelled_at = datetime.now(timezone.utc)
        db.commit()
        logger.info(f"Booking {booking.id} on {booking.date} at {booking.time:%H:%M} cancelled")

        CalendarSyncService(bridge).remove_booking(db, booking)
        BookingService._queue_calendar_retry(booking)
        return booking

    @staticmethod
    def cancel_by_token(
            db: Session,
            token: str,
            bridge: CalendarBridge,
            now: Optional[datetime] = None
    ) -> Booking:
        """Client self-service cancellation. Closes CANCELLATION_CUTOFF_HOURS before the appointment."""
        settings = get_settings()
        now = now or business_now()

        booking = BookingService.get_booking_by_token(db, token)
        if not booking.is_active:
            return booking

        if now > booking.starts_at - timedelta(hours=settings.CANCELLATION_CUTOFF_HOURS):
            raise ValidationError(
                "Online cancellation is closed for this appointment, please contact us directly",
                code="cancellation_window_closed",
            )

        return BookingService._cancel(db, booking, bridge)

    @staticmethod
    def cancel_booking(db: Session, booking_id: UUID, bridge: CalendarBridge) -> Booking:
        """Admin cancellation, no cutoff"""
        booking = BookingService.get_booking(db, booking_id)
        if not booking.is_active:
            return booking
        return BookingService._cancel(db, booking, bridge)

    @staticmethod
    def update_booking(
            db: Session,
            booking_id: UUID,
            data: BookingUpdate,
            bridge: CalendarBridge,
            now: Optional[datetime] = None
    ) -> Booking:
        """Admin edit. Moving a booking re-checks the new slot against everything else."""
        now = now or business_now()
        booking = BookingService.get_booking(db, booking_id)
        if not booking.is_active:
            raise ValidationError("Cancelled bookings cannot be edited")

        changes = data.model_dump(exclude_unset=True)
        reschedule = any(key in changes for key in ("date", "time", "addon_ids"))

        if reschedule:
            addons = booking.addons
            if "addon_ids" in changes:
                addons = AvailabilityService.get_addons(db, data.addon_ids or [])

            new_date = data.date if data.date is not None else booking.date
            new_time = data.time if data.time is not None else booking.time.strftime("%H:%M")
            duration = total_duration(booking.service, addons)

            BookingService._ensure_slot_free(db, new_date, new_time, duration, now, exclude_booking_id=booking.id)

            booking.date = new_date
            booking.time = time_from_minutes(parse_time(new_time))
            booking.addons = addons
            booking.duration_minutes = duration
            booking.price = _total_price(booking.service, addons)

        for field in ("client_name", "client_phone", "client_email", "custom_request"):
            if field in changes and changes[field] is not None:
                setattr(booking, field, str(changes[field]))
        if data.language is not None:
            booking.language = data.language.value

        BookingService._commit(db)
        db.refresh(booking)
        logger.info(f"Booking {booking.id} updated: {sorted(changes)}")

        if reschedule and booking.external_event_id:
            sync = CalendarSyncService(bridge)
            if sync.remove_booking(db, booking):
                sync.push_booking(db, booking)
            BookingService._queue_calendar_retry(booking)

        return booking

    @staticmethod
    def list_bookings(
            db: Session,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            status: Optional[str] = None,
            skip: int = 0,
            limit: int = 100
    ) -> Dict[str, Any]:
        """Paginated list of bookings for the admin dashboard"""
        query = db.query(Booking)

        if start_date:
            query = query.filter(Booking.date >= start_date)
        if end_date:
            query = query.filter(Booking.date <= end_date)
        if status:
            query = query.filter(Booking.status == status)

        query = query.order_by(Booking.date.asc(), Booking.time.asc())
        total = query.count()
        bookings: List[Booking] = query.offset(skip).limit(limit).all()

        return {
            "total_bookings": total,
            "page": {
                "skip": skip,
                "limit": limit,
                "total_pages": (total + limit - 1) // limit if total > 0 else 0
            },
            "filters": {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
                "status": status,
            },
            "bookings": [booking.to_dict() for booking in bookings]
        }
