# ===== app/tasks/calendar_tasks.py =====
from datetime import datetime, timedelta, timezone
from uuid import UUID
from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.config.redis import RedisKeys, get_sync_redis
from app.config.settings import get_settings
from app.models.booking import Booking
from app.services.calendar.calendar_bridge import get_calendar_bridge
from app.services.calendar.calendar_sync_service import CalendarSyncService
from app.utils.clock import business_today
import logging

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=get_settings().MAX_RETRY_ATTEMPTS)
def sync_booking_to_calendar(self, booking_id: str):
    """Retry pushing (or removing) a single booking's external event"""
    db = SessionLocal()
    try:
        booking = db.query(Booking).filter_by(id=UUID(str(booking_id))).first()
        if not booking:
            logger.error(f"Booking {booking_id} not found")
            return {"status": "failed", "reason": "booking_not_found"}

        sync = CalendarSyncService(get_calendar_bridge())
        if booking.is_active:
            ok = sync.push_booking(db, booking) is not None or not sync.bridge.enabled
        else:
            ok = sync.remove_booking(db, booking)

        if not ok:
            raise self.retry(countdown=60 * (self.request.retries + 1))

        return {"status": booking.sync_status, "event_id": booking.external_event_id}
    finally:
        db.close()


@celery_app.task(bind=True, max_retries=0)
def sync_calendar_window(self, days: int = None):
    """Nightly reconciliation of the next CALENDAR_SYNC_WINDOW_DAYS days"""
    settings = get_settings()
    days = days or settings.CALENDAR_SYNC_WINDOW_DAYS

    redis_client = get_sync_redis()
    lock = redis_client.lock(RedisKeys.CALENDAR_SYNC_LOCK, timeout=settings.CALENDAR_SYNC_LOCK_TIMEOUT)
    if not lock.acquire(blocking=False):
        logger.info("Calendar sync already running, skipping")
        return {"status": "skipped", "reason": "already_running"}

    db = SessionLocal()
    try:
        start = business_today()
        end = start + timedelta(days=days - 1)
        summary = CalendarSyncService(get_calendar_bridge()).sync_range(db, start, end)

        redis_client.set(RedisKeys.CALENDAR_LAST_SYNC, datetime.now(timezone.utc).isoformat())
        return {"status": "success", **summary}
    finally:
        db.close()
        lock.release()
