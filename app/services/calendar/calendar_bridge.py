# app/services/calendar/calendar_bridge.py
"""Contract between the booking ledger and the external calendar"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional
import logging

from app.config.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BusyPeriod:
    """Busy time reported by the external calendar, in business-local naive datetimes"""
    start: datetime
    end: datetime
    summary: Optional[str] = None


class CalendarBridge:
    """
    One external calendar kept in sync with the booking ledger.

    Implementations raise ExternalSyncError on any provider failure; callers
    decide whether that is fatal (it never is for bookings).
    """

    enabled = True

    def push_event(self, booking) -> str:
        """Create an event for `booking` and return its external id"""
        raise NotImplementedError

    def remove_event(self, event_id: str) -> None:
        raise NotImplementedError

    def list_busy(self, start_date: date, end_date: date) -> List[BusyPeriod]:
        """Busy periods in [start_date, end_date] not created by this system"""
        raise NotImplementedError


class NullCalendarBridge(CalendarBridge):
    """Used when no external calendar is configured"""

    enabled = False

    def push_event(self, booking) -> str:
        return ""

    def remove_event(self, event_id: str) -> None:
        return None

    def list_busy(self, start_date: date, end_date: date) -> List[BusyPeriod]:
        return []


def get_calendar_bridge() -> CalendarBridge:
    """FastAPI dependency / factory for the configured bridge"""
    settings = get_settings()
    if not settings.GOOGLE_CALENDAR_ENABLED:
        return NullCalendarBridge()

    from app.services.calendar.google_calendar_service import GoogleCalendarBridge
    return GoogleCalendarBridge()
