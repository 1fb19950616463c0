# app/services/calendar/google_calendar_service.py
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error
import logging

from app.config.settings import get_settings
from app.core.exceptions import ExternalSyncError
from app.services.calendar.calendar_bridge import BusyPeriod, CalendarBridge

settings = get_settings()

logger = logging.getLogger(__name__)

BOOKING_ID_PROPERTY = "booking_id"

# Transport failures: DNS, refused connections, TLS, token refresh
TRANSPORT_ERRORS = (GoogleAuthError, HttpLib2Error, OSError)


class GoogleCalendarBridge(CalendarBridge):
    """Pushes bookings to, and reads busy time from, the owner's Google Calendar"""

    SCOPES = ['https://www.googleapis.com/auth/calendar']

    def __init__(self, service=None):
        if service is None and not settings.GOOGLE_REFRESH_TOKEN:
            error_msg = "GOOGLE_REFRESH_TOKEN is not set! Please add it to your .env file."
            logger.error(error_msg)
            raise ValueError(error_msg)

        self.calendar_id = settings.GOOGLE_CALENDAR_ID
        self.tz = ZoneInfo(settings.BUSINESS_TIMEZONE)
        self._service = service

    @property
    def service(self):
        if self._service is None:
            credentials = Credentials(
                token=None,
                refresh_token=settings.GOOGLE_REFRESH_TOKEN,
                token_uri=settings.GOOGLE_TOKEN_URI,
                client_id=settings.GOOGLE_CLIENT_ID,
                client_secret=settings.GOOGLE_CLIENT_SECRET,
                scopes=self.SCOPES,
            )
            self._service = build('calendar', 'v3', credentials=credentials, cache_discovery=False)
        return self._service

    # ------------------------------------------------------------------

    def _event_body(self, booking) -> Dict:
        start = booking.starts_at
        end = booking.ends_at

        lines = [f"Service: {booking.service.name} ({booking.service.duration} min)"]
        if booking.addons:
            lines.append("Add-ons: " + ", ".join(f"{a.name} ({a.duration or 0} min)" for a in booking.addons))
        lines += [
            f"Total Duration: {booking.duration_minutes} minutes",
            f"Client: {booking.client_name}",
            f"Phone: {booking.client_phone}",
            f"Email: {booking.client_email}",
        ]
        if booking.custom_request:
            lines.append(f"Request: {booking.custom_request}")

        return {
            'summary': f"{booking.service.name} - {booking.client_name}",
            'description': "\n".join(lines),
            'start': {'dateTime': start.isoformat(), 'timeZone': settings.BUSINESS_TIMEZONE},
            'end': {'dateTime': end.isoformat(), 'timeZone': settings.BUSINESS_TIMEZONE},
            'extendedProperties': {'private': {BOOKING_ID_PROPERTY: str(booking.id)}},
        }

    def push_event(self, booking) -> str:
        try:
            event = self.service.events().insert(
                calendarId=self.calendar_id,
                body=self._event_body(booking)
            ).execute()
        except (HttpError,) + TRANSPORT_ERRORS as e:
            raise ExternalSyncError(f"Google Calendar insert failed: {e}") from e

        logger.info(f"Created Google Calendar event {event['id']} for booking {booking.id}")
        return event['id']

    def remove_event(self, event_id: str) -> None:
        try:
            self.service.events().delete(
                calendarId=self.calendar_id,
                eventId=event_id
            ).execute()
        except HttpError as e:
            if e.resp.status in (404, 410):
                logger.info(f"Google Calendar event {event_id} already removed")
                return
            raise ExternalSyncError(f"Google Calendar delete failed: {e}") from e
        except TRANSPORT_ERRORS as e:
            raise ExternalSyncError(f"Google Calendar delete failed: {e}") from e

        logger.info(f"Deleted Google Calendar event {event_id}")

    def list_busy(self, start_date: date, end_date: date) -> List[BusyPeriod]:
        time_min = datetime.combine(start_date, time.min, tzinfo=self.tz)
        time_max = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=self.tz)

        busy = []
        page_token = None
        try:
            while True:
                response = self.service.events().list(
                    calendarId=self.calendar_id,
                    timeMin=time_min.isoformat(),
                    timeMax=time_max.isoformat(),
                    singleEvents=True,
                    orderBy='startTime',
                    pageToken=page_token,
                ).execute()

                for event in response.get('items', []):
                    period = self._busy_period(event)
                    if period:
                        busy.append(period)

                page_token = response.get('nextPageToken')
                if not page_token:
                    break
        except (HttpError,) + TRANSPORT_ERRORS as e:
            raise ExternalSyncError(f"Google Calendar list failed: {e}") from e

        logger.info(f"Fetched {len(busy)} busy period(s) from Google Calendar for {start_date}..{end_date}")
        return busy

    def _busy_period(self, event: Dict) -> Optional[BusyPeriod]:
        if event.get('status') == 'cancelled' or event.get('transparency') == 'transparent':
            return None
        # Events pushed for our own bookings are already in the ledger
        private = event.get('extendedProperties', {}).get('private', {})
        if BOOKING_ID_PROPERTY in private:
            return None

        start = self._parse_event_time(event.get('start', {}))
        end = self._parse_event_time(event.get('end', {}))
        if start is None or end is None or end <= start:
            return None
        return BusyPeriod(start=start, end=end, summary=event.get('summary'))

    def _parse_event_time(self, value: Dict) -> Optional[datetime]:
        if 'dateTime' in value:
            parsed = datetime.fromisoformat(value['dateTime'].replace('Z', '+00:00'))
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone(self.tz).replace(tzinfo=None)
            return parsed
        if 'date' in value:
            # All-day events
            return datetime.combine(date.fromisoformat(value['date']), time.min)
        return None
