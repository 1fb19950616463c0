# app/services/booking/ics.py
"""iCalendar export so clients can add their appointment to any calendar app"""
from datetime import datetime, timezone

from app.config.settings import get_settings


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def build_ics(booking) -> str:
    settings = get_settings()
    stamp = "%Y%m%dT%H%M%S"

    service_name = booking.service.name if booking.service else "Appointment"
    description = [
        "Booking Details:",
        f"Service: {service_name} ({booking.service.duration if booking.service else 0} min)",
    ]
    if booking.addons:
        description.append("Add-ons: " + ", ".join(f"{a.name} ({a.duration or 0} min)" for a in booking.addons))
    description += [
        f"Total Duration: {booking.duration_minutes} minutes",
        f"Client: {booking.client_name}",
        f"Phone: {booking.client_phone}",
        f"Email: {booking.client_email}",
        f"Booking ID: {booking.id}",
    ]

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{settings.BUSINESS_NAME}//Booking//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{booking.id}@booking",
        f"DTSTAMP:{datetime.now(timezone.utc).strftime(stamp)}Z",
        f"DTSTART;TZID={settings.BUSINESS_TIMEZONE}:{booking.starts_at.strftime(stamp)}",
        f"DTEND;TZID={settings.BUSINESS_TIMEZONE}:{booking.ends_at.strftime(stamp)}",
        f"SUMMARY:{_escape(f'{service_name} - {settings.BUSINESS_NAME}')}",
        f"DESCRIPTION:{_escape(chr(10).join(description))}",
        f"LOCATION:{_escape(settings.BUSINESS_NAME)}",
        "STATUS:CONFIRMED" if booking.is_active else "STATUS:CANCELLED",
        "BEGIN:VALARM",
        "TRIGGER:-PT1H",
        "ACTION:DISPLAY",
        f"DESCRIPTION:{_escape(f'Reminder: {service_name} appointment in 1 hour')}",
        "END:VALARM",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"
