# app/utils/clock.py
"""Wall-clock helpers for the business's single timezone"""
from datetime import datetime, date
from zoneinfo import ZoneInfo

from app.config.settings import get_settings


def business_now() -> datetime:
    """Current local time in the business timezone, as a naive datetime"""
    tz = ZoneInfo(get_settings().BUSINESS_TIMEZONE)
    return datetime.now(tz).replace(tzinfo=None)


def business_today() -> date:
    return business_now().date()
