# app/schemas/availability.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Tuple
from datetime import date

from app.services.scheduling.intervals import format_time, parse_time


def validate_hhmm(v: str) -> str:
    try:
        parse_time(v)
    except ValueError:
        raise ValueError("Time must be in HH:mm format")
    return format_time(parse_time(v))


class TimeWindow(BaseModel):
    """A start/end pair in 24-hour HH:mm"""
    start_time: str = Field(..., description="Start time (HH:mm)")
    end_time: str = Field(..., description="End time (HH:mm)")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, v: str) -> str:
        return validate_hhmm(v)

    @property
    def window(self) -> Tuple[str, str]:
        return self.start_time, self.end_time


class OpenHoursRequest(TimeWindow):
    """Upsert open hours for one day or a batch of days"""
    day: Optional[date] = Field(None, description="Single day (yyyy-MM-dd)")
    days: List[date] = Field(default_factory=list, description="Batch of days")
    is_blocked: bool = Field(False, description="Accepted for compatibility, must be false")

    @model_validator(mode="after")
    def require_day(self) -> "OpenHoursRequest":
        if self.day is None and not self.days:
            raise ValueError("Either day or days is required")
        if self.is_blocked:
            raise ValueError("Use /api/availability/block to block time")
        return self

    @property
    def all_days(self) -> List[date]:
        days = list(self.days)
        if self.day is not None and self.day not in days:
            days.insert(0, self.day)
        return days


class BlockRequest(TimeWindow):
    day: date = Field(..., description="Day to block (yyyy-MM-dd)")
    reason: Optional[str] = Field(None, max_length=200)


class SyncRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
