# app/schemas/booking.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
import datetime as dt
from enum import Enum
from uuid import UUID

from app.schemas.availability import validate_hhmm


class BookingLanguage(str, Enum):
    EN = "en"
    HE = "he"


class BookingCreate(BaseModel):
    """Booking request from the public booking wizard"""
    service_id: UUID
    addon_ids: List[UUID] = Field(default_factory=list)
    date: dt.date
    time: str = Field(..., description="Start time (HH:mm)")
    client_name: str = Field(..., min_length=1, max_length=200)
    client_phone: str = Field(..., min_length=3, max_length=40)
    client_email: EmailStr
    language: BookingLanguage = BookingLanguage.EN
    custom_request: Optional[str] = Field(None, max_length=2000)
    custom_image: Optional[str] = Field(None, description="Reference to an uploaded image")

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return validate_hhmm(v)


class BookingUpdate(BaseModel):
    """Admin edit of an existing booking"""
    addon_ids: Optional[List[UUID]] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    client_name: Optional[str] = Field(None, min_length=1, max_length=200)
    client_phone: Optional[str] = Field(None, min_length=3, max_length=40)
    client_email: Optional[EmailStr] = None
    language: Optional[BookingLanguage] = None
    custom_request: Optional[str] = Field(None, max_length=2000)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return validate_hhmm(v) if v is not None else v
