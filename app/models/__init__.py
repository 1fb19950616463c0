# app/models/__init__.py
from .base import Base
from .service import Service
from .availability import OpenHours, BlockedTime
from .booking import Booking, booking_addons, BOOKING_ACTIVE, BOOKING_CANCELLED
from .admin_user import AdminUser

__all__ = [
    "Base",
    "Service",
    "OpenHours",
    "BlockedTime",
    "Booking",
    "booking_addons",
    "BOOKING_ACTIVE",
    "BOOKING_CANCELLED",
    "AdminUser",
]
