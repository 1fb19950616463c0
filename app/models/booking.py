# ===== app/models/booking.py =====
from sqlalchemy import (
    Column, String, Integer, Text, Date, Time, DateTime, Numeric, ForeignKey, Table, Index, Uuid, text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timedelta
from .base import Base
import uuid

BOOKING_ACTIVE = "active"
BOOKING_CANCELLED = "cancelled"


booking_addons = Table(
    "booking_addons",
    Base.metadata,
    Column("booking_id", Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), primary_key=True),
    Column("addon_id", Uuid, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # References
    service_id = Column(Uuid, ForeignKey("services.id"), nullable=False, index=True)

    # Appointment details
    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)  # service + add-ons at booking time
    price = Column(Numeric(10, 2), nullable=True)

    # Client info
    client_name = Column(String, nullable=False)
    client_email = Column(String, nullable=False)
    client_phone = Column(String, nullable=False)
    language = Column(String(5), default="en")

    # Self-service manage/cancel credential
    token = Column(String(64), nullable=False, unique=True, index=True)

    # Opaque add-on payload, unrelated to scheduling
    custom_request = Column(Text, nullable=True)
    custom_image = Column(String, nullable=True)

    # Status tracking
    status = Column(String, default=BOOKING_ACTIVE, nullable=False)  # active, cancelled
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Calendar sync
    external_event_id = Column("google_event_id", String, nullable=True)
    sync_status = Column(String, default="pending")  # pending, synced, failed, sync_disabled
    sync_attempts = Column(Integer, default=0)
    last_sync_error = Column(Text, nullable=True)
    last_synced_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    service = relationship("Service", lazy="joined")
    addons = relationship("Service", secondary=booking_addons, lazy="selectin")

    # At most one active booking may claim a given start time. Enforced by the
    # database so that two racing requests cannot both commit.
    __table_args__ = (
        Index(
            "uq_bookings_active_slot",
            "date",
            "time",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status == BOOKING_ACTIVE

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.time)

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.duration_minutes)

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "service_id": str(self.service_id),
            "service_name": self.service.name if self.service else None,
            "service_duration": self.service.duration if self.service else None,
            "addon_ids": [str(addon.id) for addon in self.addons],
            "addons": [
                {
                    "id": str(addon.id),
                    "name": addon.name,
                    "price": float(addon.price) if addon.price is not None else None,
                    "duration": addon.duration,
                }
                for addon in self.addons
            ],
            "date": self.date.isoformat(),
            "time": self.time.strftime("%H:%M"),
            "duration_minutes": self.duration_minutes,
            "price": float(self.price) if self.price is not None else None,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_phone": self.client_phone,
            "language": self.language,
            "custom_request": self.custom_request,
            "custom_image": self.custom_image,
            "status": self.status,
            "token": self.token,
            "external_event_id": self.external_event_id,
            "sync_status": self.sync_status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
