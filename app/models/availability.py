# ===== app/models/availability.py =====
from sqlalchemy import Column, String, Time, Date, DateTime, CheckConstraint, Uuid
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class OpenHours(Base):
    """Admin-declared working window for a calendar day"""
    __tablename__ = "availability"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    day = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_availability_start_before_end"),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "day": self.day.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
        }


class BlockedTime(Base):
    """Sub-interval of a day that cannot be booked even when it is inside open hours"""
    __tablename__ = "blocked_times"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    day = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    reason = Column(String, nullable=True)  # "Lunch", "Vacation", etc.

    # 'admin' blocks are authored in the dashboard, 'calendar' blocks are
    # materialized from external calendar busy time and replaced on every sync
    source = Column(String, default="admin", nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_blocked_times_start_before_end"),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "day": self.day.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "reason": self.reason,
            "source": self.source,
        }
