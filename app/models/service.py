# app/models/service.py
"""
Service Model - catalog entries offered by the business.
Add-on services extend a main service's duration and price but are never
scheduled on their own.
"""
from sqlalchemy import Column, String, Numeric, Integer, Boolean, DateTime, Text, Uuid
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Service(Base):
    """Source of truth for price and duration of bookable services and add-ons."""
    __tablename__ = "services"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Core service details
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    # Pricing: fixed price, or a "min-max" range when price_max is set
    price = Column(Numeric(10, 2), nullable=False, default=0)
    price_max = Column(Numeric(10, 2), nullable=True)

    # Duration in minutes
    duration = Column(Integer, nullable=False, default=0)

    is_addon = Column(Boolean, default=False, nullable=False, index=True)

    # Deleted services stay referenced by historical bookings
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    display_order = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, is_addon={self.is_addon})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "price": self.price_label,
            "price_min": float(self.price) if self.price is not None else None,
            "price_max": float(self.price_max) if self.price_max is not None else None,
            "duration": self.duration,
            "is_addon": self.is_addon,
            "is_active": self.is_active,
            "display_order": self.display_order,
        }

    @property
    def price_label(self):
        """Plain number for fixed prices, "min-max" string for ranges"""
        if self.price is None:
            return None
        if self.price_max is not None and self.price_max != self.price:
            return f"{self.price:.0f}-{self.price_max:.0f}"
        return float(self.price)
