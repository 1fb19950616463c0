# ============================================================================
# app/services/catalog/catalog_service.py
# Service catalog management
# ============================================================================
"""Service for managing catalog entries (main services and add-ons)"""
from typing import List
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import ServiceNotFoundError, ValidationError
from app.models.service import Service
from app.schemas.service import MIN_MAIN_SERVICE_DURATION, ServiceCreate, ServiceUpdate, parse_price

logger = logging.getLogger(__name__)


class CatalogService:
    """Handles service catalog operations"""

    @staticmethod
    def list_services(db: Session, is_addon: bool = None) -> List[Service]:
        query = db.query(Service).filter(Service.is_active == True)
        if is_addon is not None:
            query = query.filter(Service.is_addon == is_addon)
        return query.order_by(Service.display_order.asc(), Service.name.asc()).all()

    @staticmethod
    def get_service(db: Session, service_id: UUID) -> Service:
        service = db.query(Service).filter(
            Service.id == service_id,
            Service.is_active == True
        ).first()
        if not service:
            raise ServiceNotFoundError(service_id)
        return service

    @staticmethod
    def create_service(db: Session, data: ServiceCreate) -> Service:
        price, price_max = parse_price(data.price)
        service = Service(
            name=data.name,
            description=data.description,
            price=price,
            price_max=price_max,
            duration=data.duration,
            is_addon=data.is_addon,
            display_order=data.display_order,
            is_active=True
        )

        db.add(service)
        db.commit()
        db.refresh(service)

        logger.info(f"Created {'add-on' if service.is_addon else 'service'} {service.id}: {service.name}")
        return service

    @staticmethod
    def update_service(db: Session, service_id: UUID, data: ServiceUpdate) -> Service:
        service = CatalogService.get_service(db, service_id)
        changes = data.model_dump(exclude_unset=True)

        if "price" in changes:
            if changes["price"] is None:
                raise ValidationError("Price cannot be removed")
            service.price, service.price_max = parse_price(changes.pop("price"))

        for field, value in changes.items():
            if value is not None:
                setattr(service, field, value)

        if not service.is_addon and service.duration < MIN_MAIN_SERVICE_DURATION:
            db.rollback()
            raise ValidationError(f"Main services must last at least {MIN_MAIN_SERVICE_DURATION} minutes")

        db.commit()
        db.refresh(service)

        logger.info(f"Updated service {service.id}: {sorted(changes)}")
        return service

    @staticmethod
    def delete_service(db: Session, service_id: UUID) -> Service:
        """
        Soft delete: existing bookings keep their service reference, while
        slot queries and new bookings report the service as not found.
        """
        service = CatalogService.get_service(db, service_id)
        service.is_active = False
        db.commit()

        logger.info(f"Deleted service {service.id}: {service.name}")
        return service
