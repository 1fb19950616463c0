# app/api/routes/services.py
"""
Service Catalog API Endpoints
Public listing plus admin CRUD for services and add-ons
"""
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from uuid import UUID

from app.api.dependencies import get_current_admin
from app.config.database import get_db
from app.schemas.service import ServiceCreate, ServiceUpdate
from app.services.catalog.catalog_service import CatalogService

router = APIRouter(prefix="/services", tags=["services"])


@router.get("")
def list_services(db: Session = Depends(get_db)):
    return [s.to_dict() for s in CatalogService.list_services(db)]


@router.get("/main")
def list_main_services(db: Session = Depends(get_db)):
    return [s.to_dict() for s in CatalogService.list_services(db, is_addon=False)]


@router.get("/addons")
def list_addons(db: Session = Depends(get_db)):
    return [s.to_dict() for s in CatalogService.list_services(db, is_addon=True)]


@router.post("", status_code=201, dependencies=[Depends(get_current_admin)])
def create_service(
        service_data: ServiceCreate,
        db: Session = Depends(get_db)
):
    return CatalogService.create_service(db, service_data).to_dict()


@router.put("/{service_id}", dependencies=[Depends(get_current_admin)])
def update_service(
        service_data: ServiceUpdate,
        service_id: UUID = Path(...),
        db: Session = Depends(get_db)
):
    return CatalogService.update_service(db, service_id, service_data).to_dict()


@router.delete("/{service_id}", dependencies=[Depends(get_current_admin)])
def delete_service(
        service_id: UUID = Path(...),
        db: Session = Depends(get_db)
):
    CatalogService.delete_service(db, service_id)
    return {"message": "Deleted"}
