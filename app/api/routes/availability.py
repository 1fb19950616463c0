# ============================================================================
# FILE: app/api/routes/availability.py
# Thin HTTP layer over AvailabilityService / CalendarSyncService
# IMPORTANT: Specific routes MUST come before parameterized routes
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from uuid import UUID

from app.api.dependencies import get_current_admin
from app.config.database import get_db
from app.schemas.availability import BlockRequest, OpenHoursRequest, SyncRequest
from app.services.availability.availability_service import AvailabilityService
from app.services.calendar.calendar_bridge import CalendarBridge, get_calendar_bridge
from app.services.calendar.calendar_sync_service import CalendarSyncService

router = APIRouter(prefix="/availability", tags=["availability"])


# ========== PUBLIC ==========

@router.get("")
def get_availability(
        day: date = Query(..., description="Day (yyyy-MM-dd)"),
        service_id: UUID = Query(..., alias="serviceId"),
        addon_ids: List[UUID] = Query(default=[], alias="addonIds"),
        db: Session = Depends(get_db)
):
    """Bookable start times for a service (plus add-ons) on a day"""
    times = AvailabilityService.get_available_times(db, day, service_id, addon_ids)
    return {"availableTimes": times}


@router.get("/dates")
def get_available_dates(
        service_id: Optional[UUID] = Query(None, alias="serviceId"),
        from_date: Optional[date] = Query(None, alias="fromDate"),
        to_date: Optional[date] = Query(None, alias="toDate"),
        db: Session = Depends(get_db)
):
    """
    Days the booking calendar should enable.
    Without serviceId every day with open hours is returned.
    """
    dates = AvailabilityService.list_available_dates(db, service_id, from_date, to_date)
    return {"availableDates": dates}


# ========== ADMIN ==========

@router.get("/admin", dependencies=[Depends(get_current_admin)])
def get_admin_availability(
        day: date = Query(..., description="Day (yyyy-MM-dd)"),
        db: Session = Depends(get_db)
):
    """Raw open hours and blocked ranges for a day"""
    return AvailabilityService.get_day_state(db, day)


@router.post("", status_code=201, dependencies=[Depends(get_current_admin)])
def set_availability(
        request: OpenHoursRequest,
        db: Session = Depends(get_db)
):
    """Upsert the open-hours window for one day or a batch of days"""
    rows = AvailabilityService.set_open_hours_bulk(
        db, request.all_days, request.window
    )
    return {"updated": len(rows), "availability": [row.to_dict() for row in rows]}


@router.delete("", dependencies=[Depends(get_current_admin)])
def clear_availability(
        day: date = Query(..., description="Day to close (yyyy-MM-dd)"),
        db: Session = Depends(get_db)
):
    """Remove all open hours for a day"""
    removed = AvailabilityService.clear_open_hours(db, day)
    return {"success": True, "removed": removed}


@router.post("/block", status_code=201, dependencies=[Depends(get_current_admin)])
def block_time(
        request: BlockRequest,
        db: Session = Depends(get_db)
):
    block = AvailabilityService.add_block(
        db, request.day, request.window, request.reason
    )
    return block.to_dict()


@router.delete("/unblock/{block_id}", dependencies=[Depends(get_current_admin)])
def unblock_time(
        block_id: UUID = Path(..., description="Blocked time ID"),
        db: Session = Depends(get_db)
):
    block = AvailabilityService.remove_block(db, block_id)
    return {"success": True, "message": "Time unblocked successfully", "unblocked": block.to_dict()}


@router.post("/sync", dependencies=[Depends(get_current_admin)])
def sync_calendar(
        request: SyncRequest,
        db: Session = Depends(get_db),
        bridge: CalendarBridge = Depends(get_calendar_bridge)
):
    """Reconcile the external calendar for a date window (e.g. the next two months)"""
    return CalendarSyncService(bridge).sync_range(db, request.start_date, request.end_date)
