# ============================================================================
# FILE: app/api/routes/bookings.py
# Thin HTTP layer over BookingService
# IMPORTANT: Specific routes MUST come before parameterized routes
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from fastapi.responses import Response
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from app.api.dependencies import get_current_admin
from app.config.database import get_db
from app.core.exceptions import ValidationError
from app.schemas.booking import BookingCreate, BookingUpdate
from app.services.booking.booking_service import BookingService
from app.services.booking.ics import build_ics
from app.services.calendar.calendar_bridge import CalendarBridge, get_calendar_bridge

router = APIRouter(prefix="/bookings", tags=["bookings"])


# ========== PUBLIC ==========

@router.post("", status_code=201)
def create_booking(
        request: BookingCreate,
        db: Session = Depends(get_db),
        bridge: CalendarBridge = Depends(get_calendar_bridge)
):
    booking = BookingService.create_booking(db, request, bridge)
    return booking.to_dict()


@router.get("/manage")
def manage_booking(
        token: str = Query(..., min_length=1),
        action: Optional[str] = Query(None),
        db: Session = Depends(get_db),
        bridge: CalendarBridge = Depends(get_calendar_bridge)
):
    """Token-based self-service actions. Only 'cancel' is supported."""
    if not action:
        raise ValidationError("Action required")
    if action != "cancel":
        raise ValidationError("Invalid action")

    booking = BookingService.cancel_by_token(db, token, bridge)
    return {"success": True, "status": booking.status}


@router.get("/details/{token}")
def get_booking_details(
        token: str = Path(...),
        db: Session = Depends(get_db)
):
    return BookingService.get_booking_by_token(db, token).to_dict()


@router.get("/calendar/{token}")
def get_calendar_file(
        token: str = Path(...),
        db: Session = Depends(get_db)
):
    """iCalendar (.ics) download for the booking owning `token`"""
    booking = BookingService.get_booking_by_token(db, token)
    return Response(
        content=build_ics(booking),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="appointment-{booking.id}.ics"'},
    )


# ========== ADMIN ==========

@router.get("", dependencies=[Depends(get_current_admin)])
def list_bookings(
        start_date: Optional[date] = Query(None, description="Bookings on or after this date"),
        end_date: Optional[date] = Query(None, description="Bookings on or before this date"),
        status: Optional[str] = Query(None, description="active or cancelled"),
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=500),
        db: Session = Depends(get_db)
):
    return BookingService.list_bookings(db, start_date, end_date, status, skip, limit)


@router.put("/{booking_id}", dependencies=[Depends(get_current_admin)])
def update_booking(
        request: BookingUpdate,
        booking_id: UUID = Path(...),
        db: Session = Depends(get_db),
        bridge: CalendarBridge = Depends(get_calendar_bridge)
):
    return BookingService.update_booking(db, booking_id, request, bridge).to_dict()


@router.post("/{booking_id}/cancel", dependencies=[Depends(get_current_admin)])
def cancel_booking(
        booking_id: UUID = Path(...),
        db: Session = Depends(get_db),
        bridge: CalendarBridge = Depends(get_calendar_bridge)
):
    booking = BookingService.cancel_booking(db, booking_id, bridge)
    return {"success": True, "status": booking.status}
