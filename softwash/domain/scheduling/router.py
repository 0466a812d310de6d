"""Scheduling router - public availability and contact form, admin calendar"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...rate_limiter import rate_limit_contact
from ...services.notification_service import Notifier, get_notifier
from ...shared.validators import parse_iso_date
from .availability import day_slot_availability, month_availability
from .schemas import (
    BlockAction,
    ContactResponse,
    ContactSubmission,
    ManualBookingCreate,
    ManualBookingResponse,
    ScheduleResponse,
)
from .service import SchedulingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Scheduling"])
admin_router = APIRouter(
    prefix="/api/admin", tags=["Admin Scheduling"], dependencies=[Depends(require_admin)]
)


def get_scheduling_service(
    db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)
) -> SchedulingService:
    """Dependency injection for SchedulingService"""
    return SchedulingService(db, notifier)


@router.get("/availability/{date_str}/slots")
async def get_day_slots(date_str: str, db: Session = Depends(get_db)):
    """Availability of every slot on one date"""
    try:
        day = parse_iso_date(date_str)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format")
    return {"slots": day_slot_availability(db, day)}


@router.get("/availability/{year}/{month}")
async def get_month_overview(year: str, month: str, db: Session = Depends(get_db)):
    """Available slot count for every day of a month"""
    try:
        year_value, month_value = int(year), int(month)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid year or month")
    if not 1 <= month_value <= 12 or not 1 <= year_value <= 9999:
        raise HTTPException(status_code=400, detail="Invalid year or month")
    return {"days": month_availability(db, year_value, month_value)}


@router.post("/contact", response_model=ContactResponse, response_model_exclude_none=True)
async def submit_contact(
    data: ContactSubmission,
    _: None = Depends(rate_limit_contact),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Contact form; books an appointment when a date and time are included"""
    return await service.submit_contact(data)


# ============================================================================
# ADMIN CALENDAR
# ============================================================================


@admin_router.get("/bookings", response_model=ScheduleResponse)
async def list_bookings(service: SchedulingService = Depends(get_scheduling_service)):
    """Every booking and block"""
    return service.get_schedule()


@admin_router.post(
    "/bookings", response_model=ManualBookingResponse, response_model_exclude_none=True
)
async def create_booking(
    data: ManualBookingCreate, service: SchedulingService = Depends(get_scheduling_service)
):
    return service.create_manual_booking(data)


@admin_router.delete("/bookings/{booking_id}")
async def delete_booking(
    booking_id: int, service: SchedulingService = Depends(get_scheduling_service)
):
    service.cancel_booking(booking_id)
    return {"success": True}


@admin_router.post("/block")
async def block_action(data: BlockAction, service: SchedulingService = Depends(get_scheduling_service)):
    """Block, unblock or cancel everything at a date and slot (or "all")"""
    service.apply_block_action(data)
    return {"success": True}
