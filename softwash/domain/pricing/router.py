"""Pricing router - public catalog and calculator, admin catalog management"""

import logging
from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...cache import PricingCache
from ...database import get_db
from .schemas import (
    DiscountUpdate,
    QuoteRequest,
    QuoteResponse,
    ScheduleCreate,
    ScheduleResponse,
    ServiceUpdate,
)
from .service import (
    PricingService,
    apply_due_changes,
    discount_to_dict,
    get_pricing_cache,
    schedule_to_dict,
    service_to_dict,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pricing", tags=["Pricing"])
admin_router = APIRouter(
    prefix="/api/admin/pricing", tags=["Admin Pricing"], dependencies=[Depends(require_admin)]
)


def get_pricing_service(
    db: Session = Depends(get_db), pricing_cache: PricingCache = Depends(get_pricing_cache)
) -> PricingService:
    """Dependency injection for PricingService"""
    return PricingService(db, pricing_cache)


@router.get("")
async def get_pricing(service: PricingService = Depends(get_pricing_service)):
    """Active services and discounts"""
    return service.get_catalog()


@router.post("/quote", response_model=QuoteResponse)
async def get_quote(data: QuoteRequest, service: PricingService = Depends(get_pricing_service)):
    """Calculator total for a selection of services and manual discounts"""
    quote = service.quote(data)
    return asdict(quote)


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.patch("/services/{key}")
async def update_service(
    key: str, data: ServiceUpdate, service: PricingService = Depends(get_pricing_service)
):
    row = service.update_service(key, data)
    return {"success": True, "service": {**service_to_dict(row), "active": row.active}}


@admin_router.patch("/discounts/{key}")
async def update_discount(
    key: str, data: DiscountUpdate, service: PricingService = Depends(get_pricing_service)
):
    row = service.update_discount(key, data)
    return {"success": True, "discount": {**discount_to_dict(row), "active": row.active}}


@admin_router.get("/schedule", response_model=list[ScheduleResponse])
async def list_schedule(
    include_applied: bool = False, service: PricingService = Depends(get_pricing_service)
):
    """Pending scheduled changes (and applied ones when include_applied=true)"""
    return [schedule_to_dict(entry) for entry in service.list_schedule(include_applied)]


@admin_router.post("/schedule", response_model=ScheduleResponse)
async def create_schedule_entry(
    data: ScheduleCreate, service: PricingService = Depends(get_pricing_service)
):
    return schedule_to_dict(service.create_schedule_entry(data))


@admin_router.delete("/schedule/{entry_id}")
async def delete_schedule_entry(
    entry_id: int, service: PricingService = Depends(get_pricing_service)
):
    service.delete_schedule_entry(entry_id)
    return {"success": True}


@admin_router.post("/schedule/apply")
async def apply_schedule_now(
    db: Session = Depends(get_db), pricing_cache: PricingCache = Depends(get_pricing_cache)
):
    """Run the scheduled-change sweep immediately"""
    summary = apply_due_changes(db, date.today(), pricing_cache)
    logger.info(f"💲 Manual pricing sweep: {summary}")
    return {"success": True, **summary}
