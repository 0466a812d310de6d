"""Work order router - FastAPI endpoints for work orders"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...services.notification_service import Notifier, get_notifier
from .schemas import WorkOrderCreate, WorkOrderResponse, WorkOrderUpdate, WorkOrderUpdateResponse
from .service import WorkOrderService, work_order_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/work-orders", tags=["Admin Work Orders"], dependencies=[Depends(require_admin)]
)


def get_work_order_service(
    db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)
) -> WorkOrderService:
    """Dependency injection for WorkOrderService"""
    return WorkOrderService(db, notifier)


@router.get("", response_model=list[WorkOrderResponse])
async def list_work_orders(service: WorkOrderService = Depends(get_work_order_service)):
    return [work_order_to_dict(w) for w in service.list_work_orders()]


@router.post("", response_model=WorkOrderResponse)
async def create_work_order(
    data: WorkOrderCreate, service: WorkOrderService = Depends(get_work_order_service)
):
    """Generate a work order without a booking"""
    return work_order_to_dict(service.create_work_order(data))


@router.get("/{work_order_id}", response_model=WorkOrderResponse)
async def get_work_order(
    work_order_id: int, service: WorkOrderService = Depends(get_work_order_service)
):
    return work_order_to_dict(service.get_work_order(work_order_id))


@router.patch("/{work_order_id}", response_model=WorkOrderUpdateResponse)
async def update_work_order(
    work_order_id: int,
    data: WorkOrderUpdate,
    service: WorkOrderService = Depends(get_work_order_service),
):
    """Update status flags and notes; may send an invoice or payment receipt"""
    return await service.update_work_order(work_order_id, data)


@router.post("/{work_order_id}/review-request")
async def send_review_request(
    work_order_id: int, service: WorkOrderService = Depends(get_work_order_service)
):
    result = await service.send_review_request(work_order_id)
    if not result["success"]:
        return JSONResponse(status_code=502, content=result)
    return result


@router.post("/{work_order_id}/sms-reminder")
async def send_sms_reminder(
    work_order_id: int, service: WorkOrderService = Depends(get_work_order_service)
):
    result = await service.send_sms_reminder(work_order_id)
    if not result["success"]:
        return JSONResponse(status_code=502, content=result)
    return result
