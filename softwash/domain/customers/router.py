"""Customer router - FastAPI endpoints for customer operations"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .schemas import (
    CustomerCreate,
    CustomerDetail,
    CustomerListItem,
    CustomerNotesUpdate,
    CustomerResponse,
)
from .service import CustomerService

router = APIRouter(
    prefix="/api/admin/customers", tags=["Admin Customers"], dependencies=[Depends(require_admin)]
)


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(db)


@router.get("", response_model=list[CustomerListItem])
async def list_customers(service: CustomerService = Depends(get_customer_service)):
    """All customers with booking count and last service date"""
    return service.list_customers()


@router.post("", response_model=CustomerResponse)
async def create_customer(
    data: CustomerCreate, service: CustomerService = Depends(get_customer_service)
):
    return service.create_customer(data)


@router.get("/{customer_id}", response_model=CustomerDetail)
async def get_customer(customer_id: int, service: CustomerService = Depends(get_customer_service)):
    """Customer with booking history and work orders"""
    return service.get_customer_detail(customer_id)


@router.patch("/{customer_id}/notes", response_model=CustomerResponse)
async def update_customer_notes(
    customer_id: int,
    data: CustomerNotesUpdate,
    service: CustomerService = Depends(get_customer_service),
):
    return service.update_notes(customer_id, data.notes)
