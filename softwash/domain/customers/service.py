"""Customer service - Business logic for customer operations"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Customer
from .repository import CustomerRepository
from .schemas import CustomerCreate

logger = logging.getLogger(__name__)


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()

    def list_customers(self) -> list[dict]:
        rows = self.repo.list_with_stats(self.db)
        return [
            {
                "id": customer.id,
                "name": customer.name,
                "email": customer.email,
                "phone": customer.phone,
                "address": customer.address,
                "notes": customer.notes,
                "created_at": customer.created_at,
                "booking_count": booking_count or 0,
                "last_service_date": last_service_date,
            }
            for customer, booking_count, last_service_date in rows
        ]

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.repo.get_customer(self.db, customer_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def get_customer_detail(self, customer_id: int) -> dict:
        customer = self.get_customer(customer_id)
        return {
            "id": customer.id,
            "name": customer.name,
            "email": customer.email,
            "phone": customer.phone,
            "address": customer.address,
            "notes": customer.notes,
            "created_at": customer.created_at,
            "bookings": self.repo.bookings_for(self.db, customer.id),
            "work_orders": self.repo.work_orders_for(self.db, customer.id),
        }

    def create_customer(self, data: CustomerCreate) -> Customer:
        """Create a customer unless the email or phone already belongs to one"""
        existing = self.repo.find_match(self.db, data.email, data.phone)
        if existing:
            logger.warning(f"⚠️ Customer create matched existing customer {existing.id}")
            raise HTTPException(
                status_code=409,
                detail=f"A customer with this email or phone already exists (id {existing.id})",
            )

        customer = Customer(
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            notes=data.notes,
        )
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        logger.info(f"👤 Created customer {customer.id}")
        return customer

    def update_notes(self, customer_id: int, notes) -> Customer:
        customer = self.get_customer(customer_id)
        customer.notes = notes
        self.db.commit()
        self.db.refresh(customer)
        return customer
