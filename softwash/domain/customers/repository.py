"""Customer repository - Database operations for customers"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, Customer, WorkOrder
from ...shared.validators import normalize_email, phone_digits

logger = logging.getLogger(__name__)


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def get_customer(db: Session, customer_id: int) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.id == customer_id).first()

    @staticmethod
    def find_by_email(db: Session, email: Optional[str]) -> Optional[Customer]:
        email = normalize_email(email)
        if not email:
            return None
        return (
            db.query(Customer)
            .filter(func.lower(Customer.email) == email)
            .order_by(Customer.id.asc())
            .first()
        )

    @staticmethod
    def find_by_phone(db: Session, phone: Optional[str]) -> Optional[Customer]:
        digits = phone_digits(phone)
        if not digits:
            return None
        # Stored formats vary ("(555) 123-4567", "+15551234567"), so compare digits in Python
        for customer in (
            db.query(Customer)
            .filter(Customer.phone.isnot(None), Customer.phone != "")
            .order_by(Customer.id.asc())
        ):
            if phone_digits(customer.phone) == digits:
                return customer
        return None

    @staticmethod
    def find_match(db: Session, email: Optional[str], phone: Optional[str]) -> Optional[Customer]:
        """Email match first, then phone"""
        return CustomerRepository.find_by_email(db, email) or CustomerRepository.find_by_phone(
            db, phone
        )

    @staticmethod
    def resolve_or_create(
        db: Session,
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        address: Optional[str] = None,
    ) -> Customer:
        """
        Return the existing customer for this contact, or add a new one.

        Blank fields on a matched customer are filled in; populated fields are
        never overwritten. Flushes but does not commit.
        """
        customer = CustomerRepository.find_match(db, email, phone)
        if customer:
            if not customer.name and name:
                customer.name = name
            if not customer.email and normalize_email(email):
                customer.email = normalize_email(email)
            if not customer.phone and phone:
                customer.phone = phone
            if not customer.address and address:
                customer.address = address
            logger.info(f"👤 Matched existing customer {customer.id}")
            return customer

        customer = Customer(
            name=name or None,
            email=normalize_email(email),
            phone=phone or None,
            address=address or None,
        )
        db.add(customer)
        db.flush()
        logger.info(f"👤 Created customer {customer.id}")
        return customer

    @staticmethod
    def list_with_stats(db: Session) -> list[tuple[Customer, int, Optional[object]]]:
        """Customers with booking count and most recent booking date"""
        return (
            db.query(
                Customer,
                func.count(Booking.id).label("booking_count"),
                func.max(Booking.date).label("last_service_date"),
            )
            .outerjoin(Booking, Booking.customer_id == Customer.id)
            .group_by(Customer.id)
            .order_by(Customer.created_at.desc(), Customer.id.desc())
            .all()
        )

    @staticmethod
    def bookings_for(db: Session, customer_id: int) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.customer_id == customer_id)
            .order_by(Booking.date.desc(), Booking.time.desc())
            .all()
        )

    @staticmethod
    def work_orders_for(db: Session, customer_id: int) -> list[WorkOrder]:
        return (
            db.query(WorkOrder)
            .filter(WorkOrder.customer_id == customer_id)
            .order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc())
            .all()
        )
