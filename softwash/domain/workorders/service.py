"""Work order service - Business logic for fulfillment tracking and billing emails"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import WorkOrder
from ...services.notification_service import Notifier
from ..customers.repository import CustomerRepository
from ..reports.service import work_order_amount
from .lifecycle import apply_status_update, business_days_after, invoice_number
from .repository import WorkOrderRepository
from .schemas import WorkOrderCreate, WorkOrderUpdate

logger = logging.getLogger(__name__)

FREE_TEXT_FIELDS = ("payment_method", "completion_notes", "admin_notes", "mileage", "price")


def contact_for(work_order: WorkOrder) -> dict:
    """Customer record first, booking snapshot as fallback"""
    customer, booking = work_order.customer, work_order.booking
    return {
        "name": (customer.name if customer else None) or (booking.name if booking else None),
        "email": (customer.email if customer else None) or (booking.email if booking else None),
        "phone": (customer.phone if customer else None) or (booking.phone if booking else None),
        "address": (customer.address if customer else None) or (booking.address if booking else None),
    }


def work_order_to_dict(work_order: WorkOrder) -> dict:
    contact = contact_for(work_order)
    booking = work_order.booking
    return {
        "id": work_order.id,
        "invoice_number": invoice_number(work_order),
        "booking_id": work_order.booking_id,
        "customer_id": work_order.customer_id,
        "customer_name": contact["name"],
        "customer_email": contact["email"],
        "customer_phone": contact["phone"],
        "address": contact["address"],
        "service": work_order.service,
        "price": work_order.price,
        "booking_date": booking.date if booking else None,
        "booking_time": booking.time if booking else None,
        "job_complete": bool(work_order.job_complete),
        "invoiced": bool(work_order.invoiced),
        "invoice_paid": bool(work_order.invoice_paid),
        "paid": bool(work_order.paid),
        "paid_at": work_order.paid_at,
        "payment_method": work_order.payment_method,
        "completion_notes": work_order.completion_notes,
        "admin_notes": work_order.admin_notes,
        "mileage": work_order.mileage,
        "created_at": work_order.created_at,
    }


class WorkOrderService:
    """Service layer for work order business logic"""

    def __init__(self, db: Session, notifier: Notifier, today: Optional[date] = None):
        self.db = db
        self.notifier = notifier
        self.today = today
        self.repo = WorkOrderRepository()
        self.customers = CustomerRepository()

    def _today(self) -> date:
        return self.today or date.today()

    def list_work_orders(self) -> list[WorkOrder]:
        return self.repo.list_work_orders(self.db)

    def get_work_order(self, work_order_id: int) -> WorkOrder:
        work_order = self.repo.get_work_order(self.db, work_order_id)
        if not work_order:
            raise HTTPException(status_code=404, detail="Work order not found")
        return work_order

    def create_work_order(self, data: WorkOrderCreate) -> WorkOrder:
        """Standalone work order with no booking, e.g. a quote written up on site"""
        if data.customer_id is not None:
            customer = self.customers.get_customer(self.db, data.customer_id)
            if not customer:
                raise HTTPException(status_code=404, detail="Customer not found")
        elif data.name or data.email or data.phone:
            customer = self.customers.resolve_or_create(
                self.db, data.name, data.email, data.phone, data.address
            )
        else:
            raise HTTPException(status_code=400, detail="A customer or contact details are required")

        work_order = self.repo.create_work_order(
            self.db,
            customer_id=customer.id,
            service=data.service,
            price=data.price,
            admin_notes=data.admin_notes,
        )
        logger.info(f"📋 Created standalone work order {work_order.id} for customer {customer.id}")
        return work_order

    async def update_work_order(self, work_order_id: int, data: WorkOrderUpdate) -> dict:
        """
        Apply flag and note changes, commit, then send the one billing email
        the change calls for. A failed send does not undo the update.
        """
        work_order = self.get_work_order(work_order_id)
        changes = data.model_dump(exclude_unset=True)

        outcome = apply_status_update(work_order, changes, datetime.now())
        for field_name in FREE_TEXT_FIELDS:
            if field_name in changes:
                setattr(work_order, field_name, changes[field_name])

        self.db.commit()
        self.db.refresh(work_order)
        if outcome.changed:
            logger.info(f"📋 Work order {work_order.id} milestones changed: {', '.join(outcome.changed)}")

        email_sent, email_error = None, None
        if outcome.notification:
            email_sent, email_error = await self._send_billing_email(work_order, outcome.notification)

        return {
            "success": True,
            "work_order": work_order_to_dict(work_order),
            "email_sent": email_sent,
            "email_error": email_error,
        }

    async def _send_billing_email(self, work_order: WorkOrder, kind: str) -> tuple[Optional[str], Optional[str]]:
        contact = contact_for(work_order)
        if not contact["email"]:
            logger.info(f"ℹ️ No email on file for work order {work_order.id} - {kind} not sent")
            return None, None

        number = invoice_number(work_order)
        amount = work_order_amount(work_order)
        if kind == "invoice":
            due = business_days_after(self._today())
            result = await self.notifier.send_invoice(
                contact["email"],
                contact["name"],
                number,
                work_order.service,
                amount,
                f"{due:%B %d, %Y}",
            )
        else:
            result = await self.notifier.send_payment_receipt(
                contact["email"],
                contact["name"],
                number,
                work_order.service,
                amount,
                f"{self._today():%B %d, %Y}",
                work_order.payment_method,
            )

        if result["sent"]:
            return kind, None
        return None, result["error"]

    async def send_review_request(self, work_order_id: int) -> dict:
        work_order = self.get_work_order(work_order_id)
        contact = contact_for(work_order)
        if not contact["email"]:
            raise HTTPException(status_code=400, detail="No email on file for this customer")

        result = await self.notifier.send_review_request(
            contact["email"], contact["name"], work_order.service
        )
        if not result["sent"]:
            return {"success": False, "message": f"Review request failed: {result['error']}"}
        logger.info(f"⭐ Review request sent for work order {work_order.id}")
        return {"success": True, "message": f"Review request sent to {contact['email']}"}

    async def send_sms_reminder(self, work_order_id: int) -> dict:
        work_order = self.get_work_order(work_order_id)
        contact = contact_for(work_order)
        if not contact["phone"]:
            raise HTTPException(status_code=400, detail="No phone number on file for this customer")
        booking = work_order.booking
        if booking is None:
            raise HTTPException(status_code=400, detail="This work order has no scheduled appointment")

        result = await self.notifier.send_sms_reminder(
            contact["phone"],
            contact["name"],
            work_order.service,
            f"{booking.date:%A, %B %d}",
            booking.time,
        )
        if not result["sent"]:
            return {"success": False, "message": f"SMS reminder failed: {result['error']}"}
        return {"success": True, "message": f"Reminder sent to {contact['phone']}"}
