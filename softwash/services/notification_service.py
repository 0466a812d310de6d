"""
Notification Service
One place that turns business events into customer and owner emails or SMS.

Every method returns a result dict ({"sent": bool, "error": str | None}) and
never raises: delivery is a side effect of the write that triggered it, so a
failed send is logged and reported back to the caller instead.
"""

import logging
from typing import Optional

from ..config import BUSINESS_EMAIL, REVIEW_URL
from ..email_service import (
    send_booking_confirmation,
    send_contact_message,
    send_invoice_email,
    send_new_booking_notification,
    send_payment_receipt_email,
    send_review_request_email,
)
from ..shared.validators import validate_us_phone
from .twilio_service import send_appointment_reminder_sms

logger = logging.getLogger(__name__)


def _ok() -> dict:
    return {"sent": True, "error": None}


def _failed(error: str) -> dict:
    return {"sent": False, "error": error}


class Notifier:
    """Email and SMS delivery for booking, billing and follow-up events"""

    async def _deliver(self, label: str, send, **kwargs) -> dict:
        try:
            await send(**kwargs)
            return _ok()
        except Exception as e:
            logger.error(f"❌ Failed to send {label}: {e}")
            return _failed(str(e))

    async def send_booking_confirmation(
        self,
        to: Optional[str],
        customer_name: str,
        service: str,
        appointments: list[dict],
        price: Optional[str] = None,
        day2_notice: Optional[str] = None,
    ) -> dict:
        if not to:
            return _failed("No customer email on file")
        return await self._deliver(
            "booking confirmation",
            send_booking_confirmation,
            to=to,
            customer_name=customer_name,
            service=service,
            appointments=appointments,
            price=price,
            day2_notice=day2_notice,
        )

    async def notify_new_booking(
        self,
        customer_name: str,
        email: str,
        phone: str,
        address: str,
        service: str,
        appointments: list[dict],
        price: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> dict:
        if not BUSINESS_EMAIL:
            logger.warning("⚠️ BUSINESS_EMAIL not set - skipping new booking notification")
            return _failed("BUSINESS_EMAIL not configured")
        return await self._deliver(
            "new booking notification",
            send_new_booking_notification,
            to=BUSINESS_EMAIL,
            customer_name=customer_name,
            email=email,
            phone=phone,
            address=address,
            service=service,
            appointments=appointments,
            price=price,
            notes=notes,
        )

    async def notify_contact_message(
        self, name: str, email: str, phone: str, service: str, message: str
    ) -> dict:
        if not BUSINESS_EMAIL:
            logger.warning("⚠️ BUSINESS_EMAIL not set - skipping contact notification")
            return _failed("BUSINESS_EMAIL not configured")
        return await self._deliver(
            "contact notification",
            send_contact_message,
            to=BUSINESS_EMAIL,
            name=name,
            email=email,
            phone=phone,
            service=service,
            message=message,
        )

    async def send_invoice(
        self,
        to: str,
        customer_name: str,
        invoice_number: str,
        service: str,
        amount: float,
        due_date: str,
    ) -> dict:
        result = await self._deliver(
            "invoice email",
            send_invoice_email,
            to=to,
            customer_name=customer_name,
            invoice_number=invoice_number,
            service=service,
            amount=amount,
            due_date=due_date,
        )
        if result["sent"]:
            logger.info(f"✅ Invoice {invoice_number} sent to {to}")
        return result

    async def send_payment_receipt(
        self,
        to: str,
        customer_name: str,
        invoice_number: str,
        service: str,
        amount: float,
        payment_date: str,
        payment_method: Optional[str] = None,
    ) -> dict:
        result = await self._deliver(
            "payment receipt",
            send_payment_receipt_email,
            to=to,
            customer_name=customer_name,
            invoice_number=invoice_number,
            service=service,
            amount=amount,
            payment_date=payment_date,
            payment_method=payment_method,
        )
        if result["sent"]:
            logger.info(f"✅ Payment receipt for {invoice_number} sent to {to}")
        return result

    async def send_review_request(self, to: str, customer_name: str, service: str) -> dict:
        if not REVIEW_URL:
            return _failed("REVIEW_URL not configured")
        return await self._deliver(
            "review request",
            send_review_request_email,
            to=to,
            customer_name=customer_name,
            service=service,
            review_url=REVIEW_URL,
        )

    async def send_sms_reminder(
        self, to_phone: str, customer_name: str, service: str, date_label: str, time: str
    ) -> dict:
        try:
            e164 = validate_us_phone(to_phone)
        except ValueError as e:
            logger.warning(f"⚠️ Cannot text {to_phone}: {e}")
            return _failed(str(e))

        success, error = await send_appointment_reminder_sms(
            e164, customer_name, service, date_label, time
        )
        if success:
            logger.info(f"📱 Reminder SMS sent to {e164}")
            return _ok()
        return _failed(error or "SMS delivery failed")


notifier = Notifier()


def get_notifier() -> Notifier:
    return notifier
