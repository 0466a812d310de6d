"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import BUSINESS_NAME, EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    booking_confirmation_template,
    contact_message_template,
    invoice_template,
    new_booking_notification_template,
    payment_receipt_template,
    review_request_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like result with 'html' and 'errors'
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        return html if html is not None else str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
    reply_to: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address
        reply_to: Optional reply-to address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        email_data = {
            "from": from_address or EMAIL_FROM_ADDRESS,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
        if reply_to:
            email_data["reply_to"] = reply_to

        response = resend.Emails.send(email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built emails for booking and billing events
# ============================================


async def send_booking_confirmation(
    to: str,
    customer_name: str,
    service: str,
    appointments: list[dict],
    price: Optional[str] = None,
    day2_notice: Optional[str] = None,
) -> dict:
    mjml_content = booking_confirmation_template(
        customer_name, service, appointments, price=price, day2_notice=day2_notice
    )
    return await send_email(
        to=to,
        subject=f"Appointment Confirmed - {BUSINESS_NAME}",
        mjml_content=mjml_content,
    )


async def send_new_booking_notification(
    to: str,
    customer_name: str,
    email: str,
    phone: str,
    address: str,
    service: str,
    appointments: list[dict],
    price: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    """Notify the business owner of a new online booking"""
    mjml_content = new_booking_notification_template(
        customer_name, email, phone, address, service, appointments, price=price, notes=notes
    )
    return await send_email(
        to=to,
        subject=f"New Booking from {customer_name} - {BUSINESS_NAME}",
        mjml_content=mjml_content,
        reply_to=email or None,
    )


async def send_contact_message(
    to: str, name: str, email: str, phone: str, service: str, message: str
) -> dict:
    mjml_content = contact_message_template(name, email, phone, service, message)
    return await send_email(
        to=to,
        subject=f"New Contact from {name} - {BUSINESS_NAME}",
        mjml_content=mjml_content,
        reply_to=email or None,
    )


async def send_invoice_email(
    to: str,
    customer_name: str,
    invoice_number: str,
    service: str,
    amount: float,
    due_date: str,
) -> dict:
    mjml_content = invoice_template(customer_name, invoice_number, service, amount, due_date)
    return await send_email(
        to=to,
        subject=f"Invoice {invoice_number} - {BUSINESS_NAME}",
        mjml_content=mjml_content,
    )


async def send_payment_receipt_email(
    to: str,
    customer_name: str,
    invoice_number: str,
    service: str,
    amount: float,
    payment_date: str,
    payment_method: Optional[str] = None,
) -> dict:
    mjml_content = payment_receipt_template(
        customer_name, invoice_number, service, amount, payment_date, payment_method
    )
    return await send_email(
        to=to,
        subject=f"Payment Received - {BUSINESS_NAME}",
        mjml_content=mjml_content,
    )


async def send_review_request_email(
    to: str, customer_name: str, service: str, review_url: str
) -> dict:
    mjml_content = review_request_template(customer_name, service, review_url)
    return await send_email(
        to=to,
        subject=f"How did we do? - {BUSINESS_NAME}",
        mjml_content=mjml_content,
    )
