"""
Twilio SMS Service
Sends appointment reminders and other text messages through the Twilio REST API
"""

import logging
from typing import Optional

import httpx

from ..config import (
    BUSINESS_NAME,
    BUSINESS_PHONE,
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_FROM_NUMBER,
    TWILIO_MESSAGING_SERVICE_SID,
)

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


async def send_sms(to_phone: str, message_body: str, message_type: str) -> tuple[bool, Optional[str]]:
    """
    Send SMS via Twilio

    Args:
        to_phone: Recipient phone number in E.164 format
        message_body: SMS message content
        message_type: Type of message (for logging)

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    if not to_phone:
        return False, "No phone number provided"

    if not to_phone.startswith("+"):
        logger.warning(f"Phone number not in E.164 format: {to_phone}")
        return False, "Phone number must be in E.164 format (e.g., +1234567890)"

    if not TWILIO_ACCOUNT_SID or not TWILIO_AUTH_TOKEN:
        logger.warning("⚠️ Twilio credentials not configured")
        return False, "SMS not configured"

    data = {"To": to_phone, "Body": message_body}
    if TWILIO_MESSAGING_SERVICE_SID:
        data["MessagingServiceSid"] = TWILIO_MESSAGING_SERVICE_SID
    elif TWILIO_FROM_NUMBER:
        data["From"] = TWILIO_FROM_NUMBER
    else:
        logger.warning("⚠️ Neither TWILIO_FROM_NUMBER nor TWILIO_MESSAGING_SERVICE_SID set")
        return False, "SMS not configured"

    try:
        logger.info(f"🚀 Sending {message_type} SMS to Twilio API for {to_phone}")
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{TWILIO_API_BASE}/Accounts/{TWILIO_ACCOUNT_SID}/Messages.json",
                auth=(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN),
                data=data,
                timeout=10.0,
            )

        if response.status_code in (200, 201):
            message_sid = response.json().get("sid")
            logger.info(f"✅ SMS sent successfully: {message_type} to {to_phone} (SID: {message_sid})")
            return True, None

        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        error_message = error_data.get("message", f"HTTP {response.status_code}")
        error_code = error_data.get("code")
        logger.error(f"❌ Twilio API error [{error_code}]: {error_message}")
        return False, error_message

    except httpx.HTTPError as e:
        logger.error(f"Twilio API error: {str(e)}")
        return False, str(e)


def appointment_reminder_body(customer_name: str, service: str, date_label: str, time: str) -> str:
    callback = f" Questions? Call or text {BUSINESS_PHONE}." if BUSINESS_PHONE else ""
    greeting = f"Hi {customer_name}, " if customer_name else ""
    return (
        f"{greeting}this is a reminder from {BUSINESS_NAME}: your {service or 'service'} "
        f"appointment is {date_label} at {time}.{callback}"
    )


async def send_appointment_reminder_sms(
    to_phone: str, customer_name: str, service: str, date_label: str, time: str
) -> tuple[bool, Optional[str]]:
    body = appointment_reminder_body(customer_name, service, date_label, time)
    return await send_sms(to_phone, body, "appointment_reminder")
