"""Shared validation utilities"""

import re
from datetime import date, datetime
from typing import Optional

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def phone_digits(phone: Optional[str]) -> str:
    """Digits only, with a leading US country code removed. Used for matching."""
    if not phone:
        return ""
    digits = re.sub(r"\D", "", phone)
    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]
    return digits


def validate_us_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize US phone number to E.164 format.

    Args:
        phone: Phone number string in various formats

    Returns:
        Normalized phone number in E.164 format (+1XXXXXXXXXX)

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = phone_digits(phone)

    # US phone numbers should have 10 digits
    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits for US numbers")

    return f"+1{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Trimmed, lowercased email or None for blanks. Never raises."""
    if not email or not email.strip():
        return None
    return email.strip().lower()


def parse_iso_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string, raising ValueError otherwise"""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("Invalid date format")
    return datetime.strptime(value, "%Y-%m-%d").date()
