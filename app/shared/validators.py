"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

from ..config import DEFAULT_COUNTRY_CODE

TIME_PATTERN = re.compile(r"(?:[01]\d|2[0-3]):[0-5]\d")
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def normalize_whatsapp(phone: Optional[str], country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    Normalize a WhatsApp number to digits with country code.

    Args:
        phone: Phone number in any common format, e.g. "+55 (11) 99999-8888"
        country_code: Prepended when the number is typed without one

    Returns:
        Digits only, e.g. "5511999998888"

    Raises:
        ValueError: If the number cannot be a valid DDD + 8/9 digit number
    """
    # Remove all non-digit characters
    digits = re.sub(r"\D", "", phone or "")

    # Local number typed without the country code
    if len(digits) in (10, 11):
        digits = f"{country_code}{digits}"

    # Country code + 2-digit DDD + 8 or 9 digit number
    if len(digits) < 12 or len(digits) > 13:
        raise ValueError("WhatsApp must be a valid number with DDD and 8 or 9 digits")

    return digits


def format_whatsapp(digits: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Format normalized digits for display: (DD) XXXXX-XXXX"""
    local = digits[len(country_code):] if digits.startswith(country_code) else digits
    if len(local) == 11:
        return f"({local[:2]}) {local[2:7]}-{local[7:]}"
    if len(local) == 10:
        return f"({local[:2]}) {local[2:6]}-{local[6:]}"
    return digits


def normalize_cep(cep: Optional[str]) -> str:
    """
    Normalize a CEP to its fixed-width 8 digit form.

    Raises:
        ValueError: If the CEP does not contain exactly 8 digits
    """
    digits = re.sub(r"\D", "", cep or "")
    if len(digits) != 8:
        raise ValueError("CEP must contain exactly 8 digits (e.g. 01310-000)")
    return digits


def is_valid_time(value: Optional[str]) -> bool:
    """HH:mm with hour 00-23 and minute 00-59"""
    return bool(value) and TIME_PATTERN.fullmatch(value) is not None


def parse_iso_date(value: Optional[str]) -> date:
    """
    Parse a strict YYYY-MM-DD calendar date.

    Raises:
        ValueError: If the string is not in that shape or is not a real date
    """
    if not value or not DATE_PATTERN.fullmatch(value):
        raise ValueError(f"Invalid date '{value}'. Expected YYYY-MM-DD")
    return date.fromisoformat(value)
