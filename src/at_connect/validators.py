"""
@file validators.py
@description Input validation functions for the Africa's Talking SDK
@module at_connect.validators
@author AT-Connect Team
@created 2025-01-15
"""

import re
from typing import Iterable, List

from at_connect.exceptions import ValidationError


# Regex patterns for validation
PHONE_REGEX = re.compile(r"^\+\d{9,15}$")
CURRENCY_REGEX = re.compile(r"^[A-Z]{3}$")
DTMF_KEYS = frozenset("0123456789*#")


def validate_phone_number(phone_number: str, field_name: str = "phone_number") -> str:
    """
    Validate a phone number in international format.

    The gateway expects E.164 style numbers: ``+`` followed by the
    country code and subscriber number. Spaces and hyphens are stripped.

    Args:
        phone_number: Phone number to validate
        field_name: Name of the field (for error messages)

    Returns:
        Normalized phone number

    Raises:
        ValidationError: If phone number format is invalid

    Example:
        >>> validate_phone_number("+254 711 000 111")
        '+254711000111'
        >>> validate_phone_number("0711000111")
        ValidationError: Phone number must be in international format
    """
    if not phone_number:
        raise ValidationError(field_name, "Phone number is required")

    # Remove whitespace and hyphens
    normalized = re.sub(r"[\s\-]", "", phone_number)

    if not PHONE_REGEX.match(normalized):
        raise ValidationError(
            field_name,
            "Phone number must be in international format (e.g., +254711XXXYYY)",
        )

    return normalized


def validate_phone_numbers(phone_numbers: Iterable[str], field_name: str = "phone_numbers") -> List[str]:
    """
    Validate an ordered collection of phone numbers.

    Order is preserved; duplicates are kept since the gateway treats each
    entry as a separate recipient.

    Raises:
        ValidationError: If the collection is empty or any number is invalid
    """
    if isinstance(phone_numbers, str):
        phone_numbers = [phone_numbers]

    normalized = [validate_phone_number(number, field_name) for number in phone_numbers]
    if not normalized:
        raise ValidationError(field_name, "At least one phone number is required")
    return normalized


def validate_positive_int(value: int, field_name: str) -> int:
    """
    Validate a strictly positive integer (digit counts, durations, timeouts).

    Booleans are rejected even though ``bool`` subclasses ``int``.

    Example:
        >>> validate_positive_int(30, "timeout")
        30
        >>> validate_positive_int(0, "timeout")
        ValidationError: timeout must be a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field_name, f"{field_name} must be an integer")

    if value < 1:
        raise ValidationError(field_name, f"{field_name} must be a positive integer")

    return value


def validate_finish_on_key(key: str, field_name: str = "finish_on_key") -> str:
    """
    Validate a DTMF terminator key.

    Must be exactly one of ``0-9``, ``*`` or ``#``.

    Example:
        >>> validate_finish_on_key("#")
        '#'
        >>> validate_finish_on_key("##")
        ValidationError: finish_on_key must be a single key
    """
    if not isinstance(key, str) or len(key) != 1:
        raise ValidationError(field_name, f"{field_name} must be a single key")

    if key not in DTMF_KEYS:
        raise ValidationError(field_name, f"{field_name} must be one of 0-9, * or #")

    return key


def validate_url(url: str, field_name: str = "url") -> str:
    """
    Validate a callback or media URL.

    Only presence is checked; reachability and scheme are left to the
    gateway.
    """
    if not isinstance(url, str) or not url.strip():
        raise ValidationError(field_name, f"{field_name} is required")

    return url.strip()


def validate_required_text(value: str, field_name: str) -> str:
    """Validate a non-empty string value."""
    if not isinstance(value, str) or not value:
        raise ValidationError(field_name, f"{field_name} is required")

    return value


def validate_amount(amount: float, field_name: str = "amount") -> float:
    """
    Validate monetary amount.

    Example:
        >>> validate_amount(100.50)
        100.5
        >>> validate_amount(-10)
        ValidationError: amount must be positive
    """
    if amount is None:
        raise ValidationError(field_name, f"{field_name} is required")

    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValidationError(field_name, f"{field_name} must be a number")

    if amount <= 0:
        raise ValidationError(field_name, f"{field_name} must be positive")

    return float(amount)


def validate_currency_code(currency_code: str) -> str:
    """
    Validate an ISO 4217 currency code.

    Example:
        >>> validate_currency_code("kes")
        'KES'
    """
    if not currency_code:
        raise ValidationError("currency_code", "Currency code is required")

    normalized = currency_code.strip().upper()
    if not CURRENCY_REGEX.match(normalized):
        raise ValidationError("currency_code", "Currency code must be three letters (e.g., KES)")

    return normalized


def mask_phone_number(phone_number: str) -> str:
    """
    Mask phone number for logging purposes.

    Shows only the first 4 and last 3 characters.

    Example:
        >>> mask_phone_number("+254711000111")
        '+254******111'
    """
    if not phone_number or len(phone_number) < 8:
        return "***"

    return f"{phone_number[:4]}{'*' * (len(phone_number) - 7)}{phone_number[-3:]}"


def mask_sensitive_data(data: str, visible_chars: int = 4) -> str:
    """
    Mask sensitive data for logging.

    Example:
        >>> mask_sensitive_data("atsk_12345678", visible_chars=4)
        '*********5678'
    """
    if not data or len(data) <= visible_chars:
        return "*" * len(data) if data else ""

    return "*" * (len(data) - visible_chars) + data[-visible_chars:]
