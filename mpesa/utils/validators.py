"""
Validation utilities for M-PESA request builders.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from ..constants import KENYA_COUNTRY_CODE, PHONE_NUMBER_LENGTH, IdentifierType
from ..exceptions import (
    InvalidAmountError, InvalidPhoneNumberError, InvalidURLError, ValidationError
)

# Safaricom numbers: 2547XXXXXXXX and 2541XXXXXXXX
SAFARICOM_NUMBER_PATTERN = re.compile(r'^254(7|1)\d{8}$')
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$')


def validate_phone_number(phone: str, country_code: str = KENYA_COUNTRY_CODE) -> str:
    """
    Validate and format a Kenyan mobile number.

    Args:
        phone: Phone number to validate
        country_code: Expected country code (default: 254 for Kenya)

    Returns:
        Validated phone number in format: 2547XXXXXXXX

    Raises:
        InvalidPhoneNumberError: If phone number is invalid
    """
    if not phone:
        raise InvalidPhoneNumberError("Phone number is required")

    raw = str(phone).strip()
    if not re.match(r'^\+?[\d\s-]+$', raw):
        raise InvalidPhoneNumberError(f"Phone number must contain only digits. Got: {raw}")

    phone = re.sub(r'\D', '', raw)

    if phone.startswith('0'):
        # Convert 0712345678 to 254712345678
        phone = country_code + phone[1:]
    elif not phone.startswith(country_code):
        # Assume it's missing country code
        phone = country_code + phone

    if len(phone) != PHONE_NUMBER_LENGTH:
        raise InvalidPhoneNumberError(
            f"Phone number must be {PHONE_NUMBER_LENGTH} digits including country code. "
            f"Got: {phone} ({len(phone)} digits)"
        )

    if not SAFARICOM_NUMBER_PATTERN.match(phone):
        raise InvalidPhoneNumberError(
            f"Phone number must be in the format 2547XXXXXXXX or 2541XXXXXXXX. Got: {phone}"
        )

    return phone


def validate_amount(amount, min_amount: float = 1, max_amount: Optional[float] = None) -> int:
    """
    Validate a transaction amount.

    M-PESA only transacts whole shillings, so fractional amounts are rejected.

    Args:
        amount: Amount to validate
        min_amount: Minimum allowed amount (default: 1 KES)
        max_amount: Maximum allowed amount (optional)

    Returns:
        Validated amount as int

    Raises:
        InvalidAmountError: If amount is invalid
    """
    if amount is None or isinstance(amount, bool):
        raise InvalidAmountError("Amount is required")

    try:
        value = float(amount)
    except (ValueError, TypeError):
        raise InvalidAmountError(f"Invalid amount format: {amount}")

    if value != value or value in (float('inf'), float('-inf')):
        raise InvalidAmountError(f"Invalid amount format: {amount}")

    if value <= 0:
        raise InvalidAmountError(f"Amount must be greater than zero. Got: {amount}")

    if not value.is_integer():
        raise InvalidAmountError(f"Amount must be a whole number. Got: {amount}")

    if value < min_amount:
        raise InvalidAmountError(f"Amount must be at least {min_amount}. Got: {amount}")

    if max_amount and value > max_amount:
        raise InvalidAmountError(f"Amount must not exceed {max_amount}. Got: {amount}")

    return int(value)


def validate_url(url: str, field_name: str = "URL") -> str:
    """
    Validate an absolute http(s) URL such as a callback or result URL.

    Raises:
        InvalidURLError: If the URL is missing or not absolute http(s)
    """
    if not url:
        raise InvalidURLError(f"{field_name} is required")

    url = str(url).strip()
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise InvalidURLError(f"{field_name} must be an absolute http(s) URL. Got: {url}")

    return url


def validate_required(value, field_name: str, max_length: Optional[int] = None) -> str:
    """
    Validate a required text field.

    Returns:
        The stripped value

    Raises:
        ValidationError: If the value is missing, blank or too long
    """
    if value is None:
        raise ValidationError(f"{field_name} is required")

    value = str(value).strip()

    if not value:
        raise ValidationError(f"{field_name} cannot be empty")

    if max_length and len(value) > max_length:
        raise ValidationError(
            f"{field_name} too long. Maximum {max_length} characters. "
            f"Got: {len(value)} characters"
        )

    return value


def validate_short_code(short_code) -> str:
    """
    Validate a paybill, till or business short code (5 to 7 digits).

    Raises:
        ValidationError: If the short code is not numeric
    """
    short_code = validate_required(short_code, "Short code")

    if not re.match(r'^\d{5,7}$', short_code):
        raise ValidationError(f"Short code must be 5 to 7 digits. Got: {short_code}")

    return short_code


def validate_choice(value, choices, field_name: str):
    """
    Validate that value is one of the allowed enum members or their values.

    Returns:
        The matching enum member

    Raises:
        ValidationError: If value is not allowed
    """
    for choice in choices:
        if value == choice or value == choice.value:
            return choice

    allowed = ', '.join(str(c.value) for c in choices)
    raise ValidationError(f"Invalid {field_name}: {value}. Expected one of: {allowed}")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate the contact email shown on bill manager invoices.

    Returns:
        The stripped address, or None when no address is given

    Raises:
        ValidationError: If the address is malformed
    """
    if not email:
        return None

    email = str(email).strip()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f"Invalid email address: {email}")

    return email


def validate_party(party, identifier_type) -> str:
    """
    Validate a transaction party according to its identifier type:
    a phone number for MSISDN parties, a short code otherwise.

    Raises:
        ValidationError: If the party does not match its identifier type
    """
    if identifier_type == IdentifierType.MSISDN:
        return validate_phone_number(party)
    return validate_short_code(party)
