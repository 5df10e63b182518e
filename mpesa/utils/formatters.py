"""
Data formatting utilities for M-PESA requests.
"""

import base64
from datetime import date, datetime, time
from typing import Optional

from ..constants import BILL_DATE_FORMAT, EXPRESS_TIMESTAMP_FORMAT


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format a timestamp the way M-PESA Express expects it.

    Args:
        moment: Time to format (default: now, local time)

    Returns:
        Timestamp string (e.g., "20240118143000")
    """
    moment = moment or datetime.now()
    return moment.strftime(EXPRESS_TIMESTAMP_FORMAT)


def encode_express_password(business_short_code: str, pass_key: str, timestamp: str) -> str:
    """
    Build the M-PESA Express request password.

    The password is base64(BusinessShortCode + PassKey + Timestamp); the same
    timestamp must be sent in the request's Timestamp field.
    """
    raw = f"{business_short_code}{pass_key}{timestamp}"
    return base64.b64encode(raw.encode('utf-8')).decode('ascii')


def format_amount(amount) -> str:
    """
    Format amount for log messages.

    Returns:
        Formatted string (e.g., "KES 1,000")
    """
    return f"KES {int(amount):,}"


def format_bill_date(value) -> str:
    """
    Format a bill manager due/payment date.

    Strings are passed through unchanged; dates and datetimes become
    "YYYY-MM-DD HH:MM:SS".
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime(BILL_DATE_FORMAT)
    if isinstance(value, date):
        return datetime.combine(value, time.min).strftime(BILL_DATE_FORMAT)
    return str(value)


def format_billed_period(value) -> str:
    """Format a billing period, e.g. date(2024, 8, 1) -> "August 2024"."""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.strftime("%B %Y")
    return str(value)
