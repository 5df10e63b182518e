"""
Utility modules for M-PESA API operations.
"""

from .http_client import HTTPClient
from .validators import (
    validate_phone_number,
    validate_amount,
    validate_url,
    validate_short_code
)
from .formatters import (
    format_timestamp,
    encode_express_password,
    format_amount
)

__all__ = [
    'HTTPClient',
    'validate_phone_number',
    'validate_amount',
    'validate_url',
    'validate_short_code',
    'format_timestamp',
    'encode_express_password',
    'format_amount',
]
