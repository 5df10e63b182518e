"""
M-PESA Daraja API client for Django

A reusable utility for calling the M-PESA API: access token caching,
security credential encryption and typed request/response handling.
"""

__version__ = "0.1.0"

from .client import Mpesa
from .constants import Environment

__all__ = [
    'Mpesa',
    'Environment',
]
