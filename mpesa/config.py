"""
Configuration management for the M-PESA client.
"""

from django.conf import settings
from pydantic import SecretStr

from .constants import (
    Environment, DEFAULT_ENVIRONMENT, DEFAULT_TIMEOUT,
    DEFAULT_TOKEN_EXPIRY_MARGIN_SECONDS
)
from .exceptions import ConfigurationError


class MpesaConfig:
    """
    Configuration manager for M-PESA API settings.
    Loads and validates settings from Django settings.
    """

    def __init__(self):
        self._validate_settings()

    @property
    def environment(self) -> Environment:
        """Get the API environment (sandbox or production)."""
        value = getattr(settings, 'MPESA_ENVIRONMENT', DEFAULT_ENVIRONMENT)
        try:
            return Environment.from_string(value)
        except ValueError as e:
            raise ConfigurationError(str(e))

    @property
    def consumer_key(self) -> SecretStr:
        """Get the Daraja app consumer key."""
        return self._required_secret('MPESA_CONSUMER_KEY')

    @property
    def consumer_secret(self) -> SecretStr:
        """Get the Daraja app consumer secret."""
        return self._required_secret('MPESA_CONSUMER_SECRET')

    @property
    def initiator_name(self):
        """Get the initiator username (optional)."""
        return getattr(settings, 'MPESA_INITIATOR_NAME', None)

    @property
    def initiator_password(self):
        """Get the initiator password (optional)."""
        value = getattr(settings, 'MPESA_INITIATOR_PASSWORD', None)
        return SecretStr(value) if value else None

    @property
    def pass_key(self):
        """Get the M-PESA Express pass key (optional)."""
        value = getattr(settings, 'MPESA_PASS_KEY', None)
        return SecretStr(value) if value else None

    @property
    def certificate_path(self):
        """Get a path to a PEM certificate overriding the bundled one (optional)."""
        return getattr(settings, 'MPESA_CERTIFICATE_PATH', None)

    @property
    def timeout(self) -> float:
        """Get the HTTP timeout in seconds."""
        return float(getattr(settings, 'MPESA_TIMEOUT', DEFAULT_TIMEOUT))

    @property
    def token_expiry_margin(self) -> int:
        """Get the number of seconds a token is refreshed before it expires."""
        return int(getattr(
            settings,
            'MPESA_TOKEN_EXPIRY_MARGIN',
            DEFAULT_TOKEN_EXPIRY_MARGIN_SECONDS
        ))

    def _required_secret(self, name: str) -> SecretStr:
        value = getattr(settings, name, '')
        if not value:
            raise ConfigurationError(
                f"{name} is not configured in Django settings. "
                "Please add it to your settings.py or .env file."
            )
        return SecretStr(value)

    def _validate_settings(self):
        """
        Validate settings that can be checked eagerly.
        Raises ConfigurationError if validation fails.
        """
        # Credentials are validated in their property getters, so the config
        # object can exist before they are set.
        self.environment
        if self.token_expiry_margin < 0:
            raise ConfigurationError("MPESA_TOKEN_EXPIRY_MARGIN must not be negative.")


# Singleton instance
config = MpesaConfig()
