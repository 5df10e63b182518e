"""
Custom exceptions for M-PESA API operations.

None of these ever carry a consumer secret, initiator password or access
token in their message.
"""


class MpesaException(Exception):
    """Base exception for all M-PESA related errors."""

    def __init__(self, message, error_code=None, response_data=None):
        self.message = message
        self.error_code = error_code
        self.response_data = response_data
        super().__init__(self.message)


class ConfigurationError(MpesaException):
    """Raised when there's a configuration issue."""
    pass


class ValidationError(MpesaException):
    """Raised when request input validation fails, before any network call."""
    pass


class InvalidPhoneNumberError(ValidationError):
    """Raised when phone number format is invalid."""
    pass


class InvalidAmountError(ValidationError):
    """Raised when amount is invalid."""
    pass


class InvalidURLError(ValidationError):
    """Raised when a callback, result or timeout URL is invalid."""
    pass


class EncryptionError(MpesaException):
    """Raised when the security credential cannot be generated."""
    pass


class AuthenticationError(MpesaException):
    """Raised when an access token cannot be obtained."""
    pass


class TokenRequestRejected(AuthenticationError):
    """Raised when the OAuth endpoint answers with a non-200 status."""

    def __init__(self, status, body):
        self.status = status
        self.body = body
        super().__init__(
            f"Token request rejected with status {status}",
            error_code=status,
            response_data=body
        )


class MalformedTokenResponse(AuthenticationError):
    """Raised when the OAuth endpoint answers 200 with an unusable body."""
    pass


class APIError(MpesaException):
    """Raised when an M-PESA API call fails."""
    pass


class NetworkError(APIError):
    """Raised when the request never got an HTTP response (connect, timeout, DNS)."""
    pass


class UnexpectedResponseShape(APIError):
    """Raised when a successful response does not match the expected schema."""
    pass


class RemoteError(APIError):
    """Raised when M-PESA rejects a request with a non-2xx status."""

    def __init__(self, code, description, status=None, response_data=None):
        self.code = code
        self.description = description
        self.status = status
        message = f"M-PESA error {code}: {description}" if code else f"M-PESA error: {description}"
        super().__init__(message, error_code=code, response_data=response_data)
