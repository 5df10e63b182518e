"""
M-PESA API client.

Owns the credentials, the token cache and the HTTP session, and dispatches
every endpoint request through ``Mpesa.send``.
"""

import logging
from typing import Optional, Union

import httpx
import pydantic
from pydantic import SecretStr

from .constants import DEFAULT_SANDBOX_INITIATOR_PASSWORD, DEFAULT_TIMEOUT, Environment
from .endpoints import Endpoint
from .exceptions import (
    APIError, AuthenticationError, ConfigurationError, RemoteError, UnexpectedResponseShape
)
from .schemas import MpesaResponse
from .security import CredentialEncryptor
from .services.account_service import AccountService
from .services.auth_service import AuthService
from .services.b2b_service import B2BService
from .services.b2c_service import B2CService
from .services.bill_manager_service import BillManagerService
from .services.c2b_service import C2BService
from .services.express_service import ExpressService
from .services.qr_service import QRService
from .services.transaction_service import TransactionService
from .token_cache import AccessToken, TokenCache
from .utils.http_client import HTTPClient

logger = logging.getLogger(__name__)


def _secret(value) -> Optional[SecretStr]:
    if value is None or isinstance(value, SecretStr):
        return value
    return SecretStr(value)


class Mpesa:
    """
    Client for the M-PESA Daraja API.

    Example:
        async with Mpesa(key, secret, Environment.SANDBOX) as mpesa:
            response = await mpesa.b2c.send_payment(...)
    """

    def __init__(
        self,
        consumer_key: Union[str, SecretStr],
        consumer_secret: Union[str, SecretStr],
        environment: Union[Environment, str] = Environment.SANDBOX,
        *,
        initiator_name: Optional[str] = None,
        initiator_password: Union[str, SecretStr, None] = None,
        pass_key: Union[str, SecretStr, None] = None,
        token_cache: Optional[TokenCache] = None,
        encryptor: Optional[CredentialEncryptor] = None,
        http_client: Optional[HTTPClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
        token_expiry_margin: int = 0,
    ):
        try:
            self._environment = Environment.from_string(environment)
        except ValueError as e:
            raise ConfigurationError(str(e))

        self._consumer_key = _secret(consumer_key)
        self._consumer_secret = _secret(consumer_secret)
        if not all(s is not None and s.get_secret_value() for s in (self._consumer_key, self._consumer_secret)):
            raise ConfigurationError("Consumer key and consumer secret are required")
        self.initiator_name = initiator_name
        self._initiator_password = _secret(initiator_password)
        self._pass_key = _secret(pass_key)

        self.http_client = http_client or HTTPClient(self._environment.base_url, timeout=timeout)
        self.auth_service = AuthService(self.http_client)
        self.token_cache = token_cache or TokenCache(
            self.auth_service.fetch_token,
            expiry_margin=token_expiry_margin
        )
        self.encryptor = encryptor or CredentialEncryptor()

        self.account = AccountService(self)
        self.b2b = B2BService(self)
        self.b2c = B2CService(self)
        self.c2b = C2BService(self)
        self.transactions = TransactionService(self)
        self.qr = QRService(self)
        self.bill_manager = BillManagerService(self)
        self.express = ExpressService(self)

    @classmethod
    def from_settings(cls, **kwargs) -> 'Mpesa':
        """
        Build a client from Django settings (see ``mpesa.config``).
        Keyword arguments override the injectable collaborators.
        """
        from .config import config

        certificates = None
        if config.certificate_path:
            try:
                with open(config.certificate_path, 'rb') as fh:
                    certificates = {config.environment: fh.read()}
            except OSError as e:
                raise ConfigurationError(f"MPESA_CERTIFICATE_PATH cannot be read: {e.strerror}")

        options = {
            'initiator_name': config.initiator_name,
            'initiator_password': config.initiator_password,
            'pass_key': config.pass_key,
            'timeout': config.timeout,
            'token_expiry_margin': config.token_expiry_margin,
            'encryptor': CredentialEncryptor(certificates),
        }
        options.update(kwargs)
        return cls(config.consumer_key, config.consumer_secret, config.environment, **options)

    def __repr__(self):
        return f"<Mpesa environment={self._environment.value}>"

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the underlying HTTP session."""
        await self.http_client.close()

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def pass_key(self) -> Optional[SecretStr]:
        return self._pass_key

    @property
    def initiator_password(self) -> SecretStr:
        """
        The initiator password, falling back to the public sandbox test
        password in the sandbox environment.

        Raises:
            ConfigurationError: If no password is set outside the sandbox
        """
        if self._initiator_password is not None:
            return self._initiator_password
        if self._environment is Environment.SANDBOX:
            return SecretStr(DEFAULT_SANDBOX_INITIATOR_PASSWORD)
        raise ConfigurationError("An initiator password is required in the production environment")

    def set_initiator_password(self, password: Union[str, SecretStr]):
        self._initiator_password = _secret(password)

    async def get_token(self) -> AccessToken:
        """
        Get a valid access token, using the cache when possible.

        Raises:
            AuthenticationError: If the token request is rejected or malformed
            NetworkError: If the token endpoint cannot be reached
        """
        return await self.token_cache.get_token(
            self._consumer_key, self._consumer_secret, self._environment
        )

    async def is_connected(self) -> bool:
        """Check that the credentials can obtain an access token."""
        try:
            await self.get_token()
        except (AuthenticationError, APIError) as e:
            logger.warning(f"M-PESA connectivity check failed: {e}")
            return False
        return True

    def security_credential(self) -> str:
        """
        Encrypt the initiator password for the client's environment.

        Raises:
            ConfigurationError: If no initiator password is available
            EncryptionError: If the certificate cannot be used
        """
        return self.encryptor.encrypt(
            self.initiator_password.get_secret_value(), self._environment
        )

    async def send(self, endpoint: Endpoint, payload: pydantic.BaseModel) -> MpesaResponse:
        """
        Send one request to an endpoint and parse its response.

        Args:
            endpoint: Endpoint descriptor
            payload: Request schema instance, already validated

        Returns:
            Instance of ``endpoint.response_model``

        Raises:
            ConfigurationError: If the endpoint needs a missing initiator password
            EncryptionError: If the security credential cannot be generated
            AuthenticationError: If no access token can be obtained
            NetworkError: If the request gets no response
            UnexpectedResponseShape: If a 2xx body does not match the schema
            RemoteError: If M-PESA answers with a non-2xx status
        """
        if endpoint.requires_security_credential:
            payload = payload.model_copy(update={'security_credential': self.security_credential()})

        headers = {}
        if endpoint.requires_auth:
            token = await self.get_token()
            headers['Authorization'] = f'Bearer {token.token.get_secret_value()}'

        data = payload.model_dump(by_alias=True, exclude_none=True, mode='json')

        response = await self.http_client.request(
            endpoint.method,
            endpoint.path,
            data=data,
            headers=headers
        )
        return self._handle_response(endpoint, response)

    def _handle_response(self, endpoint: Endpoint, response: httpx.Response) -> MpesaResponse:
        """Classify a response into a typed result or a typed error."""
        if not response.is_success:
            raise self._remote_error(endpoint, response)

        try:
            body = response.json()
        except ValueError:
            logger.error(f"{endpoint.name}: response body is not JSON")
            raise UnexpectedResponseShape(
                f"{endpoint.name} returned a non-JSON body",
                error_code=response.status_code,
                response_data=response.text
            )

        try:
            return endpoint.response_model.model_validate(body)
        except pydantic.ValidationError as e:
            logger.error(f"{endpoint.name}: response does not match {endpoint.response_model.__name__}")
            raise UnexpectedResponseShape(
                f"{endpoint.name} returned an unexpected response: {e.error_count()} validation error(s)",
                error_code=response.status_code,
                response_data=body
            )

    def _remote_error(self, endpoint: Endpoint, response: httpx.Response) -> RemoteError:
        code = None
        description = response.text
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            if body.get('errorCode') or body.get('errorMessage'):
                code = body.get('errorCode')
                description = body.get('errorMessage') or description
            elif body.get('rescode') or body.get('resmsg'):
                code = body.get('rescode')
                description = body.get('resmsg') or description

        if code is not None:
            code = str(code)

        logger.error(f"{endpoint.name} failed with status {response.status_code}: {code} {description}")
        return RemoteError(code, description, status=response.status_code, response_data=response.text)
