"""
Authentication service for the M-PESA API.
Fetches OAuth access tokens; caching is left to TokenCache.
"""

import base64
import logging
from typing import Tuple

from pydantic import SecretStr

from ..constants import APIEndpoints, Environment, TOKEN_GRANT_TYPE
from ..exceptions import MalformedTokenResponse, TokenRequestRejected
from ..utils.http_client import HTTPClient

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service for obtaining M-PESA access tokens.
    Each call performs exactly one request to the token endpoint.
    """

    def __init__(self, http_client: HTTPClient):
        self.http_client = http_client

    @staticmethod
    def basic_auth_header(consumer_key: SecretStr, consumer_secret: SecretStr) -> dict:
        """
        Build the HTTP Basic authorization header for the token endpoint.

        Returns:
            Dictionary with Authorization header
        """
        raw = f"{consumer_key.get_secret_value()}:{consumer_secret.get_secret_value()}"
        encoded = base64.b64encode(raw.encode('utf-8')).decode('ascii')
        return {'Authorization': f'Basic {encoded}'}

    async def fetch_token(
        self,
        consumer_key: SecretStr,
        consumer_secret: SecretStr,
        environment: Environment
    ) -> Tuple[str, int]:
        """
        Fetch a new access token from the M-PESA OAuth endpoint.

        Args:
            consumer_key: Daraja app consumer key
            consumer_secret: Daraja app consumer secret
            environment: Environment the token is requested for

        Returns:
            Tuple of (access token, lifetime in seconds)

        Raises:
            TokenRequestRejected: If the endpoint answers with a non-200 status
            MalformedTokenResponse: If the body is not a usable token response
            NetworkError: If the endpoint cannot be reached
        """
        logger.info(f"Requesting new M-PESA access token ({environment.value})")

        response = await self.http_client.get(
            endpoint=APIEndpoints.GENERATE_TOKEN,
            params={'grant_type': TOKEN_GRANT_TYPE},
            headers=self.basic_auth_header(consumer_key, consumer_secret)
        )

        if response.status_code != 200:
            logger.error(f"Token request rejected with status {response.status_code}")
            raise TokenRequestRejected(response.status_code, response.text)

        try:
            body = response.json()
        except ValueError:
            raise MalformedTokenResponse("Token response is not valid JSON")

        if not isinstance(body, dict):
            raise MalformedTokenResponse("Token response is not a JSON object")

        token = body.get('access_token')
        if not token or not isinstance(token, str):
            raise MalformedTokenResponse("Token response has no access_token")

        expires_in = body.get('expires_in')
        # Usually sent as a numeric string, e.g. "3599".
        if isinstance(expires_in, bool):
            expires_in = None
        try:
            expires_in = int(expires_in)
        except (TypeError, ValueError):
            raise MalformedTokenResponse(f"Token response has an invalid expires_in: {expires_in!r}")

        if expires_in <= 0:
            raise MalformedTokenResponse(f"Token response has a non-positive expires_in: {expires_in}")

        logger.info(f"Obtained M-PESA access token valid for {expires_in}s")
        return token, expires_in
