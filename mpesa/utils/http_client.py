"""
HTTP client for M-PESA API communication.
"""

import httpx
import logging
from typing import Dict, Any, Optional
from mpesa.exceptions import NetworkError
from mpesa.constants import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class HTTPClient:
    """
    Async HTTP client wrapper for M-PESA API requests.
    Handles transport errors and logging; every call is a single attempt.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL for API requests
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={'Accept': 'application/json'}
        )

    def _get_full_url(self, endpoint: str) -> str:
        """Get full URL for endpoint."""
        endpoint = endpoint.lstrip('/')
        return f"{self.base_url}/{endpoint}"

    def _log_request(self, method: str, url: str, headers: Dict, data: Any = None):
        """Log API request details."""
        logger.info(f"M-PESA API Request: {method} {url}")
        logger.debug(f"Headers: {self._sanitize_headers(headers)}")
        if data:
            logger.debug(f"Payload: {self._sanitize_payload(data)}")

    def _log_response(self, response: httpx.Response):
        """Log API response details."""
        logger.info(f"M-PESA API Response: {response.status_code}")
        if response.request.url.path.endswith('/oauth/v1/generate'):
            # Token responses carry the bearer token itself.
            return
        logger.debug(f"Response: {response.text}")

    def _sanitize_headers(self, headers: Dict) -> Dict:
        """Remove sensitive data from headers for logging."""
        sanitized = headers.copy()
        if 'Authorization' in sanitized:
            scheme = sanitized['Authorization'].split(' ', 1)[0]
            sanitized['Authorization'] = f'{scheme} ***'
        return sanitized

    def _sanitize_payload(self, data):
        """Mask credential fields in a request payload for logging."""
        if not isinstance(data, dict):
            return data
        sanitized = data.copy()
        for key in ('SecurityCredential', 'Password'):
            if key in sanitized:
                sanitized[key] = '***'
        return sanitized

    async def request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """
        Make a single HTTP request.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            data: JSON payload (object or array)
            params: Query parameters
            headers: Request headers

        Returns:
            The raw response, whatever its status

        Raises:
            NetworkError: If no response was received
        """
        url = self._get_full_url(endpoint)
        headers = dict(headers or {})
        if data is not None:
            headers.setdefault('Content-Type', 'application/json')

        self._log_request(method, url, headers, data)

        try:
            response = await self.session.request(
                method,
                url,
                json=data,
                params=params,
                headers=headers
            )
        except httpx.TimeoutException as e:
            logger.warning(f"M-PESA API request timed out: {method} {url}")
            raise NetworkError(f"Request to {url} timed out: {type(e).__name__}")
        except httpx.TransportError as e:
            logger.warning(f"M-PESA API request failed: {method} {url}: {type(e).__name__}")
            raise NetworkError(f"Request to {url} failed: {type(e).__name__}: {e}")

        self._log_response(response)
        return response

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """Make GET request to API."""
        return await self.request('GET', endpoint, params=params, headers=headers)

    async def close(self):
        """Close the session."""
        await self.session.aclose()
