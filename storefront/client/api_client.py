"""
Single API client layer: every outbound fetch goes through ``ApiClient``.

Requests carry a timeout and are retried with exponential backoff. Failures
surface as ``ApiError`` subclasses so callers can branch on ``status``:
0 for network failures, 408 for client-side timeouts, the server's status for
HTTP errors.
"""
import asyncio
from typing import Any, Dict, Optional

import httpx

from storefront.config import settings
from storefront.errors import ApiError, HttpError, NetworkError, RequestTimeoutError
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


def safe_json(response: httpx.Response) -> Any:
    """Parse a JSON body, or None when the body is empty or not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def is_retryable(error: ApiError) -> bool:
    if isinstance(error, HttpError):
        return error.retryable
    return isinstance(error, (NetworkError, RequestTimeoutError))


class ApiClient:
    """
    Async JSON client for the storefront API.

    When ``use_external`` is false requests go to the local route handlers
    under ``{base_url}/api``; otherwise straight to ``{base_url}``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        use_external: Optional[bool] = None,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.api_base_url).rstrip("/")
        self.use_external = settings.use_external_api if use_external is None else use_external
        self.auth_token = settings.api_auth_token if auth_token is None else auth_token
        self.timeout = settings.api_timeout if timeout is None else timeout
        self.max_retries = settings.api_max_retries if max_retries is None else max_retries
        self.base_delay = settings.api_retry_base_delay if base_delay is None else base_delay
        self._transport = transport

    def build_url(self, path: str) -> str:
        if self.use_external:
            return f"{self.base_url}{path}"
        return f"{self.base_url}/api{path}"

    def build_headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        final_headers = {"Content-Type": "application/json"}
        if self.auth_token:
            final_headers["Authorization"] = f"Bearer {self.auth_token}"
        final_headers.update(headers or {})
        return final_headers

    async def _send_once(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        body: Any,
        headers: Dict[str, str],
        timeout: float,
    ) -> Any:
        try:
            response = await client.request(
                method,
                url,
                json=body,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(data=str(e)) from e
        except httpx.HTTPError as e:
            raise NetworkError(data=str(e)) from e

        if response.is_error:
            error_data = safe_json(response)
            message = None
            if isinstance(error_data, dict):
                message = error_data.get("message") or error_data.get("detail")
            if not isinstance(message, str) or not message:
                message = f"HTTP {response.status_code}: {response.reason_phrase}"
            raise HttpError(response.status_code, message, data=error_data)

        return safe_json(response)

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Perform a request and return the parsed JSON body.

        Args:
            path: API path, e.g. ``/products?page=2``
            method: HTTP verb
            body: JSON-serialisable request body
            headers: Extra headers (override the defaults)
            timeout: Per-attempt timeout in seconds (defaults to the client's)

        Returns:
            Parsed JSON, or None for an empty body

        Raises:
            ApiError: NetworkError, RequestTimeoutError or HttpError once
                retries are exhausted (4xx responses are not retried)
        """
        url = self.build_url(path)
        final_headers = self.build_headers(headers)
        timeout = self.timeout if timeout is None else timeout

        async with httpx.AsyncClient(transport=self._transport) as client:
            for attempt in range(self.max_retries + 1):
                try:
                    return await self._send_once(client, method, url, body, final_headers, timeout)
                except ApiError as error:
                    if attempt == self.max_retries or not is_retryable(error):
                        logger.warning("%s %s failed: %r", method, url, error)
                        raise
                    # Exponential backoff: 1s, 2s, 4s with the default base
                    delay = self.base_delay * (2 ** attempt)
                    logger.info(
                        "%s %s failed (%r); retry %d/%d in %.1fs",
                        method, url, error, attempt + 1, self.max_retries, delay,
                    )
                    await asyncio.sleep(delay)

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request(path, method="GET", **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs) -> Any:
        return await self.request(path, method="POST", body=body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs) -> Any:
        return await self.request(path, method="PUT", body=body, **kwargs)

    async def patch(self, path: str, body: Any = None, **kwargs) -> Any:
        return await self.request(path, method="PATCH", body=body, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request(path, method="DELETE", **kwargs)
