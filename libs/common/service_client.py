"""Reusable async HTTP client for the back-office REST API.

All resource calls go through ``ServiceClient`` so that transport failures
and remote rejections surface as the two exception types below instead of
raw httpx errors.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from libs.common.config import Settings, get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

# Default timeout for API calls (seconds).
_DEFAULT_TIMEOUT = 10.0


class ServiceError(Exception):
    """Base exception for failed API calls."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TransportError(ServiceError):
    """The request did not complete (connection refused, DNS, timeout, bad
    encoding, redirect loop)."""

    def __init__(self, message: str, method: str = None, url: str = None):
        self.method = method
        self.url = url
        super().__init__(message)


class ApplicationError(ServiceError):
    """The API answered with a non-2xx status."""

    def __init__(
        self, message: str, status_code: int = None, response_data: Any = None
    ):
        self.status_code = status_code
        self.response_data = response_data
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "detail", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    text = response.text.strip()
    if text:
        return text
    return f"HTTP {response.status_code}"


class ServiceClient:
    """Base client for making HTTP requests to the back-office API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ServiceClient":
        settings = settings or get_settings()
        return cls(
            settings.BACKOFFICE_API_URL,
            timeout=settings.BACKOFFICE_API_TIMEOUT,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Make a request and return the decoded JSON body.

        Returns None for empty bodies (e.g. 204 on delete).

        Raises:
            TransportError when httpx fails before a response is read.
            ApplicationError on non-2xx responses.
        """
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers={"Content-Type": "application/json"},
                    json=json,
                    params=params,
                )
        except httpx.RequestError as exc:
            logger.error(f"API unreachable: {method} {url} - {exc!r}")
            raise TransportError(
                f"Could not reach the server: {exc}", method=method, url=url
            ) from exc

        if not response.is_success:
            message = _error_message(response)
            logger.error(f"API error: {method} {url} {response.status_code} - {message}")
            try:
                data = response.json()
            except ValueError:
                data = None
            raise ApplicationError(
                message, status_code=response.status_code, response_data=data
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApplicationError(
                "Server returned a non-JSON response",
                status_code=response.status_code,
            ) from exc

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        """Make GET request."""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any) -> Any:
        """Make POST request."""
        return await self.request("POST", path, json=json)

    async def patch(self, path: str, json: Any) -> Any:
        """Make PATCH request."""
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        """Make DELETE request."""
        return await self.request("DELETE", path)
