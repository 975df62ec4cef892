"""HTTP transport for the SendGrid v3 API.

One call is one round trip. Status codes are handed back untouched;
interpreting them is the job of each resource manager.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any, Protocol

import httpx
import structlog

from sendgrid_admin.config import DEFAULT_BASE_URL
from sendgrid_admin.errors import TransportError

logger = structlog.get_logger()


@dataclass(frozen=True)
class RawResponse:
    """Undecoded response: body text plus HTTP status."""

    body: str
    status_code: int


class Transport(Protocol):
    """Anything able to perform a single JSON request against the API."""

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        params: dict[str, Any] | None = None,
    ) -> RawResponse: ...


class HTTPTransport:
    """Async transport for the SendGrid API.

    Wraps httpx.AsyncClient with:
    - Bearer token authentication
    - JSON request bodies
    - Mapping of network failures to TransportError
    - Request/response logging
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        """Initialize transport.

        Args:
            access_token: SendGrid API key used as Bearer token
            base_url: API base URL (e.g., "https://api.sendgrid.com/v3")
            timeout: Default request timeout in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._access_token = access_token
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._log = logger.bind(component="http_transport")

    async def __aenter__(self) -> HTTPTransport:
        """Enter async context, creating HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            headers={
                "Authorization": f"Bearer {self._access_token}",
                "Accept": "application/json",
            },
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context, closing HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the underlying httpx client."""
        if self._client is None:
            raise RuntimeError("HTTPTransport not initialized. Use 'async with' context.")
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        params: dict[str, Any] | None = None,
    ) -> RawResponse:
        """Make an HTTP request to the SendGrid API.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            path: API path relative to the base URL (e.g., "/api_keys")
            json: Request body (will be serialized)
            params: Query parameters; None values are dropped

        Returns:
            RawResponse with the body text and status code

        Raises:
            TransportError: If the request never produced a response
        """
        headers: dict[str, str] = {}
        if json is not None:
            headers["Content-Type"] = "application/json"

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        self._log.debug("sendgrid.request", method=method, path=path)

        try:
            response = await self.client.request(
                method,
                path,
                json=json,
                params=params or None,
                headers=headers or None,
            )
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            self._log.warning(
                "sendgrid.transport_error",
                method=method,
                path=path,
                error=str(exc),
            )
            raise TransportError(
                message=f"{method} {path} failed: {exc}",
                details={"method": method, "path": path},
            ) from exc

        self._log.debug("sendgrid.response", status_code=response.status_code, path=path)
        return RawResponse(body=response.text, status_code=response.status_code)
