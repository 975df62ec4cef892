"""SendGridClient - main entry point for the SendGrid admin SDK."""

from __future__ import annotations

from types import TracebackType

from sendgrid_admin._http import HTTPTransport, Transport
from sendgrid_admin.api_keys import APIKeyManager
from sendgrid_admin.config import ClientSettings, get_settings
from sendgrid_admin.retry import BackoffPolicy, Deadline
from sendgrid_admin.template_versions import TemplateVersionManager
from sendgrid_admin.templates import TemplateManager


class SendGridClient:
    """Client for the SendGrid v3 administrative API.

    Holds the transport and configuration only; there is no process-wide
    client. Use as an async context manager so the HTTP connection pool is
    closed, or inject your own ``transport`` and skip the context entirely.

    Example:
        async with SendGridClient(api_key="SG.xxx") as client:
            key = await client.api_keys.create("ci", ["mail.send"])
            template = await client.templates.create("welcome")
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: Transport | None = None,
        settings: ClientSettings | None = None,
    ) -> None:
        """Initialize SendGrid client.

        Args:
            api_key: API key used as Bearer token. Falls back to SENDGRID_API_KEY.
            base_url: API base URL. Falls back to SENDGRID_BASE_URL.
            timeout: Request timeout in seconds. Falls back to SENDGRID_TIMEOUT.
            transport: Pre-built transport; api_key/base_url/timeout are then unused.
            settings: Explicit settings instead of the cached environment ones.
                With an injected transport they are only loaded once a retry
                helper needs them.

        Raises:
            ValueError: If no transport is given and no API key is configured.
        """
        self._settings: ClientSettings | None = settings
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout

        if transport is None:
            config = self.settings
            self._api_key = api_key or config.api_key
            self._base_url = base_url or config.base_url
            self._timeout = timeout if timeout is not None else config.timeout
            if not self._api_key:
                raise ValueError("api_key required (or set SENDGRID_API_KEY env var)")

        self._owned_transport: HTTPTransport | None = None
        self._transport: Transport | None = None
        self._api_keys: APIKeyManager | None = None
        self._templates: TemplateManager | None = None
        self._template_versions: TemplateVersionManager | None = None

        if transport is not None:
            self._bind(transport)

    def _bind(self, transport: Transport) -> None:
        self._transport = transport
        self._api_keys = APIKeyManager(transport)
        self._templates = TemplateManager(transport)
        self._template_versions = TemplateVersionManager(transport)

    async def __aenter__(self) -> SendGridClient:
        """Enter async context, opening the HTTP transport if we own it."""
        if self._transport is None:
            self._owned_transport = HTTPTransport(
                access_token=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
            )
            await self._owned_transport.__aenter__()
            self._bind(self._owned_transport)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context, closing the transport if we opened it."""
        if self._owned_transport:
            await self._owned_transport.__aexit__(exc_type, exc_val, exc_tb)
            self._owned_transport = None
            self._transport = None
            self._api_keys = None
            self._templates = None
            self._template_versions = None

    @property
    def settings(self) -> ClientSettings:
        """Client settings, read from the environment on first access."""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def transport(self) -> Transport:
        """Get the transport."""
        if self._transport is None:
            raise RuntimeError("SendGridClient not initialized. Use 'async with' context.")
        return self._transport

    @property
    def api_keys(self) -> APIKeyManager:
        """API key management API."""
        if self._api_keys is None:
            raise RuntimeError("SendGridClient not initialized. Use 'async with' context.")
        return self._api_keys

    @property
    def templates(self) -> TemplateManager:
        """Transactional template API."""
        if self._templates is None:
            raise RuntimeError("SendGridClient not initialized. Use 'async with' context.")
        return self._templates

    @property
    def template_versions(self) -> TemplateVersionManager:
        """Template version API."""
        if self._template_versions is None:
            raise RuntimeError("SendGridClient not initialized. Use 'async with' context.")
        return self._template_versions

    # Retry helpers

    def new_deadline(self, timeout: float | None = None) -> Deadline:
        """Deadline for one retried operation, defaulting to the configured budget."""
        return Deadline(timeout if timeout is not None else self.settings.retry.timeout)

    def backoff_policy(self) -> BackoffPolicy:
        """Backoff policy built from the configured retry settings."""
        return BackoffPolicy.from_config(self.settings.retry)
