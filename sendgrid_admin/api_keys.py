"""API key manager for the SendGrid SDK."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from sendgrid_admin._base import BaseManager
from sendgrid_admin.errors import classify_response
from sendgrid_admin.types import APIKey

if TYPE_CHECKING:
    from sendgrid_admin._http import RawResponse

_API_KEY_LIST = TypeAdapter(list[APIKey])


class APIKeyManager(BaseManager):
    """API key management API.

    The secret (``APIKey.api_key``) is only returned by ``create``; keep it
    from that response, later reads come back without it.
    """

    resource = "api_keys"

    async def create(self, name: str, scopes: list[str] | None = None) -> APIKey:
        """Create an API key.

        Args:
            name: Display name, required
            scopes: Permissions to grant. None or empty lets SendGrid pick.

        Returns:
            APIKey including the one-time secret

        Raises:
            ValidationError: If name is empty
            RemoteError: On any status >= 300 (RateLimitedError for 429)
            DecodeError: If the success body is malformed
        """
        self._require(name, "name")

        body = APIKey(name=name, scopes=scopes or []).to_wire()
        response = await self._transport.request("POST", "/api_keys", json=body)
        if response.status_code >= 300:
            raise classify_response(
                response.status_code,
                response.body,
                message="failed creating API key",
            )

        api_key = self._parse(response)
        self._log.debug("api_key.created", api_key_id=api_key.id, name=name)
        return api_key

    async def get(self, api_key_id: str) -> APIKey:
        """Get an API key (without its secret).

        The status code is not checked: whatever comes back is decoded,
        so an error payload surfaces as a DecodeError or an empty key.

        Args:
            api_key_id: API key ID

        Returns:
            APIKey
        """
        self._require(api_key_id, "api_key_id")

        response = await self._transport.request("GET", f"/api_keys/{api_key_id}")
        return self._parse(response)

    async def list(self) -> list[APIKey]:
        """List all API keys.

        Returns:
            API keys, decoded from a bare JSON array
        """
        response = await self._transport.request("GET", "/api_keys")
        return self._decode(_API_KEY_LIST, response.body, what="API keys")

    async def update(
        self,
        api_key_id: str,
        *,
        name: str = "",
        scopes: list[str] | None = None,
    ) -> APIKey:
        """Update an API key.

        With scopes, the key is replaced (PUT) and ends up with exactly
        those scopes. Without, only the name is merged (PATCH); scopes
        cannot be cleared through this call.

        Args:
            api_key_id: API key ID
            name: New name; empty leaves the name alone on PATCH
            scopes: Full replacement scope list

        Returns:
            Updated APIKey

        Raises:
            ValidationError: If api_key_id is empty
            RemoteError: On any status >= 300 (RateLimitedError for 429)
        """
        self._require(api_key_id, "api_key_id")

        method = "PUT" if scopes else "PATCH"
        body = APIKey(name=name, scopes=scopes or []).to_wire()
        response = await self._transport.request(
            method,
            f"/api_keys/{api_key_id}",
            json=body,
        )
        if response.status_code >= 300:
            raise classify_response(
                response.status_code,
                response.body,
                message="failed updating API key",
            )
        return self._parse(response)

    async def delete(self, api_key_id: str) -> None:
        """Delete an API key.

        A key that is already gone (404) counts as deleted.

        Args:
            api_key_id: API key ID

        Raises:
            RemoteError: On any other status >= 300
        """
        self._require(api_key_id, "api_key_id")

        response = await self._transport.request("DELETE", f"/api_keys/{api_key_id}")
        if response.status_code >= 300 and response.status_code != 404:
            raise classify_response(
                response.status_code,
                response.body,
                message="failed deleting API key",
            )
        self._log.debug(
            "api_key.deleted",
            api_key_id=api_key_id,
            already_gone=response.status_code == 404,
        )

    def _parse(self, response: RawResponse) -> APIKey:
        return self._decode(APIKey, response.body, what="API key")
