"""Fake implementations for testing.

FakeTransport lets resource manager tests run without HTTP.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from sendgrid_admin._http import RawResponse
from sendgrid_admin.errors import TransportError


@dataclass
class FakeCall:
    """One recorded transport call."""

    method: str
    path: str
    json: Any | None = None
    params: dict[str, Any] | None = None


class FakeTransport:
    """Fake transport for unit testing.

    Records all calls for assertion and replays queued responses in order.
    """

    def __init__(self) -> None:
        self.calls: list[FakeCall] = []
        self._responses: list[RawResponse | Exception] = []

    def add_response(
        self,
        status_code: int = 200,
        *,
        json_body: Any | None = None,
        text: str = "",
    ) -> None:
        body = json.dumps(json_body) if json_body is not None else text
        self._responses.append(RawResponse(body=body, status_code=status_code))

    def add_error(self, error: Exception | None = None) -> None:
        self._responses.append(error or TransportError(message="connection refused"))

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        params: dict[str, Any] | None = None,
    ) -> RawResponse:
        self.calls.append(FakeCall(method=method, path=path, json=json, params=params))
        if not self._responses:
            raise AssertionError(f"unexpected request: {method} {path}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response
