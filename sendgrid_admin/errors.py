"""SendGrid SDK error types.

Every failure a resource manager can report is one of these. Status codes
are kept on the exception so callers (and the retry wrapper) can branch on
them without parsing messages.
"""

from __future__ import annotations

import json
from typing import Any

TOO_MANY_REQUESTS = 429

_SNIPPET_LIMIT = 500


class SendGridError(Exception):
    """Base error for all SendGrid SDK exceptions."""

    code: str = "internal_error"
    message: str = "An internal error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(SendGridError):
    """A required field is missing; raised before any request is sent."""

    code = "validation_error"
    message = "Validation error"
    status_code = 400


class RemoteError(SendGridError):
    """The API rejected the request.

    Carries the HTTP status and the raw response body.
    """

    code = "remote_error"
    message = "Request rejected by SendGrid"

    def __init__(
        self,
        status_code: int,
        body: str = "",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.status_code = status_code
        self.body = body


class RateLimitedError(RemoteError):
    """Too many requests (429). The only error the retry wrapper retries."""

    code = "rate_limited"
    message = "Rate limit exceeded"
    status_code = TOO_MANY_REQUESTS


class DecodeError(SendGridError):
    """Response body does not decode into the expected shape.

    A malformed body from a request the API accepted points at an internal
    inconsistency, so the status is always 500 whatever the wire said.
    """

    code = "decode_error"
    message = "Failed to decode response"
    status_code = 500

    def __init__(
        self,
        message: str | None = None,
        body: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.body = body


class TransportError(SendGridError):
    """The request never produced a response (DNS, connect, timeout...)."""

    code = "transport_error"
    message = "Transport failure"
    status_code = 500


class DeadlineExceededError(SendGridError):
    """Retry budget ran out, or the caller cancelled the deadline (504).

    Note: Named to avoid shadowing Python's builtin TimeoutError.
    """

    code = "deadline_exceeded"
    message = "Deadline exceeded while retrying"
    status_code = 504


def body_snippet(body: str) -> str:
    """Bounded excerpt of a response body for messages and logs."""
    if len(body) <= _SNIPPET_LIMIT:
        return body
    return body[:_SNIPPET_LIMIT] + "..."


def _error_details(body: str) -> dict[str, Any]:
    try:
        payload = json.loads(body)
    except ValueError:
        payload = None

    if isinstance(payload, dict) and isinstance(payload.get("errors"), list):
        messages = [
            str(item.get("message", ""))
            for item in payload["errors"]
            if isinstance(item, dict)
        ]
        return {"errors": messages}

    return {
        "raw_response_snippet": body[:_SNIPPET_LIMIT],
        "raw_response_truncated": len(body) > _SNIPPET_LIMIT,
    }


def classify_response(
    status_code: int,
    body: str,
    message: str | None = None,
) -> RemoteError:
    """Build the error for a response a resource manager refused.

    Which statuses count as failures is decided by the caller; this only
    picks the class and collects diagnostics.

    Args:
        status_code: HTTP status code
        body: Raw response body (may be empty)
        message: Operation-specific prefix, e.g. "failed creating API key"

    Returns:
        RateLimitedError for 429, RemoteError otherwise
    """
    prefix = message or RemoteError.message
    if body:
        text = f"{prefix}, status: {status_code}, response: {body_snippet(body)}"
    else:
        text = f"{prefix}: {status_code}"

    error_class = RateLimitedError if status_code == TOO_MANY_REQUESTS else RemoteError
    return error_class(
        status_code=status_code,
        body=body,
        message=text,
        details=_error_details(body) if body else {},
    )
