"""SendGrid admin SDK.

A typed async client for the SendGrid v3 administrative API (API keys,
transactional templates and their versions), with rate-limit aware retries
for provisioning workflows.
"""

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from sendgrid_admin._http import HTTPTransport, RawResponse, Transport
from sendgrid_admin.api_keys import APIKeyManager
from sendgrid_admin.client import SendGridClient
from sendgrid_admin.config import ClientSettings, RetryConfig, get_settings
from sendgrid_admin.errors import (
    DeadlineExceededError,
    DecodeError,
    RateLimitedError,
    RemoteError,
    SendGridError,
    TransportError,
    ValidationError,
    classify_response,
)
from sendgrid_admin.retry import BackoffPolicy, Deadline, retry_on_rate_limit
from sendgrid_admin.template_versions import TemplateVersionManager
from sendgrid_admin.templates import TemplateManager
from sendgrid_admin.types import (
    IMPLICIT_SCOPES,
    TEMPLATE_NAME_MAX_LENGTH,
    APIKey,
    Template,
    TemplateGeneration,
    TemplateList,
    TemplateVersion,
)

__all__ = [
    # Client
    "SendGridClient",
    "APIKeyManager",
    "TemplateManager",
    "TemplateVersionManager",
    # Transport
    "Transport",
    "HTTPTransport",
    "RawResponse",
    # Config
    "ClientSettings",
    "RetryConfig",
    "get_settings",
    # Retry
    "BackoffPolicy",
    "Deadline",
    "retry_on_rate_limit",
    # Types
    "APIKey",
    "Template",
    "TemplateGeneration",
    "TemplateList",
    "TemplateVersion",
    "IMPLICIT_SCOPES",
    "TEMPLATE_NAME_MAX_LENGTH",
    # Errors
    "SendGridError",
    "ValidationError",
    "RemoteError",
    "RateLimitedError",
    "DecodeError",
    "TransportError",
    "DeadlineExceededError",
    "classify_response",
]

try:
    __version__ = _pkg_version("sendgrid-admin-sdk")
except PackageNotFoundError:
    __version__ = "unknown"
