"""Shared fixtures for SDK tests."""

from __future__ import annotations

import pytest

from sendgrid_admin import ClientSettings, SendGridClient
from tests.fakes import FakeTransport


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> ClientSettings:
    """Settings independent of the environment, with fast retries."""
    for name in ("SENDGRID_API_KEY", "SENDGRID_BASE_URL", "SENDGRID_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    return ClientSettings(
        api_key="SG.test",
        retry={"timeout": 5.0, "initial_interval": 0.01, "max_interval": 0.05},
    )


@pytest.fixture
def client(transport: FakeTransport, settings: ClientSettings) -> SendGridClient:
    return SendGridClient(transport=transport, settings=settings)
