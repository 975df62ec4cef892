"""Tests for the provisioning lifecycle helpers."""

from __future__ import annotations

import pytest

from sendgrid_admin import TemplateVersion, resources
from sendgrid_admin.errors import (
    DecodeError,
    DeadlineExceededError,
    RemoteError,
    ValidationError,
)
from sendgrid_admin.resources import APIKeyState, TemplateState
from sendgrid_admin.retry import Deadline

RATE_LIMITED = {"errors": [{"message": "too many requests"}]}


def test_scopes_match_ignores_implicit_scopes():
    assert resources.scopes_match(
        ["mail.send"],
        ["mail.send", "2fa_required", "sender_verification_eligible"],
    )
    assert not resources.scopes_match(["mail.send"], ["mail.send", "templates.read"])


class TestAPIKeyLifecycle:
    @pytest.mark.asyncio
    async def test_create_retries_then_reads_back_keeping_secret(self, client, transport):
        transport.add_response(429, json_body=RATE_LIMITED)
        transport.add_response(
            201,
            json_body={"api_key_id": "key_1", "api_key": "SG.secret", "name": "ci"},
        )
        transport.add_response(
            200,
            json_body={
                "api_key_id": "key_1",
                "name": "ci",
                "scopes": ["mail.send", "sender_verification_eligible"],
            },
        )

        state = await resources.create_api_key(client, "ci", ["mail.send"])

        assert state == APIKeyState(
            id="key_1",
            name="ci",
            scopes=["mail.send", "sender_verification_eligible"],
            api_key="SG.secret",
        )
        assert [(c.method, c.path) for c in transport.calls] == [
            ("POST", "/api_keys"),
            ("POST", "/api_keys"),
            ("GET", "/api_keys/key_1"),
        ]

    @pytest.mark.asyncio
    async def test_create_gives_up_at_deadline(self, client, transport):
        transport.add_response(429, json_body=RATE_LIMITED)

        with pytest.raises(DeadlineExceededError):
            await resources.create_api_key(
                client,
                "ci",
                deadline=Deadline(timeout=0.001),
            )

    @pytest.mark.asyncio
    async def test_update_scopes_uses_put_with_current_name(self, client, transport):
        current = APIKeyState(id="key_1", name="ci", scopes=["mail.send"], api_key="SG.secret")
        transport.add_response(200, json_body={"api_key_id": "key_1", "name": "ci"})
        transport.add_response(
            200,
            json_body={"api_key_id": "key_1", "name": "ci", "scopes": ["templates.read"]},
        )

        state = await resources.update_api_key(client, current, scopes=["templates.read"])

        put = transport.calls[0]
        assert put.method == "PUT"
        assert put.json == {"name": "ci", "scopes": ["templates.read"]}
        assert state.scopes == ["templates.read"]
        assert state.api_key == "SG.secret"

    @pytest.mark.asyncio
    async def test_update_retries_rate_limit_before_reading_back(self, client, transport):
        current = APIKeyState(id="key_1", name="ci", scopes=["mail.send"])
        transport.add_response(429, json_body=RATE_LIMITED)
        transport.add_response(200, json_body={"api_key_id": "key_1", "name": "ci"})
        transport.add_response(
            200,
            json_body={"api_key_id": "key_1", "name": "ci", "scopes": ["templates.read"]},
        )

        state = await resources.update_api_key(client, current, scopes=["templates.read"])

        assert [c.method for c in transport.calls] == ["PUT", "PUT", "GET"]
        assert state.scopes == ["templates.read"]

    @pytest.mark.asyncio
    async def test_read_of_missing_key_has_empty_id(self, client, transport):
        transport.add_response(404, json_body={"errors": [{"message": "not found"}]})

        state = await resources.read_api_key(client, "key_1")

        assert state.id == ""
        assert state.name == ""

    @pytest.mark.asyncio
    async def test_update_skips_implicit_scope_only_changes(self, client, transport):
        current = APIKeyState(
            id="key_1",
            name="ci",
            scopes=["mail.send", "2fa_required"],
        )
        transport.add_response(
            200,
            json_body={"api_key_id": "key_1", "name": "ci", "scopes": ["mail.send"]},
        )

        await resources.update_api_key(client, current, scopes=["mail.send"])

        assert [c.method for c in transport.calls] == ["GET"]

    @pytest.mark.asyncio
    async def test_rename_uses_patch(self, client, transport):
        current = APIKeyState(id="key_1", name="ci", scopes=["mail.send"])
        transport.add_response(200, json_body={"api_key_id": "key_1", "name": "deploy"})
        transport.add_response(200, json_body={"api_key_id": "key_1", "name": "deploy"})

        state = await resources.update_api_key(client, current, name="deploy")

        assert transport.calls[0].method == "PATCH"
        assert transport.calls[0].json == {"name": "deploy"}
        assert state.name == "deploy"

    @pytest.mark.asyncio
    async def test_delete_retries_rate_limit(self, client, transport):
        transport.add_response(429, json_body=RATE_LIMITED)
        transport.add_response(404)

        await resources.delete_api_key(client, "key_1")

        assert len(transport.calls) == 2


class TestTemplateLifecycle:
    @pytest.mark.asyncio
    async def test_create_template(self, client, transport):
        transport.add_response(
            201,
            json_body={"id": "t1", "name": "welcome", "generation": "legacy", "updated_at": "now"},
        )

        state = await resources.create_template(client, "welcome", "legacy")

        assert state == TemplateState(id="t1", name="welcome", generation="legacy", updated_at="now")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("name", "generation"), [("x" * 101, "dynamic"), ("ok", "modern")])
    async def test_create_template_validates_locally(self, client, transport, name, generation):
        with pytest.raises(ValidationError):
            await resources.create_template(client, name, generation)

        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_update_rejects_generation_change(self, client, transport):
        current = TemplateState(id="t1", name="welcome", generation="dynamic")

        with pytest.raises(ValidationError, match="immutable"):
            await resources.update_template(client, current, generation="legacy")

        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_update_only_calls_api_when_name_changes(self, client, transport):
        current = TemplateState(id="t1", name="welcome", generation="dynamic")
        payload = {"id": "t1", "name": "welcome", "generation": "dynamic"}
        transport.add_response(200, json_body=payload)

        state = await resources.update_template(client, current, name="welcome")

        assert [c.method for c in transport.calls] == ["GET"]
        assert state.name == "welcome"

    @pytest.mark.asyncio
    async def test_rename_template_then_read(self, client, transport):
        current = TemplateState(id="t1", name="welcome", generation="dynamic")
        payload = {"id": "t1", "name": "hello", "generation": "dynamic"}
        transport.add_response(200, json_body=payload)
        transport.add_response(200, json_body=payload)

        state = await resources.update_template(client, current, name="hello")

        assert [c.method for c in transport.calls] == ["PATCH", "GET"]
        assert state.name == "hello"

    @pytest.mark.asyncio
    async def test_delete_template_propagates_non_rate_limit_errors(self, client, transport):
        transport.add_response(500)

        with pytest.raises(RemoteError):
            await resources.delete_template(client, "t1")

        assert len(transport.calls) == 1


class TestTemplateVersionLifecycle:
    @pytest.mark.asyncio
    async def test_create_then_read(self, client, transport):
        version = TemplateVersion(template_id="t1", name="v1", subject="Hi")
        payload = {"id": "v1", "template_id": "t1", "name": "v1", "subject": "Hi"}
        transport.add_response(201, json_body=payload)
        transport.add_response(200, json_body={**payload, "thumbnail_url": "https://img"})

        created = await resources.create_template_version(client, version)

        assert created.thumbnail_url == "https://img"
        assert [c.path for c in transport.calls] == [
            "/templates/t1/versions",
            "/templates/t1/versions/v1",
        ]

    @pytest.mark.asyncio
    async def test_update_then_read(self, client, transport):
        version = TemplateVersion(id="v1", template_id="t1", name="v1", subject="Bye")
        payload = {"id": "v1", "template_id": "t1", "name": "v1", "subject": "Bye"}
        transport.add_response(200, json_body=payload)
        transport.add_response(200, json_body=payload)

        updated = await resources.update_template_version(client, version)

        assert updated.subject == "Bye"
        assert [c.method for c in transport.calls] == ["PATCH", "GET"]

    @pytest.mark.asyncio
    async def test_delete(self, client, transport):
        transport.add_response(204)

        await resources.delete_template_version(client, "t1", "v1")

        assert transport.calls[0].method == "DELETE"

    @pytest.mark.asyncio
    async def test_throttled_create_is_decode_error_without_retry(self, client, transport):
        version = TemplateVersion(template_id="t1", name="v1", subject="Hi")
        transport.add_response(429, json_body=RATE_LIMITED)

        with pytest.raises(DecodeError):
            await resources.create_template_version(client, version)

        assert len(transport.calls) == 1
