# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for promptly.client - PromptClient over a mocked transport."""

from __future__ import annotations

import anyio
import httpx
import pytest

from promptly.client import ModelRef, PromptClient, PromptResult, detect_provider_name
from promptly.errors import PromptlyError
from promptly.schema import ObjectValidator

BASE = "https://api.test"

PROMPTS = {
    "welcome": {
        "promptId": "welcome",
        "promptName": "Welcome",
        "version": "2.0.0",
        "systemMessage": "You are friendly.",
        "userMessage": "Hello ${name}, welcome to ${place}.",
        "config": {
            "model": "claude-sonnet-4",
            "temperature": 0.7,
            "schema": [
                {
                    "id": "1",
                    "name": "greeting",
                    "type": "string",
                    "validations": [{"type": "min", "value": "1", "message": "Required"}],
                    "params": {"description": "The greeting"},
                },
                {"id": "2", "name": "score", "type": "number", "validations": [], "params": {}},
            ],
            "inputData": {"name": "Ada"},
        },
        "publishedVersions": [{"version": "1.0.0", "userMessage": "Hi ${name}"}],
    },
    "plain": {
        "promptId": "plain",
        "promptName": "Plain",
        "version": "1.0.0",
        "systemMessage": "",
        "userMessage": "No variables.",
        "config": {"model": "gpt-4o", "temperature": 0, "schema": []},
    },
}


def handler(request: httpx.Request) -> httpx.Response:
    if request.headers.get("Authorization") != "Bearer test-key":
        return httpx.Response(401, json={"error": "Invalid API key", "code": "INVALID_KEY"})
    prompt_id = request.url.path.rsplit("/", 1)[-1]
    if prompt_id == "limited":
        return httpx.Response(
            429,
            json={
                "error": "Usage limit exceeded",
                "code": "USAGE_LIMIT_EXCEEDED",
                "usage": {"used": 100, "limit": 100},
                "upgradeUrl": "https://example.com/upgrade",
            },
        )
    if prompt_id == "broken":
        return httpx.Response(502, text="<html>bad gateway</html>")
    if prompt_id not in PROMPTS:
        return httpx.Response(404, json={"error": "Prompt not found", "code": "NOT_FOUND"})
    version = request.url.params.get("version")
    if version and version not in ("1.0.0", "2.0.0"):
        return httpx.Response(
            404, json={"error": "Version not found", "code": "VERSION_NOT_FOUND"}
        )
    body = dict(PROMPTS[prompt_id])
    if version:
        body["version"] = version
    return httpx.Response(200, json=body)


def make_client(api_key: str = "test-key") -> PromptClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PromptClient(api_key, base_url=BASE, http_client=http)


class TestProviderDetection:
    @pytest.mark.parametrize(
        "model_id, provider",
        [
            ("claude-sonnet-4", "anthropic"),
            ("GPT-4o", "openai"),
            ("o3-mini", "openai"),
            ("gemini-2.0-flash", "google"),
            ("mistral-large", "mistral"),
            ("llama-3", None),
        ],
    )
    def test_prefixes(self, model_id, provider):
        assert detect_provider_name(model_id) == provider

    def test_model_ref(self):
        assert ModelRef.from_id("gpt-4o") == ModelRef("openai", "gpt-4o")


class TestFetch:
    """Single-prompt fetches."""

    @pytest.mark.anyio
    async def test_get(self):
        """A fetched prompt exposes a callable user message."""
        async with make_client() as client:
            result = await client.get("welcome")
        assert isinstance(result, PromptResult)
        assert result.prompt_name == "Welcome"
        assert result.temperature == 0.7
        assert result.model == ModelRef("anthropic", "claude-sonnet-4")
        assert result.user_message(name="Ada", place="Paris") == "Hello Ada, welcome to Paris."
        assert str(result.user_message) == "Hello ${name}, welcome to ${place}."
        assert result.published_versions[0].version == "1.0.0"
        assert result.config.input_data == {"name": "Ada"}

    @pytest.mark.anyio
    async def test_version_param(self):
        async with make_client() as client:
            result = await client.get("welcome", version="1.0.0")
        assert result.version == "1.0.0"

    @pytest.mark.anyio
    async def test_not_found(self):
        async with make_client() as client:
            with pytest.raises(PromptlyError) as exc:
                await client.get("missing")
        assert exc.value.code == "NOT_FOUND"
        assert exc.value.status == 404

    @pytest.mark.anyio
    async def test_version_not_found(self):
        async with make_client() as client:
            with pytest.raises(PromptlyError) as exc:
                await client.get("welcome", version="9.9.9")
        assert exc.value.code == "VERSION_NOT_FOUND"

    @pytest.mark.anyio
    async def test_invalid_key(self):
        async with make_client("wrong") as client:
            with pytest.raises(PromptlyError) as exc:
                await client.get("welcome")
        assert exc.value.code == "INVALID_KEY"
        assert exc.value.status == 401

    @pytest.mark.anyio
    async def test_usage_limit(self):
        """Usage-limit errors carry usage and the upgrade link."""
        async with make_client() as client:
            with pytest.raises(PromptlyError) as exc:
                await client.get("limited")
        assert exc.value.code == "USAGE_LIMIT_EXCEEDED"
        assert exc.value.usage == {"used": 100, "limit": 100}
        assert exc.value.upgrade_url == "https://example.com/upgrade"

    @pytest.mark.anyio
    async def test_non_json_error_body(self):
        async with make_client() as client:
            with pytest.raises(PromptlyError) as exc:
                await client.get("broken")
        assert exc.value.code == "BAD_REQUEST"
        assert exc.value.message == "HTTP 502: Bad Gateway"


class TestBatch:
    """Concurrent batch fetches."""

    @pytest.mark.anyio
    async def test_order_preserved(self):
        async with make_client() as client:
            results = await client.get_prompts(
                [{"promptId": "plain"}, {"promptId": "welcome", "version": "1.0.0"}]
            )
        assert [r.prompt_id for r in results] == ["plain", "welcome"]
        assert results[1].version == "1.0.0"

    @pytest.mark.anyio
    async def test_empty_batch(self):
        async with make_client() as client:
            assert await client.get_prompts([]) == []

    @pytest.mark.anyio
    async def test_first_failure_raised(self):
        async with make_client() as client:
            with pytest.raises(PromptlyError) as exc:
                await client.get_prompts([{"promptId": "welcome"}, {"promptId": "missing"}])
        assert exc.value.code == "NOT_FOUND"


class TestSchemaOutputs:
    """Schema conversion entry points."""

    @pytest.mark.anyio
    async def test_ai_params(self):
        async with make_client() as client:
            params = await client.ai_params(
                "welcome", variables={"name": "Ada", "place": "Paris"}
            )
        assert params.system == "You are friendly."
        assert params.prompt == "Hello Ada, welcome to Paris."
        assert params.model.provider == "anthropic"
        assert isinstance(params.output, ObjectValidator)
        assert params.output.parse({"greeting": "hi", "score": 3}) == {"greeting": "hi", "score": 3}
        assert not params.output.safe_parse({"greeting": "", "score": 3}).success
        assert params.output.shape["greeting"].description == "The greeting"

    @pytest.mark.anyio
    async def test_ai_params_without_schema(self):
        async with make_client() as client:
            params = await client.ai_params("plain")
        assert params.output is None
        assert params.prompt == "No variables."

    @pytest.mark.anyio
    async def test_zod_source(self):
        async with make_client() as client:
            source = await client.zod_source("welcome")
        assert source == (
            "z.object({\n"
            "  greeting: z.string().min(1, 'Required').describe('The greeting'),\n"
            "  score: z.number(),\n"
            "})"
        )


class TestLifecycle:
    @pytest.mark.anyio
    async def test_borrowed_http_client_left_open(self):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with PromptClient("test-key", base_url=BASE, http_client=http):
            pass
        assert not http.is_closed
        await http.aclose()

    @pytest.mark.anyio
    async def test_owned_http_client_closed(self):
        client = PromptClient("test-key", base_url=BASE)
        await client.aclose()
        assert client._http.is_closed

    @pytest.mark.anyio
    async def test_concurrent_use(self):
        """One client serves overlapping requests."""
        results: list[str] = []
        async with make_client() as client:

            async def fetch(prompt_id: str) -> None:
                results.append((await client.get(prompt_id)).prompt_id)

            async with anyio.create_task_group() as tg:
                tg.start_soon(fetch, "welcome")
                tg.start_soon(fetch, "plain")
        assert sorted(results) == ["plain", "welcome"]
