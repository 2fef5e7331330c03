# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Prompt API client.

Fetches prompt versions over HTTP and hands their output schemas to the
conversion engine: `ai_params` returns a live validator for the schema,
`zod_source` the equivalent zod source text. Batch fetches run concurrently
and return results in request order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import anyio
import httpx

from .config import PromptClientConfig
from .errors import PromptlyError, error_from_response
from .models import PromptConfig, PromptRequest, PromptResponse, PublishedVersion
from .schema import ObjectValidator, build_schema_validator, schema_fields_to_zod_source
from .template import PromptMessage, interpolate

__all__ = (
    "AiParams",
    "ModelRef",
    "PromptClient",
    "PromptResult",
    "detect_provider_name",
)

logger = logging.getLogger(__name__)

_PROVIDER_PREFIXES: tuple[tuple[str, str], ...] = (
    ("claude", "anthropic"),
    ("gpt", "openai"),
    ("o1", "openai"),
    ("o3", "openai"),
    ("o4", "openai"),
    ("chatgpt", "openai"),
    ("gemini", "google"),
    ("mistral", "mistral"),
    ("mixtral", "mistral"),
    ("codestral", "mistral"),
)


def detect_provider_name(model_id: str) -> str | None:
    """Provider for a model id by case-insensitive prefix, or None."""
    lower = model_id.lower()
    for prefix, provider in _PROVIDER_PREFIXES:
        if lower.startswith(prefix):
            return provider
    return None


@dataclass(frozen=True, slots=True)
class ModelRef:
    """Model id plus its detected provider (None when unrecognized)."""

    provider: str | None
    model_id: str

    @classmethod
    def from_id(cls, model_id: str) -> ModelRef:
        return cls(detect_provider_name(model_id), model_id)


@dataclass(frozen=True, slots=True)
class PromptResult:
    """A fetched prompt with a callable user message and resolved model."""

    prompt_id: str
    prompt_name: str
    version: str
    system_message: str
    user_message: PromptMessage
    config: PromptConfig
    temperature: float
    model: ModelRef
    published_versions: tuple[PublishedVersion, ...] = ()

    @classmethod
    def from_response(cls, response: PromptResponse) -> PromptResult:
        return cls(
            prompt_id=response.prompt_id,
            prompt_name=response.prompt_name,
            version=response.version,
            system_message=response.system_message,
            user_message=PromptMessage(response.user_message),
            config=response.config,
            temperature=response.config.temperature,
            model=ModelRef.from_id(response.config.model),
            published_versions=tuple(response.published_versions or ()),
        )


@dataclass(frozen=True, slots=True)
class AiParams:
    """Ready-to-use generation parameters.

    Attributes:
        system: System message.
        prompt: User message with variables interpolated.
        temperature: Sampling temperature.
        model: Model reference.
        output: Validator for the structured output, None without a schema.
    """

    system: str
    prompt: str
    temperature: float
    model: ModelRef
    output: ObjectValidator | None = None


class PromptClient:
    """Async client for the prompt API.

    Usage:
        async with PromptClient(api_key="...") as client:
            params = await client.ai_params("welcome", variables={"name": "Ada"})
            data = params.output.parse(raw) if params.output else raw
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        config: PromptClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        if config is None:
            overrides: dict[str, Any] = {"api_key": api_key}
            if base_url is not None:
                overrides["base_url"] = base_url
            if timeout is not None:
                overrides["timeout"] = timeout
            config = PromptClientConfig(**overrides)
        self.config = config
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=config.base_url, timeout=config.timeout
        )

    async def __aenter__(self) -> PromptClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_http:
            await self._http.aclose()

    async def fetch(self, prompt_id: str, version: str | None = None) -> PromptResponse:
        """GET /prompts/{prompt_id}[?version=...] as a PromptResponse.

        Raises:
            PromptlyError: Non-2xx response, mapped from the error body.
        """
        url = f"{self.config.base_url}/prompts/{quote(prompt_id, safe='')}"
        params = {"version": version} if version else None
        response = await self._http.get(
            url,
            params=params,
            headers={"Authorization": f"Bearer {self.config.api_key}"},
        )
        if not response.is_success:
            error = error_from_response(response)
            logger.debug(f"Fetching prompt {prompt_id!r} failed: {error.code} ({error.status})")
            raise error
        return PromptResponse.model_validate(response.json())

    async def get(self, prompt_id: str, version: str | None = None) -> PromptResult:
        """Fetch a prompt version and wrap it as a PromptResult."""
        return PromptResult.from_response(await self.fetch(prompt_id, version))

    async def get_prompts(
        self, requests: Sequence[PromptRequest | Mapping[str, Any]]
    ) -> list[PromptResult]:
        """Fetch several prompts concurrently; results keep request order.

        The first failure cancels the remaining fetches and is re-raised.
        """
        entries = [
            r if isinstance(r, PromptRequest) else PromptRequest.model_validate(r)
            for r in requests
        ]
        results: list[PromptResult | None] = [None] * len(entries)
        failure: list[PromptlyError] = []

        async def fetch_one(index: int, entry: PromptRequest) -> None:
            try:
                results[index] = await self.get(entry.prompt_id, entry.version)
            except PromptlyError as e:
                if not failure:
                    failure.append(e)
                tg.cancel_scope.cancel()

        async with anyio.create_task_group() as tg:
            for index, entry in enumerate(entries):
                tg.start_soon(fetch_one, index, entry)

        if failure:
            raise failure[0]
        logger.info(f"Fetched {len(entries)} prompts")
        return [r for r in results if r is not None]

    async def ai_params(
        self,
        prompt_id: str,
        version: str | None = None,
        variables: Mapping[str, str] | None = None,
    ) -> AiParams:
        """Fetch a prompt and build generation parameters.

        The output validator is built from the prompt's schema; an empty
        schema yields `output=None`.
        """
        prompt = await self.fetch(prompt_id, version)
        message = prompt.user_message
        if variables:
            message = interpolate(message, variables)
        fields = prompt.config.schema_fields
        return AiParams(
            system=prompt.system_message,
            prompt=message,
            temperature=prompt.config.temperature,
            model=ModelRef.from_id(prompt.config.model),
            output=build_schema_validator(fields) if fields else None,
        )

    async def zod_source(self, prompt_id: str, version: str | None = None) -> str:
        """Fetch a prompt and render its schema as zod source text."""
        prompt = await self.fetch(prompt_id, version)
        return schema_fields_to_zod_source(prompt.config.schema_fields)
