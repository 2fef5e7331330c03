# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Prompt API wire models.

The API speaks camelCase JSON; models accept it as-is and expose snake_case
attributes. Unknown keys are kept so newer API fields do not break decoding.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from .errors import ErrorCode
from .schema.fields import SchemaField

__all__ = (
    "ErrorResponse",
    "PromptConfig",
    "PromptRequest",
    "PromptResponse",
    "PublishedVersion",
)


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class PromptConfig(_ApiModel):
    """Model settings and output schema of a prompt version.

    Attributes:
        schema_fields: Output schema as an ordered SchemaField list (JSON key
            `schema`).
        model: Model identifier, e.g. "claude-sonnet-4".
        temperature: Sampling temperature.
        input_data: Sample input payload, opaque to the client.
        input_data_root_name: Root name for `input_data`, if any.
    """

    schema_fields: list[SchemaField] = Field(default_factory=list, alias="schema")
    model: str = ""
    temperature: float = 0.0
    input_data: JsonValue = Field(default=None, alias="inputData")
    input_data_root_name: str | None = Field(default=None, alias="inputDataRootName")


class PublishedVersion(_ApiModel):
    version: str
    user_message: str = Field(alias="userMessage")


class PromptResponse(_ApiModel):
    """One prompt version as served by `GET /prompts/{id}`."""

    prompt_id: str = Field(alias="promptId")
    prompt_name: str = Field(default="", alias="promptName")
    version: str = ""
    system_message: str = Field(default="", alias="systemMessage")
    user_message: str = Field(default="", alias="userMessage")
    config: PromptConfig = Field(default_factory=PromptConfig)
    published_versions: list[PublishedVersion] | None = Field(
        default=None, alias="publishedVersions"
    )


class ErrorResponse(_ApiModel):
    """Error body returned with non-2xx responses."""

    error: str
    code: ErrorCode | str
    usage: Any = None
    upgrade_url: str | None = Field(default=None, alias="upgradeUrl")


class PromptRequest(_ApiModel):
    """One entry of a batch fetch."""

    prompt_id: str = Field(alias="promptId")
    version: str | None = None
