# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Client configuration.

PromptClientConfig resolves the API key from the constructor or the
PROMPTLY_API_KEY environment variable and fails fast when neither is set.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import ConfigurationError

__all__ = ("API_KEY_ENV", "DEFAULT_BASE_URL", "PromptClientConfig")

API_KEY_ENV = "PROMPTLY_API_KEY"
DEFAULT_BASE_URL = "https://api.promptlycms.com"


class PromptClientConfig(BaseModel):
    """Configuration for PromptClient.

    Attributes:
        api_key: Bearer token; falls back to $PROMPTLY_API_KEY.
        base_url: API root, without trailing slash.
        timeout: Per-request timeout in seconds.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(repr=False)
    base_url: str = Field(default=DEFAULT_BASE_URL)
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="before")
    @classmethod
    def _resolve_api_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("api_key"):
            key = os.environ.get(API_KEY_ENV)
            if not key:
                raise ConfigurationError(
                    "Missing API key. Pass api_key to PromptClient or set the "
                    f"{API_KEY_ENV} environment variable.",
                    details={"env": API_KEY_ENV},
                )
            data = {**data, "api_key": key}
        return data
