# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for promptly.config - PromptClientConfig."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from promptly.config import API_KEY_ENV, DEFAULT_BASE_URL, PromptClientConfig
from promptly.errors import ConfigurationError


class TestPromptClientConfig:
    """Tests for PromptClientConfig."""

    def test_explicit_key(self, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV, raising=False)
        config = PromptClientConfig(api_key="k")
        assert config.api_key == "k"
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == 30.0

    def test_key_from_environment(self, monkeypatch):
        """The environment is used when no key is passed."""
        monkeypatch.setenv(API_KEY_ENV, "env-key")
        assert PromptClientConfig().api_key == "env-key"
        assert PromptClientConfig(api_key=None).api_key == "env-key"

    def test_missing_key_fails_fast(self, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV, raising=False)
        with pytest.raises(ConfigurationError) as exc:
            PromptClientConfig()
        assert exc.value.code == "CONFIGURATION_ERROR"
        assert API_KEY_ENV in exc.value.message

    def test_base_url_trailing_slash(self):
        assert PromptClientConfig(api_key="k", base_url="http://x/").base_url == "http://x"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            PromptClientConfig(api_key="k", timeout=0)

    def test_key_hidden_from_repr(self):
        assert "secret" not in repr(PromptClientConfig(api_key="secret"))

    def test_frozen(self):
        config = PromptClientConfig(api_key="k")
        with pytest.raises(ValidationError):
            config.timeout = 5
