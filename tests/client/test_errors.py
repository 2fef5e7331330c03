# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for promptly.errors - error hierarchy and response mapping."""

from __future__ import annotations

import httpx

from promptly.errors import (
    ConfigurationError,
    PromptlyError,
    SchemaIssue,
    SchemaValidationError,
    error_from_response,
)


class TestPromptlyError:
    def test_default_code(self):
        assert PromptlyError("x").code == "BAD_REQUEST"
        assert ConfigurationError("x").code == "CONFIGURATION_ERROR"

    def test_to_dict_drops_empty_fields(self):
        error = PromptlyError("nope", "NOT_FOUND", 404)
        assert error.to_dict() == {"error": "nope", "code": "NOT_FOUND", "status": 404}

    def test_to_dict_usage(self):
        error = PromptlyError(
            "limit", "USAGE_LIMIT_EXCEEDED", 429, usage={"used": 1}, upgrade_url="u"
        )
        data = error.to_dict()
        assert data["usage"] == {"used": 1}
        assert data["upgradeUrl"] == "u"


class TestSchemaValidationError:
    def test_message_lists_issues(self):
        error = SchemaValidationError(
            [SchemaIssue(("a",), "invalid_type", "Required"), SchemaIssue((), "custom", "Bad")]
        )
        assert str(error) == "Validation failed: a: Required; Bad"
        assert error.code == "VALIDATION_FAILED"
        assert error.messages == ["Required", "Bad"]
        assert error.details == {"issue_count": 2}

    def test_nested_path(self):
        assert str(SchemaIssue(("items", 0, "name"), "x", "m")) == "items.0.name: m"


class TestErrorFromResponse:
    def test_api_error_body(self):
        response = httpx.Response(404, json={"error": "Prompt not found", "code": "NOT_FOUND"})
        error = error_from_response(response)
        assert error.message == "Prompt not found"
        assert error.code == "NOT_FOUND"
        assert error.status == 404

    def test_unrecognised_body(self):
        error = error_from_response(httpx.Response(500, json={"detail": "boom"}))
        assert error.message == "HTTP 500: Internal Server Error"
        assert error.code == "BAD_REQUEST"

    def test_non_json_body(self):
        error = error_from_response(httpx.Response(503, text="down"))
        assert error.message == "HTTP 503: Service Unavailable"
        assert error.status == 503
