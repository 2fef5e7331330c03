# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Exception hierarchy.

PromptlyError: base error carrying an API error code, HTTP status and details.
ConfigurationError: client misconfiguration (missing API key, bad base URL).
SchemaValidationError: structured failure raised by runtime validators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    import httpx
    from pydantic_core import ValidationError as CoreValidationError

__all__ = (
    "ConfigurationError",
    "ErrorCode",
    "PromptlyError",
    "SchemaIssue",
    "SchemaValidationError",
    "error_from_response",
)

ErrorCode = Literal[
    "UNAUTHORIZED",
    "INVALID_KEY",
    "NOT_FOUND",
    "VERSION_NOT_FOUND",
    "BAD_REQUEST",
    "USAGE_LIMIT_EXCEEDED",
    "CONFIGURATION_ERROR",
    "VALIDATION_FAILED",
]


class PromptlyError(Exception):
    """Base error for API and engine failures.

    Attributes:
        message: Human-readable description.
        code: Machine-readable error code.
        status: HTTP status (0 when no response was involved).
        usage: Usage payload returned with USAGE_LIMIT_EXCEEDED.
        upgrade_url: Upgrade link returned with USAGE_LIMIT_EXCEEDED.
        details: Extra context for logging and debugging.
    """

    default_code: ErrorCode = "BAD_REQUEST"

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        status: int = 0,
        usage: Any = None,
        upgrade_url: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code: ErrorCode = code or self.default_code
        self.status = status
        self.usage = usage
        self.upgrade_url = upgrade_url
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict (drops empty optional fields)."""
        data: dict[str, Any] = {
            "error": self.message,
            "code": self.code,
            "status": self.status,
        }
        if self.usage is not None:
            data["usage"] = self.usage
        if self.upgrade_url is not None:
            data["upgradeUrl"] = self.upgrade_url
        if self.details:
            data["details"] = self.details
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r}, status={self.status})"


class ConfigurationError(PromptlyError):
    """Client configuration is missing or invalid."""

    default_code: ErrorCode = "CONFIGURATION_ERROR"


@dataclass(frozen=True, slots=True)
class SchemaIssue:
    """One violated constraint.

    Attributes:
        path: Location of the value (object keys and sequence indexes).
        code: Machine-readable issue type (e.g. "too_small", "missing").
        message: Rule message, or the default message for the check.
    """

    path: tuple[str | int, ...]
    code: str
    message: str

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{'.'.join(str(p) for p in self.path)}: {self.message}"


class SchemaValidationError(PromptlyError):
    """Runtime validation failed; `issues` lists every violation found."""

    default_code: ErrorCode = "VALIDATION_FAILED"

    def __init__(self, issues: tuple[SchemaIssue, ...] | list[SchemaIssue]):
        self.issues = tuple(issues)
        summary = "; ".join(str(i) for i in self.issues) or "Invalid input"
        super().__init__(
            f"Validation failed: {summary}",
            details={"issue_count": len(self.issues)},
        )

    @classmethod
    def from_core_error(cls, exc: CoreValidationError) -> SchemaValidationError:
        """Flatten a pydantic-core ValidationError into issues.

        Check chains report every violated check in one core error; those are
        carried in the error context under "issues" as `(code, message)` pairs, or
        `(code, message, path)` triples when the path reaches below the error
        location, and expanded here.
        """
        issues: list[SchemaIssue] = []
        for err in exc.errors(include_url=False):
            path = tuple(err.get("loc", ()))
            nested = (err.get("ctx") or {}).get("issues")
            if isinstance(nested, (list, tuple)) and nested:
                for code, message, *subpath in nested:
                    sub = tuple(subpath[0]) if subpath else ()
                    issues.append(SchemaIssue(path + sub, code, message))
            else:
                issues.append(SchemaIssue(path, err["type"], err["msg"]))
        return cls(issues)

    @property
    def messages(self) -> list[str]:
        """Issue messages in report order."""
        return [i.message for i in self.issues]


def error_from_response(response: httpx.Response) -> PromptlyError:
    """Build a PromptlyError from a non-2xx API response.

    The API answers with `{"error", "code", "usage"?, "upgradeUrl"?}`; any
    other body falls back to `HTTP <status>: <reason>` with BAD_REQUEST.
    """
    from .models import ErrorResponse

    try:
        body = ErrorResponse.model_validate(response.json())
        return PromptlyError(
            body.error,
            body.code,
            response.status_code,
            usage=body.usage,
            upgrade_url=body.upgrade_url,
        )
    except ValueError:
        return PromptlyError(
            f"HTTP {response.status_code}: {response.reason_phrase}",
            "BAD_REQUEST",
            response.status_code,
        )
