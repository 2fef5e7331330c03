# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""promptly - prompt schemas as runtime validators and zod source.

Top-level re-exports, loaded on first access:
- build_schema_validator / build_field_validator -> promptly.schema.runtime
- schema_fields_to_zod_source / field_to_source -> promptly.schema.codegen
- PromptClient, detect_provider_name -> promptly.client
- PromptlyError, SchemaValidationError -> promptly.errors
"""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "build_field_validator": ("promptly.schema.runtime", "build_field_validator"),
    "build_schema_validator": ("promptly.schema.runtime", "build_schema_validator"),
    "FieldValidator": ("promptly.schema.runtime", "FieldValidator"),
    "ObjectValidator": ("promptly.schema.runtime", "ObjectValidator"),
    "field_to_source": ("promptly.schema.codegen", "field_to_source"),
    "schema_fields_to_zod_source": ("promptly.schema.codegen", "schema_fields_to_zod_source"),
    "SchemaField": ("promptly.schema.fields", "SchemaField"),
    "ValidationRule": ("promptly.schema.fields", "ValidationRule"),
    "AiParams": ("promptly.client", "AiParams"),
    "ModelRef": ("promptly.client", "ModelRef"),
    "PromptClient": ("promptly.client", "PromptClient"),
    "PromptResult": ("promptly.client", "PromptResult"),
    "detect_provider_name": ("promptly.client", "detect_provider_name"),
    "PromptClientConfig": ("promptly.config", "PromptClientConfig"),
    "ConfigurationError": ("promptly.errors", "ConfigurationError"),
    "PromptlyError": ("promptly.errors", "PromptlyError"),
    "SchemaValidationError": ("promptly.errors", "SchemaValidationError"),
    "PromptMessage": ("promptly.template", "PromptMessage"),
    "interpolate": ("promptly.template", "interpolate"),
    "Unset": ("promptly.core.types", "Unset"),
}

_LOADED: dict[str, object] = {}


def __getattr__(name: str) -> object:
    """Lazy import attributes on first access."""
    if name in _LOADED:
        return _LOADED[name]

    if name in _LAZY_IMPORTS:
        from importlib import import_module

        module_name, attr_name = _LAZY_IMPORTS[name]
        value = getattr(import_module(module_name), attr_name)
        _LOADED[name] = value
        return value

    raise AttributeError(f"module 'promptly' has no attribute {name!r}")


def __dir__() -> list[str]:
    """List available attributes."""
    return [*_LAZY_IMPORTS, "__version__"]


if TYPE_CHECKING:
    from promptly.client import (
        AiParams,
        ModelRef,
        PromptClient,
        PromptResult,
        detect_provider_name,
    )
    from promptly.config import PromptClientConfig
    from promptly.core.types import Unset
    from promptly.errors import ConfigurationError, PromptlyError, SchemaValidationError
    from promptly.schema.codegen import field_to_source, schema_fields_to_zod_source
    from promptly.schema.fields import SchemaField, ValidationRule
    from promptly.schema.runtime import (
        build_field_validator,
        build_schema_validator,
        FieldValidator,
        ObjectValidator,
    )
    from promptly.template import PromptMessage, interpolate

__all__ = tuple(_LAZY_IMPORTS)
