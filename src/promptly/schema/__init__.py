# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Schema conversion engine: SchemaField documents -> validators and zod source.

Data model:
    SchemaField, ValidationRule, SchemaFieldParams: wire models.

Description tree:
    resolve_type -> apply_validations -> build_field_node / build_object_node

Backends (render the same tree):
    build_field_validator, build_schema_validator: live validators.
    field_to_source, schema_fields_to_zod_source: zod source text.
"""

from .assembler import build_field_node, build_object_node
from .codegen import field_to_source, render_source, schema_fields_to_zod_source
from .fields import (
    DatetimeOptions,
    DiscriminatedUnionCase,
    DiscriminatedUnionSpec,
    IpOptions,
    SchemaField,
    SchemaFieldParams,
    StringOptions,
    ValidationRule,
    as_schema_fields,
)
from .nodes import FieldNode, Node, ObjectNode
from .pipeline import apply_validations
from .resolver import resolve_type, resolve_type_tag
from .runtime import (
    FieldValidator,
    ObjectValidator,
    ParseResult,
    build_field_validator,
    build_schema_validator,
    render_validator,
)

__all__ = (
    "DatetimeOptions",
    "DiscriminatedUnionCase",
    "DiscriminatedUnionSpec",
    "FieldNode",
    "FieldValidator",
    "IpOptions",
    "Node",
    "ObjectNode",
    "ObjectValidator",
    "ParseResult",
    "SchemaField",
    "SchemaFieldParams",
    "StringOptions",
    "ValidationRule",
    "apply_validations",
    "as_schema_fields",
    "build_field_node",
    "build_field_validator",
    "build_object_node",
    "build_schema_validator",
    "field_to_source",
    "render_source",
    "render_validator",
    "resolve_type",
    "resolve_type_tag",
    "schema_fields_to_zod_source",
)
