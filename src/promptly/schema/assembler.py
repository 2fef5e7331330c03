# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Field and object assembly: resolve, apply rules, then attach description."""

from __future__ import annotations

from typing import Any

from .fields import SchemaField, as_schema_fields
from .nodes import FieldNode, ObjectNode
from .pipeline import apply_validations
from .resolver import resolve_type

__all__ = ("build_field_node", "build_object_node")


def build_field_node(field: SchemaField | dict[str, Any]) -> FieldNode:
    """Assemble one field. The description is attached after every rule."""
    if not isinstance(field, SchemaField):
        field = SchemaField.model_validate(field)
    node = apply_validations(resolve_type(field), field)
    return FieldNode(field.name, node, field.params.description or None)


def build_object_node(fields: list[SchemaField] | list[dict[str, Any]]) -> ObjectNode:
    """Assemble fields in declaration order (repeated names are kept)."""
    return ObjectNode(tuple(build_field_node(f) for f in as_schema_fields(fields)))
