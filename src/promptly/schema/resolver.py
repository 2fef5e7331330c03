# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Type resolver: type tag + params -> base validator description.

Top-level tags see the whole params bag. Nested tag references (array
elements, tuple members, record/map/set keys and values, union members) go
through `resolve_type_tag`: a known tag resolves as a field of that type with
an empty params bag (so `object` is an empty stripping object), and an
unknown tag resolves to the permissive `unknown` node.
"""

from __future__ import annotations

import logging

from .fields import SchemaField, SchemaFieldParams
from .nodes import (
    UNKNOWN,
    ArrayNode,
    EnumNode,
    FieldNode,
    IntersectionNode,
    LiteralNode,
    MapNode,
    Node,
    ObjectNode,
    RecordNode,
    ScalarNode,
    SentinelNode,
    SetNode,
    TaggedUnionNode,
    TupleNode,
    UnionNode,
)

__all__ = ("COMPOSITE_TAGS", "SCALAR_TAGS", "SENTINEL_TAGS", "resolve_type", "resolve_type_tag")

logger = logging.getLogger(__name__)

SCALAR_TAGS: frozenset[str] = frozenset({"string", "number", "boolean", "date", "bigint"})
SENTINEL_TAGS: frozenset[str] = frozenset(
    {"null", "undefined", "void", "any", "unknown", "never", "nan", "symbol"}
)
COMPOSITE_TAGS: frozenset[str] = frozenset(
    {"enum", "literal", "array", "object", "record", "map", "set", "union", "intersection"}
)


def resolve_type_tag(tag: str | None) -> Node:
    """Resolve a nested type reference (no params, no coercion)."""
    if tag in SCALAR_TAGS:
        return ScalarNode(tag)
    if tag in SENTINEL_TAGS:
        return SentinelNode(tag)
    if tag in COMPOSITE_TAGS:
        return resolve_type(SchemaField(name="", type=tag))
    if tag is not None:
        logger.debug(f"Unknown nested type {tag!r}, using unknown")
    return UNKNOWN


def _resolve_or(tag: str | None, default: Node) -> Node:
    return default if not tag else resolve_type_tag(tag)


def resolve_type(field: SchemaField) -> Node:
    """Resolve a field's type tag and params into its base node.

    Never raises: unknown tags and malformed params degrade to permissive or
    empty acceptance domains.
    """
    params = field.params
    match field.type:
        case "string" | "number" | "boolean" | "date" | "bigint":
            return ScalarNode(field.type, coerce=bool(params.coerce))
        case "null" | "undefined" | "void" | "any" | "unknown" | "never" | "nan" | "symbol":
            return SentinelNode(field.type)
        case "enum":
            return EnumNode(tuple(params.enum_values or ()))
        case "literal":
            values = params.enum_values or []
            return LiteralNode(values[0] if values else "")
        case "array":
            if params.is_tuple and params.tuple_types is not None:
                return TupleNode(tuple(resolve_type_tag(t) for t in params.tuple_types))
            return ArrayNode(_resolve_or(params.element_type, UNKNOWN))
        case "object":
            if params.is_strict:
                return ObjectNode(unknown_keys="strict")
            if params.is_passthrough:
                return ObjectNode(unknown_keys="passthrough")
            return ObjectNode()
        case "record":
            return RecordNode(
                _resolve_or(params.key_type, ScalarNode("string")),
                _resolve_or(params.value_type, UNKNOWN),
            )
        case "map":
            return MapNode(
                _resolve_or(params.key_type, ScalarNode("string")),
                _resolve_or(params.value_type, UNKNOWN),
            )
        case "set":
            return SetNode(_resolve_or(params.element_type, UNKNOWN))
        case "union":
            if params.is_discriminated_union:
                tagged = _resolve_tagged_union(field)
                if tagged is not None:
                    return tagged
            return UnionNode(tuple(resolve_type_tag(t) for t in params.union_types or ()))
        case "intersection":
            members = params.union_types or []
            left = resolve_type_tag(members[0]) if len(members) > 0 else UNKNOWN
            right = resolve_type_tag(members[1]) if len(members) > 1 else UNKNOWN
            return IntersectionNode(left, right)
        case _:
            logger.debug(f"Unknown type {field.type!r} on field {field.name!r}, using unknown")
            return UNKNOWN


# =============================================================================
# Discriminated unions
# =============================================================================


def _case_sources(
    field: SchemaField,
) -> tuple[str, list[tuple[str, list[SchemaField]]]] | None:
    """Find the union definition: params first, then a rule carrying cases."""
    params: SchemaFieldParams = field.params
    union = params.discriminated_union
    if union is not None:
        discriminator = union.discriminator or params.discriminator or ""
        return discriminator, [(c.value, c.fields) for c in union.cases.values()]

    for rule in field.validations:
        if rule.discriminator is not None and rule.cases is not None:
            return rule.discriminator, list(rule.cases.items())
    return None


def _resolve_tagged_union(field: SchemaField) -> TaggedUnionNode | None:
    source = _case_sources(field)
    if source is None:
        logger.debug(f"Field {field.name!r} is a discriminated union without cases")
        return None

    # local import: case fields recurse through the full field assembler
    from .assembler import build_field_node

    discriminator, cases = source
    resolved: list[tuple[str, ObjectNode]] = []
    for value, case_fields in cases:
        shape: list[FieldNode] = [FieldNode(discriminator, LiteralNode(value))]
        shape.extend(build_field_node(f) for f in case_fields)
        resolved.append((value, ObjectNode(tuple(shape))))
    return TaggedUnionNode(discriminator, tuple(resolved))
