# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Validation pipeline: fold a field's rules onto its base node, in order.

A rule applies only when the current node's category supports it. Wrapping
nodes are not looked through: after `optional`, `default` and the like, later
constraint rules see a wrapper and are skipped. Mismatched and unknown rules
are logged at DEBUG.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ._literals import coerce_default, parse_js_number
from .nodes import ArrayNode, Check, FallbackNode, ModifierNode, Node, ScalarNode, with_check

if TYPE_CHECKING:
    from .fields import SchemaField, ValidationRule

__all__ = ("apply_validation", "apply_validations")

logger = logging.getLogger(__name__)


def _is_scalar(node: Node, kind: str) -> bool:
    return isinstance(node, ScalarNode) and node.kind == kind


def _datetime_options(field: SchemaField) -> dict[str, object] | None:
    opts = field.params.string_options
    if opts is None or opts.datetime is None:
        return None
    out: dict[str, object] = {}
    if opts.datetime.offset is not None:
        out["offset"] = opts.datetime.offset
    if opts.datetime.precision is not None:
        out["precision"] = opts.datetime.precision
    return out


def _ip_version(field: SchemaField) -> str:
    opts = field.params.string_options
    version = opts.ip.version if opts is not None and opts.ip is not None else None
    return "v6" if version == "v6" else "v4"


def apply_validation(node: Node, rule: ValidationRule, field: SchemaField) -> Node:
    """Apply one rule; return node unchanged when the rule does not apply."""
    is_string = _is_scalar(node, "string")
    is_number = _is_scalar(node, "number")
    is_array = isinstance(node, ArrayNode)

    match rule.type:
        case "min" | "max" | "length":
            bound = parse_js_number(rule.value)
            if is_string or is_array or (is_number and rule.type != "length"):
                return with_check(node, Check(rule.type, bound, rule.message))
        case "email" | "url" | "uuid" | "cuid" | "cuid2" | "ulid":
            if is_string:
                return with_check(node, Check(rule.type, None, rule.message))
        case "regex" | "startsWith" | "endsWith":
            if is_string:
                return with_check(node, Check(rule.type, rule.value, rule.message))
        case "datetime":
            if is_string:
                return with_check(node, Check("datetime", _datetime_options(field), rule.message))
        case "ip":
            if is_string:
                return with_check(node, Check("ip", _ip_version(field), rule.message))
        case "trim" | "toLowerCase" | "toUpperCase":
            if is_string:
                return with_check(node, Check(rule.type))
        case "int" | "positive" | "negative" | "finite" | "safe":
            if is_number:
                return with_check(node, Check(rule.type, None, rule.message))
        case "multipleOf":
            if is_number:
                step = parse_js_number(rule.value)
                return with_check(node, Check("multipleOf", step, rule.message))
        case "nonempty":
            if is_string or is_array:
                return with_check(node, Check("nonempty", None, rule.message))
        case "optional" | "nullable" | "nullish" | "readonly":
            return ModifierNode(rule.type, node)
        case "default" | "catch":
            return FallbackNode(
                node,
                rule.type,
                rule.value,
                coerce_default(rule.value, field.type),
                field.type,
            )
        case "discriminatedUnion":
            # consumed by the resolver
            return node
        case _:
            logger.debug(f"Ignoring unknown rule {rule.type!r} on field {field.name!r}")
            return node

    logger.debug(f"Rule {rule.type!r} does not apply to field {field.name!r}, skipped")
    return node


def apply_validations(node: Node, field: SchemaField) -> Node:
    """Fold `field.validations` left to right onto node."""
    for rule in field.validations:
        node = apply_validation(node, rule, field)
    return node
