# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Source backend: render validator descriptions as zod source text.

Output grammar for a schema document:

    z.object({
      name: <expr>,
      ...
    })

`<expr>` is the constructor call followed by chained check, modifier and
`.describe()` calls in the order the runtime backend applies them. Nested
objects (discriminated-union cases) use the same per-field grammar indented
two more spaces. Output is deterministic for identical input.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ._literals import format_js_number, quote
from .assembler import build_field_node, build_object_node
from .fields import SchemaField
from .nodes import (
    ArrayNode,
    Check,
    EnumNode,
    FallbackNode,
    FieldNode,
    IntersectionNode,
    LiteralNode,
    MapNode,
    ModifierNode,
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

__all__ = (
    "field_to_source",
    "render_node_source",
    "render_object_source",
    "render_source",
    "schema_fields_to_zod_source",
)

logger = logging.getLogger(__name__)

INDENT = "  "
_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


def schema_fields_to_zod_source(fields: list[SchemaField] | list[dict[str, Any]]) -> str:
    """Render a schema document as a `z.object({...})` expression.

    An empty document keeps the envelope's line breaks (a blank line between
    the braces).
    """
    node = build_object_node(fields)
    if not node.shape:
        return "z.object({\n\n})"
    return render_object_source(node)


def field_to_source(field: SchemaField | dict[str, Any], indent: int = 0) -> str:
    """Render one field as a single zod expression."""
    return render_source(build_field_node(field), indent)


def render_source(field_node: FieldNode, indent: int = 0) -> str:
    """Render an assembled field: its node, then `.describe()` when present."""
    source = render_node_source(field_node.node, indent)
    if field_node.description is not None:
        source += f".describe({quote(field_node.description)})"
    return source


def render_object_source(node: ObjectNode, indent: int = 0) -> str:
    """Render an object literal with one `name: expr,` line per field."""
    source = _object_body(node.shape, indent)
    match node.unknown_keys:
        case "strict":
            return source + ".strict()"
        case "passthrough":
            return source + ".passthrough()"
        case _:
            return source


def _object_body(shape: tuple[FieldNode, ...], indent: int) -> str:
    if not shape:
        return "z.object({})"
    pad = INDENT * (indent + 1)
    entries = [f"{pad}{_key(f.name)}: {render_source(f, indent + 1)}," for f in shape]
    return "z.object({\n" + "\n".join(entries) + "\n" + INDENT * indent + "})"


def _key(name: str) -> str:
    """Property keys stay bare when they are identifiers, else quoted."""
    return name if _IDENTIFIER.fullmatch(name) else quote(name)


# =============================================================================
# Nodes
# =============================================================================


def render_node_source(node: Node, indent: int = 0) -> str:
    """Render a node without description."""
    match node:
        case ScalarNode(kind=kind, coerce=coerce, checks=checks):
            prefix = "z.coerce." if coerce else "z."
            return f"{prefix}{kind}()" + _checks_source(checks)
        case SentinelNode(kind=kind):
            return f"z.{kind}()"
        case EnumNode(values=values):
            return f"z.enum([{', '.join(quote(v) for v in values)}])"
        case LiteralNode(value=value):
            return f"z.literal({quote(value)})"
        case ArrayNode(element=element, checks=checks):
            return f"z.array({render_node_source(element, indent)})" + _checks_source(checks)
        case TupleNode(items=items):
            return f"z.tuple([{', '.join(render_node_source(i, indent) for i in items)}])"
        case ObjectNode():
            return render_object_source(node, indent)
        case RecordNode(key=key, value=value):
            return f"z.record({_pair(key, value, indent)})"
        case MapNode(key=key, value=value):
            return f"z.map({_pair(key, value, indent)})"
        case SetNode(element=element):
            return f"z.set({render_node_source(element, indent)})"
        case UnionNode(options=options):
            if not options:
                return "z.never()"
            return f"z.union([{', '.join(render_node_source(o, indent) for o in options)}])"
        case TaggedUnionNode(discriminator=discriminator, cases=cases):
            if not cases:
                return "z.never()"
            objects = ", ".join(render_object_source(case, indent) for _, case in cases)
            return f"z.discriminatedUnion({quote(discriminator)}, [{objects}])"
        case IntersectionNode(left=left, right=right):
            return f"z.intersection({_pair(left, right, indent)})"
        case ModifierNode(modifier=modifier, inner=inner):
            return f"{render_node_source(inner, indent)}.{modifier}()"
        case FallbackNode(inner=inner, mode=mode):
            return f"{render_node_source(inner, indent)}.{mode}({_fallback_literal(node)})"
        case _:
            logger.debug(f"No source rendering for {type(node).__name__}, using z.unknown()")
            return "z.unknown()"


def _pair(first: Node, second: Node, indent: int) -> str:
    return f"{render_node_source(first, indent)}, {render_node_source(second, indent)}"


def _fallback_literal(node: FallbackNode) -> str:
    """Default/catch payload as a bare literal of the field's declared type."""
    match node.value_type:
        case "number":
            return format_js_number(node.value)
        case "boolean":
            return "true" if node.value else "false"
        case "bigint":
            return f"BigInt({quote(node.raw)})"
        case _:
            return quote(node.raw)


# =============================================================================
# Check chains
# =============================================================================


def _args(*parts: str, message: str = "") -> str:
    """Join call arguments; the message is last and only when non-empty."""
    args = [p for p in parts if p]
    if message:
        args.append(quote(message))
    return ", ".join(args)


def _datetime_args(options: dict[str, Any] | None, message: str) -> str:
    entries: list[str] = []
    for key, value in (options or {}).items():
        rendered = ("true" if value else "false") if isinstance(value, bool) else str(value)
        entries.append(f"{key}: {rendered}")
    if message:
        entries.append(f"message: {quote(message)}")
    return "{ " + ", ".join(entries) + " }" if entries else ""


def _check_source(check: Check) -> str:
    msg = check.message
    match check.kind:
        case "min" | "max" | "length" | "multipleOf":
            return f".{check.kind}({_args(format_js_number(check.arg), message=msg)})"
        case "regex":
            return f".regex({_args(f'new RegExp({quote(check.arg)})', message=msg)})"
        case "startsWith" | "endsWith":
            return f".{check.kind}({_args(quote(check.arg), message=msg)})"
        case "datetime":
            return f".datetime({_datetime_args(check.arg, msg)})"
        case "ip":
            options = [f"version: {quote(check.arg)}"]
            if msg:
                options.append(f"message: {quote(msg)}")
            return f".ip({{ {', '.join(options)} }})"
        case "trim" | "toLowerCase" | "toUpperCase":
            return f".{check.kind}()"
        case _:
            # string formats, nonempty and the argument-free numeric checks
            return f".{check.kind}({_args(message=msg)})"


def _checks_source(checks: tuple[Check, ...]) -> str:
    return "".join(_check_source(c) for c in checks)
