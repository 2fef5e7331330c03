# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Validator description tree.

Renderer-agnostic description of what a field accepts. The type resolver and
the validation pipeline build it once per field; the runtime and source
backends both render from it, so the type and rule tables exist only once.

Nodes are frozen, slotted dataclasses forming a closed sum type (`Node`).
Constraint and transform steps on strings, numbers and arrays are kept as an
ordered `checks` tuple because their order is observable (`trim` then `min`
measures the trimmed value).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal, TypeAlias

__all__ = (
    "ArrayNode",
    "Check",
    "CheckKind",
    "EnumNode",
    "FallbackNode",
    "FieldNode",
    "IntersectionNode",
    "LiteralNode",
    "MapNode",
    "ModifierNode",
    "Node",
    "ObjectNode",
    "RecordNode",
    "ScalarKind",
    "ScalarNode",
    "SentinelKind",
    "SentinelNode",
    "SetNode",
    "TaggedUnionNode",
    "TupleNode",
    "UnionNode",
    "UnknownKeys",
    "UNKNOWN",
    "with_check",
)

ScalarKind = Literal["string", "number", "boolean", "date", "bigint"]
SentinelKind = Literal["null", "undefined", "void", "any", "unknown", "never", "nan", "symbol"]
UnknownKeys = Literal["strip", "strict", "passthrough"]
Modifier = Literal["optional", "nullable", "nullish", "readonly"]

CheckKind = Literal[
    # size
    "min",
    "max",
    "length",
    "nonempty",
    # string formats
    "email",
    "url",
    "uuid",
    "cuid",
    "cuid2",
    "ulid",
    "regex",
    "startsWith",
    "endsWith",
    "datetime",
    "ip",
    # string transforms
    "trim",
    "toLowerCase",
    "toUpperCase",
    # numeric
    "int",
    "positive",
    "negative",
    "multipleOf",
    "finite",
    "safe",
]


@dataclass(frozen=True, slots=True)
class Check:
    """One ordered constraint or transform.

    Attributes:
        kind: Check tag.
        arg: Argument: a float for size/multipleOf, a str for regex/prefix/
            suffix, a dict of options for datetime, "v4"/"v6" for ip.
        message: Violation text; empty means the default message.
    """

    kind: CheckKind
    arg: Any = None
    message: str = ""


# =============================================================================
# Leaf and container nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class ScalarNode:
    kind: ScalarKind
    coerce: bool = False
    checks: tuple[Check, ...] = ()


@dataclass(frozen=True, slots=True)
class SentinelNode:
    kind: SentinelKind


@dataclass(frozen=True, slots=True)
class EnumNode:
    values: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class LiteralNode:
    value: str


@dataclass(frozen=True, slots=True)
class ArrayNode:
    element: Node
    checks: tuple[Check, ...] = ()


@dataclass(frozen=True, slots=True)
class TupleNode:
    items: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class ObjectNode:
    """Object with a declared shape.

    `shape` keeps declaration order and is not deduplicated; for repeated
    names the last entry wins at runtime, as it does in an object literal.
    """

    shape: tuple[FieldNode, ...] = ()
    unknown_keys: UnknownKeys = "strip"


@dataclass(frozen=True, slots=True)
class RecordNode:
    key: Node
    value: Node


@dataclass(frozen=True, slots=True)
class MapNode:
    key: Node
    value: Node


@dataclass(frozen=True, slots=True)
class SetNode:
    element: Node


@dataclass(frozen=True, slots=True)
class UnionNode:
    """Untagged alternation; the first matching option wins."""

    options: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class TaggedUnionNode:
    """Union of object cases selected by the discriminator key's value."""

    discriminator: str
    cases: tuple[tuple[str, ObjectNode], ...]


@dataclass(frozen=True, slots=True)
class IntersectionNode:
    left: Node
    right: Node


# =============================================================================
# Wrapping nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class ModifierNode:
    """optional / nullable / nullish / readonly around an inner node."""

    modifier: Modifier
    inner: Node


@dataclass(frozen=True, slots=True)
class FallbackNode:
    """default / catch around an inner node.

    Attributes:
        inner: Wrapped node.
        mode: "default" substitutes on absence, "catch" on any failure.
        raw: The rule's string value as written in the schema.
        value: `raw` coerced by the field's declared type.
        value_type: The field's declared type tag (drives literal rendering).
    """

    inner: Node
    mode: Literal["default", "catch"]
    raw: str
    value: Any = field(compare=False)
    value_type: str = "string"


Node: TypeAlias = (
    ScalarNode
    | SentinelNode
    | EnumNode
    | LiteralNode
    | ArrayNode
    | TupleNode
    | ObjectNode
    | RecordNode
    | MapNode
    | SetNode
    | UnionNode
    | TaggedUnionNode
    | IntersectionNode
    | ModifierNode
    | FallbackNode
)


@dataclass(frozen=True, slots=True)
class FieldNode:
    """A finished field: name, decorated node and trailing description."""

    name: str
    node: Node
    description: str | None = None


UNKNOWN = SentinelNode("unknown")


def with_check(node: ScalarNode | ArrayNode, check: Check) -> ScalarNode | ArrayNode:
    """Return a copy of node with check appended to its chain."""
    return replace(node, checks=(*node.checks, check))
