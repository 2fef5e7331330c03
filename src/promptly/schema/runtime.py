# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Runtime backend: render validator descriptions into live validators.

Each node becomes a pydantic-core core schema; a `FieldValidator` compiles it
into a `SchemaValidator`. Composite validators are assembled from the core
schemas of their children's live validators, so an object validator is the
sum of its field validators.

Acceptance follows zod v3:
    - primitives are type-checked strictly (numbers reject NaN) unless the
      node is coercing, in which case the input is converted first
    - check chains run in order, transforms feed later checks, and every
      violated check is reported
    - absence is the `Unset` sentinel: missing object keys are filled with
      `Unset` before validation, and keys still `Unset` afterwards are dropped
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import Any

from pydantic_core import PydanticCustomError, SchemaValidator, ValidationError
from pydantic_core import core_schema as cs

from ..core.types import Unset, is_unset
from ..errors import SchemaValidationError
from ._formats import (
    MAX_SAFE_INTEGER,
    MIN_SAFE_INTEGER,
    compile_js_regex,
    datetime_pattern,
    is_ip,
    is_multiple_of,
    js_length,
    match_format,
)
from ._literals import format_js_number, js_trim, parse_bigint, parse_js_number
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
    "FieldValidator",
    "ObjectValidator",
    "ParseResult",
    "build_field_validator",
    "build_schema_validator",
    "render_object",
    "render_validator",
)

logger = logging.getLogger(__name__)

Issue = tuple[str, str]
Step = Callable[[Any], tuple[Any, Issue | None]]


# =============================================================================
# Live validators
# =============================================================================


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of `safe_parse`: data on success, error on failure."""

    success: bool
    data: Any = None
    error: SchemaValidationError | None = None


class FieldValidator:
    """Live validator for one assembled field.

    Attributes:
        node: The description this validator was rendered from.
        core_schema: Compiled pydantic-core schema (reused by parents).
        description: Attached description, or None.
    """

    __slots__ = ("_validator", "core_schema", "description", "node")

    def __init__(self, node: Node, core_schema: cs.CoreSchema, description: str | None = None):
        self.node = node
        self.core_schema = core_schema
        self.description = description
        self._validator = SchemaValidator(core_schema)

    def parse(self, value: Any = Unset) -> Any:
        """Validate value and return the (possibly transformed) result.

        Raises:
            SchemaValidationError: Every violation found, with paths.
        """
        try:
            return self._validator.validate_python(value)
        except ValidationError as e:
            raise SchemaValidationError.from_core_error(e) from e

    def safe_parse(self, value: Any = Unset) -> ParseResult:
        """Like parse, but return a ParseResult instead of raising."""
        try:
            return ParseResult(True, self.parse(value))
        except SchemaValidationError as e:
            return ParseResult(False, error=e)

    def __repr__(self) -> str:
        kind = type(self.node).__name__
        return f"{type(self).__name__}({kind}, description={self.description!r})"


class ObjectValidator(FieldValidator):
    """Object validator; `shape` maps each field name to its live validator."""

    __slots__ = ("shape",)

    def __init__(
        self,
        node: ObjectNode,
        shape: dict[str, FieldValidator],
        core_schema: cs.CoreSchema,
        description: str | None = None,
    ):
        super().__init__(node, core_schema, description)
        self.shape = shape


def render_validator(field_node: FieldNode) -> FieldValidator:
    """Render an assembled field into its live validator."""
    node = field_node.node
    if isinstance(node, ObjectNode):
        return render_object(node, field_node.description)
    return FieldValidator(node, _render(node), field_node.description)


def render_object(node: ObjectNode, description: str | None = None) -> ObjectValidator:
    """Render an object node from the live validators of its fields."""
    shape: dict[str, FieldValidator] = {}
    for child in node.shape:
        # repeated names: last declaration wins
        shape.pop(child.name, None)
        shape[child.name] = render_validator(child)
    return ObjectValidator(node, shape, _object_schema(shape, node.unknown_keys), description)


def build_field_validator(field: SchemaField | dict[str, Any]) -> FieldValidator:
    """Build the live validator for a single schema field."""
    return render_validator(build_field_node(field))


def build_schema_validator(fields: list[SchemaField] | list[dict[str, Any]]) -> ObjectValidator:
    """Build the object validator for a whole schema document."""
    return render_object(build_object_node(fields))


# =============================================================================
# Node rendering
# =============================================================================


def _render(node: Node) -> cs.CoreSchema:
    match node:
        case ScalarNode():
            return _with_checks(_scalar_schema(node), node.checks, node.kind)
        case SentinelNode(kind=kind):
            return _sentinel_schema(kind)
        case EnumNode(values=values):
            if not values:
                return _never()
            return _required(cs.literal_schema(list(values)))
        case LiteralNode(value=value):
            return _required(cs.literal_schema([value]))
        case ArrayNode(element=element, checks=checks):
            schema = cs.list_schema(_render(element), strict=True)
            return _with_checks(_required(schema), checks, "array")
        case TupleNode(items=items):
            schema = cs.tuple_schema([_render(i) for i in items])
            schema = cs.no_info_before_validator_function(_expect_list, schema)
            return _required(cs.no_info_after_validator_function(list, schema))
        case ObjectNode():
            return render_object(node).core_schema
        case RecordNode(key=key, value=value) | MapNode(key=key, value=value):
            return _required(cs.dict_schema(_render(key), _render(value), strict=True))
        case SetNode(element=element):
            return _required(cs.set_schema(_render(element), strict=True))
        case UnionNode(options=options):
            if not options:
                return _never()
            return cs.union_schema(
                [_render(o) for o in options],
                mode="left_to_right",
                custom_error_type="invalid_union",
                custom_error_message="Invalid input",
            )
        case TaggedUnionNode(discriminator=discriminator, cases=cases):
            if not cases:
                return _never()
            choices = {value: render_object(case).core_schema for value, case in cases}
            return _required(cs.tagged_union_schema(choices, discriminator))
        case IntersectionNode(left=left, right=right):
            return cs.no_info_plain_validator_function(
                _intersect(
                    render_validator(FieldNode("", left)),
                    render_validator(FieldNode("", right)),
                )
            )
        case ModifierNode(modifier=modifier, inner=inner):
            return _modifier_schema(modifier, _render(inner))
        case FallbackNode(inner=inner, mode=mode, value=value):
            return _fallback_schema(mode, value, _render(inner))
        case _:
            logger.debug(f"No runtime rendering for {type(node).__name__}, accepting anything")
            return cs.any_schema()


def _object_schema(shape: dict[str, FieldValidator], unknown_keys: str) -> cs.CoreSchema:
    extra = {"strip": "ignore", "strict": "forbid", "passthrough": "allow"}[unknown_keys]
    fields = {
        name: cs.typed_dict_field(child.core_schema, required=True)
        for name, child in shape.items()
    }
    schema = cs.typed_dict_schema(fields, extra_behavior=extra)
    schema = cs.no_info_before_validator_function(_fill_missing(tuple(shape)), schema)
    return _required(cs.no_info_after_validator_function(_drop_unset, schema))


# =============================================================================
# Leaves
# =============================================================================


def _received(value: Any) -> str:
    """zod's name for the runtime type of value."""
    if value is Unset:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if isinstance(value, float):
        return "nan" if math.isnan(value) else "number"
    if isinstance(value, int):
        return "number"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, (set, frozenset)):
        return "set"
    if isinstance(value, (date, datetime)):
        return "date"
    return "object"


def _invalid_type(expected: str, value: Any) -> PydanticCustomError:
    return PydanticCustomError(
        "invalid_type",
        "Expected {expected}, received {received}",
        {"expected": expected, "received": _received(value)},
    )


def _reject_missing(value: Any) -> Any:
    if value is Unset:
        raise PydanticCustomError("invalid_type", "Required")
    return value


def _required(schema: cs.CoreSchema) -> cs.CoreSchema:
    return cs.no_info_before_validator_function(_reject_missing, schema)


def _never() -> cs.CoreSchema:
    def reject(value: Any) -> Any:
        raise _invalid_type("never", value)

    return cs.no_info_plain_validator_function(reject)


def _expect_unset(value: Any) -> Any:
    if value is not Unset:
        raise _invalid_type("undefined", value)
    return value


def _expect_nan(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return value
    raise _invalid_type("nan", value)


def _reject_nan(value: Any) -> float:
    if math.isnan(value):
        raise _invalid_type("number", value)
    return float(value)


def _expect_list(value: Any) -> Any:
    if not isinstance(value, list):
        raise _invalid_type("array", value)
    return value


def _sentinel_schema(kind: str) -> cs.CoreSchema:
    match kind:
        case "null":
            return _required(cs.none_schema())
        case "undefined" | "void":
            return cs.no_info_plain_validator_function(_expect_unset)
        case "any" | "unknown":
            return cs.any_schema()
        case "nan":
            return _required(cs.no_info_plain_validator_function(_expect_nan))
        case "symbol":
            # Python has no symbol primitive; nothing is accepted
            def reject_symbol(value: Any) -> Any:
                raise _invalid_type("symbol", value)

            return _required(cs.no_info_plain_validator_function(reject_symbol))
        case _:
            return _never()


def _scalar_schema(node: ScalarNode) -> cs.CoreSchema:
    match node.kind:
        case "string":
            base, coerce = cs.str_schema(strict=True), _to_string
        case "number":
            base = cs.no_info_after_validator_function(
                _reject_nan, cs.float_schema(strict=True, allow_inf_nan=True)
            )
            coerce = _to_number
        case "boolean":
            base, coerce = cs.bool_schema(strict=True), _to_boolean
        case "date":
            base, coerce = cs.datetime_schema(strict=True), _to_date
        case _:
            base, coerce = cs.int_schema(strict=True), _to_bigint
    if node.coerce:
        return cs.no_info_before_validator_function(coerce, base)
    return _required(base)


# =============================================================================
# Coercion (JavaScript conversion rules)
# =============================================================================


def _to_string(value: Any) -> Any:
    if value is Unset:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_js_number(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join("" if x is None or x is Unset else _to_string(x) for x in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def _to_number(value: Any) -> Any:
    if value is Unset:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        return parse_js_number(value)
    if isinstance(value, datetime):
        return value.timestamp() * 1000
    return value


def _to_boolean(value: Any) -> bool:
    if value is Unset or value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, (bool, int, float, str)):
        return bool(value)
    return True


def _to_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if value is None or isinstance(value, bool):
        return datetime.fromtimestamp(int(bool(value)) / 1000, tz=timezone.utc)
    if isinstance(value, (int, float)) and math.isfinite(value):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return value
    return value


def _to_bigint(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return parse_bigint(value)
        except ValueError:
            return value
    return value


# =============================================================================
# Check chains
# =============================================================================


def _with_checks(
    schema: cs.CoreSchema, checks: tuple[Check, ...], category: str
) -> cs.CoreSchema:
    if not checks:
        return schema
    steps = [_compile_check(c, category) for c in checks]
    return cs.no_info_after_validator_function(_run_chain(steps), schema)


def _run_chain(steps: list[Step]) -> Callable[[Any], Any]:
    def run(value: Any) -> Any:
        issues: list[Issue] = []
        for step in steps:
            value, issue = step(value)
            if issue is not None:
                issues.append(issue)
        if len(issues) == 1:
            raise PydanticCustomError(*issues[0])
        if issues:
            raise PydanticCustomError(
                "checks", "; ".join(m for _, m in issues), {"issues": tuple(issues)}
            )
        return value

    return run


def _predicate(code: str, message: str, ok: Callable[[Any], bool]) -> Step:
    return lambda v: (v, None if ok(v) else (code, message))


def _size_steps(check: Check, size: Callable[[Any], int], noun: str, unit: str) -> Step:
    n = 1.0 if check.kind == "nonempty" else check.arg
    shown = format_js_number(n)
    msg = check.message
    match check.kind:
        case "min" | "nonempty":
            return _predicate(
                "too_small",
                msg or f"{noun} must contain at least {shown} {unit}",
                lambda v: not size(v) < n,
            )
        case "max":
            return _predicate(
                "too_big",
                msg or f"{noun} must contain at most {shown} {unit}",
                lambda v: not size(v) > n,
            )
        case _:
            exact = msg or f"{noun} must contain exactly {shown} {unit}"

            def length(v: Any) -> tuple[Any, Issue | None]:
                if size(v) > n:
                    return v, ("too_big", exact)
                if size(v) < n:
                    return v, ("too_small", exact)
                return v, None

            return length


def _compile_regex(pattern: str) -> re.Pattern[str] | None:
    try:
        return compile_js_regex(pattern)
    except re.error as e:
        logger.warning(f"Invalid regex {pattern!r}: {e}; the check rejects every value")
        return None


def _string_step(check: Check) -> Step:
    msg = check.message
    match check.kind:
        case "trim":
            return lambda v: (js_trim(v), None)
        case "toLowerCase":
            return lambda v: (v.lower(), None)
        case "toUpperCase":
            return lambda v: (v.upper(), None)
        case "min" | "max" | "length" | "nonempty":
            return _size_steps(check, js_length, "String", "character(s)")
        case "email" | "url" | "uuid" | "cuid" | "cuid2" | "ulid":
            kind = check.kind
            return _predicate(
                "invalid_string", msg or f"Invalid {kind}", lambda v: match_format(kind, v)
            )
        case "regex":
            pattern = _compile_regex(check.arg)
            return _predicate(
                "invalid_string",
                msg or "Invalid",
                lambda v: pattern is not None and pattern.search(v) is not None,
            )
        case "startsWith":
            prefix = check.arg
            return _predicate(
                "invalid_string",
                msg or f'Invalid input: must start with "{prefix}"',
                lambda v: v.startswith(prefix),
            )
        case "endsWith":
            suffix = check.arg
            return _predicate(
                "invalid_string",
                msg or f'Invalid input: must end with "{suffix}"',
                lambda v: v.endswith(suffix),
            )
        case "datetime":
            opts = check.arg or {}
            dt = datetime_pattern(bool(opts.get("offset")), opts.get("precision"))
            return _predicate(
                "invalid_string", msg or "Invalid datetime", lambda v: dt.fullmatch(v) is not None
            )
        case "ip":
            version = check.arg
            return _predicate("invalid_string", msg or "Invalid ip", lambda v: is_ip(v, version))
        case _:
            return lambda v: (v, None)


def _number_step(check: Check) -> Step:
    msg = check.message
    n = check.arg
    match check.kind:
        case "min":
            return _predicate(
                "too_small",
                msg or f"Number must be greater than or equal to {format_js_number(n)}",
                lambda v: not v < n,
            )
        case "max":
            return _predicate(
                "too_big",
                msg or f"Number must be less than or equal to {format_js_number(n)}",
                lambda v: not v > n,
            )
        case "int":
            return _predicate(
                "invalid_type",
                msg or "Expected integer, received float",
                lambda v: math.isfinite(v) and float(v).is_integer(),
            )
        case "positive":
            return _predicate("too_small", msg or "Number must be greater than 0", lambda v: v > 0)
        case "negative":
            return _predicate("too_big", msg or "Number must be less than 0", lambda v: v < 0)
        case "multipleOf":
            return _predicate(
                "not_multiple_of",
                msg or f"Number must be a multiple of {format_js_number(n)}",
                lambda v: is_multiple_of(v, n),
            )
        case "finite":
            return _predicate("not_finite", msg or "Number must be finite", math.isfinite)
        case "safe":
            low = msg or f"Number must be greater than or equal to {MIN_SAFE_INTEGER}"
            high = msg or f"Number must be less than or equal to {MAX_SAFE_INTEGER}"

            def safe(v: Any) -> tuple[Any, Issue | None]:
                if v < MIN_SAFE_INTEGER:
                    return v, ("too_small", low)
                if v > MAX_SAFE_INTEGER:
                    return v, ("too_big", high)
                return v, None

            return safe
        case _:
            return lambda v: (v, None)


def _compile_check(check: Check, category: str) -> Step:
    match category:
        case "string":
            return _string_step(check)
        case "number":
            return _number_step(check)
        case "array":
            return _size_steps(check, len, "Array", "element(s)")
        case _:
            return lambda v: (v, None)


# =============================================================================
# Objects, intersections and wrappers
# =============================================================================


def _fill_missing(names: tuple[str, ...]) -> Callable[[Any], Any]:
    def fill(value: Any) -> Any:
        if not isinstance(value, dict):
            raise _invalid_type("object", value)
        missing = {name: Unset for name in names if name not in value}
        return {**value, **missing} if missing else value

    return fill


def _drop_unset(value: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in value.items() if v is not Unset}


class _MergeError(Exception):
    pass


def _merge(a: Any, b: Any) -> Any:
    """Merge two successful parse results the way zod intersections do."""
    if a is b or (type(a) is type(b) and a == b):
        return a
    if isinstance(a, dict) and isinstance(b, dict):
        merged = {**a, **b}
        for key in a.keys() & b.keys():
            merged[key] = _merge(a[key], b[key])
        return merged
    if isinstance(a, list) and isinstance(b, list) and len(a) == len(b):
        return [_merge(x, y) for x, y in zip(a, b, strict=True)]
    raise _MergeError


def _intersect(left: FieldValidator, right: FieldValidator) -> Callable[[Any], Any]:
    def validate(value: Any) -> Any:
        issues: list[tuple[str, str, tuple[str | int, ...]]] = []
        results = []
        for side in (left, right):
            outcome = side.safe_parse(value)
            if outcome.success:
                results.append(outcome.data)
            else:
                issues.extend((i.code, i.message, i.path) for i in outcome.error.issues)
        if issues:
            raise PydanticCustomError(
                "invalid_intersection",
                "; ".join(m for _, m, _ in issues),
                {"issues": tuple(issues)},
            )
        try:
            return _merge(*results)
        except _MergeError:
            raise PydanticCustomError(
                "invalid_intersection_types", "Intersection results could not be merged"
            ) from None

    return validate


def _freeze(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    if isinstance(value, dict):
        return MappingProxyType(value)
    if isinstance(value, set):
        return frozenset(value)
    return value


_PASSTHROUGH: dict[str, Callable[[Any], bool]] = {
    "optional": is_unset,
    "nullable": lambda v: v is None,
    "nullish": lambda v: v is None or v is Unset,
}


def _modifier_schema(modifier: str, inner: cs.CoreSchema) -> cs.CoreSchema:
    """optional/nullable/nullish let their values through; readonly freezes."""
    passes = _PASSTHROUGH.get(modifier)
    if passes is None:
        return cs.no_info_after_validator_function(_freeze, inner)

    def wrap(value: Any, handler: cs.ValidatorFunctionWrapHandler) -> Any:
        return value if passes(value) else handler(value)

    return cs.no_info_wrap_validator_function(wrap, inner)


def _fallback_schema(mode: str, fallback: Any, inner: cs.CoreSchema) -> cs.CoreSchema:
    if mode == "default":

        def wrap(value: Any, handler: cs.ValidatorFunctionWrapHandler) -> Any:
            return handler(fallback if value is Unset else value)

    else:

        def wrap(value: Any, handler: cs.ValidatorFunctionWrapHandler) -> Any:
            try:
                return handler(value)
            except ValidationError:
                return fallback

    return cs.no_info_wrap_validator_function(wrap, inner)
