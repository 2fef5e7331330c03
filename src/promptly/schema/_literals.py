# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Literal conversions shared by both backends.

Rule arguments are string-encoded. Numbers are read with JavaScript `Number()`
rules and printed the way JavaScript prints them, so a bound parsed here and
the bound written into generated source are the same number.
"""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal
from typing import Any

__all__ = (
    "JS_WHITESPACE",
    "coerce_default",
    "escape_string",
    "format_js_number",
    "js_trim",
    "parse_bigint",
    "parse_js_number",
    "quote",
)

logger = logging.getLogger(__name__)

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_RADIX_RE = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")

# ECMAScript WhiteSpace and LineTerminator code points
JS_WHITESPACE = (
    "\t\n\v\f\r \u00a0\u1680"
    + "".join(chr(c) for c in range(0x2000, 0x200B))
    + "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def js_trim(text: str) -> str:
    """Strip whitespace the way `String.prototype.trim` does."""
    return text.strip(JS_WHITESPACE)


def parse_js_number(text: str) -> float:
    """Parse text like JavaScript's `Number(text)`; NaN when unparsable."""
    s = js_trim(text)
    if not s:
        return 0.0
    if _RADIX_RE.fullmatch(s):
        return float(int(s, 0))
    if _DECIMAL_RE.fullmatch(s):
        return float(s)
    if s in ("Infinity", "+Infinity"):
        return math.inf
    if s == "-Infinity":
        return -math.inf
    return math.nan


def format_js_number(value: float) -> str:
    """Render a float as JavaScript's `String(value)` would."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if 1e-6 <= abs(value) < 1e21:
        return format(Decimal(repr(value)), "f")
    mantissa, _, exponent = repr(value).partition("e")
    return f"{mantissa}e{int(exponent):+d}"


def parse_bigint(text: str) -> int:
    """Parse text like JavaScript's `BigInt(text)`.

    Raises:
        ValueError: text is not an integer literal.
    """
    s = js_trim(text)
    if not s:
        return 0
    if _RADIX_RE.fullmatch(s):
        return int(s, 0)
    if not re.fullmatch(r"-?\d+", s, re.ASCII):
        raise ValueError(f"Cannot convert {text!r} to a BigInt")
    return int(s)


def coerce_default(raw: str, field_type: str) -> Any:
    """Coerce a default/catch payload by the field's declared type.

    number -> float, boolean -> raw == "true", bigint -> int, else raw string.
    An unparsable bigint payload stays a string (validation rejects it later).
    """
    match field_type:
        case "number":
            return parse_js_number(raw)
        case "boolean":
            return raw == "true"
        case "bigint":
            try:
                return parse_bigint(raw)
            except ValueError:
                logger.warning(f"Default value {raw!r} is not a valid bigint, keeping it as text")
                return raw
        case _:
            return raw


def escape_string(text: str) -> str:
    """Escape backslash, single quote and line breaks for a single-quoted literal."""
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def quote(text: str) -> str:
    return f"'{escape_string(text)}'"
