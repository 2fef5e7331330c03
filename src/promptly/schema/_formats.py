# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""String format and numeric predicates with zod v3 acceptance rules.

Patterns are the ones zod ships, compiled with `re.ASCII` so that `\\d`, `\\w`
and case folding mean what they mean in a JavaScript RegExp. A value accepted
here is accepted by the generated source and vice versa. All string patterns
are matched in full.
"""

from __future__ import annotations

import ipaddress
import math
import re
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from urllib.parse import unquote

from ._literals import JS_WHITESPACE

__all__ = (
    "MAX_SAFE_INTEGER",
    "MIN_SAFE_INTEGER",
    "compile_js_regex",
    "datetime_pattern",
    "is_ip",
    "is_multiple_of",
    "is_url",
    "js_length",
    "match_format",
    "translate_js_regex",
)

MAX_SAFE_INTEGER = 2**53 - 1
MIN_SAFE_INTEGER = -(2**53 - 1)

# JavaScript's \s, spelled out for a Python character class
_JS_SPACE = "".join(f"\\u{ord(ch):04x}" for ch in JS_WHITESPACE)

_FORMATS: dict[str, re.Pattern[str]] = {
    "email": re.compile(
        r"(?!\.)(?!.*\.\.)([A-Z0-9_'+\-\.]*)[A-Z0-9_+-]@([A-Z0-9][A-Z0-9\-]*\.)+[A-Z]{2,}",
        re.IGNORECASE | re.ASCII,
    ),
    "uuid": re.compile(
        r"[0-9a-fA-F]{8}\b-[0-9a-fA-F]{4}\b-[0-9a-fA-F]{4}\b-[0-9a-fA-F]{4}\b-[0-9a-fA-F]{12}",
        re.IGNORECASE | re.ASCII,
    ),
    "cuid": re.compile(rf"c[^{_JS_SPACE}-]{{8,}}", re.IGNORECASE | re.ASCII),
    "cuid2": re.compile(r"[0-9a-z]+", re.ASCII),
    "ulid": re.compile(r"[0-9A-HJKMNP-TV-Z]{26}", re.IGNORECASE | re.ASCII),
}

_DATE = (
    r"((\d\d[2468][048]|\d\d[13579][26]|\d\d0[48]|[02468][048]00|[13579][26]00)-02-29"
    r"|\d{4}-((0[13578]|1[02])-(0[1-9]|[12]\d|3[01])|(0[469]|11)-(0[1-9]|[12]\d|30)"
    r"|(02)-(0[1-9]|1\d|2[0-8])))"
)
_TIME = r"([01]\d|2[0-3]):[0-5]\d:[0-5]\d"
_IPV4_OCTET = r"((25[0-5])|(2[0-4][0-9])|(1[0-9]{2})|([0-9]{1,2}))"
_IPV4 = re.compile(rf"({_IPV4_OCTET}\.){{3}}{_IPV4_OCTET}", re.ASCII)


def match_format(kind: str, value: str) -> bool:
    """True if value matches the named lexical format (email, uuid, ...)."""
    if kind == "url":
        return is_url(value)
    return _FORMATS[kind].fullmatch(value) is not None


@lru_cache(maxsize=32)
def datetime_pattern(offset: bool = False, precision: int | None = None) -> re.Pattern[str]:
    """ISO-8601 datetime pattern.

    Args:
        offset: Also accept `+hh:mm` offsets (UTC `Z` is always accepted).
        precision: Exact number of fraction digits; None allows any, 0 none.
    """
    time = _TIME
    if precision:
        time = rf"{time}\.\d{{{precision}}}"
    elif precision is None:
        time = rf"{time}(\.\d+)?"
    zone = r"(Z|([+-]\d{2}:?\d{2}))" if offset else r"(Z)"
    return re.compile(f"{_DATE}T{time}{zone}", re.ASCII)


# =============================================================================
# Regular expressions
# =============================================================================


def translate_js_regex(pattern: str) -> str:
    """Rewrite a JavaScript RegExp source (no flags) for Python's `re`.

    `$` anchors at the very end only, `\\s` is JavaScript's whitespace set,
    `[]` never matches, `[^]` matches anything, and `(?<name>...)` /
    `\\k<name>` become Python named groups. Compile the result with
    `re.ASCII`.
    """
    out: list[str] = []
    in_class = False
    i, n = 0, len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "\\" and i + 1 < n:
            esc = pattern[i + 1]
            if esc == "s":
                out.append(_JS_SPACE if in_class else f"[{_JS_SPACE}]")
            elif esc == "S" and not in_class:
                out.append(f"[^{_JS_SPACE}]")
            elif esc == "k" and not in_class and pattern.startswith("<", i + 2):
                close = pattern.find(">", i + 3)
                if close != -1:
                    out.append(f"(?P={pattern[i + 3:close]})")
                    i = close + 1
                    continue
                out.append("\\k")
            else:
                out.append(pattern[i : i + 2])
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
            elif ch == "[":
                ch = "\\["
            out.append(ch)
            i += 1
            continue
        if pattern.startswith("[]", i):
            out.append("(?!)")
            i += 2
            continue
        if pattern.startswith("[^]", i):
            out.append("[\\s\\S]")
            i += 3
            continue
        if ch == "[":
            in_class = True
            # a leading ] or ^] belongs to the class in Python but not in JavaScript
            out.append("[^" if pattern.startswith("[^", i) else "[")
            i += 2 if pattern.startswith("[^", i) else 1
            continue
        if ch == "$":
            out.append("\\Z")
        elif pattern.startswith("(?<", i) and pattern[i + 3 : i + 4] not in ("=", "!"):
            out.append("(?P<")
            i += 3
            continue
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def compile_js_regex(pattern: str) -> re.Pattern[str]:
    """Compile a JavaScript RegExp source with JavaScript matching rules.

    Raises:
        re.error: The pattern is not valid.
    """
    return re.compile(translate_js_regex(pattern), re.ASCII)


# =============================================================================
# URLs (WHATWG `new URL(value)` acceptance)
# =============================================================================

_URL_SCHEME = re.compile(r"([A-Za-z][A-Za-z0-9+.\-]*):", re.ASCII)
_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp", "file"})
_C0_OR_SPACE = "".join(chr(c) for c in range(0x21))
_FORBIDDEN_HOST = frozenset("\x00\t\n\r #/:<>?@[\\]^|")
_FORBIDDEN_DOMAIN = _FORBIDDEN_HOST | frozenset(chr(c) for c in range(0x20)) | {"%", "\x7f"}
_IPV4_PART = {
    10: re.compile(r"[0-9]+", re.ASCII),
    8: re.compile(r"[0-7]+", re.ASCII),
    16: re.compile(r"[0-9a-fA-F]+", re.ASCII),
}


def is_url(value: str) -> bool:
    """Absolute URL check following the WHATWG URL parser.

    Special schemes (http, https, ws, wss, ftp) need a valid host and accept
    any number of slashes after the colon. Ports must be 0-65535.
    """
    s = value.strip(_C0_OR_SPACE)
    s = s.replace("\t", "").replace("\n", "").replace("\r", "")
    m = _URL_SCHEME.match(s)
    if m is None:
        return False
    scheme = m.group(1).lower()
    rest = s[m.end() :]
    if scheme == "file":
        return True
    if scheme in _SPECIAL_SCHEMES:
        return _valid_authority(rest.lstrip("/\\"), special=True)
    if rest.startswith("//"):
        return _valid_authority(rest[2:], special=False)
    return True


def _valid_authority(text: str, special: bool) -> bool:
    stops = "/?#\\" if special else "/?#"
    end = next((i for i, ch in enumerate(text) if ch in stops), len(text))
    host_port = text[:end].rpartition("@")[2]
    if host_port.startswith("["):
        close = host_port.find("]")
        if close == -1 or not _valid_ipv6(host_port[1:close]):
            return False
        tail = host_port[close + 1 :]
        if tail and not tail.startswith(":"):
            return False
        port = tail[1:]
    else:
        host, _, port = host_port.partition(":")
        if not _valid_host(host, special):
            return False
    return not port or (_IPV4_PART[10].fullmatch(port) is not None and int(port) <= 65535)


def _valid_ipv6(text: str) -> bool:
    if "%" in text or not text.isascii():
        return False
    try:
        ipaddress.IPv6Address(text)
    except ValueError:
        return False
    return True


def _valid_host(host: str, special: bool) -> bool:
    if not special:
        return not any(ch in _FORBIDDEN_HOST for ch in host)
    domain = unquote(host)
    if not domain or any(ch in _FORBIDDEN_DOMAIN for ch in domain):
        return False
    if _ends_in_number(domain):
        return _valid_ipv4(domain)
    return True


def _ipv4_number(part: str) -> int | None:
    base = 10
    if part[:2].lower() == "0x":
        part, base = part[2:], 16
        if not part:
            return 0
    elif len(part) > 1 and part[0] == "0":
        part, base = part[1:], 8
    if not part or _IPV4_PART[base].fullmatch(part) is None:
        return None
    return int(part, base)


def _ipv4_parts(domain: str) -> list[str]:
    parts = domain.split(".")
    if parts[-1] == "" and len(parts) > 1:
        parts.pop()
    return parts


def _ends_in_number(domain: str) -> bool:
    last = _ipv4_parts(domain)[-1]
    if last and _IPV4_PART[10].fullmatch(last):
        return True
    return bool(last) and _ipv4_number(last) is not None


def _valid_ipv4(domain: str) -> bool:
    parts = _ipv4_parts(domain)
    if len(parts) > 4:
        return False
    numbers = [_ipv4_number(p) if p else None for p in parts]
    if any(x is None for x in numbers):
        return False
    if any(x > 255 for x in numbers[:-1]):
        return False
    return numbers[-1] < 256 ** (5 - len(numbers))


# =============================================================================
# Other predicates
# =============================================================================


def is_ip(value: str, version: str) -> bool:
    """Dotted-quad IPv4 (zod's pattern) or textual IPv6 (no zone index)."""
    if version == "v6":
        return _valid_ipv6(value)
    return _IPV4.fullmatch(value) is not None


def is_multiple_of(value: float, step: float) -> bool:
    """Decimal remainder check, so 0.3 is a multiple of 0.1."""
    if step == 0 or not (math.isfinite(value) and math.isfinite(step)):
        return False
    try:
        return Decimal(repr(value)) % Decimal(repr(step)) == 0
    except InvalidOperation:
        return False


def js_length(value: str) -> int:
    """String length in UTF-16 code units."""
    return len(value.encode("utf-16-le")) // 2
