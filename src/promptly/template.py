# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""`${name}` template interpolation for prompt messages."""

from __future__ import annotations

import re
from collections.abc import Mapping

__all__ = ("PromptMessage", "extract_template_variables", "interpolate")

_VARIABLE_RE = re.compile(r"\$\{(\w+)\}")


def interpolate(template: str, variables: Mapping[str, str]) -> str:
    """Replace every `${key}` for each key in variables.

    Placeholders without a matching key are left untouched.
    """
    result = template
    for key, value in variables.items():
        result = result.replace(f"${{{key}}}", str(value))
    return result


def extract_template_variables(text: str) -> list[str]:
    """Variable names used in text, unique, in order of first use."""
    return list(dict.fromkeys(_VARIABLE_RE.findall(text)))


class PromptMessage:
    """Callable message template.

    Calling it interpolates variables; `str()` returns the raw template.
    """

    __slots__ = ("template",)

    def __init__(self, template: str):
        self.template = template

    def __call__(self, variables: Mapping[str, str] | None = None, /, **kwargs: str) -> str:
        return interpolate(self.template, {**(variables or {}), **kwargs})

    @property
    def variables(self) -> list[str]:
        return extract_template_variables(self.template)

    def __str__(self) -> str:
        return self.template

    def __repr__(self) -> str:
        return f"PromptMessage({self.template!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PromptMessage):
            return self.template == other.template
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.template)
