# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Sentinel for absent values.

Python has no `undefined`; validators receive `Unset` wherever a value is
missing (an absent object key, or a standalone parse with no input).
"""

from __future__ import annotations

from typing import Any, Final, TypeVar

__all__ = ("MaybeUnset", "Unset", "UnsetType", "is_unset")

T = TypeVar("T")


class UnsetType:
    """Singleton type marking a value that was never provided."""

    __slots__ = ()
    _instance: UnsetType | None = None

    def __new__(cls) -> UnsetType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Unset"

    def __reduce__(self) -> str:
        return "Unset"

    def __copy__(self) -> UnsetType:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> UnsetType:
        return self


Unset: Final[UnsetType] = UnsetType()

MaybeUnset = T | UnsetType


def is_unset(value: Any) -> bool:
    """True if value is the Unset sentinel."""
    return value is Unset
