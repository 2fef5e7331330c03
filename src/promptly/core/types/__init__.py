# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Shared primitive types."""

from ._sentinel import MaybeUnset, Unset, UnsetType, is_unset

__all__ = (
    "MaybeUnset",
    "Unset",
    "UnsetType",
    "is_unset",
)
