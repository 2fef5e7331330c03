# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Core module - foundation primitives shared by the schema engine and client."""

from .types import MaybeUnset, Unset, UnsetType, is_unset

__all__ = (
    "MaybeUnset",
    "Unset",
    "UnsetType",
    "is_unset",
)
