# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Schema document models.

A schema document is an ordered list of SchemaField records as served by the
prompt API. Models accept the camelCase JSON keys and the snake_case Python
names. Decoding is lenient: scalar rule values arrive as strings and unknown
keys are kept, because bad tags and params degrade at conversion time instead
of failing here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = (
    "DatetimeOptions",
    "DiscriminatedUnionCase",
    "DiscriminatedUnionSpec",
    "IpOptions",
    "SchemaField",
    "SchemaFieldParams",
    "StringOptions",
    "ValidationRule",
    "as_schema_fields",
)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class DatetimeOptions(_WireModel):
    """Options for the `datetime` rule: allow offsets, fix fraction digits."""

    offset: bool | None = None
    precision: int | None = None


class IpOptions(_WireModel):
    """Options for the `ip` rule. Anything other than "v6" means IPv4."""

    version: str | None = None


class StringOptions(_WireModel):
    datetime: DatetimeOptions | None = None
    ip: IpOptions | None = None


class DiscriminatedUnionCase(_WireModel):
    """One case: the discriminator's literal value plus the case's own fields."""

    value: str = ""
    fields: list[SchemaField] = Field(default_factory=list)


class DiscriminatedUnionSpec(_WireModel):
    discriminator: str = ""
    cases: dict[str, DiscriminatedUnionCase] = Field(default_factory=dict)


class SchemaFieldParams(_WireModel):
    """Type-specific configuration.

    Which keys matter depends on the field's type tag; the rest are ignored.
    """

    coerce: bool | None = None
    description: str | None = None
    enum_values: list[str] | None = Field(default=None, alias="enumValues")
    union_types: list[str] | None = Field(default=None, alias="unionTypes")
    element_type: str | None = Field(default=None, alias="elementType")
    key_type: str | None = Field(default=None, alias="keyType")
    value_type: str | None = Field(default=None, alias="valueType")
    is_tuple: bool | None = Field(default=None, alias="isTuple")
    tuple_types: list[str] | None = Field(default=None, alias="tupleTypes")
    is_strict: bool | None = Field(default=None, alias="isStrict")
    is_passthrough: bool | None = Field(default=None, alias="isPassthrough")
    is_discriminated_union: bool | None = Field(default=None, alias="isDiscriminatedUnion")
    discriminator: str | None = None
    discriminated_union: DiscriminatedUnionSpec | None = Field(
        default=None, alias="discriminatedUnion"
    )
    string_options: StringOptions | None = Field(default=None, alias="stringOptions")


class ValidationRule(_WireModel):
    """One ordered validation/transform/modifier step.

    `value` is the string-encoded argument (number, pattern, default payload).
    `discriminator` and `cases` carry a discriminated union in the rule-based
    representation; case keys double as the discriminator values.
    """

    id: str = ""
    type: str
    value: str = ""
    message: str = ""
    transform: str | None = None
    key_type: str | None = Field(default=None, alias="keyType")
    value_type: str | None = Field(default=None, alias="valueType")
    discriminator: str | None = None
    cases: dict[str, list[SchemaField]] | None = None

    @field_validator("value", "message", mode="before")
    @classmethod
    def _stringify_scalars(cls, value: Any) -> Any:
        """Accept JSON numbers/booleans/null for string-encoded arguments."""
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value


class SchemaField(_WireModel):
    """One named entry of a schema document."""

    id: str = ""
    name: str
    type: str
    validations: list[ValidationRule] = Field(default_factory=list)
    params: SchemaFieldParams = Field(default_factory=SchemaFieldParams)

    @field_validator("validations", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("params", mode="before")
    @classmethod
    def _none_as_empty_params(cls, value: Any) -> Any:
        return {} if value is None else value


for _model in (
    DiscriminatedUnionCase,
    DiscriminatedUnionSpec,
    SchemaFieldParams,
    ValidationRule,
    SchemaField,
):
    _model.model_rebuild()


def as_schema_fields(fields: list[SchemaField] | list[dict[str, Any]]) -> list[SchemaField]:
    """Coerce decoded JSON dicts (or models) into SchemaField models."""
    return [f if isinstance(f, SchemaField) else SchemaField.model_validate(f) for f in fields]
