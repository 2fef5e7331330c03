# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for promptly.schema.pipeline and assembler - rule folding."""

from __future__ import annotations

import math

from promptly.schema.assembler import build_field_node, build_object_node
from promptly.schema.nodes import (
    ArrayNode,
    Check,
    FallbackNode,
    ModifierNode,
    ScalarNode,
    SentinelNode,
)


def node_of(type_: str, *rules: dict, **params):
    return build_field_node(
        {"name": "f", "type": type_, "validations": list(rules), "params": params}
    ).node


# =============================================================================
# Checks
# =============================================================================


class TestChecks:
    def test_order_preserved(self):
        """Checks are appended in declaration order."""
        node = node_of("string", {"type": "trim"}, {"type": "min", "value": "3"}, {"type": "email"})
        assert [c.kind for c in node.checks] == ["trim", "min", "email"]

    def test_size_argument_parsed(self):
        node = node_of("string", {"type": "max", "value": "0x10", "message": "too long"})
        assert node.checks == (Check("max", 16.0, "too long"),)

    def test_unparsable_size_is_nan(self):
        (check,) = node_of("number", {"type": "min", "value": "abc"}).checks
        assert math.isnan(check.arg)

    def test_length_skipped_on_numbers(self):
        assert node_of("number", {"type": "length", "value": "3"}) == ScalarNode("number")

    def test_array_size(self):
        node = node_of("array", {"type": "min", "value": "2"}, elementType="string")
        assert node == ArrayNode(ScalarNode("string"), (Check("min", 2.0),))

    def test_string_rules_skipped_on_numbers(self):
        node = node_of(
            "number", {"type": "email"}, {"type": "trim"}, {"type": "regex", "value": "x"}
        )
        assert node == ScalarNode("number")

    def test_numeric_rules_skipped_on_strings(self):
        assert node_of("string", {"type": "int"}, {"type": "positive"}) == ScalarNode("string")

    def test_nonempty_on_string_and_array(self):
        assert node_of("string", {"type": "nonempty"}).checks[0].kind == "nonempty"
        assert node_of("array", {"type": "nonempty"}).checks[0].kind == "nonempty"
        assert node_of("number", {"type": "nonempty"}) == ScalarNode("number")

    def test_datetime_options(self):
        node = node_of(
            "string",
            {"type": "datetime"},
            stringOptions={"datetime": {"offset": True, "precision": 3}},
        )
        assert node.checks == (Check("datetime", {"offset": True, "precision": 3}),)

    def test_datetime_without_options(self):
        assert node_of("string", {"type": "datetime"}).checks == (Check("datetime", None),)

    def test_ip_defaults_to_v4(self):
        assert node_of("string", {"type": "ip"}).checks == (Check("ip", "v4"),)
        assert node_of("string", {"type": "ip"}, stringOptions={"ip": {}}).checks[0].arg == "v4"

    def test_ip_v6(self):
        node = node_of("string", {"type": "ip"}, stringOptions={"ip": {"version": "v6"}})
        assert node.checks == (Check("ip", "v6"),)

    def test_coerced_scalars_take_checks(self):
        node = node_of("number", {"type": "int"}, coerce=True)
        assert node == ScalarNode("number", True, (Check("int"),))


# =============================================================================
# Wrappers
# =============================================================================


class TestWrappers:
    def test_modifiers_stack(self):
        node = node_of("string", {"type": "optional"}, {"type": "nullable"})
        assert node == ModifierNode("nullable", ModifierNode("optional", ScalarNode("string")))

    def test_checks_after_wrapper_skipped(self):
        """Wrappers are not looked through."""
        node = node_of("string", {"type": "optional"}, {"type": "min", "value": "3"})
        assert node == ModifierNode("optional", ScalarNode("string"))

    def test_default_coerced_by_declared_type(self):
        node = node_of("number", {"type": "default", "value": "10"})
        assert isinstance(node, FallbackNode)
        assert node.mode == "default"
        assert node.raw == "10"
        assert node.value == 10
        assert isinstance(node.value, float)

    def test_catch_boolean(self):
        node = node_of("boolean", {"type": "catch", "value": "true"})
        assert node.mode == "catch"
        assert node.value is True

    def test_readonly(self):
        node = node_of("array", {"type": "readonly"})
        assert node == ModifierNode("readonly", ArrayNode(SentinelNode("unknown")))


class TestLeniency:
    def test_unknown_rule_ignored(self):
        assert node_of("string", {"type": "frobnicate", "value": "x"}) == ScalarNode("string")

    def test_discriminated_union_rule_is_noop(self):
        assert node_of("string", {"type": "discriminatedUnion"}) == ScalarNode("string")


# =============================================================================
# Assembly
# =============================================================================


class TestAssembler:
    def test_description_attached_last(self):
        """Description is independent of how many rules precede it."""
        fn = build_field_node(
            {
                "name": "f",
                "type": "string",
                "validations": [
                    {"type": "trim"},
                    {"type": "optional"},
                    {"type": "default", "value": "x"},
                ],
                "params": {"description": "Name"},
            }
        )
        assert fn.description == "Name"
        assert isinstance(fn.node, FallbackNode)

    def test_empty_description_is_none(self):
        fn = build_field_node({"name": "f", "type": "string", "params": {"description": ""}})
        assert fn.description is None

    def test_object_keeps_declaration_order(self):
        obj = build_object_node(
            [
                {"name": "b", "type": "string"},
                {"name": "a", "type": "number"},
                {"name": "b", "type": "boolean"},
            ]
        )
        assert [f.name for f in obj.shape] == ["b", "a", "b"]
        assert obj.unknown_keys == "strip"

    def test_empty_document(self):
        assert build_object_node([]).shape == ()
