"""
Tests for the schema parser (first conversion phase).
"""

from __future__ import annotations

import pytest

from typespace.errors import SchemaError
from typespace.schema_ast import (
    AllOfNode,
    ArrayNode,
    ConstNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaParser,
    UnionNode,
)


@pytest.fixture
def parser():
    return SchemaParser()


class TestParseNode:
    def test_primitive(self, parser):
        node = parser.parse_node({"type": "integer", "title": "Count", "description": "How many"})

        assert isinstance(node, PrimitiveNode)
        assert node.type_name == "integer"
        assert node.title == "Count"
        assert node.description == "How many"

    def test_boolean_schema_is_any(self, parser):
        assert parser.parse_node(True).type_name == "any"

    def test_untyped_schema_is_any(self, parser):
        assert parser.parse_node({"description": "whatever"}).type_name == "any"

    def test_ref(self, parser):
        node = parser.parse_node({"$ref": "#/$defs/Item"}, "#/properties/item")

        assert isinstance(node, RefNode)
        assert node.ref_path == "#/$defs/Item"
        assert node.source_path == "#/properties/item"

    def test_const(self, parser):
        node = parser.parse_node({"const": 3})
        assert isinstance(node, ConstNode)
        assert node.inferred_type == "integer"

    def test_enum(self, parser):
        node = parser.parse_node({"enum": ["a", "b"], "x-enum-members": {"a": "ALPHA"}})

        assert isinstance(node, EnumNode)
        assert node.values == ["a", "b"]
        assert node.inferred_type == "string"
        assert node.member_names == {"a": "ALPHA"}
        assert node.metadata == {"x-enum-members": {"a": "ALPHA"}}

    def test_empty_enum(self, parser):
        with pytest.raises(SchemaError, match="non-empty"):
            parser.parse_node({"enum": []})

    def test_one_of_and_any_of(self, parser):
        one_of = parser.parse_node({"oneOf": [{"type": "string"}, {"type": "integer"}]})
        any_of = parser.parse_node({"anyOf": [{"type": "string"}]})

        assert isinstance(one_of, UnionNode)
        assert one_of.union_type == "oneOf"
        assert [v.type_name for v in one_of.variants] == ["string", "integer"]
        assert any_of.union_type == "anyOf"
        assert one_of.variants[1].source_path == "#/oneOf/1"

    def test_type_list_keeps_sibling_keywords(self, parser):
        node = parser.parse_node({"type": ["array", "null"], "items": {"type": "string"}})

        assert isinstance(node, UnionNode)
        assert node.union_type == "typeArray"
        assert isinstance(node.variants[0], ArrayNode)
        assert node.variants[0].items.type_name == "string"
        assert node.variants[1].type_name == "null"

    def test_single_element_type_list(self, parser):
        assert isinstance(parser.parse_node({"type": ["string"]}), PrimitiveNode)

    def test_unknown_type(self, parser):
        with pytest.raises(SchemaError, match="unknown type"):
            parser.parse_node({"type": "decimal"})

    def test_not_a_schema(self, parser):
        with pytest.raises(SchemaError):
            parser.parse_node(["string"])

    def test_all_of(self, parser):
        node = parser.parse_node({"allOf": [{"$ref": "#/$defs/Base"}, {"type": "object"}]})
        assert isinstance(node, AllOfNode)
        assert len(node.parts) == 2

    def test_single_part_all_of_is_unwrapped(self, parser):
        node = parser.parse_node({"allOf": [{"$ref": "#/$defs/Base"}], "default": None})

        assert isinstance(node, RefNode)
        assert node.metadata["default"] is None


class TestObjects:
    def test_properties_and_required(self, parser):
        node = parser.parse_node(
            {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "label": {"type": "string", "default": "none"},
                },
                "required": ["id"],
            }
        )

        assert isinstance(node, ObjectNode)
        assert [p.name for p in node.properties] == ["id", "label"]
        assert [p.is_required for p in node.properties] == [True, False]
        assert node.properties[1].has_default
        assert node.properties[1].default_value == "none"
        assert node.additional_properties is None

    def test_properties_without_type(self, parser):
        assert isinstance(parser.parse_node({"properties": {"a": {}}}), ObjectNode)

    def test_additional_properties(self, parser):
        closed = parser.parse_node({"type": "object", "additionalProperties": False})
        mapping = parser.parse_node({"type": "object", "additionalProperties": {"type": "number"}})

        assert closed.additional_properties is False
        assert isinstance(mapping.additional_properties, PrimitiveNode)
        assert mapping.additional_properties.type_name == "number"


class TestArrays:
    def test_items(self, parser):
        node = parser.parse_node({"type": "array", "items": {"type": "string"}, "uniqueItems": True})

        assert isinstance(node, ArrayNode)
        assert node.unique_items
        assert not node.is_fixed_tuple

    def test_prefix_items_fixed_tuple(self, parser):
        node = parser.parse_node({"type": "array", "prefixItems": [{"type": "string"}, {"type": "integer"}], "minItems": 2, "maxItems": 2})
        assert node.is_fixed_tuple

    def test_items_list_needs_pinned_length(self, parser):
        node = parser.parse_node({"type": "array", "items": [{"type": "string"}, {"type": "integer"}]})
        assert not node.is_fixed_tuple


class TestDefinitions:
    def test_parse_definitions(self, parser):
        ast = parser.parse(
            {
                "_comment": "ignored",
                "Item": {"type": "object", "properties": {"id": {"type": "integer"}}},
                "Tag": {"type": "string"},
            }
        )

        assert [d.name for d in ast.definitions] == ["Item", "Tag"]
        assert ast.definitions[0].source_path == "#/$defs/Item"
        assert isinstance(ast.definitions[0].body, ObjectNode)
        assert ast.definitions[1].body.source_path == "#/$defs/Tag"

    def test_definitions_prefix(self, parser):
        ast = parser.parse({"Item": {"type": "string"}}, prefix="#/definitions")
        assert ast.definitions[0].source_path == "#/definitions/Item"
