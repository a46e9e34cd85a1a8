"""
Reads JSON Schema dictionaries into schema nodes.

Nothing is resolved here: `$ref`s stay as RefNode and naming is left to
the type space.
"""

from __future__ import annotations

from typing import Any

from ..errors import SchemaError
from .nodes import (
    AllOfNode,
    ArrayNode,
    ConstNode,
    DefinitionNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    SchemaAST,
    SchemaNode,
    UnionNode,
)

# Keywords that pick the node kind, in priority order
_DISPATCH = (
    ("$ref", "_ref"),
    ("const", "_const"),
    ("enum", "_enum"),
    ("oneOf", "_alternatives"),
    ("anyOf", "_alternatives"),
    ("allOf", "_all_of"),
    ("type", "_typed"),
    ("properties", "_object"),
    ("additionalProperties", "_object"),
)

# Keywords a list-valued "type" must not copy into each alternative
_TYPE_LIST_OWN_KEYWORDS = ("type", "title", "description", "default")


class SchemaParser:
    """Builds schema nodes from JSON Schema dictionaries."""

    PRIMITIVE_TYPES = {"string", "integer", "number", "boolean", "null"}

    def parse(self, definitions: dict[str, Any], prefix: str = "#/$defs") -> SchemaAST:
        """
        Parse every definition of a schema graph.

        Args:
            definitions: The "$defs" (or "definitions") mapping
            prefix: JSON pointer under which the definitions live

        Returns:
            SchemaAST with one DefinitionNode per definition
        """
        result = SchemaAST(raw_definitions=definitions)
        for key, body in definitions.items():
            # "_comment" keys and bare strings are annotations, not schemas
            if isinstance(body, str) or key.startswith("_comment"):
                continue
            pointer = f"{prefix}/{key}"
            result.definitions.append(
                DefinitionNode(name=key, original_name=key, body=self.parse_node(body, pointer), source_path=pointer)
            )
        return result

    def parse_node(self, schema: Any, path: str = "#") -> SchemaNode:
        """
        Parse one schema and everything nested in it.

        Args:
            schema: A schema dictionary, or True
            path: JSON pointer of the schema, used in error messages

        Returns:
            The SchemaNode subclass matching the schema's keywords
        """
        if schema is True:
            return PrimitiveNode(type_name="any", source_path=path)
        if not isinstance(schema, dict):
            raise SchemaError(f"{path}: expected a schema object, got {schema!r}")

        extensions = {key: value for key, value in schema.items() if key.startswith("x-")}
        node = None
        for keyword, handler in _DISPATCH:
            if keyword in schema:
                node = getattr(self, handler)(schema, path, extensions)
                break
        if node is None:
            node = PrimitiveNode(type_name="any", source_path=path, metadata=extensions)

        node.title = schema.get("title")
        node.description = schema.get("description")
        if "default" in schema:
            node.metadata["default"] = schema["default"]
        return node

    def _ref(self, schema: dict[str, Any], path: str, extensions: dict[str, Any]) -> RefNode:
        return RefNode(ref_path=schema["$ref"], source_path=path, metadata=extensions)

    def _const(self, schema: dict[str, Any], path: str, extensions: dict[str, Any]) -> ConstNode:
        value = schema["const"]
        return ConstNode(value=value, inferred_type=json_type_of(value), source_path=path, metadata=extensions)

    def _enum(self, schema: dict[str, Any], path: str, extensions: dict[str, Any]) -> EnumNode:
        values = schema["enum"]
        if not isinstance(values, list) or not values:
            raise SchemaError(f"{path}: enum must be a non-empty list")
        return EnumNode(
            values=values,
            inferred_type=json_type_of(values[0]),
            member_names=schema.get("x-enum-members", {}),
            source_path=path,
            metadata=extensions,
        )

    def _alternatives(self, schema: dict[str, Any], path: str, extensions: dict[str, Any]) -> UnionNode:
        keyword = "oneOf" if "oneOf" in schema else "anyOf"
        variants = [self.parse_node(variant, f"{path}/{keyword}/{i}") for i, variant in enumerate(schema[keyword])]
        return UnionNode(variants=variants, union_type=keyword, source_path=path, metadata=extensions)

    def _all_of(self, schema: dict[str, Any], path: str, extensions: dict[str, Any]) -> SchemaNode:
        parts = [self.parse_node(part, f"{path}/allOf/{i}") for i, part in enumerate(schema["allOf"])]
        # A single-part allOf only wraps a $ref to hang a default or description on it
        if len(parts) == 1:
            parts[0].metadata.update(extensions)
            return parts[0]
        return AllOfNode(parts=parts, source_path=path, metadata=extensions)

    def _typed(self, schema: dict[str, Any], path: str, extensions: dict[str, Any]) -> SchemaNode:
        type_value = schema["type"]
        if isinstance(type_value, list):
            if len(type_value) != 1:
                return self._type_list(schema, type_value, path, extensions)
            type_value = type_value[0]

        if type_value == "array":
            return self._array(schema, path, extensions)
        if type_value == "object":
            return self._object(schema, path, extensions)
        if type_value in self.PRIMITIVE_TYPES:
            return PrimitiveNode(type_name=type_value, source_path=path, metadata=extensions)
        raise SchemaError(f"{path}: unknown type {type_value!r}")

    def _type_list(self, schema: dict[str, Any], types: list[str], path: str, extensions: dict[str, Any]) -> UnionNode:
        """["array", "null"] becomes one alternative per type, each keeping "items" and the like."""
        shared = {key: value for key, value in schema.items() if key not in _TYPE_LIST_OWN_KEYWORDS}
        variants = [self.parse_node({**shared, "type": t}, f"{path}/type/{t}") for t in types]
        return UnionNode(variants=variants, union_type="typeArray", source_path=path, metadata=extensions)

    def _array(self, schema: dict[str, Any], path: str, extensions: dict[str, Any]) -> ArrayNode:
        items: SchemaNode | list[SchemaNode] | None = None
        if "prefixItems" in schema:
            items = [self.parse_node(item, f"{path}/prefixItems/{i}") for i, item in enumerate(schema["prefixItems"])]
        elif isinstance(schema.get("items"), list):
            items = [self.parse_node(item, f"{path}/items/{i}") for i, item in enumerate(schema["items"])]
        elif "items" in schema:
            items = self.parse_node(schema["items"], f"{path}/items")

        return ArrayNode(
            items=items,
            min_items=schema.get("minItems"),
            max_items=schema.get("maxItems"),
            unique_items=bool(schema.get("uniqueItems", False)),
            source_path=path,
            metadata=extensions,
        )

    def _object(self, schema: dict[str, Any], path: str, extensions: dict[str, Any]) -> ObjectNode:
        required = schema.get("required", [])
        properties = []
        for name, property_schema in schema.get("properties", {}).items():
            pointer = f"{path}/properties/{name}"
            has_default = isinstance(property_schema, dict) and "default" in property_schema
            properties.append(
                PropertyDef(
                    name=name,
                    type_node=self.parse_node(property_schema, pointer),
                    is_required=name in required,
                    default_value=property_schema["default"] if has_default else None,
                    has_default=has_default,
                    source_path=pointer,
                )
            )

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            additional = self.parse_node(additional, f"{path}/additionalProperties")

        return ObjectNode(
            properties=properties,
            required=required,
            additional_properties=additional,
            source_path=path,
            metadata=extensions,
        )


def json_type_of(value: Any) -> str:
    """JSON Schema type name of a literal value."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    return "object"
