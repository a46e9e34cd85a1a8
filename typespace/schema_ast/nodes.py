"""
Schema node definitions.

A JSON Schema graph is first read into these nodes, one per schema object,
with `$ref`s left unresolved. The type space walks them to build entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SchemaNode:
    """Common part of every schema node."""

    # JSON pointer of the node, used in error messages
    source_path: str = ""

    # default, x-* keywords
    metadata: dict[str, Any] = field(default_factory=dict)

    title: str | None = None
    description: str | None = None


@dataclass
class PrimitiveNode(SchemaNode):
    """A scalar type, or "any" for untyped and boolean schemas."""

    type_name: str = ""  # string, integer, number, boolean, null or any


@dataclass
class ConstNode(SchemaNode):
    value: Any = None
    inferred_type: str = ""


@dataclass
class EnumNode(SchemaNode):
    """An enum keyword; member_names comes from x-enum-members."""

    values: list[Any] = field(default_factory=list)
    inferred_type: str = ""
    member_names: dict[Any, str] = field(default_factory=dict)


@dataclass
class RefNode(SchemaNode):
    ref_path: str = ""  # "#/$defs/Name" or "#/definitions/Name"


@dataclass
class ArrayNode(SchemaNode):
    """An array; items is a list for positional (tuple) arrays."""

    items: SchemaNode | list[SchemaNode] | None = None
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False

    @property
    def is_fixed_tuple(self) -> bool:
        """Whether items is a positional list whose length is pinned by min/max."""
        if not isinstance(self.items, list):
            return False
        length = len(self.items)
        return self.min_items == length and self.max_items == length


@dataclass
class PropertyDef(SchemaNode):
    """One entry of an object's properties."""

    name: str = ""  # wire name
    type_node: SchemaNode | None = None
    is_required: bool = False
    default_value: Any = None
    has_default: bool = False


@dataclass
class ObjectNode(SchemaNode):
    properties: list[PropertyDef] = field(default_factory=list)
    required: list[str] = field(default_factory=list)

    # None when absent, False when forbidden, a node when constrained
    additional_properties: SchemaNode | bool | None = None


@dataclass
class UnionNode(SchemaNode):
    """Alternatives from oneOf, anyOf or a list-valued type keyword."""

    variants: list[SchemaNode] = field(default_factory=list)
    union_type: str = "oneOf"  # oneOf, anyOf or typeArray


@dataclass
class AllOfNode(SchemaNode):
    """Parts whose properties are merged into one object."""

    parts: list[SchemaNode] = field(default_factory=list)


@dataclass
class DefinitionNode(SchemaNode):
    """A named entry of $defs or definitions."""

    name: str = ""
    original_name: str = ""  # key as written in the schema
    body: SchemaNode | None = None


@dataclass
class SchemaAST:
    """Every parsed definition of one schema graph."""

    definitions: list[DefinitionNode] = field(default_factory=list)
    raw_definitions: dict[str, Any] = field(default_factory=dict)
