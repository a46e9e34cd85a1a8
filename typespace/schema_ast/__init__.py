"""
Schema AST - parsed representation of JSON Schema documents.
"""

from __future__ import annotations

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
from .parser import SchemaParser

__all__ = [
    "AllOfNode",
    "ArrayNode",
    "ConstNode",
    "DefinitionNode",
    "EnumNode",
    "ObjectNode",
    "PrimitiveNode",
    "PropertyDef",
    "RefNode",
    "SchemaAST",
    "SchemaNode",
    "SchemaParser",
    "UnionNode",
]
