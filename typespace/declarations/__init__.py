"""
Declaration trees: the immutable view of type declarations the oracle compares.
"""

from __future__ import annotations

from .attributes import SERIALIZATION_NAMESPACES, attribute_from_expr, is_rename_directive, normalize_attributes
from .nodes import (
    Attribute,
    Declaration,
    Directive,
    Field,
    NamedFields,
    OpaqueDeclaration,
    PathType,
    Record,
    TupleType,
    TypeReference,
    Union,
    UnitFields,
    UnknownType,
    UnnamedFields,
    Variant,
)
from .parser import declaration_from_node, parse_declaration, parse_declarations

__all__ = [
    "Attribute",
    "Declaration",
    "Directive",
    "Field",
    "NamedFields",
    "OpaqueDeclaration",
    "PathType",
    "Record",
    "SERIALIZATION_NAMESPACES",
    "TupleType",
    "TypeReference",
    "Union",
    "UnitFields",
    "UnknownType",
    "UnnamedFields",
    "Variant",
    "attribute_from_expr",
    "declaration_from_node",
    "is_rename_directive",
    "normalize_attributes",
    "parse_declaration",
    "parse_declarations",
]
