"""
Conversion of parsed schemas into named, deduplicated declarations.
"""

from __future__ import annotations

from .ir_nodes import EntryKind, FieldDef, TypeEntry, TypeKind, TypeRef
from .name_resolver import NameResolver
from .reference_resolver import ReferenceResolver, ResolvedRef
from .type_space import TypeSpace

__all__ = [
    "EntryKind",
    "FieldDef",
    "NameResolver",
    "ReferenceResolver",
    "ResolvedRef",
    "TypeEntry",
    "TypeKind",
    "TypeRef",
    "TypeSpace",
]
