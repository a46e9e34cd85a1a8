"""
Entries of a type space and the type references between them.

Every $ref is resolved by the time these are built; rendering only reads them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TypeKind(Enum):
    """Shape of a type expression."""

    PRIMITIVE = "primitive"  # int, str, bool, float or None
    CLASS = "class"  # A declared entry of the type space
    ARRAY = "array"  # list[T]
    SET = "set"  # set[T]
    TUPLE = "tuple"  # tuple[T, U, ...]
    DICT = "dict"  # dict[str, V]
    UNION = "union"  # T | U | ...
    OPTIONAL = "optional"  # T | None
    CONST = "const"  # Literal[...]
    ANY = "any"


@dataclass
class TypeRef:
    """A type expression, possibly pointing at another entry."""

    kind: TypeKind = TypeKind.PRIMITIVE
    name: str = ""  # schema primitive ("integer") or entry name ("Person")

    type_args: list[TypeRef] = field(default_factory=list)

    # One value per Literal member
    const_values: list[Any] = field(default_factory=list)

    # Entry referenced by a CLASS reference
    type_id: int | None = None

    def key(self) -> str:
        """Structural key used to detect identical shapes."""
        if self.kind == TypeKind.CLASS:
            return f"#{self.type_id}"
        if self.kind == TypeKind.CONST:
            return f"const{self.const_values!r}"
        if self.type_args:
            return f"{self.kind.value}[{', '.join(arg.key() for arg in self.type_args)}]"
        return f"{self.kind.value}:{self.name}"

    def walk(self) -> Iterator[TypeRef]:
        """Yield this reference and every nested type argument."""
        yield self
        for arg in self.type_args:
            yield from arg.walk()


class EntryKind(Enum):
    """Kind of declaration an entry renders to."""

    BUILTIN = "builtin"  # No declaration, only a type expression
    STRUCT = "struct"  # @dataclass class
    TUPLE_STRUCT = "tuple_struct"  # class X(tuple[...])
    ENUM = "enum"  # class X(str, Enum)
    UNION = "union"  # X = A | B
    NEWTYPE = "newtype"  # X = NewType("X", T)


@dataclass
class FieldDef:
    """One dataclass field."""

    name: str = ""
    original_name: str = ""  # wire name
    type_ref: TypeRef | None = None
    is_required: bool = False
    default_value: Any = None
    has_default: bool = False
    description: str | None = None

    @property
    def is_renamed(self) -> bool:
        return self.name != self.original_name


@dataclass
class TypeEntry:
    """A declaration produced by the type space."""

    id: int = 0
    kind: EntryKind = EntryKind.BUILTIN
    name: str = ""

    # STRUCT
    fields: list[FieldDef] = field(default_factory=list)
    deny_unknown_fields: bool = False

    # ENUM: member_name -> json_value
    members: dict[str, Any] = field(default_factory=dict)
    value_type: str = "string"

    # UNION and TUPLE_STRUCT components
    variants: list[TypeRef] = field(default_factory=list)

    # NEWTYPE and BUILTIN target
    target: TypeRef | None = None

    description: str | None = None
    source_path: str = ""

    def references(self) -> Iterator[TypeRef]:
        """Yield every type reference used by this entry."""
        for f in self.fields:
            if f.type_ref:
                yield from f.type_ref.walk()
        for variant in self.variants:
            yield from variant.walk()
        if self.target:
            yield from self.target.walk()

    def dependencies(self) -> list[int]:
        """Entry ids referenced by this entry, in first-use order."""
        seen: list[int] = []
        for ref in self.references():
            if ref.kind == TypeKind.CLASS and ref.type_id is not None and ref.type_id not in seen:
                seen.append(ref.type_id)
        return seen
