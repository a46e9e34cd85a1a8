"""
Declaration tree node definitions.

Immutable, language-level view of a type declaration: what kind of type it
is, its fields or variants, the type of every field and the configuration
attributes attached to each node. Trees are built once by the declaration
parser and only read afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union as _Union


@dataclass(frozen=True)
class Directive:
    """One argument of an attribute call, in canonical source form."""

    key: str | None  # None for positional arguments
    value: str  # ast.unparse() of the argument value

    def canonical(self) -> str:
        if self.key is None:
            return self.value
        return f"{self.key}={self.value}"


@dataclass(frozen=True)
class Attribute:
    """A decorator or configuration call attached to a node.

    ``@dataclass_json`` has no argument group, ``@dataclass_json(...)`` has
    one, ``@dataclass_json(...)(...)`` has two.
    """

    name: str  # Dotted name ("dataclass_json", "dataclasses.field")
    groups: int = 0
    directives: tuple[Directive, ...] = ()

    @property
    def namespace(self) -> str:
        """Last segment of the dotted name."""
        return self.name.rsplit(".", 1)[-1]


# ----------------------------------------------------------------------
# Type references
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class PathType:
    """A type expression compared by its canonical text (``int``, ``list[Item]``)."""

    path: str


@dataclass(frozen=True)
class TupleType:
    """A fixed-length ``tuple[...]`` type."""

    elements: tuple[TypeReference, ...] = ()


@dataclass(frozen=True)
class UnknownType:
    """A type expression with no comparison rule (forward reference string, call, ...)."""

    kind: str
    source: str


TypeReference = _Union[PathType, TupleType, UnknownType]


# ----------------------------------------------------------------------
# Fields
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Field:
    """A field of a record or variant; name is None for positional fields."""

    name: str | None
    type: TypeReference
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class NamedFields:
    fields: tuple[Field, ...] = ()


@dataclass(frozen=True)
class UnnamedFields:
    fields: tuple[Field, ...] = ()


@dataclass(frozen=True)
class UnitFields:
    pass


FieldContainer = _Union[NamedFields, UnnamedFields, UnitFields]


# ----------------------------------------------------------------------
# Declarations
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Variant:
    """One alternative of a union."""

    name: str
    fields: FieldContainer = field(default_factory=UnitFields)
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class Record:
    """A product type: dataclass, tuple subclass or unit class."""

    name: str
    attributes: tuple[Attribute, ...] = ()
    fields: FieldContainer = field(default_factory=UnitFields)


@dataclass(frozen=True)
class Union:
    """A sum type: Enum, class of variant classes, or union alias."""

    name: str
    attributes: tuple[Attribute, ...] = ()
    variants: tuple[Variant, ...] = ()


@dataclass(frozen=True)
class OpaqueDeclaration:
    """A recognized declaration the oracle cannot compare (TypedDict, plain alias, ...)."""

    name: str
    kind: str
    source: str = ""


Declaration = _Union[Record, Union, OpaqueDeclaration]
