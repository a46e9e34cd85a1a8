"""
Declaration parser: Python source text to declaration trees.

Recognized shapes:

- ``class X(Enum)`` -> Union of unit variants, one per member
- a class whose body only holds nested classes -> Union, one variant per class
- ``class X(tuple[A, B])`` -> Record with positional fields
- a class with annotated fields -> Record with named fields
- an empty class -> unit Record
- ``X = A | B``, ``X = Union[A, B]``, ``type X = A | B`` -> Union, one
  positional variant per member
- ``X = NewType("X", T)`` -> Record with one positional field
- TypedDict, Protocol, NamedTuple classes and other aliases -> OpaqueDeclaration

A field default (``= v``, ``field(default=v)``, ``field(default_factory=f)``) is
recorded as a ``default`` attribute on the field; ``metadata=`` must be a
``config(...)`` call.
"""

from __future__ import annotations

import ast
import logging

from ..errors import DeclarationError, UnsupportedShape
from .attributes import attribute_from_expr, default_marker, dotted_name
from .nodes import (
    Attribute,
    Declaration,
    Field,
    FieldContainer,
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

logger = logging.getLogger(__name__)

ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}
OPAQUE_BASES = {"TypedDict", "Protocol", "NamedTuple"}
TUPLE_NAMES = {"tuple", "Tuple"}
UNION_NAMES = {"Union"}


def parse_declarations(source: str) -> dict[str, Declaration]:
    """
    Parse every top-level declaration of a module.

    Args:
        source: Python source text

    Returns:
        Declaration name -> declaration tree, in source order

    Raises:
        DeclarationError: If the source is not valid Python or declares a name twice
        UnsupportedShape: If a declaration has a shape with no tree representation
    """
    try:
        module = ast.parse(source)
    except SyntaxError as e:
        raise DeclarationError(f"Failed to parse Python code: {e}") from e

    declarations: dict[str, Declaration] = {}
    for stmt in module.body:
        declaration = declaration_from_node(stmt)
        if declaration is None:
            continue
        if declaration.name in declarations:
            raise DeclarationError(f"Duplicate declaration {declaration.name!r} at line {stmt.lineno}")
        declarations[declaration.name] = declaration

    logger.debug("parsed %d declarations: %s", len(declarations), ", ".join(declarations))
    return declarations


def parse_declaration(source: str, name: str) -> Declaration:
    """Parse source and return the declaration called name."""
    declarations = parse_declarations(source)
    try:
        return declarations[name]
    except KeyError:
        raise DeclarationError(f"No declaration named {name!r}, found: {sorted(declarations)}") from None


def declaration_from_node(stmt: ast.stmt) -> Declaration | None:
    """Build a declaration tree from one top-level statement, None if it declares nothing."""
    if isinstance(stmt, ast.ClassDef):
        return _declaration_from_class(stmt)

    if isinstance(stmt, ast.TypeAlias):
        return _declaration_from_alias(stmt.name.id, stmt.value)

    if isinstance(stmt, ast.Assign) and len(stmt.targets) == 1 and isinstance(stmt.targets[0], ast.Name):
        return _declaration_from_alias(stmt.targets[0].id, stmt.value)

    if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name) and stmt.value is not None:
        return _declaration_from_alias(stmt.target.id, stmt.value)

    return None


# ----------------------------------------------------------------------
# Classes
# ----------------------------------------------------------------------


def _declaration_from_class(node: ast.ClassDef) -> Declaration:
    attributes = _decorators(node)
    base_names = {(dotted_name(base) or "").rsplit(".", 1)[-1] for base in node.bases}

    if base_names & ENUM_BASES:
        return Union(name=node.name, attributes=attributes, variants=_enum_variants(node))

    opaque = base_names & OPAQUE_BASES
    if opaque:
        return OpaqueDeclaration(name=node.name, kind=sorted(opaque)[0], source=ast.unparse(node))

    nested = [stmt for stmt in _body(node) if isinstance(stmt, ast.ClassDef)]
    if nested and not _annotated_fields(node) and _tuple_base(node) is None:
        variants = tuple(
            Variant(name=child.name, fields=_class_fields(child, f"{node.name}.{child.name}"), attributes=_decorators(child))
            for child in nested
        )
        return Union(name=node.name, attributes=attributes, variants=variants)

    return Record(name=node.name, attributes=attributes, fields=_class_fields(node, node.name))


def _class_fields(node: ast.ClassDef, location: str) -> FieldContainer:
    """Field container of a record class or variant class."""
    fields = _annotated_fields(node)
    nested = [stmt for stmt in _body(node) if isinstance(stmt, ast.ClassDef)]
    tuple_base = _tuple_base(node)

    if nested:
        raise UnsupportedShape(location, "class mixes fields and nested classes")
    if fields and tuple_base is not None:
        raise UnsupportedShape(location, "tuple subclass declares named fields")

    if tuple_base is not None:
        element_type = _type_reference(tuple_base)
        if not isinstance(element_type, TupleType):
            raise UnsupportedShape(location, f"tuple base {ast.unparse(tuple_base)} is not fixed length")
        return UnnamedFields(fields=tuple(Field(name=None, type=element) for element in element_type.elements))

    if fields:
        return NamedFields(
            fields=tuple(
                Field(
                    name=stmt.target.id,
                    type=_type_reference(stmt.annotation),
                    attributes=_field_attributes(stmt.value, f"{location}.{stmt.target.id}"),
                )
                for stmt in fields
            )
        )

    return UnitFields()


def _body(node: ast.ClassDef) -> list[ast.stmt]:
    """Class body without docstring, pass and ellipsis."""
    body = []
    for stmt in node.body:
        if isinstance(stmt, ast.Pass):
            continue
        if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant) and isinstance(stmt.value.value, str):
            continue
        if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant) and stmt.value.value is Ellipsis:
            continue
        body.append(stmt)
    return body


def _annotated_fields(node: ast.ClassDef) -> list[ast.AnnAssign]:
    return [
        stmt
        for stmt in _body(node)
        if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name) and not _is_class_var(stmt.annotation)
    ]


def _is_class_var(annotation: ast.expr) -> bool:
    if isinstance(annotation, ast.Subscript):
        annotation = annotation.value
    return (dotted_name(annotation) or "").rsplit(".", 1)[-1] == "ClassVar"


def _tuple_base(node: ast.ClassDef) -> ast.expr | None:
    for base in node.bases:
        if isinstance(base, ast.Subscript) and _is_tuple_name(base.value):
            return base
    return None


def _enum_variants(node: ast.ClassDef) -> tuple[Variant, ...]:
    variants = []
    for stmt in _body(node):
        if not isinstance(stmt, ast.Assign):
            continue
        for target in stmt.targets:
            if isinstance(target, ast.Name) and not target.id.startswith("_"):
                variants.append(Variant(name=target.id))
    return tuple(variants)


def _decorators(node: ast.ClassDef) -> tuple[Attribute, ...]:
    attributes = (attribute_from_expr(decorator) for decorator in node.decorator_list)
    return tuple(attribute for attribute in attributes if attribute is not None)


def _field_attributes(value: ast.expr | None, location: str) -> tuple[Attribute, ...]:
    """Attributes of a field: its default marker, the field(...) call and the config(...) passed as metadata."""
    if value is None:
        return ()

    outer = attribute_from_expr(value) if isinstance(value, ast.Call) else None
    if outer is None or outer.namespace != "field":
        return (default_marker("default", value),)

    attributes = [outer]
    for keyword in value.keywords:
        if keyword.arg in ("default", "default_factory"):
            attributes.append(default_marker(keyword.arg, keyword.value))
        elif keyword.arg == "metadata":
            inner = attribute_from_expr(keyword.value) if isinstance(keyword.value, ast.Call) else None
            if inner is None or inner.namespace != "config":
                raise UnsupportedShape(location, f"field metadata {ast.unparse(keyword.value)} is not a config(...) call")
            attributes.append(inner)
    return tuple(attributes)


# ----------------------------------------------------------------------
# Aliases
# ----------------------------------------------------------------------


def _declaration_from_alias(name: str, value: ast.expr) -> Declaration:
    members = _union_members(value)
    if members is not None:
        return Union(name=name, variants=tuple(_member_variant(member) for member in members))

    if isinstance(value, ast.Call) and (dotted_name(value.func) or "").rsplit(".", 1)[-1] == "NewType":
        if len(value.args) != 2:
            raise UnsupportedShape(name, "NewType takes a name and a type")
        return Record(name=name, fields=UnnamedFields(fields=(Field(name=None, type=_type_reference(value.args[1])),)))

    return OpaqueDeclaration(name=name, kind="alias", source=ast.unparse(value))


def _union_members(value: ast.expr) -> list[ast.expr] | None:
    """Members of ``A | B`` or ``Union[A, B]``, None if value is not a union."""
    if isinstance(value, ast.BinOp) and isinstance(value.op, ast.BitOr):
        return _flatten_bit_or(value)

    if isinstance(value, ast.Subscript) and (dotted_name(value.value) or "").rsplit(".", 1)[-1] in UNION_NAMES:
        if isinstance(value.slice, ast.Tuple):
            return list(value.slice.elts)
        return [value.slice]

    return None


def _flatten_bit_or(value: ast.expr) -> list[ast.expr]:
    if isinstance(value, ast.BinOp) and isinstance(value.op, ast.BitOr):
        return _flatten_bit_or(value.left) + _flatten_bit_or(value.right)
    return [value]


def _member_variant(member: ast.expr) -> Variant:
    """A union member is a variant named after its type, holding one positional field."""
    return Variant(
        name=ast.unparse(member),
        fields=UnnamedFields(fields=(Field(name=None, type=_type_reference(member)),)),
    )


# ----------------------------------------------------------------------
# Types
# ----------------------------------------------------------------------


def _is_tuple_name(expr: ast.expr) -> bool:
    return (dotted_name(expr) or "").rsplit(".", 1)[-1] in TUPLE_NAMES


def _type_reference(expr: ast.expr) -> TypeReference:
    """Classify a type expression."""
    if isinstance(expr, ast.Subscript) and _is_tuple_name(expr.value):
        elements = expr.slice.elts if isinstance(expr.slice, ast.Tuple) else [expr.slice]
        if any(isinstance(e, ast.Constant) and e.value is Ellipsis for e in elements):
            # tuple[int, ...] is a homogeneous sequence, not a fixed tuple
            return PathType(path=ast.unparse(expr))
        return TupleType(elements=tuple(_type_reference(e) for e in elements))

    if isinstance(expr, ast.Constant):
        if expr.value is None:
            return PathType(path="None")
        if isinstance(expr.value, str):
            return UnknownType(kind="forward reference", source=repr(expr.value))
        return UnknownType(kind="constant", source=ast.unparse(expr))

    if isinstance(expr, (ast.Name, ast.Attribute, ast.Subscript, ast.BinOp)):
        return PathType(path=ast.unparse(expr))

    return UnknownType(kind=type(expr).__name__, source=ast.unparse(expr))
