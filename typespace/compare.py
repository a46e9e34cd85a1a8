"""
Structural equivalence of declaration trees.

Two declarations are equivalent when they describe the same type up to
cosmetic differences: rename-only serialization directives, the order and
spelling of directives, and (on request) the variant names of an untagged
union. Comparison is top-down and stops at the first difference, raising
an error that names the location in the tree and both compared values.
"""

from __future__ import annotations

from .declarations.attributes import normalize_attributes
from .declarations.nodes import (
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
from .errors import LengthMismatch, StructuralMismatch, UnsupportedShape


def assert_equivalent(expected: Declaration, actual: Declaration, ignore_variant_names: bool = False) -> None:
    """
    Assert that two declarations describe the same type.

    Args:
        expected: Declaration tree of the hand-written reference
        actual: Declaration tree of the generated code
        ignore_variant_names: Skip variant name comparison of a top-level union
            (untagged unions, whose generated variant names are synthesized)

    Raises:
        StructuralMismatch: If the declarations differ (LengthMismatch for sequence lengths)
        UnsupportedShape: If a construct has no comparison rule
    """
    location = expected.name

    if expected.name != actual.name:
        raise StructuralMismatch(location, "declaration names don't match", expected.name, actual.name)

    _compare_attributes(location, expected.attributes, actual.attributes)

    if isinstance(expected, Record) and isinstance(actual, Record):
        _compare_fields(f"{location}.fields", expected.fields, actual.fields)
    elif isinstance(expected, Union) and isinstance(actual, Union):
        _compare_variants(location, expected.variants, actual.variants, ignore_variant_names)
    elif isinstance(expected, OpaqueDeclaration) and isinstance(actual, OpaqueDeclaration):
        raise UnsupportedShape(location, f"no comparison rule for {expected.kind} declarations")
    else:
        raise StructuralMismatch(location, "mismatched data", _kind(expected), _kind(actual))


def is_equivalent(expected: Declaration, actual: Declaration, ignore_variant_names: bool = False) -> bool:
    """Boolean form of assert_equivalent; UnsupportedShape still propagates."""
    try:
        assert_equivalent(expected, actual, ignore_variant_names)
    except StructuralMismatch:
        return False
    return True


def _kind(declaration: Declaration) -> str:
    if isinstance(declaration, OpaqueDeclaration):
        return declaration.kind
    return type(declaration).__name__.lower()


def _compare_attributes(location: str, expected: tuple[Attribute, ...], actual: tuple[Attribute, ...]) -> None:
    expected_set = normalize_attributes(expected, location=location)
    actual_set = normalize_attributes(actual, location=location)
    if expected_set != actual_set:
        raise StructuralMismatch(
            f"{location}.attributes",
            "attributes don't match",
            sorted(expected_set),
            sorted(actual_set),
        )


def _compare_variants(
    location: str,
    expected: tuple[Variant, ...],
    actual: tuple[Variant, ...],
    ignore_variant_names: bool,
) -> None:
    if len(expected) != len(actual):
        raise LengthMismatch(f"{location}.variants", "variant", len(expected), len(actual))

    for i, (expected_variant, actual_variant) in enumerate(zip(expected, actual)):
        variant_location = f"{location}.variants[{i}]"
        if not ignore_variant_names and expected_variant.name != actual_variant.name:
            raise StructuralMismatch(f"{variant_location}.name", "variant names don't match", expected_variant.name, actual_variant.name)
        # Variant attributes are kept on the tree but are not part of equivalence
        _compare_fields(f"{variant_location}.fields", expected_variant.fields, actual_variant.fields)


def _compare_fields(location: str, expected: FieldContainer, actual: FieldContainer) -> None:
    if type(expected) is not type(actual):
        raise StructuralMismatch(location, "field kinds don't match", _container_kind(expected), _container_kind(actual))

    if isinstance(expected, UnitFields):
        return

    if len(expected.fields) != len(actual.fields):
        raise LengthMismatch(location, "field", len(expected.fields), len(actual.fields))

    for i, (expected_field, actual_field) in enumerate(zip(expected.fields, actual.fields)):
        _compare_field(f"{location}[{i}]", expected_field, actual_field)


def _container_kind(container: FieldContainer) -> str:
    if isinstance(container, NamedFields):
        return "named"
    if isinstance(container, UnnamedFields):
        return "unnamed"
    return "unit"


def _compare_field(location: str, expected: Field, actual: Field) -> None:
    if expected.name != actual.name:
        raise StructuralMismatch(f"{location}.name", "field names don't match", expected.name, actual.name)
    compare_types(f"{location}.type", expected.type, actual.type)
    _compare_attributes(location, expected.attributes, actual.attributes)


def compare_types(location: str, expected: TypeReference, actual: TypeReference) -> None:
    """
    Compare two type references.

    Paths compare by exact text, tuples element by element. A type with no
    comparison rule on either side is an UnsupportedShape, never a pass.
    """
    for side in (expected, actual):
        if isinstance(side, UnknownType):
            raise UnsupportedShape(location, f"no comparison rule for {side.kind} type {side.source}")

    if isinstance(expected, PathType) and isinstance(actual, PathType):
        if expected.path != actual.path:
            raise StructuralMismatch(location, "types don't match", expected.path, actual.path)
        return

    if isinstance(expected, TupleType) and isinstance(actual, TupleType):
        if len(expected.elements) != len(actual.elements):
            raise LengthMismatch(location, "tuple", len(expected.elements), len(actual.elements))
        for i, (expected_element, actual_element) in enumerate(zip(expected.elements, actual.elements)):
            compare_types(f"{location}[{i}]", expected_element, actual_element)
        return

    raise StructuralMismatch(location, "mismatched types", _type_text(expected), _type_text(actual))


def _type_text(type_ref: TypeReference) -> str:
    if isinstance(type_ref, PathType):
        return type_ref.path
    if isinstance(type_ref, TupleType):
        return f"tuple[{', '.join(_type_text(e) for e in type_ref.elements)}]"
    return type_ref.source
