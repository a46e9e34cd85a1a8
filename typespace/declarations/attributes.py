"""
Attribute extraction and normalization.

Attributes are read from decorators and configuration calls once, when the
declaration tree is built. Normalization keeps the serialization directives
that change behaviour and drops the ones that only rename things on the
wire, so that two declarations differing only in naming compare equal.
"""

from __future__ import annotations

import ast
from collections.abc import Iterable

from ..errors import UnsupportedShape
from .nodes import Attribute, Directive

# Name of the synthetic attribute the parser attaches to fields with a default
DEFAULT_MARKER = "default"

# Attributes whose arguments configure (de)serialization, default marker included
SERIALIZATION_NAMESPACES = frozenset({"dataclass_json", "config", DEFAULT_MARKER})

# Directive keys that only rename fields or variants
RENAME_PREFIXES = ("field_name", "letter_case", "rename")


def dotted_name(expr: ast.expr) -> str | None:
    """Return "a.b.c" for a Name/Attribute chain, None for anything else."""
    if isinstance(expr, ast.Name):
        return expr.id
    if isinstance(expr, ast.Attribute):
        base = dotted_name(expr.value)
        return f"{base}.{expr.attr}" if base else None
    return None


def attribute_from_expr(expr: ast.expr) -> Attribute | None:
    """
    Build an Attribute from a decorator or call expression.

    Args:
        expr: ``name``, ``name(...)`` or ``name(...)(...)``

    Returns:
        The attribute, or None when the expression is not name based
    """
    groups: list[ast.Call] = []
    while isinstance(expr, ast.Call):
        groups.insert(0, expr)
        expr = expr.func

    name = dotted_name(expr)
    if name is None:
        return None

    directives = tuple(directive for call in groups for directive in _call_directives(call))
    return Attribute(name=name, groups=len(groups), directives=directives)


def default_marker(key: str, value: ast.expr) -> Attribute:
    """
    Attribute recording a field default.

    ``x: int = 3`` and ``x: int = field(default=3)`` both give ``default=3``;
    ``field(default_factory=list)`` gives ``default_factory=list``.
    """
    return Attribute(name=DEFAULT_MARKER, groups=1, directives=(Directive(key=key, value=ast.unparse(value)),))


def _call_directives(call: ast.Call) -> list[Directive]:
    directives = [Directive(key=None, value=ast.unparse(arg)) for arg in call.args]
    for keyword in call.keywords:
        if keyword.arg is None:
            directives.append(Directive(key=None, value=f"**{ast.unparse(keyword.value)}"))
        else:
            directives.append(Directive(key=keyword.arg, value=ast.unparse(keyword.value)))
    return directives


def is_rename_directive(canonical: str) -> bool:
    """Whether a canonical directive only renames (field_name=..., letter_case=..., rename...)."""
    return canonical.startswith(RENAME_PREFIXES)


def normalize_attributes(
    attributes: Iterable[Attribute],
    namespaces: frozenset[str] = SERIALIZATION_NAMESPACES,
    location: str = "",
) -> frozenset[str]:
    """
    Reduce attributes to the set of behaviour-affecting serialization directives.

    Args:
        attributes: Every attribute attached to a node, relevant or not
        namespaces: Attribute names (last segment) whose directives count
        location: Node location used in error messages

    Returns:
        Canonical directive strings, rename-only directives excluded

    Raises:
        UnsupportedShape: If a serialization attribute has more than one argument group
    """
    result: set[str] = set()
    for attribute in attributes:
        if attribute.namespace not in namespaces:
            continue
        if attribute.groups == 0:
            continue
        if attribute.groups > 1:
            raise UnsupportedShape(location, f"attribute {attribute.name} has {attribute.groups} argument groups")

        for directive in attribute.directives:
            canonical = directive.canonical()
            if not is_rename_directive(canonical):
                result.add(canonical)
    return frozenset(result)
