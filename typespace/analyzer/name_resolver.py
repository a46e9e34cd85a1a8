"""
Name resolver for handling naming collisions and case conversion.

Turns schema titles, definition keys and property names into Python
identifiers, and keeps declaration names unique within a type space.
"""

from __future__ import annotations

import re

from ..utils import escape_keyword, is_identifier, snake_to_pascal_case, to_snake_case

# Names that would shadow what the rendered module imports or uses
RESERVED_TYPE_NAMES = {
    "Any",
    "Enum",
    "Literal",
    "NewType",
    "Undefined",
    "bool",
    "config",
    "dataclass",
    "dataclass_json",
    "dict",
    "field",
    "float",
    "int",
    "list",
    "set",
    "str",
    "tuple",
}

_SNAKE_CASE = re.compile(r"^[a-z_][a-z0-9_]*$")


class NameResolver:
    """Resolves declaration, field and enum member names."""

    def __init__(self):
        self._taken: set[str] = set()

    def type_name(self, title: str | None, fallback: str) -> str:
        """
        Pick the base name of a declaration.

        A title that is already a valid PascalCase-ish identifier is used
        verbatim; anything else is converted to PascalCase.

        Args:
            title: The schema "title", if any
            fallback: Definition key or inline hint

        Returns:
            A Python identifier (not yet made unique)
        """
        for candidate in (title, fallback):
            if not candidate:
                continue
            if is_identifier(candidate) and candidate[0].isupper():
                return candidate
            converted = self._to_pascal_case(candidate)
            if converted:
                return converted
        return "Type"

    def claim(self, name: str) -> str:
        """Reserve a declaration name, appending a numeric suffix on collision."""
        candidate = name
        if candidate in RESERVED_TYPE_NAMES:
            candidate = f"{candidate}Type"
        base = candidate
        suffix = 2
        while candidate in self._taken:
            candidate = f"{base}{suffix}"
            suffix += 1
        self._taken.add(candidate)
        return candidate

    def release(self, name: str) -> None:
        """Give back a name claimed for a declaration that was discarded."""
        self._taken.discard(name)

    def inline_name(self, parent_name: str, field_name: str) -> str:
        """Name of an inline object declared under a field: parent-prefixed PascalCase."""
        return f"{parent_name}{self._to_pascal_case(field_name)}"

    def field_name(self, property_name: str, snake_case: bool = True) -> str:
        """
        Convert a property name to a Python field name.

        Args:
            property_name: Name as it appears on the wire
            snake_case: Whether to convert to snake_case

        Returns:
            A valid Python identifier
        """
        name = property_name
        if snake_case and not _SNAKE_CASE.match(name):
            name = to_snake_case(name)
        if not is_identifier(name):
            name = re.sub(r"\W", "_", name)
            if not name or name[0].isdigit():
                name = f"field_{name}"
        return escape_keyword(name)

    def enum_member_name(self, value: object) -> str:
        """Convert an enum value to an UPPER_CASE member name."""
        name = to_snake_case(str(value)).upper()
        if not name:
            name = "EMPTY"
        if name[0].isdigit():
            name = f"V{name}"
        return escape_keyword(name)

    def _to_pascal_case(self, text: str) -> str:
        """Convert text to PascalCase."""
        return snake_to_pascal_case(text)
