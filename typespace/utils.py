"""
Case conversion and identifier helpers.
"""

import keyword
import re

# Words of an identifier: lowercase runs, capitalized runs (camelCase humps) and digit runs
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z][a-z]*|[0-9]+")

_SEPARATORS = re.compile(r"[_\-.]")

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def words(text: str) -> list[str]:
    """Split a name at separators (``_``, ``-``, ``.``, spaces) and camelCase boundaries."""
    return _WORD_PATTERN.findall(_SEPARATORS.sub(" ", text))


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"
        "order.line-item" -> "OrderLineItem"
    """
    return "".join(word.capitalize() for word in words(text))


def to_snake_case(text: str) -> str:
    """Convert camelCase, PascalCase, or separated text to snake_case.

    Examples:
        "firstName" -> "first_name"
        "first-name" -> "first_name"
        "version2" -> "version_2"
    """
    return "_".join(word.lower() for word in words(text))


def is_identifier(text: str) -> bool:
    return bool(_IDENTIFIER_PATTERN.match(text)) and not keyword.iskeyword(text)


def escape_keyword(name: str) -> str:
    """Append an underscore to Python keywords (class -> class_)."""
    if keyword.iskeyword(name):
        return f"{name}_"
    return name
