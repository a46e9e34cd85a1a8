"""
Exception hierarchy shared by the engine, the declaration parser and the
equivalence oracle.
"""

from __future__ import annotations

from typing import Any


class TypeSpaceError(Exception):
    """Base class for every error raised by typespace."""

    pass


class SchemaError(TypeSpaceError):
    """Raised when a schema node cannot be converted.

    This can happen when:
    - A $ref points outside the schema or to a missing definition
    - A node has a shape the engine does not understand
    """

    pass


class DeclarationError(TypeSpaceError):
    """Raised when source text cannot be turned into declaration trees."""

    pass


class StructuralMismatch(TypeSpaceError):
    """Two declaration trees diverge at an identified location.

    Attributes:
        location: Dotted path of the node where comparison failed
        message: What was compared
        expected: Value on the reference side
        actual: Value on the generated side
    """

    def __init__(self, location: str, message: str, expected: Any = None, actual: Any = None):
        self.location = location
        self.message = message
        self.expected = expected
        self.actual = actual
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"{self.location}: {self.message}"
        if self.expected is not None or self.actual is not None:
            text += f": {self.expected!r} != {self.actual!r}"
        return text


class LengthMismatch(StructuralMismatch):
    """Two compared sequences (variants, fields, tuple elements) differ in count."""

    def __init__(self, location: str, what: str, expected: int, actual: int):
        super().__init__(location, f"{what} lengths don't match", expected, actual)


class UnsupportedShape(TypeSpaceError):
    """A construct has no comparison rule.

    This is not a difference between the inputs: it means the oracle's
    coverage is incomplete and must be extended, so callers should treat it
    as an infrastructure failure rather than a generator bug.
    """

    def __init__(self, location: str, message: str):
        self.location = location
        self.message = message
        super().__init__(f"{location}: {message}")
