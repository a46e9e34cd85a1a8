"""typespace

Converts JSON Schema graphs into Python type declarations (dataclasses_json
dataclasses, Enum classes, union aliases and NewTypes) and checks generated
declarations against hand-written references with a structural
equivalence oracle.
"""

__version__ = "0.3.0"

from .analyzer import TypeSpace
from .compare import assert_equivalent, is_equivalent
from .config import FormatterConfig, TypeSpaceConfig
from .declarations import normalize_attributes, parse_declaration, parse_declarations
from .errors import (
    DeclarationError,
    LengthMismatch,
    SchemaError,
    StructuralMismatch,
    TypeSpaceError,
    UnsupportedShape,
)
from .validation import ReferenceType, validate_output, validate_output_for_untagged_enum

__all__ = [
    "TypeSpace",
    "TypeSpaceConfig",
    "FormatterConfig",
    "assert_equivalent",
    "is_equivalent",
    "normalize_attributes",
    "parse_declaration",
    "parse_declarations",
    "ReferenceType",
    "validate_output",
    "validate_output_for_untagged_enum",
    "TypeSpaceError",
    "SchemaError",
    "DeclarationError",
    "StructuralMismatch",
    "LengthMismatch",
    "UnsupportedShape",
]
