"""
Validation harness.

Runs a hand-written reference type through the conversion engine and the
equivalence oracle: the reference's JSON Schema is converted and rendered,
the rendered source is parsed back into a declaration tree and compared
against the tree parsed from the reference source. On failure the schema
and the generated source are printed before the error is re-raised.
"""

from __future__ import annotations

import inspect
import json
import logging
import sys
import textwrap
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

import jinja2
import pydantic

from .analyzer.type_space import TypeSpace
from .compare import assert_equivalent
from .config import TypeSpaceConfig
from .declarations.nodes import Declaration
from .declarations.parser import parse_declaration
from .errors import TypeSpaceError
from .formatters import format_source

logger = logging.getLogger(__name__)

CURRENT_DIR = Path(__file__).parent.resolve().absolute()

REFERENCE_FILE = "reference.py"
SCHEMA_FILE = "schema.json"


@dataclass
class ReferenceType:
    """A hand-written declaration together with the schema it should be generated from."""

    name: str
    source: str
    schema: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_class(cls, type_: type, schema: dict[str, Any] | None = None) -> ReferenceType:
        """
        Build a reference from a live class.

        Args:
            type_: The reference class; its source must be retrievable with inspect
            schema: Schema to generate from; derived with pydantic when omitted

        Returns:
            The reference type
        """
        source = textwrap.dedent(inspect.getsource(type_))
        if schema is None:
            schema = pydantic.TypeAdapter(type_).json_schema()
        return cls(name=type_.__name__, source=source, schema=schema)

    @classmethod
    def from_directory(cls, path: str | Path) -> ReferenceType:
        """Load a reference from a directory holding reference.py and schema.json."""
        path = Path(path)
        with open(path / SCHEMA_FILE, encoding="utf-8") as f:
            schema = json.load(f)
        with open(path / REFERENCE_FILE, encoding="utf-8") as f:
            source = f.read()

        name = schema.get("title")
        if not name:
            raise TypeSpaceError(f"{path / SCHEMA_FILE}: root schema needs a title naming the reference declaration")
        return cls(name=name, source=source, schema=schema)

    def declaration(self) -> Declaration:
        """Declaration tree of the reference source."""
        return parse_declaration(self.source, self.name)


def validate_output(reference: ReferenceType, config: TypeSpaceConfig | None = None, stream: TextIO | None = None) -> str:
    """
    Check that the engine regenerates a reference type exactly.

    Args:
        reference: The reference type
        config: Engine configuration
        stream: Where diagnostics go on failure (stdout by default)

    Returns:
        The generated source

    Raises:
        StructuralMismatch: If the generated declaration differs from the reference
        UnsupportedShape: If a construct has no comparison rule
        SchemaError: If the schema cannot be converted
    """
    return _validate(reference, config, stream, ignore_variant_names=False)


def validate_output_for_untagged_enum(
    reference: ReferenceType, config: TypeSpaceConfig | None = None, stream: TextIO | None = None
) -> str:
    """Same as validate_output, ignoring the variant names of the top-level union."""
    return _validate(reference, config, stream, ignore_variant_names=True)


def _validate(reference: ReferenceType, config: TypeSpaceConfig | None, stream: TextIO | None, ignore_variant_names: bool) -> str:
    config = config or TypeSpaceConfig()
    generated = ""

    try:
        type_space = TypeSpace.from_schema(reference.schema, config)
        type_id, _ = type_space.convert(reference.schema)
        generated = type_space.render(type_id)

        actual = parse_declaration(generated, type_space.get(type_id).name)
        expected = reference.declaration()
        assert_equivalent(expected, actual, ignore_variant_names=ignore_variant_names)
    except Exception as e:
        report_mismatch(reference, generated, e, config, stream)
        raise

    logger.debug("%s: generated declaration matches the reference", reference.name)
    return generated


def report_mismatch(
    reference: ReferenceType,
    generated: str,
    error: Exception,
    config: TypeSpaceConfig,
    stream: TextIO | None = None,
) -> None:
    """Print the schema and the (formatted) generated source of a failed validation."""
    jinja_env = jinja2.Environment(lstrip_blocks=True, trim_blocks=True)
    with open(CURRENT_DIR / "templates/mismatch_report.jinja2", encoding="utf-8") as f:
        template = jinja_env.from_string(f.read())

    formatted = format_source(generated, config.formatter) if generated else generated
    report = template.render(
        reference_name=reference.name,
        schema=json.dumps(reference.schema, indent=2),
        generated=formatted.rstrip("\n"),
        formatter=config.formatter.backend if config.formatter.enabled and generated else None,
        error_type=type(error).__name__,
        error=str(error),
    )
    print(report, file=stream if stream is not None else sys.stdout)
