"""
Configuration for the conversion engine and the validation harness.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass
class FormatterConfig:
    """How generated source is formatted before it is shown in a mismatch report."""

    enabled: bool = True

    # "ruff" or "black"
    backend: str = "ruff"

    line_length: int = 100

    # Lowest Python version the output must support ("py312", "py313", ...)
    target_version: str = "py312"

    # False keeps the single quotes ast.unparse produces
    string_normalization: bool = True

    magic_trailing_comma: bool = True


@dataclass
class TypeSpaceConfig:
    """Conversion and rendering options of a TypeSpace."""

    # Start rendered modules with "from __future__ import annotations"
    use_future_annotations: bool = True

    add_generation_comment: bool = False

    # Fixed-length arrays become tuple[...] (otherwise list of the first item type)
    use_tuples: bool = True

    # uniqueItems arrays become set[...]
    use_sets: bool = True

    # camelCase and other wire names become snake_case fields renamed with config(field_name=...)
    snake_case_fields: bool = True

    # Add config(exclude=...) so fields equal to their default are left out of to_json()
    exclude_default_value_from_json: bool = False

    # Inline objects of identical shape share one class
    deduplicate_inline_objects: bool = True

    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    @staticmethod
    def from_dict(d: dict) -> TypeSpaceConfig:
        """Build a config from a (possibly partial) dictionary; unknown keys are ignored."""
        config = TypeSpaceConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        return asdict(self)
