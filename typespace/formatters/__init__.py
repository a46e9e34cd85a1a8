"""
Post-processing formatters for generated code.
"""

from __future__ import annotations

from ..config import FormatterConfig
from .base import Formatter
from .black_formatter import BlackFormatter
from .ruff_formatter import RuffFormatter

FORMATTERS: dict[str, type[Formatter]] = {
    "ruff": RuffFormatter,
    "black": BlackFormatter,
}


def get_formatter(config: FormatterConfig) -> Formatter:
    """Instantiate the formatter selected by config.backend."""
    try:
        return FORMATTERS[config.backend]()
    except KeyError:
        raise ValueError(f"Unknown formatter backend {config.backend!r}, expected one of {sorted(FORMATTERS)}") from None


def format_source(code: str, config: FormatterConfig) -> str:
    """Format code with the configured formatter, or return it untouched when disabled."""
    if not config.enabled:
        return code
    return get_formatter(config).format(code, config)


__all__ = [
    "BlackFormatter",
    "FORMATTERS",
    "Formatter",
    "RuffFormatter",
    "format_source",
    "get_formatter",
]
