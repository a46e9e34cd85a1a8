"""
Black formatter for generated declarations.
"""

from __future__ import annotations

import logging

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class BlackFormatter(Formatter):
    """Runs black in-process; black is only imported on first use."""

    name = "black"

    def __init__(self):
        self._black = None
        self._available: bool | None = None

    def is_available(self) -> bool:
        if self._available is None:
            try:
                import black
            except ImportError:
                self._available = False
            else:
                self._black = black
                self._available = True
        return self._available

    def mode(self, config: FormatterConfig):
        """black.Mode matching a configuration."""
        black = self._black
        # Versions newer than the installed black leave the target set empty
        version = getattr(black.TargetVersion, config.target_version.upper(), None) if config.target_version else None
        return black.Mode(
            target_versions={version} if version is not None else set(),
            line_length=config.line_length,
            string_normalization=config.string_normalization,
            magic_trailing_comma=config.magic_trailing_comma,
        )

    def format(self, code: str, config: FormatterConfig) -> str:
        if not self.is_available():
            return code
        try:
            return self._black.format_str(code, mode=self.mode(config))
        except self._black.InvalidInput as e:
            logger.debug("black rejected input: %s", e)
            return code
