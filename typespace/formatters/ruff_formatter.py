"""
Ruff formatter for generated declarations.
"""

from __future__ import annotations

import logging
import subprocess

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class RuffFormatter(Formatter):
    """Pipes code through ``ruff format`` on stdin."""

    name = "ruff"

    def __init__(self):
        self._available: bool | None = None

    def is_available(self) -> bool:
        if self._available is None:
            try:
                self._available = self._run(["ruff", "--version"], None, timeout=5).returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available = False
        return self._available

    def command(self, config: FormatterConfig) -> list[str]:
        """ruff command line for a configuration."""
        cmd = ["ruff", "format", "--stdin-filename", "generated.py"]
        if config.line_length:
            cmd += ["--line-length", str(config.line_length)]
        if config.target_version:
            cmd += ["--target-version", config.target_version]
        if not config.string_normalization:
            cmd += ["--config", "format.quote-style='preserve'"]
        if not config.magic_trailing_comma:
            cmd += ["--config", "format.skip-magic-trailing-comma=true"]
        return cmd

    def format(self, code: str, config: FormatterConfig) -> str:
        if not self.is_available():
            return code

        try:
            result = self._run(self.command(config), code, timeout=30)
        except subprocess.SubprocessError as e:
            logger.debug("ruff format failed: %s", e)
            return code

        if result.returncode != 0:
            logger.debug("ruff format rejected input: %s", result.stderr.strip())
            return code
        return result.stdout

    @staticmethod
    def _run(cmd: list[str], stdin: str | None, timeout: int) -> subprocess.CompletedProcess:
        return subprocess.run(cmd, input=stdin, capture_output=True, text=True, timeout=timeout)
