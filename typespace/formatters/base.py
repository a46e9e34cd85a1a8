"""
Common interface of the formatters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..config import FormatterConfig


class Formatter(ABC):
    """Reformats generated source for mismatch reports.

    Never fails: when the tool is missing or rejects the input, the code is
    returned unchanged so the report still gets printed.
    """

    name: str = ""

    @abstractmethod
    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Reformat source text.

        Args:
            code: Source to reformat
            config: Line length, target version and style switches

        Returns:
            The reformatted source, or `code` itself
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool can be used; cached after the first call."""
