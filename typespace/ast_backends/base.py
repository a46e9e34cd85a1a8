"""
Interface of rendering backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..analyzer.ir_nodes import TypeEntry, TypeRef
from ..config import TypeSpaceConfig


class AstBackend(ABC):
    """Turns type space entries into source text of one module."""

    # Schema primitive name -> type name in the rendered language
    TYPE_MAP: dict[str, str] = {}

    def __init__(self, config: TypeSpaceConfig):
        self.config = config

    @abstractmethod
    def generate(self, entries: list[TypeEntry]) -> str:
        """
        Render entries, with the imports they need, as one module.

        Args:
            entries: Entries to declare, dependencies first

        Returns:
            Module source text
        """

    @abstractmethod
    def translate_type(self, type_ref: TypeRef) -> str:
        """Type expression for a reference, as it appears in an annotation."""

    @abstractmethod
    def format_default_value(self, value: Any, type_ref: TypeRef | None) -> str:
        """Literal text of a default value."""
