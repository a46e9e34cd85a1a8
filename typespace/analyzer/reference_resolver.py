"""
Lookup of local $ref targets.

Only pointers into the graph's own definitions are followed; anything
else is a SchemaError.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import SchemaError
from ..schema_ast.nodes import DefinitionNode, RefNode, SchemaAST

LOCAL_PREFIXES = ("#/$defs/", "#/definitions/")


@dataclass
class ResolvedRef:
    ref_path: str = ""  # as written in the schema
    definition_name: str = ""  # key under $defs / definitions
    target_node: DefinitionNode | None = None


class ReferenceResolver:
    """Maps "#/$defs/Name" style pointers to parsed definitions."""

    def __init__(self, ast: SchemaAST):
        self.ast = ast
        self._by_key = {definition.original_name: definition for definition in ast.definitions}

    def resolve(self, ref_node: RefNode) -> ResolvedRef:
        """
        Find the definition a $ref points at.

        Args:
            ref_node: The reference, with its source path for error messages

        Returns:
            ResolvedRef holding the definition key and node

        Raises:
            SchemaError: For external pointers, pointers outside the
                definitions, and keys with no definition
        """
        ref_path = ref_node.ref_path
        if not ref_path.startswith("#"):
            raise SchemaError(f"{ref_node.source_path}: external $ref {ref_path!r} is not supported")

        key = next((ref_path[len(prefix) :] for prefix in LOCAL_PREFIXES if ref_path.startswith(prefix)), None)
        if key is None:
            raise SchemaError(f"{ref_node.source_path}: unsupported $ref {ref_path!r}")

        definition = self._by_key.get(key)
        if definition is None:
            raise SchemaError(f"{ref_node.source_path}: $ref {ref_path!r} has no matching definition")
        return ResolvedRef(ref_path=ref_path, definition_name=key, target_node=definition)
