"""
Type space: converts schema nodes into declarations.

Second phase of conversion: resolve references, name declarations,
deduplicate identical inline shapes and keep every produced entry so it
can be rendered together with the entries it depends on.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from ..config import TypeSpaceConfig
from ..errors import SchemaError
from ..schema_ast.nodes import (
    AllOfNode,
    ArrayNode,
    ConstNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    SchemaNode,
    UnionNode,
)
from ..schema_ast.parser import SchemaParser
from .ir_nodes import EntryKind, FieldDef, TypeEntry, TypeKind, TypeRef
from .name_resolver import NameResolver
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)

# Entry kinds that only make sense as a declaration of their own
_DECLARATION_NODES = (ObjectNode, AllOfNode, EnumNode, UnionNode)


class TypeSpace:
    """Collection of declarations converted from one schema graph.

    A type space owns the definitions of a schema ("$defs" / "definitions").
    Every call to ``convert`` adds the entries it needs; entries reached
    through a ``$ref`` are converted once and shared by later conversions.
    """

    def __init__(self, definitions: dict[str, Any] | None = None, config: TypeSpaceConfig | None = None):
        """
        Initialize the type space.

        Args:
            definitions: The "$defs" (or "definitions") of the schema graph
            config: Conversion configuration
        """
        self.config = config or TypeSpaceConfig()
        self.parser = SchemaParser()
        self.ast = self.parser.parse(definitions or {})
        self.ref_resolver = ReferenceResolver(self.ast)
        self.names = NameResolver()

        self._entries: dict[int, TypeEntry] = {}
        self._next_id = 0

        # definition name -> entry id
        self._references: dict[str, int] = {}

        # structural key -> entry id, for inline objects
        self._shapes: dict[tuple, int] = {}

        # $ref -> entry id, reset on every convert() call
        self._discovered: dict[str, int] = {}

    @classmethod
    def from_schema(cls, schema: dict[str, Any], config: TypeSpaceConfig | None = None) -> TypeSpace:
        """Create a type space over the definitions embedded in a root schema."""
        definitions = schema.get("$defs") or schema.get("definitions") or {}
        return cls(definitions, config)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def convert(self, schema: Any, name: str | None = None) -> tuple[int, dict[str, int]]:
        """
        Convert a schema node into a type of this space.

        Args:
            schema: The schema node to convert
            name: Name to use when the schema has no "title"

        Returns:
            The id of the produced type, and every $ref reached during this
            conversion mapped to the id of its type

        Raises:
            SchemaError: If the schema cannot be converted
        """
        self._discovered = {}
        node = self.parser.parse_node(schema, "#")

        if isinstance(node, RefNode):
            type_id = self._convert_reference(node)
        elif node.title or name or isinstance(node, _DECLARATION_NODES) or self._is_tuple_struct(node):
            type_name = self.names.claim(self.names.type_name(node.title, name or "Root"))
            entry = self._new_entry(type_name, node.source_path)
            self._fill_named(entry, node)
            type_id = entry.id
        else:
            entry = self._new_entry("", node.source_path)
            entry.target = self._convert_inline(node, "Root")
            type_id = entry.id

        logger.debug("converted root schema to %s (%s)", self._entries[type_id].name or "<builtin>", self._entries[type_id].kind.value)
        return type_id, dict(self._discovered)

    def add_definitions(self) -> dict[str, int]:
        """Convert every definition of the space; returns definition name -> id."""
        result = {}
        for def_node in self.ast.definitions:
            ref = RefNode(ref_path=f"#/$defs/{def_node.original_name}", source_path=def_node.source_path)
            result[def_node.original_name] = self._convert_reference(ref)
        return result

    def get(self, type_id: int) -> TypeEntry:
        """Get an entry by id."""
        try:
            return self._entries[type_id]
        except KeyError:
            raise SchemaError(f"unknown type id {type_id}") from None

    def entries(self) -> list[TypeEntry]:
        """All entries, in creation order."""
        return list(self._entries.values())

    def type_expression(self, type_id: int) -> str:
        """Python type expression that refers to an entry."""
        from ..ast_backends.python_ast_backend import PythonAstBackend

        entry = self.get(type_id)
        if entry.kind == EntryKind.BUILTIN:
            return PythonAstBackend(self.config).translate_type(entry.target)
        return entry.name

    def render(self, type_id: int) -> str:
        """
        Render a type and every type it transitively references.

        Args:
            type_id: The id returned by ``convert``

        Returns:
            Python source, dependencies declared before their users
        """
        from ..ast_backends.python_ast_backend import PythonAstBackend

        order = self.dependency_order(type_id)
        entries = [self._entries[i] for i in order if self._entries[i].kind != EntryKind.BUILTIN]
        return PythonAstBackend(self.config).generate(entries)

    def render_all(self) -> str:
        """Render every declaration of the space."""
        from ..ast_backends.python_ast_backend import PythonAstBackend

        order: list[int] = []
        for type_id in self._entries:
            for dep in self.dependency_order(type_id):
                if dep not in order:
                    order.append(dep)
        entries = [self._entries[i] for i in order if self._entries[i].kind != EntryKind.BUILTIN]
        return PythonAstBackend(self.config).generate(entries)

    def dependency_order(self, type_id: int) -> list[int]:
        """Entry ids reachable from type_id, each listed after what it depends on."""
        order: list[int] = []
        visiting: set[int] = set()

        def visit(current: int) -> None:
            if current in order or current in visiting:
                return
            visiting.add(current)
            for dep in self.get(current).dependencies():
                visit(dep)
            visiting.discard(current)
            order.append(current)

        visit(type_id)
        return order

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def _new_entry(self, name: str, source_path: str) -> TypeEntry:
        entry = TypeEntry(id=self._next_id, name=name, source_path=source_path)
        self._entries[entry.id] = entry
        self._next_id += 1
        return entry

    def _class_ref(self, entry: TypeEntry) -> TypeRef:
        return TypeRef(kind=TypeKind.CLASS, name=entry.name, type_id=entry.id)

    def _convert_reference(self, node: RefNode) -> int:
        """Convert the definition behind a $ref, once per type space."""
        resolved = self.ref_resolver.resolve(node)
        def_name = resolved.definition_name

        if def_name not in self._references:
            def_node = resolved.target_node
            body = def_node.body
            type_name = self.names.claim(self.names.type_name(body.title if body else None, def_name))
            entry = self._new_entry(type_name, def_node.source_path)

            # Registered before the body is converted so recursive references terminate
            self._references[def_name] = entry.id
            self._fill_named(entry, body)
            logger.debug("converted definition %s to %s", def_name, type_name)

        type_id = self._references[def_name]
        self._discovered[resolved.ref_path] = type_id
        return type_id

    def _fill_named(self, entry: TypeEntry, node: SchemaNode | None) -> None:
        """Turn a node in declaration position into the entry's declaration."""
        if node is None:
            raise SchemaError(f"{entry.source_path}: empty definition")

        entry.description = node.description

        if isinstance(node, AllOfNode):
            node = self._merge_all_of(node)

        if isinstance(node, ObjectNode):
            if not node.properties and isinstance(node.additional_properties, SchemaNode):
                entry.kind = EntryKind.NEWTYPE
                entry.target = self._convert_inline(node, entry.name)
            else:
                self._build_struct(entry, node)
            return

        if isinstance(node, EnumNode) and self._is_plain_enum(node):
            entry.kind = EntryKind.ENUM
            entry.value_type = node.inferred_type
            for value in node.values:
                member = node.member_names.get(value) or self.names.enum_member_name(value)
                entry.members[member] = value
            return

        if isinstance(node, UnionNode):
            entry.kind = EntryKind.UNION
            entry.variants = [self._convert_inline(variant, self._variant_hint(entry.name, variant, i)) for i, variant in enumerate(node.variants)]
            return

        if self._is_tuple_struct(node):
            entry.kind = EntryKind.TUPLE_STRUCT
            entry.variants = [self._convert_inline(item, f"{entry.name}Item{i}") for i, item in enumerate(node.items)]
            return

        entry.kind = EntryKind.NEWTYPE
        entry.target = self._convert_inline(node, entry.name)

    def _build_struct(self, entry: TypeEntry, obj: ObjectNode) -> None:
        """Fill a STRUCT entry from an object node."""
        entry.kind = EntryKind.STRUCT
        entry.deny_unknown_fields = obj.additional_properties is False

        used: set[str] = set()
        for prop in obj.properties:
            field_def = self._analyze_property(prop, entry.name)
            base = field_def.name
            suffix = 2
            while field_def.name in used:
                field_def.name = f"{base}_{suffix}"
                suffix += 1
            used.add(field_def.name)
            entry.fields.append(field_def)

    def _analyze_property(self, prop: PropertyDef, parent_name: str) -> FieldDef:
        """Analyze a single property."""
        field_def = FieldDef(
            name=self.names.field_name(prop.name, self.config.snake_case_fields),
            original_name=prop.name,
            is_required=prop.is_required,
            has_default=prop.has_default,
            default_value=prop.default_value,
            description=prop.type_node.description if prop.type_node else None,
        )

        type_ref = self._convert_inline(prop.type_node, self.names.inline_name(parent_name, prop.name))

        # Optional properties without a usable default become "T | None = None"
        if not prop.is_required and not (prop.has_default and prop.default_value is not None):
            if type_ref.kind != TypeKind.OPTIONAL:
                type_ref = TypeRef(kind=TypeKind.OPTIONAL, type_args=[type_ref])
            if not prop.has_default:
                field_def.has_default = True
                field_def.default_value = None

        field_def.type_ref = type_ref
        return field_def

    # ------------------------------------------------------------------
    # Inline types
    # ------------------------------------------------------------------

    def _convert_inline(self, node: SchemaNode | None, hint: str) -> TypeRef:
        """Convert a node used inside another declaration into a type reference."""
        if node is None:
            return TypeRef(kind=TypeKind.ANY, name="Any")

        if isinstance(node, RefNode):
            return self._class_ref(self._entries[self._convert_reference(node)])

        if isinstance(node, PrimitiveNode):
            if node.type_name == "any":
                return TypeRef(kind=TypeKind.ANY, name="Any")
            return TypeRef(kind=TypeKind.PRIMITIVE, name=node.type_name)

        if isinstance(node, ConstNode):
            return TypeRef(kind=TypeKind.CONST, name=node.inferred_type, const_values=[node.value])

        if isinstance(node, EnumNode):
            return TypeRef(kind=TypeKind.CONST, name=node.inferred_type, const_values=list(node.values))

        if isinstance(node, ArrayNode):
            return self._convert_array(node, hint)

        if isinstance(node, AllOfNode):
            return self._convert_inline_object(self._merge_all_of(node), hint)

        if isinstance(node, ObjectNode):
            if node.properties:
                return self._convert_inline_object(node, hint)
            value_node = node.additional_properties if isinstance(node.additional_properties, SchemaNode) else None
            value = self._convert_inline(value_node, f"{hint}Value")
            return TypeRef(kind=TypeKind.DICT, name="dict", type_args=[TypeRef(kind=TypeKind.PRIMITIVE, name="string"), value])

        if isinstance(node, UnionNode):
            return self._convert_inline_union(node, hint)

        raise SchemaError(f"{node.source_path}: unsupported schema node {type(node).__name__}")

    def _convert_array(self, node: ArrayNode, hint: str) -> TypeRef:
        if node.is_fixed_tuple and self.config.use_tuples:
            items = [self._convert_inline(item, f"{hint}Item{i}") for i, item in enumerate(node.items)]
            return TypeRef(kind=TypeKind.TUPLE, name="tuple", type_args=items)

        if isinstance(node.items, list):
            # Variable length tuple -> use the first item type
            item_type = self._convert_inline(node.items[0], f"{hint}Item") if node.items else TypeRef(kind=TypeKind.ANY, name="Any")
        else:
            item_type = self._convert_inline(node.items, f"{hint}Item")

        if node.unique_items and self.config.use_sets:
            return TypeRef(kind=TypeKind.SET, name="set", type_args=[item_type])
        return TypeRef(kind=TypeKind.ARRAY, name="list", type_args=[item_type])

    def _convert_inline_object(self, obj: ObjectNode, hint: str) -> TypeRef:
        """Declare an inline object, reusing an identical earlier declaration."""
        type_name = self.names.claim(self.names.type_name(obj.title, hint))
        entry = self._new_entry(type_name, obj.source_path)
        entry.description = obj.description
        self._build_struct(entry, obj)

        if not self.config.deduplicate_inline_objects:
            return self._class_ref(entry)

        key = self._shape_key(entry)
        existing = self._shapes.get(key)
        if existing is not None:
            del self._entries[entry.id]
            self.names.release(type_name)
            logger.debug("inline object %s deduplicated into %s", type_name, self._entries[existing].name)
            return self._class_ref(self._entries[existing])

        self._shapes[key] = entry.id
        return self._class_ref(entry)

    def _convert_inline_union(self, node: UnionNode, hint: str) -> TypeRef:
        non_null = [v for v in node.variants if not (isinstance(v, PrimitiveNode) and v.type_name == "null")]
        has_null = len(non_null) != len(node.variants)

        if not non_null:
            return TypeRef(kind=TypeKind.PRIMITIVE, name="null")

        types = [self._convert_inline(v, self._variant_hint(hint, v, i)) for i, v in enumerate(non_null)]
        result = types[0] if len(types) == 1 else TypeRef(kind=TypeKind.UNION, name="union", type_args=types)

        if has_null:
            return TypeRef(kind=TypeKind.OPTIONAL, type_args=[result])
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _shape_key(self, entry: TypeEntry) -> tuple:
        fields = tuple(
            (
                f.name,
                f.original_name,
                f.type_ref.key() if f.type_ref else "",
                f.is_required,
                f.has_default,
                repr(f.default_value),
            )
            for f in entry.fields
        )
        return (entry.kind.value, entry.deny_unknown_fields, fields)

    def _merge_all_of(self, node: AllOfNode) -> ObjectNode:
        """Flatten the object parts of an allOf into one object node."""
        merged = ObjectNode(source_path=node.source_path, title=node.title, description=node.description)
        seen: dict[str, int] = {}

        for part in node.parts:
            if isinstance(part, RefNode):
                part = self.ref_resolver.resolve(part).target_node.body
            if isinstance(part, AllOfNode):
                part = self._merge_all_of(part)
            if not isinstance(part, ObjectNode):
                raise SchemaError(f"{node.source_path}: allOf members must be objects, got {type(part).__name__}")

            for prop in part.properties:
                if prop.name in seen:
                    # Later parts override earlier ones (subclass refinements)
                    merged.properties[seen[prop.name]] = prop
                else:
                    seen[prop.name] = len(merged.properties)
                    merged.properties.append(prop)
            for name in part.required:
                if name not in merged.required:
                    merged.required.append(name)
            if part.additional_properties is False:
                merged.additional_properties = False

        merged.properties = [replace(prop, is_required=prop.is_required or prop.name in merged.required) for prop in merged.properties]
        return merged

    def _variant_hint(self, parent_name: str, variant: SchemaNode, index: int) -> str:
        if variant.title:
            return variant.title
        return f"{parent_name}Variant{index}"

    def _is_plain_enum(self, node: EnumNode) -> bool:
        """Enums whose values are all strings or all integers become Enum classes."""
        if all(isinstance(v, str) for v in node.values):
            return True
        return all(isinstance(v, int) and not isinstance(v, bool) for v in node.values)

    def _is_tuple_struct(self, node: SchemaNode) -> bool:
        return isinstance(node, ArrayNode) and node.is_fixed_tuple and self.config.use_tuples
