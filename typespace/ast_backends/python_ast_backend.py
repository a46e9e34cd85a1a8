"""
Python AST-based rendering backend.

Generates dataclasses_json dataclasses, Enum classes, union aliases and
NewType declarations from type space entries using the built-in ast module.
"""

from __future__ import annotations

import ast
import collections
from typing import Any

from ..analyzer.ir_nodes import EntryKind, FieldDef, TypeEntry, TypeKind, TypeRef
from ..config import TypeSpaceConfig
from .base import AstBackend

GENERATION_COMMENT = "# Generated by typespace. Do not edit by hand."

STDLIB_MODULES = {"dataclasses", "enum", "typing"}


class PythonAstBackend(AstBackend):
    """Python rendering backend using AST."""

    TYPE_MAP = {
        "integer": "int",
        "string": "str",
        "boolean": "bool",
        "number": "float",
        "null": "None",
    }

    def __init__(self, config: TypeSpaceConfig):
        super().__init__(config)
        self.python_imports: set[tuple[str, str]] = set()

    def generate(self, entries: list[TypeEntry]) -> str:
        """Generate Python code for entries, keeping their order."""
        self.python_imports = set()

        if self.config.use_future_annotations:
            self.python_imports.add(("__future__", "annotations"))

        declarations = [self._generate_entry(entry) for entry in entries]

        blocks: list[str] = []
        if self.config.add_generation_comment:
            blocks.append(GENERATION_COMMENT)

        import_nodes = self._generate_imports()
        if import_nodes:
            blocks.append("\n".join(ast.unparse(ast.fix_missing_locations(node)) for node in import_nodes))

        for node in declarations:
            blocks.append(ast.unparse(ast.fix_missing_locations(node)))

        return self._post_process_code(blocks)

    def _generate_entry(self, entry: TypeEntry) -> ast.stmt:
        if entry.kind == EntryKind.STRUCT:
            return self._generate_class(entry)
        if entry.kind == EntryKind.ENUM:
            return self._generate_enum_class(entry)
        if entry.kind == EntryKind.TUPLE_STRUCT:
            return self._generate_tuple_class(entry)
        if entry.kind == EntryKind.UNION:
            return self._generate_union_alias(entry)
        if entry.kind == EntryKind.NEWTYPE:
            return self._generate_newtype(entry)
        raise ValueError(f"Entry {entry.id} of kind {entry.kind.value} has no declaration")

    def _generate_imports(self) -> list[ast.stmt]:
        """Generate import statements as AST nodes."""
        import_groups: dict[str, set[str]] = collections.defaultdict(set)
        for module, name in self.python_imports:
            import_groups[module].add(name)

        stdlib_modules = sorted(m for m in import_groups if m in STDLIB_MODULES)
        third_party_modules = sorted(m for m in import_groups if m not in STDLIB_MODULES and m != "__future__")

        ordered = []
        if "__future__" in import_groups:
            ordered.append("__future__")
        ordered.extend(stdlib_modules)
        ordered.extend(third_party_modules)

        return [
            ast.ImportFrom(
                module=module,
                names=[ast.alias(name=n, asname=None) for n in sorted(import_groups[module])],
                level=0,
            )
            for module in ordered
        ]

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _generate_class(self, entry: TypeEntry) -> ast.ClassDef:
        """Generate a dataclass for a STRUCT entry."""
        self.python_imports.add(("dataclasses", "dataclass"))
        self.python_imports.add(("dataclasses_json", "dataclass_json"))

        if entry.deny_unknown_fields:
            self.python_imports.add(("dataclasses_json", "Undefined"))
            serialization = self._parse_expr("dataclass_json(undefined=Undefined.RAISE)")
        else:
            serialization = ast.Name(id="dataclass_json", ctx=ast.Load())

        decorators = [
            serialization,
            ast.Call(
                func=ast.Name(id="dataclass", ctx=ast.Load()),
                args=[],
                keywords=[ast.keyword(arg="kw_only", value=ast.Constant(value=True))],
            ),
        ]

        body = self._docstring(entry)
        for field_def in entry.fields:
            field_node = self._generate_field(field_def)
            if field_node:
                body.append(field_node)

        return self._class_node(entry.name, [], body, decorators)

    def _generate_enum_class(self, entry: TypeEntry) -> ast.ClassDef:
        """Generate an Enum class for an ENUM entry."""
        self.python_imports.add(("enum", "Enum"))

        bases = []
        if entry.value_type in ("string", "integer"):
            bases.append(ast.Name(id=self.TYPE_MAP[entry.value_type], ctx=ast.Load()))
        bases.append(ast.Name(id="Enum", ctx=ast.Load()))

        body = self._docstring(entry)
        for member_name, member_value in entry.members.items():
            body.append(
                ast.Assign(
                    targets=[ast.Name(id=member_name, ctx=ast.Store())],
                    value=ast.Constant(value=member_value),
                )
            )

        return self._class_node(entry.name, bases, body, [])

    def _generate_tuple_class(self, entry: TypeEntry) -> ast.ClassDef:
        """Generate ``class X(tuple[A, B])`` for a TUPLE_STRUCT entry."""
        tuple_type = TypeRef(kind=TypeKind.TUPLE, name="tuple", type_args=entry.variants)
        base = self._parse_expr(self.translate_type(tuple_type))
        return self._class_node(entry.name, [base], self._docstring(entry), [])

    def _generate_union_alias(self, entry: TypeEntry) -> ast.Assign:
        """Generate ``X = A | B`` for a UNION entry, variants in schema order."""
        union_type = TypeRef(kind=TypeKind.UNION, name="union", type_args=entry.variants)
        return ast.Assign(
            targets=[ast.Name(id=entry.name, ctx=ast.Store())],
            value=self._parse_expr(self.translate_type(union_type)),
        )

    def _generate_newtype(self, entry: TypeEntry) -> ast.Assign:
        """Generate ``X = NewType("X", T)`` for a NEWTYPE entry."""
        self.python_imports.add(("typing", "NewType"))
        return ast.Assign(
            targets=[ast.Name(id=entry.name, ctx=ast.Store())],
            value=ast.Call(
                func=ast.Name(id="NewType", ctx=ast.Load()),
                args=[ast.Constant(value=entry.name), self._parse_expr(self.translate_type(entry.target))],
                keywords=[],
            ),
        )

    def _class_node(self, name: str, bases: list[ast.expr], body: list[ast.stmt], decorators: list[ast.expr]) -> ast.ClassDef:
        if not body:
            body = [ast.Pass()]
        return ast.ClassDef(
            name=name,
            bases=bases,
            keywords=[],
            body=body,
            decorator_list=decorators,
            type_params=[],
        )

    def _docstring(self, entry: TypeEntry) -> list[ast.stmt]:
        if not entry.description:
            return []
        return [ast.Expr(value=ast.Constant(value=entry.description))]

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def _generate_field(self, field_def: FieldDef) -> ast.AnnAssign | None:
        """Generate a field definition as annotated assignment."""
        if not field_def.type_ref:
            return None

        return ast.AnnAssign(
            target=ast.Name(id=field_def.name, ctx=ast.Store()),
            annotation=self._parse_expr(self.translate_type(field_def.type_ref)),
            value=self._get_field_default(field_def),
            simple=1,
        )

    def _get_field_default(self, field_def: FieldDef) -> ast.expr | None:
        """
        Build the value of a field assignment.

        Plain literals are used when nothing else is needed; a
        ``field(...)`` call is emitted for mutable defaults, renamed
        properties and excluded defaults.

        Args:
            field_def: The field

        Returns:
            The expression, or None for a required field without default
        """
        config_args: list[str] = []
        if field_def.is_renamed:
            config_args.append(f"field_name={field_def.original_name!r}")

        if not field_def.has_default:
            if not config_args:
                return None
            self._import_field_helpers()
            return self._parse_expr(f"field(metadata=config({', '.join(config_args)}))")

        value = field_def.default_value
        default_arg = self._default_argument(value, field_def.type_ref)
        if self.config.exclude_default_value_from_json:
            config_args.append(f"exclude={self._exclude_predicate(value)}")

        if default_arg.startswith("default=") and not config_args:
            return self._parse_expr(self.format_default_value(value, field_def.type_ref))

        arguments = [default_arg]
        if config_args:
            arguments.append(f"metadata=config({', '.join(config_args)})")
        self._import_field_helpers(with_config=bool(config_args))
        return self._parse_expr(f"field({', '.join(arguments)})")

    def _import_field_helpers(self, with_config: bool = True) -> None:
        self.python_imports.add(("dataclasses", "field"))
        if with_config:
            self.python_imports.add(("dataclasses_json", "config"))

    def _default_argument(self, value: Any, type_ref: TypeRef | None) -> str:
        """Keyword passed to field(): default= for immutables, default_factory= otherwise."""
        if isinstance(value, list):
            return "default_factory=list" if not value else f"default_factory=lambda: {value!r}"
        if isinstance(value, dict):
            if type_ref is not None and type_ref.kind == TypeKind.CLASS:
                return f"default_factory=lambda: {type_ref.name}.from_dict({value!r})"
            return "default_factory=dict" if not value else f"default_factory=lambda: {value!r}"
        return f"default={self.format_default_value(value, type_ref)}"

    def _exclude_predicate(self, value: Any) -> str:
        """Predicate telling dataclasses_json to drop a field equal to its default."""
        if value is None or isinstance(value, bool):
            return f"lambda x: x is {value!r}"
        if isinstance(value, (list, dict)) and not value:
            return "lambda x: len(x) == 0"
        return f"lambda x: x == {value!r}"

    def format_default_value(self, value: Any, type_ref: TypeRef | None) -> str:
        """Format a scalar default value for Python."""
        return repr(value)

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def translate_type(self, type_ref: TypeRef) -> str:
        """Translate a type reference to a Python type expression."""
        if type_ref.kind == TypeKind.PRIMITIVE:
            return self.TYPE_MAP.get(type_ref.name, type_ref.name)

        if type_ref.kind == TypeKind.CLASS:
            return type_ref.name

        if type_ref.kind == TypeKind.ANY:
            self.python_imports.add(("typing", "Any"))
            return "Any"

        if type_ref.kind == TypeKind.ARRAY:
            return f"list[{self._type_arg(type_ref, 0)}]"

        if type_ref.kind == TypeKind.SET:
            return f"set[{self._type_arg(type_ref, 0)}]"

        if type_ref.kind == TypeKind.TUPLE:
            if not type_ref.type_args:
                return "tuple[()]"
            return f"tuple[{', '.join(self.translate_type(t) for t in type_ref.type_args)}]"

        if type_ref.kind == TypeKind.DICT:
            return f"dict[{self._type_arg(type_ref, 0)}, {self._type_arg(type_ref, 1)}]"

        if type_ref.kind == TypeKind.UNION:
            return " | ".join(self.translate_type(t) for t in type_ref.type_args)

        if type_ref.kind == TypeKind.OPTIONAL:
            inner = self._type_arg(type_ref, 0)
            if inner == "None" or inner.endswith(" | None"):
                return inner
            return f"{inner} | None"

        if type_ref.kind == TypeKind.CONST:
            if all(v is None for v in type_ref.const_values):
                return "None"
            self.python_imports.add(("typing", "Literal"))
            return f"Literal[{', '.join(repr(v) for v in type_ref.const_values)}]"

        self.python_imports.add(("typing", "Any"))
        return "Any"

    def _type_arg(self, type_ref: TypeRef, index: int) -> str:
        if index < len(type_ref.type_args):
            return self.translate_type(type_ref.type_args[index])
        self.python_imports.add(("typing", "Any"))
        return "Any"

    def _parse_expr(self, expr_str: str) -> ast.expr:
        """Parse an expression string into an AST expression."""
        return ast.parse(expr_str, mode="eval").body

    def _post_process_code(self, blocks: list[str]) -> str:
        """Join top-level blocks with two blank lines; end with a newline."""
        return "\n\n\n".join(blocks) + "\n"
