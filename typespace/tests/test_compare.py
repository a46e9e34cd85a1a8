"""
Tests for the structural equivalence oracle.
"""

from __future__ import annotations

import textwrap

import pytest

from typespace.compare import assert_equivalent, compare_types, is_equivalent
from typespace.declarations.nodes import (
    Field,
    NamedFields,
    OpaqueDeclaration,
    PathType,
    Record,
    TupleType,
    Union,
    UnknownType,
    UnnamedFields,
    Variant,
)
from typespace.declarations.parser import parse_declaration
from typespace.errors import LengthMismatch, StructuralMismatch, UnsupportedShape


def declaration(source: str, name: str):
    return parse_declaration(textwrap.dedent(source), name)


def _field(type_ref):
    return Field(name=None, type=type_ref)


def _named(name, path):
    return Field(name=name, type=PathType(path))


PERSON = """
@dataclass_json(undefined=Undefined.RAISE)
@dataclass
class Person:
    name: str
    age: int | None = None
    scores: tuple[int, float] = (0, 0.0)
"""

COLOR = """
class Color(str, Enum):
    RED = "red"
    BLUE = "blue"
"""

UNTAGGED = """
class U:
    class A(tuple[int]):
        pass

    class B(tuple[str]):
        pass
"""

ALIAS = "Value = int | str | None\n"

NEWTYPE = 'UserId = NewType("UserId", int)\n'


class TestReflexivity:
    @pytest.mark.parametrize(
        "source,name",
        [
            (PERSON, "Person"),
            (COLOR, "Color"),
            (UNTAGGED, "U"),
            (ALIAS, "Value"),
            (NEWTYPE, "UserId"),
            ("class Empty:\n    pass\n", "Empty"),
        ],
    )
    def test_declaration_equals_itself(self, source, name):
        tree = declaration(source, name)
        assert_equivalent(tree, tree)
        assert_equivalent(tree, tree, ignore_variant_names=True)
        assert is_equivalent(tree, tree)


class TestAttributes:
    def test_rename_only_field_directive_is_ignored(self):
        renamed = declaration(
            """
            @dataclass_json
            @dataclass
            class Person:
                first_name: str = field(metadata=config(field_name="firstName"))
            """,
            "Person",
        )
        plain = declaration(
            """
            @dataclass_json
            @dataclass
            class Person:
                first_name: str
            """,
            "Person",
        )
        assert_equivalent(renamed, plain)
        assert_equivalent(plain, renamed)

    def test_rename_only_class_directive_is_ignored(self):
        camel = declaration("@dataclass_json(letter_case=LetterCase.CAMEL)\n@dataclass\nclass P:\n    x: int\n", "P")
        plain = declaration("@dataclass_json\n@dataclass\nclass P:\n    x: int\n", "P")
        assert_equivalent(camel, plain)

    def test_directive_order_and_spacing_are_ignored(self):
        first = declaration(
            "@dataclass\nclass P:\n    x: int = field(default=0, metadata=config(exclude=lambda x: x == 0, encoder=str))\n",
            "P",
        )
        second = declaration(
            "@dataclass\nclass P:\n    x: int = field(default=0, metadata=config(encoder = str, exclude = lambda x: x==0))\n",
            "P",
        )
        assert_equivalent(first, second)

    def test_non_serialization_attributes_are_ignored(self):
        kw_only = declaration("@dataclass_json\n@dataclass(kw_only=True, frozen=True)\nclass P:\n    x: int\n", "P")
        plain = declaration("@dataclass_json\n@dataclass\nclass P:\n    x: int\n", "P")
        assert_equivalent(kw_only, plain)

    def test_serialization_directive_difference_is_reported(self):
        strict = declaration("@dataclass_json(undefined=Undefined.RAISE)\n@dataclass\nclass P:\n    x: int\n", "P")
        lenient = declaration("@dataclass_json\n@dataclass\nclass P:\n    x: int\n", "P")

        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(strict, lenient)

        assert exc_info.value.location == "P.attributes"
        assert exc_info.value.expected == ["undefined=Undefined.RAISE"]
        assert exc_info.value.actual == []

    def test_field_directive_difference_is_reported(self):
        excluded = declaration(
            "@dataclass\nclass P:\n    x: int | None = field(default=None, metadata=config(exclude=lambda x: x is None))\n",
            "P",
        )
        plain = declaration("@dataclass\nclass P:\n    x: int | None = None\n", "P")

        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(excluded, plain)
        assert exc_info.value.location == "P.fields[0].attributes"

    def test_multiple_argument_groups_are_unsupported(self):
        curried = declaration("@dataclass_json(undefined=Undefined.RAISE)(x)\nclass P:\n    x: int\n", "P")
        with pytest.raises(UnsupportedShape):
            assert_equivalent(curried, curried)

    def test_variant_attributes_are_not_compared(self):
        decorated = declaration(
            """
            class U:
                @dataclass_json(undefined=Undefined.RAISE)
                class A(tuple[int]):
                    pass
            """,
            "U",
        )
        plain = declaration(
            """
            class U:
                class A(tuple[int]):
                    pass
            """,
            "U",
        )
        assert_equivalent(decorated, plain)


class TestUnions:
    def test_variant_names_compared_by_default(self):
        foo = Union(name="E", variants=(Variant(name="Foo", fields=UnnamedFields((_field(PathType("int")),))),))
        bar = Union(name="E", variants=(Variant(name="Bar", fields=UnnamedFields((_field(PathType("int")),))),))

        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(foo, bar)
        assert exc_info.value.location == "E.variants[0].name"
        assert not is_equivalent(foo, bar)

    def test_variant_names_ignored_when_relaxed(self):
        foo = Union(name="E", variants=(Variant(name="Foo", fields=UnnamedFields((_field(PathType("int")),))),))
        bar = Union(name="E", variants=(Variant(name="Bar", fields=UnnamedFields((_field(PathType("int")),))),))

        assert_equivalent(foo, bar, ignore_variant_names=True)
        assert is_equivalent(foo, bar, ignore_variant_names=True)

    def test_variant_position_matters(self):
        swapped = declaration(
            """
            class U:
                class B(tuple[str]):
                    pass

                class A(tuple[int]):
                    pass
            """,
            "U",
        )
        original = declaration(UNTAGGED, "U")

        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(original, swapped)
        assert exc_info.value.location == "U.variants[0].name"

        # Same result when names are ignored: payloads are still compared by position
        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(original, swapped, ignore_variant_names=True)
        assert exc_info.value.location == "U.variants[0].fields[0].type"
        assert exc_info.value.expected == "int"
        assert exc_info.value.actual == "str"

    def test_variant_count_mismatch(self):
        two = declaration("E = int | str\n", "E")
        three = declaration("E = int | str | bool\n", "E")

        with pytest.raises(LengthMismatch) as exc_info:
            assert_equivalent(two, three, ignore_variant_names=True)

        assert exc_info.value.location == "E.variants"
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3
        assert "variant lengths don't match" in str(exc_info.value)

    def test_relaxation_is_only_top_level(self):
        first = declaration("@dataclass\nclass P:\n    value: int | str\n", "P")
        second = declaration("@dataclass\nclass P:\n    value: str | int\n", "P")

        with pytest.raises(StructuralMismatch):
            assert_equivalent(first, second, ignore_variant_names=True)

    def test_variant_containers_always_compared(self):
        unit = Union(name="E", variants=(Variant(name="A"),))
        tuple_variant = Union(name="E", variants=(Variant(name="A", fields=UnnamedFields((_field(PathType("int")),))),))

        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(unit, tuple_variant, ignore_variant_names=True)
        assert exc_info.value.location == "E.variants[0].fields"

    def test_bare_alias_is_not_a_union(self):
        enum = declaration("class E(Enum):\n    A = 1\n", "E")
        alias = declaration("E = A\n", "E")

        # A bare alias is opaque, not a union of one member
        with pytest.raises(StructuralMismatch, match="mismatched data"):
            assert_equivalent(enum, alias)


class TestRecords:
    def test_names_must_match(self):
        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(Record(name="A"), Record(name="B"))
        assert exc_info.value.location == "A"

    def test_names_compared_even_when_relaxed(self):
        with pytest.raises(StructuralMismatch):
            assert_equivalent(Union(name="A"), Union(name="B"), ignore_variant_names=True)

    def test_record_and_union_never_coerce(self):
        with pytest.raises(StructuralMismatch, match="mismatched data"):
            assert_equivalent(Record(name="X"), Union(name="X"))

    def test_field_container_kinds_must_match(self):
        named = declaration("@dataclass\nclass P:\n    x: int\n", "P")
        unnamed = declaration("class P(tuple[int]):\n    pass\n", "P")

        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(named, unnamed)
        assert exc_info.value.location == "P.fields"
        assert exc_info.value.expected == "named"
        assert exc_info.value.actual == "unnamed"

    def test_unit_records_match(self):
        assert_equivalent(declaration("class Marker:\n    pass\n", "Marker"), declaration('class Marker:\n    """Doc."""\n', "Marker"))

    def test_field_order_matters(self):
        xy = declaration("@dataclass\nclass P:\n    x: int\n    y: int\n", "P")
        yx = declaration("@dataclass\nclass P:\n    y: int\n    x: int\n", "P")

        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(xy, yx)
        assert exc_info.value.location == "P.fields[0].name"

    def test_field_count_mismatch(self):
        one = declaration("@dataclass\nclass P:\n    x: int\n", "P")
        two = declaration("@dataclass\nclass P:\n    x: int\n    y: int\n", "P")

        with pytest.raises(LengthMismatch) as exc_info:
            assert_equivalent(one, two)
        assert exc_info.value.location == "P.fields"

    def test_field_type_location(self):
        expected = declaration("@dataclass\nclass Person:\n    name: str\n    age: int\n", "Person")
        actual = declaration("@dataclass\nclass Person:\n    name: str\n    age: float\n", "Person")

        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(expected, actual)

        error = exc_info.value
        assert error.location == "Person.fields[1].type"
        assert (error.expected, error.actual) == ("int", "float")
        assert str(error) == "Person.fields[1].type: types don't match: 'int' != 'float'"

    def test_opaque_declarations_are_unsupported(self):
        first = declaration("class P(TypedDict):\n    x: int\n", "P")
        with pytest.raises(UnsupportedShape):
            assert_equivalent(first, first)
        with pytest.raises(UnsupportedShape):
            is_equivalent(first, first)

    def test_opaque_against_record_is_a_mismatch(self):
        with pytest.raises(StructuralMismatch):
            assert_equivalent(OpaqueDeclaration(name="X", kind="alias"), Record(name="X"))


class TestTypes:
    def test_path_against_tuple_is_a_mismatch(self):
        with pytest.raises(StructuralMismatch) as exc_info:
            compare_types("X", PathType("str"), TupleType((PathType("int"), PathType("int"))))

        assert not isinstance(exc_info.value, LengthMismatch)
        assert exc_info.value.expected == "str"
        assert exc_info.value.actual == "tuple[int, int]"

    def test_path_against_tuple_in_declarations(self):
        text = declaration("@dataclass\nclass P:\n    x: str\n", "P")
        pair = declaration("@dataclass\nclass P:\n    x: tuple[int, int]\n", "P")

        with pytest.raises(StructuralMismatch):
            assert_equivalent(text, pair)

    def test_tuple_lengths(self):
        with pytest.raises(LengthMismatch) as exc_info:
            compare_types("X", TupleType((PathType("int"),)), TupleType((PathType("int"), PathType("int"))))
        assert "tuple lengths don't match" in str(exc_info.value)

    def test_tuple_elements_compared_recursively(self):
        nested = TupleType((PathType("int"), TupleType((PathType("str"),))))
        compare_types("X", nested, nested)

        with pytest.raises(StructuralMismatch) as exc_info:
            compare_types("X", nested, TupleType((PathType("int"), TupleType((PathType("bytes"),)))))
        assert exc_info.value.location == "X[1][0]"

    def test_unknown_types_are_unsupported(self):
        forward = declaration('@dataclass\nclass P:\n    x: "Node"\n', "P")
        with pytest.raises(UnsupportedShape) as exc_info:
            assert_equivalent(forward, forward)
        assert exc_info.value.location == "P.fields[0].type"

    def test_unknown_type_on_one_side_is_unsupported(self):
        with pytest.raises(UnsupportedShape):
            compare_types("X", PathType("int"), UnknownType(kind="Call", source="f()"))

    def test_unsupported_is_not_a_mismatch(self):
        assert not issubclass(UnsupportedShape, StructuralMismatch)

    def test_path_types_compare_canonical_text(self):
        spaced = declaration("@dataclass\nclass P:\n    x: dict[str,  list[ int ]]\n", "P")
        compact = declaration("@dataclass\nclass P:\n    x: dict[str, list[int]]\n", "P")
        assert_equivalent(spaced, compact)


def test_named_fields_built_directly():
    expected = Record(name="P", fields=NamedFields((_named("x", "int"),)))
    actual = Record(name="P", fields=NamedFields((_named("x", "int"),)))
    assert_equivalent(expected, actual)


class TestDefaults:
    def test_required_and_defaulted_fields_differ(self):
        required = declaration("@dataclass\nclass Config:\n    retries: int\n", "Config")
        defaulted = declaration("@dataclass\nclass Config:\n    retries: int = 3\n", "Config")

        with pytest.raises(StructuralMismatch) as exc_info:
            assert_equivalent(required, defaulted)

        assert exc_info.value.location == "Config.fields[0].attributes"
        assert exc_info.value.expected == []
        assert exc_info.value.actual == ["default=3"]

    def test_field_call_default_differs_from_required(self):
        required = declaration("@dataclass\nclass Config:\n    retries: int\n", "Config")
        defaulted = declaration("@dataclass\nclass Config:\n    retries: int = field(default=3)\n", "Config")
        assert not is_equivalent(required, defaulted)

    def test_plain_and_field_call_defaults_are_equivalent(self):
        plain = declaration("@dataclass\nclass Config:\n    retries: int = 3\n", "Config")
        call = declaration("@dataclass\nclass Config:\n    retries: int = field(default=3)\n", "Config")
        assert_equivalent(plain, call)
        assert_equivalent(call, plain)

    def test_default_values_are_compared(self):
        three = declaration("@dataclass\nclass Config:\n    retries: int = 3\n", "Config")
        five = declaration("@dataclass\nclass Config:\n    retries: int = 5\n", "Config")
        assert not is_equivalent(three, five)

    def test_default_factory_differs_from_required(self):
        factory = declaration("@dataclass\nclass Config:\n    tags: list[str] = field(default_factory=list)\n", "Config")
        required = declaration("@dataclass\nclass Config:\n    tags: list[str]\n", "Config")
        assert not is_equivalent(factory, required)

    def test_default_with_rename_matches_plain_default(self):
        renamed = declaration(
            "@dataclass\nclass P:\n    last_name: str | None = field(default=None, metadata=config(field_name='lastName'))\n",
            "P",
        )
        plain = declaration("@dataclass\nclass P:\n    last_name: str | None = None\n", "P")
        assert_equivalent(renamed, plain)
