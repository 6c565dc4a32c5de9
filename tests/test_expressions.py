"""
tests/test_expressions.py
Unit tests for zodgen.expressions (field expression builder).

Tests cover:
- Expression parsing into Chain / Call / Raw nodes
- Normalisation rewrites and their idempotence
- Override extraction (@zod / @z markers, use(...) pass-through)
- Default scalar/enum mapping and the fallbacks
- List wrapping, nullability and optionality composition
"""

from __future__ import annotations

from typing import Dict, List

import pytest

from conftest import make_field
from zodgen.expressions import (
    SCALAR_EXPRESSIONS,
    Call,
    Chain,
    Raw,
    build_field_expression,
    call_bare_primitives,
    ensure_array,
    ensure_nullable,
    ensure_optional,
    extract_override,
    hoist_array_modifier,
    is_array,
    normalise_text,
    parse_expression,
)
from zodgen.models import FieldInfo
from zodgen.state import GenerationState

ENUMS: Dict[str, List[str]] = {"Role": ["ADMIN", "USER"], "Empty": []}


def _field(name: str = "f", type_name: str = "String", **flags) -> FieldInfo:
    return FieldInfo.model_validate(make_field(name, type_name, **flags))


# ===========================================================================
# Parsing
# ===========================================================================


class TestParseExpression:
    def test_simple_chain(self) -> None:
        node = parse_expression("z.string().min(1)")
        assert isinstance(node, Chain)
        assert [c.name for c in node.calls] == ["z", "string", "min"]
        assert node.calls[0].args is None
        assert node.calls[1].args == ()
        assert node.has_namespace_head

    def test_leading_dot(self) -> None:
        node = parse_expression(".min(1).max(5)")
        assert isinstance(node, Chain)
        assert node.leading_dot
        assert node.render() == ".min(1).max(5)"

    def test_generic_type_arguments(self) -> None:
        node = parse_expression('z.custom<Prisma.UserWhereInput["tags"]>()')
        assert isinstance(node, Chain)
        assert node.calls[1] == Call("custom", 'Prisma.UserWhereInput["tags"]', ())

    def test_nested_arguments(self) -> None:
        node = parse_expression("z.array(z.string().min(1))")
        assert isinstance(node, Chain)
        inner = node.calls[1].args[0]
        assert isinstance(inner, Chain)
        assert inner.render() == "z.string().min(1)"

    def test_dots_inside_strings_and_brackets(self) -> None:
        text = "z.string().regex(/a.b/).default('x.y')"
        node = parse_expression(text)
        assert isinstance(node, Chain)
        assert node.render() == text

    @pytest.mark.parametrize(
        "text", ["1.5", "z.string(", "() => Foo", "a..b", "z.string() + 1"],
    )
    def test_unreadable_text_is_raw(self, text: str) -> None:
        node = parse_expression(text)
        assert isinstance(node, Raw)
        assert node.render() == text

    def test_argument_literals_survive(self) -> None:
        text = "z.enum(['A', 'B'])"
        assert parse_expression(text).render() == text


# ===========================================================================
# Normalisation
# ===========================================================================


class TestNormalisation:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("z.string", "z.string()"),
            ("z.number.int()", "z.number().int()"),
            ("z.string().optional()", "z.string().optional()"),
            ("z.array(z.boolean)", "z.array(z.boolean())"),
            ("z.custom<Foo>()", "z.custom<Foo>()"),
            ("z.lazy", "z.lazy"),
        ],
    )
    def test_bare_primitive_becomes_call(self, text: str, expected: str) -> None:
        assert call_bare_primitives(parse_expression(text)).render() == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("z.string().array(.min(1))", "z.string().min(1).array()"),
            ("z.string().array(.min(1).max(3))", "z.string().min(1).max(3).array()"),
            ("z.number().array(.int(.positive()))", "z.number().int(.positive()).array()"),
            ("z.string().array()", "z.string().array()"),
            ("z.array(z.string())", "z.array(z.string())"),
        ],
    )
    def test_array_wrapper_becomes_modifier(self, text: str, expected: str) -> None:
        assert hoist_array_modifier(parse_expression(text)).render() == expected

    def test_array_rewrite_in_arguments(self) -> None:
        text = "z.object({a: 1}).or(z.string().array(.min(2)))"
        assert normalise_text(text) == "z.object({a: 1}).or(z.string().min(2).array())"

    def test_nested_array_wrappers(self) -> None:
        text = "z.string().array(.min(1).array(.max(2)))"
        assert normalise_text(text) == "z.string().min(1).max(2).array().array()"

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("z.union([z.string, z.number])", "z.union([z.string(), z.number()])"),
            ("z.object({ a: z.string })", "z.object({ a: z.string() })"),
            ("z.object({ a: z.string, 'b:c': z.boolean.optional() })",
             "z.object({ a: z.string(), 'b:c': z.boolean().optional() })"),
            ("z.object({ tags: z.string().array(.min(1)) })",
             "z.object({ tags: z.string().min(1).array() })"),
            ("z.tuple([z.object({ n: z.number }), z.date])",
             "z.tuple([z.object({ n: z.number() }), z.date()])"),
            ("z.enum(['z.string', 'a'])", "z.enum(['z.string', 'a'])"),
            ("z.object({ ...Base.shape, a: z.any })", "z.object({ ...Base.shape, a: z.any() })"),
        ],
    )
    def test_rewrites_inside_literals(self, text: str, expected: str) -> None:
        assert normalise_text(text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "z.string",
            "z.string().array(.min(1))",
            "z.array(z.number.array(.int()))",
            "Foo.bar(",
            "z.union([z.string, z.number])",
            "z.object({ a: z.string.array(.max(3)) })",
        ],
    )
    def test_idempotent(self, text: str) -> None:
        once = normalise_text(text)
        assert normalise_text(once) == once


# ===========================================================================
# Override extraction
# ===========================================================================


class TestExtractOverride:
    @pytest.mark.parametrize(
        "doc,expected",
        [
            ("@zod.string().min(1)", "z.string().min(1)"),
            ("@z.string().email()", "z.string().email()"),
            ("@zod string().min(2)", "z.string().min(2)"),
            ("@zod.z.string()", "z.string()"),
            ("@zod.string", "z.string()"),
            ("@zod.string().array(.min(1))", "z.string().min(1).array()"),
            ("  @zod.number().int()  ", "z.number().int()"),
            ("@zod.union([z.string, z.number])", "z.union([z.string(), z.number()])"),
            ("@z.object({ a: z.string })", "z.object({ a: z.string() })"),
        ],
    )
    def test_chain_override(self, doc: str, expected: str) -> None:
        assert extract_override(doc) == expected

    @pytest.mark.parametrize(
        "doc,expected",
        [
            ("@zod.use(MyCustomSchema)", "MyCustomSchema"),
            ("@z.use(z.string().uuid())", "z.string().uuid()"),
            ("@zod.string().use(Other.schema)", "Other.schema"),
            ("@zod.use(() => Foo)", "() => Foo"),
        ],
    )
    def test_use_passthrough(self, doc: str, expected: str) -> None:
        assert extract_override(doc) == expected

    @pytest.mark.parametrize(
        "doc",
        [None, "", "   ", "Just a comment", "@zodiac.string()", "@zod", "@z  ", "x @zod.string()"],
    )
    def test_not_an_override(self, doc) -> None:
        assert extract_override(doc) is None

    def test_only_first_line_counts(self) -> None:
        assert extract_override("The title\n@zod.string()") is None
        assert extract_override("@zod.string().min(3)\nMore docs") == "z.string().min(3)"


# ===========================================================================
# Composition helpers
# ===========================================================================


class TestComposition:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("z.array(z.string())", True),
            ("z.string().array()", True),
            ("z.string().array().min(1)", True),
            ("z.string()", False),
            ("z.object({ a: z.array(z.string()) })", False),
            ("(z.string()).array()", True),
            ("Foo + 1", False),
        ],
    )
    def test_is_array(self, text: str, expected: bool) -> None:
        assert is_array(text) is expected

    def test_ensure_array_wraps_once(self) -> None:
        assert ensure_array("z.string()") == "z.array(z.string())"
        assert ensure_array("z.array(z.string())") == "z.array(z.string())"

    def test_ensure_nullable(self) -> None:
        assert ensure_nullable("z.string()") == "z.string().nullable()"
        assert ensure_nullable("z.string().nullable()") == "z.string().nullable()"
        assert ensure_nullable("z.string().nullish()") == "z.string().nullish()"

    def test_ensure_optional(self) -> None:
        assert ensure_optional("z.string()") == "z.string().optional()"
        assert ensure_optional("z.string().optional()") == "z.string().optional()"
        assert ensure_optional("z.string().optional().nullable()") == (
            "z.string().optional().nullable().optional()"
        )


# ===========================================================================
# Field expressions
# ===========================================================================


class TestBuildFieldExpression:
    @pytest.mark.parametrize("type_name,expected", sorted(SCALAR_EXPRESSIONS.items()))
    def test_scalar_table(self, type_name: str, expected: str, state: GenerationState) -> None:
        assert build_field_expression(_field(type_name=type_name), state, ENUMS) == expected

    def test_unmapped_scalar_falls_back_to_any(self, state: GenerationState) -> None:
        assert build_field_expression(_field(type_name="Geometry"), state, ENUMS) == "z.any()"

    def test_required_has_no_modifiers(self, state: GenerationState) -> None:
        expression = build_field_expression(_field(), state, ENUMS)
        assert "nullable" not in expression and "optional" not in expression

    def test_not_required_is_nullable_and_optional(self, state: GenerationState) -> None:
        expression = build_field_expression(_field(isRequired=False), state, ENUMS)
        assert expression == "z.string().nullable().optional()"

    def test_default_is_optional_only(self, state: GenerationState) -> None:
        expression = build_field_expression(_field(hasDefaultValue=True), state, ENUMS)
        assert expression == "z.string().optional()"

    @pytest.mark.parametrize("required", [True, False])
    @pytest.mark.parametrize("default", [True, False])
    def test_list_never_nullable(self, required: bool, default: bool, state: GenerationState) -> None:
        field = _field(isList=True, isRequired=required, hasDefaultValue=default)
        expression = build_field_expression(field, state, ENUMS)
        assert expression.startswith("z.array(z.string())")
        assert "nullable" not in expression
        assert expression.endswith(".optional()") is field.is_optional

    def test_known_enum_recorded(self, state: GenerationState) -> None:
        field = _field("role", "Role", kind="enum")
        assert build_field_expression(field, state, ENUMS) == "RoleSchema"
        assert state.enum_usage == {"Role": ["ADMIN", "USER"]}

    def test_enum_recorded_once(self, state: GenerationState) -> None:
        for name in ("a", "b"):
            build_field_expression(_field(name, "Role", kind="enum"), state, ENUMS)
        assert list(state.enum_usage) == ["Role"]

    @pytest.mark.parametrize("enum_name", ["Empty", "Missing"])
    def test_unknown_or_empty_enum_is_string(self, enum_name: str, state: GenerationState) -> None:
        field = _field("e", enum_name, kind="enum")
        assert build_field_expression(field, state, ENUMS) == "z.string()"
        assert state.enum_usage == {}

    def test_override_replaces_default(self, state: GenerationState) -> None:
        field = _field(documentation="@zod.string().min(1).max(200)")
        assert build_field_expression(field, state, ENUMS) == "z.string().min(1).max(200)"

    def test_override_skips_enum_recording(self, state: GenerationState) -> None:
        field = _field("role", "Role", kind="enum", documentation="@zod.literal('ADMIN')")
        assert build_field_expression(field, state, ENUMS) == "z.literal('ADMIN')"
        assert state.enum_usage == {}

    def test_override_then_modifiers(self, state: GenerationState) -> None:
        field = _field(isRequired=False, documentation="@zod.string().email()")
        assert build_field_expression(field, state, ENUMS) == (
            "z.string().email().nullable().optional()"
        )

    def test_override_keeps_declared_nullable(self, state: GenerationState) -> None:
        field = _field(isRequired=False, documentation="@zod.string().nullish()")
        assert build_field_expression(field, state, ENUMS) == "z.string().nullish().optional()"

    def test_override_array_not_rewrapped(self, state: GenerationState) -> None:
        field = _field(isList=True, documentation="@zod.string().array(.max(5))")
        assert build_field_expression(field, state, ENUMS) == "z.string().max(5).array()"

    def test_plain_documentation_ignored(self, state: GenerationState) -> None:
        field = _field(documentation="The user's display name")
        assert build_field_expression(field, state, ENUMS) == "z.string()"
