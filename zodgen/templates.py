# File: zodgen/templates.py
"""
zodgen - Schema Assembler
==========================
Turns a ``DataModel`` into one Zod source document.

Per entity, in this order::

    <E>Schema                    object shape (scalar + enum fields)
    <E>WhereInputSchema          typed lazy alias of the filter body
    <E>WhereInputObjectSchema    filter body (fields, relations, AND/OR/NOT)
    <E>WhereUniqueInputSchema    unique lookup
    <E>IncludeSchema             relation include directive
    <E>CreateInputSchema         create payload
    <E>UpdateInputSchema         partial create payload
    <E>{FindMany,FindUnique,Create,Update,Delete}ArgsSchema

The document is: imports, used enum schemas (first-use order), the shared
helpers, the header comment, then every entity block in declaration order.

All string assembly uses the ``List[str]`` + ``"\\n".join()`` pattern.
The assembler itself holds no per-pass state: every ``assemble()`` call
starts from a fresh ``GenerationState``, so identical input gives
byte-identical output.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from zodgen.expressions import build_field_expression
from zodgen.models import DataModel, EntityInfo, FieldInfo, GenerationConfig
from zodgen.relations import (
    count_select_lines,
    create_omitted_fields,
    include_directive,
    lazy_reference,
    relation_create_expression,
    relation_where_expression,
    scalar_where_reference,
)
from zodgen.state import GenerationState
from zodgen.uniques import build_unique_combos
from zodgen.utils import enum_schema_name, indent_lines, quote_single, schema_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.templates")


class SchemaAssembler:
    """
    Renders the schema document for one data model.

    Usage::

        text = SchemaAssembler(model, config).assemble()
    """

    def __init__(self, model: DataModel, config: Optional[GenerationConfig] = None) -> None:
        self._model: DataModel = model
        self._config: GenerationConfig = config or GenerationConfig()
        self._indent: str = " " * self._config.indent_size
        self._double_indent: str = self._indent * 2
        logger.debug(
            "SchemaAssembler initialised (%d entities, always_lazy=%s).",
            len(model.entities),
            self._config.always_lazy_references,
        )

    # ===================================================================
    # Document
    # ===================================================================

    def assemble(self) -> str:
        """Run one generation pass and return the full document text."""
        text, _ = self.assemble_pass()
        return text

    def assemble_pass(self) -> Tuple[str, GenerationState]:
        """Like ``assemble()`` but also return the finished pass state."""
        state: GenerationState = GenerationState()

        for entity in self._model.entities:
            self._emit_entity(entity, state)

        lines: List[str] = self._import_lines()
        lines.append("")

        if state.enum_usage:
            lines.extend(self._enum_lines(state))
            lines.append("")

        lines.extend(self._helper_lines())
        if self._config.header_comment:
            lines.extend(f"// {line}".rstrip() for line in self._config.header_comment.splitlines())
            lines.append("")
        lines.extend(state.lines)

        text: str = "\n".join(lines).rstrip("\n") + "\n"
        logger.info(
            "Assembled %d entities and %d enum schema(s) into %d lines.",
            len(state.emitted_entities),
            len(state.enum_usage),
            text.count("\n"),
        )
        return text, state

    def _import_lines(self) -> List[str]:
        return [
            f"import {{ z }} from {quote_single(self._config.schema_module)};",
            f"import type {{ Prisma }} from {quote_single(self._config.client_module)};",
        ]

    def _enum_lines(self, state: GenerationState) -> List[str]:
        lines: List[str] = []
        for name, values in state.enum_usage.items():
            literals: str = ", ".join(quote_single(v) for v in values)
            lines.append(f"export const {enum_schema_name(name)} = z.enum([{literals}] as const);")
        return lines

    def _helper_lines(self) -> List[str]:
        i: str = self._indent
        ii: str = self._double_indent
        return [
            "type WhereRelationFilter<T> = {",
            f"{i}some?: T;",
            f"{i}none?: T;",
            f"{i}every?: T;",
            "};",
            "",
            "const whereRelationLazy = <T>(getSchema: () => z.ZodType<T>): "
            "z.ZodType<WhereRelationFilter<T>> =>",
            f"{i}z.object({{",
            f"{ii}some: z.lazy(getSchema),",
            f"{ii}none: z.lazy(getSchema),",
            f"{ii}every: z.lazy(getSchema),",
            f"{i}}})",
            f"{ii}.partial()",
            f"{ii}.strip();",
            "",
            "const includeRelationLazy = <Schema extends z.ZodTypeAny>(",
            f"{i}getArgsSchema: () => Schema",
            "): z.ZodType<boolean | z.infer<Schema>> =>",
            f"{i}z.union([z.boolean(), z.lazy(getArgsSchema)]) as z.ZodType<boolean | z.infer<Schema>>;",
            "",
        ]

    # ===================================================================
    # Entity block
    # ===================================================================

    def _emit_entity(self, entity: EntityInfo, state: GenerationState) -> None:
        lines: List[str] = state.lines
        lines.append(f"// {entity.name}")
        lines.extend(self._object_schema(entity, state))
        lines.extend(self._where_schema(entity, state))
        lines.extend(self._where_unique_schema(entity))
        lines.extend(self._include_schema(entity))
        lines.extend(self._create_input_schema(entity))
        lines.extend(self._update_input_schema(entity))
        lines.extend(self._args_schemas(entity))
        state.mark_emitted(entity.name)
        logger.debug("Emitted entity '%s'.", entity.name)

    def _object_schema(self, entity: EntityInfo, state: GenerationState) -> List[str]:
        enums: Dict[str, List[str]] = self._model.enum_map
        lines: List[str] = [f"export const {schema_name(entity.name)} = z.object({{"]
        for f in entity.scalar_fields:
            expression: str = build_field_expression(f, state, enums)
            lines.append(f"{self._indent}{f.name}: {expression},")
        lines.extend(["}).strip();", ""])
        return lines

    def _where_schema(self, entity: EntityInfo, state: GenerationState) -> List[str]:
        name: str = entity.name
        where: str = schema_name(name, "WhereInput")
        body: str = schema_name(name, "WhereInputObject")
        self_ref: str = lazy_reference(where)
        always_lazy: bool = self._config.always_lazy_references

        lines: List[str] = [
            f"export const {where}: z.ZodType<Prisma.{name}WhereInput> = {lazy_reference(body)};",
            "",
            f"const {body} = z.object({{",
        ]
        for f in entity.scalar_fields:
            lines.append(f"{self._indent}{f.name}: {scalar_where_reference(name, f)},")
        for f in entity.relation_fields:
            fragment: str = relation_where_expression(f, name, state, always_lazy)
            lines.append(f"{self._indent}{f.name}: {fragment},")
        lines.extend([
            f"{self._indent}AND: z.union([{self_ref}, {self_ref}.array()]),",
            f"{self._indent}OR: {self_ref}.array(),",
            f"{self._indent}NOT: z.union([{self_ref}, {self_ref}.array()]),",
            "}).partial().strip();",
            "",
        ])
        return lines

    def _where_unique_schema(self, entity: EntityInfo) -> List[str]:
        name: str = entity.name
        where: str = schema_name(name, "WhereInput")
        unique: str = schema_name(name, "WhereUniqueInput")
        cast: str = f"z.ZodType<Prisma.{name}WhereUniqueInput>"
        combos: List[List[FieldInfo]] = build_unique_combos(entity)

        if not combos:
            return [f"export const {unique} = {where} as {cast};", ""]

        branches: List[List[str]] = [self._unique_branch(name, combo) for combo in combos]
        if len(branches) == 1:
            body: List[str] = branches[0]
        else:
            body = ["z.union(["]
            for index, branch in enumerate(branches):
                indented: List[str] = indent_lines(branch, 1, self._config.indent_size)
                if index < len(branches) - 1:
                    indented[-1] += ","
                body.extend(indented)
            body.append("])")

        body[0] = f"export const {unique} = {body[0]}"
        body[-1] = f"{body[-1]} as {cast};"
        return body + [""]

    def _unique_branch(self, entity_name: str, combo: List[FieldInfo]) -> List[str]:
        lines: List[str] = ["z.intersection(", f"{self._indent}z.object({{"]
        for f in combo:
            lines.append(f"{self._double_indent}{f.name}: {scalar_where_reference(entity_name, f)},")
        lines.extend([
            f"{self._indent}}}),",
            f"{self._indent}{schema_name(entity_name, 'WhereInput')}",
            ")",
        ])
        return lines

    def _include_schema(self, entity: EntityInfo) -> List[str]:
        include: str = schema_name(entity.name, "Include")
        if not entity.relation_fields:
            return [f"export const {include} = z.object({{}}).strip();", ""]

        lines: List[str] = [f"export const {include} = z.object({{"]
        for f in entity.relation_fields:
            lines.append(f"{self._indent}{f.name}: {include_directive(f)},")
        lines.extend(count_select_lines(entity, self._indent))
        lines.extend([
            f"}}).partial().strip() satisfies z.ZodType<Prisma.{entity.name}Include>;",
            "",
        ])
        return lines

    def _create_input_schema(self, entity: EntityInfo) -> List[str]:
        create: str = schema_name(entity.name, "CreateInput")
        base: str = schema_name(entity.name)
        omitted: List[str] = create_omitted_fields(entity)
        if omitted:
            keys: str = ", ".join(f"{n}: true" for n in omitted)
            base = f"{base}.omit({{ {keys} }})"

        lines: List[str] = [f"export const {create} = {base}.extend({{"]
        for f in entity.relation_fields:
            payload: str = relation_create_expression(f, entity, self._model, self._indent)
            lines.append(f"{self._indent}{f.name}: {payload},")
        lines.extend(["});", ""])
        return lines

    def _update_input_schema(self, entity: EntityInfo) -> List[str]:
        update: str = schema_name(entity.name, "UpdateInput")
        create: str = schema_name(entity.name, "CreateInput")
        return [f"export const {update} = {create}.partial();", ""]

    def _args_schemas(self, entity: EntityInfo) -> List[str]:
        name: str = entity.name
        i: str = self._indent
        include: str = schema_name(name, "Include")
        where: str = schema_name(name, "WhereInput")
        unique: str = schema_name(name, "WhereUniqueInput")

        bundles: List[Tuple[str, List[str]]] = [
            ("FindManyArgs", [
                f"include: {include}.default({{}})",
                f"where: {where}.optional()",
                f"cursor: {unique}.optional()",
                "take: z.number().optional()",
                "skip: z.number().optional()",
            ]),
            ("FindUniqueArgs", [f"include: {include}", f"where: {unique}"]),
            ("CreateArgs", [f"data: {schema_name(name, 'CreateInput')}"]),
            ("UpdateArgs", [f"data: {schema_name(name, 'UpdateInput')}", f"where: {unique}"]),
            ("DeleteArgs", [f"include: {include}.optional()", f"where: {unique}"]),
        ]

        lines: List[str] = []
        for suffix, members in bundles:
            lines.append(f"export const {schema_name(name, suffix)} = z.object({{")
            lines.extend(f"{i}{member}," for member in members)
            lines.extend([f"}}).strip() satisfies z.ZodType<Prisma.{name}{suffix}>;", ""])
        return lines


def render_schemas(model: DataModel, config: Optional[GenerationConfig] = None) -> str:
    """Convenience wrapper: one pass over *model*, returning the document."""
    return SchemaAssembler(model, config).assemble()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaAssembler",
    "render_schemas",
]

logger.debug("zodgen.templates loaded.")
