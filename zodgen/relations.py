# File: zodgen/relations.py
"""
zodgen - Relation & Cross-Reference Resolver
=============================================
Relation-aware fragments for the filter, include and create schemas.

Entity schemas reference each other through relations, often in cycles.
A reference to another entity's filter schema is wrapped in
``z.lazy(() => ...)`` whenever the target is the entity being built or
has not been emitted yet in this pass; otherwise it is bound directly.
With ``always_lazy`` every singular reference is deferred.

Nested ``create`` payloads are emitted as a comment only: a nested create
schema would re-enter the owning entity's own create schema.  ``connect``
by unique key is supported.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from zodgen.models import DataModel, EntityInfo, FieldInfo
from zodgen.state import GenerationState
from zodgen.utils import key_access, schema_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.relations")


# ---------------------------------------------------------------------------
# Reference helpers
# ---------------------------------------------------------------------------


def needs_lazy(
    target: str,
    current: str,
    state: GenerationState,
    always_lazy: bool = False,
) -> bool:
    """Whether a reference from *current* to *target* must be deferred."""
    return always_lazy or target == current or not state.is_emitted(target)


def lazy_reference(name: str) -> str:
    return f"z.lazy(() => {name})"


def client_filter_type(entity_name: str, field_name: str) -> str:
    """Client type of one filter key, e.g. ``Prisma.UserWhereInput["email"]``."""
    return f"Prisma.{entity_name}WhereInput{key_access(field_name)}"


# ---------------------------------------------------------------------------
# Filter predicate
# ---------------------------------------------------------------------------


def relation_where_expression(
    field: FieldInfo,
    entity_name: str,
    state: GenerationState,
    always_lazy: bool = False,
) -> str:
    """Filter fragment for one relation field."""
    target_where: str = schema_name(field.type_name, "WhereInput")

    if field.is_list:
        return f"whereRelationLazy(() => {target_where})"

    if needs_lazy(field.type_name, entity_name, state, always_lazy):
        expression: str = lazy_reference(target_where)
    else:
        expression = target_where

    if field.type_name == entity_name:
        expression = f"{expression} as z.ZodType<{client_filter_type(entity_name, field.name)}>"
    return expression


def scalar_where_reference(entity_name: str, field: FieldInfo) -> str:
    """Filter fragment for a scalar field: reuse the object schema's shape."""
    if field.is_list:
        return f"z.custom<{client_filter_type(entity_name, field.name)}>()"
    return f"{schema_name(entity_name)}.shape{key_access(field.name)}"


# ---------------------------------------------------------------------------
# Include directive
# ---------------------------------------------------------------------------


def include_directive(field: FieldInfo) -> str:
    """Boolean include flag; the detailed args selector stays reserved."""
    suffix: str = "FindManyArgs" if field.is_list else "FindUniqueArgs"
    target_args: str = schema_name(field.type_name, suffix)
    return f"z.union([z.boolean()/*, {lazy_reference(target_args)}*/])"


def count_select_lines(entity: EntityInfo, unit: str) -> List[str]:
    """``_count`` selector lines covering every list relation, or []."""
    list_relations: List[FieldInfo] = entity.list_relation_fields
    if not list_relations:
        return []

    lines: List[str] = [
        f"{unit}_count: z.union([z.boolean(), z.object({{",
        f"{unit * 2}select: z.object({{",
    ]
    for f in list_relations:
        target_where: str = schema_name(f.type_name, "WhereInput")
        lines.append(
            f"{unit * 3}{f.name}: z.union([z.boolean()/*, z.object({{ where: "
            f"{target_where}.optional() }}).strip()*/]).optional(),"
        )
    lines.append(
        f"{unit * 2}}}).partial().strip() satisfies "
        f"z.ZodType<Prisma.{entity.name}CountOutputTypeSelect>,"
    )
    lines.append(
        f"{unit}}}).strip() satisfies "
        f"z.ZodType<Prisma.{entity.name}CountOutputTypeDefaultArgs>]),"
    )
    return lines


# ---------------------------------------------------------------------------
# Create payload
# ---------------------------------------------------------------------------


def create_omitted_fields(entity: EntityInfo) -> List[str]:
    """Id fields and foreign-key carriers, in field order."""
    carriers: List[str] = entity.foreign_key_field_names
    return [
        f.name
        for f in entity.scalar_fields
        if f.is_id or f.name in carriers
    ]


def back_relation_fields(
    field: FieldInfo,
    owner: EntityInfo,
    model: DataModel,
) -> List[str]:
    """Fields on the related entity that point back at *owner* through *field*'s relation."""
    target: Optional[EntityInfo] = model.get_entity(field.type_name)
    if target is None:
        return []

    names: List[str] = []
    for other in target.relation_fields:
        if target.name == owner.name and other.name == field.name:
            continue
        if field.relation_name is not None:
            matched: bool = other.relation_name == field.relation_name
        else:
            matched = other.type_name == owner.name
        if matched:
            names.append(other.name)
    return names


def _one_or_many(reference: str, is_list: bool) -> str:
    single: str = lazy_reference(reference)
    if is_list:
        return f"z.union([{single}, {single}.array()])"
    return single


def nested_create_comment(field: FieldInfo, owner: EntityInfo, model: DataModel) -> str:
    """The nested ``create`` fragment, emitted commented out."""
    target_create: str = schema_name(field.type_name, "CreateInput")
    back: List[str] = back_relation_fields(field, owner, model)
    if back:
        omitted: str = ", ".join(f"{name}: true" for name in back)
        target_create = f"{target_create}.omit({{ {omitted} }})"
    return f"// create: {_one_or_many(target_create, field.is_list)}.optional(),"


def relation_create_expression(
    field: FieldInfo,
    owner: EntityInfo,
    model: DataModel,
    unit: str,
) -> str:
    """Nested relation payload inside the owner's create input."""
    target_unique: str = schema_name(field.type_name, "WhereUniqueInput")
    lines: List[str] = [
        "z.object({",
        f"{unit * 2}{nested_create_comment(field, owner, model)}",
        f"{unit * 2}connect: {_one_or_many(target_unique, field.is_list)}.optional(),",
        f"{unit}}}).strip()",
    ]
    expression: str = "\n".join(lines)
    if field.is_list or field.is_optional:
        expression = f"{expression}.optional()"
    return expression


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "needs_lazy",
    "lazy_reference",
    "client_filter_type",
    "relation_where_expression",
    "scalar_where_reference",
    "include_directive",
    "count_select_lines",
    "create_omitted_fields",
    "back_relation_fields",
    "nested_create_comment",
    "relation_create_expression",
]

logger.debug("zodgen.relations loaded.")
