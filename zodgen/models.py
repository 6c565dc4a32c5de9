# File: zodgen/models.py
"""
zodgen - Core Data Models
==========================
Pydantic V2 models for the ingested data model (enums, entities, fields,
unique groups) and for the generation settings.

These models are the Model Metadata Ingestor: they make a structural copy
of the raw description (a DMMF dump or a hand-written equivalent) and
build name-based lookup indexes.  No field semantics are changed here;
everything downstream reads these models and nothing else.

DMMF spellings are accepted through aliases (``isList``, ``relationFromFields``
...) and unknown keys are ignored, so a raw ``datamodel`` dump can be fed
in unchanged.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.models")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class FieldKind(str, Enum):
    """What a field's declared type refers to."""

    SCALAR = "scalar"
    ENUM = "enum"
    RELATION = "relation"


# DMMF names relation fields "object" and native-only columns "unsupported".
_KIND_ALIASES: Dict[str, str] = {
    "object": FieldKind.RELATION.value,
    "unsupported": FieldKind.SCALAR.value,
}


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_INGEST_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    use_enum_values=True,
    frozen=False,
    extra="ignore",
)

_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Enum definitions
# ---------------------------------------------------------------------------


class EnumDefinition(BaseModel):
    """A globally defined enumeration and its ordered literal values."""

    model_config = _INGEST_CONFIG

    name: str = Field(..., min_length=1, description="Enum name.")
    values: List[str] = Field(
        default_factory=list,
        description="Literal value names in declaration order.",
    )

    @field_validator("values", mode="before")
    @classmethod
    def _value_names(cls, v: Any) -> Any:
        # DMMF: [{"name": "ADMIN", "dbName": null}, ...]
        if not isinstance(v, list):
            return v
        names: List[Any] = []
        for item in v:
            if isinstance(item, dict):
                if "name" not in item:
                    raise ValueError(f"Enum value object {item!r} has no 'name'.")
                names.append(item["name"])
            else:
                names.append(item)
        return names

    def __repr__(self) -> str:
        return f"<Enum {self.name} {self.values}>"


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


class FieldInfo(BaseModel):
    """
    One field of an entity.

    ``is_list`` and ``is_required`` are orthogonal: a list field is never
    individually nullable, absence is an empty list.
    """

    model_config = _INGEST_CONFIG

    name: str = Field(..., min_length=1, description="Field name.")
    kind: FieldKind = Field(default=FieldKind.SCALAR, description="Field kind.")
    type_name: str = Field(
        ..., alias="type", min_length=1, description="Declared type name."
    )
    is_list: bool = Field(default=False, alias="isList")
    is_required: bool = Field(default=True, alias="isRequired")
    has_default_value: bool = Field(default=False, alias="hasDefaultValue")
    is_id: bool = Field(default=False, alias="isId")
    is_unique: bool = Field(default=False, alias="isUnique")
    relation_name: Optional[str] = Field(default=None, alias="relationName")
    relation_from_fields: List[str] = Field(
        default_factory=list,
        alias="relationFromFields",
        description="Local scalar fields that carry the foreign key.",
    )
    relation_to_fields: List[str] = Field(
        default_factory=list,
        alias="relationToFields",
        description="Referenced fields on the related entity.",
    )
    documentation: Optional[str] = Field(
        default=None, description="Free-text documentation (may hold an override)."
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _normalise_kind(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _KIND_ALIASES.get(v, v)
        return v

    @field_validator("relation_from_fields", "relation_to_fields", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def is_relation(self) -> bool:
        return self.kind == FieldKind.RELATION

    @property
    def is_enum(self) -> bool:
        return self.kind == FieldKind.ENUM

    @property
    def is_optional(self) -> bool:
        """True when the field may be left out of a payload."""
        return not self.is_required or self.has_default_value

    def __repr__(self) -> str:
        flags: str = "[]" if self.is_list else ("" if self.is_required else "?")
        return f"<Field {self.name}: {self.type_name}{flags} ({self.kind})>"


# ---------------------------------------------------------------------------
# Unique groups & primary key
# ---------------------------------------------------------------------------


class PrimaryKeyInfo(BaseModel):
    """Primary-key group, possibly composite."""

    model_config = _INGEST_CONFIG

    name: Optional[str] = Field(default=None, description="Constraint name.")
    fields: List[str] = Field(..., min_length=1, description="Field names.")


class UniqueIndexInfo(BaseModel):
    """Named multi-field unique constraint."""

    model_config = _INGEST_CONFIG

    name: Optional[str] = Field(default=None, description="Constraint name.")
    fields: List[str] = Field(..., min_length=1, description="Field names.")


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------


class EntityInfo(BaseModel):
    """
    One entity of the data model.

    Field order is emission order and must be preserved for output
    stability.
    """

    model_config = _INGEST_CONFIG

    name: str = Field(..., min_length=1, description="Entity name.")
    fields: List[FieldInfo] = Field(default_factory=list)
    primary_key: Optional[PrimaryKeyInfo] = Field(default=None, alias="primaryKey")
    unique_indexes: List[UniqueIndexInfo] = Field(
        default_factory=list, alias="uniqueIndexes"
    )
    documentation: Optional[str] = Field(default=None)

    _field_map: Dict[str, FieldInfo] = PrivateAttr(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _adopt_unique_fields(cls, data: Any) -> Any:
        """Accept the bare ``uniqueFields`` list-of-lists form."""
        if not isinstance(data, dict):
            return data
        if data.get("uniqueIndexes") or data.get("unique_indexes"):
            return data
        groups: Any = data.get("uniqueFields") or data.get("unique_fields")
        if groups:
            if not isinstance(groups, list):
                raise ValueError(f"uniqueFields must be a list of field-name lists, got {groups!r}.")
            data = dict(data)
            data["uniqueIndexes"] = [{"fields": group} for group in groups]
        return data

    @model_validator(mode="after")
    def _build_field_map(self) -> "EntityInfo":
        names: List[str] = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Entity '{self.name}' has duplicate fields: {dupes}")
        self._field_map = {f.name: f for f in self.fields}
        return self

    def get_field(self, name: str) -> Optional[FieldInfo]:
        """O(1) field lookup by name."""
        return self._field_map.get(name)

    @property
    def scalar_fields(self) -> List[FieldInfo]:
        """Scalar and enum fields, in declaration order."""
        return [f for f in self.fields if not f.is_relation]

    @property
    def relation_fields(self) -> List[FieldInfo]:
        return [f for f in self.fields if f.is_relation]

    @property
    def list_relation_fields(self) -> List[FieldInfo]:
        return [f for f in self.fields if f.is_relation and f.is_list]

    @property
    def foreign_key_field_names(self) -> List[str]:
        """Scalar fields that implement some relation's foreign key."""
        names: List[str] = []
        for rel in self.relation_fields:
            for name in rel.relation_from_fields:
                if name not in names:
                    names.append(name)
        return names

    def __repr__(self) -> str:
        return (
            f"<Entity {self.name} "
            f"({len(self.fields)} fields, {len(self.relation_fields)} relations)>"
        )


# ---------------------------------------------------------------------------
# Data model — top-level container
# ---------------------------------------------------------------------------


class DataModel(BaseModel):
    """
    The ingested model: enums and entities in declaration order.

    The enum map is global and complete before any entity is processed,
    since a field may reference an enum declared anywhere.
    """

    model_config = _INGEST_CONFIG

    enums: List[EnumDefinition] = Field(default_factory=list)
    entities: List[EntityInfo] = Field(default_factory=list, alias="models")

    _entity_map: Dict[str, EntityInfo] = PrivateAttr(default_factory=dict)
    _enum_map: Dict[str, List[str]] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _build_indexes(self) -> "DataModel":
        entity_names: List[str] = [e.name for e in self.entities]
        if len(entity_names) != len(set(entity_names)):
            dupes: List[str] = sorted(
                {n for n in entity_names if entity_names.count(n) > 1}
            )
            raise ValueError(f"Duplicate entity names: {dupes}")

        enum_names: List[str] = [e.name for e in self.enums]
        if len(enum_names) != len(set(enum_names)):
            dupes = sorted({n for n in enum_names if enum_names.count(n) > 1})
            raise ValueError(f"Duplicate enum names: {dupes}")

        self._entity_map = {e.name: e for e in self.entities}
        self._enum_map = {e.name: list(e.values) for e in self.enums}
        return self

    def get_entity(self, name: str) -> Optional[EntityInfo]:
        """O(1) entity lookup."""
        return self._entity_map.get(name)

    def enum_values(self, name: str) -> Optional[List[str]]:
        """Literal values of enum *name*, or None when it is not defined."""
        return self._enum_map.get(name)

    @property
    def enum_map(self) -> Dict[str, List[str]]:
        return dict(self._enum_map)

    @property
    def entity_names(self) -> List[str]:
        return [e.name for e in self.entities]

    def __repr__(self) -> str:
        return f"<DataModel {len(self.entities)} entities, {len(self.enums)} enums>"


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """Settings for one generation run and for the output placement."""

    model_config = _SETTINGS_CONFIG

    schema_module: str = Field(
        default="zod", min_length=1, description="Module the `z` namespace is imported from."
    )
    client_module: str = Field(
        default="@prisma/client",
        min_length=1,
        description="Module the client type namespace is imported from.",
    )
    output_dir: str = Field(
        default="node_modules/@prisma/zod",
        min_length=1,
        description="Default output directory when none is given.",
    )
    output_file_name: str = Field(
        default="index.ts", min_length=1, description="Generated module file name."
    )
    header_comment: str = Field(
        default="Auto-generated by zodgen. Do not edit manually.",
        description="Comment placed between the shared helpers and the entity blocks.",
    )
    indent_size: int = Field(default=2, ge=1, le=8, description="Indentation width.")
    always_lazy_references: bool = Field(
        default=False,
        description="Defer every cross-entity filter reference, not only cycles.",
    )
    write_manifest: bool = Field(
        default=False, description="Write a manifest.json next to the output."
    )

    @field_validator("output_file_name")
    @classmethod
    def _plain_file_name(cls, v: str) -> str:
        if "/" in v or "\\" in v:
            raise ValueError(f"output_file_name must be a bare file name, got {v!r}.")
        return v


class GeneratorManifest(BaseModel):
    """What the generator tells a host about itself."""

    model_config = _SETTINGS_CONFIG

    version: str
    pretty_name: str = Field(default="Zod Schema Generator", alias="prettyName")
    default_output: str = Field(alias="defaultOutput")


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FieldKind",
    "EnumDefinition",
    "FieldInfo",
    "PrimaryKeyInfo",
    "UniqueIndexInfo",
    "EntityInfo",
    "DataModel",
    "GenerationConfig",
    "GeneratorManifest",
]

logger.debug("zodgen.models loaded — %d public symbols.", len(__all__))
