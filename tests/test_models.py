"""
tests/test_models.py
Unit tests for zodgen.models (ingestion of the data model and settings).

Tests cover:
- DMMF spellings and aliases (isList, relationFromFields, kind "object")
- Enum value forms (bare strings and {name: ...} objects)
- uniqueFields list-of-lists → unique indexes
- Lookup indexes and duplicate-name rejection
- GenerationConfig defaults and validation
"""

from __future__ import annotations

from typing import Any, Dict

import pytest
from pydantic import ValidationError

from conftest import make_field
from zodgen.models import (
    DataModel,
    EntityInfo,
    EnumDefinition,
    FieldInfo,
    FieldKind,
    GenerationConfig,
    GeneratorManifest,
)


class TestFieldInfo:
    def test_dmmf_aliases(self) -> None:
        f = FieldInfo.model_validate(
            make_field("author", "User", kind="object", isRequired=False,
                       relationName="PostToUser", relationFromFields=["authorId"])
        )
        assert f.kind == FieldKind.RELATION
        assert f.is_relation
        assert f.type_name == "User"
        assert not f.is_required
        assert f.relation_from_fields == ["authorId"]

    def test_defaults(self) -> None:
        f = FieldInfo.model_validate(make_field("title"))
        assert f.kind == FieldKind.SCALAR
        assert f.is_required
        assert not f.is_list
        assert not f.has_default_value
        assert f.relation_from_fields == []
        assert f.documentation is None

    def test_unsupported_kind_is_scalar(self) -> None:
        f = FieldInfo.model_validate(make_field("geom", "Unsupported", kind="unsupported"))
        assert f.kind == FieldKind.SCALAR

    def test_null_relation_lists_become_empty(self) -> None:
        f = FieldInfo.model_validate(
            make_field("posts", "Post", kind="object", isList=True,
                       relationFromFields=None, relationToFields=None)
        )
        assert f.relation_from_fields == []
        assert f.relation_to_fields == []

    def test_populate_by_python_name(self) -> None:
        f = FieldInfo(name="tags", type_name="String", is_list=True)
        assert f.is_list

    @pytest.mark.parametrize(
        "required,default,expected",
        [(True, False, False), (False, False, True), (True, True, True)],
    )
    def test_is_optional(self, required: bool, default: bool, expected: bool) -> None:
        f = FieldInfo.model_validate(
            make_field("x", isRequired=required, hasDefaultValue=default)
        )
        assert f.is_optional is expected

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldInfo.model_validate(make_field("x", kind="mystery"))

    def test_unknown_keys_ignored(self) -> None:
        f = FieldInfo.model_validate(make_field("x", dbName=None, isGenerated=False))
        assert f.name == "x"


class TestEnumDefinition:
    def test_dmmf_value_objects(self) -> None:
        e = EnumDefinition.model_validate(
            {"name": "Role", "values": [{"name": "ADMIN", "dbName": None}, {"name": "USER"}]}
        )
        assert e.values == ["ADMIN", "USER"]

    def test_bare_values(self) -> None:
        e = EnumDefinition.model_validate({"name": "Role", "values": ["A", "B"]})
        assert e.values == ["A", "B"]

    def test_empty_values_allowed(self) -> None:
        assert EnumDefinition(name="Empty").values == []

    def test_value_object_without_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="has no 'name'"):
            EnumDefinition.model_validate({"name": "Role", "values": [{"dbName": "x"}]})


class TestEntityInfo:
    def test_field_lookup(self, user_entity: EntityInfo) -> None:
        email = user_entity.get_field("email")
        assert email is not None and email.is_unique
        assert user_entity.get_field("missing") is None

    def test_field_partitions_keep_order(self, post_entity: EntityInfo) -> None:
        assert [f.name for f in post_entity.scalar_fields] == [
            "id", "title", "published", "tags", "authorId",
        ]
        assert [f.name for f in post_entity.relation_fields] == ["author"]

    def test_unique_fields_become_indexes(self, post_entity: EntityInfo) -> None:
        assert [ix.fields for ix in post_entity.unique_indexes] == [["title", "authorId"]]

    def test_explicit_unique_indexes_win(self) -> None:
        entity = EntityInfo.model_validate({
            "name": "T",
            "fields": [make_field("a"), make_field("b")],
            "uniqueFields": [["a"]],
            "uniqueIndexes": [{"name": "ab", "fields": ["a", "b"]}],
        })
        assert [ix.fields for ix in entity.unique_indexes] == [["a", "b"]]

    def test_foreign_key_field_names(self, category_entity: EntityInfo) -> None:
        assert category_entity.foreign_key_field_names == ["parentId"]

    def test_list_relation_fields(self, user_entity: EntityInfo) -> None:
        assert [f.name for f in user_entity.list_relation_fields] == ["posts"]

    def test_duplicate_field_rejected(self) -> None:
        with pytest.raises(ValidationError, match="duplicate fields"):
            EntityInfo.model_validate({
                "name": "T", "fields": [make_field("a"), make_field("a")],
            })

    @pytest.mark.parametrize("groups", [5, [5], "ab"])
    def test_malformed_unique_fields_rejected(self, groups: Any) -> None:
        with pytest.raises(ValidationError):
            EntityInfo.model_validate({
                "name": "T", "fields": [make_field("a")], "uniqueFields": groups,
            })

    def test_primary_key_alias(self) -> None:
        entity = EntityInfo.model_validate({
            "name": "T",
            "fields": [make_field("a"), make_field("b")],
            "primaryKey": {"name": None, "fields": ["a", "b"]},
        })
        assert entity.primary_key is not None
        assert entity.primary_key.fields == ["a", "b"]


class TestDataModel:
    def test_indexes(self, data_model: DataModel) -> None:
        assert data_model.entity_names == ["User", "Post", "Category"]
        assert data_model.enum_values("Role") == ["ADMIN", "USER"]
        assert data_model.enum_values("Nope") is None
        assert data_model.get_entity("Post") is not None

    def test_enum_map_is_a_copy(self, data_model: DataModel) -> None:
        data_model.enum_map["Role"] = []
        assert data_model.enum_values("Role") == ["ADMIN", "USER"]

    def test_duplicate_entity_rejected(self, minimal_model_dict: Dict[str, Any]) -> None:
        minimal_model_dict["models"].append(minimal_model_dict["models"][0])
        with pytest.raises(ValidationError, match="Duplicate entity names"):
            DataModel.model_validate(minimal_model_dict)

    def test_duplicate_enum_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate enum names"):
            DataModel.model_validate({
                "enums": [{"name": "E", "values": ["A"]}, {"name": "E", "values": ["B"]}],
            })

    def test_empty_model(self) -> None:
        model = DataModel()
        assert model.entities == [] and model.enums == []


class TestGenerationConfig:
    def test_defaults(self) -> None:
        cfg = GenerationConfig()
        assert cfg.schema_module == "zod"
        assert cfg.client_module == "@prisma/client"
        assert cfg.output_dir == "node_modules/@prisma/zod"
        assert cfg.output_file_name == "index.ts"
        assert cfg.indent_size == 2
        assert cfg.always_lazy_references is False
        assert cfg.write_manifest is False

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig.model_validate({"project_name": "x"})

    @pytest.mark.parametrize("size", [0, 9])
    def test_indent_range(self, size: int) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(indent_size=size)

    def test_file_name_must_be_bare(self) -> None:
        with pytest.raises(ValidationError, match="bare file name"):
            GenerationConfig(output_file_name="sub/index.ts")


class TestGeneratorManifest:
    def test_aliases(self) -> None:
        manifest = GeneratorManifest(version="1.0.0", default_output="out")
        dumped = manifest.model_dump(by_alias=True)
        assert dumped == {
            "version": "1.0.0",
            "prettyName": "Zod Schema Generator",
            "defaultOutput": "out",
        }
