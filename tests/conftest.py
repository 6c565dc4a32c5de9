"""
tests/conftest.py
Shared fixtures for the zodgen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Dict, List

import pytest
import yaml

from zodgen.models import DataModel, EntityInfo, GenerationConfig
from zodgen.state import GenerationState


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
MODEL_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "datamodel_example.yaml"


# ---------------------------------------------------------------------------
# Raw model data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_model_dict() -> Dict[str, Any]:
    """Load the reference datamodel_example.yaml once per session."""
    assert MODEL_EXAMPLE_PATH.exists(), (
        f"Reference model not found at {MODEL_EXAMPLE_PATH}. "
        "Make sure datamodel_example.yaml is in the project root."
    )
    with open(MODEL_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def model_dict(raw_model_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_model_dict)


@pytest.fixture()
def model_yaml_path(model_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the model dict to a temporary YAML file and return its path."""
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(model_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


@pytest.fixture()
def model_json_path(model_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the model dict to a temporary JSON file and return its path."""
    path = tmp_path / "dmmf.json"
    path.write_text(json.dumps(model_dict, indent=2), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Parsed model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def data_model(model_dict: Dict[str, Any]) -> DataModel:
    return DataModel.model_validate(model_dict["datamodel"])


@pytest.fixture()
def user_entity(data_model: DataModel) -> EntityInfo:
    entity = data_model.get_entity("User")
    assert entity is not None
    return entity


@pytest.fixture()
def post_entity(data_model: DataModel) -> EntityInfo:
    entity = data_model.get_entity("Post")
    assert entity is not None
    return entity


@pytest.fixture()
def category_entity(data_model: DataModel) -> EntityInfo:
    entity = data_model.get_entity("Category")
    assert entity is not None
    return entity


@pytest.fixture()
def state() -> GenerationState:
    return GenerationState()


@pytest.fixture()
def config() -> GenerationConfig:
    return GenerationConfig()


# ---------------------------------------------------------------------------
# Minimal / edge-case model fixtures
# ---------------------------------------------------------------------------


def make_field(name: str, type_name: str = "String", **flags: Any) -> Dict[str, Any]:
    """Raw DMMF-style field dict; *flags* use the DMMF spellings."""
    field: Dict[str, Any] = {"name": name, "kind": flags.pop("kind", "scalar"), "type": type_name}
    field.update(flags)
    return field


@pytest.fixture()
def minimal_model_dict() -> Dict[str, Any]:
    """Smallest model: one entity, one id field, no relations, no enums."""
    return {
        "enums": [],
        "models": [
            {
                "name": "Item",
                "fields": [make_field("id", "Int", isId=True)],
            }
        ],
    }


@pytest.fixture()
def no_unique_model() -> DataModel:
    """Entity with neither id nor unique fields."""
    return DataModel.model_validate({
        "models": [
            {
                "name": "Log",
                "fields": [
                    make_field("message"),
                    make_field("level", "Int", isRequired=False),
                ],
            }
        ],
    })


@pytest.fixture()
def cyclic_model_dict() -> Dict[str, Any]:
    """A ⇄ B with A declared first: A's reference to B is a forward reference."""
    fields_a: List[Dict[str, Any]] = [
        make_field("id", "Int", isId=True),
        make_field("b", "B", kind="object", isRequired=False, relationName="AB",
                   relationFromFields=["bId"], relationToFields=["id"]),
        make_field("bId", "Int", isRequired=False),
    ]
    fields_b: List[Dict[str, Any]] = [
        make_field("id", "Int", isId=True),
        make_field("a", "A", kind="object", isList=True, relationName="AB"),
        make_field("owner", "A", kind="object", relationName="Owner",
                   relationFromFields=["ownerId"], relationToFields=["id"]),
        make_field("ownerId", "Int"),
    ]
    return {
        "models": [
            {"name": "A", "fields": fields_a},
            {"name": "B", "fields": fields_b},
        ],
    }
