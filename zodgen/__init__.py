# File: zodgen/__init__.py
"""
zodgen — Zod Schema Generator
==============================

Turns a declarative data model (entities, typed fields, relations, enums,
unique constraints), typically a Prisma DMMF dump, into one TypeScript
module of Zod validation schemas plus CRUD argument schemas.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ SchemaGenerator │────▶│  SchemaAssembler │
    │   (cli.py)   │     │ (generator.py)  │     │  (templates.py)  │
    └──────────────┘     └───────┬────────┘     └────────┬─────────┘
                                 │                       │
                    ┌────────────┤          ┌────────────┼────────────┐
                    ▼            ▼          ▼            ▼            ▼
             ┌──────────┐ ┌───────────┐ ┌───────────┐ ┌─────────┐ ┌───────────┐
             │  models  │ │ exporters │ │expressions│ │ uniques │ │ relations │
             └──────────┘ └───────────┘ └───────────┘ └─────────┘ └───────────┘

Usage::

    # As a library
    from zodgen import DataModel, render_schemas
    text = render_schemas(DataModel.model_validate(raw["datamodel"]))

    # From the command line
    python -m zodgen --model schema.yaml --output ./generated -v

Public API:
    - render_schemas     — One generation pass, returns the module text
    - SchemaAssembler    — The generation core
    - SchemaGenerator    — Host pipeline (load → assemble → export)
    - DataModel          — Ingested data model
    - GenerationConfig   — Generation settings model
    - OutputExporter     — File-system writer
"""

from __future__ import annotations

__version__: str = "1.0.0"
__author__: str = "zodgen contributors"
__license__: str = "MIT"

from zodgen.models import (
    DataModel,
    EntityInfo,
    EnumDefinition,
    FieldInfo,
    FieldKind,
    GenerationConfig,
    GeneratorManifest,
    PrimaryKeyInfo,
    UniqueIndexInfo,
)
from zodgen.state import GenerationState
from zodgen.templates import SchemaAssembler, render_schemas
from zodgen.exporters import ExportManifest, ExportResult, OutputExporter
from zodgen.generator import (
    GenerationReport,
    SchemaGenerator,
    build_manifest,
    load_model_file,
    parse_raw_model,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Core
    "render_schemas",
    "SchemaAssembler",
    "GenerationState",
    # Host pipeline
    "SchemaGenerator",
    "GenerationReport",
    "load_model_file",
    "parse_raw_model",
    "build_manifest",
    # Models
    "DataModel",
    "EntityInfo",
    "EnumDefinition",
    "FieldInfo",
    "FieldKind",
    "GenerationConfig",
    "GeneratorManifest",
    "PrimaryKeyInfo",
    "UniqueIndexInfo",
    # Exporters
    "OutputExporter",
    "ExportManifest",
    "ExportResult",
]
