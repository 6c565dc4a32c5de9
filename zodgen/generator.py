# File: zodgen/generator.py
"""
zodgen - Generation Pipeline (Host Orchestrator)
=================================================
Connects the host-side phases around the generation core::

    Model file → Ingestion → Schema Assembly → File Export

The ``SchemaGenerator`` class is both the programmatic API and the
backend of the CLI.

Workflow::

    1. Load the model description from a JSON/YAML file (or accept an
       in-memory ``DataModel``).
    2. Parse it into ``DataModel`` + ``GenerationConfig`` (models.py).
    3. Run one assembly pass (templates.py).
    4. Hand the text to ``OutputExporter`` (exporters.py), unless this is
       a dry run.
    5. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Load and parse failures are recorded as ingestion errors; the
      pipeline stops before generation.
    - An unexpected assembly failure is recorded as a generation error.
    - Export errors are recorded from the export result.
    - The final report gives a clear pass/fail verdict.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from zodgen import __version__
from zodgen.exporters import ExportManifest, ExportResult, OutputExporter
from zodgen.models import DataModel, GenerationConfig, GeneratorManifest
from zodgen.state import GenerationState
from zodgen.templates import SchemaAssembler, render_schemas
from zodgen.utils import Timer, count_lines

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.generator")

_MODEL_KEYS: Tuple[str, ...] = ("datamodel", "model")
_CONFIG_KEYS: Tuple[str, ...] = ("config", "generator", "generator_config")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``SchemaGenerator.generate()``.

    ``output_text`` holds the generated document even when nothing was
    written (dry run), so callers can print it.
    """

    success: bool = False
    output_path: str = ""
    output_text: str = ""

    # Metrics
    total_entities: int = 0
    total_enums_used: int = 0
    total_lines: int = 0
    total_bytes: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    ingestion_errors: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    manifest: Optional[ExportManifest] = None

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'=' * 60}")
        lines.append("  zodgen — Generation Report")
        lines.append(f"{'=' * 60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Output:           {self.output_path or '(not written)'}")
        lines.append(f"  Entities:         {self.total_entities}")
        lines.append(f"  Enums used:       {self.total_enums_used}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─' * 60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<24s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        for title, errors in (
            ("Ingestion Errors", self.ingestion_errors),
            ("Generation Errors", self.generation_errors),
            ("Export Errors", self.export_errors),
        ):
            if errors:
                lines.append(f"{'─' * 60}")
                lines.append(f"  {title} ({len(errors)}):")
                for err in errors:
                    lines.append(f"    ✗ {err}")

        lines.append(f"{'=' * 60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Model loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_model_file(path: Path) -> Dict[str, Any]:
    """
    Load a model description file (JSON or YAML).

    Dispatches on the file extension; an unknown extension is tried as
    JSON first, then as YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Model path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def _find_model_data(raw: Dict[str, Any]) -> Dict[str, Any]:
    for key in _MODEL_KEYS:
        if key in raw:
            value: Any = raw[key]
            if not isinstance(value, dict):
                raise ValueError(
                    f"'{key}' must be a mapping, got {type(value).__name__}."
                )
            return value
    if any(key in raw for key in ("models", "entities", "enums")):
        return raw
    raise ValueError(
        "Cannot find a data model in input. Expected top-level key: "
        "'datamodel', 'model', 'models' or 'entities'."
    )


def parse_raw_model(raw: Dict[str, Any]) -> Tuple[DataModel, GenerationConfig]:
    """
    Parse a raw dictionary (from JSON/YAML) into validated models.

    Expected top-level keys:
        - "datamodel" or "model": the data model (a DMMF dump is fine),
          or "models"/"entities" + "enums" directly at the top level
        - "config", "generator" or "generator_config": generation settings

    Raises:
        ValueError: If the model is missing or fails validation.
    """
    model_data: Dict[str, Any] = dict(_find_model_data(raw))
    if "entities" in model_data and "models" not in model_data:
        model_data["models"] = model_data.pop("entities")

    config_data: Any = None
    for key in _CONFIG_KEYS:
        if key in raw:
            config_data = raw[key]
            break
    if config_data is None:
        logger.info("No generator config found in input — using defaults.")
        config_data = {}

    try:
        model: DataModel = DataModel.model_validate(model_data)
    except ValidationError as exc:
        raise ValueError(f"Data model validation failed: {exc}") from exc

    try:
        config: GenerationConfig = GenerationConfig.model_validate(config_data)
    except ValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    return model, config


def build_manifest(config: Optional[GenerationConfig] = None) -> GeneratorManifest:
    """What this generator reports about itself to a host."""
    cfg: GenerationConfig = config or GenerationConfig()
    return GeneratorManifest(version=__version__, default_output=cfg.output_dir)


# ---------------------------------------------------------------------------
# SchemaGenerator — host orchestrator
# ---------------------------------------------------------------------------


class SchemaGenerator:
    """
    Host pipeline around the schema assembler.

    Usage::

        generator = SchemaGenerator()

        report = generator.generate_from_file(
            model_path=Path("schema.yaml"),
            output_dir=Path("./generated"),
        )

        report = generator.generate(model=data_model, config=config, dry_run=True)
        print(report.output_text)

    The generator is reusable — create once, call generate() many times.
    """

    def __init__(self, *, atomic_writes: bool = True) -> None:
        self._atomic_writes: bool = atomic_writes
        logger.debug("SchemaGenerator initialised: atomic_writes=%s.", atomic_writes)

    # -----------------------------------------------------------------
    # Public: generate from file
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        model_path: Path,
        output_dir: Optional[Path] = None,
        *,
        config_overrides: Optional[Dict[str, Any]] = None,
        dry_run: bool = False,
    ) -> GenerationReport:
        """
        Full pipeline: load file → parse → assemble → export.

        Args:
            model_path: Path to a JSON/YAML model description.
            output_dir: Output directory; defaults to ``config.output_dir``.
            config_overrides: Values layered over the file's config.
            dry_run: Generate but do not write anything.
        """
        report: GenerationReport = GenerationReport()
        pipeline_start: float = time.perf_counter()

        with Timer("load_model") as t_load:
            try:
                raw_data: Dict[str, Any] = load_model_file(model_path)
            except (FileNotFoundError, ValueError) as exc:
                raw_data = {}
                report.ingestion_errors.append(str(exc))

        report.step_metrics.append(GenerationStepMetric(
            step_name="Load Model File",
            success=not report.ingestion_errors,
            elapsed_seconds=t_load.elapsed,
            detail=report.ingestion_errors[0] if report.ingestion_errors else f"from {model_path.name}",
        ))
        if report.ingestion_errors:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        logger.info("Loaded model file: %s (%d top-level keys).", model_path, len(raw_data))

        with Timer("parse_model") as t_parse:
            try:
                if config_overrides:
                    config_key: str = next(
                        (k for k in _CONFIG_KEYS if k in raw_data), "config"
                    )
                    existing: Any = raw_data.get(config_key) or {}
                    if not isinstance(existing, dict):
                        raise ValueError(
                            f"'{config_key}' must be a mapping, got {type(existing).__name__}."
                        )
                    merged: Dict[str, Any] = dict(existing)
                    merged.update(config_overrides)
                    raw_data[config_key] = merged
                model, config = parse_raw_model(raw_data)
            except ValueError as exc:
                report.ingestion_errors.append(str(exc))

        report.step_metrics.append(GenerationStepMetric(
            step_name="Parse Model",
            success=not report.ingestion_errors,
            elapsed_seconds=t_parse.elapsed,
            detail=(
                "parse failed" if report.ingestion_errors
                else f"{len(model.entities)} entities, {len(model.enums)} enums"
            ),
        ))
        if report.ingestion_errors:
            logger.error("Model ingestion failed: %s", report.ingestion_errors[0])
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        return self._run_pipeline(
            model, config, self._resolve_output_dir(output_dir, config), report,
            dry_run=dry_run, started=pipeline_start,
        )

    # -----------------------------------------------------------------
    # Public: generate from in-memory objects
    # -----------------------------------------------------------------

    def generate(
        self,
        model: DataModel,
        config: Optional[GenerationConfig] = None,
        output_dir: Optional[Path] = None,
        *,
        dry_run: bool = False,
    ) -> GenerationReport:
        """Pipeline from an already-ingested model."""
        cfg: GenerationConfig = config or GenerationConfig()
        report: GenerationReport = GenerationReport()
        return self._run_pipeline(
            model, cfg, self._resolve_output_dir(output_dir, cfg), report,
            dry_run=dry_run, started=time.perf_counter(),
        )

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    @staticmethod
    def _resolve_output_dir(output_dir: Optional[Path], config: GenerationConfig) -> Path:
        return Path(output_dir) if output_dir is not None else Path(config.output_dir)

    def _run_pipeline(
        self,
        model: DataModel,
        config: GenerationConfig,
        output_dir: Path,
        report: GenerationReport,
        *,
        dry_run: bool,
        started: float,
    ) -> GenerationReport:
        text: Optional[str] = self._step_generate(model, config, report)
        if text is None:
            return self._finalise_report(report, time.perf_counter() - started)

        if dry_run:
            logger.info("Dry run — nothing written.")
        else:
            self._step_export(text, config, output_dir, report)

        return self._finalise_report(report, time.perf_counter() - started)

    # -----------------------------------------------------------------
    # Pipeline step: Schema assembly
    # -----------------------------------------------------------------

    def _step_generate(
        self,
        model: DataModel,
        config: GenerationConfig,
        report: GenerationReport,
    ) -> Optional[str]:
        text: Optional[str] = None
        state: Optional[GenerationState] = None
        with Timer("assemble") as t:
            try:
                text, state = SchemaAssembler(model, config).assemble_pass()
            except Exception as exc:
                error_msg: str = f"Fatal generation error: {type(exc).__name__}: {exc}"
                report.generation_errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        if text is not None and state is not None:
            report.output_text = text
            report.total_entities = len(state.emitted_entities)
            report.total_enums_used = len(state.enum_usage)
            report.total_lines = count_lines(text)
            report.total_bytes = len(text.encode("utf-8"))

        detail: str = (
            f"{report.total_entities} entities, ~{report.total_lines:,} lines"
            if text is not None else "assembly failed"
        )
        report.step_metrics.append(GenerationStepMetric(
            step_name="Assemble Schemas",
            success=text is not None,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))
        logger.info("Schema assembly: %s in %.3fs.", detail, t.elapsed)
        return text

    # -----------------------------------------------------------------
    # Pipeline step: Export
    # -----------------------------------------------------------------

    def _step_export(
        self,
        text: str,
        config: GenerationConfig,
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        with Timer("export") as t:
            exporter: OutputExporter = OutputExporter(
                config=config,
                output_dir=output_dir,
                atomic_writes=self._atomic_writes,
                generate_manifest=config.write_manifest,
            )
            result: ExportResult = exporter.export(text)

        report.export_errors.extend(result.errors)
        report.manifest = result.manifest
        if result.success:
            report.output_path = str(result.output_path)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Export to Filesystem",
            success=result.success,
            elapsed_seconds=t.elapsed,
            detail=f"{result.manifest.total_files} file(s), {result.manifest.total_bytes:,} bytes",
        ))

        if result.success:
            logger.info("Export complete: %s in %.3fs.", result.output_path, t.elapsed)
        else:
            logger.error(
                "Export finished with %d error(s) in %.3fs.",
                len(result.errors),
                t.elapsed,
            )

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(
        self,
        report: GenerationReport,
        total_elapsed: float,
    ) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.ingestion_errors
            or report.generation_errors
            or report.export_errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_model_file",
    "parse_raw_model",
    "render_schemas",
    "build_manifest",
]

logger.debug("zodgen.generator loaded.")
