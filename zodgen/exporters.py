# File: zodgen/exporters.py
"""
zodgen - Output Exporter
=========================
Places the generated schema module on disk.

Responsible for:
    1. Creating the output directory.
    2. Writing the module atomically (write-to-temp then rename).
    3. Optionally writing a ``manifest.json`` with a checksum of the
       module for reproducibility checks.

Re-running on the same directory is always safe: the module is replaced
in one rename, never truncated in place.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from zodgen.models import GenerationConfig
from zodgen.utils import Timer, count_lines, ensure_directory, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.exporters")

MANIFEST_FILE_NAME: str = "manifest.json"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """Manifest of one export, serialisable to JSON."""

    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    schema_module: str = ""
    client_module: str = ""
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "schema_module": self.schema_module,
            "client_module": self.client_module,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        """Serialise manifest to pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Result returned by ``OutputExporter.export()``."""

    success: bool
    output_path: Optional[Path]
    manifest: ExportManifest
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# OutputExporter class
# ---------------------------------------------------------------------------


class OutputExporter:
    """
    Writes the generated module (and optionally a manifest) to disk.

    Usage::

        exporter = OutputExporter(config, output_dir=Path("./generated"))
        result = exporter.export(text)
        print(result.output_path)

    Thread-safety: NOT thread-safe.  Use one exporter per export.
    """

    def __init__(
        self,
        config: GenerationConfig,
        output_dir: Path,
        *,
        atomic_writes: bool = True,
        generate_manifest: bool = False,
    ) -> None:
        self._config: GenerationConfig = config
        self._output_dir: Path = Path(output_dir).resolve()
        self._atomic_writes: bool = atomic_writes
        self._generate_manifest: bool = generate_manifest

        self._errors: List[str] = []
        self._warnings: List[str] = []
        self._file_records: List[FileRecord] = []

        logger.debug(
            "OutputExporter initialised: output_dir=%s, atomic=%s, manifest=%s.",
            self._output_dir,
            self._atomic_writes,
            self._generate_manifest,
        )

    @property
    def target_path(self) -> Path:
        """Where the schema module is written."""
        return self._output_dir / self._config.output_file_name

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, text: str) -> ExportResult:
        """
        Write *text* as the schema module.

        Failures are collected into the result rather than raised.
        """
        output_path: Optional[Path] = None

        with Timer("write_output") as timer:
            try:
                ensure_directory(self._output_dir)
                record: FileRecord = self._write_single_file(
                    self.target_path, text, self._config.output_file_name
                )
                self._file_records.append(record)
                output_path = self.target_path

                if self._generate_manifest:
                    self._write_manifest_file()

            except OSError as exc:
                error_msg: str = f"Fatal export error: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        manifest: ExportManifest = self._build_manifest()
        success: bool = len(self._errors) == 0

        if success:
            logger.info(
                "Export completed: %d file(s), %d bytes, %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(self._errors),
                timer.elapsed,
            )

        return ExportResult(
            success=success,
            output_path=output_path if success else None,
            manifest=manifest,
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

    # -----------------------------------------------------------------
    # Internal: file writing
    # -----------------------------------------------------------------

    def _write_single_file(self, full_path: Path, content: str, rel_path: str) -> FileRecord:
        size_bytes: int = write_file(full_path, content, atomic=self._atomic_writes)
        line_count: int = count_lines(content)
        logger.debug("Wrote file: %s (%d bytes, %d lines).", rel_path, size_bytes, line_count)
        return FileRecord(
            relative_path=rel_path,
            absolute_path=str(full_path),
            size_bytes=size_bytes,
            line_count=line_count,
            sha256=sha256_hex(content),
        )

    # -----------------------------------------------------------------
    # Internal: manifest
    # -----------------------------------------------------------------

    def _build_manifest(self) -> ExportManifest:
        """Build the export manifest from collected file records."""
        import zodgen

        return ExportManifest(
            generator_version=zodgen.__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            output_directory=str(self._output_dir),
            schema_module=self._config.schema_module,
            client_module=self._config.client_module,
            total_files=len(self._file_records),
            total_bytes=sum(r.size_bytes for r in self._file_records),
            total_lines=sum(r.line_count for r in self._file_records),
            files=list(self._file_records),
        )

    def _write_manifest_file(self) -> None:
        """Write manifest.json next to the module; failure is a warning."""
        manifest_path: Path = self._output_dir / MANIFEST_FILE_NAME
        try:
            record: FileRecord = self._write_single_file(
                manifest_path, self._build_manifest().to_json(), MANIFEST_FILE_NAME
            )
            self._file_records.append(record)
        except OSError as exc:
            self._warnings.append(f"Could not write manifest: {exc}")
            logger.warning("Failed to write manifest: %s", exc)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "OutputExporter",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
    "MANIFEST_FILE_NAME",
]

logger.debug("zodgen.exporters loaded.")
