# File: zodgen/cli.py
"""
zodgen - Command-Line Interface
================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate into the configured output directory
    python -m zodgen --model schema.yaml

    # Explicit output directory, verbose
    python -m zodgen -m dmmf.json -o ./src/generated -v

    # Print the module instead of writing it
    python -m zodgen -m schema.yaml --stdout

    # Generator manifest (version, default output)
    python -m zodgen --manifest

Exit codes:
    0 — success
    2 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the zodgen logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("zodgen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from zodgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="zodgen",
        description=(
            "zodgen — Zod schema generator.\n\n"
            "Turns a data-model description (DMMF dump or equivalent, "
            "JSON/YAML) into Zod validation schemas and CRUD argument schemas."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -m schema.yaml\n"
            "  %(prog)s -m dmmf.json -o ./src/generated -v\n"
            "  %(prog)s -m schema.yaml --stdout\n"
            "  %(prog)s --manifest\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"zodgen v{__version__}",
    )

    parser.add_argument(
        "-m", "--model",
        type=str,
        default=None,
        metavar="PATH",
        help="Path to the data-model file (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory (default: the config's output_dir).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--manifest",
        action="store_true",
        default=False,
        help="Print the generator manifest as JSON and exit.",
    )
    mode_group.add_argument(
        "--stdout",
        action="store_true",
        default=False,
        help="Print the generated module to stdout instead of writing it.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write files to disk.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--file-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Override the generated file name (default 'index.ts').",
    )
    config_group.add_argument(
        "--schema-module",
        type=str,
        default=None,
        metavar="MODULE",
        help="Module to import `z` from (default 'zod').",
    )
    config_group.add_argument(
        "--client-module",
        type=str,
        default=None,
        metavar="MODULE",
        help="Module to import client types from (default '@prisma/client').",
    )
    config_group.add_argument(
        "--always-lazy",
        action="store_true",
        default=False,
        help="Defer every cross-entity filter reference.",
    )
    config_group.add_argument(
        "--write-manifest",
        action="store_true",
        default=False,
        help="Write manifest.json next to the generated module.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, object]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, object] = {}

    if args.file_name is not None:
        overrides["output_file_name"] = args.file_name
    if args.schema_module is not None:
        overrides["schema_module"] = args.schema_module
    if args.client_module is not None:
        overrides["client_module"] = args.client_module
    if args.always_lazy:
        overrides["always_lazy_references"] = True
    if args.write_manifest:
        overrides["write_manifest"] = True

    return overrides


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


def _run_manifest() -> int:
    from zodgen.generator import build_manifest

    print(json.dumps(build_manifest().model_dump(by_alias=True), indent=2))
    return EXIT_SUCCESS


def _run_generation(
    model_path: Path,
    output_dir: Optional[Path],
    args: argparse.Namespace,
) -> int:
    """
    Run the full generation pipeline.

    Returns the appropriate exit code.
    """
    from zodgen.generator import GenerationReport, SchemaGenerator

    config_overrides: Dict[str, object] = _build_config_overrides(args)
    dry_run: bool = args.dry_run or args.stdout

    if dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    report: GenerationReport = SchemaGenerator().generate_from_file(
        model_path=model_path,
        output_dir=output_dir,
        config_overrides=config_overrides or None,
        dry_run=dry_run,
    )

    if args.stdout and report.success:
        sys.stdout.write(report.output_text)
        sys.stdout.flush()
    elif not args.quiet:
        print(report.summary())

    if report.ingestion_errors:
        for err in report.ingestion_errors:
            logger.error("%s", err)
        return EXIT_INPUT_ERROR
    if report.generation_errors:
        return EXIT_GENERATION_ERROR
    if report.export_errors:
        return EXIT_EXPORT_ERROR
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)

    if args.manifest:
        sys.exit(_run_manifest())

    if args.model is None:
        logger.error("A model file is required. Use -m/--model or --manifest.")
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    model_path: Path = Path(args.model).resolve()
    if not model_path.is_file():
        logger.error("Model file not found: %s", model_path)
        sys.exit(EXIT_INPUT_ERROR)

    output_dir: Optional[Path] = Path(args.output).resolve() if args.output else None

    logger.info("Model:   %s", model_path)
    logger.info("Output:  %s", output_dir or "(from config)")

    exit_code: int = _run_generation(model_path, output_dir, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("zodgen.cli loaded.")
