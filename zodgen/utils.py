# File: zodgen/utils.py
"""
zodgen - Utility Functions & Helpers
=====================================
String-formatting, naming, timing and file I/O helpers shared by the
generation core and the host layer.

- Schema-name helpers are ``@lru_cache``'d: the assembler asks for the same
  handful of names many times per entity.
- File I/O helpers write atomically (temp file + rename) so an interrupted
  run never leaves a half-written schema module behind.
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import List, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.utils")


# ---------------------------------------------------------------------------
# Cached schema-name helpers
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def schema_name(entity_name: str, suffix: str = "") -> str:
    """
    Return the exported constant name for one of an entity's schemas.

    Examples:
        >>> schema_name("User")
        'UserSchema'
        >>> schema_name("User", "WhereInput")
        'UserWhereInputSchema'
    """
    return f"{entity_name}{suffix}Schema"


@functools.lru_cache(maxsize=None)
def enum_schema_name(enum_name: str) -> str:
    """Return the constant name of an enum's schema (``RoleSchema``)."""
    return f"{enum_name}Schema"


# ---------------------------------------------------------------------------
# TypeScript literal helpers
# ---------------------------------------------------------------------------


def quote_single(value: str) -> str:
    """Wrap a value in single quotes, escaping internals."""
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def key_access(name: str) -> str:
    """Return a bracket property access for *name*, e.g. ``["email"]``."""
    return f"[{json.dumps(name)}]"


# ---------------------------------------------------------------------------
# Indentation helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 2) -> List[str]:
    """Indent a list of lines, returning a new list."""
    prefix: str = " " * (level * size)
    return [prefix + line if line.strip() else line for line in lines]


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path* and return the number of bytes written.

    When *atomic* is True the content goes to a temporary file in the same
    directory first and is then renamed over the target.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")

    if not atomic:
        path.write_bytes(encoded)
        logger.debug("Wrote %d bytes to %s", len(encoded), path)
        return len(encoded)

    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(encoded)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, str(path))
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("assemble") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.info(
            "Timer [%s]: %.4f seconds",
            self.label,
            self.elapsed,
        )

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "schema_name",
    "enum_schema_name",
    "quote_single",
    "key_access",
    "indent_lines",
    "ensure_directory",
    "write_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("zodgen.utils loaded — %d public symbols.", len(__all__))
