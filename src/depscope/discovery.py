"""Locate Java compilation units and package directories on disk."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from depscope.errors import AnalysisError, InvalidPath

if TYPE_CHECKING:
    from depscope.parser import JavaSourceParser

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".java"

_PACKAGE_RE = re.compile(r"^\s*package\s+([\w.]+)\s*;")


def is_compilation_unit(path: Path) -> bool:
    return path.suffix == SOURCE_SUFFIX and path.is_file()


def require_directory(path: Path) -> Path:
    if not path.is_dir():
        raise InvalidPath(path, "directory")
    return path


def require_file(path: Path) -> Path:
    if not path.is_file():
        raise InvalidPath(path, "file")
    return path


def _sorted_entries(directory: Path) -> list[Path]:
    try:
        return sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.debug("Could not list %s: %s", directory, e)
        return []


def iter_compilation_units(root: Path) -> Iterator[Path]:
    """Yield ``.java`` files under *root*, depth-first in listing order."""
    for entry in _sorted_entries(root):
        if entry.is_dir():
            yield from iter_compilation_units(entry)
        elif entry.suffix == SOURCE_SUFFIX and entry.is_file():
            yield entry


def list_compilation_units(root: Path) -> list[Path]:
    return list(iter_compilation_units(root))


def list_direct_compilation_units(directory: Path) -> list[Path]:
    """Compilation units that are immediate children of *directory*."""
    return [entry for entry in _sorted_entries(directory) if is_compilation_unit(entry)]


def list_package_directories(root: Path) -> list[Path]:
    """Return every directory under *root* (inclusive) holding a compilation unit.

    A directory is listed before its subdirectories, and qualifies on its own
    direct children only; nested packages are discovered independently.
    """
    found: list[Path] = []

    def _visit(directory: Path) -> None:
        entries = _sorted_entries(directory)
        if any(is_compilation_unit(entry) for entry in entries):
            found.append(directory)
        for entry in entries:
            if entry.is_dir():
                _visit(entry)

    _visit(root)
    logger.debug("Found %d package directories under %s", len(found), root)
    return found


def scan_package_name(source: str) -> str | None:
    """Return the ``package`` declaration found by a plain line scan."""
    for line in source.splitlines():
        m = _PACKAGE_RE.match(line)
        if m:
            return m.group(1)
    return None


def infer_package_name(directory: Path, parser: JavaSourceParser) -> str:
    """Package declared by the first compilation unit in *directory*.

    Falls back to the directory name when there is no such unit, it cannot
    be read or parsed, or it has no package declaration.
    """
    units = list_direct_compilation_units(directory)
    if units:
        first = units[0]
        try:
            source = first.read_text(encoding="utf-8", errors="replace")
            unit = parser.parse(source, first)
        except OSError as e:
            logger.warning("Could not read %s: %s", first, e)
        except AnalysisError as e:
            logger.debug("Package name inference failed for %s: %s", first, e)
        else:
            if unit.package_name:
                return unit.package_name
    return directory.name
