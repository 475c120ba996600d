"""
Schema definition origins: folders, explicit file lists, and package resources.

These loaders resolve where definitions come from and hand their content to a
SchemaAggregator. Like the aggregator itself they never raise for data problems:
an unreadable folder or resource is logged and reported as False, while every
other source is still attempted.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from fnmatch import fnmatch
from importlib import resources

from isoxchange.core.constants import SCHEMA_PATTERN
from isoxchange.core.diagnostics import report_fault
from isoxchange.core.schema_set import SchemaAggregator

from .fs import walk_files

__all__ = [
    "iter_schema_files",
    "load_folder",
    "load_files",
    "load_resources",
]

logger = logging.getLogger(__name__)


def iter_schema_files(
    folder: str | os.PathLike[str], pattern: str = SCHEMA_PATTERN, recursive: bool = False
) -> list[str]:
    """
    List schema files under a folder.

    Raises:
        NotADirectoryError: If `folder` is not a directory.
    """
    return [str(p) for p in walk_files(folder, pattern, recursive)]


def load_files(aggregator: SchemaAggregator, paths: Iterable[str | os.PathLike[str]]) -> bool:
    """Add each file to the aggregate; True only if every file loaded."""
    return aggregator.add_definitions(paths)


def load_folder(
    aggregator: SchemaAggregator,
    folder: str | os.PathLike[str],
    pattern: str = SCHEMA_PATTERN,
    recursive: bool = False,
) -> bool:
    """
    Add every schema file found under `folder`.

    Returns:
        bool: True if the folder was readable and every file loaded.
    """
    try:
        paths = iter_schema_files(folder, pattern, recursive)
    except OSError as exc:
        report_fault(logger, exc, folder)
        return False
    logger.debug("loading %d schema file(s) from %s", len(paths), folder)
    return load_files(aggregator, paths)


def load_resources(
    aggregator: SchemaAggregator,
    package: str,
    names: Iterable[str] | None = None,
    pattern: str = SCHEMA_PATTERN,
) -> bool:
    """
    Add schema definitions embedded as package resources.

    Args:
        aggregator (SchemaAggregator): Target aggregate.
        package (str): Importable package holding the resources.
        names (Iterable[str] | None): Resource names to load; when empty, every
            top-level resource matching `pattern`.
        pattern (str): Filter applied when `names` is empty.

    Returns:
        bool: True if the package was found and every resource loaded.
    """
    try:
        root = resources.files(package)
        wanted = list(names or ())
        if not wanted:
            wanted = sorted(
                entry.name for entry in root.iterdir() if entry.is_file() and fnmatch(entry.name, pattern)
            )
    except (ModuleNotFoundError, TypeError, OSError) as exc:
        report_fault(logger, exc, package)
        return False

    ok = True
    for name in wanted:
        try:
            content = root.joinpath(name).read_bytes()
        except OSError as exc:
            report_fault(logger, exc, f"{package}/{name}")
            ok = False
            continue
        ok = aggregator.add_definition(content, name=f"{package}/{name}") and ok
    return ok
