"""
Filesystem helpers for schema discovery and report artifacts.

Responsibilities
- Enumerate schema files under a folder (glob pattern, optionally recursive).
- Back the report writer's publish step: write tmp → fsync → rename into place.

Notes
- os.replace is atomic only within one filesystem; tmp files live beside their target.
"""

from __future__ import annotations

import os
from pathlib import Path


def makedirs(path: str) -> None:
    """Create `path` and any missing parents; an existing directory is fine."""
    os.makedirs(path, exist_ok=True)


def fsync_path(path: str) -> None:
    """
    Flush a file written by another library to stable storage.

    pyarrow writes and closes the file itself, so it is reopened read-only here
    and its descriptor fsynced before the publishing rename.
    """
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def rename_atomic(src: str, dst: str) -> None:
    """Move a finished tmp file onto its final name, replacing any previous report."""
    os.replace(src, dst)


def remove_quietly(path: str) -> None:
    """Drop a leftover tmp file; a file that is already gone is not an error."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def walk_files(folder: str | os.PathLike[str], pattern: str, recursive: bool = False) -> list[Path]:
    """
    Collect files under `folder` matching a glob pattern.

    Args:
        folder (str | PathLike): Directory to search.
        pattern (str): Glob applied to file names (e.g. "*.xsd").
        recursive (bool): Descend into sub-folders when True.

    Returns:
        list[Path]: Matching files, sorted for deterministic load order.

    Raises:
        NotADirectoryError: If `folder` is not an existing directory.
    """
    root = Path(folder)
    if not root.is_dir():
        raise NotADirectoryError(f"not a directory: {root}")
    found = root.rglob(pattern) if recursive else root.glob(pattern)
    return sorted(p for p in found if p.is_file())
