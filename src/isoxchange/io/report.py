"""
Validation reports: tabular views of validation events and their Parquet artifacts.

Overview
- `events_frame` turns ValidationEvent records into a Polars DataFrame with a fixed
  column set (one row per event, tagged with the validated document's label).
- `write_report` persists a frame as Parquet with atomic tmp → ready rename and
  embeds the library version in the Parquet key-value metadata.
- `read_report` loads a report back for inspection (used by `isoxchange show-report`).

Notes
- Single-writer semantics (no inter-process locking).
- Columns: document str, severity str, message str, line i64, column i64, source str.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime

import polars as pl
import pyarrow.parquet as pq

from isoxchange import __version__
from isoxchange.core.schema_set import ValidationEvent

from .errors import IoWriteError
from .fs import fsync_path, makedirs, remove_quietly, rename_atomic

__all__ = [
    "REPORT_SCHEMA",
    "events_frame",
    "write_report",
    "read_report",
]

REPORT_SCHEMA: dict[str, pl.DataType] = {
    "document": pl.Utf8,
    "severity": pl.Utf8,
    "message": pl.Utf8,
    "line": pl.Int64,
    "column": pl.Int64,
    "source": pl.Utf8,
}


def events_frame(events: Iterable[ValidationEvent], document: str | None = None) -> pl.DataFrame:
    """
    Build a report frame from validation events.

    Args:
        events (Iterable[ValidationEvent]): Events in encounter order.
        document (str | None): Label of the validated document, repeated on every row.

    Returns:
        pl.DataFrame: One row per event with REPORT_SCHEMA columns (empty frame when no events).
    """
    rows = [
        {
            "document": document,
            "severity": e.severity.value,
            "message": e.message,
            "line": e.line,
            "column": e.column,
            "source": e.source,
        }
        for e in events
    ]
    return pl.DataFrame(rows, schema=REPORT_SCHEMA)


def write_report(df: pl.DataFrame, path: str) -> str:
    """
    Write a report frame to Parquet atomically.

    Args:
        df (pl.DataFrame): Frame produced by `events_frame` (or concatenations of them).
        path (str): Destination file.

    Returns:
        str: The final path.

    Raises:
        IoWriteError: If the tmp write, fsync, or rename fails.
    """
    parent = os.path.dirname(os.path.abspath(path))
    makedirs(parent)
    tmp = os.path.join(parent, f".{os.path.basename(path)}.{uuid.uuid4().hex}.tmp")

    table = df.to_arrow()
    metadata = dict(table.schema.metadata or {})
    metadata.update(
        {
            b"isoxchange_version": __version__.encode(),
            b"created_at": datetime.now(UTC).isoformat().encode(),
        }
    )
    try:
        pq.write_table(table.replace_schema_metadata(metadata), tmp)
        fsync_path(tmp)
        rename_atomic(tmp, path)
    except Exception as exc:
        remove_quietly(tmp)
        raise IoWriteError(f"failed to write report {path!r}: {exc}") from exc
    return path


def read_report(path: str) -> pl.DataFrame:
    """Read a report written by `write_report`."""
    return pl.read_parquet(path)
