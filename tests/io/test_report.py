from __future__ import annotations

from pathlib import Path

import pyarrow.parquet as pq
import pytest

from isoxchange import __version__
from isoxchange.core.schema_set import SchemaAggregator, Severity, ValidationEvent
from isoxchange.io.errors import IoWriteError
from isoxchange.io.report import REPORT_SCHEMA, events_frame, read_report, write_report


def _events() -> list[ValidationEvent]:
    return [
        ValidationEvent(severity=Severity.ERROR, message="bad value", line=3, column=7, source="a.xml"),
        ValidationEvent(severity=Severity.WARNING, message="no schema definitions loaded"),
    ]


def test_events_frame_columns_and_rows() -> None:
    df = events_frame(_events(), document="a.xml")

    assert dict(df.schema) == REPORT_SCHEMA
    assert df.height == 2
    assert df["severity"].to_list() == ["error", "warning"]
    assert df["document"].to_list() == ["a.xml", "a.xml"]
    assert df["line"].to_list() == [3, None]


def test_events_frame_empty() -> None:
    df = events_frame([])
    assert df.height == 0
    assert df.columns == list(REPORT_SCHEMA)


def test_write_and_read_report(tmp_path: Path) -> None:
    agg = SchemaAggregator()
    agg.validate("<Anything/>", name="anything.xml")
    out = tmp_path / "reports" / "events.parquet"

    path = write_report(events_frame(agg.events, document="anything.xml"), str(out))

    assert path == str(out)
    df = read_report(path)
    assert df.height == 1
    assert df["severity"][0] == "warning"
    metadata = pq.read_schema(path).metadata
    assert metadata[b"isoxchange_version"] == __version__.encode()
    assert b"created_at" in metadata
    # no tmp files left behind
    assert [p.name for p in out.parent.iterdir()] == ["events.parquet"]


def test_write_report_failure_raises_and_cleans_up(tmp_path: Path, monkeypatch) -> None:
    import isoxchange.io.report as report_mod

    def _fail(src: str, dst: str) -> None:
        raise OSError("rename refused")

    monkeypatch.setattr(report_mod, "rename_atomic", _fail)
    with pytest.raises(IoWriteError, match="rename refused"):
        write_report(events_frame(_events()), str(tmp_path / "events.parquet"))
    assert list(tmp_path.iterdir()) == []
