from __future__ import annotations

from pathlib import Path

import pytest
from sample_documents import sample_document

from isoxchange import cli
from isoxchange.core.codec import serialize
from isoxchange.core.encoding import Encoding
from isoxchange.io.report import read_report


@pytest.fixture
def documents(tmp_path: Path) -> tuple[Path, Path]:
    good = tmp_path / "good.xml"
    bad = tmp_path / "bad.xml"
    text = serialize(sample_document(), Encoding.XML)
    good.write_text(text, encoding="utf-8")
    bad.write_text(text.replace("<NbOfTxs>2</NbOfTxs>", "<NbOfTxs>x</NbOfTxs>"), encoding="utf-8")
    return good, bad


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ISOXCHANGE_SCHEMA_DIR", raising=False)


def test_validate_accepts_good_document(schema_dir: Path, documents, capsys) -> None:
    good, _ = documents
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["validate", "--schemas", str(schema_dir), str(good)])

    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert f"[OK] {good}" in out
    assert "Loaded 2 schema definition(s)" in out


def test_validate_reports_invalid_document(schema_dir: Path, documents, capsys) -> None:
    good, bad = documents
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["validate", "--schemas", str(schema_dir), str(good), str(bad)])

    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert f"[INVALID] {bad}" in out
    assert "1 accepted, 1 rejected" in out


def test_validate_missing_file_is_rejected(schema_dir: Path, tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["validate", "--schemas", str(schema_dir), str(tmp_path / "absent.xml")])

    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "[ERROR]" in captured.err
    assert "empty document" in captured.out


def test_schema_dir_from_settings_file(schema_dir: Path, documents, tmp_path: Path, capsys) -> None:
    (tmp_path / "isoxchange.toml").write_text(f'schema_dir = "{schema_dir.as_posix()}"\n')
    good, _ = documents
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["validate", str(good)])

    assert excinfo.value.code == 0
    assert "Loaded 2 schema definition(s)" in capsys.readouterr().out


def test_report_then_show_report(schema_dir: Path, documents, tmp_path: Path, capsys) -> None:
    good, bad = documents
    out = tmp_path / "out" / "events.parquet"
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["report", "--schemas", str(schema_dir), "--out", str(out), str(good), str(bad)])
    assert excinfo.value.code == 0

    df = read_report(str(out))
    assert df.height >= 1
    assert set(df["document"].to_list()) == {str(bad)}
    assert set(df["severity"].to_list()) == {"error"}

    capsys.readouterr()
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["show-report", "--report", str(out), "--n", "1"])
    assert excinfo.value.code == 0
    assert "severity" in capsys.readouterr().out


def test_unknown_command_exits_2(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["frobnicate"])
    assert excinfo.value.code == 2
    assert "Unknown command" in capsys.readouterr().err


def test_no_arguments_prints_help(capsys) -> None:
    cli.main([])
    assert "isoxchange" in capsys.readouterr().out
