from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import polars as pl

from isoxchange.core.schema_set import SchemaAggregator, ValidationResult
from isoxchange.io.config import ExchangeSettings
from isoxchange.io.report import events_frame, read_report, write_report
from isoxchange.io.sources import load_folder


def _configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s     || %(name)s \n%(levelname)s   || %(message)s \n",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger = logging.getLogger("isoxchange")
    logger.handlers = [handler]
    logger.setLevel(level.upper())


def _add_schema_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--schemas", type=str, default="", help="Folder of XSD definitions.")
    p.add_argument("--pattern", type=str, default="", help="Schema file glob (default *.xsd).")
    p.add_argument("--recursive", action="store_true", help="Search schema sub-folders.")
    p.add_argument("--log-level", type=str, default="WARNING", help="isoxchange log level.")
    p.add_argument("files", nargs="+", help="XML documents to validate.")


def _build_aggregator(args: argparse.Namespace) -> SchemaAggregator:
    """Aggregator from settings (env/TOML) overridden by command-line schema options."""
    settings = ExchangeSettings.load()
    aggregator = SchemaAggregator(policy=settings.validation_policy())
    folder = args.schemas or settings.schema_dir
    if folder:
        pattern = args.pattern or settings.schema_pattern
        recursive = args.recursive or settings.schema_recursive
        if not load_folder(aggregator, folder, pattern, recursive):
            print(f"[WARN] Some schema definitions under {folder} failed to load", file=sys.stderr)
        print(f"[INFO] Loaded {len(aggregator)} schema definition(s) from {folder}")
    return aggregator


def _validate_files(aggregator: SchemaAggregator, files: list[str]) -> list[tuple[str, ValidationResult]]:
    out: list[tuple[str, ValidationResult]] = []
    for name in files:
        try:
            data = Path(name).read_bytes()
        except OSError as exc:
            print(f"[ERROR] {name}: {exc}", file=sys.stderr)
            data = b""
        out.append((name, aggregator.validate(data, name=name)))
    return out


def _cmd_validate(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="validate", description="Validate XML documents against XSDs.")
    _add_schema_args(p)
    args = p.parse_args(argv)
    _configure_logging(args.log_level)

    aggregator = _build_aggregator(args)
    failed = 0
    for name, result in _validate_files(aggregator, args.files):
        status = "OK" if result.valid else "INVALID"
        print(f"[{status}] {name}")
        for event in result.events:
            where = f"{event.line}:{event.column}" if event.line else "-"
            print(f"    {event.severity.value:<7} {where:<8} {event.message}")
        failed += 0 if result.valid else 1
    print(f"[INFO] {len(args.files) - failed} accepted, {failed} rejected")
    return 0 if failed == 0 else 1


def _cmd_report(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="report", description="Validate XML documents and write the events as Parquet."
    )
    _add_schema_args(p)
    p.add_argument("--out", type=str, required=True, help="Destination parquet path.")
    args = p.parse_args(argv)
    _configure_logging(args.log_level)

    aggregator = _build_aggregator(args)
    frames = [
        events_frame(result.events, document=name)
        for name, result in _validate_files(aggregator, args.files)
    ]
    report = pl.concat(frames) if frames else events_frame([])
    path = write_report(report, args.out)
    print(f"[INFO] Wrote {report.height} event(s) to {path}")
    return 0


def _cmd_show_report(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="show-report", description="Show a report parquet head.")
    p.add_argument("--report", type=str, required=True, help="Path to report parquet.")
    p.add_argument("--n", type=int, default=10, help="Rows to display.")
    args = p.parse_args(argv)

    print(read_report(args.report).head(args.n))
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="isoxchange", description="ISO 20022 document utilities CLI.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("validate")
    sub.add_parser("report")
    sub.add_parser("show-report")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    if cmd == "validate":
        code = _cmd_validate(rest)
    elif cmd == "report":
        code = _cmd_report(rest)
    elif cmd == "show-report":
        code = _cmd_show_report(rest)
    else:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":
    main()
