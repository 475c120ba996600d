"""
isoxchange.io — settings, schema sources, and validation reports.

## Responsibilities
- ExchangeSettings: codec/validation/schema-discovery configuration (env > TOML > defaults).
- Schema sources: load XSD definitions from folders, file lists, or package resources
  into a core SchemaAggregator.
- Reports: validation events as Polars frames and atomically written Parquet files.

## Import DAG discipline
- Depends on stdlib, polars/pyarrow, and isoxchange.core.*.
- MUST NOT be imported by isoxchange.core.

## Examples
```python
from isoxchange.io import ExchangeSettings, events_frame

settings = ExchangeSettings(schema_dir="schemas")  # doctest: +SKIP
aggregator = settings.build_aggregator()  # doctest: +SKIP
result = aggregator.validate(open("pain.001.xml").read(), name="pain.001.xml")  # doctest: +SKIP
events_frame(result.events, document="pain.001.xml")  # doctest: +SKIP
```
"""

from __future__ import annotations

from .config import ExchangeSettings
from .report import events_frame, read_report, write_report
from .sources import iter_schema_files, load_files, load_folder, load_resources

__all__ = [
    "ExchangeSettings",
    "events_frame",
    "read_report",
    "write_report",
    "iter_schema_files",
    "load_files",
    "load_folder",
    "load_resources",
]
