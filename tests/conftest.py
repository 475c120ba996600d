from __future__ import annotations

import logging
from pathlib import Path

import pytest
from sample_documents import PAIN_DOCUMENT_XSD, PAIN_TYPES_XSD

from isoxchange.core.schema_set import SchemaAggregator


@pytest.fixture
def pain_schemas() -> SchemaAggregator:
    """Aggregator preloaded with the two no-namespace pain definitions."""
    agg = SchemaAggregator()
    assert agg.add_definitions([PAIN_TYPES_XSD, PAIN_DOCUMENT_XSD])
    return agg


@pytest.fixture
def schema_dir(tmp_path: Path) -> Path:
    """Folder with the pain definitions as files, plus a nested copy and a non-XSD file."""
    root = tmp_path / "schemas"
    nested = root / "nested"
    nested.mkdir(parents=True)
    (root / "pain.types.xsd").write_text(PAIN_TYPES_XSD, encoding="utf-8")
    (root / "pain.document.xsd").write_text(PAIN_DOCUMENT_XSD, encoding="utf-8")
    (root / "README.txt").write_text("not a schema", encoding="utf-8")
    (nested / "extra.xsd").write_text(
        '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" targetNamespace="urn:extra">'
        '<xs:element name="Extra" type="xs:string"/></xs:schema>',
        encoding="utf-8",
    )
    return root


@pytest.fixture(autouse=True)
def restore_isoxchange_logger():
    """The CLI installs its own handler; put the library logger back after each test."""
    logger = logging.getLogger("isoxchange")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)
