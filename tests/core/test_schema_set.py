from __future__ import annotations

import io
from pathlib import Path

import pytest
from sample_documents import (
    NOT_A_SCHEMA,
    NOT_WELL_FORMED_XSD,
    PAIN_DOCUMENT_XSD,
    PAIN_TYPES_XSD,
    PING_TYPES_XSD,
    PING_XSD,
    PONG_XSD,
    sample_document,
)

from isoxchange.core.codec import serialize
from isoxchange.core.encoding import Encoding
from isoxchange.core.errors import SchemaValidationError
from isoxchange.core.schema_set import (
    SchemaAggregator,
    Severity,
    ValidationEvent,
    ValidationPolicy,
    ValidationResult,
)

PING_DOC = '<Ping xmlns="urn:example:ping"><Seq>7</Seq></Ping>'
BAD_PING_DOC = '<Ping xmlns="urn:example:ping"><Seq>seven</Seq></Ping>'
OTHER_BROKEN_XSD = """\
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" targetNamespace="urn:other">
  <xs:element name="Other" type="NoSuchType"/>
</xs:schema>
"""
BOGUS_ELEMENT_XSD = '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema"><xs:bogus/></xs:schema>'
NESTED_BOGUS_XSD = (
    '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
    '<xs:element name="Nested"><xs:complexType><xs:sequense/></xs:complexType></xs:element>'
    "</xs:schema>"
)
ANNOTATED_XSD = (
    '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
    "<xs:annotation><xs:appinfo><meta><xs:whatever/></meta></xs:appinfo></xs:annotation>"
    '<xs:element name="Note" type="xs:string"/></xs:schema>'
)


def _pain_xml() -> str:
    return serialize(sample_document(), Encoding.XML)


def test_valid_document_is_returned_in_canonical_form(pain_schemas: SchemaAggregator) -> None:
    result = pain_schemas.validate(_pain_xml(), name="pain.xml")
    assert result.valid
    assert bool(result)
    assert result.document == _pain_xml()
    assert result.events == ()
    assert pain_schemas.errors == ()


def test_canonical_form_drops_declaration_whitespace_and_comments() -> None:
    agg = SchemaAggregator()
    assert agg.add_definition(PING_TYPES_XSD) and agg.add_definition(PING_XSD)
    text = '<?xml version="1.0"?>\n<!-- hi -->\n<Ping xmlns="urn:example:ping">\n  <Seq>7</Seq>\n</Ping>\n'
    assert agg.validate(text).document == PING_DOC


def test_invalid_document_records_error_with_location(pain_schemas: SchemaAggregator) -> None:
    bad = _pain_xml().replace("<NbOfTxs>2</NbOfTxs>", "<NbOfTxs>two</NbOfTxs>")
    result = pain_schemas.validate(bad, name="bad.xml")
    assert not result.valid
    assert result.document is None
    assert result.errors
    event = result.errors[0]
    assert event.severity is Severity.ERROR
    assert event.line is not None
    assert "NbOfTxs" in event.message
    assert pain_schemas.errors == result.errors


def test_definitions_in_one_namespace_are_merged_across_files() -> None:
    agg = SchemaAggregator()
    assert agg.add_definitions([PING_XSD, PING_TYPES_XSD, PONG_XSD])
    assert len(agg) == 3
    assert agg.validate(PING_DOC).valid
    assert agg.validate('<Pong xmlns="urn:example:pong">x</Pong>').valid
    assert not agg.validate(BAD_PING_DOC).valid


def test_partial_failure_keeps_good_definitions() -> None:
    agg = SchemaAggregator()
    ok = agg.add_definitions([PAIN_TYPES_XSD, NOT_WELL_FORMED_XSD, NOT_A_SCHEMA, PAIN_DOCUMENT_XSD])
    assert ok is False
    assert agg.definition_count == 2
    # a failed load records no validation event
    assert agg.events == ()
    assert agg.validate(_pain_xml()).valid


def test_add_definition_sources(tmp_path: Path) -> None:
    path = tmp_path / "ping.types.xsd"
    path.write_text(PING_TYPES_XSD, encoding="utf-8")
    agg = SchemaAggregator()
    assert agg.add_definition(path)
    assert agg.add_definition(io.BytesIO(PING_XSD.encode("utf-8")), name="ping.xsd")
    assert agg.add_definition(PONG_XSD.encode("utf-8"))
    assert not agg.add_definition(tmp_path / "missing.xsd")
    assert len(agg) == 3
    assert agg.validate(PING_DOC).valid


def test_file_backed_definition_resolves_relative_include(tmp_path: Path) -> None:
    (tmp_path / "types.xsd").write_text(PING_TYPES_XSD, encoding="utf-8")
    main = tmp_path / "main.xsd"
    main.write_text(
        PING_XSD.replace(
            'elementFormDefault="qualified">',
            'elementFormDefault="qualified">\n  <xs:include schemaLocation="types.xsd"/>',
        ),
        encoding="utf-8",
    )
    agg = SchemaAggregator()
    assert agg.add_definition(str(main))
    assert agg.validate(PING_DOC).valid


def test_validation_is_idempotent(pain_schemas: SchemaAggregator) -> None:
    first = pain_schemas.validate(_pain_xml())
    second = pain_schemas.validate(first.document)
    assert second.valid and second.document == first.document
    assert [e.severity for e in second.events] == [e.severity for e in first.events]


def test_events_accumulate_until_reset(pain_schemas: SchemaAggregator) -> None:
    pain_schemas.validate("<Unknown/>")
    pain_schemas.validate("<Unknown/>")
    assert len(pain_schemas.errors) >= 2

    pain_schemas.reset()
    assert len(pain_schemas) == 0
    assert pain_schemas.events == ()
    assert pain_schemas.errors == () and pain_schemas.warnings == ()

    assert pain_schemas.add_definitions([PAIN_TYPES_XSD, PAIN_DOCUMENT_XSD])
    assert pain_schemas.validate(_pain_xml()).valid


@pytest.mark.parametrize("document", [None, "", "  \n", b""])
def test_empty_document_is_rejected(pain_schemas: SchemaAggregator, document) -> None:
    result = pain_schemas.validate(document, name="empty.xml")
    assert result.document is None
    assert [e.message for e in result.errors] == ["empty document"]
    assert result.errors[0].source == "empty.xml"


def test_malformed_document_records_parse_error(pain_schemas: SchemaAggregator) -> None:
    result = pain_schemas.validate("<Document><CstmrCdtTrfInitn>", name="broken.xml")
    assert result.document is None
    assert result.errors
    assert all(e.source == "broken.xml" for e in result.errors)


def test_empty_aggregate_accepts_with_warning() -> None:
    agg = SchemaAggregator()
    result = agg.validate("<Anything/>")
    assert result.document == "<Anything/>"
    assert [e.severity for e in result.events] == [Severity.WARNING]
    assert agg.warnings == result.warnings


def test_policy_can_reject_warnings() -> None:
    agg = SchemaAggregator(policy=ValidationPolicy(use_with_warnings=False))
    result = agg.validate("<Anything/>")
    assert result.document is None
    assert result.warnings


def test_policy_can_accept_errors() -> None:
    lenient = SchemaAggregator(policy=ValidationPolicy(use_with_errors=True))
    assert lenient.add_definitions([PAIN_TYPES_XSD, PAIN_DOCUMENT_XSD])
    result = lenient.validate("<Unknown/>")
    assert result.document == "<Unknown/>"
    assert result.errors


@pytest.mark.parametrize(
    ("policy", "has_errors", "has_warnings", "expected"),
    [
        (ValidationPolicy(), False, False, True),
        (ValidationPolicy(), False, True, True),
        (ValidationPolicy(), True, False, False),
        (ValidationPolicy(use_with_errors=True), True, True, True),
        (ValidationPolicy(use_with_warnings=False), False, True, False),
        (ValidationPolicy(use_with_errors=True, use_with_warnings=False), True, True, False),
    ],
)
def test_policy_accepts(policy: ValidationPolicy, has_errors: bool, has_warnings: bool, expected: bool) -> None:
    assert policy.accepts(has_errors, has_warnings) is expected


def test_ensure_valid_raises_with_events(pain_schemas: SchemaAggregator) -> None:
    assert pain_schemas.ensure_valid(_pain_xml()) == _pain_xml()
    with pytest.raises(SchemaValidationError) as excinfo:
        pain_schemas.ensure_valid("<Unknown/>", name="u.xml")
    assert excinfo.value.events
    assert all(isinstance(e, ValidationEvent) for e in excinfo.value.events)


def test_adding_definition_invalidates_compiled_schema() -> None:
    agg = SchemaAggregator()
    assert agg.add_definition(PING_XSD.replace('type="PingBody"', 'type="xs:string"'))
    assert not agg.validate('<Pong xmlns="urn:example:pong">x</Pong>').valid
    assert agg.add_definition(PONG_XSD)
    assert agg.validate('<Pong xmlns="urn:example:pong">x</Pong>').valid


def test_dangling_type_reference_excludes_only_that_definition() -> None:
    agg = SchemaAggregator()
    # PingBody is never defined
    assert agg.add_definitions([PING_XSD, PONG_XSD])
    assert not agg.validate(PING_DOC).valid
    assert agg.validate('<Pong xmlns="urn:example:pong">x</Pong>').valid
    assert any("excluded from the aggregate" in e.message for e in agg.errors)

    assert agg.add_definition(PING_TYPES_XSD)
    assert agg.validate(PING_DOC).valid


def test_only_broken_definition_rejects_without_raising() -> None:
    agg = SchemaAggregator()
    assert agg.add_definition(PING_XSD)
    result = agg.validate(PING_DOC, name="ping.xml")
    assert result == ValidationResult(None, result.events)
    assert [e.message for e in result.errors] == ["no schema definition could be compiled"]
    assert agg.errors[-1].source == "ping.xml"


def test_broken_definition_in_other_namespace_keeps_good_ones_validating(
    pain_schemas: SchemaAggregator,
) -> None:
    assert pain_schemas.add_definition(OTHER_BROKEN_XSD, name="other.xsd")
    result = pain_schemas.validate(_pain_xml())
    assert result.valid
    assert result.events == ()
    excluded = [e for e in pain_schemas.errors if "excluded from the aggregate" in e.message]
    assert [e.source for e in excluded] == ["other.xsd"]


def test_definition_outside_xsd_vocabulary_is_refused(pain_schemas: SchemaAggregator) -> None:
    assert not pain_schemas.add_definition(BOGUS_ELEMENT_XSD)
    assert not pain_schemas.add_definition(NESTED_BOGUS_XSD)
    assert len(pain_schemas) == 2
    assert pain_schemas.validate(_pain_xml()).valid


def test_annotation_content_is_not_inspected() -> None:
    agg = SchemaAggregator()
    assert agg.add_definition(ANNOTATED_XSD)
    assert agg.validate("<Note>hi</Note>").valid


def test_repeated_definitions_are_held_once(tmp_path: Path, pain_schemas: SchemaAggregator) -> None:
    assert pain_schemas.add_definitions([PAIN_TYPES_XSD, PAIN_DOCUMENT_XSD])
    assert len(pain_schemas) == 2
    assert pain_schemas.validate(_pain_xml()).valid

    path = tmp_path / "pong.xsd"
    path.write_text(PONG_XSD, encoding="utf-8")
    assert pain_schemas.add_definition(path)
    assert pain_schemas.add_definition(str(path))
    assert len(pain_schemas) == 3
    assert pain_schemas.validate('<Pong xmlns="urn:example:pong">x</Pong>').valid
