"""
Multi-file XSD aggregation and document validation.

SchemaAggregator owns a mutable set of independently loaded schema definitions,
compiles them on demand into one validation context, validates XML documents
against it, and records every error and warning in an append-only event log.

Responsibilities
- Load definitions from paths, raw text/bytes, or readable streams; a malformed
  definition is rejected on its own and never disturbs those already loaded.
- Merge definitions: members sharing a targetNamespace are `xs:include`d into an
  in-memory namespace wrapper; a master schema `xs:import`s every wrapper and
  includes no-namespace members directly. Members are served from memory via an
  lxml Resolver; file-backed members keep their file URI so their own relative
  includes resolve.
- Validate: hardened parse, schema check, severity classification, acceptance
  gated by ValidationPolicy, canonical compact re-serialization on success.

Failure policy
- Nothing raises across the validation boundary: malformed definitions return
  False, malformed or invalid documents yield an empty ValidationResult. Faults
  go to the diagnostics channel. `ensure_valid` is the opt-in raising variant.
- Definitions that parse but do not compile with the rest (dangling type
  references, conflicting declarations) are excluded from the compiled context
  and reported as aggregate events; the others keep validating.

Examples:
    >>> agg = SchemaAggregator()
    >>> agg.add_definition(
    ...     '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
    ...     '<xs:element name="Ping" type="xs:string"/></xs:schema>'
    ... )
    True
    >>> agg.validate("<Ping>ok</Ping>").document
    '<Ping>ok</Ping>'
    >>> agg.validate("<Pong/>").valid
    False
    >>> [e.severity.value for e in agg.errors]
    ['error']
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from lxml import etree
from pydantic import BaseModel, ConfigDict

from .constants import TEXT_ENCODING, XSD_NAMESPACE, XSD_SCHEMA_TAG
from .diagnostics import report_fault
from .errors import SchemaValidationError
from .typing import DocumentText, SchemaSource
from .xmlbind import parse_document, to_string

__all__ = [
    "Severity",
    "ValidationEvent",
    "ValidationPolicy",
    "ValidationResult",
    "SchemaAggregator",
]

logger = logging.getLogger(__name__)

_SCHEME = "isoxchange-aggregate"
_MASTER_URL = f"{_SCHEME}://master.xsd"
_XS = f"{{{XSD_NAMESPACE}}}"

# XML Schema 1.0 element vocabulary (what libxml2 compiles).
_XSD_ELEMENTS = frozenset(
    {
        "all", "annotation", "any", "anyAttribute", "appinfo", "attribute",
        "attributeGroup", "choice", "complexContent", "complexType", "documentation",
        "element", "enumeration", "extension", "field", "fractionDigits", "group",
        "import", "include", "key", "keyref", "length", "list", "maxExclusive",
        "maxInclusive", "maxLength", "minExclusive", "minInclusive", "minLength",
        "notation", "pattern", "redefine", "restriction", "selector", "sequence",
        "simpleContent", "simpleType", "totalDigits", "union", "unique", "whiteSpace",
    }
)
_XSD_TOP_LEVEL = frozenset(
    {
        "include", "import", "redefine", "annotation", "simpleType", "complexType",
        "group", "attributeGroup", "element", "attribute", "notation",
    }
)
_XSD_FREE_CONTENT = frozenset({"appinfo", "documentation"})


class Severity(str, Enum):
    """Validation event severity."""

    ERROR = "error"
    WARNING = "warning"


class ValidationEvent(BaseModel):
    """
    One deviation reported while validating a document.

    Attributes:
        severity (Severity): ERROR or WARNING.
        message (str): Human-readable description from the validator.
        line (int | None): 1-based line in the offending document/definition, if known.
        column (int | None): Column, if known.
        source (str | None): Document label or definition location, if known.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    severity: Severity
    message: str
    line: int | None = None
    column: int | None = None
    source: str | None = None

    @classmethod
    def from_log_entry(cls, entry: Any, source: str | None = None) -> ValidationEvent:
        """Build an event from an lxml `_LogEntry`."""
        severity = Severity.WARNING if entry.level == etree.ErrorLevels.WARNING else Severity.ERROR
        filename = entry.filename
        if not filename or filename.startswith("<"):
            filename = source
        return cls(
            severity=severity,
            message=str(entry.message).strip(),
            line=entry.line or None,
            column=entry.column or None,
            source=filename,
        )


@dataclass(frozen=True)
class ValidationPolicy:
    """
    Acceptance rules applied after validation.

    Attributes:
        use_with_errors (bool): Accept a document even when errors were reported.
        use_with_warnings (bool): Accept a document when only warnings were reported.
    """

    use_with_errors: bool = False
    use_with_warnings: bool = True

    def accepts(self, has_errors: bool, has_warnings: bool) -> bool:
        if has_errors and not self.use_with_errors:
            return False
        if has_warnings and not self.use_with_warnings:
            return False
        return True


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one validation pass.

    Attributes:
        document (str | None): Canonical compact document text when accepted, else None.
        events (tuple[ValidationEvent, ...]): Events recorded during this pass only.
    """

    document: str | None
    events: tuple[ValidationEvent, ...] = ()

    @property
    def valid(self) -> bool:
        return self.document is not None

    @property
    def errors(self) -> tuple[ValidationEvent, ...]:
        return tuple(e for e in self.events if e.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[ValidationEvent, ...]:
        return tuple(e for e in self.events if e.severity is Severity.WARNING)

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class _Definition:
    url: str
    content: bytes
    target_namespace: str | None
    label: str | None = None


class _AggregateResolver(etree.Resolver):
    """Serve aggregate member and wrapper documents from memory."""

    def __init__(self, documents: dict[str, bytes]) -> None:
        super().__init__()
        self._documents = documents

    def resolve(self, url, pubid, context):  # noqa: ANN001 - lxml callback signature
        content = self._documents.get(url)
        if content is None:
            return None
        return self.resolve_string(content, context, base_url=url)


def _schema_parser() -> etree.XMLParser:
    return etree.XMLParser(
        remove_comments=True,
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
    )


def _read_source(source: SchemaSource, name: str | None) -> tuple[bytes, Path | None, str | None]:
    """Return (content, file path if file-backed, label)."""
    if hasattr(source, "read"):
        raw = source.read()  # type: ignore[union-attr]
        content = raw.encode(TEXT_ENCODING) if isinstance(raw, str) else bytes(raw)
        return content, None, name or getattr(source, "name", None)
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), None, name
    if isinstance(source, str) and source.lstrip().startswith("<"):
        return source.encode(TEXT_ENCODING), None, name
    path = Path(os.fspath(source)).resolve()
    with path.open("rb") as fh:
        content = fh.read()
    return content, path, name or str(path)


def _check_structure(element: etree._Element, top_level: bool = True) -> None:
    """
    Reject elements outside the XSD vocabulary before a definition is stored.

    Content of xs:appinfo / xs:documentation is free-form and not inspected.

    Raises:
        ValueError: Naming the first misplaced or unknown element.
    """
    for child in element:
        if not isinstance(child.tag, str):
            continue
        qname = etree.QName(child)
        if qname.namespace != XSD_NAMESPACE or qname.localname not in _XSD_ELEMENTS:
            raise ValueError(f"unexpected element <{child.tag}> in schema definition (line {child.sourceline})")
        if top_level and qname.localname not in _XSD_TOP_LEVEL:
            raise ValueError(f"xs:{qname.localname} is not allowed at the top of a schema (line {child.sourceline})")
        if qname.localname not in _XSD_FREE_CONTENT:
            _check_structure(child, top_level=False)


@dataclass
class SchemaAggregator:
    """
    Aggregate of XSD definitions used as one validation context.

    Attributes:
        policy (ValidationPolicy): Acceptance rules for documents with errors/warnings.

    Notes:
        - Not thread-safe; use one aggregator per unit of work or guard externally.
        - The compiled schema is cached until the set of definitions changes.
    """

    policy: ValidationPolicy = field(default_factory=ValidationPolicy)
    _definitions: list[_Definition] = field(default_factory=list, init=False, repr=False)
    _events: list[ValidationEvent] = field(default_factory=list, init=False, repr=False)
    _compiled: etree.XMLSchema | None = field(default=None, init=False, repr=False)
    _stale: bool = field(default=True, init=False, repr=False)
    _serial: int = field(default=0, init=False, repr=False)

    # ------------------------------------------------------------------ views

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def definition_count(self) -> int:
        return len(self._definitions)

    @property
    def events(self) -> tuple[ValidationEvent, ...]:
        """All events recorded since the last reset, in encounter order."""
        return tuple(self._events)

    @property
    def errors(self) -> tuple[ValidationEvent, ...]:
        return tuple(e for e in self._events if e.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[ValidationEvent, ...]:
        return tuple(e for e in self._events if e.severity is Severity.WARNING)

    # -------------------------------------------------------------- mutation

    def reset(self) -> None:
        """Discard every definition and every recorded event."""
        self._definitions = []
        self._events = []
        self._compiled = None
        self._stale = True

    def add_definition(self, source: SchemaSource, *, name: str | None = None) -> bool:
        """
        Parse one schema definition and add it to the aggregate.

        Args:
            source (SchemaSource): File path, raw XSD text (str starting with "<"),
                bytes, or a readable stream (read here; the caller keeps ownership).
            name (str | None): Label for diagnostics and events.

        Returns:
            bool: True if the definition parsed and was added, or is already held
            (same content or same file); False otherwise (logged; no validation
            event recorded, existing definitions untouched).

        Notes:
            Only the definition's own structure is checked here. References into
            other definitions are resolved when the aggregate compiles.
        """
        try:
            content, path, label = _read_source(source, name)
            base_url = path.as_uri() if path is not None else None
            root = etree.fromstring(content, _schema_parser(), base_url=base_url)
            if root.tag != XSD_SCHEMA_TAG:
                raise ValueError(f"root element {root.tag!r} is not an XML schema definition")
            _check_structure(root)
        except Exception as exc:
            report_fault(logger, exc, name or (source if isinstance(source, (str, os.PathLike)) else None))
            return False

        if any(d.content == content or d.url == base_url for d in self._definitions):
            logger.debug("schema definition %s already loaded; skipped", label or base_url or "<text>")
            return True

        self._serial += 1
        url = base_url or f"{_SCHEME}://definition/{self._serial}.xsd"
        self._definitions.append(
            _Definition(
                url=url,
                content=content,
                target_namespace=root.get("targetNamespace") or None,
                label=label,
            )
        )
        self._stale = True
        return True

    def add_definitions(self, sources: Iterable[SchemaSource]) -> bool:
        """
        Add every source, continuing past failures.

        Returns:
            bool: True only if every source was added.
        """
        ok = True
        for source in sources:
            ok = self.add_definition(source) and ok
        return ok

    # ------------------------------------------------------------ validation

    def _compile_set(self, definitions: list[_Definition]) -> etree.XMLSchema:
        """
        Compile `definitions` as one schema.

        Raises:
            lxml.etree.XMLSchemaParseError: If the set does not compile.
        """
        documents: dict[str, bytes] = {}
        by_namespace: dict[str | None, list[str]] = {}
        for definition in definitions:
            documents[definition.url] = definition.content
            by_namespace.setdefault(definition.target_namespace, []).append(definition.url)

        master = etree.Element(f"{_XS}schema", nsmap={"xs": XSD_NAMESPACE})
        for index, (namespace, urls) in enumerate(by_namespace.items()):
            if namespace is None:
                for url in urls:
                    etree.SubElement(master, f"{_XS}include", schemaLocation=url)
                continue
            wrapper = etree.Element(
                f"{_XS}schema", nsmap={"xs": XSD_NAMESPACE}, targetNamespace=namespace
            )
            for url in urls:
                etree.SubElement(wrapper, f"{_XS}include", schemaLocation=url)
            wrapper_url = f"{_SCHEME}://namespace/{index}.xsd"
            documents[wrapper_url] = etree.tostring(wrapper)
            etree.SubElement(master, f"{_XS}import", namespace=namespace, schemaLocation=wrapper_url)

        parser = _schema_parser()
        parser.resolvers.add(_AggregateResolver(documents))
        master_doc = etree.fromstring(etree.tostring(master), parser, base_url=_MASTER_URL)
        return etree.XMLSchema(master_doc)

    def _admit(
        self, accepted: list[_Definition], units: list[list[_Definition]]
    ) -> tuple[etree.XMLSchema | None, list[tuple[list[_Definition], Exception]]]:
        """
        Grow `accepted` by every unit that still compiles together with it.

        Units are retried while any unit gets admitted, so a unit that needs a later
        one is picked up on the next round.

        Returns:
            (schema of the last successful compile or None, rejected units with their last error)
        """
        schema: etree.XMLSchema | None = None
        remaining = units
        failures: dict[int, Exception] = {}
        progress = True
        while remaining and progress:
            progress = False
            still: list[list[_Definition]] = []
            for unit in remaining:
                try:
                    schema = self._compile_set(accepted + unit)
                except etree.XMLSchemaParseError as exc:
                    failures[id(unit)] = exc
                    still.append(unit)
                    continue
                accepted.extend(unit)
                progress = True
            remaining = still
        return schema, [(unit, failures[id(unit)]) for unit in remaining]

    def _compile(self) -> etree.XMLSchema | None:
        """
        Compile the aggregate, excluding definitions that break compilation.

        The merged set is tried first. On failure each namespace group is admitted
        on its own, then the members of rejected groups one by one. Excluded
        definitions are reported once as ERROR events of the aggregate (not of any
        document pass) and the remaining ones form the validation context.

        Returns:
            etree.XMLSchema | None: None when no definition compiles.
        """
        try:
            return self._compile_set(self._definitions)
        except etree.XMLSchemaParseError as exc:
            report_fault(logger, exc, "schema aggregate")

        groups: dict[str | None, list[_Definition]] = {}
        for definition in self._definitions:
            groups.setdefault(definition.target_namespace, []).append(definition)

        accepted: list[_Definition] = []
        schema, rejected = self._admit(accepted, list(groups.values()))
        singles = [[d] for unit, _ in rejected for d in unit]
        if len(singles) > len(rejected):
            retry_schema, rejected = self._admit(accepted, singles)
            if retry_schema is not None:
                schema = retry_schema

        labels = {d.url: d.label or d.url for d in self._definitions}
        for unit, exc in rejected:
            names = ", ".join(labels[d.url] for d in unit)
            for entry in getattr(exc, "error_log", ()):
                if entry.level == etree.ErrorLevels.NONE:
                    continue
                event = ValidationEvent.from_log_entry(entry, names)
                if event.source in labels:
                    event = event.model_copy(update={"source": labels[event.source]})
                self._events.append(event)
            self._events.append(
                ValidationEvent(
                    severity=Severity.ERROR,
                    message=f"schema definition excluded from the aggregate: {exc}",
                    source=names,
                )
            )
        return schema if accepted else None

    def _schema(self) -> etree.XMLSchema | None:
        if self._stale:
            self._compiled = self._compile()
            self._stale = False
        return self._compiled

    def _record(self, pass_events: list[ValidationEvent], event: ValidationEvent) -> None:
        pass_events.append(event)
        self._events.append(event)

    def _record_log(self, pass_events: list[ValidationEvent], error_log: Any, source: str | None) -> None:
        for entry in error_log:
            if entry.level == etree.ErrorLevels.NONE:
                continue
            self._record(pass_events, ValidationEvent.from_log_entry(entry, source))

    def validate(self, document: DocumentText | None, *, name: str | None = None) -> ValidationResult:
        """
        Validate an XML document against the aggregate.

        Args:
            document (str | bytes | None): Document text.
            name (str | None): Label stored as the source of document-level events.

        Returns:
            ValidationResult: Accepted canonical text plus this pass's events, or an
            empty result (document None) on parse/compile/validation failure or when
            the policy rejects the reported events.
        """
        pass_events: list[ValidationEvent] = []

        if not document or not document.strip():
            self._record(
                pass_events,
                ValidationEvent(severity=Severity.ERROR, message="empty document", source=name),
            )
            return ValidationResult(None, tuple(pass_events))

        try:
            root = parse_document(document)
        except etree.XMLSyntaxError as exc:
            self._record_log(pass_events, exc.error_log, name)
            if not pass_events:
                self._record(
                    pass_events,
                    ValidationEvent(severity=Severity.ERROR, message=str(exc), source=name),
                )
            report_fault(logger, exc, name or document)
            return ValidationResult(None, tuple(pass_events))

        if not self._definitions:
            self._record(
                pass_events,
                ValidationEvent(
                    severity=Severity.WARNING,
                    message="no schema definitions loaded; structure not checked",
                    source=name,
                ),
            )
        else:
            schema = self._schema()
            if schema is None:
                self._record(
                    pass_events,
                    ValidationEvent(
                        severity=Severity.ERROR,
                        message="no schema definition could be compiled",
                        source=name,
                    ),
                )
                return ValidationResult(None, tuple(pass_events))

            valid = schema.validate(root)
            self._record_log(pass_events, schema.error_log, name)
            if not valid and not any(e.severity is Severity.ERROR for e in pass_events):
                self._record(
                    pass_events,
                    ValidationEvent(severity=Severity.ERROR, message="document is not valid", source=name),
                )

        has_errors = any(e.severity is Severity.ERROR for e in pass_events)
        has_warnings = any(e.severity is Severity.WARNING for e in pass_events)
        if not self.policy.accepts(has_errors, has_warnings):
            return ValidationResult(None, tuple(pass_events))
        return ValidationResult(to_string(root), tuple(pass_events))

    def ensure_valid(self, document: DocumentText | None, *, name: str | None = None) -> str:
        """
        Validate and return the canonical text, raising when rejected.

        Raises:
            SchemaValidationError: Carrying the events of the rejected pass.
        """
        result = self.validate(document, name=name)
        if result.document is None:
            raise SchemaValidationError(result.events)
        return result.document
