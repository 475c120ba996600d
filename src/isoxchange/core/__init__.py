"""
Core package aggregator for isoxchange contracts (codec, schema aggregation, message wrappers).

## Contracts
- Codec: generic serialize/deserialize over JSON and XML; faults collapse to None.
- XML binding: pydantic models <-> lxml elements (attributes, text, repeated elements).
- Schema aggregation: multi-file XSD set, validation events, acceptance policy.
- Message wrappers: `IsoMessage[DocT, MsgT]` binding a root document to its embedded message.
- Type resolution, message identifiers, encodings, errors.

## Notes
- Zero-IO policy beyond reading schema sources handed in explicitly: stdlib + pydantic + lxml.
- Configuration, folder/resource discovery and reports live in isoxchange.io.
- Diagnostics are emitted on the `isoxchange` logger hierarchy.

## Examples
```python
from pydantic import Field
from isoxchange.core import Encoding, IsoMessage, MessageModel, SchemaAggregator

class GroupHeader(MessageModel):
    msg_id: str = Field("", alias="MsgId")

class Document(MessageModel):
    grp_hdr: GroupHeader = Field(default_factory=GroupHeader, alias="GrpHdr")

class HeaderMessage(IsoMessage[Document, GroupHeader]):
    def extract_message(self, document: Document) -> GroupHeader:
        return document.grp_hdr

msg = HeaderMessage(schemas=SchemaAggregator())
msg.document.grp_hdr.msg_id = "M-1"
msg.serialize(Encoding.XML)  # '<Document><GrpHdr><MsgId>M-1</MsgId></GrpHdr></Document>'
```
"""

from __future__ import annotations

from .codec import CodecOptions, deserialize, deserialize_any, serialize
from .encoding import Encoding, encoding_from_value
from .errors import (
    DocumentNotCreatedError,
    MessageConfigurationError,
    NoDefaultConstructorError,
    SchemaValidationError,
    XmlBindingError,
)
from .message import IsoMessage, MessageModel, has_zero_arg_constructor
from .resolve import resolve_concrete_type
from .schema_set import (
    SchemaAggregator,
    Severity,
    ValidationEvent,
    ValidationPolicy,
    ValidationResult,
)
from .versioning import MessageIdentifier
from .xmlbind import xml_attribute, xml_text

__all__ = [
    "CodecOptions",
    "serialize",
    "deserialize",
    "deserialize_any",
    "Encoding",
    "encoding_from_value",
    "MessageConfigurationError",
    "NoDefaultConstructorError",
    "DocumentNotCreatedError",
    "SchemaValidationError",
    "XmlBindingError",
    "IsoMessage",
    "MessageModel",
    "has_zero_arg_constructor",
    "resolve_concrete_type",
    "SchemaAggregator",
    "Severity",
    "ValidationEvent",
    "ValidationPolicy",
    "ValidationResult",
    "MessageIdentifier",
    "xml_attribute",
    "xml_text",
]
