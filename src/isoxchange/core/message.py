"""
Generic document wrapper binding a root document type to a narrower message view.

An ISO 20022 document (``<Document>``) wraps exactly one message
(``<CstmrCdtTrfInitn>``, ``<BkToCstmrStmt>``, ...). `IsoMessage[DocT, MsgT]`
owns one root document instance, exposes the embedded message as a derived view
recomputed on every access, and delegates (de)serialization to the codec with
optional validation against an attached SchemaAggregator.

Lifecycle
- Uninitialized → Constructed: the constructor builds an empty root document via
  its zero-argument constructor (or an injected factory). A document type that
  needs arguments, or construction that yields nothing, is a configuration error
  raised immediately and naming the type.
- Constructed → Populated: callers mutate the document directly or call
  `deserialize`, which replaces it wholesale on success (any number of times).

Notes:
    - The document type is read from the parameterized base
      (``class Pain001(IsoMessage[Pain001Document, CustomerCreditTransfer])``), also
      through intermediate generic bases, or from an explicit ``document_type``
      class attribute.
    - Not thread-safe; one wrapper per unit of work.

Examples:
    >>> from pydantic import Field
    >>> class Hdr(MessageModel):
    ...     msg_id: str = Field("", alias="MsgId")
    >>> class Doc(MessageModel):
    ...     xml_tag: ClassVar[str] = "Document"
    ...     hdr: Hdr = Field(default_factory=Hdr, alias="GrpHdr")
    >>> class HdrMessage(IsoMessage[Doc, Hdr]):
    ...     def extract_message(self, document: Doc) -> Hdr:
    ...         return document.hdr
    >>> msg = HdrMessage()
    >>> msg.document.hdr.msg_id = "M1"
    >>> msg.serialize()
    '{"GrpHdr":{"MsgId":"M1"}}'
    >>> msg.deserialize("<Document><GrpHdr><MsgId>M2</MsgId></GrpHdr></Document>", "xml")
    True
    >>> msg.message.msg_id
    'M2'
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar, Generic, TypeVar, get_args, get_origin

from pydantic import BaseModel, ConfigDict

from . import codec
from .codec import CodecOptions
from .encoding import Encoding, encoding_from_value
from .errors import DocumentNotCreatedError, MessageConfigurationError, NoDefaultConstructorError
from .resolve import resolve_concrete_type
from .schema_set import SchemaAggregator, ValidationResult
from .typing import DocumentText
from .versioning import MessageIdentifier

__all__ = [
    "MessageModel",
    "IsoMessage",
    "has_zero_arg_constructor",
]

DocT = TypeVar("DocT")
MsgT = TypeVar("MsgT")


class MessageModel(BaseModel):
    """
    Base for document and message models exchanged through the codec.

    Attributes:
        xml_tag (ClassVar[str | None]): Element name when used as an XML root (default: class name).
        xml_namespace (ClassVar[str | None]): Namespace emitted when the codec is asked for one.

    Notes:
        - Unknown members are ignored on read; fields accept both alias and name.
        - Models are mutable so callers can populate a wrapper's document in place.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, validate_assignment=True)

    xml_tag: ClassVar[str | None] = None
    xml_namespace: ClassVar[str | None] = None


def has_zero_arg_constructor(tp: Any) -> bool:
    """
    True if `tp` can be called without arguments according to its signature.

    Examples:
        >>> class A:
        ...     def __init__(self, x=1): ...
        >>> class B:
        ...     def __init__(self, x): ...
        >>> has_zero_arg_constructor(A), has_zero_arg_constructor(B)
        (True, False)
    """
    if not callable(tp):
        return False
    try:
        signature = inspect.signature(tp)
    except (TypeError, ValueError):
        return False
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.default is param.empty:
            return False
    return True


class IsoMessage(ABC, Generic[DocT, MsgT]):
    """
    Wrapper over one root document of type DocT exposing its embedded MsgT.

    Class attributes:
        document_type (ClassVar[type | None]): Root document type (inferred from the
            parameterized base when not set explicitly).
        encoding (ClassVar[Encoding]): Default encoding of serialize/deserialize.
        identifier (ClassVar[MessageIdentifier | None]): Message definition identifier.

    Args:
        factory (Callable[[], DocT] | None): Builds the initial document in place of
            the zero-argument constructor.
        schemas (SchemaAggregator | None): Aggregate used for XML validation.
        use_validation (bool): Validate XML output and input when `schemas` is attached.
        options (CodecOptions | None): Codec switches used when a call passes none.

    Raises:
        MessageConfigurationError: No document type declared.
        NoDefaultConstructorError: Document type requires constructor arguments.
        DocumentNotCreatedError: Construction raised or returned no usable instance.
    """

    document_type: ClassVar[type[Any] | None] = None
    encoding: ClassVar[Encoding] = Encoding.JSON
    identifier: ClassVar[MessageIdentifier | None] = None

    # What DocT is bound to at this level of the hierarchy (a type or a TypeVar).
    _document_slot: ClassVar[Any] = DocT

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for base in cls.__dict__.get("__orig_bases__", ()):
            origin = get_origin(base)
            if not (isinstance(origin, type) and issubclass(origin, IsoMessage)):
                continue
            slot = origin._document_slot
            params = getattr(origin, "__parameters__", ())
            if isinstance(slot, TypeVar) and slot in params:
                slot = get_args(base)[params.index(slot)]
            cls._document_slot = slot
            if cls.__dict__.get("document_type") is None and isinstance(slot, type):
                cls.document_type = slot
            break

    def __init__(
        self,
        *,
        factory: Callable[[], DocT] | None = None,
        schemas: SchemaAggregator | None = None,
        use_validation: bool = True,
        options: CodecOptions | None = None,
    ) -> None:
        self._document: DocT | None = None
        self.schemas = schemas
        self.use_validation = use_validation
        self.options = options
        self._initialize(factory)

    def _initialize(self, factory: Callable[[], DocT] | None) -> None:
        doc_type = type(self).document_type
        if doc_type is None:
            raise MessageConfigurationError(
                type(self), f"{type(self).__name__} declares no document type"
            )
        if factory is None:
            if not has_zero_arg_constructor(doc_type):
                raise NoDefaultConstructorError(doc_type)
            factory = doc_type
        try:
            document = factory()
        except Exception as exc:
            raise DocumentNotCreatedError(doc_type) from exc
        self.document = document
        if self._document is None:
            raise DocumentNotCreatedError(doc_type)

    # ------------------------------------------------------------ properties

    @property
    def document(self) -> DocT | None:
        """Root document; assigning a value of any other exact type stores None."""
        return self._document

    @document.setter
    def document(self, value: Any) -> None:
        expected = type(self).document_type
        self._document = value if resolve_concrete_type(value) is expected else None

    @property
    def message(self) -> MsgT | None:
        """Embedded message extracted from the current document (never cached)."""
        if self._document is None:
            return None
        return self.extract_message(self._document)

    @abstractmethod
    def extract_message(self, document: DocT) -> MsgT:
        """Return the embedded message held by `document`."""

    @property
    def _validating(self) -> bool:
        return self.use_validation and self.schemas is not None

    # --------------------------------------------------------------- codec IO

    def serialize(
        self, encoding: Encoding | str | bool | None = None, options: CodecOptions | None = None
    ) -> str | None:
        """
        Serialize the current document.

        Returns:
            str | None: Encoded text; None when there is no document, encoding failed,
            or (XML with validation on) the aggregate rejected the output.
        """
        enc = encoding_from_value(self.encoding if encoding is None else encoding)
        text = codec.serialize(
            self._document, enc, options or self.options, as_type=type(self).document_type
        )
        if text is None or enc is not Encoding.XML or not self._validating:
            return text
        return text if self.schemas.validate(text, name=type(self).__name__) else None

    def deserialize(
        self,
        document: DocumentText | None,
        encoding: Encoding | str | bool | None = None,
        options: CodecOptions | None = None,
    ) -> bool:
        """
        Replace the root document with one decoded from `document`.

        Returns:
            bool: True if a document was decoded and installed; on False the previous
            document is kept.
        """
        enc = encoding_from_value(self.encoding if encoding is None else encoding)
        if enc is Encoding.XML and self._validating:
            if not self.schemas.validate(document, name=type(self).__name__):
                return False
        result = codec.deserialize(type(self).document_type, document, enc, options or self.options)
        if result is None:
            return False
        self.document = result
        return self._document is not None

    def validate(self, document: DocumentText | None = None) -> ValidationResult | None:
        """
        Validate `document`, or the current document's XML form, against the aggregate.

        Returns:
            ValidationResult | None: None when no aggregate is attached.
        """
        if self.schemas is None:
            return None
        if document is None:
            document = codec.serialize(
                self._document, Encoding.XML, options=self.options, as_type=type(self).document_type
            )
        return self.schemas.validate(document, name=type(self).__name__)
