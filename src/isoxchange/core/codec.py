"""
Generic serialize/deserialize engine for JSON and XML encoded documents.

Both directions funnel every fault into the same outcome: the fault is logged
through isoxchange.core.diagnostics and the call returns None. Callers use the
presence of a result, not exception handling, as the success signal; the message
wrappers in isoxchange.core.message rely on this when they call the codec under
ordinary property access.

Responsibilities
- JSON: compact output through a pydantic TypeAdapter (aliases, None omitted);
  tolerant input (unknown members ignored, null members treated as absent).
- XML: pydantic models bound through isoxchange.core.xmlbind; no declaration, no
  indentation, optional byte-order mark, namespace emitted only on request.
- Bytes input decoded with the fixed TEXT_ENCODING before the text path.

Examples:
    >>> from pydantic import BaseModel
    >>> class Hdr(BaseModel):
    ...     msg_id: str
    ...     nb_of_txs: int | None = None
    >>> serialize(Hdr(msg_id="M1"))
    '{"msg_id":"M1"}'
    >>> deserialize(Hdr, '{"msg_id":"M1","unknown":1,"nb_of_txs":null}')
    Hdr(msg_id='M1', nb_of_txs=None)
    >>> deserialize(Hdr, "   ") is None
    True
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, TypeAdapter

from .constants import BYTE_ORDER_MARK, TEXT_ENCODING
from .diagnostics import report_fault, report_issue
from .encoding import Encoding, encoding_from_value
from .serde import drop_nulls, json_loads
from .typing import DocumentText, T
from .xmlbind import element_to_model, model_to_element, parse_document, to_string

__all__ = [
    "CodecOptions",
    "DEFAULT_OPTIONS",
    "serialize",
    "deserialize",
    "deserialize_any",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodecOptions:
    """
    Encoding-specific switches.

    Attributes:
        bom (bool): [XML] prefix output with a byte-order mark.
        namespace (bool): [XML] emit the model's `xml_namespace` on write and require it
            on read; when False no namespace is written and any is accepted.
        exclude_none (bool): [JSON] omit members holding None.
    """

    bom: bool = False
    namespace: bool = False
    exclude_none: bool = True


DEFAULT_OPTIONS = CodecOptions()


@lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter[Any]:
    return TypeAdapter(tp)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", repr(tp))


def _require_model(tp: Any) -> type[BaseModel]:
    if not (isinstance(tp, type) and issubclass(tp, BaseModel)):
        raise TypeError(f"XML encoding requires a pydantic model type, got {_type_name(tp)}")
    return tp


def _namespace(tp: type[BaseModel], options: CodecOptions) -> str | None:
    return getattr(tp, "xml_namespace", None) if options.namespace else None


def serialize(
    value: Any,
    encoding: Encoding | str | bool = Encoding.JSON,
    options: CodecOptions | None = None,
    *,
    as_type: Any = None,
) -> str | None:
    """
    Serialize a value to JSON or XML text.

    Args:
        value (Any): Object to serialize (a pydantic model for XML).
        encoding (Encoding | str | bool): Target encoding (True/False = JSON/XML).
        options (CodecOptions | None): Encoding switches; defaults to DEFAULT_OPTIONS.
        as_type (Any): Declared type of `value` (named in diagnostics, drives JSON dumping).

    Returns:
        str | None: Encoded text, or None when there is nothing to serialize or
        encoding failed (both logged).
    """
    declared = as_type if as_type is not None else type(value)
    if value is None:
        report_issue(logger, f"no {_type_name(as_type) if as_type else 'data'} to serialize")
        return None

    opts = options or DEFAULT_OPTIONS
    try:
        if encoding_from_value(encoding) is Encoding.JSON:
            raw = _adapter(declared).dump_json(value, by_alias=True, exclude_none=opts.exclude_none)
            return raw.decode(TEXT_ENCODING)
        model_cls = _require_model(type(value))
        text = to_string(model_to_element(value, namespace=_namespace(model_cls, opts)))
        return BYTE_ORDER_MARK + text if opts.bom else text
    except Exception as exc:
        report_fault(logger, exc, _type_name(declared))
        return None


def _decode(data: bytes | bytearray, tp: Any) -> str | None:
    try:
        return bytes(data).decode(TEXT_ENCODING)
    except UnicodeDecodeError as exc:
        report_fault(logger, exc, f"bytes for {_type_name(tp)}")
        return None


def deserialize(
    cls: type[T],
    data: DocumentText | None,
    encoding: Encoding | str | bool = Encoding.JSON,
    options: CodecOptions | None = None,
) -> T | None:
    """
    Deserialize JSON or XML text into an instance of `cls`.

    Args:
        cls (type[T]): Requested type (a pydantic model for XML).
        data (str | bytes | None): Encoded document; bytes are decoded as UTF-8.
        encoding (Encoding | str | bool): Encoding of `data` (True/False = JSON/XML).
        options (CodecOptions | None): Encoding switches; defaults to DEFAULT_OPTIONS.

    Returns:
        T | None: The decoded instance, or None when the input is empty, malformed,
        or does not bind to `cls` (all logged). Empty input is never parsed.
    """
    if isinstance(data, (bytes, bytearray)):
        data = _decode(data, cls)
        if data is None:
            return None
    text = data.removeprefix(BYTE_ORDER_MARK) if data else ""
    if not text.strip():
        report_issue(logger, f"no data to deserialize into {_type_name(cls)}")
        return None

    opts = options or DEFAULT_OPTIONS
    try:
        if encoding_from_value(encoding) is Encoding.JSON:
            return _adapter(cls).validate_python(drop_nulls(json_loads(text)))
        model_cls = _require_model(cls)
        root = parse_document(text)
        return element_to_model(root, model_cls, namespace=_namespace(model_cls, opts))  # type: ignore[return-value]
    except Exception as exc:
        # a mismatch is expected when probing candidate types
        report_fault(logger, exc, text)
        return None


def deserialize_any(
    candidates: Iterable[type[Any]],
    data: DocumentText | None,
    encoding: Encoding | str | bool = Encoding.JSON,
    options: CodecOptions | None = None,
) -> Any | None:
    """
    Try each candidate type in order and return the first successful decode.

    Returns:
        Any | None: First non-None result, or None if no candidate binds.
    """
    for cls in candidates:
        result = deserialize(cls, data, encoding, options)
        if result is not None:
            return result
    return None
