"""
XML markup binding between pydantic models and lxml element trees.

Maps a document model onto elements the way ISO 20022 documents are laid out:
one element per field (named by the field alias, else the field name), list
fields repeated in place without a wrapper element, nested models as child
elements, and selected scalar fields carried as attributes or element text.

Responsibilities
- Convert a model instance into an `lxml.etree` element (optionally namespaced).
- Convert an element back into a validated model instance, matching child
  elements by local name so namespaced and namespace-free inputs both bind.
- Provide the hardened parser shared by the codec and the schema aggregator.

Field markers
- `xml_attribute(...)`: scalar carried as an unqualified attribute.
- `xml_text(...)`: scalar carried as the element's text content.
- anything else: child element(s).

Notes:
    - None-valued fields are omitted; unknown child elements are ignored on read.
    - Scalars are written with `str()` except bool ("true"/"false"), Enum (its value),
      date/time (ISO 8601) and Decimal (fixed-point); reads hand raw text to pydantic.

Examples:
    >>> from pydantic import BaseModel
    >>> from decimal import Decimal
    >>> class Amt(BaseModel):
    ...     ccy: str = xml_attribute(alias="Ccy")
    ...     value: Decimal = xml_text()
    >>> class Pmt(BaseModel):
    ...     amt: Amt = Field(alias="InstdAmt")
    >>> to_string(model_to_element(Pmt(InstdAmt=Amt(Ccy="EUR", value=Decimal("1.50")))))
    '<Pmt><InstdAmt Ccy="EUR">1.50</InstdAmt></Pmt>'
"""

from __future__ import annotations

import types
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Union, get_args, get_origin

from lxml import etree
from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo

from .constants import BYTE_ORDER_MARK, TEXT_ENCODING
from .errors import XmlBindingError

__all__ = [
    "ATTRIBUTE",
    "TEXT",
    "ELEMENT",
    "xml_attribute",
    "xml_text",
    "element_name",
    "make_parser",
    "parse_document",
    "to_string",
    "model_to_element",
    "element_to_model",
]

ATTRIBUTE = "attribute"
TEXT = "text"
ELEMENT = "element"

_XML_KEY = "xml"
_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)


def xml_attribute(default: Any = ..., **kwargs: Any) -> Any:
    """Declare a model field serialized as an XML attribute (pydantic `Field` kwargs accepted)."""
    return Field(default, json_schema_extra={_XML_KEY: ATTRIBUTE}, **kwargs)


def xml_text(default: Any = ..., **kwargs: Any) -> Any:
    """Declare a model field serialized as the element's text content."""
    return Field(default, json_schema_extra={_XML_KEY: TEXT}, **kwargs)


def element_name(model_cls: type[BaseModel]) -> str:
    """Element name bound to a model class: its `xml_tag` class attribute, else the class name."""
    return getattr(model_cls, "xml_tag", None) or model_cls.__name__


def _field_kind(info: FieldInfo) -> str:
    extra = info.json_schema_extra
    if isinstance(extra, dict) and extra.get(_XML_KEY) in (ATTRIBUTE, TEXT):
        return str(extra[_XML_KEY])
    return ELEMENT


def _field_key(name: str, info: FieldInfo) -> str:
    return info.alias or name


def _is_model(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel)


def _unwrap(annotation: Any) -> tuple[Any, bool]:
    """
    Reduce a field annotation to (item type, is_sequence).

    Strips Annotated and Optional layers and one level of list/tuple/set.
    Genuine unions (more than one non-None member) are returned unchanged.
    """
    tp = annotation
    is_list = False
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            tp = get_args(tp)[0]
            continue
        if origin is Union or origin is types.UnionType:
            members = [a for a in get_args(tp) if a is not type(None)]
            if len(members) != 1:
                return tp, is_list
            tp = members[0]
            continue
        if origin in _SEQUENCE_ORIGINS and not is_list:
            args = get_args(tp)
            tp = args[0] if args else Any
            is_list = True
            continue
        return tp, is_list


def _format_scalar(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _qname(local: str, namespace: str | None) -> str:
    return f"{{{namespace}}}{local}" if namespace else local


def make_parser() -> etree.XMLParser:
    """
    Build the hardened parser used for inbound documents.

    Comments, processing instructions and blank text are dropped; no network
    access and no entity expansion. A fresh parser per call (lxml parsers are not
    shareable across threads).
    """
    return etree.XMLParser(
        remove_comments=True,
        remove_pis=True,
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
    )


def parse_document(text: str | bytes) -> etree._Element:
    """
    Parse markup text into its root element.

    Args:
        text (str | bytes): Document text; a leading byte-order mark is tolerated.

    Returns:
        lxml.etree._Element: Root element.

    Raises:
        lxml.etree.XMLSyntaxError: If the text is not well-formed.
    """
    if isinstance(text, str):
        text = text.removeprefix(BYTE_ORDER_MARK).encode(TEXT_ENCODING)
    return etree.fromstring(text, make_parser())


def to_string(element: etree._Element) -> str:
    """Compact serialization: no declaration, no indentation."""
    return etree.tostring(element, encoding="unicode")


def model_to_element(
    model: BaseModel, *, namespace: str | None = None, tag: str | None = None
) -> etree._Element:
    """
    Build the element tree for a model instance.

    Args:
        model (BaseModel): Root model to serialize.
        namespace (str | None): Default namespace applied to every element; None emits none.
        tag (str | None): Override for the root element name.

    Returns:
        lxml.etree._Element: Root element.
    """
    name = tag or element_name(type(model))
    nsmap = {None: namespace} if namespace else None
    root = etree.Element(_qname(name, namespace), nsmap=nsmap)
    _fill(root, model, namespace)
    return root


def _fill(element: etree._Element, model: BaseModel, namespace: str | None) -> None:
    for name, info in type(model).model_fields.items():
        value = getattr(model, name)
        if value is None:
            continue
        key = _field_key(name, info)
        kind = _field_kind(info)
        if kind == ATTRIBUTE:
            element.set(key, _format_scalar(value))
            continue
        if kind == TEXT:
            element.text = _format_scalar(value)
            continue
        items = value if isinstance(value, _SEQUENCE_ORIGINS) else (value,)
        for item in items:
            if item is None:
                continue
            child = etree.SubElement(element, _qname(key, namespace))
            if isinstance(item, BaseModel):
                _fill(child, item, namespace)
            else:
                child.text = _format_scalar(item)


def element_to_model(
    element: etree._Element, model_cls: type[BaseModel], *, namespace: str | None = None
) -> BaseModel:
    """
    Bind a parsed element tree to a model class.

    Args:
        element (lxml.etree._Element): Root element.
        model_cls (type[BaseModel]): Requested model type.
        namespace (str | None): When given, the root element must live in this namespace.

    Returns:
        BaseModel: Validated instance.

    Raises:
        XmlBindingError: If the root element does not belong to `model_cls`.
        pydantic.ValidationError: If element content does not satisfy the model.
    """
    qname = etree.QName(element)
    expected = element_name(model_cls)
    if qname.localname != expected:
        raise XmlBindingError(
            f"root element <{qname.localname}> does not bind to {model_cls.__name__} (<{expected}>)"
        )
    if namespace is not None and qname.namespace != namespace:
        raise XmlBindingError(
            f"root element namespace {qname.namespace!r} does not match {namespace!r}"
        )
    return model_cls.model_validate(_element_data(element, model_cls))


def _element_data(element: etree._Element, model_cls: type[BaseModel]) -> dict[str, Any]:
    children: dict[str, list[etree._Element]] = {}
    for child in element:
        # comments/PIs carry a non-string tag
        if isinstance(child.tag, str):
            children.setdefault(etree.QName(child).localname, []).append(child)

    data: dict[str, Any] = {}
    for name, info in model_cls.model_fields.items():
        key = _field_key(name, info)
        kind = _field_kind(info)
        if kind == ATTRIBUTE:
            raw = element.get(key)
            if raw is not None:
                data[key] = raw
            continue
        if kind == TEXT:
            if element.text is not None:
                data[key] = element.text
            continue
        matches = children.get(key)
        if not matches:
            continue
        item_type, is_list = _unwrap(info.annotation)
        values = [_element_value(m, item_type) for m in matches]
        data[key] = values if is_list else values[0]
    return data


def _element_value(element: etree._Element, item_type: Any) -> Any:
    if _is_model(item_type):
        return _element_data(element, item_type)
    return element.text if element.text is not None else ""
