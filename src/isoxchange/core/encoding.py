"""
Wire encodings understood by the codec.

An encoded document is never self-describing: callers always state which
encoding a blob is in, or is to be produced in. `encoding_from_value` accepts
the enum, its lower_snake value, or the legacy boolean "use JSON" flag.

Examples:
    >>> from isoxchange.core.encoding import Encoding, encoding_from_value
    >>> encoding_from_value("XML") is Encoding.XML
    True
    >>> encoding_from_value(True) is Encoding.JSON
    True
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "Encoding",
    "encoding_from_value",
]


class Encoding(str, Enum):
    """Wire encoding: JSON object notation or XML markup."""

    JSON = "json"
    XML = "xml"


def encoding_from_value(value: Encoding | str | bool) -> Encoding:
    """
    Normalize an encoding designator.

    Args:
        value (Encoding | str | bool): Enum member, case-insensitive value, or a
            boolean where True selects JSON and False selects XML.

    Returns:
        Encoding: The matching member.

    Raises:
        ValueError: If the string is not a known encoding.
    """
    if isinstance(value, Encoding):
        return value
    if isinstance(value, bool):
        return Encoding.JSON if value else Encoding.XML
    try:
        return Encoding(str(value).strip().lower())
    except ValueError as exc:
        raise ValueError(f"unknown encoding {value!r}; expected 'json' or 'xml'") from exc
