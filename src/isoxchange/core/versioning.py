"""
ISO 20022 message identifiers and version helpers.

A message identifier names a message definition as
``<business area>.<functionality>.<variant>.<version>`` (e.g. ``pain.001.001.09``)
and maps to the XML namespace URN used by its schema
(``urn:iso:std:iso:20022:tech:xsd:pain.001.001.09``). This module is zero-IO.

Examples:
    >>> from isoxchange.core.versioning import MessageIdentifier, is_successor_of
    >>> ident = MessageIdentifier.parse("urn:iso:std:iso:20022:tech:xsd:pain.001.001.09")
    >>> str(ident)
    'pain.001.001.09'
    >>> is_successor_of(MessageIdentifier.parse("pain.001.001.10"), ident)
    True
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "URN_PREFIX",
    "MessageIdentifier",
    "is_compatible",
    "is_successor_of",
]

URN_PREFIX = "urn:iso:std:iso:20022:tech:xsd:"

_IDENTIFIER_RE = re.compile(
    r"^(?P<area>[a-z]{4})\.(?P<functionality>\d{3})\.(?P<variant>\d{3})\.(?P<version>\d{2})$"
)


@dataclass(frozen=True)
class MessageIdentifier:
    """
    Immutable ISO 20022 message definition identifier.

    Attributes:
        business_area (str): Four lowercase letters (e.g. "pain", "camt", "pacs").
        functionality (int): Message functionality number (0-999).
        variant (int): Variant number (0-999).
        version (int): Version number (0-99).

    Raises:
        ValueError: If a component is out of range or the area is malformed.
    """

    business_area: str
    functionality: int
    variant: int
    version: int

    def __post_init__(self) -> None:
        if not re.fullmatch(r"[a-z]{4}", self.business_area):
            raise ValueError(
                f"business_area must be four lowercase letters, got {self.business_area!r}"
            )
        for name, upper in (("functionality", 999), ("variant", 999), ("version", 99)):
            value = getattr(self, name)
            if not 0 <= value <= upper:
                raise ValueError(f"MessageIdentifier {name} must be in [0, {upper}], got {value}")

    @classmethod
    def parse(cls, value: str) -> MessageIdentifier:
        """
        Parse a dotted identifier or its namespace URN.

        Raises:
            ValueError: If `value` is not a message identifier.
        """
        text = value.strip().removeprefix(URN_PREFIX)
        match = _IDENTIFIER_RE.match(text)
        if match is None:
            raise ValueError(f"not an ISO 20022 message identifier: {value!r}")
        return cls(
            business_area=match["area"],
            functionality=int(match["functionality"]),
            variant=int(match["variant"]),
            version=int(match["version"]),
        )

    @property
    def urn(self) -> str:
        """XML namespace URN of the message schema."""
        return URN_PREFIX + str(self)

    def __str__(self) -> str:
        return (
            f"{self.business_area}.{self.functionality:03d}.{self.variant:03d}.{self.version:02d}"
        )


def is_compatible(a: MessageIdentifier, b: MessageIdentifier) -> bool:
    """True if both identify versions of the same message definition and variant."""
    return (a.business_area, a.functionality, a.variant) == (
        b.business_area,
        b.functionality,
        b.variant,
    )


def is_successor_of(candidate: MessageIdentifier, current: MessageIdentifier) -> bool:
    """
    Determine whether `candidate` is the next version of `current`.

    Examples:
        >>> cur = MessageIdentifier("camt", 53, 1, 8)
        >>> is_successor_of(MessageIdentifier("camt", 53, 1, 10), cur)
        False
    """
    return is_compatible(candidate, current) and candidate.version == current.version + 1
