"""
Core exception types raised for configuration mistakes and explicit validation checks.

Provides typed exceptions for the few failures allowed to propagate:
- MessageConfigurationError for wrappers bound to a document type that cannot be built.
- NoDefaultConstructorError when the document type needs constructor arguments.
- DocumentNotCreatedError when construction ran but produced nothing usable.
- SchemaValidationError for callers opting into fault-based validation.
- XmlBindingError when markup does not bind to the requested document type
  (raised inside the codec and collapsed there into a None result).

Notes:
    - Data-shaped failures (empty input, malformed text, type mismatch) never raise;
      codec and aggregator collapse them into None/False and log them.
    - This module uses only the Python standard library and has no side effects.

Examples:
    >>> from isoxchange.core.errors import NoDefaultConstructorError
    >>> class Needy:
    ...     def __init__(self, x): ...
    >>> err = NoDefaultConstructorError(Needy)
    >>> "Needy" in str(err)
    True
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

__all__ = [
    "MessageConfigurationError",
    "NoDefaultConstructorError",
    "DocumentNotCreatedError",
    "SchemaValidationError",
    "XmlBindingError",
]


class MessageConfigurationError(TypeError):
    """Message wrapper bound to a document type it cannot construct."""

    def __init__(self, document_type: Any, message: str) -> None:
        super().__init__(message)
        self.document_type = document_type


class NoDefaultConstructorError(MessageConfigurationError):
    """Document type exposes no zero-argument constructor."""

    def __init__(self, document_type: Any) -> None:
        name = getattr(document_type, "__name__", repr(document_type))
        super().__init__(document_type, f"{name} has no zero-argument constructor")


class DocumentNotCreatedError(MessageConfigurationError):
    """Document constructor (or factory) ran but yielded no instance."""

    def __init__(self, document_type: Any) -> None:
        name = getattr(document_type, "__name__", repr(document_type))
        super().__init__(document_type, f"unable to create a {name} document")


class SchemaValidationError(ValueError):
    """
    Document rejected by the schema aggregate.

    Attributes:
        events (tuple): ValidationEvent records of the rejected pass.
    """

    def __init__(self, events: Sequence[Any]) -> None:
        self.events = tuple(events)
        first = self.events[0].message if self.events else "document rejected"
        super().__init__(f"{len(self.events)} validation event(s): {first}")


class XmlBindingError(ValueError):
    """Markup root element does not belong to the requested document type."""
