"""
Lightweight typing aliases used across the codec, aggregator, and wrappers.

This module contains no runtime logic and is zero-IO.

Examples:
    >>> from isoxchange.core.typing import DocumentText
    >>> def size(doc: DocumentText) -> int:
    ...     return len(doc)
    >>> size(b"<a/>")
    4
"""

from __future__ import annotations

import os
from typing import IO, TypeVar, Union

__all__ = [
    "DocumentText",
    "SchemaSource",
    "T",
]

# Encoded document as handed to the codec or the aggregator.
DocumentText = Union[str, bytes]

# Anything a schema definition can be read from: path, raw text/bytes, or a readable stream.
SchemaSource = Union[str, bytes, "os.PathLike[str]", IO[str], IO[bytes]]

T = TypeVar("T")
