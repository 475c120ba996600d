"""
isoxchange — exchange ISO 20022-style business documents as JSON or XML.

Layers
- isoxchange.core: codec, XML binding, schema aggregation, message wrappers (zero-IO).
- isoxchange.io: settings, schema source discovery, validation reports.
- isoxchange.cli: `isoxchange` command line.
"""

from __future__ import annotations

import logging

from .core import (
    CodecOptions,
    Encoding,
    IsoMessage,
    MessageModel,
    SchemaAggregator,
    ValidationPolicy,
    deserialize,
    serialize,
)

__version__ = "0.1.0"

# library default: stay silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "CodecOptions",
    "Encoding",
    "IsoMessage",
    "MessageModel",
    "SchemaAggregator",
    "ValidationPolicy",
    "deserialize",
    "serialize",
]
