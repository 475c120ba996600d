"""
isoxchange core wire-level defaults.

Defines the fixed text encoding, byte-order mark, and schema discovery defaults
consumed by the codec, the schema aggregator, and downstream IO layers. This
module is zero-IO and uses only the Python standard library.

Notes:
    - Byte payloads are always decoded with TEXT_ENCODING before parsing.
    - XSD namespace and element name are used to recognize schema definitions.
"""

from __future__ import annotations

__all__ = [
    "TEXT_ENCODING",
    "BYTE_ORDER_MARK",
    "XSD_NAMESPACE",
    "XSD_SCHEMA_TAG",
    "SCHEMA_PATTERN",
    "CONTEXT_PREVIEW_CHARS",
]

# Fixed character encoding used by the bytes adapter of the codec.
TEXT_ENCODING: str = "utf-8"

# Unicode byte-order mark optionally prefixed to XML output.
BYTE_ORDER_MARK: str = "\ufeff"

XSD_NAMESPACE: str = "http://www.w3.org/2001/XMLSchema"
XSD_SCHEMA_TAG: str = f"{{{XSD_NAMESPACE}}}schema"

# Default glob used when loading schema definitions from a folder.
SCHEMA_PATTERN: str = "*.xsd"

# Max characters of a payload echoed into diagnostics.
CONTEXT_PREVIEW_CHARS: int = 256
