"""
Lightweight JSON serialization/deserialization utilities.

Provides the JSON input policy used by the codec: null members are dropped on
input so that "absent" and "null" both leave a model field at its default. This module is zero-IO.

Notes:
    - Model-aware dumping lives in isoxchange.core.codec (pydantic TypeAdapter);
      these helpers cover plain Python payloads.
"""

from __future__ import annotations

import json
from typing import Any

__all__ = [
    "json_loads",
    "drop_nulls",
]


def json_loads(s: str) -> Any:
    """
    Deserialize a JSON string to Python objects using the stdlib json module.

    Args:
        s (str): JSON string to parse.

    Returns:
        Any: Decoded Python object (dict, list, str, int, float, bool, or None).
    """
    return json.loads(s)


def drop_nulls(obj: Any) -> Any:
    """
    Recursively remove mapping members whose value is None.

    List items are kept in place (a null list item is data, not an absent member).

    Examples:
        >>> drop_nulls({"a": None, "b": {"c": None, "d": 1}, "e": [None, {"f": None}]})
        {'b': {'d': 1}, 'e': [None, {}]}
    """
    if isinstance(obj, dict):
        return {k: drop_nulls(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [drop_nulls(v) for v in obj]
    return obj
