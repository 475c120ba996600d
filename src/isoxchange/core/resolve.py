"""
Concrete runtime type discovery for values held behind loosely typed slots.

Generic consumers sometimes receive a value through an `Any`/`object` slot (a
wrapper's document handle, a proxy handed out by a registry) and need its exact
type to route further processing, e.g. to pick the deserializer that applies.

Examples:
    >>> resolve_concrete_type(None) is None
    True
    >>> resolve_concrete_type(3) is int
    True
"""

from __future__ import annotations

import weakref
from typing import Any

__all__ = ["resolve_concrete_type"]

_PROXY_TYPES = tuple(weakref.ProxyTypes)


def resolve_concrete_type(value: Any) -> type | None:
    """
    Return the concrete runtime type of `value`.

    When the reported type is the bare `object` placeholder or a weak-reference
    proxy, the value itself is asked (`value.__class__`), which yields the
    referent's class for proxies.

    Args:
        value (Any): Value to inspect.

    Returns:
        type | None: The concrete type, or None if `value` is None.
    """
    if value is None:
        return None
    kind = type(value)
    if kind is object or kind in _PROXY_TYPES:
        kind = value.__class__
    return kind
