"""
Diagnostic channel for faults the core catches instead of propagating.

The codec and the schema aggregator never let data-shaped failures escape; they
hand them to `report_fault` / `report_issue`, which write onto the stdlib
`logging` hierarchy. Applications route or silence these records by configuring
the `isoxchange` logger (see isoxchange.cli for the default formatter).
"""

from __future__ import annotations

import logging

from .constants import CONTEXT_PREVIEW_CHARS

__all__ = [
    "preview",
    "report_fault",
    "report_issue",
]


def preview(context: object, limit: int = CONTEXT_PREVIEW_CHARS) -> str:
    """Render a context value for logs, truncated to `limit` characters."""
    if isinstance(context, bytes):
        text = context.decode("utf-8", errors="replace")
    else:
        text = str(context)
    if len(text) > limit:
        return text[:limit] + f"... ({len(text) - limit} more chars)"
    return text


def report_fault(logger: logging.Logger, exc: BaseException, context: object = None) -> None:
    """
    Log a caught exception with optional context.

    Args:
        logger (logging.Logger): Module logger of the caller.
        exc (BaseException): Exception that was caught.
        context (object): Offending input or label (file name, payload); truncated.
    """
    if context is None:
        logger.warning("%s: %s", type(exc).__name__, exc, exc_info=exc)
    else:
        logger.warning(
            "%s: %s [context: %s]", type(exc).__name__, exc, preview(context), exc_info=exc
        )


def report_issue(logger: logging.Logger, message: str) -> None:
    """Log a recoverable input problem (nothing to serialize, empty payload, ...)."""
    logger.warning(message)
