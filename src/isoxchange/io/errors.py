"""
Custom exceptions for the isoxchange.io module.

Purpose
- Provide IO-layer error types distinct from isoxchange.core.errors.
  - IoConfigError: invalid or unusable configuration (e.g. schema_dir is not a folder).
  - IoWriteError: atomic report write failed (tmp write/fsync/rename).

Notes
- Loading schema sources never raises; loaders return False and log instead.
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations

__all__ = [
    "IoError",
    "IoConfigError",
    "IoWriteError",
]


class IoError(Exception):
    """
    Base class for IO-related errors in isoxchange.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from core errors.
    """


class IoConfigError(IoError):
    """
    Raised when settings point at something unusable.

    Examples:
        - schema_dir set to a path that is not a directory
    """


class IoWriteError(IoError):
    """
    Raised when a report write fails to complete atomically.

    Notes:
        The write path is tmp parquet → fsync → os.replace(tmp, final). Failures at any step
        surface as IoWriteError (with best-effort cleanup of the tmp file).
    """
