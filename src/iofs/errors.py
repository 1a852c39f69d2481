"""Error taxonomy and classification of OS-level failures.

Operations never raise these to their callers. The taxonomy exists so that
a masked failure can still say *why* it failed, through the ``error_kind``
of an ``OperationOutcome``.
"""

from __future__ import annotations

import errno
from enum import Enum

__all__ = ["ConfigurationError", "ErrorKind", "IofsError", "classify_error"]


class IofsError(Exception):
    """Base error for iofs."""

    pass


class ConfigurationError(IofsError):
    """Invalid settings or an unusable path argument."""

    pass


class ErrorKind(str, Enum):
    """Why a masked operation failed."""

    ABSENT = "absent"
    PERMISSION_DENIED = "permission_denied"
    CROSS_DEVICE = "cross_device"
    IO_FAILURE = "io_failure"
    CONFIGURATION = "configuration"


_ABSENT_ERRNOS = frozenset({errno.ENOENT, errno.ENOTDIR, errno.ELOOP, errno.ENAMETOOLONG})
_PERMISSION_ERRNOS = frozenset({errno.EACCES, errno.EPERM, errno.EROFS})


def classify_error(exc: BaseException) -> ErrorKind:
    """Map an exception to its ErrorKind.

    Args:
        exc: The exception caught at an operation boundary.

    Returns:
        The matching ErrorKind. Unknown failures are IO_FAILURE.
    """
    if isinstance(exc, (ConfigurationError, LookupError, TypeError)):
        return ErrorKind.CONFIGURATION
    if isinstance(exc, OSError):
        if exc.errno == errno.EXDEV:
            return ErrorKind.CROSS_DEVICE
        if exc.errno in _ABSENT_ERRNOS:
            return ErrorKind.ABSENT
        if exc.errno in _PERMISSION_ERRNOS:
            return ErrorKind.PERMISSION_DENIED
    return ErrorKind.IO_FAILURE
