"""Shared data types for iofs."""

from __future__ import annotations

import os
import stat as stat_module
from dataclasses import dataclass, field
from enum import Enum, IntFlag

from iofs.errors import ErrorKind, classify_error

__all__ = [
    "AccessMode",
    "OperationOutcome",
    "PathHandle",
    "StatKind",
    "StatResult",
    "WriteOptions",
]

PathHandle = str | os.PathLike[str]


class StatKind(str, Enum):
    """Mutually exclusive path types, including a path that does not exist."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    SOCKET = "socket"
    OTHER = "other"
    ABSENT = "absent"


class AccessMode(IntFlag):
    """Permission bits accepted by ``is_``."""

    EXISTS = os.F_OK
    READ = os.R_OK
    WRITE = os.W_OK
    EXECUTE = os.X_OK


def _kind_from_mode(mode: int) -> StatKind:
    if stat_module.S_ISREG(mode):
        return StatKind.FILE
    if stat_module.S_ISDIR(mode):
        return StatKind.DIRECTORY
    if stat_module.S_ISLNK(mode):
        return StatKind.SYMLINK
    if stat_module.S_ISSOCK(mode):
        return StatKind.SOCKET
    return StatKind.OTHER


@dataclass(frozen=True)
class StatResult:
    """Type and metadata of a path at the time it was probed.

    Attributes:
        path: The probed path, as given.
        kind: Which variant the path is. ABSENT when the probe failed.
        size: Size in bytes (0 when absent).
        mode: Raw st_mode bits (0 when absent).
        mtime: Modification time in seconds since the epoch (0.0 when absent).
        uid: Owner user id (-1 when absent).
        gid: Owner group id (-1 when absent).
    """

    path: str
    kind: StatKind
    size: int = 0
    mode: int = 0
    mtime: float = 0.0
    uid: int = -1
    gid: int = -1

    @classmethod
    def absent(cls, path: PathHandle) -> StatResult:
        """Build the neutral result for a path that could not be probed."""
        return cls(path=os.fspath(path), kind=StatKind.ABSENT)

    @classmethod
    def from_os(cls, path: PathHandle, st: os.stat_result) -> StatResult:
        """Build a result from a raw ``os.stat_result``."""
        return cls(
            path=os.fspath(path),
            kind=_kind_from_mode(st.st_mode),
            size=st.st_size,
            mode=st.st_mode,
            mtime=st.st_mtime,
            uid=st.st_uid,
            gid=st.st_gid,
        )

    @property
    def exists(self) -> bool:
        return self.kind is not StatKind.ABSENT

    @property
    def permissions(self) -> int:
        """Permission bits only, e.g. ``0o644``."""
        return stat_module.S_IMODE(self.mode)

    def is_file(self) -> bool:
        return self.kind is StatKind.FILE

    def is_dir(self) -> bool:
        return self.kind is StatKind.DIRECTORY

    def is_symlink(self) -> bool:
        return self.kind is StatKind.SYMLINK

    def is_socket(self) -> bool:
        return self.kind is StatKind.SOCKET


@dataclass
class OperationOutcome:
    """Result of a mutating operation.

    Outcomes are truthy when the operation succeeded, so callers can write
    ``if await fs.cp(a, b):``.

    Attributes:
        success: True if the operation succeeded.
        path: The path the operation acted on (the target for cp/mv).
        error: Error message (None on success).
        error_kind: Classified cause of the failure (None on success).
        failures: Per-entry failures of a recursive operation whose
            traversal still completed.
    """

    success: bool
    path: str
    error: str | None = None
    error_kind: ErrorKind | None = None
    failures: list[OperationOutcome] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.success and (self.error is not None or self.error_kind is not None):
            raise ValueError("success=True but error is set")
        if not self.success and (self.error is None or self.error_kind is None):
            raise ValueError("success=False requires error message and kind")
        if not self.path:
            raise ValueError("path cannot be empty")

    def __bool__(self) -> bool:
        return self.success

    @property
    def complete(self) -> bool:
        """True if the operation and every entry it touched succeeded."""
        return self.success and not self.failures

    @classmethod
    def ok(
        cls, path: PathHandle, failures: list[OperationOutcome] | None = None
    ) -> OperationOutcome:
        """Build a successful outcome."""
        return cls(success=True, path=os.fspath(path), failures=failures or [])

    @classmethod
    def failed(cls, path: PathHandle, exc: BaseException) -> OperationOutcome:
        """Build a failed outcome from the exception that caused it."""
        return cls(
            success=False,
            path=os.fspath(path) or "<empty>",
            error=str(exc) or exc.__class__.__name__,
            error_kind=classify_error(exc),
        )


@dataclass(frozen=True)
class WriteOptions:
    """How ``echo`` writes its data.

    Attributes:
        append: Append to the file instead of truncating it.
        encoding: Text encoding for ``str`` data. None means UTF-8 for text
            and a raw write for bytes.
    """

    append: bool = False
    encoding: str | None = None

    @classmethod
    def resolve(cls, append: bool | str | None = False, encoding: str | None = None) -> WriteOptions:
        """Resolve the overloaded ``append`` argument of ``echo``.

        A non-empty string in the ``append`` position is the encoding, and
        append mode is off. Anything else is taken for its truthiness.

        Example:
            >>> WriteOptions.resolve("latin-1")
            WriteOptions(append=False, encoding='latin-1')
            >>> WriteOptions.resolve(True, "utf-8")
            WriteOptions(append=True, encoding='utf-8')
        """
        if isinstance(append, str) and append:
            return cls(append=False, encoding=append)
        if isinstance(append, str):
            append = False
        return cls(append=bool(append), encoding=encoding)
