"""Protocol definitions for core abstractions.

Consumers (the CLI, embedding applications, tests) depend on the FileSystem
protocol rather than on AsyncFileSystem, so a test double can be injected
without inheritance. All implementations satisfy it structurally.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from iofs.types import AccessMode, OperationOutcome, PathHandle, StatResult


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for asynchronous, failure-masking filesystem operations.

    No method raises on an OS-level failure. Mutating methods return an
    OperationOutcome; probes return False or an ABSENT StatResult; reads
    return None.
    """

    async def stat(self, path: PathHandle) -> StatResult:
        """Probe a path, following symlinks.

        Args:
            path: Path to probe.

        Returns:
            StatResult, ABSENT if the path cannot be probed.
        """
        ...

    async def lstat(self, path: PathHandle) -> StatResult:
        """Probe a path without following symlinks."""
        ...

    async def isdir(self, path: PathHandle) -> bool:
        """Check if a path is a directory."""
        ...

    async def isfile(self, path: PathHandle) -> bool:
        """Check if a path is a regular file."""
        ...

    async def exists(self, path: PathHandle) -> bool:
        """Check if a path exists."""
        ...

    async def is_(self, path: PathHandle, mode: AccessMode | int) -> bool:
        """Check if the current process has the given access to a path.

        Args:
            path: Path to check.
            mode: Access bits to test.

        Returns:
            True if access is granted, False otherwise or on any error.
        """
        ...

    async def ls(self, directory: PathHandle, recursive: bool = False) -> list[str] | None:
        """List a directory as absolute paths.

        Args:
            directory: Directory to list.
            recursive: Also list every subdirectory.

        Returns:
            Child paths, or None if the directory could not be read.
        """
        ...

    async def mkdir(self, path: PathHandle, mode: int | None = None) -> OperationOutcome:
        """Create a directory and any missing ancestors."""
        ...

    async def cat(self, file: PathHandle, encoding: str | None = None) -> bytes | str | None:
        """Read a whole file.

        Args:
            file: File to read.
            encoding: Decode the content with this encoding.

        Returns:
            File content, or None on failure.
        """
        ...

    async def echo(
        self,
        data: Any,
        file: PathHandle | None = None,
        append: bool | str = False,
        encoding: str | None = None,
    ) -> Any:
        """Write data to a file, creating its parent directories.

        Args:
            data: Bytes, text or a value written as text.
            file: Target file. When omitted, data is returned unchanged.
            append: Append instead of truncating, or an encoding name.
            encoding: Text encoding for str data.

        Returns:
            OperationOutcome, or data itself when no file is given.
        """
        ...

    async def cp(self, origin: PathHandle, target: PathHandle) -> OperationOutcome:
        """Copy a file or directory tree."""
        ...

    async def mv(self, origin: PathHandle, target: PathHandle) -> OperationOutcome:
        """Move or rename a file or directory tree."""
        ...

    async def rm(self, origin: PathHandle) -> OperationOutcome:
        """Delete a file or directory tree."""
        ...

    async def chmod(self, path: PathHandle, mode: int) -> OperationOutcome:
        """Change permission bits."""
        ...

    async def chown(self, path: PathHandle, uid: int, gid: int) -> OperationOutcome:
        """Change owner and group."""
        ...
