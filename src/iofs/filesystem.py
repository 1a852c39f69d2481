"""Asynchronous, failure-masking filesystem operations.

Every blocking OS call runs in a worker thread through ``asyncio.to_thread``
so the event loop is never blocked for the duration of an I/O call.
Recursive operations visit entries one at a time.

No operation raises on an OS-level failure. Failures come back as values
(an unsuccessful OperationOutcome, None, False or an ABSENT StatResult) and
the cause is logged.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Any

from iofs.config import Settings
from iofs.errors import ConfigurationError, ErrorKind, classify_error
from iofs.types import AccessMode, OperationOutcome, PathHandle, StatResult, WriteOptions

logger = logging.getLogger(__name__)

# Errors masked at every operation boundary. ValueError covers paths with an
# embedded NUL and UnicodeError; LookupError covers unknown encodings;
# TypeError covers a mode or id of the wrong type.
_MASKED = (OSError, ValueError, LookupError, TypeError, ConfigurationError)


def _to_bytes(data: Any, encoding: str | None) -> bytes:
    """Convert echo's data to the bytes that land on disk."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if not isinstance(data, str):
        data = str(data)
    return data.encode(encoding or "utf-8")


def _write_bytes(path: PathHandle, payload: bytes, append: bool) -> None:
    with open(path, "ab" if append else "wb") as fh:
        fh.write(payload)


def _is_within(path: PathHandle, root: PathHandle) -> bool:
    """Check if path is root itself or lies below it, after resolving links."""
    try:
        resolved = Path(path).resolve()
        base = Path(root).resolve()
    except (OSError, ValueError, RuntimeError):
        return False
    return resolved == base or base in resolved.parents


def _same_file(origin: PathHandle, target: PathHandle) -> bool:
    """Check if both paths name the same existing file."""
    try:
        return os.path.samefile(origin, target)
    except (OSError, ValueError):
        return False


class AsyncFileSystem:
    """Production filesystem implementation.

    Satisfies the FileSystem protocol structurally. Holds no state between
    calls except its Settings; the filesystem is the only source of truth.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the filesystem.

        Args:
            settings: Operation settings. Defaults to built-in defaults.

        Note:
            Prefer using factory methods `create()` or `create_default()` for construction.
        """
        self.settings = settings or Settings()

    @classmethod
    def create(cls, settings: Settings) -> AsyncFileSystem:
        """Create a filesystem with explicit settings."""
        return cls(settings=settings)

    @classmethod
    def create_default(cls) -> AsyncFileSystem:
        """Create a filesystem configured from IOFS_* environment variables.

        Raises:
            ConfigurationError: If the environment holds invalid settings.
        """
        return cls(settings=Settings.from_env())

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    async def stat(self, path: PathHandle) -> StatResult:
        try:
            st = await asyncio.to_thread(os.stat, path)
        except (OSError, ValueError) as e:
            logger.debug("stat found nothing at %s: %s", path, e)
            return StatResult.absent(path)
        return StatResult.from_os(path, st)

    async def lstat(self, path: PathHandle) -> StatResult:
        try:
            st = await asyncio.to_thread(os.lstat, path)
        except (OSError, ValueError) as e:
            logger.debug("lstat found nothing at %s: %s", path, e)
            return StatResult.absent(path)
        return StatResult.from_os(path, st)

    async def isdir(self, path: PathHandle) -> bool:
        return (await self.stat(path)).is_dir()

    async def isfile(self, path: PathHandle) -> bool:
        return (await self.stat(path)).is_file()

    async def exists(self, path: PathHandle) -> bool:
        return await self.is_(path, AccessMode.EXISTS)

    async def is_(self, path: PathHandle, mode: AccessMode | int) -> bool:
        try:
            return await asyncio.to_thread(os.access, path, int(mode))
        except (OSError, ValueError, TypeError) as e:
            logger.debug("access check failed for %s: %s", path, e)
            return False

    # ------------------------------------------------------------------
    # Listing and directory creation
    # ------------------------------------------------------------------

    async def ls(self, directory: PathHandle, recursive: bool = False) -> list[str] | None:
        """List a directory as absolute paths, sorted by name.

        In recursive mode the immediate children come first, followed by the
        listing of each child directory in turn. An unreadable subdirectory
        is skipped. Symlink cycles are not detected.

        Args:
            directory: Directory to list.
            recursive: Also list every subdirectory.

        Returns:
            Child paths, or None if ``directory`` could not be read.
        """
        try:
            names = await asyncio.to_thread(os.listdir, directory)
        except (OSError, ValueError) as e:
            logger.error("Cannot list %s: %s", directory, e)
            return None

        base = os.path.abspath(directory)
        entries = [os.path.join(base, name) for name in sorted(names)]
        if not recursive:
            return entries

        result = list(entries)
        for entry in entries:
            if not await self.isdir(entry):
                continue
            nested = await self.ls(entry, recursive=True)
            if nested is None:
                logger.warning("Skipping unreadable directory %s", entry)
                continue
            result.extend(nested)
        return result

    async def mkdir(self, path: PathHandle, mode: int | None = None) -> OperationOutcome:
        """Create a directory with all missing ancestors.

        Succeeds if the directory already exists.

        Args:
            path: Directory to create.
            mode: Permission bits. Defaults to ``settings.dir_mode``.
        """
        if mode is None:
            mode = self.settings.dir_mode
        try:
            if not os.fspath(path):
                raise ConfigurationError("mkdir needs a non-empty path")
            await asyncio.to_thread(os.makedirs, path, mode, True)
        except _MASKED as e:
            logger.error("Cannot create directory %s: %s", path, e)
            return OperationOutcome.failed(path, e)
        return OperationOutcome.ok(path)

    async def _ensure_parent(self, target: PathHandle) -> OperationOutcome:
        """Create the parent directory of target if it is missing."""
        if not os.fspath(target):
            error = ConfigurationError("target path cannot be empty")
            logger.error("Cannot write to an empty path: %s", error)
            return OperationOutcome.failed(target, error)
        parent = os.path.dirname(os.fspath(target))
        # A bare file name lives in the working directory.
        if not parent or await self.isdir(parent):
            return OperationOutcome.ok(target)
        return await self.mkdir(parent)

    # ------------------------------------------------------------------
    # Read and write
    # ------------------------------------------------------------------

    async def cat(self, file: PathHandle, encoding: str | None = None) -> bytes | str | None:
        """Read a whole file into memory.

        Args:
            file: File to read.
            encoding: Decode the content with this encoding.

        Returns:
            Bytes, or str when ``encoding`` is given. None on failure.
        """
        try:
            content = await asyncio.to_thread(Path(file).read_bytes)
            if encoding:
                return content.decode(encoding)
            return content
        except _MASKED as e:
            logger.error("Cannot read %s: %s", file, e)
            return None

    async def echo(
        self,
        data: Any,
        file: PathHandle | None = None,
        append: bool | str = False,
        encoding: str | None = None,
    ) -> Any:
        """Write data to a file, creating its parent directories.

        With no ``file`` the data is returned unchanged and nothing is
        written. A string passed as ``append`` is taken as the encoding.

        Args:
            data: Bytes are written raw; str is encoded; any other value is
                written as ``str(data)``.
            file: Target file.
            append: Append instead of truncating, or an encoding name.
            encoding: Text encoding for str data (UTF-8 when omitted).

        Returns:
            OperationOutcome, or ``data`` when no file is given.
        """
        if not file:
            return data

        options = WriteOptions.resolve(append, encoding)
        parent = await self._ensure_parent(file)
        if not parent:
            return parent

        try:
            payload = _to_bytes(data, options.encoding)
            await asyncio.to_thread(_write_bytes, file, payload, options.append)
        except _MASKED as e:
            logger.error("Cannot write %s: %s", file, e)
            return OperationOutcome.failed(file, e)
        return OperationOutcome.ok(file)

    # ------------------------------------------------------------------
    # Copy, move, delete
    # ------------------------------------------------------------------

    async def cp(self, origin: PathHandle, target: PathHandle) -> OperationOutcome:
        """Copy a file or a directory tree.

        A directory is copied entry by entry. A failed entry is logged and
        recorded in the outcome's ``failures`` while its siblings are still
        copied; the outcome is successful once the traversal completes.
        Partially copied trees are not rolled back.

        Args:
            origin: File or directory to copy.
            target: Destination path. Missing parents are created.
        """
        if await self.isdir(origin):
            return await self._copy_tree(origin, target)
        return await self._copy_file(origin, target)

    async def _copy_tree(self, origin: PathHandle, target: PathHandle) -> OperationOutcome:
        if _is_within(target, origin):
            error = ConfigurationError(f"cannot copy {origin} into itself")
            logger.error("Cannot copy %s to %s: %s", origin, target, error)
            return OperationOutcome.failed(target, error)

        created = await self.mkdir(target)
        if not created:
            return created

        children = await self.ls(origin)
        if children is None:
            return OperationOutcome(
                success=False,
                path=os.fspath(target),
                error=f"cannot list {os.fspath(origin)}",
                error_kind=ErrorKind.IO_FAILURE,
            )

        failures: list[OperationOutcome] = []
        for child in children:
            outcome = await self.cp(child, os.path.join(target, os.path.basename(child)))
            if outcome:
                failures.extend(outcome.failures)
            else:
                logger.warning("Skipped %s: %s", child, outcome.error)
                failures.append(outcome)
        return OperationOutcome.ok(target, failures)

    async def _copy_file(self, origin: PathHandle, target: PathHandle) -> OperationOutcome:
        if _same_file(origin, target):
            error = ConfigurationError(f"{os.fspath(origin)} and {os.fspath(target)} are the same file")
            logger.error("Cannot copy %s to %s: %s", origin, target, error)
            return OperationOutcome.failed(target, error)
        parent = await self._ensure_parent(target)
        if not parent:
            return parent
        try:
            await asyncio.to_thread(self._stream, origin, target)
        except _MASKED as e:
            logger.error("Cannot copy %s to %s: %s", origin, target, e)
            return OperationOutcome.failed(target, e)
        return OperationOutcome.ok(target)

    def _stream(self, origin: PathHandle, target: PathHandle) -> None:
        """Copy file content in chunks of ``settings.chunk_size`` bytes."""
        # Open origin first so an unreadable file leaves no empty target behind.
        with open(origin, "rb") as src, open(target, "wb") as dst:
            shutil.copyfileobj(src, dst, self.settings.chunk_size)

    async def mv(self, origin: PathHandle, target: PathHandle) -> OperationOutcome:
        """Move or rename a file or directory tree.

        Tries an atomic rename first. Only when origin and target are on
        different devices does it fall back to copy-then-delete; the
        original is kept unless every entry was copied.

        Args:
            origin: Path to move.
            target: New path. Missing parents are created.
        """
        parent = await self._ensure_parent(target)
        if not parent:
            return parent

        try:
            await asyncio.to_thread(os.rename, origin, target)
        except _MASKED as e:
            if classify_error(e) is ErrorKind.CROSS_DEVICE:
                logger.debug("%s and %s are on different devices, copying", origin, target)
                return await self._move_across_devices(origin, target)
            logger.error("Cannot move %s to %s: %s", origin, target, e)
            return OperationOutcome.failed(target, e)
        return OperationOutcome.ok(target)

    async def _move_across_devices(self, origin: PathHandle, target: PathHandle) -> OperationOutcome:
        copied = await self.cp(origin, target)
        if not copied:
            logger.error("Move of %s aborted, original kept: %s", origin, copied.error)
            return copied
        if copied.failures:
            logger.error(
                "Move of %s aborted, original kept: %d entries failed to copy",
                origin,
                len(copied.failures),
            )
            return OperationOutcome(
                success=False,
                path=os.fspath(target),
                error=f"{len(copied.failures)} entries failed to copy",
                error_kind=ErrorKind.IO_FAILURE,
                failures=copied.failures,
            )

        removed = await self.rm(origin)
        if not removed:
            logger.warning("Moved %s to %s but the original remains: %s", origin, target, removed.error)
        return OperationOutcome.ok(target)

    async def rm(self, origin: PathHandle) -> OperationOutcome:
        """Delete a file, symlink or directory tree.

        A symlink to a directory removes the link, not the directory.
        """
        probe = await self.lstat(origin)
        try:
            if probe.is_dir():
                await asyncio.to_thread(shutil.rmtree, origin)
            else:
                await asyncio.to_thread(os.unlink, origin)
        except _MASKED as e:
            logger.error("Cannot remove %s: %s", origin, e)
            return OperationOutcome.failed(origin, e)
        return OperationOutcome.ok(origin)

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    async def chmod(self, path: PathHandle, mode: int) -> OperationOutcome:
        try:
            await asyncio.to_thread(os.chmod, path, mode)
        except _MASKED as e:
            logger.error("Cannot chmod %s: %s", path, e)
            return OperationOutcome.failed(path, e)
        return OperationOutcome.ok(path)

    async def chown(self, path: PathHandle, uid: int, gid: int) -> OperationOutcome:
        try:
            await asyncio.to_thread(os.chown, path, uid, gid)
        except _MASKED as e:
            logger.error("Cannot chown %s: %s", path, e)
            return OperationOutcome.failed(path, e)
        return OperationOutcome.ok(path)
