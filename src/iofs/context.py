"""Application context for dependency injection.

This module separates object creation from object use, so CLI commands can
be tested with a test double in place of the real filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from iofs.config import Settings
from iofs.protocols import FileSystem


def _default_filesystem() -> FileSystem:
    """Create the default filesystem implementation."""
    from iofs.filesystem import AsyncFileSystem

    return AsyncFileSystem()


@dataclass
class AppContext:
    """Container for application dependencies.

    The filesystem is typed with the FileSystem protocol, not the concrete
    class, so test doubles can be injected without inheritance.
    """

    filesystem: FileSystem = field(default_factory=_default_filesystem)
    settings: Settings = field(default_factory=Settings)


def create_context(settings: Settings | None = None) -> AppContext:
    """Factory for application dependencies.

    Args:
        settings: Override settings. Defaults to IOFS_* environment variables.

    Returns:
        Configured AppContext.

    Raises:
        ConfigurationError: If the environment holds invalid settings.
    """
    from iofs.filesystem import AsyncFileSystem

    settings = settings or Settings.from_env()
    return AppContext(filesystem=AsyncFileSystem.create(settings), settings=settings)
