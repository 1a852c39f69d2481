"""Settings for iofs operations."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from iofs.errors import ConfigurationError

# Default permission bits for directories created by mkdir
DEFAULT_DIR_MODE = 0o755

# Default buffer size for streaming file copies
DEFAULT_CHUNK_SIZE = 64 * 1024

ENV_PREFIX = "IOFS_"


class Settings(BaseModel):
    """Tunables shared by every operation of a filesystem instance."""

    model_config = ConfigDict(frozen=True)

    dir_mode: int = Field(default=DEFAULT_DIR_MODE, ge=0, le=0o7777)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level

    @classmethod
    def load(cls, **values: object) -> Settings:
        """Validate settings, raising ConfigurationError on bad values.

        Raises:
            ConfigurationError: If any value fails validation.
        """
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Load settings from IOFS_* environment variables.

        ``IOFS_DIR_MODE`` is read as octal (``755`` or ``0o755``).

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            Validated Settings.

        Raises:
            ConfigurationError: If a variable cannot be parsed or validated.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        raw_mode = env.get(f"{ENV_PREFIX}DIR_MODE")
        if raw_mode:
            try:
                values["dir_mode"] = int(raw_mode, 8)
            except ValueError as e:
                raise ConfigurationError(f"{ENV_PREFIX}DIR_MODE is not octal: {raw_mode!r}") from e

        raw_chunk = env.get(f"{ENV_PREFIX}CHUNK_SIZE")
        if raw_chunk:
            try:
                values["chunk_size"] = int(raw_chunk)
            except ValueError as e:
                raise ConfigurationError(
                    f"{ENV_PREFIX}CHUNK_SIZE is not an integer: {raw_chunk!r}"
                ) from e

        raw_level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
        if raw_level:
            values["log_level"] = raw_level

        return cls.load(**values)
