"""Environment-driven settings for the module registry."""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, field_validator

from .constants import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    ENV_LOG_FORMAT,
    ENV_LOG_LEVEL,
    ENV_STRICT_IDS,
)

_TRUTHY = {"1", "true", "yes", "on"}


class RegistrySettings(BaseModel):
    """Runtime knobs for a ``ModuleRegistry`` and its logging."""

    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT
    strict_ids: bool = False

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        """Normalise the level name and reject unknown ones.

        Args:
            value: Level name such as ``"debug"`` or ``"INFO"``.

        Returns:
            str: Upper-cased level name.

        Raises:
            ValueError: If ``logging`` does not know the level.
        """
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level '{value}'.")
        return normalized

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls) -> "RegistrySettings":
        """Build settings from ``MODDEF_*`` environment variables.

        Returns:
            RegistrySettings: Settings with environment overrides applied.
        """
        return cls(
            log_level=os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
            log_format=os.getenv(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT),
            strict_ids=os.getenv(ENV_STRICT_IDS, "false").strip().lower() in _TRUTHY,
        )
