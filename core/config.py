"""Runtime settings loaded from the environment."""

import logging
import os
from dataclasses import dataclass, replace

from .errors import ConfigurationError

BINARY_SOURCES = ("global", "docker")
DEFAULT_DOCKER_IMAGE = "ghcr.io/containerbase/sidecar"
DEFAULT_EXEC_TIMEOUT = 900.0


@dataclass(frozen=True)
class Settings:
    """Global settings shared by the CLI, web app and engine."""

    local_dir: str = "."
    binary_source: str = "global"
    docker_image: str = DEFAULT_DOCKER_IMAGE
    exec_timeout: float = DEFAULT_EXEC_TIMEOUT
    log_level: int = logging.INFO

    def __post_init__(self):
        if self.binary_source not in BINARY_SOURCES:
            raise ConfigurationError(
                f"Invalid binary source {self.binary_source!r}, "
                f"expected one of: {', '.join(BINARY_SOURCES)}"
            )
        if self.exec_timeout <= 0:
            raise ConfigurationError("Exec timeout must be positive")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``LOCKFIX_*`` environment variables."""
        values: dict = {}

        local_dir = os.getenv("LOCKFIX_LOCAL_DIR")
        if local_dir and local_dir.strip():
            values["local_dir"] = local_dir.strip()

        binary_source = os.getenv("LOCKFIX_BINARY_SOURCE")
        if binary_source and binary_source.strip():
            values["binary_source"] = binary_source.strip().lower()

        docker_image = os.getenv("LOCKFIX_DOCKER_IMAGE")
        if docker_image and docker_image.strip():
            values["docker_image"] = docker_image.strip()

        timeout = os.getenv("LOCKFIX_EXEC_TIMEOUT")
        if timeout and timeout.strip():
            try:
                values["exec_timeout"] = float(timeout)
            except ValueError:
                raise ConfigurationError(f"Invalid LOCKFIX_EXEC_TIMEOUT: {timeout!r}")

        level = os.getenv("LOCKFIX_LOG_LEVEL")
        if level and level.strip():
            resolved = logging.getLevelName(level.strip().upper())
            if not isinstance(resolved, int):
                raise ConfigurationError(f"Invalid LOCKFIX_LOG_LEVEL: {level!r}")
            values["log_level"] = resolved

        return cls(**values)

    def with_local_dir(self, local_dir: str) -> "Settings":
        return replace(self, local_dir=local_dir)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def set_settings(settings: Settings | None) -> None:
    global _settings
    _settings = settings
