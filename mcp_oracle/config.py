"""
Server settings read from the environment.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .errors import ConfigError


ENV_PROJECT_PATH = "ORACLE_PROJECT_PATH"
ENV_INCLUDE_PRIVATE = "ORACLE_INCLUDE_PRIVATE"
ENV_LOG_LEVEL = "ORACLE_LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (got {value!r})")


@dataclass(frozen=True)
class Settings:
    """Runtime settings of the Oracle server."""

    project_path: Path
    include_private: bool = True
    log_level: str = "INFO"

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Load settings from environment variables.

        Args:
            environ: Variables to read (defaults to ``os.environ``)

        Raises:
            ConfigError: A variable has an invalid value
        """
        env = os.environ if environ is None else environ

        project_path = Path(env.get(ENV_PROJECT_PATH) or os.getcwd()).resolve()

        include_private = True
        raw_private = env.get(ENV_INCLUDE_PRIVATE)
        if raw_private:
            include_private = parse_bool(ENV_INCLUDE_PRIVATE, raw_private)

        log_level = (env.get(ENV_LOG_LEVEL) or "INFO").strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ConfigError(f"{ENV_LOG_LEVEL} must be one of {', '.join(_LOG_LEVELS)} (got {log_level!r})")

        return cls(project_path=project_path, include_private=include_private, log_level=log_level)
