"""Logging settings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Logging verbosity, ordered from least to most verbose."""

    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3
    TRACE = 4

    @classmethod
    def parse(cls, value: str) -> LogLevel:
        """Parse a lowercase level name such as ``"debug"``."""
        if not isinstance(value, str):
            raise TypeError("log level must be a string")
        if value != value.lower() or value.upper() not in cls.__members__:
            raise ValueError(f"unknown log level {value!r}")
        return cls[value.upper()]

    def allows_info(self) -> bool:
        return self >= LogLevel.INFO


@dataclass
class LoggingSettings:
    """Runtime logging verbosity."""

    level: LogLevel = LogLevel.INFO

    def apply_patch(self, patch: Mapping[str, Any]) -> None:
        """Overwrite the level if the settings object carries one."""
        if not isinstance(patch, Mapping):
            raise TypeError("logging settings must be an object")
        value = patch.get("level")
        if value is not None:
            self.level = LogLevel.parse(value)