"""Formatting settings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_FORMAT_COMMAND = "clang-format"


def _bool(patch: Mapping[str, Any], key: str) -> bool | None:
    value = patch.get(key)
    if value is not None and not isinstance(value, bool):
        raise TypeError(f"{key!r} must be a boolean")
    return value


def _string(patch: Mapping[str, Any], key: str) -> str | None:
    value = patch.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string")
    return value


def _string_list(patch: Mapping[str, Any], key: str) -> list[str] | None:
    value = patch.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TypeError(f"{key!r} must be a list of strings")
    return list(value)


@dataclass
class FormattingSettings:
    """Document formatting through an external formatter."""

    enable: bool = True
    command: str = DEFAULT_FORMAT_COMMAND
    args: list[str] = field(default_factory=list)

    def apply_patch(self, patch: Mapping[str, Any]) -> None:
        """Overwrite the fields present in a camelCase settings object."""
        if not isinstance(patch, Mapping):
            raise TypeError("formatting settings must be an object")
        enable = _bool(patch, "enable")
        command = _string(patch, "command")
        args = _string_list(patch, "args")

        if enable is not None:
            self.enable = enable
        if command is not None:
            self.command = command
        if args is not None:
            self.args = args

    def normalize(self) -> None:
        """Trim the command and arguments; an empty command means the default."""
        self.command = self.command.strip() or DEFAULT_FORMAT_COMMAND
        self.args = [a.strip() for a in self.args if a.strip()]