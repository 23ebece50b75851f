"""Compiler settings: include paths, extra flags and target platform."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CompilerPlatform(Enum):
    """Target platform used for Metal diagnostics."""

    MACOS = "macos"
    IOS = "ios"
    TVOS = "tvos"
    WATCHOS = "watchos"
    XROS = "xros"

    @classmethod
    def from_setting_value(cls, value: str) -> CompilerPlatform:
        """Parse a setting value, ignoring case and whitespace; unknown values mean macOS."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.MACOS


def _string_list(patch: Mapping[str, Any], key: str) -> list[str] | None:
    value = patch.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TypeError(f"{key!r} must be a list of strings")
    return list(value)


def _string(patch: Mapping[str, Any], key: str) -> str | None:
    value = patch.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string")
    return value


@dataclass
class CompilerSettings:
    """Options passed to the Metal compiler."""

    include_paths: list[str] = field(default_factory=list)
    extra_flags: list[str] = field(default_factory=list)
    platform: CompilerPlatform = CompilerPlatform.MACOS

    def apply_patch(self, patch: Mapping[str, Any]) -> None:
        """Overwrite the fields present in a camelCase settings object."""
        if not isinstance(patch, Mapping):
            raise TypeError("compiler settings must be an object")
        include_paths = _string_list(patch, "includePaths")
        extra_flags = _string_list(patch, "extraFlags")
        platform = _string(patch, "platform")

        if include_paths is not None:
            self.include_paths = include_paths
        if extra_flags is not None:
            self.extra_flags = extra_flags
        if platform is not None:
            self.platform = CompilerPlatform.from_setting_value(platform)

    def normalize(self) -> None:
        """Trim entries and drop empty ones."""
        self.include_paths = [p.strip() for p in self.include_paths if p.strip()]
        self.extra_flags = [f.strip() for f in self.extra_flags if f.strip()]