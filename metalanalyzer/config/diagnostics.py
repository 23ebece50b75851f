"""Diagnostics settings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

MIN_DIAGNOSTIC_DEBOUNCE_MS = 50
MAX_DIAGNOSTIC_DEBOUNCE_MS = 5000

_U64_MAX = 2**64 - 1


class DiagnosticsScope(Enum):
    """Which documents are analysed."""

    OPEN_FILES = "openFiles"
    WORKSPACE = "workspace"

    def is_workspace(self) -> bool:
        return self is DiagnosticsScope.WORKSPACE


def _bool(patch: Mapping[str, Any], key: str) -> bool | None:
    value = patch.get(key)
    if value is not None and not isinstance(value, bool):
        raise TypeError(f"{key!r} must be a boolean")
    return value


def _unsigned(patch: Mapping[str, Any], key: str) -> int | None:
    value = patch.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key!r} must be an integer")
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{key!r} is out of range")
    return value


def _scope(patch: Mapping[str, Any], key: str) -> DiagnosticsScope | None:
    value = patch.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string")
    return DiagnosticsScope(value)


@dataclass
class DiagnosticsSettings:
    """When and how widely diagnostics run."""

    on_type: bool = True
    on_save: bool = True
    debounce_ms: int = 500
    scope: DiagnosticsScope = DiagnosticsScope.OPEN_FILES

    def apply_patch(self, patch: Mapping[str, Any]) -> None:
        """Overwrite the fields present in a camelCase settings object."""
        if not isinstance(patch, Mapping):
            raise TypeError("diagnostics settings must be an object")
        on_type = _bool(patch, "onType")
        on_save = _bool(patch, "onSave")
        debounce_ms = _unsigned(patch, "debounceMs")
        scope = _scope(patch, "scope")

        if on_type is not None:
            self.on_type = on_type
        if on_save is not None:
            self.on_save = on_save
        if debounce_ms is not None:
            self.debounce_ms = debounce_ms
        if scope is not None:
            self.scope = scope

    def normalize(self) -> None:
        """Clamp the debounce delay into its allowed range."""
        self.debounce_ms = min(max(self.debounce_ms, MIN_DIAGNOSTIC_DEBOUNCE_MS), MAX_DIAGNOSTIC_DEBOUNCE_MS)