"""Background indexing settings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

MIN_INDEXING_CONCURRENCY = 1
MAX_INDEXING_CONCURRENCY = 32
MIN_MAX_FILE_SIZE_KB = 16
MAX_MAX_FILE_SIZE_KB = 1024 * 64
MIN_PROJECT_GRAPH_DEPTH = 0
MAX_PROJECT_GRAPH_DEPTH = 8
MIN_PROJECT_GRAPH_MAX_NODES = 16
MAX_PROJECT_GRAPH_MAX_NODES = 4096

_U64_MAX = 2**64 - 1


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


def _string_list(patch: Mapping[str, Any], key: str) -> list[str] | None:
    value = patch.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TypeError(f"{key!r} must be a list of strings")
    return list(value)


def _clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


@dataclass
class IndexingSettings:
    """Limits and exclusions for workspace indexing."""

    enable: bool = True
    concurrency: int = 1
    max_file_size_kb: int = 512
    project_graph_depth: int = 3
    project_graph_max_nodes: int = 256
    exclude_paths: list[str] = field(default_factory=list)

    def apply_patch(self, patch: Mapping[str, Any]) -> None:
        """Overwrite the fields present in a camelCase settings object."""
        if not isinstance(patch, Mapping):
            raise TypeError("indexing settings must be an object")
        updates = {
            "enable": _bool(patch, "enable"),
            "concurrency": _unsigned(patch, "concurrency"),
            "max_file_size_kb": _unsigned(patch, "maxFileSizeKb"),
            "project_graph_depth": _unsigned(patch, "projectGraphDepth"),
            "project_graph_max_nodes": _unsigned(patch, "projectGraphMaxNodes"),
            "exclude_paths": _string_list(patch, "excludePaths"),
        }
        for name, value in updates.items():
            if value is not None:
                setattr(self, name, value)

    def normalize(self) -> None:
        """Clamp numeric limits and trim and de-duplicate excluded paths."""
        self.concurrency = _clamp(self.concurrency, MIN_INDEXING_CONCURRENCY, MAX_INDEXING_CONCURRENCY)
        self.max_file_size_kb = _clamp(self.max_file_size_kb, MIN_MAX_FILE_SIZE_KB, MAX_MAX_FILE_SIZE_KB)
        self.project_graph_depth = _clamp(self.project_graph_depth, MIN_PROJECT_GRAPH_DEPTH, MAX_PROJECT_GRAPH_DEPTH)
        self.project_graph_max_nodes = _clamp(
            self.project_graph_max_nodes, MIN_PROJECT_GRAPH_MAX_NODES, MAX_PROJECT_GRAPH_MAX_NODES
        )
        trimmed = (p.strip() for p in self.exclude_paths)
        self.exclude_paths = list(dict.fromkeys(p for p in trimmed if p))

    def max_file_size_bytes(self) -> int:
        return min(self.max_file_size_kb * 1024, _U64_MAX)