"""Thread pool settings."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

MIN_WORKER_THREADS = 1
MAX_WORKER_THREADS = 64
MIN_FORMATTING_THREADS = 1
MAX_FORMATTING_THREADS = 8

_U64_MAX = 2**64 - 1


def _unsigned(patch: Mapping[str, Any], key: str) -> int | None:
    value = patch.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key!r} must be an integer")
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{key!r} is out of range")
    return value


@dataclass
class ThreadPoolSettings:
    """Sizes of the worker and formatting pools; 0 workers means one per CPU."""

    worker_threads: int = 0
    formatting_threads: int = 1

    def resolved_worker_threads(self) -> int:
        if self.worker_threads == 0:
            return os.cpu_count() or MIN_WORKER_THREADS
        return self.worker_threads

    def resolved_formatting_threads(self) -> int:
        if self.formatting_threads == 0:
            return MIN_FORMATTING_THREADS
        return self.formatting_threads

    def apply_patch(self, patch: Mapping[str, Any]) -> None:
        """Overwrite the fields present in a camelCase settings object."""
        if not isinstance(patch, Mapping):
            raise TypeError("thread pool settings must be an object")
        worker_threads = _unsigned(patch, "workerThreads")
        formatting_threads = _unsigned(patch, "formattingThreads")
        if worker_threads is not None:
            self.worker_threads = worker_threads
        if formatting_threads is not None:
            self.formatting_threads = formatting_threads

    def normalize(self) -> None:
        """Clamp pool sizes, keeping 0 workers as the automatic size."""
        if self.worker_threads != 0:
            self.worker_threads = min(max(self.worker_threads, MIN_WORKER_THREADS), MAX_WORKER_THREADS)
        self.formatting_threads = min(
            max(self.formatting_threads, MIN_FORMATTING_THREADS), MAX_FORMATTING_THREADS
        )