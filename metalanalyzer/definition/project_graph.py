"""Include graph across indexed project files, with reverse edges for neighbourhood queries."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Sequence
from os import PathLike
from pathlib import Path


def _normalized(path: str | PathLike[str]) -> Path:
    candidate = Path(path)
    try:
        return candidate.resolve(strict=True)
    except (OSError, RuntimeError):
        return candidate


def _file_key(path: str | PathLike[str]) -> str:
    return str(_normalized(path))


def _lines(source: str) -> list[str]:
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_include_directives(source: str) -> list[tuple[str, bool]]:
    """Return ``(path, is_system)`` for every ``#include <...>`` or ``#include "..."`` line."""
    includes: list[tuple[str, bool]] = []
    for raw_line in _lines(source):
        line = raw_line.lstrip()
        if not line.startswith("#include"):
            continue
        start = line.find("<")
        if start >= 0:
            end = line.find(">", start + 1)
            if end >= 0:
                includes.append((line[start + 1:end], True))
                continue
        start = line.find('"')
        if start >= 0:
            end = line.find('"', start + 1)
            if end >= 0:
                includes.append((line[start + 1:end], False))
    return includes


def resolve_include_path(
    owner: str | PathLike[str],
    include_path: str,
    is_system: bool,
    include_paths: Sequence[str],
) -> Path | None:
    """Find an included file: absolute path, then beside the owner (quoted only), then include dirs."""
    include = Path(include_path)
    if include.is_absolute() and include.exists():
        return _normalized(include)

    if not is_system:
        owner_path = Path(owner)
        parent = owner_path.parent
        if parent != owner_path:
            candidate = parent / include
            if candidate.exists():
                return _normalized(candidate)

    for include_dir in include_paths:
        candidate = Path(include_dir) / include
        if candidate.exists():
            return _normalized(candidate)
    return None


class ProjectGraph:
    """Directed owner-to-include edges plus the reverse include-to-owner edges.

    Files are identified by their normalized path strings.
    """

    def __init__(self) -> None:
        self._owner_to_includes: dict[str, set[str]] = {}
        self._include_to_owners: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def update_file(self, owner_path: str | PathLike[str], source: str, include_paths: Sequence[str]) -> None:
        """Replace the include edges of ``owner_path`` with those found in ``source``."""
        owner = _normalized(owner_path)
        owner_id = str(owner)
        new_includes: set[str] = set()
        for include, is_system in parse_include_directives(source):
            resolved = resolve_include_path(owner, include, is_system, include_paths)
            if resolved is not None:
                new_includes.add(str(resolved))

        with self._lock:
            for include_id in self._owner_to_includes.pop(owner_id, set()):
                owners = self._include_to_owners.get(include_id)
                if owners is None:
                    continue
                owners.discard(owner_id)
                if not owners:
                    del self._include_to_owners[include_id]
            for include_id in new_includes:
                self._include_to_owners.setdefault(include_id, set()).add(owner_id)
            self._owner_to_includes[owner_id] = new_includes

    def scoped_files(self, seed: str | PathLike[str], max_depth: int, max_nodes: int) -> set[str]:
        """Return the files within ``max_depth`` edges of ``seed`` in either direction.

        The seed is always included; at most ``max_nodes`` files are returned
        unless the limit is below one.
        """
        seed_id = _file_key(seed)
        visited = {seed_id}
        queue: deque[tuple[str, int]] = deque([(seed_id, 0)])

        with self._lock:
            while queue:
                current, depth = queue.popleft()
                if depth >= max_depth or len(visited) >= max_nodes:
                    continue
                for neighbours in (
                    self._owner_to_includes.get(current, ()),
                    self._include_to_owners.get(current, ()),
                ):
                    for neighbour in sorted(neighbours):
                        if len(visited) >= max_nodes:
                            break
                        if neighbour not in visited:
                            visited.add(neighbour)
                            queue.append((neighbour, depth + 1))
        return visited