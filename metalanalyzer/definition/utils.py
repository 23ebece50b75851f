"""Path, type-name and location helpers for definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from metalanalyzer.definition.symbols import SymbolDef

_TYPE_PREFIXES = (
    "const ",
    "volatile ",
    "struct ",
    "class ",
    "enum ",
    "thread ",
    "device ",
    "threadgroup ",
    "constant ",
)

_SYSTEM_HEADER_MARKERS = ("/Toolchains/", "/SDKs/", "/usr/include/", "/lib/clang/", "/metal/include/")


@dataclass(frozen=True)
class IdePosition:
    """A zero-based line and character position."""

    line: int = 0
    character: int = 0


@dataclass(frozen=True)
class IdeRange:
    """A half-open range between two positions."""

    start: IdePosition = field(default_factory=IdePosition)
    end: IdePosition = field(default_factory=IdePosition)


@dataclass(frozen=True)
class IdeLocation:
    """A range within a file."""

    file_path: Path
    range: IdeRange = field(default_factory=IdeRange)

    def __post_init__(self) -> None:
        object.__setattr__(self, "file_path", Path(self.file_path))


def normalize_type_name(qual_type: str) -> str | None:
    """Strip qualifiers, pointers, templates and namespaces from a type string.

    ``const float *`` becomes ``float``; ``device atomic_int &`` becomes ``atomic_int``.
    """
    s = qual_type.strip()
    if not s:
        return None

    if "<" in s:
        s = s.split("<", 1)[0].strip()

    while True:
        before = s
        for prefix in _TYPE_PREFIXES:
            if before.startswith(prefix):
                s = before[len(prefix):].lstrip()
                break
        if before == s:
            break

    s = s.rstrip("*& \t")
    words = s.split()
    base = words[-1] if words else s
    base = base.rstrip("*&")
    base = base.rsplit("::", 1)[-1].strip()
    return base or None


def def_to_location(definition: SymbolDef) -> IdeLocation | None:
    """Convert a 1-based definition position into a zero-based location spanning its name."""
    if not definition.file:
        return None
    line = max(definition.line - 1, 0)
    col = max(definition.col - 1, 0)
    end_col = col + len(definition.name.encode("utf-8"))
    return IdeLocation(
        Path(definition.file),
        IdeRange(IdePosition(line, col), IdePosition(line, end_col)),
    )


def is_system_header(path: str) -> bool:
    """Return True if a path looks like a system or SDK header (or is empty)."""
    return not path or any(marker in path for marker in _SYSTEM_HEADER_MARKERS)


def _canonical(path: str | PathLike[str]) -> Path | None:
    try:
        return Path(path).resolve(strict=True)
    except (OSError, RuntimeError):
        return None


def _file_name(path: str) -> str | None:
    name = Path(path).name
    return name if name and name != ".." else None


def paths_match(a: str, b: str) -> bool:
    """Compare paths, tolerating symlinks; as a last resort compare file names only."""
    if a == b:
        return True
    ca, cb = _canonical(a), _canonical(b)
    if ca is not None and cb is not None and ca == cb:
        return True
    fa, fb = _file_name(a), _file_name(b)
    if fa is not None and fb is not None:
        return fa == fb
    return False