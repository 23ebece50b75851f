"""Locate Metal SDK symbols in the system headers found on the include paths.

Offsets in this module are string indices into the decoded header text.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

from metalanalyzer.definition.symbol_text import extract_namespace_qualifier_before_word, is_ident_char
from metalanalyzer.definition.utils import IdeLocation, IdePosition, IdeRange

_METAL_HEADER_BASENAMES = (
    "metal_stdlib",
    "metal_compute",
    "metal_simdgroup",
    "metal_atomic",
    "metal_math",
    "metal_geometric",
    "metal_types",
    "metal_common",
)

_SYSTEM_SYMBOLS = frozenset(
    {
        "mem_flags",
        "thread_scope",
        "memory_order",
        "memory_scope",
        "threadgroup_barrier",
        "simdgroup_barrier",
        "simd_sum",
    }
)

_SYSTEM_SYMBOL_PREFIXES = (
    "simd_",
    "simdgroup_",
    "threadgroup_",
    "quad_",
    "atomic_",
    "mem_",
    "thread_",
    "intersection_",
    "visible_",
)

_SYSTEM_NAMESPACES = frozenset(
    {
        "metal",
        "address",
        "coord",
        "filter",
        "mip_filter",
        "compare_func",
        "access",
        "mem_flags",
        "thread_scope",
        "memory_order",
        "memory_scope",
    }
)


def resolve_fast_system_symbol_location(
    source: str, position: Any, word: str, include_paths: Sequence[str]
) -> IdeLocation | None:
    """Resolve obvious SDK symbols (``access::read``, ``simd_sum``) straight to a header."""
    qualifier = extract_namespace_qualifier_before_word(source, position, word)
    if qualifier is not None and _is_likely_system_namespace(qualifier):
        result = resolve_qualified_system_symbol_location(include_paths, qualifier, word)
        if result is not None:
            return result

    if not should_fast_lookup_system_symbol(source, position, word):
        return None
    return resolve_system_header_symbol_location(word, include_paths)


def should_fast_lookup_system_symbol(source: str, position: Any, word: str) -> bool:
    """Return True if the word looks like a Metal SDK symbol or is qualified by an SDK namespace."""
    if _is_likely_system_symbol_family(word):
        return True
    qualifier = extract_namespace_qualifier_before_word(source, position, word)
    if qualifier is not None:
        return _is_likely_system_namespace(qualifier)
    return False


def _is_likely_system_symbol_family(word: str) -> bool:
    return word in _SYSTEM_SYMBOLS or word.startswith(_SYSTEM_SYMBOL_PREFIXES)


def _is_likely_system_namespace(qualifier: str) -> bool:
    return qualifier in _SYSTEM_NAMESPACES


def _normalize_candidate_path(path: Path) -> Path:
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        return path


def _directory_entries(root: Path) -> Iterator[Path]:
    try:
        entries = sorted(root.iterdir())
    except OSError:
        return
    yield from entries


def system_builtin_header_candidates(include_paths: Sequence[str]) -> list[Path]:
    """Return the Metal headers under each include path and its ``metal`` subdirectory.

    Well-known headers come first for each directory, then any other file whose
    name starts with ``metal``; each file appears once.
    """
    seen: set[Path] = set()
    out: list[Path] = []

    def add(candidate: Path) -> None:
        if candidate not in seen:
            seen.add(candidate)
            out.append(candidate)

    for include_path in include_paths:
        include_root = Path(include_path)
        for root in (include_root, include_root / "metal"):
            for basename in _METAL_HEADER_BASENAMES:
                candidate = _normalize_candidate_path(root / basename)
                if candidate.is_file():
                    add(candidate)
            for entry in _directory_entries(root):
                candidate = _normalize_candidate_path(entry)
                if candidate.is_file() and candidate.name.startswith("metal"):
                    add(candidate)
    return out


def resolve_system_header_symbol_location(symbol: str, include_paths: Sequence[str]) -> IdeLocation | None:
    """Return the first whole-word occurrence of the symbol in the system headers."""
    for header_path in system_builtin_header_candidates(include_paths):
        text = _read_text(header_path)
        if text is None:
            continue
        start = find_word_boundary_offset(text, symbol)
        if start is None:
            continue
        return IdeLocation(header_path, _range_of(text, start, len(symbol)))
    return None


def resolve_qualified_system_symbol_location(
    include_paths: Sequence[str], qualifier: str, symbol: str
) -> IdeLocation | None:
    """Return the member ``symbol`` of the enum ``qualifier`` in the system headers."""
    for header_path in system_builtin_header_candidates(include_paths):
        text = _read_text(header_path)
        if text is None:
            continue
        start = find_scoped_enum_member_offset(text, qualifier, symbol)
        if start is None:
            continue
        return IdeLocation(header_path, _range_of(text, start, len(symbol)))
    return None


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def _position_at(source: str, offset: int) -> IdePosition:
    line_start = source.rfind("\n", 0, offset) + 1
    line = source.count("\n", 0, offset)
    character = sum(2 if ord(ch) > 0xFFFF else 1 for ch in source[line_start:offset])
    return IdePosition(line, character)


def _range_of(source: str, start: int, length: int) -> IdeRange:
    return IdeRange(_position_at(source, start), _position_at(source, start + length))


def find_word_boundary_offset(source: str, word: str) -> int | None:
    """Return the index of the first occurrence of ``word`` not inside a longer identifier."""
    if not word:
        return None
    search_from = 0
    while True:
        start = source.find(word, search_from)
        if start < 0:
            return None
        end = start + len(word)
        prev_is_ident = start > 0 and is_ident_char(source[start - 1])
        next_is_ident = end < len(source) and is_ident_char(source[end])
        if not prev_is_ident and not next_is_ident:
            return start
        search_from = end


def find_scoped_enum_member_offset(source: str, qualifier: str, symbol: str) -> int | None:
    """Return the index of ``symbol`` inside the body of ``enum [class] qualifier { ... }``."""
    if not qualifier or not symbol:
        return None

    for marker in (f"enum class {qualifier}", f"enum {qualifier}"):
        search_from = 0
        while True:
            marker_start = source.find(marker, search_from)
            if marker_start < 0:
                break
            marker_end = marker_start + len(marker)
            open_brace = source.find("{", marker_end)
            if open_brace < 0:
                search_from = marker_end
                continue
            body_start = open_brace + 1
            body_end = _find_matching_brace(source, open_brace)
            if body_end is None:
                search_from = body_start
                continue
            body_offset = find_word_boundary_offset(source[body_start:body_end], symbol)
            if body_offset is not None:
                return body_start + body_offset
            search_from = body_end + 1
    return None


def _find_matching_brace(source: str, open_brace_offset: int) -> int | None:
    depth = 0
    for index in range(open_brace_offset, len(source)):
        ch = source[index]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
            if depth == 0:
                return index
    return None