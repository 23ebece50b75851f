"""On-disk cache of AST indices, keyed by source path, content hash and include paths."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from metalanalyzer.definition.ast_index import AstIndex

logger = logging.getLogger(__name__)

CACHE_SCHEMA_VERSION = 1

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_U64_MASK = 2**64 - 1


def stable_hash_hex(text: str) -> str:
    """Return the 64-bit FNV-1a hash of the UTF-8 text as 16 hex digits."""
    value = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & _U64_MASK
    return f"{value:016x}"


def include_paths_hash(include_paths: Sequence[str]) -> str:
    return stable_hash_hex("\n".join(include_paths))


def _normalized_path_string(path: str | PathLike[str]) -> str:
    try:
        return str(Path(path).resolve(strict=True))
    except (OSError, RuntimeError):
        return str(Path(path))


def default_cache_dir() -> Path:
    """Return ``~/.metal-analyzer/index-cache``, or a temp directory without HOME."""
    home = os.environ.get("HOME")
    if home:
        return Path(home) / ".metal-analyzer" / "index-cache"
    return Path(tempfile.gettempdir()) / "metal-analyzer-index-cache"


def cache_file_path(root: str | PathLike[str], source_file: str | PathLike[str]) -> Path:
    key = stable_hash_hex(_normalized_path_string(source_file))
    return Path(root) / f"{key}.json"


def load(
    source_file: str | PathLike[str],
    source_hash: str,
    include_paths: Sequence[str],
    root: str | PathLike[str] | None = None,
) -> AstIndex | None:
    """Return the cached index if it matches the file, content hash and include paths."""
    cache_root = Path(root) if root is not None else default_cache_dir()
    try:
        payload = json.loads(cache_file_path(cache_root, source_file).read_text(encoding="utf-8"))
        valid = (
            payload["schema_version"] == CACHE_SCHEMA_VERSION
            and payload["source_file"] == _normalized_path_string(source_file)
            and payload["source_hash"] == source_hash
            and payload["include_hash"] == include_paths_hash(include_paths)
        )
        if not valid:
            return None
        index = AstIndex.from_dict(payload["index"])
    except (OSError, ValueError, KeyError, TypeError, AttributeError):
        return None
    logger.debug("[index-cache] hit %s", source_file)
    return index


def save(
    source_file: str | PathLike[str],
    source_hash: str,
    include_paths: Sequence[str],
    index: AstIndex,
    root: str | PathLike[str] | None = None,
) -> None:
    """Write the index to the cache; failures are ignored."""
    cache_root = Path(root) if root is not None else default_cache_dir()
    payload = {
        "schema_version": CACHE_SCHEMA_VERSION,
        "source_file": _normalized_path_string(source_file),
        "source_hash": source_hash,
        "include_hash": include_paths_hash(include_paths),
        "index": index.to_dict(),
    }
    try:
        cache_root.mkdir(parents=True, exist_ok=True)
        cache_file_path(cache_root, source_file).write_text(json.dumps(payload), encoding="utf-8")
    except OSError:
        logger.debug("[index-cache] could not write cache for %s", source_file)