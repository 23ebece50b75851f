"""Run the Metal compiler to dump a document's AST as JSON."""

from __future__ import annotations

import itertools
import logging
import os
import subprocess
import tempfile
import threading
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

logger = logging.getLogger(__name__)

_dump_ids = itertools.count(1)
_dump_ids_lock = threading.Lock()


def _next_dump_id() -> int:
    with _dump_ids_lock:
        return next(_dump_ids)


def _lines(source: str) -> list[str]:
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def rewrite_includes(source: str, base_dir: str | PathLike[str]) -> str:
    """Make quoted relative includes absolute where the header exists under ``base_dir``.

    Every line of the result ends with a newline.
    """
    base = Path(base_dir)
    out: list[str] = []
    for line in _lines(source):
        if line.lstrip().startswith("#include"):
            start = line.find('"')
            end = line.find('"', start + 1) if start >= 0 else -1
            if start >= 0 and end >= 0:
                rel_path = line[start + 1:end]
                if not Path(rel_path).is_absolute():
                    abs_path = base / rel_path
                    if abs_path.exists():
                        out.append(f"{line[:start + 1]}{abs_path}{line[end:]}\n")
                        continue
        out.append(line + "\n")
    return "".join(out)


def _parent_of(path: Path) -> Path | None:
    parent = path.parent
    return None if parent == path else parent


def run_ast_dump(
    source: str,
    file_path: str | PathLike[str] | None,
    include_paths: Sequence[str],
) -> tuple[str, list[str]] | None:
    """Compile ``source`` with ``xcrun metal`` and return its JSON AST.

    Returns the JSON text and the paths under which the temporary copy may
    appear in it, or None if the compiler could not run or gave no JSON.
    """
    tmp_dir = Path(tempfile.gettempdir()) / f"metal-analyzer-def-{os.getpid()}"
    try:
        tmp_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.warning("Failed to create temp dir for AST dump")
        return None

    src_file = tmp_dir / f"shader-{_next_dump_id()}.metal"
    original = Path(file_path) if file_path is not None else None
    parent = _parent_of(original) if original is not None else None
    content = rewrite_includes(source, parent) if parent is not None else source

    try:
        src_file.write_text(content, encoding="utf-8")
    except OSError:
        logger.warning("Failed to write temp file for AST dump")
        try:
            tmp_dir.rmdir()
        except OSError:
            pass
        return None

    args = [
        "metal",
        "-Xclang",
        "-ast-dump=json",
        "-fsyntax-only",
        "-fno-color-diagnostics",
        str(src_file),
    ]
    seen: set[str] = set()
    directories = list(include_paths)
    if original is not None:
        directories.extend(str(directory) for directory in original.parents)
    for directory in directories:
        if directory not in seen:
            seen.add(directory)
            args.extend(["-I", directory])

    logger.debug("AST dump: xcrun %s", " ".join(args))
    try:
        result = subprocess.run(["xcrun", *args], capture_output=True, check=False)
        failed = None
    except OSError as error:
        result, failed = None, error

    tmp_files = [str(src_file)]
    if result is not None:
        try:
            canonical = str(src_file.resolve(strict=True))
        except (OSError, RuntimeError):
            canonical = None
        if canonical is not None and canonical not in tmp_files:
            tmp_files.append(canonical)

    try:
        src_file.unlink(missing_ok=True)
        tmp_dir.rmdir()
    except OSError:
        pass

    if result is None:
        logger.warning("Failed to run AST dump: %s", failed)
        return None

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        for line in stderr.splitlines():
            if "error:" in line:
                logger.warning("[ast-dump] compiler error: %s", line)
        logger.debug("[ast-dump] exited with non-zero status (partial AST may still be usable)")

    try:
        stdout = result.stdout.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if not stdout.startswith("{"):
        logger.warning("[ast-dump] produced no usable JSON for %s", file_path)
        return None

    logger.debug("[ast-dump] produced %d bytes of JSON for %s", len(stdout), file_path)
    return stdout, tmp_files