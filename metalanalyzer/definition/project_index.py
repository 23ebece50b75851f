"""Project-wide symbol index over the AST indices of every workspace file."""

from __future__ import annotations

import copy
import threading
from collections.abc import Collection, Iterable
from os import PathLike
from pathlib import Path

from metalanalyzer.definition.ast_index import AstIndex
from metalanalyzer.definition.symbols import RefSite, SymbolDef
from metalanalyzer.definition.utils import is_system_header


def _file_key(path: str | PathLike[str]) -> str:
    candidate = Path(path)
    try:
        return str(candidate.resolve(strict=True))
    except (OSError, RuntimeError):
        return str(candidate)


def _sorted_definitions(defs: list[SymbolDef]) -> list[SymbolDef]:
    # User files before system headers, definitions before declarations.
    return sorted(defs, key=lambda d: (is_system_header(d.file), not d.is_definition))


class ProjectIndex:
    """One AstIndex per file; cross-file queries match symbols by name.

    Files are keyed by their normalized path strings.
    """

    def __init__(self) -> None:
        self._files: dict[str, AstIndex] = {}
        self._lock = threading.Lock()

    def _snapshot(self) -> list[tuple[str, AstIndex]]:
        with self._lock:
            return list(self._files.items())

    def update_file(self, path: str | PathLike[str], index: AstIndex) -> None:
        with self._lock:
            self._files[_file_key(path)] = index

    def remove_file(self, path: str | PathLike[str]) -> None:
        with self._lock:
            self._files.pop(_file_key(path), None)

    def file_count(self) -> int:
        with self._lock:
            return len(self._files)

    @staticmethod
    def _named_defs(indices: Iterable[AstIndex], name: str) -> list[SymbolDef]:
        results: list[SymbolDef] = []
        for index in indices:
            for i in index.name_to_defs.get(name, ()):
                definition = index.defs[i]
                if definition.file and definition.line > 0:
                    results.append(copy.copy(definition))
        return results

    def find_definitions(self, name: str) -> list[SymbolDef]:
        """Return copies of every definition named ``name``, best candidates first."""
        return _sorted_definitions(self._named_defs((index for _, index in self._snapshot()), name))

    def find_definitions_in_files(self, name: str, file_scope: Collection[str | PathLike[str]]) -> list[SymbolDef]:
        """Like ``find_definitions``, limited to the indices of the given files."""
        scope = {_file_key(path) for path in file_scope}
        indices = (index for key, index in self._snapshot() if key in scope)
        return _sorted_definitions(self._named_defs(indices, name))

    def find_references_by_name(self, name: str) -> list[RefSite]:
        """Return copies of every reference site whose target is named ``name``."""
        return [
            copy.copy(ref_site)
            for _, index in self._snapshot()
            for ref_site in index.refs
            if ref_site.target_name == name and ref_site.file and ref_site.line > 0
        ]