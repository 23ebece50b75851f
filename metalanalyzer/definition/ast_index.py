"""Indexed AST data for a single translation unit."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from metalanalyzer.definition.symbols import RefSite, SymbolDef
from metalanalyzer.definition.utils import is_system_header

_TYPE_DECL_KINDS = frozenset(
    {"CXXRecordDecl", "TypedefDecl", "TypeAliasDecl", "EnumDecl", "TemplateTypeParmDecl"}
)


@dataclass
class AstIndex:
    """Definitions and references of one translation unit, with lookup tables into them."""

    defs: list[SymbolDef] = field(default_factory=list)
    refs: list[RefSite] = field(default_factory=list)
    id_to_def: dict[str, int] = field(default_factory=dict)
    name_to_defs: dict[str, list[int]] = field(default_factory=dict)
    target_id_to_refs: dict[str, list[int]] = field(default_factory=dict)
    file_to_defs: dict[str, list[int]] = field(default_factory=dict)
    file_to_refs: dict[str, list[int]] = field(default_factory=dict)

    def _defs_named(self, name: str) -> list[SymbolDef]:
        return [self.defs[i] for i in self.name_to_defs.get(name, ())]

    def get_declarations(self, name: str) -> list[SymbolDef]:
        """Return the declarations (not definitions) of a symbol."""
        return [d for d in self._defs_named(name) if not d.is_definition]

    def get_type_definition(self, definition: SymbolDef) -> SymbolDef | None:
        """Return the declaration of a variable's type, preferring user files and definitions."""
        if not definition.type_name:
            return None
        candidates = [d for d in self._defs_named(definition.type_name) if d.kind in _TYPE_DECL_KINDS]
        if not candidates:
            return None
        pool = [d for d in candidates if not is_system_header(d.file)] or candidates
        pool = [d for d in pool if d.is_definition] or pool
        return pool[0]

    def get_references(self, target_id: str) -> list[RefSite]:
        return [self.refs[i] for i in self.target_id_to_refs.get(target_id, ())]

    def get_references_in_file(self, file: str) -> list[RefSite]:
        return [self.refs[i] for i in self.file_to_refs.get(file, ())]

    def get_implementations(self, name: str) -> list[SymbolDef]:
        """Return the definitions of a symbol."""
        return [d for d in self._defs_named(name) if d.is_definition]

    def to_dict(self) -> dict[str, Any]:
        return {
            "defs": [d.to_dict() for d in self.defs],
            "refs": [r.to_dict() for r in self.refs],
            "id_to_def": dict(self.id_to_def),
            "name_to_defs": {k: list(v) for k, v in self.name_to_defs.items()},
            "target_id_to_refs": {k: list(v) for k, v in self.target_id_to_refs.items()},
            "file_to_defs": {k: list(v) for k, v in self.file_to_defs.items()},
            "file_to_refs": {k: list(v) for k, v in self.file_to_refs.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AstIndex:
        return cls(
            defs=[SymbolDef.from_dict(d) for d in data["defs"]],
            refs=[RefSite.from_dict(r) for r in data["refs"]],
            id_to_def={k: int(v) for k, v in data["id_to_def"].items()},
            name_to_defs={k: [int(i) for i in v] for k, v in data["name_to_defs"].items()},
            target_id_to_refs={k: [int(i) for i in v] for k, v in data["target_id_to_refs"].items()},
            file_to_defs={k: [int(i) for i in v] for k, v in data["file_to_defs"].items()},
            file_to_refs={k: [int(i) for i in v] for k, v in data["file_to_refs"].items()},
        )