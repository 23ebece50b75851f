"""Symbol definitions and reference sites collected from the compiler AST."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class SymbolDef:
    """A definition or declaration found in the AST (1-based line and column)."""

    id: str
    name: str
    kind: str
    file: str
    line: int
    col: int
    is_definition: bool
    type_name: str | None = None
    qual_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SymbolDef:
        return cls(
            id=data["id"],
            name=data["name"],
            kind=data["kind"],
            file=data["file"],
            line=data["line"],
            col=data["col"],
            is_definition=data["is_definition"],
            type_name=data.get("type_name"),
            qual_type=data.get("qual_type"),
        )


@dataclass
class RefSiteLocation:
    """A concrete source location of a reference token."""

    file: str
    line: int
    col: int
    tok_len: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RefSiteLocation:
        return cls(file=data["file"], line=data["line"], col=data["col"], tok_len=data["tok_len"])


@dataclass
class RefSite:
    """A place in the source where a symbol is used."""

    file: str
    line: int
    col: int
    tok_len: int
    target_id: str
    target_name: str
    target_kind: str
    expansion: RefSiteLocation | None = None
    spelling: RefSiteLocation | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RefSite:
        expansion = data.get("expansion")
        spelling = data.get("spelling")
        return cls(
            file=data["file"],
            line=data["line"],
            col=data["col"],
            tok_len=data["tok_len"],
            target_id=data["target_id"],
            target_name=data["target_name"],
            target_kind=data["target_kind"],
            expansion=RefSiteLocation.from_dict(expansion) if expansion is not None else None,
            spelling=RefSiteLocation.from_dict(spelling) if spelling is not None else None,
        )