"""Typed view of the JSON AST that the compiler dumps.

The dump leaves out a location's ``file`` when it equals the previous
location's file, and its ``line`` when it equals the previous line, so the
reader walks every location in document order to fill them back in.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BareLocation:
    """A concrete location; line and column are 1-based, 0 when unknown."""

    file: str = ""
    line: int = 0
    col: int = 0
    tok_len: int = 0
    offset: int = 0


@dataclass(frozen=True)
class SourceLocation:
    """Where a token is spelled and where it is expanded (these differ inside macros)."""

    spelling_loc: BareLocation | None = None
    expansion_loc: BareLocation | None = None


@dataclass
class AstNode:
    """One AST node with the attributes the indexer uses."""

    id: str
    kind: str
    name: str | None = None
    loc: SourceLocation | None = None
    range: tuple[SourceLocation, SourceLocation] | None = None
    is_implicit: bool = False
    is_definition: bool = True
    qual_type: str | None = None
    referenced_id: str | None = None
    referenced_kind: str | None = None
    referenced_name: str | None = None
    inner: list[AstNode] = field(default_factory=list)


def resolve_loc(loc: SourceLocation) -> BareLocation | None:
    """Prefer the expansion location (what the user sees) over the spelling location."""
    return loc.expansion_loc or loc.spelling_loc


class _LocationReader:
    """Reads locations in stream order, carrying the last file and line forward."""

    def __init__(self) -> None:
        self.last_file = ""
        self.last_line = 0

    def bare(self, data: Any) -> BareLocation | None:
        if not isinstance(data, Mapping):
            return None
        if "file" in data:
            self.last_file = str(data["file"])
        if "line" in data:
            self.last_line = int(data["line"])
        if "col" not in data:
            return None
        return BareLocation(
            file=self.last_file,
            line=self.last_line,
            col=int(data["col"]),
            tok_len=int(data.get("tokLen", 0)),
            offset=int(data.get("offset", 0)),
        )

    def location(self, data: Any) -> SourceLocation:
        if not isinstance(data, Mapping) or not data:
            return SourceLocation()
        if "spellingLoc" in data or "expansionLoc" in data:
            spelling = expansion = None
            for key, value in data.items():
                if key == "spellingLoc":
                    spelling = self.bare(value)
                elif key == "expansionLoc":
                    expansion = self.bare(value)
            return SourceLocation(spelling_loc=spelling, expansion_loc=expansion)
        bare = self.bare(data)
        return SourceLocation(spelling_loc=bare, expansion_loc=bare)

    def range(self, data: Any) -> tuple[SourceLocation, SourceLocation] | None:
        if not isinstance(data, Mapping):
            return None
        begin = end = None
        for key, value in data.items():
            if key == "begin":
                begin = self.location(value)
            elif key == "end":
                end = self.location(value)
        return (begin or SourceLocation(), end or SourceLocation())


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _parse_node(data: Any, reader: _LocationReader) -> AstNode:
    if not isinstance(data, Mapping):
        raise ValueError("AST node must be a JSON object")
    node = AstNode(id=str(data.get("id", "")), kind=str(data.get("kind", "")))
    if "loc" in data:
        node.loc = reader.location(data["loc"])
    if "range" in data:
        node.range = reader.range(data["range"])
    node.name = _optional_str(data.get("name"))
    node.is_implicit = bool(data.get("isImplicit", False))
    node.is_definition = bool(data.get("isThisDeclarationADefinition", True))
    ty = data.get("type")
    if isinstance(ty, Mapping):
        node.qual_type = _optional_str(ty.get("qualType"))
    referenced = data.get("referencedDecl")
    if isinstance(referenced, Mapping) and "id" in referenced:
        node.referenced_id = str(referenced["id"])
        node.referenced_kind = _optional_str(referenced.get("kind"))
        node.referenced_name = _optional_str(referenced.get("name"))
    return node


def parse_ast(text: str) -> AstNode:
    """Parse a JSON AST dump into its root node.

    Raises ValueError if the text is not JSON or a node is not an object.
    """
    data = json.loads(text)
    if not isinstance(data, Mapping):
        raise ValueError("AST root must be a JSON object")

    reader = _LocationReader()
    roots: list[AstNode] = []
    stack: list[tuple[Any, list[AstNode]]] = [(data, roots)]
    while stack:
        raw, siblings = stack.pop()
        node = _parse_node(raw, reader)
        siblings.append(node)
        children = raw.get("inner") or []
        if not isinstance(children, list):
            raise ValueError("'inner' must be a list of nodes")
        stack.extend((child, node.inner) for child in reversed(children))
    return roots[0]