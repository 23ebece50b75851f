"""Exact go-to-definition through the reference sites recorded in the AST index."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from metalanalyzer.definition.ast_index import AstIndex
from metalanalyzer.definition.symbols import RefSite, SymbolDef
from metalanalyzer.definition.utils import IdeLocation, def_to_location, paths_match

logger = logging.getLogger(__name__)


class _MatchSite(Enum):
    PRIMARY = "primary"
    EXPANSION = "expansion"
    SPELLING = "spelling"


def resolve_precise(index: AstIndex, source_file: str, position: Any, word: str) -> IdeLocation | None:
    """Return the location of the definition referenced under the cursor."""
    definition = resolve_precise_def(index, source_file, position, word)
    return def_to_location(definition) if definition is not None else None


def resolve_precise_def(index: AstIndex, source_file: str, position: Any, word: str) -> SymbolDef | None:
    """Return the definition targeted by a reference site covering the cursor.

    Parameters are only accepted when the cursor is on the reference's own
    location, not on a macro expansion or spelling site.
    """
    cursor_line = position.line + 1
    cursor_col = position.character + 1

    for ref_site in index.refs:
        site = _match_ref_site(ref_site, source_file, cursor_line, cursor_col)
        if site is None or ref_site.target_name != word:
            continue
        def_idx = index.id_to_def.get(ref_site.target_id)
        if def_idx is None:
            continue
        definition = index.defs[def_idx]
        if site is not _MatchSite.PRIMARY and definition.kind == "ParmVarDecl":
            continue
        logger.debug(
            "Precise (%s): %s -> %s:%d:%d", site.value, word, definition.file, definition.line, definition.col
        )
        return definition
    return None


def _match_ref_site(ref_site: RefSite, source_file: str, cursor_line: int, cursor_col: int) -> _MatchSite | None:
    if matches_position(
        ref_site.file, ref_site.line, ref_site.col, ref_site.tok_len, source_file, cursor_line, cursor_col
    ):
        return _MatchSite.PRIMARY
    for site, loc in ((_MatchSite.EXPANSION, ref_site.expansion), (_MatchSite.SPELLING, ref_site.spelling)):
        if loc is not None and matches_position(
            loc.file, loc.line, loc.col, loc.tok_len, source_file, cursor_line, cursor_col
        ):
            return site
    return None


def matches_position(
    file: str,
    line: int,
    col: int,
    tok_len: int,
    source_file: str,
    cursor_line: int,
    cursor_col: int,
) -> bool:
    """Return True if the 1-based cursor lies on the token, its end column included."""
    if not paths_match(file, source_file):
        return False
    if line != cursor_line:
        return False
    return col <= cursor_col <= col + tok_len