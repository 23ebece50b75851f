"""Go-to-definition fallbacks: ranked lookup by name in the file's index and the project index."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from pathlib import Path
from typing import Any

from metalanalyzer.definition.ast_index import AstIndex
from metalanalyzer.definition.project_graph import ProjectGraph
from metalanalyzer.definition.project_index import ProjectIndex
from metalanalyzer.definition.symbol_rank import disambiguate_member_tie, rank_definition
from metalanalyzer.definition.symbols import RefSite, SymbolDef
from metalanalyzer.definition.utils import IdeLocation, IdePosition, IdeRange, def_to_location, paths_match

logger = logging.getLogger(__name__)

_PARAMETER_KINDS = frozenset({"ParmVarDecl", "TemplateTypeParmDecl", "NonTypeTemplateParmDecl"})


def _dedupe(defs: Iterable[SymbolDef]) -> list[SymbolDef]:
    seen: set[tuple[str, int, int]] = set()
    out: list[SymbolDef] = []
    for definition in defs:
        key = (definition.file, definition.line, definition.col)
        if key not in seen:
            seen.add(key)
            out.append(definition)
    return out


def _ranked(
    defs: list[SymbolDef], word: str, source_file: str, builtin_names: Collection[str]
) -> list[tuple[tuple[int, int, int, int], SymbolDef]]:
    ranked = [(rank_definition(word, d, source_file, builtin_names), d) for d in defs]
    ranked.sort(key=lambda item: (item[0], item[1].file, item[1].line, item[1].col))
    return ranked


def _top_tie(ranked: list[tuple[tuple[int, int, int, int], SymbolDef]]) -> list[SymbolDef] | None:
    """Return the candidates sharing the best rank, or None if the best is unique."""
    best_rank = ranked[0][0]
    if len(ranked) < 2 or ranked[1][0] != best_rank:
        return None
    tied: list[SymbolDef] = []
    for rank, definition in ranked:
        if rank != best_rank:
            break
        tied.append(definition)
    return tied


def resolve_by_name(
    index: AstIndex,
    source_file: str,
    source: str,
    position: Any,
    word: str,
    builtin_names: Collection[str] = frozenset(),
) -> IdeLocation | None:
    """Pick the best-ranked definition named ``word`` in the index; ambiguous ties give None."""
    defs = [index.defs[i] for i in index.name_to_defs.get(word, ())]
    deduped = _dedupe(d for d in defs if d.file and d.line > 0)
    if not deduped:
        return None

    ranked = _ranked(deduped, word, source_file, builtin_names)
    tied = _top_tie(ranked)
    if tied is not None:
        chosen = disambiguate_member_tie(index, tied, source_file, source, position, word)
        if chosen is not None:
            logger.debug(
                "[goto-def] TIER-5 disambiguated member tie '%s' to %s:%d:%d", word, chosen.file, chosen.line, chosen.col
            )
            return def_to_location(chosen)
        chosen = _disambiguate_parameter_tie(tied, source_file, position)
        if chosen is not None:
            logger.debug(
                "[goto-def] TIER-5 disambiguated parameter tie '%s' to %s:%d:%d",
                word,
                chosen.file,
                chosen.line,
                chosen.col,
            )
            return def_to_location(chosen)
        logger.debug("[goto-def] TIER-5 ambiguous for '%s' (top rank tie), suppressing fallback hit", word)
        return None

    best = ranked[0][1]
    logger.debug(
        "[goto-def] TIER-5 candidate for '%s': %s:%d:%d kind=%s", word, best.file, best.line, best.col, best.kind
    )
    return def_to_location(best)


def ref_site_to_location(ref_site: RefSite) -> IdeLocation | None:
    """Return the reference's range, preferring its macro expansion site."""
    loc = ref_site.expansion if ref_site.expansion is not None else ref_site
    if not loc.file:
        return None
    line = max(loc.line - 1, 0)
    col = max(loc.col - 1, 0)
    return IdeLocation(
        Path(loc.file),
        IdeRange(IdePosition(line, col), IdePosition(line, col + loc.tok_len)),
    )


def _disambiguate_parameter_tie(tied: Sequence[SymbolDef], source_file: str, position: Any) -> SymbolDef | None:
    cursor_line = position.line + 1
    params = [d for d in tied if paths_match(d.file, source_file) and d.kind in _PARAMETER_KINDS]
    if not params:
        return None
    pool = [d for d in params if d.line <= cursor_line] or params
    best = pool[0]
    for candidate in pool[1:]:
        if candidate.line >= best.line:
            best = candidate
    return best


def resolve_from_project_index(
    project_index: ProjectIndex,
    project_graph: ProjectGraph,
    source_file: str,
    project_graph_depth: int,
    project_graph_max_nodes: int,
    word: str,
    position: Any,
    builtin_names: Collection[str] = frozenset(),
) -> IdeLocation | None:
    """Find ``word`` across the project, first among files near ``source_file`` in the include graph.

    Definitions from other files are preferred; ambiguous ties give None.
    """
    defs: list[SymbolDef] = []
    if source_file:
        scope = project_graph.scoped_files(source_file, project_graph_depth, project_graph_max_nodes)
        defs = project_index.find_definitions_in_files(word, scope)
        if defs:
            logger.debug(
                "[goto-def] TIER-6 graph-scoped candidates for '%s': %d files, %d defs", word, len(scope), len(defs)
            )
    if not defs:
        defs = project_index.find_definitions(word)
    if not defs:
        return None

    pool = [d for d in defs if not paths_match(d.file, source_file)] or defs
    deduped = _dedupe(pool)
    if not deduped:
        return None

    ranked = _ranked(deduped, word, source_file, builtin_names)
    tied = _top_tie(ranked)
    if tied is not None:
        chosen = _disambiguate_parameter_tie(tied, source_file, position)
        if chosen is not None:
            logger.debug(
                "[goto-def] TIER-6 disambiguated parameter tie '%s' to %s:%d:%d",
                word,
                chosen.file,
                chosen.line,
                chosen.col,
            )
            return def_to_location(chosen)
        logger.debug("[goto-def] TIER-6 ambiguous for '%s' (top rank tie), suppressing fallback hit", word)
        return None

    best = ranked[0][1]
    logger.debug(
        "[goto-def] TIER-6 candidate for '%s': %s:%d:%d kind=%s", word, best.file, best.line, best.col, best.kind
    )
    return def_to_location(best)