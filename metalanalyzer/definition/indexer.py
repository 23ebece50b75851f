"""Build an AstIndex from a parsed compiler AST."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path

from metalanalyzer.definition.ast_index import AstIndex
from metalanalyzer.definition.clang_nodes import AstNode, BareLocation, resolve_loc
from metalanalyzer.definition.symbols import RefSite, RefSiteLocation, SymbolDef
from metalanalyzer.definition.utils import normalize_type_name

logger = logging.getLogger(__name__)

_DECL_KINDS = frozenset(
    {
        "FunctionDecl",
        "CXXRecordDecl",
        "CXXMethodDecl",
        "VarDecl",
        "FieldDecl",
        "ParmVarDecl",
        "TypedefDecl",
        "TypeAliasDecl",
        "EnumDecl",
        "EnumConstantDecl",
        "NamespaceDecl",
        "FunctionTemplateDecl",
        "ClassTemplateDecl",
        "ClassTemplateSpecializationDecl",
        "UsingDecl",
        "TemplateTypeParmDecl",
        "NonTypeTemplateParmDecl",
    }
)
_TYPED_VALUE_KINDS = frozenset({"VarDecl", "FieldDecl", "ParmVarDecl"})
_REF_KINDS = frozenset({"DeclRefExpr", "MemberExpr"})


def _preorder(root: AstNode) -> Iterator[AstNode]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.inner))


def _collect_decl(node: AstNode) -> SymbolDef | None:
    if not node.name or node.is_implicit or node.loc is None:
        return None
    # Spelling first, so macro-generated declarations point into the macro body.
    bare = node.loc.spelling_loc or node.loc.expansion_loc
    if bare is None or bare.line <= 0:
        return None
    type_name = None
    if node.kind in _TYPED_VALUE_KINDS and node.qual_type is not None:
        type_name = normalize_type_name(node.qual_type)
    return SymbolDef(
        id=node.id,
        name=node.name,
        kind=node.kind,
        file=bare.file,
        line=bare.line,
        col=bare.col,
        is_definition=node.is_definition,
        type_name=type_name,
        qual_type=node.qual_type,
    )


def _ref_location(loc: BareLocation | None) -> RefSiteLocation | None:
    if loc is None or loc.line == 0 or not loc.file:
        return None
    return RefSiteLocation(file=loc.file, line=loc.line, col=loc.col, tok_len=loc.tok_len)


def _collect_ref(node: AstNode) -> RefSite | None:
    if node.is_implicit or node.referenced_id is None:
        return None
    source_loc = node.range[0] if node.range is not None else node.loc
    if source_loc is None:
        return None
    bare = resolve_loc(source_loc)
    if bare is None or bare.line <= 0 or not bare.file:
        return None
    return RefSite(
        file=bare.file,
        line=bare.line,
        col=bare.col,
        tok_len=bare.tok_len,
        target_id=node.referenced_id,
        target_name=node.referenced_name or "",
        target_kind=node.referenced_kind or "",
        expansion=_ref_location(source_loc.expansion_loc),
        spelling=_ref_location(source_loc.spelling_loc),
    )


def build_index(root: AstNode, tmp_files: Sequence[str], original_file: str | None = None) -> AstIndex:
    """Collect declarations and references from the AST and index them.

    Locations in any of ``tmp_files`` (the compiled temporary copy) are
    rewritten to ``original_file`` when it is given.
    """
    defs: list[SymbolDef] = []
    refs: list[RefSite] = []
    for node in _preorder(root):
        if node.kind in _DECL_KINDS:
            definition = _collect_decl(node)
            if definition is not None:
                defs.append(definition)
        elif node.kind in _REF_KINDS:
            ref_site = _collect_ref(node)
            if ref_site is not None:
                refs.append(ref_site)

    logger.debug("[build-index] collected %d defs, %d refs (original_file=%r)", len(defs), len(refs), original_file)

    if original_file is not None:
        memo: dict[str, bool] = {}

        def is_tmp(path: str) -> bool:
            if path not in memo:
                memo[path] = any(paths_equivalent(path, tmp) for tmp in tmp_files)
            return memo[path]

        for definition in defs:
            if is_tmp(definition.file):
                definition.file = original_file
        for ref_site in refs:
            if is_tmp(ref_site.file):
                ref_site.file = original_file
            for loc in (ref_site.expansion, ref_site.spelling):
                if loc is not None and is_tmp(loc.file):
                    loc.file = original_file

    index = AstIndex(defs=defs, refs=refs)
    for i, definition in enumerate(defs):
        existing = index.id_to_def.get(definition.id)
        if existing is None or (definition.is_definition and not defs[existing].is_definition):
            index.id_to_def[definition.id] = i
        index.name_to_defs.setdefault(definition.name, []).append(i)
        index.file_to_defs.setdefault(definition.file, []).append(i)
    for i, ref_site in enumerate(refs):
        index.target_id_to_refs.setdefault(ref_site.target_id, []).append(i)
        index.file_to_refs.setdefault(ref_site.file, []).append(i)
    return index


def _file_name(path: Path) -> str | None:
    name = path.name
    return name if name and name != ".." else None


def paths_equivalent(a: str, b: str) -> bool:
    """Return True if two paths name the same file.

    Equal strings match; if both exist, their resolved paths decide;
    otherwise the file names are compared.
    """
    if a == b:
        return True
    pa, pb = Path(a), Path(b)
    try:
        return pa.resolve(strict=True) == pb.resolve(strict=True)
    except (OSError, RuntimeError):
        pass
    fa, fb = _file_name(pa), _file_name(pb)
    return fa is not None and fb is not None and fa == fb