"""Ranking and disambiguation of same-named definition candidates."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Any

from metalanalyzer.definition.ast_index import AstIndex
from metalanalyzer.definition.symbol_text import extract_call_argument_count, extract_member_receiver_identifier
from metalanalyzer.definition.symbols import SymbolDef
from metalanalyzer.definition.utils import is_system_header, paths_match

_MEMBER_KINDS = frozenset({"FieldDecl", "CXXMethodDecl"})
_RECORD_KINDS = frozenset({"CXXRecordDecl", "ClassTemplateSpecializationDecl"})
_LOCAL_VALUE_KIND_RANK = {"ParmVarDecl": 0, "VarDecl": 1, "FieldDecl": 2}


def rank_definition(
    word: str,
    definition: SymbolDef,
    source_file: str,
    builtin_names: Collection[str] = frozenset(),
) -> tuple[int, int, int, int]:
    """Return a sort key; lower is better.

    Same-file definitions win, then definitions over declarations, then
    non-parameters; builtin-looking words prefer system headers, others user files.
    """
    same_file = 0 if paths_match(definition.file, source_file) else 1
    is_definition = 0 if definition.is_definition else 1
    is_parm_var = 1 if definition.kind == "ParmVarDecl" else 0
    in_system = is_system_header(definition.file)
    if _looks_like_builtin_symbol(word, builtin_names):
        system_rank = 0 if in_system else 1
    else:
        system_rank = 1 if in_system else 0
    return same_file, is_definition, is_parm_var, system_rank


def _looks_like_builtin_symbol(word: str, builtin_names: Collection[str]) -> bool:
    return word.startswith(("simd_", "metal::")) or word in builtin_names


def disambiguate_member_tie(
    index: AstIndex,
    tied_candidates: Sequence[SymbolDef],
    source_file: str,
    source: str,
    position: Any,
    word: str,
) -> SymbolDef | None:
    """Pick one field or method among tied candidates using the receiver of ``obj.word``."""
    receiver = extract_member_receiver_identifier(source, position, word)
    if receiver is None:
        return None
    cursor_line = position.line + 1
    cursor_col = position.character + 1
    type_name = _infer_local_identifier_type_name(index, source_file, cursor_line, cursor_col, receiver)
    receiver_type = short_type_name(type_name) if type_name is not None else None

    matches = [c for c in tied_candidates if c.kind in _MEMBER_KINDS]
    if not matches:
        return None

    all_methods = all(c.kind == "CXXMethodDecl" for c in matches)
    if receiver_type is not None:
        owner_matched = [
            c
            for c in matches
            if (owner := _enclosing_record_name_for_member(index, c)) is not None
            and short_type_name(owner) == receiver_type
        ]
        if owner_matched:
            matches = owner_matched
    elif all_methods:
        owner_names = {
            short_type_name(owner)
            for c in matches
            if (owner := _enclosing_record_name_for_member(index, c)) is not None
        }
        if len(owner_names) > 1:
            return None
    else:
        return None

    if len(matches) == 1:
        return matches[0]
    if all(c.kind == "CXXMethodDecl" for c in matches):
        return _select_method_overload_for_member_call(matches, source, position, word)
    return None


def _infer_local_identifier_type_name(
    index: AstIndex, source_file: str, cursor_line: int, cursor_col: int, identifier: str
) -> str | None:
    candidates = [
        index.defs[i]
        for i in index.name_to_defs.get(identifier, ())
        if paths_match(index.defs[i].file, source_file)
        and index.defs[i].kind in _LOCAL_VALUE_KIND_RANK
        and (
            index.defs[i].line < cursor_line
            or (index.defs[i].line == cursor_line and index.defs[i].col <= cursor_col)
        )
    ]
    if not candidates:
        return None
    candidates.sort(key=lambda d: (-d.line, -d.col, _LOCAL_VALUE_KIND_RANK.get(d.kind, 3)))
    return candidates[0].type_name


def _enclosing_record_name_for_member(index: AstIndex, member: SymbolDef) -> str | None:
    if member.kind not in _MEMBER_KINDS:
        return None
    best: SymbolDef | None = None
    for definition in index.defs:
        if (
            definition.kind in _RECORD_KINDS
            and definition.line <= member.line
            and paths_match(definition.file, member.file)
            and (best is None or definition.line >= best.line)
        ):
            best = definition
    return best.name if best is not None else None


def _select_method_overload_for_member_call(
    methods: Sequence[SymbolDef], source: str, position: Any, word: str
) -> SymbolDef | None:
    candidates = [m for m in methods if m.kind == "CXXMethodDecl"]
    if not candidates:
        return None

    argument_count = extract_call_argument_count(source, position, word)
    if argument_count is not None:
        arity_matched = [
            m
            for m in candidates
            if (count := method_parameter_count(m)) is None or count == argument_count
        ]
        if arity_matched:
            candidates = arity_matched

    candidates.sort(key=lambda m: (method_constness_rank(m), m.file, m.line, m.col))
    return candidates[0]


def method_constness_rank(definition: SymbolDef) -> int:
    """Return 0 for non-const methods, 1 for const methods and 2 for non-methods."""
    if definition.kind != "CXXMethodDecl":
        return 2
    normalized = (definition.qual_type or "").rstrip()
    if normalized.endswith("const") or ") const" in normalized or " const noexcept" in normalized:
        return 1
    return 0


def method_parameter_count(definition: SymbolDef) -> int | None:
    """Count the parameters in a function type such as ``float (int, vec<float, 4>)``."""
    signature = definition.qual_type
    if signature is None:
        return None
    start = signature.find("(")
    if start < 0:
        return None

    depth = 0
    end = None
    for index in range(start, len(signature)):
        ch = signature[index]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
            if depth == 0:
                end = index
                break
    if end is None:
        return None

    params = signature[start + 1:end].strip()
    if not params or params == "void":
        return 0

    count = 1
    nested = 0
    for ch in params:
        if ch in "<([":
            nested += 1
        elif ch in ">)]":
            nested = max(nested - 1, 0)
        elif ch == "," and nested == 0:
            count += 1
    return count


def short_type_name(type_name: str) -> str:
    """Drop namespace qualifiers and template arguments from a type name."""
    return type_name.rsplit("::", 1)[-1].split("<", 1)[0]