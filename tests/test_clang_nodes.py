import json

import pytest

from metalanalyzer.definition.clang_nodes import (
    BareLocation,
    SourceLocation,
    parse_ast,
    resolve_loc,
)


def _dump(data):
    return json.dumps(data)


def test_file_and_line_are_inherited_in_document_order():
    root = parse_ast(
        _dump(
            {
                "id": "0x1",
                "kind": "TranslationUnitDecl",
                "inner": [
                    {"id": "0x2", "kind": "VarDecl", "name": "a",
                     "loc": {"offset": 4, "file": "/work/a.metal", "line": 3, "col": 7, "tokLen": 1}},
                    {"id": "0x3", "kind": "VarDecl", "name": "b",
                     "loc": {"offset": 10, "col": 9, "tokLen": 1}},
                    {"id": "0x4", "kind": "VarDecl", "name": "c",
                     "loc": {"offset": 30, "line": 5, "col": 2, "tokLen": 1}},
                ],
            }
        )
    )
    a, b, c = root.inner
    assert a.loc.spelling_loc == BareLocation("/work/a.metal", 3, 7, 1, 4)
    assert b.loc.expansion_loc.file == "/work/a.metal"
    assert b.loc.expansion_loc.line == 3
    assert c.loc.spelling_loc.file == "/work/a.metal"
    assert c.loc.spelling_loc.line == 5


def test_nested_children_continue_the_location_stream():
    root = parse_ast(
        _dump(
            {
                "id": "0x1",
                "kind": "FunctionDecl",
                "loc": {"offset": 0, "file": "/work/b.metal", "line": 1, "col": 6, "tokLen": 4},
                "inner": [{"id": "0x2", "kind": "Unknown", "inner": [
                    {"id": "0x3", "kind": "ParmVarDecl", "loc": {"offset": 12, "col": 16, "tokLen": 1}}
                ]}],
            }
        )
    )
    parm = root.inner[0].inner[0]
    assert parm.kind == "ParmVarDecl"
    assert parm.loc.spelling_loc.file == "/work/b.metal"
    assert parm.loc.spelling_loc.line == 1


def test_macro_location_keeps_spelling_and_expansion():
    root = parse_ast(
        _dump(
            {
                "id": "0x1",
                "kind": "DeclRefExpr",
                "range": {
                    "begin": {
                        "spellingLoc": {"offset": 1, "file": "/work/m.h", "line": 2, "col": 20, "tokLen": 1},
                        "expansionLoc": {"offset": 95, "file": "/work/s.metal", "line": 9, "col": 3, "tokLen": 4},
                    },
                    "end": {"offset": 96, "col": 4, "tokLen": 1},
                },
                "referencedDecl": {"id": "0x9", "kind": "VarDecl", "name": "v"},
            }
        )
    )
    begin, end = root.range
    assert begin.spelling_loc.file == "/work/m.h"
    assert resolve_loc(begin).file == "/work/s.metal"
    assert end.spelling_loc.file == "/work/s.metal"
    assert end.spelling_loc.line == 9
    assert (root.referenced_id, root.referenced_kind, root.referenced_name) == ("0x9", "VarDecl", "v")


def test_resolve_loc_prefers_expansion_then_spelling():
    spelling = BareLocation("/x.h", 1, 1, 1)
    expansion = BareLocation("/y.metal", 2, 2, 2)
    assert resolve_loc(SourceLocation(spelling, expansion)) == expansion
    assert resolve_loc(SourceLocation(spelling, None)) == spelling
    assert resolve_loc(SourceLocation()) is None


def test_declaration_attributes_and_defaults():
    root = parse_ast(
        _dump(
            {
                "id": "0x1",
                "kind": "FunctionDecl",
                "name": "f",
                "loc": {},
                "type": {"qualType": "void (float)"},
                "isImplicit": True,
                "isThisDeclarationADefinition": False,
            }
        )
    )
    assert root.name == "f"
    assert root.qual_type == "void (float)"
    assert root.is_implicit is True
    assert root.is_definition is False
    assert root.loc == SourceLocation()

    bare = parse_ast(_dump({"id": "0x2", "kind": "VarDecl"}))
    assert bare.is_definition is True
    assert bare.is_implicit is False
    assert bare.loc is None


def test_invalid_json_raises_value_error():
    with pytest.raises(ValueError):
        parse_ast("{not json")


def test_non_object_root_raises_value_error():
    with pytest.raises(ValueError):
        parse_ast("[1, 2]")


def test_non_object_child_raises_value_error():
    with pytest.raises(ValueError):
        parse_ast(_dump({"id": "0x1", "kind": "X", "inner": [3]}))