from metalanalyzer.definition.ast_index import AstIndex
from metalanalyzer.definition.symbol_rank import (
    disambiguate_member_tie,
    method_constness_rank,
    method_parameter_count,
    rank_definition,
    short_type_name,
)
from metalanalyzer.definition.symbols import SymbolDef
from metalanalyzer.definition.utils import IdePosition

SRC = "/nonexistent/project/shader.metal"
OTHER = "/nonexistent/other/lib.metal"
SYSTEM = "/Applications/Xcode.app/Contents/Developer/Toolchains/Default/metal/metal_simdgroup"


def _def(def_id, name, kind, line, col=1, file=SRC, is_definition=True, type_name=None, qual_type=None):
    return SymbolDef(
        id=def_id,
        name=name,
        kind=kind,
        file=file,
        line=line,
        col=col,
        is_definition=is_definition,
        type_name=type_name,
        qual_type=qual_type,
    )


def _index(defs):
    index = AstIndex(defs=list(defs))
    for i, definition in enumerate(index.defs):
        index.name_to_defs.setdefault(definition.name, []).append(i)
        index.id_to_def.setdefault(definition.id, i)
    return index


def _cursor_on(source, line_index, needle):
    line = source.split("\n")[line_index]
    return IdePosition(line_index, line.index(needle) + 1)


def test_short_type_name():
    assert short_type_name("metal::texture2d<float>") == "texture2d"
    assert short_type_name("Particle") == "Particle"


def test_method_parameter_count():
    empty = _def("1", "f", "CXXMethodDecl", 1, qual_type="void ()")
    void = _def("2", "f", "CXXMethodDecl", 1, qual_type="void (void)")
    nested = _def("3", "f", "CXXMethodDecl", 1, qual_type="void (vec<float, 4>, int)")
    simple = _def("4", "f", "CXXMethodDecl", 1, qual_type="float (float2, float)")
    untyped = _def("5", "f", "CXXMethodDecl", 1)
    assert method_parameter_count(empty) == method_parameter_count(void) == 0
    assert method_parameter_count(nested) == method_parameter_count(simple)
    assert method_parameter_count(simple) > method_parameter_count(empty)
    assert method_parameter_count(untyped) is None


def test_method_constness_rank():
    const = _def("1", "get", "CXXMethodDecl", 1, qual_type="float (int) const")
    mutable = _def("2", "get", "CXXMethodDecl", 1, qual_type="float (int)")
    field = _def("3", "get", "FieldDecl", 1)
    assert method_constness_rank(mutable) < method_constness_rank(const) < method_constness_rank(field)
    assert method_constness_rank(field) == 2


def test_rank_prefers_same_file_and_definitions():
    same = _def("1", "helper", "FunctionDecl", 3)
    other = _def("2", "helper", "FunctionDecl", 3, file=OTHER)
    decl = _def("3", "helper", "FunctionDecl", 3, is_definition=False)
    assert rank_definition("helper", same, SRC) == (0, 0, 0, 0)
    assert rank_definition("helper", same, SRC) < rank_definition("helper", other, SRC)
    assert rank_definition("helper", same, SRC) < rank_definition("helper", decl, SRC)


def test_rank_puts_parameters_after_variables():
    var = _def("1", "value", "VarDecl", 3)
    parm = _def("2", "value", "ParmVarDecl", 3)
    assert rank_definition("value", var, SRC) < rank_definition("value", parm, SRC)


def test_rank_system_headers_for_builtins():
    system = _def("1", "simd_sum", "FunctionDecl", 3, file=SYSTEM)
    user = _def("2", "simd_sum", "FunctionDecl", 3, file=OTHER)
    assert rank_definition("simd_sum", system, SRC) < rank_definition("simd_sum", user, SRC)

    dot_system = _def("3", "dot", "FunctionDecl", 3, file=SYSTEM)
    dot_user = _def("4", "dot", "FunctionDecl", 3, file=OTHER)
    assert rank_definition("dot", dot_user, SRC) < rank_definition("dot", dot_system, SRC)
    assert rank_definition("dot", dot_system, SRC, {"dot"}) < rank_definition("dot", dot_user, SRC, {"dot"})


FIELD_SOURCE = "\n".join(
    [
        "struct A {",
        "    float value;",
        "};",
        "struct B {",
        "    float value;",
        "};",
        "void f(B b) {",
        "    float x = b.value;",
        "}",
    ]
)


def _field_index():
    a_value = _def("a1", "value", "FieldDecl", 2, col=11)
    b_value = _def("b1", "value", "FieldDecl", 5, col=11)
    defs = [
        _def("a", "A", "CXXRecordDecl", 1, col=8),
        a_value,
        _def("b", "B", "CXXRecordDecl", 4, col=8),
        b_value,
        _def("p", "b", "ParmVarDecl", 7, col=10, type_name="B"),
    ]
    return _index(defs), a_value, b_value


def test_member_tie_resolved_by_receiver_type():
    index, a_value, b_value = _field_index()
    position = _cursor_on(FIELD_SOURCE, 7, "value")
    result = disambiguate_member_tie(index, [a_value, b_value], SRC, FIELD_SOURCE, position, "value")
    assert result is b_value


def test_member_tie_without_receiver():
    index, a_value, b_value = _field_index()
    position = _cursor_on(FIELD_SOURCE, 1, "value")
    assert disambiguate_member_tie(index, [a_value, b_value], SRC, FIELD_SOURCE, position, "value") is None


def _method_index():
    m1 = _def("m1", "get", "CXXMethodDecl", 2, col=11, qual_type="float (int)")
    m2 = _def("m2", "get", "CXXMethodDecl", 3, col=11, qual_type="float (int) const")
    m3 = _def("m3", "get", "CXXMethodDecl", 4, col=11, qual_type="float (int, int)")
    defs = [
        _def("c", "C", "CXXRecordDecl", 1, col=8),
        m1,
        m2,
        m3,
        _def("p", "c", "ParmVarDecl", 6, col=10, type_name="C"),
    ]
    return _index(defs), [m1, m2, m3]


def _method_source(call):
    return "\n".join(
        [
            "struct C {",
            "    float get(int i);",
            "    float get(int i) const;",
            "    float get(int i, int j);",
            "};",
            "void g(C c) {",
            f"    {call};",
            "}",
        ]
    )


def test_method_overload_by_arity():
    index, methods = _method_index()
    source = _method_source("c.get(1, 2)")
    result = disambiguate_member_tie(index, methods, SRC, source, _cursor_on(source, 6, "get"), "get")
    assert result is methods[2]


def test_method_overload_prefers_non_const():
    index, methods = _method_index()
    source = _method_source("c.get(1)")
    result = disambiguate_member_tie(index, methods, SRC, source, _cursor_on(source, 6, "get"), "get")
    assert result is methods[0]


def test_untyped_receiver_with_methods_of_different_owners():
    a_get = _def("ag", "get", "CXXMethodDecl", 2, qual_type="float ()")
    b_get = _def("bg", "get", "CXXMethodDecl", 5, qual_type="float ()")
    index = _index(
        [
            _def("a", "A", "CXXRecordDecl", 1),
            a_get,
            _def("b", "B", "CXXRecordDecl", 4),
            b_get,
        ]
    )
    source = "    q.get();"
    position = _cursor_on(source, 0, "get")
    assert disambiguate_member_tie(index, [a_get, b_get], SRC, source, position, "get") is None