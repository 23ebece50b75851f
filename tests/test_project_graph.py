from pathlib import Path

from metalanalyzer.definition.project_graph import (
    ProjectGraph,
    parse_include_directives,
    resolve_include_path,
)


def _key(path: Path) -> str:
    return str(path.resolve())


def _chain(tmp_path: Path) -> tuple[Path, Path, Path]:
    a = tmp_path / "a.metal"
    b = tmp_path / "b.h"
    c = tmp_path / "c.h"
    a.write_text('#include "b.h"\n')
    b.write_text('#include "c.h"\n')
    c.write_text("struct C {};\n")
    return a, b, c


def test_parse_include_directives_system_and_quoted():
    source = '#include <metal_stdlib>\n  #include "shared/types.h"\nint x;\n#include broken\n'
    assert parse_include_directives(source) == [("metal_stdlib", True), ("shared/types.h", False)]


def test_parse_include_directives_ignores_other_lines():
    assert parse_include_directives('#define X "y"\n// #include "z.h"\n') == []


def test_resolve_include_path_relative_to_owner(tmp_path):
    header = tmp_path / "h.h"
    header.write_text("")
    owner = tmp_path / "main.metal"
    assert resolve_include_path(owner, "h.h", False, []) == header.resolve()


def test_resolve_include_path_system_skips_owner_dir(tmp_path):
    (tmp_path / "h.h").write_text("")
    owner = tmp_path / "main.metal"
    assert resolve_include_path(owner, "h.h", True, []) is None


def test_resolve_include_path_uses_include_dirs(tmp_path):
    inc = tmp_path / "inc"
    inc.mkdir()
    (inc / "lib.h").write_text("")
    owner = tmp_path / "src" / "main.metal"
    assert resolve_include_path(owner, "lib.h", True, [str(inc)]) == (inc / "lib.h").resolve()


def test_resolve_include_path_missing(tmp_path):
    assert resolve_include_path(tmp_path / "m.metal", "nope.h", False, [str(tmp_path)]) is None


def test_scoped_files_respects_depth(tmp_path):
    a, b, c = _chain(tmp_path)
    graph = ProjectGraph()
    graph.update_file(a, a.read_text(), [])
    graph.update_file(b, b.read_text(), [])

    assert graph.scoped_files(a, 0, 100) == {_key(a)}
    assert graph.scoped_files(a, 1, 100) == {_key(a), _key(b)}
    assert graph.scoped_files(a, 2, 100) == {_key(a), _key(b), _key(c)}


def test_scoped_files_follows_reverse_edges(tmp_path):
    a, b, c = _chain(tmp_path)
    graph = ProjectGraph()
    graph.update_file(a, a.read_text(), [])
    graph.update_file(b, b.read_text(), [])
    assert graph.scoped_files(c, 2, 100) == {_key(a), _key(b), _key(c)}


def test_scoped_files_respects_max_nodes(tmp_path):
    a, b, _ = _chain(tmp_path)
    graph = ProjectGraph()
    graph.update_file(a, a.read_text(), [])
    graph.update_file(b, b.read_text(), [])
    scope = graph.scoped_files(b, 5, 2)
    assert len(scope) == 2
    assert _key(b) in scope


def test_update_file_replaces_edges(tmp_path):
    a, b, _ = _chain(tmp_path)
    graph = ProjectGraph()
    graph.update_file(a, a.read_text(), [])
    graph.update_file(a, "int main();\n", [])
    assert graph.scoped_files(b, 3, 100) == {_key(b)}
    assert graph.scoped_files(a, 3, 100) == {_key(a)}


def test_unknown_seed_returns_itself(tmp_path):
    graph = ProjectGraph()
    seed = tmp_path / "lonely.metal"
    assert graph.scoped_files(seed, 3, 10) == {str(seed)}