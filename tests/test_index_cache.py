import json
import tempfile
from pathlib import Path

from metalanalyzer.definition.ast_index import AstIndex
from metalanalyzer.definition.index_cache import (
    cache_file_path,
    default_cache_dir,
    include_paths_hash,
    load,
    save,
    stable_hash_hex,
)
from metalanalyzer.definition.symbols import RefSite, SymbolDef


def _index(file):
    definition = SymbolDef("0x1", "f", "FunctionDecl", file, 2, 6, True, None, "void ()")
    ref = RefSite(file, 5, 3, 1, "0x1", "f", "FunctionDecl")
    return AstIndex(
        defs=[definition],
        refs=[ref],
        id_to_def={"0x1": 0},
        name_to_defs={"f": [0]},
        target_id_to_refs={"0x1": [0]},
        file_to_defs={file: [0]},
        file_to_refs={file: [0]},
    )


def _source(tmp_path):
    source = tmp_path / "shader.metal"
    source.write_text("void f() {}\n")
    return source


def test_stable_hash_pins():
    assert stable_hash_hex("") == "cbf29ce484222325"
    assert stable_hash_hex("a") == "af63dc4c8601ec8c"


def test_include_paths_hash_joins_with_newlines():
    assert include_paths_hash([]) == stable_hash_hex("")
    assert include_paths_hash(["/a", "/b"]) == stable_hash_hex("/a\n/b")
    assert include_paths_hash(["/a", "/b"]) != include_paths_hash(["/b", "/a"])


def test_save_then_load_round_trip(tmp_path):
    source = _source(tmp_path)
    root = tmp_path / "cache"
    index = _index(str(source))
    save(source, "h1", ["/inc"], index, root=root)
    assert load(source, "h1", ["/inc"], root=root) == index


def test_load_rejects_changed_hash_or_includes(tmp_path):
    source = _source(tmp_path)
    root = tmp_path / "cache"
    save(source, "h1", ["/inc"], _index(str(source)), root=root)
    assert load(source, "h2", ["/inc"], root=root) is None
    assert load(source, "h1", ["/other"], root=root) is None


def test_load_missing_or_corrupt_returns_none(tmp_path):
    source = _source(tmp_path)
    root = tmp_path / "cache"
    assert load(source, "h1", [], root=root) is None
    root.mkdir()
    cache_file_path(root, source).write_text("{broken")
    assert load(source, "h1", [], root=root) is None


def test_schema_version_mismatch_is_rejected(tmp_path):
    source = _source(tmp_path)
    root = tmp_path / "cache"
    save(source, "h1", [], _index(str(source)), root=root)
    cache_file = cache_file_path(root, source)
    payload = json.loads(cache_file.read_text())
    assert payload["source_file"] == str(source.resolve())
    payload["schema_version"] = 2
    cache_file.write_text(json.dumps(payload))
    assert load(source, "h1", [], root=root) is None


def test_cache_file_path_is_stable_and_per_file(tmp_path):
    source = _source(tmp_path)
    other = tmp_path / "other.metal"
    other.write_text("")
    first = cache_file_path(tmp_path, source)
    assert first == cache_file_path(tmp_path, str(source))
    assert first.parent == tmp_path
    assert first.name == stable_hash_hex(str(source.resolve())) + ".json"
    assert first != cache_file_path(tmp_path, other)


def test_default_cache_dir_uses_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_cache_dir() == tmp_path / ".metal-analyzer" / "index-cache"
    monkeypatch.delenv("HOME")
    assert default_cache_dir() == Path(tempfile.gettempdir()) / "metal-analyzer-index-cache"