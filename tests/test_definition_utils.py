from pathlib import Path

import pytest

from metalanalyzer.definition.symbols import SymbolDef
from metalanalyzer.definition.utils import (
    IdeLocation,
    IdePosition,
    IdeRange,
    def_to_location,
    is_system_header,
    normalize_type_name,
    paths_match,
)


def _def(name="helper", file="/work/shader.metal", line=10, col=5):
    return SymbolDef(id="0x1", name=name, kind="FunctionDecl", file=file, line=line, col=col, is_definition=True)


@pytest.mark.parametrize(
    ("qual_type", "expected"),
    [
        ("const float *", "float"),
        ("device atomic_int &", "atomic_int"),
        ("float4", "float4"),
        ("metal::texture2d<float, access::sample>", "texture2d"),
        ("const constant Foo *", "Foo"),
    ],
)
def test_normalize_type_name(qual_type, expected):
    assert normalize_type_name(qual_type) == expected


@pytest.mark.parametrize("qual_type", ["", "   ", "*", "& *"])
def test_normalize_type_name_empty_results(qual_type):
    assert normalize_type_name(qual_type) is None


def test_normalize_type_name_is_idempotent():
    once = normalize_type_name("threadgroup struct Particle &")
    assert once == "Particle"
    assert normalize_type_name(once) == once


def test_def_to_location_without_file():
    assert def_to_location(_def(file="")) is None


def test_def_to_location_spans_name():
    definition = _def()
    location = def_to_location(definition)
    assert location.file_path == Path(definition.file)
    assert location.range.start == IdePosition(definition.line - 1, definition.col - 1)
    assert location.range.end.line == location.range.start.line
    assert location.range.end.character - location.range.start.character == len(definition.name)


def test_def_to_location_saturates_zero_positions():
    location = def_to_location(_def(line=0, col=0))
    assert location.range.start == IdePosition(0, 0)


def test_ide_location_accepts_string_path():
    location = IdeLocation("/work/a.metal", IdeRange())
    assert location.file_path == Path("/work/a.metal")
    assert location.range.start == IdePosition(0, 0)


@pytest.mark.parametrize(
    "path",
    [
        "/Applications/Xcode.app/Contents/Developer/Toolchains/XcodeDefault.xctoolchain/metal_stdlib",
        "/Library/Developer/SDKs/MacOSX.sdk/x.h",
        "/usr/include/stdio.h",
        "/opt/lib/clang/17/include/stddef.h",
        "/x/metal/include/metal_math",
        "",
    ],
)
def test_is_system_header(path):
    assert is_system_header(path)


def test_user_file_is_not_system_header():
    assert not is_system_header("/Users/someone/project/shader.metal")


def test_paths_match_identical():
    assert paths_match("/a/b.metal", "/a/b.metal")


def test_paths_match_symlink(tmp_path):
    target = tmp_path / "real.metal"
    target.write_text("")
    link = tmp_path / "sub"
    link.mkdir()
    linked = link / "alias.metal"
    linked.symlink_to(target)
    assert paths_match(str(target), str(linked))


def test_paths_match_falls_back_to_file_name():
    assert paths_match("/tmp/one/shader.metal", "/other/shader.metal")


def test_paths_match_different_names():
    assert not paths_match("/tmp/a.metal", "/tmp/b.metal")


def test_paths_match_empty_against_file():
    assert not paths_match("", "/tmp/a.metal")