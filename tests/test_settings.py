from metalanalyzer.config.compiler import CompilerPlatform
from metalanalyzer.config.diagnostics import MIN_DIAGNOSTIC_DEBOUNCE_MS, DiagnosticsScope
from metalanalyzer.config.formatting import FormattingSettings
from metalanalyzer.config.indexing import MIN_INDEXING_CONCURRENCY, MIN_MAX_FILE_SIZE_KB
from metalanalyzer.config.logging_settings import LogLevel
from metalanalyzer.config.settings import ServerSettings


def test_parses_namespaced_payload():
    payload = {
        "metal-analyzer": {
            "formatting": {"enable": False, "command": "xcrun", "args": ["clang-format"]},
            "diagnostics": {"debounceMs": 1200, "scope": "workspace"},
            "indexing": {
                "concurrency": 4,
                "maxFileSizeKb": 256,
                "excludePaths": ["external/vendor-shaders", " /tmp/generated "],
            },
            "compiler": {"includePaths": ["/tmp/includes"], "extraFlags": ["-DMETAL"], "platform": "ios"},
            "logging": {"level": "debug"},
        }
    }
    settings = ServerSettings.from_lsp_payload(payload)
    assert not settings.formatting.enable
    assert settings.formatting.command == "xcrun"
    assert settings.formatting.args == ["clang-format"]
    assert settings.diagnostics.debounce_ms == 1200
    assert settings.diagnostics.scope is DiagnosticsScope.WORKSPACE
    assert settings.indexing.concurrency == 4
    assert settings.indexing.max_file_size_kb == 256
    assert settings.indexing.exclude_paths == ["external/vendor-shaders", "/tmp/generated"]
    assert settings.compiler.include_paths == ["/tmp/includes"]
    assert settings.compiler.extra_flags == ["-DMETAL"]
    assert settings.compiler.platform is CompilerPlatform.IOS
    assert settings.logging.level is LogLevel.DEBUG


def test_parses_direct_payload():
    payload = {
        "diagnostics": {"onType": False, "onSave": True, "scope": "openFiles"},
        "indexing": {"enable": False},
    }
    settings = ServerSettings.from_lsp_payload(payload)
    assert not settings.diagnostics.on_type
    assert settings.diagnostics.on_save
    assert settings.diagnostics.scope is DiagnosticsScope.OPEN_FILES
    assert not settings.indexing.enable


def test_clamps_numeric_values():
    payload = {"diagnostics": {"debounceMs": 1}, "indexing": {"concurrency": 0, "maxFileSizeKb": 1}}
    settings = ServerSettings.from_lsp_payload(payload)
    assert settings.diagnostics.debounce_ms == MIN_DIAGNOSTIC_DEBOUNCE_MS
    assert settings.indexing.concurrency == MIN_INDEXING_CONCURRENCY
    assert settings.indexing.max_file_size_kb == MIN_MAX_FILE_SIZE_KB


def test_preserves_existing_values_when_payload_is_partial():
    base = ServerSettings(formatting=FormattingSettings(command="custom-format"))
    merged = base.merged_with_payload({"diagnostics": {"debounceMs": 900}})
    assert merged.formatting.command == "custom-format"
    assert merged.diagnostics.debounce_ms == 900


def test_merge_does_not_modify_base():
    base = ServerSettings()
    base.merged_with_payload({"formatting": {"enable": False}})
    assert base.formatting.enable is True


def test_diagnostics_scope_defaults_to_open_files():
    settings = ServerSettings.from_lsp_payload(None)
    assert settings.diagnostics.scope is DiagnosticsScope.OPEN_FILES


def test_compiler_platform_normalizes_case_and_whitespace():
    settings = ServerSettings.from_lsp_payload({"compiler": {"platform": "  MaCoS  "}})
    assert settings.compiler.platform is CompilerPlatform.MACOS


def test_compiler_platform_falls_back_to_macos_for_invalid_values():
    settings = ServerSettings.from_lsp_payload({"compiler": {"platform": "nonexistent"}})
    assert settings.compiler.platform is CompilerPlatform.MACOS


def test_indexing_exclude_paths_are_trimmed_and_deduplicated():
    payload = {
        "indexing": {
            "excludePaths": ["", "  external/vendor-shaders  ", "external/vendor-shaders", "/tmp/generated"]
        }
    }
    settings = ServerSettings.from_lsp_payload(payload)
    assert settings.indexing.exclude_paths == ["external/vendor-shaders", "/tmp/generated"]


def test_malformed_candidate_is_skipped_whole():
    payload = {"formatting": {"enable": False}, "diagnostics": {"debounceMs": "fast"}}
    settings = ServerSettings.from_lsp_payload(payload)
    assert settings.formatting.enable is True
    assert settings == ServerSettings()


def test_valid_section_applies_when_top_level_is_malformed():
    payload = {"logging": {"level": "loud"}, "metal-analyzer": {"logging": {"level": "trace"}}}
    settings = ServerSettings.from_lsp_payload(payload)
    assert settings.logging.level is LogLevel.TRACE


def test_non_object_payload_leaves_defaults():
    assert ServerSettings.from_lsp_payload(["formatting"]) == ServerSettings()