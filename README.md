# metalanalyzer

Building blocks for editor tooling around the Metal Shading Language.

## What it provides

- **Settings** (`metalanalyzer.config`)
  - `ServerSettings` in `metalanalyzer.config.settings` holds typed settings with defaults. It has one category each for formatting, diagnostics, indexing, compiler, logging and thread pool.
  - `ServerSettings.from_lsp_payload` and `merged_with_payload` merge LSP-style JSON payloads into it. A payload may be given as is or nested under the `"metal-analyzer"` key. Values are clamped and trimmed after the merge.
  - A candidate object with values of the wrong type is skipped whole.
  - `metalanalyzer.config.schema` produces the matching JSON-schema properties (`generate_package_json_properties`) and Markdown documentation (`generate_configuration_markdown`).
- **Definition lookup** (`metalanalyzer.definition`)
  - `run_ast_dump` in `ast_dump` runs `xcrun metal` to dump a document's AST as JSON.
  - `parse_ast` in `clang_nodes` and `build_index` in `indexer` turn that dump into an `AstIndex` of symbol definitions and reference sites.
  - Lookups over the index:
    - precise lookup by reference site (`precise_lookup`);
    - ranked by-name fallback (`fallback_lookup`, `symbol_rank`);
    - an include graph (`ProjectGraph`);
    - a project-wide index (`ProjectIndex`);
    - search of SDK headers for builtin symbols (`system_lookup`).
  - `index_cache` stores indices on disk as JSON.
  - `GotoDefPerf` keeps request counters.
- **Completion** (`metalanalyzer.completion`)
  - `detect_context` classifies the cursor position as attribute, member access, preprocessor, include or general.
  - `CompletionProvider` builds completion items for that context. It uses the builtin entries it is given, vector/color swizzles, texture methods, preprocessor directives, Metal headers, and symbols declared in the document.

## Installation

```
pip install .
```

Running the test suite:

```
pip install ".[test]"
pytest
```

## Examples

Merging settings from an LSP payload:

```python
from metalanalyzer.config.settings import ServerSettings

settings = ServerSettings.from_lsp_payload(
    {"metal-analyzer": {"diagnostics": {"debounceMs": 1}, "compiler": {"platform": "ios"}}}
)
settings.diagnostics.debounce_ms   # clamped to 50
```

Generating settings documentation:

```python
from metalanalyzer.config.schema import generate_configuration_markdown

print(generate_configuration_markdown())
```

Completing at a cursor. A position is any object with a zero-based `line` and a `character`, for example `IdePosition`:

```python
from metalanalyzer.completion.provider import CompletionProvider
from metalanalyzer.definition.utils import IdePosition

items = CompletionProvider().provide("#include <", IdePosition(0, 10))
[item.label for item in items][:2]   # ['metal_stdlib', 'metal_compute']
```

## What it does not do

- **No language server or command-line program.** The package is a library only: it speaks no LSP over stdio and installs no command.
- **No builtin-symbol database.** `CompletionProvider` and the ranking functions take builtin entries or names as arguments; none are bundled.
- **No formatting.** Formatting exists only as settings; the package never runs a formatter.
- **No compiler diagnostics.** Diagnostics likewise exist only as settings; the package does not compile documents to report errors.
- **Needs the Metal toolchain to index.** Producing an AST index requires the Metal toolchain (`xcrun metal`) on macOS.