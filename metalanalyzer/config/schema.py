"""Configuration schema: editor settings properties and markdown documentation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from metalanalyzer.config.diagnostics import MAX_DIAGNOSTIC_DEBOUNCE_MS, MIN_DIAGNOSTIC_DEBOUNCE_MS
from metalanalyzer.config.indexing import (
    MAX_INDEXING_CONCURRENCY,
    MAX_MAX_FILE_SIZE_KB,
    MAX_PROJECT_GRAPH_DEPTH,
    MAX_PROJECT_GRAPH_MAX_NODES,
    MIN_INDEXING_CONCURRENCY,
    MIN_MAX_FILE_SIZE_KB,
    MIN_PROJECT_GRAPH_DEPTH,
    MIN_PROJECT_GRAPH_MAX_NODES,
)
from metalanalyzer.config.thread_pool import (
    MAX_FORMATTING_THREADS,
    MAX_WORKER_THREADS,
    MIN_FORMATTING_THREADS,
)

KEY_PREFIX = "metal-analyzer"

_SECTION_TITLES = {
    "formatting": "Formatting",
    "diagnostics": "Diagnostics",
    "indexing": "Indexing",
    "compiler": "Compiler",
    "logging": "Logging",
    "threadPool": "Thread Pool",
}


class SchemaKind(Enum):
    """The JSON Schema types a setting can have."""

    BOOL = "bool"
    STRING = "string"
    INTEGER = "integer"
    STRING_ENUM = "string_enum"
    STRING_ARRAY = "string_array"


@dataclass(frozen=True)
class SchemaType:
    """A setting's type, with bounds for integers and choices for enums."""

    kind: SchemaKind
    minimum: int | None = None
    maximum: int | None = None
    values: tuple[str, ...] = ()

    @classmethod
    def boolean(cls) -> SchemaType:
        return cls(SchemaKind.BOOL)

    @classmethod
    def string(cls) -> SchemaType:
        return cls(SchemaKind.STRING)

    @classmethod
    def integer(cls, minimum: int | None = None, maximum: int | None = None) -> SchemaType:
        return cls(SchemaKind.INTEGER, minimum=minimum, maximum=maximum)

    @classmethod
    def string_enum(cls, values: Iterable[str]) -> SchemaType:
        return cls(SchemaKind.STRING_ENUM, values=tuple(values))

    @classmethod
    def string_array(cls) -> SchemaType:
        return cls(SchemaKind.STRING_ARRAY)


@dataclass
class SchemaField:
    """One entry of the configuration schema."""

    key: str
    description: str
    schema_type: SchemaType
    default: Any = field(default=None)

    def to_schema_value(self) -> dict[str, Any]:
        """Return the JSON Schema object describing this setting."""
        obj: dict[str, Any] = {"markdownDescription": self.description, "default": self.default}
        kind = self.schema_type.kind
        if kind is SchemaKind.BOOL:
            obj["type"] = "boolean"
        elif kind is SchemaKind.STRING:
            obj["type"] = "string"
        elif kind is SchemaKind.INTEGER:
            obj["type"] = "number"
            if self.schema_type.minimum is not None:
                obj["minimum"] = self.schema_type.minimum
            if self.schema_type.maximum is not None:
                obj["maximum"] = self.schema_type.maximum
        elif kind is SchemaKind.STRING_ENUM:
            obj["type"] = "string"
            obj["enum"] = list(self.schema_type.values)
        else:
            obj["type"] = "array"
            obj["items"] = {"type": "string"}
        return obj

    def to_markdown(self) -> str:
        return f"- `{KEY_PREFIX}.{self.key}` - {self.description}"


def schema_fields() -> list[SchemaField]:
    """Return the schema field of every setting, grouped by section."""
    return [
        SchemaField(
            "formatting.enable",
            "Enable LSP-backed document formatting.",
            SchemaType.boolean(),
            True,
        ),
        SchemaField(
            "formatting.command",
            "Formatting executable used by metal-analyzer.",
            SchemaType.string(),
            "clang-format",
        ),
        SchemaField(
            "formatting.args",
            "Additional arguments passed to the formatting command.",
            SchemaType.string_array(),
            [],
        ),
        SchemaField(
            "diagnostics.onType",
            "Run diagnostics while typing.",
            SchemaType.boolean(),
            True,
        ),
        SchemaField(
            "diagnostics.onSave",
            "Run diagnostics when a document is saved.",
            SchemaType.boolean(),
            True,
        ),
        SchemaField(
            "diagnostics.debounceMs",
            "Debounce delay for on-type diagnostics and background indexing work.",
            SchemaType.integer(MIN_DIAGNOSTIC_DEBOUNCE_MS, MAX_DIAGNOSTIC_DEBOUNCE_MS),
            500,
        ),
        SchemaField(
            "diagnostics.scope",
            "Diagnostics scope. `openFiles` analyzes documents as they are opened/edited/saved. "
            "`workspace` also analyzes all `.metal` files in the workspace at startup and when "
            "settings change.",
            SchemaType.string_enum(["openFiles", "workspace"]),
            "openFiles",
        ),
        SchemaField(
            "indexing.enable",
            "Enable background workspace indexing.",
            SchemaType.boolean(),
            True,
        ),
        SchemaField(
            "indexing.concurrency",
            "Maximum number of concurrent background indexing jobs.",
            SchemaType.integer(MIN_INDEXING_CONCURRENCY, MAX_INDEXING_CONCURRENCY),
            1,
        ),
        SchemaField(
            "indexing.maxFileSizeKb",
            "Skip workspace files larger than this size during background indexing.",
            SchemaType.integer(MIN_MAX_FILE_SIZE_KB, MAX_MAX_FILE_SIZE_KB),
            512,
        ),
        SchemaField(
            "indexing.projectGraphDepth",
            "Maximum include-graph traversal depth for scoped cross-file go-to-definition fallback.",
            SchemaType.integer(MIN_PROJECT_GRAPH_DEPTH, MAX_PROJECT_GRAPH_DEPTH),
            3,
        ),
        SchemaField(
            "indexing.projectGraphMaxNodes",
            "Maximum number of graph nodes considered during scoped cross-file go-to-definition fallback.",
            SchemaType.integer(MIN_PROJECT_GRAPH_MAX_NODES, MAX_PROJECT_GRAPH_MAX_NODES),
            256,
        ),
        SchemaField(
            "indexing.excludePaths",
            "Workspace paths to skip during background scanning. Relative paths are resolved from "
            "each workspace root; absolute paths are also supported. Excluded folders are skipped "
            "for both indexing and workspace-scope diagnostics.",
            SchemaType.string_array(),
            [],
        ),
        SchemaField(
            "compiler.includePaths",
            "Extra include directories passed to the Metal compiler.",
            SchemaType.string_array(),
            [],
        ),
        SchemaField(
            "compiler.extraFlags",
            "Extra compiler flags passed to `xcrun metal`.",
            SchemaType.string_array(),
            [],
        ),
        SchemaField(
            "compiler.platform",
            "Target platform for Metal diagnostics. Determines which platform define "
            "(e.g. `__METAL_MACOS__`) is injected unless platform flags are already present "
            "in extra flags.",
            SchemaType.string_enum(["macos", "ios", "tvos", "watchos", "xros"]),
            "macos",
        ),
        SchemaField(
            "logging.level",
            "Runtime logging verbosity for metal-analyzer.",
            SchemaType.string_enum(["error", "warn", "info", "debug", "trace"]),
            "info",
        ),
        SchemaField(
            "threadPool.workerThreads",
            "Worker thread pool size. `0` uses `available_parallelism`. Requires restart.",
            SchemaType.integer(0, MAX_WORKER_THREADS),
            0,
        ),
        SchemaField(
            "threadPool.formattingThreads",
            "Formatting thread pool size. Requires restart.",
            SchemaType.integer(MIN_FORMATTING_THREADS, MAX_FORMATTING_THREADS),
            1,
        ),
    ]


def generate_package_json_properties() -> dict[str, Any]:
    """Return the ``properties`` object of an editor extension's configuration section."""
    properties: dict[str, Any] = {
        f"{KEY_PREFIX}.serverPath": {
            "type": "string",
            "default": "metal-analyzer",
            "markdownDescription": "Path to the metal-analyzer binary. The default value uses PATH first, "
            "then auto-downloads the latest macOS release binary.",
        }
    }
    for schema_field in schema_fields():
        properties[f"{KEY_PREFIX}.{schema_field.key}"] = schema_field.to_schema_value()
    return properties


def generate_configuration_markdown() -> str:
    """Return markdown documentation of every setting, with one heading per section."""
    parts: list[str] = []
    current_section = ""
    for schema_field in schema_fields():
        section = schema_field.key.split(".", 1)[0]
        if section != current_section:
            current_section = section
            title = _SECTION_TITLES.get(section, section)
            parts.append(f"\n## {title}\n\n")
        parts.append(schema_field.to_markdown())
        parts.append("\n")
    return "".join(parts)