"""Aggregate server settings built from LSP configuration payloads."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from metalanalyzer.config.compiler import CompilerSettings
from metalanalyzer.config.diagnostics import DiagnosticsSettings
from metalanalyzer.config.formatting import FormattingSettings
from metalanalyzer.config.indexing import IndexingSettings
from metalanalyzer.config.logging_settings import LoggingSettings
from metalanalyzer.config.thread_pool import ThreadPoolSettings

SETTINGS_SECTION_KEY = "metal-analyzer"

_CATEGORIES = (
    ("formatting", "formatting"),
    ("diagnostics", "diagnostics"),
    ("indexing", "indexing"),
    ("compiler", "compiler"),
    ("logging", "logging"),
    ("threadPool", "thread_pool"),
)


@dataclass
class ServerSettings:
    """All settings categories of the server."""

    formatting: FormattingSettings = field(default_factory=FormattingSettings)
    diagnostics: DiagnosticsSettings = field(default_factory=DiagnosticsSettings)
    indexing: IndexingSettings = field(default_factory=IndexingSettings)
    compiler: CompilerSettings = field(default_factory=CompilerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    thread_pool: ThreadPoolSettings = field(default_factory=ThreadPoolSettings)

    @classmethod
    def from_lsp_payload(cls, payload: Any = None) -> ServerSettings:
        """Build settings from initialization options or a configuration change."""
        settings = cls()
        if payload is not None:
            settings = settings.merged_with_payload(payload)
        return settings

    def merged_with_payload(self, payload: Any) -> ServerSettings:
        """Return a copy with the payload applied, both bare and under the section key.

        A candidate object that does not fit the settings shape is skipped whole.
        """
        merged = copy.deepcopy(self)
        for candidate in _payload_candidates(payload):
            attempt = copy.deepcopy(merged)
            try:
                attempt._apply_patch(candidate)
            except (TypeError, ValueError):
                continue
            merged = attempt
        merged._normalize()
        return merged

    def _apply_patch(self, patch: Any) -> None:
        if not isinstance(patch, Mapping):
            raise TypeError("settings payload must be an object")
        for key, attribute in _CATEGORIES:
            value = patch.get(key)
            if value is not None:
                getattr(self, attribute).apply_patch(value)

    def _normalize(self) -> None:
        self.formatting.normalize()
        self.diagnostics.normalize()
        self.indexing.normalize()
        self.compiler.normalize()
        self.thread_pool.normalize()


def _payload_candidates(payload: Any) -> list[Any]:
    candidates = [payload]
    if isinstance(payload, Mapping) and SETTINGS_SECTION_KEY in payload:
        candidates.append(payload[SETTINGS_SECTION_KEY])
    return candidates