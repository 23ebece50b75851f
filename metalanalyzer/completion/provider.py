"""Completion items for Metal Shading Language documents."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from metalanalyzer.completion.builtins import (
    METAL_HEADERS,
    PREPROCESSOR_DIRECTIVES,
    TEXTURE_METHODS,
    BuiltinEntry,
    BuiltinKind,
    CompletionItem,
    CompletionItemKind,
    builtin_to_completion_item,
    detect_function_name,
    first_identifier,
)
from metalanalyzer.completion.context import ContextKind, detect_context

_VECTOR_SWIZZLES = ("x", "y", "z", "w", "xy", "xyz", "xyzw", "xz", "yw", "zw")
_COLOR_SWIZZLES = ("r", "g", "b", "a", "rg", "rgb", "rgba", "rb", "ga", "ba")

_VECTOR_PREFIXES = (
    "float",
    "half",
    "int",
    "uint",
    "short",
    "ushort",
    "char",
    "uchar",
    "bool",
    "vec",
    "pos",
    "color",
    "col",
    "normal",
    "norm",
    "dir",
    "uv",
    "coord",
    "position",
    "direction",
)
_VECTOR_SUFFIXES = ("color", "position", "normal", "coord")

_GENERAL_SORT_PREFIX = {
    BuiltinKind.KEYWORD: "3",
    BuiltinKind.TYPE: "2a",
    BuiltinKind.FUNCTION: "2b",
    BuiltinKind.CONSTANT: "2c",
    BuiltinKind.ATTRIBUTE: "4",
    BuiltinKind.SNIPPET: "5",
}


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class CompletionProvider:
    """Offers completions for the cursor context from a builtin database and the document.

    The labels of keyword entries are the keywords that are never taken for
    user-defined function names.
    """

    def __init__(self, builtins: Iterable[BuiltinEntry] = ()) -> None:
        self._builtins = tuple(builtins)
        self._keywords = frozenset(e.label for e in self._builtins if e.kind is BuiltinKind.KEYWORD)

    def provide(self, text: str | None, position: Any) -> list[CompletionItem]:
        """Return the completion items for ``position`` in ``text``."""
        text = text or ""
        ctx = detect_context(text, position)
        if ctx.kind is ContextKind.ATTRIBUTE:
            return self._attribute_completions()
        if ctx.kind is ContextKind.MEMBER_ACCESS:
            return self._member_completions(ctx.receiver or "")
        if ctx.kind is ContextKind.PREPROCESSOR:
            return self._preprocessor_completions()
        if ctx.kind is ContextKind.INCLUDE:
            return self._include_completions()
        return self._general_completions(text)

    def _attribute_completions(self) -> list[CompletionItem]:
        return [builtin_to_completion_item(e, "0") for e in self._builtins if e.kind is BuiltinKind.ATTRIBUTE]

    def _member_completions(self, receiver: str) -> list[CompletionItem]:
        items: list[CompletionItem] = []
        if self.looks_like_vector_type(receiver):
            items.extend(
                CompletionItem(comp, CompletionItemKind.FIELD, "Vector swizzle", sort_text=f"0_{comp}")
                for comp in _VECTOR_SWIZZLES
            )
            items.extend(
                CompletionItem(comp, CompletionItemKind.FIELD, "Color swizzle", sort_text=f"1_{comp}")
                for comp in _COLOR_SWIZZLES
            )

        lower = receiver.lower()
        if lower.startswith(("tex", "depth")) or "texture" in lower:
            items.extend(
                CompletionItem(name, CompletionItemKind.METHOD, sig, doc, sort_text=f"0_{name}")
                for name, sig, doc in TEXTURE_METHODS
            )
        return items

    @staticmethod
    def _preprocessor_completions() -> list[CompletionItem]:
        return [
            CompletionItem(
                directive,
                CompletionItemKind.KEYWORD,
                "Preprocessor directive",
                doc,
                sort_text=f"{i:02}_{directive}",
            )
            for i, (directive, doc) in enumerate(PREPROCESSOR_DIRECTIVES)
        ]

    @staticmethod
    def _include_completions() -> list[CompletionItem]:
        return [
            CompletionItem(
                header,
                CompletionItemKind.FILE,
                "Metal standard library header",
                doc,
                insert_text=f"<{header}>",
                sort_text=f"{i:02}_{header}",
            )
            for i, (header, doc) in enumerate(METAL_HEADERS)
        ]

    def _general_completions(self, text: str) -> list[CompletionItem]:
        items = [builtin_to_completion_item(e, _GENERAL_SORT_PREFIX[e.kind]) for e in self._builtins]
        items.extend(self._document_symbol_completions(text))
        return items

    def _document_symbol_completions(self, text: str) -> list[CompletionItem]:
        """Scan the document for user structs, enums, type aliases, functions and macros."""
        items: list[CompletionItem] = []
        seen: set[str] = set()

        def add(name: str | None, kind: CompletionItemKind, detail: str, prefix: str) -> None:
            if name and name not in seen:
                seen.add(name)
                items.append(CompletionItem(name, kind, detail, sort_text=f"{prefix}_{name}"))

        for line in _lines(text):
            trimmed = line.strip()
            if trimmed.startswith("struct "):
                add(first_identifier(trimmed[len("struct "):]), CompletionItemKind.STRUCT, "User-defined struct", "1")
            if trimmed.startswith("enum "):
                add(first_identifier(trimmed[len("enum "):]), CompletionItemKind.ENUM, "User-defined enum", "1")
            if trimmed.startswith("typedef "):
                words = trimmed.rstrip(";").split()
                if words:
                    add(words[-1], CompletionItemKind.TYPE_PARAMETER, "Type alias", "1")
            add(
                detect_function_name(trimmed, self._keywords),
                CompletionItemKind.FUNCTION,
                "User-defined function",
                "1",
            )
            if trimmed.startswith("#define "):
                add(first_identifier(trimmed[len("#define "):]), CompletionItemKind.CONSTANT, "Macro", "2")
        return items

    @staticmethod
    def looks_like_vector_type(name: str) -> bool:
        """Guess from a variable name whether it holds a vector (and so takes swizzles)."""
        lower = name.lower()
        return lower.startswith(_VECTOR_PREFIXES) or lower.endswith(_VECTOR_SUFFIXES)