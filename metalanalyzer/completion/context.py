"""Syntactic context at the cursor, used to choose which completions to offer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ContextKind(Enum):
    ATTRIBUTE = "attribute"
    MEMBER_ACCESS = "member_access"
    PREPROCESSOR = "preprocessor"
    INCLUDE = "include"
    GENERAL = "general"


@dataclass(frozen=True)
class CursorContext:
    """Context kind; ``receiver`` holds the expression before the dot for member access."""

    kind: ContextKind
    receiver: str | None = None


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def detect_context(text: str, position: Any) -> CursorContext:
    """Classify the cursor position from the text of its line up to the cursor."""
    lines = _lines(text)
    if position.line >= len(lines):
        return CursorContext(ContextKind.GENERAL)

    prefix = lines[position.line][: position.character]
    trimmed = prefix.lstrip()

    if trimmed.startswith("#include"):
        return CursorContext(ContextKind.INCLUDE)
    if trimmed.startswith("#"):
        return CursorContext(ContextKind.PREPROCESSOR)
    if prefix.count("[[") > prefix.count("]]"):
        return CursorContext(ContextKind.ATTRIBUTE)

    trimmed_end = prefix.rstrip()
    if trimmed_end.endswith("."):
        before_dot = trimmed_end[:-1]
        start = len(before_dot)
        while start > 0 and (before_dot[start - 1].isalnum() or before_dot[start - 1] == "_"):
            start -= 1
        receiver = before_dot[start:]
        if receiver:
            return CursorContext(ContextKind.MEMBER_ACCESS, receiver)

    return CursorContext(ContextKind.GENERAL)