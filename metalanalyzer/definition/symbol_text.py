"""Text scanning around the cursor: call arguments, member receivers and qualifiers."""

from __future__ import annotations

from typing import Any


def is_ident_char(ch: str) -> bool:
    """Return True for ASCII letters, digits and underscore."""
    return ch == "_" or (ch.isascii() and ch.isalnum())


def _line_at(source: str, line_no: int) -> str | None:
    lines = source.split("\n")
    if source.endswith("\n"):
        lines.pop()
    if not 0 <= line_no < len(lines):
        return None
    line = lines[line_no]
    return line[:-1] if line.endswith("\r") else line


def _char_index_for_utf16(line: str, character: int) -> int:
    units = 0
    for index, ch in enumerate(line):
        if units >= character:
            return index
        units += 2 if ord(ch) > 0xFFFF else 1
    return len(line)


def line_chars_and_cursor(source: str, position: Any) -> tuple[str, int] | None:
    """Return the cursor's line and its character index, clamped to the last character.

    ``position`` has a zero-based ``line`` and a UTF-16 ``character`` offset.
    Returns None for a missing or empty line.
    """
    line = _line_at(source, position.line)
    if not line:
        return None
    cursor = _char_index_for_utf16(line, position.character)
    if cursor >= len(line):
        cursor = len(line) - 1
    return line, cursor


def _word_at(source: str, position: Any, word: str) -> tuple[str, int, int] | None:
    found = line_chars_and_cursor(source, position)
    if found is None:
        return None
    chars, cursor = found
    start = cursor
    while start > 0 and is_ident_char(chars[start - 1]):
        start -= 1
    end = cursor
    while end < len(chars) and is_ident_char(chars[end]):
        end += 1
    if chars[start:end] != word:
        return None
    return chars, start, end


def _skip_space_back(chars: str, index: int) -> int:
    while index > 0 and chars[index - 1].isspace():
        index -= 1
    return index


def _identifier_ending_at(chars: str, end: int) -> str | None:
    start = end
    while start > 0 and is_ident_char(chars[start - 1]):
        start -= 1
    return chars[start:end] if start != end else None


def extract_call_argument_count(source: str, position: Any, word: str) -> int | None:
    """Count the arguments of the call ``word(...)`` under the cursor, if on one line."""
    found = _word_at(source, position, word)
    if found is None:
        return None
    chars, _, end = found

    index = end
    while index < len(chars) and chars[index].isspace():
        index += 1
    if index >= len(chars) or chars[index] != "(":
        return None

    depth = 0
    saw_argument = False
    commas = 0
    for ch in chars[index:]:
        if ch == "(":
            depth += 1
        elif ch == ")":
            if depth == 0:
                return None
            depth -= 1
            if depth == 0:
                return commas + 1 if saw_argument else 0
        elif ch == "," and depth == 1:
            commas += 1
        elif depth == 1 and not ch.isspace():
            saw_argument = True
    return None


def extract_member_receiver_identifier(source: str, position: Any, word: str) -> str | None:
    """Return ``obj`` for a cursor on ``word`` in ``obj.word`` or ``obj->word``."""
    found = _word_at(source, position, word)
    if found is None:
        return None
    chars, start, _ = found

    index = _skip_space_back(chars, start)
    if index == 0:
        return None
    if chars[index - 1] == ".":
        operator_start = index - 1
    elif index >= 2 and chars[index - 1] == ">" and chars[index - 2] == "-":
        operator_start = index - 2
    else:
        return None

    base_end = _skip_space_back(chars, operator_start)
    if base_end == 0:
        return None
    return _identifier_ending_at(chars, base_end)


def extract_namespace_qualifier_before_word(source: str, position: Any, word: str) -> str | None:
    """Return ``ns`` for a cursor on ``word`` in ``ns::word``."""
    found = _word_at(source, position, word)
    if found is None:
        return None
    chars, start, _ = found

    index = _skip_space_back(chars, start)
    if index < 2 or chars[index - 1] != ":" or chars[index - 2] != ":":
        return None

    qualifier_end = _skip_space_back(chars, index - 2)
    if qualifier_end == 0:
        return None
    return _identifier_ending_at(chars, qualifier_end)