"""Low-level helpers for walking JavaScript source text."""

from __future__ import annotations

from bisect import bisect_right
from typing import List, Tuple

IDENTIFIER_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_$")
IDENTIFIER_CHARS = IDENTIFIER_START | frozenset("0123456789")

_PAIRS = {"(": ")", "[": "]", "{": "}", "<": ">"}

# Characters after which a `/` starts a regular expression rather than a division.
_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%<>~^")


class ScanError(ValueError):
    """Raised when the source ends inside a string, comment or bracket pair."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(message)
        self.offset = offset


def skip_string(source: str, index: int) -> int:
    """Return the index just past the quoted string starting at ``index``."""
    quote = source[index]
    position = index + 1
    length = len(source)
    while position < length:
        char = source[position]
        if char == "\\":
            position += 2
            continue
        if char == quote:
            return position + 1
        if char == "\n" and quote != "`":
            break
        if quote == "`" and char == "$" and source.startswith("${", position):
            position = skip_balanced(source, position + 1)
            continue
        position += 1
    raise ScanError("Unterminated string literal", index)


def skip_comment(source: str, index: int) -> int:
    """Return the index just past the comment starting at ``index``."""
    if source.startswith("//", index):
        end = source.find("\n", index)
        return len(source) if end == -1 else end
    end = source.find("*/", index + 2)
    if end == -1:
        raise ScanError("Unterminated comment", index)
    return end + 2


def skip_regex(source: str, index: int) -> int:
    """Return the index just past the regular expression literal at ``index``."""
    position = index + 1
    in_class = False
    length = len(source)
    while position < length:
        char = source[position]
        if char == "\\":
            position += 2
            continue
        if char == "\n":
            break
        if char == "[":
            in_class = True
        elif char == "]":
            in_class = False
        elif char == "/" and not in_class:
            position += 1
            while position < length and source[position] in IDENTIFIER_CHARS:
                position += 1
            return position
        position += 1
    raise ScanError("Unterminated regular expression", index)


def previous_significant(source: str, index: int) -> Tuple[str, str]:
    """Return the last non-space character before ``index`` and the word it ends."""
    position = index - 1
    while position >= 0 and source[position].isspace():
        position -= 1
    if position < 0:
        return "", ""
    char = source[position]
    if char not in IDENTIFIER_CHARS:
        return char, ""
    end = position + 1
    while position >= 0 and source[position] in IDENTIFIER_CHARS:
        position -= 1
    return char, source[position + 1 : end]


def regex_allowed(source: str, index: int) -> bool:
    char, word = previous_significant(source, index)
    if not char:
        return True
    if word:
        return word in {"return", "typeof", "case", "do", "else", "in", "of", "void", "yield", "await"}
    return char in _REGEX_PRECEDERS


def skip_balanced(source: str, index: int) -> int:
    """Return the index just past the bracket group opened at ``index``.

    Strings, template literals, comments and regular expressions inside the
    group are skipped so their contents never affect the nesting depth.
    """
    opener = source[index]
    closer = _PAIRS[opener]
    depth = 0
    position = index
    length = len(source)
    while position < length:
        char = source[position]
        if char in "'\"`":
            position = skip_string(source, position)
            continue
        if source.startswith("//", position) or source.startswith("/*", position):
            position = skip_comment(source, position)
            continue
        if char == "/" and opener != "<" and regex_allowed(source, position):
            position = skip_regex(source, position)
            continue
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return position + 1
        position += 1
    raise ScanError(f"Expected {closer!r} to match {opener!r}", index)


def literal_spans(source: str) -> List[Tuple[int, int]]:
    """Return sorted ``(start, end)`` offsets of strings, comments and regex literals.

    Text the scanner cannot close (an apostrophe in JSX text, say) is read as
    ordinary code.
    """
    spans: List[Tuple[int, int]] = []
    position = 0
    length = len(source)
    while position < length:
        char = source[position]
        try:
            if char in "'\"`":
                end = skip_string(source, position)
            elif source.startswith("//", position) or source.startswith("/*", position):
                end = skip_comment(source, position)
            elif char == "/" and regex_allowed(source, position):
                end = skip_regex(source, position)
            else:
                position += 1
                continue
        except ScanError:
            position += 1
            continue
        spans.append((position, end))
        position = end
    return spans


def in_spans(spans: List[Tuple[int, int]], offset: int) -> bool:
    """Whether ``offset`` falls inside one of the sorted ``spans``."""
    index = bisect_right(spans, (offset, float("inf"))) - 1
    return index >= 0 and spans[index][0] <= offset < spans[index][1]


def line_and_column(source: str, offset: int) -> Tuple[int, int, str]:
    """Return the 1-based line, 0-based column and line text for ``offset``."""
    offset = max(0, min(offset, len(source)))
    line_start = source.rfind("\n", 0, offset) + 1
    line_end = source.find("\n", offset)
    if line_end == -1:
        line_end = len(source)
    line = source.count("\n", 0, offset) + 1
    return line, offset - line_start, source[line_start:line_end]


__all__ = [
    "IDENTIFIER_CHARS",
    "IDENTIFIER_START",
    "ScanError",
    "in_spans",
    "line_and_column",
    "literal_spans",
    "previous_significant",
    "regex_allowed",
    "skip_balanced",
    "skip_comment",
    "skip_regex",
    "skip_string",
]
