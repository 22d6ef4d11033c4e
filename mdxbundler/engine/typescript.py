"""Type erasure for TypeScript sources.

Erased text is replaced by spaces (newlines are kept) so that line and column
numbers recorded for imports stay valid for the original file.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .scanning import ScanError, skip_balanced, skip_comment, skip_string

_TYPE_ONLY_IMPORT = re.compile(
    r"""^[ \t]*import\s+type\s+[^'";]*?\bfrom\s*(['"])[^'"\n]*\1[ \t]*;?""", re.M
)
_TYPE_ONLY_EXPORT = re.compile(
    r"""^[ \t]*export\s+type\s*\{[^}]*\}(?:\s*from\s*(['"])[^'"\n]*\1)?[ \t]*;?""", re.M
)
_INLINE_TYPE_SPECIFIER = re.compile(r"(?<=[{,])(\s*)type\s+[\w$]+(?:\s+as\s+[\w$]+)?\s*,?")
_IMPORT_BRACES = re.compile(r"^[ \t]*(?:import|export)\s+[^'\";]*?\{[^}]*\}", re.M)
_TYPE_ALIAS = re.compile(
    r"^[ \t]*(?:export\s+)?(?:declare\s+)?type\s+[\w$]+\s*(?:<[^=\n]*>)?\s*=", re.M
)
_INTERFACE = re.compile(
    r"^[ \t]*(?:export\s+)?(?:declare\s+)?interface\s+[\w$]+[^{]*\{", re.M
)
_DECLARE = re.compile(r"^[ \t]*(?:export\s+)?declare\s+", re.M)
_VARIABLE_ANNOTATION = re.compile(r"\b(?:const|let|var)\s+[\w$]+\s*(!?:)")
_FUNCTION_GENERICS = re.compile(r"\bfunction\s*\*?\s*[\w$]*\s*(<)")
_FUNCTION_KEYWORD = re.compile(r"\bfunction\s*\*?\s*[\w$]*\s*(?:<[^()]*>)?\s*$")
_AS_CONST = re.compile(r"\s+as\s+const\b")
_SATISFIES = re.compile(r"\s+satisfies\s+[\w$.]+(?:<[^>\n]*>)?")
_IDENTIFIER_TAIL = re.compile(r"[\w$]+\??$")


def erase_types(source: str) -> str:
    """Return ``source`` with TypeScript-only syntax blanked out."""
    buffer = list(source)

    for pattern in (_TYPE_ONLY_IMPORT, _TYPE_ONLY_EXPORT):
        for match in pattern.finditer(source):
            _blank(buffer, match.start(), match.end())

    for match in _IMPORT_BRACES.finditer(source):
        for inner in _INLINE_TYPE_SPECIFIER.finditer(match.group(0)):
            start = match.start() + inner.start() + len(inner.group(1))
            _blank(buffer, start, match.start() + inner.end())

    for match in _INTERFACE.finditer(source):
        end = skip_balanced(source, match.end() - 1)
        _blank(buffer, match.start(), end)

    for match in _TYPE_ALIAS.finditer(source):
        _blank(buffer, match.start(), _statement_end(source, match.end()))

    for match in _DECLARE.finditer(source):
        _blank(buffer, match.start(), _statement_end(source, match.end()))

    for match in _VARIABLE_ANNOTATION.finditer(source):
        start = match.start(1)
        end = _type_end(source, match.end(1), stops="=;,)\n")
        _blank(buffer, start, end)

    for match in _FUNCTION_GENERICS.finditer(source):
        start = match.start(1)
        _blank(buffer, start, _angle_end(source, start))

    for start, end in _parameter_groups(source):
        _erase_parameters(source, buffer, start, end)

    for pattern in (_AS_CONST, _SATISFIES):
        for match in pattern.finditer(source):
            _blank(buffer, match.start(), match.end())

    return "".join(buffer)


def _blank(buffer: List[str], start: int, end: int) -> None:
    for index in range(start, min(end, len(buffer))):
        if buffer[index] != "\n":
            buffer[index] = " "


def _statement_end(source: str, index: int) -> int:
    """End of a type-level statement: a `;` or a newline not continued by `|`/`&`."""
    position = index
    length = len(source)
    while position < length:
        char = source[position]
        if char in "'\"`":
            position = skip_string(source, position)
            continue
        if char in "([{<":
            position = _skip_group(source, position)
            continue
        if char == ";":
            return position + 1
        if char == "\n":
            rest = source[position + 1 :].lstrip(" \t")
            if not rest.startswith(("|", "&")) and source[index:position].strip():
                return position
        position += 1
    return length


def _type_end(
    source: str,
    index: int,
    *,
    stops: str,
    arrow_stop: bool = False,
    limit: Optional[int] = None,
) -> int:
    """Index where a type annotation starting at ``index`` ends.

    With ``arrow_stop`` a top-level `=>` ends the type (return type position);
    otherwise it is read as part of a function type.
    """
    position = index
    length = len(source) if limit is None else limit
    while position < length:
        char = source[position]
        if char in "'\"`":
            try:
                position = skip_string(source, position)
            except ScanError:
                return position
            continue
        if char == "=" and source.startswith("=>", position):
            if arrow_stop:
                return position
            position += 2
            continue
        if char in stops:
            pending = source[index:position].strip()
            if char == "\n" and not pending:
                position += 1
                continue
            # A leading `{` opens an object type; after a type it opens the body.
            if not (char == "{" and not pending):
                return position
        if char in "([{<":
            position = _skip_group(source, position)
            continue
        position += 1
    return length


def _skip_group(source: str, index: int) -> int:
    if source[index] == "<":
        return _angle_end(source, index)
    try:
        return skip_balanced(source, index)
    except ScanError:
        return index + 1


def _angle_end(source: str, index: int) -> int:
    depth = 0
    position = index
    while position < len(source):
        char = source[position]
        if char == "<":
            depth += 1
        elif char == ">" and source[position - 1] != "=":
            depth -= 1
            if depth == 0:
                return position + 1
        elif char in "([{" and depth > 0:
            try:
                position = skip_balanced(source, position)
            except ScanError:
                break
            continue
        elif char in ";)}]":
            break
        position += 1
    return index + 1


def _parameter_groups(source: str):
    """Yield ``(open, close)`` offsets of parenthesised parameter lists."""
    position = 0
    length = len(source)
    while position < length:
        char = source[position]
        if char in "'\"`":
            try:
                position = skip_string(source, position)
            except ScanError:
                position += 1
            continue
        if source.startswith("//", position) or source.startswith("/*", position):
            position = skip_comment(source, position)
            continue
        if char == "(":
            try:
                end = skip_balanced(source, position)
            except ScanError:
                position += 1
                continue
            if _is_parameter_list(source, position, end):
                yield position, end
            position += 1
            continue
        position += 1


def _is_parameter_list(source: str, start: int, end: int) -> bool:
    if _FUNCTION_KEYWORD.search(source[max(0, start - 64) : start]):
        return True
    after = _next_non_space(source, end)
    if after is None:
        return False
    if source.startswith("=>", after):
        return True
    if source[after] == ":":
        type_end = _type_end(source, after + 1, stops="{;\n", arrow_stop=True)
        if source.startswith("=>", type_end):
            return bool(source[after + 1 : type_end].strip())
        following = _next_non_space(source, type_end)
        if following is not None and source.startswith("=>", following):
            return bool(source[after + 1 : type_end].strip())
        return source[type_end : type_end + 1] == "{" and bool(
            _IDENTIFIER_TAIL.search(source[after + 1 : type_end].strip())
        )
    return False


def _erase_parameters(source: str, buffer: List[str], start: int, end: int) -> None:
    inner_start = start + 1
    inner_end = end - 1
    for param_start, param_end in _split_top_level(source, inner_start, inner_end):
        position = param_start
        while position < param_end and source[position].isspace():
            position += 1
        if source.startswith("...", position):
            position += 3
        if position < param_end and source[position] in "{[":
            try:
                position = skip_balanced(source, position)
            except ScanError:
                continue
        else:
            while position < param_end and (source[position].isalnum() or source[position] in "_$"):
                position += 1
        while position < param_end and source[position] in " \t":
            position += 1
        if position < param_end and source[position] == "?":
            buffer[position] = " "
            position += 1
        if position < param_end and source[position] == ":":
            type_end = _type_end(source, position + 1, stops="=,", limit=param_end)
            _blank(buffer, position, type_end)

    after = _next_non_space(source, end)
    if after is not None and source[after] == ":":
        type_end = _type_end(source, after + 1, stops="{;\n", arrow_stop=True)
        if source.startswith("=>", type_end):
            _blank(buffer, after, type_end)
        else:
            following = _next_non_space(source, type_end)
            if following is not None and source.startswith("=>", following):
                _blank(buffer, after, type_end)
            elif source[type_end : type_end + 1] == "{":
                _blank(buffer, after, type_end)


def _split_top_level(source: str, start: int, end: int):
    position = start
    segment_start = start
    while position < end:
        char = source[position]
        if char in "'\"`":
            position = skip_string(source, position)
            continue
        if char in "([{<":
            position = min(_skip_group(source, position), end)
            continue
        if char == ",":
            yield segment_start, position
            segment_start = position + 1
        position += 1
    if source[segment_start:end].strip():
        yield segment_start, end


def _next_non_space(source: str, index: int) -> Optional[int]:
    while index < len(source) and source[index].isspace():
        index += 1
    return index if index < len(source) else None


__all__ = ["erase_types"]
