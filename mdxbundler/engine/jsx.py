"""Lowering of JSX syntax into plain JavaScript calls."""

from __future__ import annotations

import html
import json
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .scanning import (
    IDENTIFIER_CHARS,
    IDENTIFIER_START,
    ScanError,
    previous_significant,
    regex_allowed,
    skip_balanced,
    skip_comment,
    skip_regex,
    skip_string,
)

_JSX_PRECEDERS = frozenset("(,=:[!&|?{};")
_JSX_KEYWORDS = frozenset({"return", "yield", "default", "case", "await", "else", "do"})
_TAG_NAME_CHARS = IDENTIFIER_CHARS | frozenset(".:-")
_VALID_KEY = re.compile(r"^[A-Za-z_$][\w$]*$")
_PRAGMA_RUNTIME = re.compile(r"@jsxRuntime\s+(classic|automatic)")
_PRAGMA_IMPORT_SOURCE = re.compile(r"@jsxImportSource\s+(\S+)")


class JSXSyntaxError(ScanError):
    """Raised when a JSX element cannot be parsed."""


@dataclass(frozen=True)
class JSXOptions:
    """How JSX elements are turned into function calls."""

    runtime: str = "classic"
    factory: str = "React.createElement"
    fragment: str = "React.Fragment"
    import_source: str = "react"

    @property
    def runtime_module(self) -> str:
        return f"{self.import_source}/jsx-runtime"


def options_from_pragmas(source: str, options: JSXOptions) -> JSXOptions:
    """Honour ``@jsxRuntime`` / ``@jsxImportSource`` comments at the top of a file."""
    head = source[:2048]
    runtime_match = _PRAGMA_RUNTIME.search(head)
    source_match = _PRAGMA_IMPORT_SOURCE.search(head)
    if not runtime_match and not source_match:
        return options
    runtime = runtime_match.group(1) if runtime_match else "automatic"
    import_source = source_match.group(1) if source_match else options.import_source
    return JSXOptions(
        runtime=runtime,
        factory=options.factory,
        fragment=options.fragment,
        import_source=import_source,
    )


class JSXTransformer:
    """Rewrites every JSX element in a script into factory calls.

    In the classic runtime elements become ``factory(type, props, ...children)``;
    in the automatic runtime they become ``_jsx``/``_jsxs`` calls whose bindings
    the caller is expected to import from :pyattr:`JSXOptions.runtime_module`
    when :pyattr:`runtime_used` is set after :meth:`transform`.
    """

    def __init__(self, options: JSXOptions | None = None) -> None:
        self.options = options or JSXOptions()
        self.runtime_used = False

    def transform(self, source: str) -> str:
        output: List[str] = []
        position = 0
        length = len(source)
        chunk_start = 0
        while position < length:
            char = source[position]
            if char in "'\"`":
                position = skip_string(source, position)
                continue
            if source.startswith("//", position) or source.startswith("/*", position):
                position = skip_comment(source, position)
                continue
            if char == "/" and regex_allowed(source, position):
                position = skip_regex(source, position)
                continue
            if char == "<" and self._starts_element(source, position):
                output.append(source[chunk_start:position])
                expression, position = self._parse_element(source, position)
                output.append(expression)
                chunk_start = position
                continue
            position += 1
        output.append(source[chunk_start:])
        return "".join(output)

    # -- parsing -----------------------------------------------------------------

    @staticmethod
    def _starts_element(source: str, index: int) -> bool:
        following = source[index + 1 : index + 2]
        if not following or not (following in IDENTIFIER_START or following == ">"):
            return False
        char, word = previous_significant(source, index)
        if not char:
            return True
        if word:
            return word in _JSX_KEYWORDS
        if char == ">":
            return source[: index].rstrip().endswith("=>")
        return char in _JSX_PRECEDERS

    def _parse_element(self, source: str, index: int) -> Tuple[str, int]:
        position = _skip_space(source, index + 1)
        if source.startswith(">", position):
            children, position = self._parse_children(source, position + 1, "")
            return self._build(None, [], children), position

        name, position = _read_name(source, position, _TAG_NAME_CHARS)
        if not name:
            raise JSXSyntaxError("Expected a JSX tag name", position)

        attributes: List[Tuple[str, str]] = []
        while True:
            position = _skip_space(source, position)
            if position >= len(source):
                raise JSXSyntaxError(f"Unterminated JSX tag <{name}>", index)
            if source.startswith("/>", position):
                return self._build(name, attributes, []), position + 2
            if source[position] == ">":
                position += 1
                break
            if source[position] == "{":
                end = skip_balanced(source, position)
                inner = source[position + 1 : end - 1].strip()
                if not inner.startswith("..."):
                    raise JSXSyntaxError("Expected '...' in JSX spread attribute", position)
                attributes.append(("...", self._nested(inner[3:])))
                position = end
                continue
            attr_name, position = _read_name(source, position, _TAG_NAME_CHARS)
            if not attr_name:
                raise JSXSyntaxError(
                    f"Unexpected {source[position]!r} in JSX tag <{name}>", position
                )
            position = _skip_space(source, position)
            if not source.startswith("=", position):
                attributes.append((attr_name, "true"))
                continue
            position = _skip_space(source, position + 1)
            value_char = source[position : position + 1]
            if value_char in ("'", '"'):
                end = source.find(value_char, position + 1)
                if end == -1:
                    raise JSXSyntaxError("Unterminated JSX attribute string", position)
                value = html.unescape(source[position + 1 : end])
                attributes.append((attr_name, json.dumps(value)))
                position = end + 1
            elif value_char == "{":
                end = skip_balanced(source, position)
                attributes.append((attr_name, self._nested(source[position + 1 : end - 1])))
                position = end
            elif value_char == "<":
                value, position = self._parse_element(source, position)
                attributes.append((attr_name, value))
            else:
                raise JSXSyntaxError(f"Invalid value for JSX attribute {attr_name!r}", position)

        children, position = self._parse_children(source, position, name)
        return self._build(name, attributes, children), position

    def _parse_children(self, source: str, index: int, name: str) -> Tuple[List[str], int]:
        children: List[str] = []
        position = index
        text_start = index
        length = len(source)
        while position < length:
            char = source[position]
            if char == "<":
                _append_text(children, source[text_start:position])
                if source.startswith("/", _skip_space(source, position + 1)):
                    position = _skip_space(source, _skip_space(source, position + 1) + 1)
                    closing, position = _read_name(source, position, _TAG_NAME_CHARS)
                    position = _skip_space(source, position)
                    if closing != name:
                        expected = f"</{name}>" if name else "</>"
                        raise JSXSyntaxError(
                            f"Expected closing tag {expected} but found </{closing}>", position
                        )
                    if not source.startswith(">", position):
                        raise JSXSyntaxError("Expected '>' to end the closing tag", position)
                    return children, position + 1
                element, position = self._parse_element(source, position)
                children.append(element)
                text_start = position
                continue
            if char == "{":
                _append_text(children, source[text_start:position])
                end = skip_balanced(source, position)
                inner = source[position + 1 : end - 1]
                if _strip_comments(inner).strip():
                    children.append(self._nested(inner))
                position = end
                text_start = position
                continue
            position += 1
        opened = f"<{name}>" if name else "<>"
        raise JSXSyntaxError(f"Unterminated JSX contents for {opened}", index)

    def _nested(self, expression: str) -> str:
        nested = JSXTransformer(self.options)
        lowered = nested.transform(expression).strip()
        self.runtime_used = self.runtime_used or nested.runtime_used
        return lowered

    # -- code generation -----------------------------------------------------------

    def _build(self, name: Optional[str], attributes: List[Tuple[str, str]], children: List[str]) -> str:
        if name is None:
            element_type = "_Fragment" if self.options.runtime == "automatic" else self.options.fragment
        elif (name[0].islower() and "." not in name) or ":" in name:
            element_type = json.dumps(name)
        else:
            element_type = name

        if self.options.runtime == "automatic":
            return self._build_automatic(element_type, attributes, children)

        props = _object_literal(attributes) if attributes else "null"
        arguments = [element_type, props, *children]
        return f"{self.options.factory}({', '.join(arguments)})"

    def _build_automatic(self, element_type: str, attributes: List[Tuple[str, str]], children: List[str]) -> str:
        self.runtime_used = True
        key = None
        props = []
        for attr_name, value in attributes:
            if attr_name == "key":
                key = value
            else:
                props.append((attr_name, value))
        function = "_jsx"
        if len(children) == 1:
            props.append(("children", children[0]))
        elif children:
            props.append(("children", f"[{', '.join(children)}]"))
            function = "_jsxs"
        arguments = [element_type, _object_literal(props)]
        if key is not None:
            arguments.append(key)
        return f"{function}({', '.join(arguments)})"


def runtime_import(options: JSXOptions) -> str:
    """ESM import statement binding the automatic runtime helpers."""
    return (
        "import {jsx as _jsx, jsxs as _jsxs, Fragment as _Fragment} from "
        f"{json.dumps(options.runtime_module)};"
    )


def runtime_require(options: JSXOptions) -> str:
    """CommonJS equivalent of :func:`runtime_import` for already-linked modules."""
    return (
        f"var __jsx_runtime = require({json.dumps(options.runtime_module)}), "
        "_jsx = __jsx_runtime.jsx, _jsxs = __jsx_runtime.jsxs, _Fragment = __jsx_runtime.Fragment;"
    )


def clean_jsx_text(text: str) -> str:
    """Collapse JSX text whitespace the way React compilers do."""
    lines = text.replace("\r\n", "\n").split("\n")
    last_non_empty = -1
    for index, line in enumerate(lines):
        if line.strip():
            last_non_empty = index
    result = ""
    for index, line in enumerate(lines):
        trimmed = line.replace("\t", " ")
        if index != 0:
            trimmed = trimmed.lstrip(" ")
        if index != len(lines) - 1:
            trimmed = trimmed.rstrip(" ")
        if trimmed:
            if index != last_non_empty:
                trimmed += " "
            result += trimmed
    return result


def _append_text(children: List[str], text: str) -> None:
    cleaned = clean_jsx_text(text)
    if cleaned:
        children.append(json.dumps(html.unescape(cleaned)))


def _object_literal(attributes: List[Tuple[str, str]]) -> str:
    parts = []
    for attr_name, value in attributes:
        if attr_name == "...":
            parts.append(f"...{value}")
        elif _VALID_KEY.match(attr_name):
            parts.append(f"{attr_name}: {value}")
        else:
            parts.append(f"{json.dumps(attr_name)}: {value}")
    return "{" + ", ".join(parts) + "}"


def _skip_space(source: str, index: int) -> int:
    length = len(source)
    while index < length and source[index].isspace():
        index += 1
    return index


def _read_name(source: str, index: int, allowed: frozenset) -> Tuple[str, int]:
    end = index
    while end < len(source) and source[end] in allowed:
        end += 1
    return source[index:end], end


def _strip_comments(expression: str) -> str:
    return re.sub(r"/\*.*?\*/|//[^\n]*", "", expression, flags=re.S)


__all__ = [
    "JSXOptions",
    "JSXSyntaxError",
    "JSXTransformer",
    "clean_jsx_text",
    "options_from_pragmas",
    "runtime_import",
    "runtime_require",
]
