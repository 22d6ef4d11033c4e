"""ES module syntax rewriting and import discovery."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .scanning import in_spans, line_and_column, literal_spans

# Start of a statement: a line start or just after `;` or `}`.
_STATEMENT = r"(?:^|(?<=[;}]))"

_IMPORT_FROM = re.compile(
    _STATEMENT + r"""[ \t]*import\s+(?P<clause>[\w$*{}\s,]+?)\s*\bfrom\s*(?P<quote>['"])(?P<spec>[^'"\n]+)(?P=quote)[ \t]*;?""",
    re.M,
)
_IMPORT_BARE = re.compile(_STATEMENT + r"""[ \t]*import\s*(?P<quote>['"])(?P<spec>[^'"\n]+)(?P=quote)[ \t]*;?""", re.M)
_EXPORT_FROM = re.compile(
    _STATEMENT + r"""[ \t]*export\s*(?P<clause>\*(?:\s*as\s+[\w$]+)?|\{[^}]*\})\s*from\s*(?P<quote>['"])(?P<spec>[^'"\n]+)(?P=quote)[ \t]*;?""",
    re.M,
)
_EXPORT_LIST = re.compile(_STATEMENT + r"""[ \t]*export\s*\{(?P<names>[^}]*)\}(?!\s*from\b)[ \t]*;?""", re.M)
_EXPORT_DEFAULT_DECLARATION = re.compile(
    _STATEMENT + r"(?P<indent>[ \t]*)export\s+default\s+(?=(?:async\s+)?function\b|class\b)"
    r"(?P<keyword>(?:async\s+)?function\s*\*?|class)\s*(?P<name>[\w$]+)?",
    re.M,
)
_EXPORT_DEFAULT = re.compile(_STATEMENT + r"(?P<indent>[ \t]*)export\s+default\s+", re.M)
_EXPORT_DECLARATION = re.compile(
    _STATEMENT + r"(?P<indent>[ \t]*)export\s+(?P<keyword>(?:async\s+)?function\s*\*?|class|const|let|var)\s+(?P<name>[\w$]+)",
    re.M,
)
_REQUIRE = re.compile(
    r"""(?<![\w$.])require\s*\(\s*(?:(?P<quote>['"])(?P<spec>[^'"\n]+)(?P=quote)\s*\)|(?P<dynamic>[^\s)'"]))"""
)
_ESM_MARKER = re.compile(_STATEMENT + r"[ \t]*(?:import\s*[\w$*{'\"]|export\s)", re.M)

DEFAULT_EXPORT_BINDING = "__default_export"


@dataclass(frozen=True)
class ImportRecord:
    """A specifier discovered in a module, with the position of its string literal."""

    specifier: str
    kind: str
    line: int
    column: int
    line_text: str
    length: int


@dataclass
class RewrittenModule:
    """CommonJS-style module body plus everything it needs resolved."""

    code: str
    imports: List[ImportRecord] = field(default_factory=list)
    exports: Dict[str, str] = field(default_factory=dict)
    warnings: List[Tuple[str, int]] = field(default_factory=list)
    is_esm: bool = False


@dataclass(order=True)
class _Span:
    start: int
    end: int
    replacement: str = field(compare=False)


def rewrite_module(source: str) -> RewrittenModule:
    """Rewrite ``import``/``export`` statements into ``require``/``exports`` calls.

    Every ``import`` and literal ``require`` becomes a call to the per-module
    ``require`` function the bundle runtime passes in; the specifier strings
    are kept verbatim so the runtime can map them to linked module ids.
    """
    masked = literal_spans(source)
    result = RewrittenModule(code=source, is_esm=_has_esm_syntax(source, masked))
    spans: List[_Span] = []
    counter = _Counter()

    def statements(pattern: re.Pattern):
        return (match for match in pattern.finditer(source) if not in_spans(masked, match.start()))

    def add(start: int, end: int, replacement: str) -> bool:
        for span in spans:
            if start < span.end and span.start < end:
                return False
        # Keep line numbers stable for anything reported after rewriting.
        replacement += "\n" * source.count("\n", start, end)
        spans.append(_Span(start, end, replacement))
        return True

    def record(match: re.Match, kind: str) -> None:
        offset = match.start("quote")
        line, column, text = line_and_column(source, offset)
        result.imports.append(
            ImportRecord(
                specifier=match.group("spec"),
                kind=kind,
                line=line,
                column=column,
                line_text=text,
                length=len(match.group("spec")) + 2,
            )
        )

    for match in statements(_IMPORT_FROM):
        replacement = _import_clause(match.group("clause"), match.group("spec"), counter)
        if add(match.start(), match.end(), _indent(match) + replacement):
            record(match, "import-statement")

    for match in statements(_IMPORT_BARE):
        if add(match.start(), match.end(), f"{_indent(match)}require({json.dumps(match.group('spec'))});"):
            record(match, "import-statement")

    for match in statements(_EXPORT_FROM):
        replacement = _export_from(match.group("clause"), match.group("spec"), counter, result.exports)
        if add(match.start(), match.end(), _indent(match) + replacement):
            record(match, "import-statement")

    for match in statements(_EXPORT_LIST):
        if add(match.start(), match.end(), ""):
            for exported, local in _parse_specifiers(match.group("names")):
                result.exports[exported] = local

    for match in statements(_EXPORT_DEFAULT_DECLARATION):
        name = match.group("name")
        keyword = match.group("keyword").rstrip()
        if name:
            replacement = f"{match.group('indent')}{keyword} {name}"
            result.exports["default"] = name
        else:
            replacement = f"{match.group('indent')}var {DEFAULT_EXPORT_BINDING} = {keyword}"
            result.exports["default"] = DEFAULT_EXPORT_BINDING
        add(match.start(), match.end(), replacement)

    for match in statements(_EXPORT_DEFAULT):
        if add(match.start(), match.end(), f"{match.group('indent')}var {DEFAULT_EXPORT_BINDING} = "):
            result.exports["default"] = DEFAULT_EXPORT_BINDING

    for match in statements(_EXPORT_DECLARATION):
        replacement = f"{match.group('indent')}{match.group('keyword')} {match.group('name')}"
        if add(match.start(), match.end(), replacement):
            result.exports[match.group("name")] = match.group("name")

    for match in _REQUIRE.finditer(source):
        if _inside(spans, match.start()) or in_spans(masked, match.start()):
            continue
        if match.group("dynamic"):
            result.warnings.append(
                (
                    'This call to "require" will not be bundled because the argument is not a string literal',
                    match.start(),
                )
            )
            continue
        record(match, "require-call")

    spans.sort()
    pieces: List[str] = []
    cursor = 0
    for span in spans:
        pieces.append(source[cursor : span.start])
        pieces.append(span.replacement)
        cursor = span.end
    pieces.append(source[cursor:])
    code = "".join(pieces)

    if result.is_esm:
        getters = ", ".join(
            f"{json.dumps(name)}: () => {local}" for name, local in result.exports.items()
        )
        code = f"__export(exports, {{{getters}}}); {code}"

    result.imports.sort(key=lambda item: (item.line, item.column))
    result.code = code
    return result


def _has_esm_syntax(source: str, masked: List[Tuple[int, int]]) -> bool:
    return any(not in_spans(masked, match.start()) for match in _ESM_MARKER.finditer(source))


class _Counter:
    def __init__(self) -> None:
        self.value = 0

    def next(self, prefix: str) -> str:
        name = f"{prefix}{self.value}"
        self.value += 1
        return name


def _indent(match: re.Match) -> str:
    text = match.group(0)
    return text[: len(text) - len(text.lstrip(" \t"))]


def _inside(spans: List[_Span], offset: int) -> bool:
    return any(span.start <= offset < span.end for span in spans)


def _parse_specifiers(text: str) -> List[Tuple[str, str]]:
    """Parse ``a, b as c`` into ``[(exported, local), ...]`` pairs."""
    pairs: List[Tuple[str, str]] = []
    for part in text.split(","):
        part = " ".join(part.split())
        if not part:
            continue
        if " as " in part:
            local, exported = (piece.strip() for piece in part.split(" as ", 1))
        else:
            local = exported = part
        pairs.append((exported, local))
    return pairs


def _parse_clause(clause: str) -> Tuple[Optional[str], Optional[str], List[Tuple[str, str]]]:
    """Split an import clause into default binding, namespace binding and named imports."""
    clause = " ".join(clause.split())
    named: List[Tuple[str, str]] = []
    braces = re.search(r"\{([^}]*)\}", clause)
    if braces:
        for exported, local in _parse_specifiers(braces.group(1)):
            # ``import {a as b}`` reads ``a`` into ``b``; _parse_specifiers yields (b, a).
            named.append((local, exported))
        clause = clause[: braces.start()] + clause[braces.end() :]
    default = None
    namespace = None
    for part in clause.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("*"):
            namespace = part.split("as", 1)[1].strip()
        else:
            default = part
    return default, namespace, named


def _import_clause(clause: str, specifier: str, counter: _Counter) -> str:
    default, namespace, named = _parse_clause(clause)
    required = f"require({json.dumps(specifier)})"
    statements: List[str] = []
    if named or (default and namespace):
        holder = counter.next("__import")
        statements.append(f"var {holder} = {required};")
        source = holder
    else:
        source = required
    if default:
        statements.append(f"var {default} = __default({source});")
    if namespace:
        statements.append(f"var {namespace} = __toESM({source});")
    for imported, local in named:
        if imported == "default":
            statements.append(f"var {local} = __default({source});")
        else:
            statements.append(f"var {local} = {source}.{imported};")
    if not statements:
        statements.append(f"{required};")
    return " ".join(statements)


def _export_from(clause: str, specifier: str, counter: _Counter, exports: Dict[str, str]) -> str:
    required = f"require({json.dumps(specifier)})"
    clause = " ".join(clause.split())
    if clause.startswith("*"):
        if clause != "*":
            name = clause.split("as", 1)[1].strip()
            holder = counter.next("__reexport")
            exports[name] = holder
            return f"var {holder} = __toESM({required});"
        return f"__reExport(exports, {required});"
    holder = counter.next("__reexport")
    for exported, local in _parse_specifiers(clause.strip("{} ")):
        if local == "default":
            exports[exported] = f"__default({holder})"
        else:
            exports[exported] = f"{holder}.{local}"
    return f"var {holder} = {required};"


__all__ = ["DEFAULT_EXPORT_BINDING", "ImportRecord", "RewrittenModule", "rewrite_module"]
