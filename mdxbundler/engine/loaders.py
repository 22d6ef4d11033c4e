"""Per-loader translation of file contents into module bodies."""

from __future__ import annotations

import base64
import hashlib
import json
import mimetypes
import os
import re
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Tuple

from .api import BuildOptions, Contents
from .jsx import JSXOptions, JSXTransformer, options_from_pragmas, runtime_require
from .modules import ImportRecord, rewrite_module
from .scanning import ScanError, in_spans, line_and_column, literal_spans
from .typescript import erase_types

SCRIPT_LOADERS = frozenset({"js", "jsx", "ts", "tsx"})
DATA_LOADERS = frozenset({"json", "text", "base64", "dataurl", "binary", "file", "empty"})
LOADERS = SCRIPT_LOADERS | DATA_LOADERS

# Used for real files when the configured loader table has no entry.
BUILTIN_EXTENSION_LOADERS = {
    ".js": "js",
    ".mjs": "js",
    ".cjs": "js",
    ".jsx": "jsx",
    ".ts": "ts",
    ".mts": "ts",
    ".cts": "ts",
    ".tsx": "tsx",
    ".json": "json",
    ".txt": "text",
}


class LoaderError(ValueError):
    """Raised when contents cannot be turned into a module body."""

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        super().__init__(message)
        self.offset = offset


@dataclass
class CompiledModule:
    code: str
    imports: List[ImportRecord] = field(default_factory=list)
    warnings: List[Tuple[str, int]] = field(default_factory=list)


AssetSink = Callable[[str, bytes], None]


def compile_module(
    contents: Contents,
    loader: str,
    path: str,
    options: BuildOptions,
    emit_asset: AssetSink,
) -> CompiledModule:
    """Turn raw ``contents`` into a CommonJS-style body according to ``loader``."""
    if loader in SCRIPT_LOADERS:
        return _compile_script(_as_text(contents), loader, options)
    data = contents.encode("utf-8") if isinstance(contents, str) else contents
    if loader == "json":
        text = _as_text(contents)
        try:
            value = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as exc:
            raise LoaderError(f"Invalid JSON: {exc.msg}", exc.pos) from exc
        return CompiledModule(code=f"module.exports = {json.dumps(value)};")
    if loader == "text":
        return CompiledModule(code=f"module.exports = {json.dumps(_as_text(contents))};")
    if loader == "base64":
        return CompiledModule(code=f"module.exports = {json.dumps(_b64(data))};")
    if loader == "dataurl":
        return CompiledModule(code=f"module.exports = {json.dumps(data_url(path, data))};")
    if loader == "binary":
        return CompiledModule(
            code=(
                f"var __bytes = atob({json.dumps(_b64(data))}); "
                "module.exports = Uint8Array.from(__bytes, (c) => c.charCodeAt(0));"
            )
        )
    if loader == "file":
        if not options.outdir:
            raise LoaderError('Cannot use the "file" loader without an output path')
        name = asset_name(path, data, options.asset_names)
        emit_asset(name, data)
        return CompiledModule(code=f"module.exports = {json.dumps(options.public_path + name)};")
    if loader == "empty":
        return CompiledModule(code="")
    raise LoaderError(f'Invalid loader value: "{loader}"')


def invalid_loader_message(loader: str, specifier: Optional[str] = None) -> str:
    text = f'Invalid loader value: "{loader}"'
    if specifier:
        text += f' (imported as "{specifier}")'
    return text


def data_url(path: str, data: bytes) -> str:
    mime, _ = mimetypes.guess_type(path)
    return f"data:{mime or 'application/octet-stream'};base64,{_b64(data)}"


def asset_name(path: str, data: bytes, template: str) -> str:
    """Name an emitted asset from ``template`` (``[name]``, ``[hash]``, ``[ext]``)."""
    stem, extension = os.path.splitext(os.path.basename(path))
    digest = base64.b32encode(hashlib.sha1(data).digest()).decode("ascii")[:8]
    name = template.replace("[name]", stem).replace("[hash]", digest).replace("[ext]", extension[1:])
    if "[ext]" not in template:
        name += extension
    return name


def _compile_script(source: str, loader: str, options: BuildOptions) -> CompiledModule:
    if loader in {"ts", "tsx"}:
        try:
            source = erase_types(source)
        except ScanError as exc:
            raise LoaderError(str(exc), exc.offset) from exc
    rewritten = rewrite_module(source)
    code = rewritten.code
    imports = list(rewritten.imports)
    code = _apply_define(code, options.define)
    if loader in {"jsx", "tsx"}:
        jsx_options = options_from_pragmas(
            source,
            JSXOptions(
                runtime="automatic" if options.jsx == "automatic" else "classic",
                factory=options.jsx_factory,
                fragment=options.jsx_fragment,
                import_source=options.jsx_import_source,
            ),
        )
        transformer = JSXTransformer(jsx_options)
        try:
            code = transformer.transform(code)
        except ScanError as exc:
            raise LoaderError(str(exc), _original_offset(source, rewritten.code, exc.offset)) from exc
        if transformer.runtime_used:
            code = f"{runtime_require(jsx_options)} {code}"
            imports.insert(
                0,
                ImportRecord(
                    specifier=jsx_options.runtime_module,
                    kind="require-call",
                    line=1,
                    column=0,
                    line_text=line_and_column(source, 0)[2],
                    length=0,
                ),
            )
    return CompiledModule(code=code, imports=imports, warnings=list(rewritten.warnings))


def _apply_define(code: str, define: Mapping[str, str]) -> str:
    """Replace each defined identifier or dotted path with its value, outside literals."""
    for name, value in define.items():
        pattern = re.compile(r"(?<![\w$.])" + re.escape(name) + r"(?![\w$])")
        masked = literal_spans(code)
        code = pattern.sub(
            lambda match: match.group(0) if in_spans(masked, match.start()) else value,
            code,
        )
    return code


def _original_offset(original: str, rewritten: str, offset: Optional[int]) -> Optional[int]:
    """Map an offset in rewritten code back onto the same line of the original."""
    if offset is None:
        return None
    line, column, _ = line_and_column(rewritten, offset)
    lines = original.split("\n")
    if line > len(lines):
        return len(original)
    start = sum(len(text) + 1 for text in lines[: line - 1])
    return start + min(column, len(lines[line - 1]))


def _as_text(contents: Contents) -> str:
    if isinstance(contents, bytes):
        return contents.decode("utf-8")
    return contents


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


__all__ = [
    "BUILTIN_EXTENSION_LOADERS",
    "CompiledModule",
    "LOADERS",
    "LoaderError",
    "asset_name",
    "compile_module",
    "data_url",
    "invalid_loader_message",
]
