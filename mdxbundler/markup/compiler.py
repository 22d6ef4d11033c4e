"""Compile an MDX document body into an ES module."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from markdown_it import MarkdownIt
from markdown_it.token import Token

from ..engine.jsx import JSXOptions, JSXTransformer, runtime_import
from ..engine.scanning import ScanError, line_and_column, skip_comment, skip_string
from ..logging import get_logger
from .images import remark_mdx_images
from .literals import to_js_literal
from .renderer import COMPONENTS_BINDING, JSXRenderer, flow_placeholder

logger = get_logger("markup")

TokenPlugin = Callable[[List[Token], Dict[str, Any]], None]

_ESM_START = re.compile(r"^(?:import|export)(?=[\s{*'\"])")
_FLOW_START = re.compile(r"^ {0,3}(?:<(?:[A-Za-z_$>]|/[A-Za-z_$>])|\{)")
_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_FRONTMATTER_EXPORT = re.compile(r"^export\s+(?:const|let|var|function)\s+frontmatter\b", re.M)


class MarkupError(ValueError):
    """Raised when ESM or JSX inside a document cannot be parsed."""

    def __init__(self, message: str, *, path: Optional[str] = None, line: Optional[int] = None) -> None:
        location = path or "<input>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}")
        self.path = path
        self.line = line


@dataclass
class MarkupOptions:
    """Options handed to the markup-options hook."""

    image_imports: bool = False
    jsx_import_source: str = "react"
    provider_import_source: Optional[str] = None
    remark_plugins: List[TokenPlugin] = field(default_factory=list)
    markdown_options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CompiledDocument:
    code: str
    path: Optional[str] = None
    components: List[str] = field(default_factory=list)


@dataclass
class _Blocks:
    markdown: str
    esm: List[str]
    flow: List[str]


class MarkupCompiler:
    """Turns Markdown, ESM and JSX into one JavaScript module.

    Markdown is rendered with markdown-it into JSX that routes every element
    through ``props.components``; the JSX is then lowered with the automatic
    runtime, so the output only needs a module linker.
    """

    def __init__(self, options: Optional[MarkupOptions] = None) -> None:
        self.options = options or MarkupOptions()

    def compile(
        self,
        body: str,
        *,
        frontmatter: Optional[Mapping[str, Any]] = None,
        path: Optional[str] = None,
    ) -> CompiledDocument:
        blocks = _split_blocks(body, path)
        parser = MarkdownIt("commonmark", dict(self.options.markdown_options)).enable(["table", "strikethrough"])
        env: Dict[str, Any] = {"path": path, "imports": []}
        tokens = parser.parse(blocks.markdown, env)
        for plugin in self._plugins():
            plugin(tokens, env)

        renderer = JSXRenderer(blocks.flow)
        content = renderer.render(tokens)
        source = self._module_source(blocks.esm, env["imports"], content, renderer.components, frontmatter or {})

        transformer = JSXTransformer(JSXOptions(runtime="automatic", import_source=self.options.jsx_import_source))
        try:
            code = transformer.transform(source)
        except ScanError as exc:
            line, _, _ = line_and_column(source, exc.offset)
            raise MarkupError(str(exc), path=path, line=line) from exc
        if transformer.runtime_used:
            code = runtime_import(transformer.options) + "\n" + code
        logger.debug("Compiled %s (%d esm blocks, %d jsx blocks)", path or "<input>", len(blocks.esm), len(blocks.flow))
        return CompiledDocument(code=code, path=path, components=sorted(renderer.components))

    def _plugins(self) -> List[TokenPlugin]:
        plugins = list(self.options.remark_plugins)
        if self.options.image_imports and remark_mdx_images not in plugins:
            plugins.append(remark_mdx_images)
        return plugins

    def _module_source(
        self,
        esm: Sequence[str],
        images: Sequence[Tuple[str, str]],
        content: str,
        components: Sequence[str],
        frontmatter: Mapping[str, Any],
    ) -> str:
        lines: List[str] = []
        provider = self.options.provider_import_source
        if provider:
            lines.append(f"import {{useMDXComponents as _provideComponents}} from {json.dumps(provider)};")
        lines.extend(esm)
        for binding, url in images:
            lines.append(f"import {binding} from {json.dumps(url)};")
        if not any(_FRONTMATTER_EXPORT.search(block) for block in esm):
            lines.append(f"export const frontmatter = {to_js_literal(dict(frontmatter))};")

        defaults = ", ".join(f"{name}: {json.dumps(name)}" for name in sorted(components))
        sources = ["{" + defaults + "}"]
        if provider:
            sources.append("_provideComponents()")
        sources.append("props.components")
        body = f"<>{content}</>" if content else "null"
        lines.extend(
            [
                "function _createMdxContent(props) {",
                f"  const {COMPONENTS_BINDING} = Object.assign({', '.join(sources)});",
                f"  return {body};",
                "}",
                "export default function MDXContent(props = {}) {",
                f"  const {{wrapper: MDXLayout}} = Object.assign({{}}, {', '.join(sources[1:])});",
                "  return MDXLayout ? <MDXLayout {...props}><_createMdxContent {...props} /></MDXLayout> : _createMdxContent(props);",
                "}",
            ]
        )
        return "\n".join(lines) + "\n"


def _split_blocks(body: str, path: Optional[str]) -> _Blocks:
    """Cut ESM and flow JSX blocks out of the Markdown.

    ESM blocks are removed; JSX blocks are replaced by HTML comment
    placeholders that markdown-it keeps as ``html_block`` tokens. Line numbers
    of the remaining Markdown are preserved.
    """
    lines = body.split("\n")
    markdown: List[str] = []
    esm: List[str] = []
    flow: List[str] = []
    fence: Optional[str] = None
    index = 0
    while index < len(lines):
        line = lines[index]
        fence_match = _FENCE.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1)[0] == fence[0] and len(fence_match.group(1)) >= len(fence):
                fence = None
            markdown.append(line)
            index += 1
            continue
        if fence_match:
            fence = fence_match.group(1)
            markdown.append(line)
            index += 1
            continue
        starts_paragraph = index == 0 or not lines[index - 1].strip()
        if starts_paragraph and _ESM_START.match(line):
            end = _block_end(lines, index, _esm_complete)
            if end is None:
                raise MarkupError("Could not parse import/exports", path=path, line=index + 1)
            esm.append("\n".join(lines[index:end]).rstrip())
            markdown.extend([""] * (end - index))
            index = end
            continue
        if starts_paragraph and _FLOW_START.match(line):
            end = _block_end(lines, index, _jsx_complete)
            if end is None:
                raise MarkupError("Unexpected end of file in JSX element", path=path, line=index + 1)
            flow.append("\n".join(lines[index:end]).strip())
            markdown.append(flow_placeholder(len(flow) - 1))
            markdown.extend([""] * (end - index - 1))
            index = end
            continue
        markdown.append(line)
        index += 1
    return _Blocks(markdown="\n".join(markdown), esm=esm, flow=flow)


def _block_end(lines: Sequence[str], start: int, complete: Callable[[str], bool]) -> Optional[int]:
    """Index of the first line after the block starting at ``start``.

    A block ends at a blank line (or the end of input) once its text is complete.
    """
    index = start
    while index < len(lines):
        index += 1
        at_break = index >= len(lines) or not lines[index].strip()
        if at_break and complete("\n".join(lines[start:index])):
            return index
    return None


def _esm_complete(text: str) -> bool:
    depth = 0
    position = 0
    try:
        while position < len(text):
            char = text[position]
            if char in "'\"`":
                position = skip_string(text, position)
                continue
            if text.startswith("//", position) or text.startswith("/*", position):
                position = skip_comment(text, position)
                continue
            if char in "([{":
                depth += 1
            elif char in ")]}":
                depth -= 1
            position += 1
    except ScanError:
        return False
    return depth <= 0


def _jsx_complete(text: str) -> bool:
    # Blocks become fragment children, so parse them as such.
    try:
        JSXTransformer().transform("<>" + text.strip() + "</>")
    except ScanError:
        return False
    return True


__all__ = ["CompiledDocument", "MarkupCompiler", "MarkupError", "MarkupOptions", "TokenPlugin"]
