"""Render a markdown-it token stream as JSX routed through ``_components``."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from markdown_it.token import Token

from ..engine.scanning import ScanError, skip_balanced

COMPONENTS_BINDING = "_components"

_FLOW_PLACEHOLDER = re.compile(r"^<!--mdx-flow-(\d+)-->\s*$")
_HTML_COMMENT = re.compile(r"^\s*<!--.*?-->\s*$", re.S)
_STYLE_ALIGN = re.compile(r"text-align:\s*(\w+)")
_NEWLINE = json.dumps("\n")

# Containers whose children are blocks separated by line breaks.
_BLOCK_CONTAINERS = frozenset({"blockquote", "ul", "ol", "table", "thead", "tbody", "tr"})


def flow_placeholder(index: int) -> str:
    return f"<!--mdx-flow-{index}-->"


@dataclass
class _Frame:
    tag: str
    attributes: List[Tuple[str, str]] = field(default_factory=list)
    children: List[str] = field(default_factory=list)


class JSXRenderer:
    """Turns tokens into JSX source.

    Each Markdown construct becomes ``<_components.tag>`` so callers can swap
    the element through ``props.components``. ``flow_blocks`` maps placeholder
    indices to raw JSX blocks cut out of the document before parsing.
    """

    def __init__(self, flow_blocks: Optional[Sequence[str]] = None) -> None:
        self.flow_blocks = list(flow_blocks or [])
        self.components: Set[str] = set()

    def render(self, tokens: Sequence[Token]) -> str:
        root = _Frame(tag="")
        stack: List[_Frame] = [root]
        hidden_depth: List[bool] = []
        for token in tokens:
            if token.type == "inline":
                stack[-1].children.append(self.render_inline(token.children or []))
            elif token.nesting == 1:
                if token.type == "paragraph_open" and token.hidden:
                    hidden_depth.append(True)
                    continue
                hidden_depth.append(False)
                stack.append(_Frame(tag=token.tag, attributes=self._block_attributes(token)))
            elif token.nesting == -1:
                if hidden_depth.pop():
                    continue
                frame = stack.pop()
                stack[-1].children.append(self._element(frame.tag, frame.attributes, self._join(frame)))
            else:
                rendered = self._leaf(token)
                if rendered:
                    stack[-1].children.append(rendered)
        return _join_blocks(root.children)

    def render_inline(self, tokens: Sequence[Token]) -> str:
        stack: List[_Frame] = [_Frame(tag="")]
        pending_text: List[str] = []

        def flush() -> None:
            if pending_text:
                stack[-1].children.append(self.text("".join(pending_text)))
                pending_text.clear()

        for token in tokens:
            if token.type == "text":
                pending_text.append(token.content)
                continue
            flush()
            if token.type == "softbreak":
                stack[-1].children.append("{" + _NEWLINE + "}")
            elif token.type == "hardbreak":
                stack[-1].children.append(self._element("br", [], ""))
                stack[-1].children.append("{" + _NEWLINE + "}")
            elif token.type == "code_inline":
                stack[-1].children.append(self._element("code", [], "{" + json.dumps(token.content) + "}"))
            elif token.type == "image":
                stack[-1].children.append(self._image(token))
            elif token.type == "html_inline":
                if not _HTML_COMMENT.match(token.content):
                    stack[-1].children.append(token.content)
            elif token.nesting == 1:
                stack.append(_Frame(tag=token.tag, attributes=self._inline_attributes(token)))
            elif token.nesting == -1:
                frame = stack.pop()
                stack[-1].children.append(self._element(frame.tag, frame.attributes, "".join(frame.children)))
        flush()
        return "".join(stack[0].children)

    def text(self, content: str) -> str:
        """Render prose, keeping ``{expression}`` segments as JSX expressions."""
        parts: List[str] = []
        position = 0
        start = 0
        while position < len(content):
            if content[position] != "{":
                position += 1
                continue
            try:
                end = skip_balanced(content, position)
            except ScanError:
                position += 1
                continue
            if position > start:
                parts.append("{" + json.dumps(content[start:position]) + "}")
            if content[position + 1 : end - 1].strip():
                parts.append(content[position:end])
            position = start = end
        if start < len(content):
            parts.append("{" + json.dumps(content[start:]) + "}")
        return "".join(parts)

    # -- tokens -------------------------------------------------------------------

    def _leaf(self, token: Token) -> str:
        if token.type == "fence":
            language = token.info.strip().split(" ")[0] if token.info else ""
            attributes = [("className", json.dumps(f"language-{language}"))] if language else []
            code = self._element("code", attributes, "{" + json.dumps(token.content) + "}")
            return self._element("pre", [], code)
        if token.type == "code_block":
            return self._element("pre", [], self._element("code", [], "{" + json.dumps(token.content) + "}"))
        if token.type == "hr":
            return self._element("hr", [], "")
        if token.type == "html_block":
            match = _FLOW_PLACEHOLDER.match(token.content)
            if match:
                return self.flow_blocks[int(match.group(1))]
            if _HTML_COMMENT.match(token.content):
                return ""
            return token.content.strip()
        return ""

    def _image(self, token: Token) -> str:
        binding = token.meta.get("import_name") if token.meta else None
        src = binding if binding else json.dumps(str(token.attrGet("src") or ""))
        attributes = [("src", src)]
        alt = "".join(child.content for child in token.children or [] if child.type in {"text", "code_inline"})
        attributes.append(("alt", json.dumps(alt)))
        title = token.attrGet("title")
        if title:
            attributes.append(("title", json.dumps(str(title))))
        return self._element("img", attributes, "")

    def _block_attributes(self, token: Token) -> List[Tuple[str, str]]:
        attributes: List[Tuple[str, str]] = []
        start = token.attrGet("start")
        if token.tag == "ol" and start is not None:
            attributes.append(("start", str(int(start))))
        style = token.attrGet("style")
        if style:
            match = _STYLE_ALIGN.search(str(style))
            if match:
                attributes.append(("style", "{textAlign: " + json.dumps(match.group(1)) + "}"))
        return attributes

    def _inline_attributes(self, token: Token) -> List[Tuple[str, str]]:
        attributes: List[Tuple[str, str]] = []
        if token.tag == "a":
            attributes.append(("href", json.dumps(str(token.attrGet("href") or ""))))
            title = token.attrGet("title")
            if title:
                attributes.append(("title", json.dumps(str(title))))
        return attributes

    # -- output -------------------------------------------------------------------

    def _join(self, frame: _Frame) -> str:
        if frame.tag in _BLOCK_CONTAINERS or (frame.tag == "li" and len(frame.children) > 1):
            if not frame.children:
                return ""
            newline = "{" + _NEWLINE + "}"
            return newline + newline.join(frame.children) + newline
        return "".join(frame.children)

    def _element(self, tag: str, attributes: Sequence[Tuple[str, str]], children: str) -> str:
        self.components.add(tag)
        name = f"{COMPONENTS_BINDING}.{tag}"
        props = "".join(f" {key}={{{value}}}" for key, value in attributes)
        if not children:
            return f"<{name}{props} />"
        return f"<{name}{props}>{children}</{name}>"


def _join_blocks(blocks: Sequence[str]) -> str:
    return ("{" + _NEWLINE + "}").join(block for block in blocks if block)


__all__ = ["COMPONENTS_BINDING", "JSXRenderer", "flow_placeholder"]
