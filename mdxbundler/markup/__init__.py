"""MDX compilation: Markdown prose, ESM blocks and JSX into one ES module."""

from __future__ import annotations

from .compiler import CompiledDocument, MarkupCompiler, MarkupError, MarkupOptions, TokenPlugin
from .images import remark_mdx_images
from .literals import to_js_literal

__all__ = [
    "CompiledDocument",
    "MarkupCompiler",
    "MarkupError",
    "MarkupOptions",
    "TokenPlugin",
    "remark_mdx_images",
    "to_js_literal",
]
