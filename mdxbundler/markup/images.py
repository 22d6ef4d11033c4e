"""Turn relative Markdown images into module imports."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from markdown_it.token import Token

IMAGE_BINDING_PREFIX = "__mdx_image_"


def remark_mdx_images(tokens: Sequence[Token], env: Dict[str, Any]) -> None:
    """Mark every ``./`` or ``../`` image so it is rendered from an import binding.

    Each marked image gets ``meta["import_name"]``; the ``(binding, url)``
    pairs are collected under ``env["imports"]`` for the compiler to hoist.
    """
    imports: List = env.setdefault("imports", [])
    seen: Dict[str, str] = {name_url[1]: name_url[0] for name_url in imports}
    for token in _walk(tokens):
        if token.type != "image":
            continue
        src = str(token.attrGet("src") or "")
        if not src.startswith(("./", "../")):
            continue
        binding = seen.get(src)
        if binding is None:
            binding = f"{IMAGE_BINDING_PREFIX}{len(imports)}"
            imports.append((binding, src))
            seen[src] = binding
        token.meta["import_name"] = binding


def _walk(tokens: Sequence[Token]):
    for token in tokens:
        yield token
        if token.children:
            yield from _walk(token.children)


__all__ = ["IMAGE_BINDING_PREFIX", "remark_mdx_images"]
