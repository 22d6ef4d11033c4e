"""Extension to loader assignment."""

from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

from ..engine.loaders import LOADERS

MDX_LOADER = "mdx"

_SCRIPT_EXTENSIONS = {
    ".js": "js",
    ".mjs": "js",
    ".cjs": "js",
    ".jsx": "jsx",
    ".ts": "ts",
    ".mts": "ts",
    ".cts": "ts",
    ".tsx": "tsx",
    ".json": "json",
    ".mdx": MDX_LOADER,
    ".md": MDX_LOADER,
}
TEXT_EXTENSIONS = (".txt", ".css", ".html", ".svg", ".csv", ".xml", ".yml", ".yaml")
ASSET_EXTENSIONS = (
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".webp",
    ".avif",
    ".ico",
    ".bmp",
    ".woff",
    ".woff2",
    ".ttf",
    ".otf",
)


def default_loader_table(*, emit_assets: bool = False) -> Dict[str, str]:
    """Loader per extension; images and fonts become files when assets are emitted."""
    table = dict(_SCRIPT_EXTENSIONS)
    table.update({extension: "text" for extension in TEXT_EXTENSIONS})
    asset_loader = "file" if emit_assets else "dataurl"
    table.update({extension: asset_loader for extension in ASSET_EXTENSIONS})
    return table


def is_valid_loader(name: str) -> bool:
    return name in LOADERS or name == MDX_LOADER


def loader_for_virtual(path: str, table: Mapping[str, str]) -> str:
    """Loader name for a virtual file.

    Extensionless files are JSX; unknown extensions yield the bare extension
    name, which the engine later rejects as an invalid loader.
    """
    extension = os.path.splitext(path)[1]
    if not extension:
        return "jsx"
    return table.get(extension) or extension[1:]


def loader_for_file(path: str, table: Mapping[str, str]) -> Optional[str]:
    return table.get(os.path.splitext(path)[1])


__all__ = [
    "ASSET_EXTENSIONS",
    "MDX_LOADER",
    "TEXT_EXTENSIONS",
    "default_loader_table",
    "is_valid_loader",
    "loader_for_file",
    "loader_for_virtual",
]
