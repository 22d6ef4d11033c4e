"""The virtual module every bundle starts from."""

from __future__ import annotations

import os
import uuid
from typing import Optional

from ..errors import ConfigurationError
from ..models import SourceDocument
from .vfs import VirtualFile, VirtualFileTable

ENTRY_PREFIX = "_mdx_bundler_entry_point-"


def entry_path_for(document: SourceDocument, cwd: str, file: Optional[str] = None) -> str:
    """The caller's file, else the document's own path, else a fresh name under ``cwd``."""
    if file:
        return os.path.normpath(os.path.abspath(file))
    if document.path:
        return os.path.normpath(os.path.join(cwd, document.path))
    return os.path.join(cwd, f"{ENTRY_PREFIX}{uuid.uuid4()}.mdx")


def register_entry(table: VirtualFileTable, entry_path: str, code: str) -> VirtualFileTable:
    """Add the compiled document under ``entry_path``; loaded as JSX."""
    if entry_path in table:
        raise ConfigurationError(f"A file in `files` resolves to the entry point {entry_path}")
    return table.with_file(VirtualFile(path=entry_path, contents=code, loader="jsx"))


__all__ = ["ENTRY_PREFIX", "entry_path_for", "register_entry"]
