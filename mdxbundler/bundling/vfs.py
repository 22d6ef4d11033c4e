"""In-memory files keyed by absolute, normalised paths."""

from __future__ import annotations

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple, Union

from ..logging import get_logger

logger = get_logger("bundling.vfs")

Contents = Union[str, bytes]

# Order in which a missing extension is tried, then the same for index files.
LOOKUP_EXTENSIONS: Tuple[str, ...] = (".js", ".ts", ".jsx", ".tsx", ".json", ".mdx", ".md")


@dataclass(frozen=True)
class VirtualFile:
    """One caller-supplied file; ``loader`` overrides extension-based selection."""

    path: str
    contents: Contents
    loader: Optional[str] = None


def normalise_key(key: str, cwd: str) -> str:
    return os.path.normpath(os.path.join(cwd, key))


class VirtualFileTable:
    """Read-only view over the files of one bundle call."""

    def __init__(self, files: Mapping[str, VirtualFile]) -> None:
        self._files = MappingProxyType(dict(files))

    @classmethod
    def from_mapping(cls, files: Optional[Mapping[str, Contents]], cwd: str) -> "VirtualFileTable":
        table = {}
        for key, contents in (files or {}).items():
            path = normalise_key(key, cwd)
            if path in table:
                logger.debug("Virtual file %s replaces an earlier entry for %s", key, path)
            table[path] = VirtualFile(path=path, contents=contents)
        return cls(table)

    def with_file(self, file: VirtualFile) -> "VirtualFileTable":
        files = dict(self._files)
        files[file.path] = file
        return VirtualFileTable(files)

    def get(self, path: str) -> Optional[VirtualFile]:
        return self._files.get(path)

    def lookup(self, path: str) -> Optional[VirtualFile]:
        """Exact path, then known extensions, then ``index`` files."""
        candidates = [path]
        candidates.extend(path + extension for extension in LOOKUP_EXTENSIONS)
        candidates.extend(os.path.join(path, "index" + extension) for extension in LOOKUP_EXTENSIONS)
        for candidate in candidates:
            found = self._files.get(candidate)
            if found is not None:
                return found
        return None

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)


__all__ = ["LOOKUP_EXTENSIONS", "VirtualFile", "VirtualFileTable", "normalise_key"]
