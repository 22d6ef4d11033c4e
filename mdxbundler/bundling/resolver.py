"""Plugins that route imports to virtual files and compile MDX from disk."""

from __future__ import annotations

import asyncio
import os
from typing import Callable, Mapping, Optional

from ..engine.api import (
    Message,
    OnLoadArgs,
    OnLoadResult,
    OnResolveArgs,
    OnResolveResult,
    Plugin,
    PluginBuild,
)
from ..engine.loaders import invalid_loader_message
from ..engine.resolve import is_bare
from ..logging import get_logger
from .loaders import MDX_LOADER, is_valid_loader, loader_for_file, loader_for_virtual
from .vfs import VirtualFileTable

logger = get_logger("bundling.resolver")

IN_MEMORY_PLUGIN = "inMemory"
IN_MEMORY_NAMESPACE = "in-memory"
MDX_PLUGIN = "mdx"

# (text, path) -> JavaScript module source
DocumentCompiler = Callable[[str, str], str]


class ResolutionAdapter:
    """Consults the virtual file table before the engine's own resolution.

    Relative specifiers are joined with the importer's directory, absolute ones
    are used as-is and bare ones are joined with ``cwd``, so a caller can shadow
    a package by supplying a file under its name. A miss defers to the engine.
    """

    def __init__(self, table: VirtualFileTable, cwd: str, compile_document: DocumentCompiler) -> None:
        self.table = table
        self.cwd = cwd
        self.compile_document = compile_document
        self.loaders: Mapping[str, str] = {}

    def plugin(self) -> Plugin:
        return Plugin(name=IN_MEMORY_PLUGIN, setup=self._setup)

    def _setup(self, build: PluginBuild) -> None:
        self.loaders = dict(build.initial_options.loader)
        build.on_resolve(r".*", self.resolve)
        build.on_load(r".*", self.load, namespace=IN_MEMORY_NAMESPACE)

    def candidate_path(self, specifier: str, importer: str) -> str:
        if is_bare(specifier):
            return os.path.normpath(os.path.join(self.cwd, specifier))
        base = os.path.dirname(importer) if importer else self.cwd
        return os.path.normpath(os.path.join(base, specifier))

    def resolve(self, args: OnResolveArgs) -> Optional[OnResolveResult]:
        found = self.table.lookup(self.candidate_path(args.path, args.importer))
        if found is None:
            return None
        logger.debug("Resolved %s to virtual file %s", args.path, found.path)
        return OnResolveResult(path=found.path, namespace=IN_MEMORY_NAMESPACE, plugin_data=args.path)

    def load(self, args: OnLoadArgs) -> Optional[OnLoadResult]:
        found = self.table.get(args.path)
        if found is None:
            return None
        loader = found.loader or loader_for_virtual(found.path, self.loaders)
        if not is_valid_loader(loader):
            return OnLoadResult(errors=[Message(text=invalid_loader_message(loader, args.plugin_data))])
        contents = found.contents
        if loader == MDX_LOADER:
            text = contents.decode("utf-8") if isinstance(contents, bytes) else contents
            contents = self.compile_document(text, found.path)
            loader = "jsx"
        return OnLoadResult(contents=contents, loader=loader, resolve_dir=os.path.dirname(found.path))


def create_mdx_plugin(compile_document: DocumentCompiler) -> Plugin:
    """Compile ``.mdx``/``.md`` files found on disk (including in ``node_modules``)."""

    def setup(build: PluginBuild) -> None:
        loaders = dict(build.initial_options.loader)

        async def load(args: OnLoadArgs) -> Optional[OnLoadResult]:
            if loader_for_file(args.path, loaders) != MDX_LOADER:
                return None
            text = await asyncio.to_thread(_read_text, args.path)
            code = await asyncio.to_thread(compile_document, text, args.path)
            return OnLoadResult(contents=code, loader="jsx", resolve_dir=os.path.dirname(args.path))

        build.on_load(r"\.mdx?$", load, namespace="file")

    return Plugin(name=MDX_PLUGIN, setup=setup)


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8") as handle:
        return handle.read()


__all__ = [
    "DocumentCompiler",
    "IN_MEMORY_NAMESPACE",
    "IN_MEMORY_PLUGIN",
    "MDX_PLUGIN",
    "ResolutionAdapter",
    "create_mdx_plugin",
]
