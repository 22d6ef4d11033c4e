"""Dependency graph construction and bundle emission."""

from __future__ import annotations

import asyncio
import inspect
import os
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Tuple

from ..logging import get_logger
from .api import (
    BuildFailure,
    BuildOptions,
    BuildResult,
    Location,
    Message,
    OnLoadArgs,
    OnLoadResult,
    OnResolveArgs,
    OnResolveResult,
    OutputFile,
    PluginBuild,
)
from .emitter import BundleEmitter, LinkedModule
from .loaders import BUILTIN_EXTENSION_LOADERS, LOADERS, LoaderError, compile_module, invalid_loader_message
from .modules import ImportRecord
from .resolve import resolve_path
from .scanning import line_and_column

logger = get_logger("engine")

FILE_NAMESPACE = "file"


@dataclass(frozen=True)
class _Resolved:
    path: str
    namespace: str
    external: bool = False
    plugin_data: Any = None


@dataclass
class _PendingModule:
    id: int
    path: str
    namespace: str
    plugin_data: Any = None
    importer_location: Optional[Location] = None
    specifier: str = ""
    code: str = ""
    dependencies: Dict[str, int] = field(default_factory=dict)


async def build(options: BuildOptions) -> BuildResult:
    """Bundle ``options.entry_points`` into one script.

    Raises :class:`BuildFailure` carrying every error found in the graph.
    """
    return await _Builder(options).run()


class _Builder:
    def __init__(self, options: BuildOptions) -> None:
        self.options = options
        self.cwd = os.path.abspath(options.abs_working_dir or os.getcwd())
        self.errors: List[Message] = []
        self.warnings: List[Message] = []
        self.modules: Dict[Tuple[str, str], _PendingModule] = {}
        self.assets: Dict[str, bytes] = {}
        self.resolve_hooks = []
        self.load_hooks = []
        for plugin in options.plugins:
            registration = PluginBuild(plugin.name, options)
            plugin.setup(registration)
            self.resolve_hooks.extend(registration.resolve_hooks)
            self.load_hooks.extend(registration.load_hooks)

    async def run(self) -> BuildResult:
        queue: Deque[_PendingModule] = deque()
        entry_ids: List[int] = []
        for entry in self.options.entry_points:
            resolved = await self._resolve(entry, importer="", namespace=FILE_NAMESPACE, resolve_dir=self.cwd, kind="entry-point", location=None)
            if resolved is None or resolved.external:
                continue
            module, created = self._module_for(resolved, None, entry)
            entry_ids.append(module.id)
            if created:
                queue.append(module)

        while queue:
            module = queue.popleft()
            records, resolve_dir = await self._load(module)
            for record in records:
                location = Location(
                    file=module.path,
                    line=record.line,
                    column=record.column,
                    length=record.length,
                    line_text=record.line_text,
                )
                if record.specifier in module.dependencies:
                    continue
                resolved = await self._resolve(
                    record.specifier,
                    importer=module.path,
                    namespace=module.namespace,
                    resolve_dir=resolve_dir,
                    kind=record.kind,
                    location=location,
                )
                if resolved is None or resolved.external:
                    continue
                dependency, created = self._module_for(resolved, location, record.specifier)
                module.dependencies[record.specifier] = dependency.id
                if created:
                    queue.append(dependency)

        if self.errors:
            raise BuildFailure(self.errors, self.warnings)

        code = BundleEmitter().emit(
            [
                LinkedModule(id=m.id, label=self._label(m), code=m.code, dependencies=m.dependencies)
                for m in self.modules.values()
            ],
            entry_id=entry_ids[0] if entry_ids else 0,
            global_name=self.options.global_name,
        )
        output_files = self._output_files(code)
        if self.options.write:
            await asyncio.to_thread(_write_outputs, output_files)
        logger.debug("Bundled %d modules (%d assets)", len(self.modules), len(self.assets))
        return BuildResult(output_files=output_files, errors=[], warnings=list(self.warnings))

    # -- resolution -------------------------------------------------------------

    async def _resolve(
        self,
        specifier: str,
        *,
        importer: str,
        namespace: str,
        resolve_dir: str,
        kind: str,
        location: Optional[Location],
    ) -> Optional[_Resolved]:
        args = OnResolveArgs(path=specifier, importer=importer, namespace=namespace, resolve_dir=resolve_dir, kind=kind)
        for hook in self.resolve_hooks:
            if hook.namespace is not None and hook.namespace != namespace:
                continue
            if not hook.filter.search(specifier):
                continue
            try:
                result: Optional[OnResolveResult] = await _call(hook.callback, args)
            except Exception as exc:  # plugin failures become build errors
                self.errors.append(Message(text=str(exc), location=location, plugin_name=hook.plugin_name))
                return None
            if result is None:
                continue
            self._collect(result.errors, result.warnings, hook.plugin_name, location)
            if result.errors:
                return None
            if result.path is None and not result.external:
                continue
            return _Resolved(
                path=result.path or specifier,
                namespace=result.namespace or FILE_NAMESPACE,
                external=result.external,
                plugin_data=result.plugin_data,
            )

        found = await asyncio.to_thread(
            resolve_path,
            specifier,
            resolve_dir or self.cwd,
            extensions=self.options.resolve_extensions,
            main_fields=self.options.main_fields,
            conditions=self.options.conditions,
        )
        if found is None:
            self.errors.append(Message(text=f'Could not resolve "{specifier}"', location=location))
            return None
        return _Resolved(path=found, namespace=FILE_NAMESPACE)

    def _module_for(
        self, resolved: _Resolved, location: Optional[Location], specifier: str
    ) -> Tuple[_PendingModule, bool]:
        key = (resolved.namespace, resolved.path)
        existing = self.modules.get(key)
        if existing is not None:
            return existing, False
        module = _PendingModule(
            id=len(self.modules),
            path=resolved.path,
            namespace=resolved.namespace,
            plugin_data=resolved.plugin_data,
            importer_location=location,
            specifier=specifier,
        )
        self.modules[key] = module
        return module, True

    # -- loading ------------------------------------------------------------------

    async def _load(self, module: _PendingModule) -> Tuple[List[ImportRecord], str]:
        args = OnLoadArgs(path=module.path, namespace=module.namespace, plugin_data=module.plugin_data)
        loaded: Optional[OnLoadResult] = None
        plugin_name = ""
        for hook in self.load_hooks:
            if hook.namespace is not None and hook.namespace != module.namespace:
                continue
            if not hook.filter.search(module.path):
                continue
            try:
                loaded = await _call(hook.callback, args)
            except Exception as exc:  # plugin failures become build errors
                self.errors.append(
                    Message(text=str(exc), location=module.importer_location, plugin_name=hook.plugin_name)
                )
                return [], ""
            if loaded is not None:
                plugin_name = hook.plugin_name
                break

        if loaded is not None:
            self._collect(loaded.errors, loaded.warnings, plugin_name, module.importer_location)
            if loaded.errors:
                return [], ""
            if loaded.contents is None:
                loaded = None

        if loaded is None:
            if module.namespace != FILE_NAMESPACE:
                self.errors.append(
                    Message(
                        text=f'Do not know how to load path: {module.namespace}:{module.path}',
                        location=module.importer_location,
                    )
                )
                return [], ""
            loaded = await self._load_from_disk(module)
            if loaded is None:
                return [], ""

        loader = loaded.loader or self._loader_for(module)
        if loader is None:
            return [], ""
        if loader not in LOADERS:
            self.errors.append(
                Message(
                    text=invalid_loader_message(loader, module.specifier),
                    location=module.importer_location,
                    plugin_name=plugin_name,
                )
            )
            return [], ""

        resolve_dir = loaded.resolve_dir or os.path.dirname(module.path)
        try:
            compiled = compile_module(loaded.contents, loader, module.path, self.options, self._emit_asset)
        except LoaderError as exc:
            location = self._location_in(module, loaded.contents, exc.offset)
            self.errors.append(Message(text=str(exc), location=location, plugin_name=plugin_name))
            return [], resolve_dir
        module.code = compiled.code
        for text, offset in compiled.warnings:
            self.warnings.append(Message(text=text, location=self._location_in(module, loaded.contents, offset)))
        return compiled.imports, resolve_dir

    async def _load_from_disk(self, module: _PendingModule) -> Optional[OnLoadResult]:
        if self._loader_for(module) is None:
            return None
        try:
            contents = await asyncio.to_thread(_read_bytes, module.path)
        except OSError as exc:
            self.errors.append(
                Message(text=f"Cannot read file {self._relative(module.path)}: {exc.strerror}", location=module.importer_location)
            )
            return None
        return OnLoadResult(contents=contents)

    def _loader_for(self, module: _PendingModule) -> Optional[str]:
        extension = os.path.splitext(module.path)[1]
        loader = self.options.loader.get(extension) or BUILTIN_EXTENSION_LOADERS.get(extension)
        if loader is None:
            self.errors.append(
                Message(
                    text=f'No loader is configured for "{extension}" files: {self._relative(module.path)}',
                    location=module.importer_location,
                )
            )
        return loader

    def _emit_asset(self, name: str, data: bytes) -> None:
        self.assets[name] = data

    # -- output ---------------------------------------------------------------------

    def _output_files(self, code: str) -> List[OutputFile]:
        outdir = os.path.abspath(self.options.outdir) if self.options.outdir else self.cwd
        entry = self.options.entry_points[0] if self.options.entry_points else "bundle"
        stem = os.path.splitext(os.path.basename(entry))[0] or "bundle"
        files = [OutputFile(path=os.path.join(outdir, name), contents=data) for name, data in sorted(self.assets.items())]
        files.append(OutputFile(path=os.path.join(outdir, f"{stem}.js"), contents=code.encode("utf-8")))
        return files

    # -- helpers --------------------------------------------------------------------

    def _collect(self, errors: List[Message], warnings: List[Message], plugin_name: str, location: Optional[Location]) -> None:
        for bucket, messages in ((self.errors, errors), (self.warnings, warnings)):
            for message in messages:
                bucket.append(
                    Message(
                        text=message.text,
                        location=message.location or location,
                        plugin_name=message.plugin_name or plugin_name,
                        notes=list(message.notes),
                        detail=message.detail,
                    )
                )

    def _location_in(self, module: _PendingModule, contents: Any, offset: Optional[int]) -> Optional[Location]:
        if offset is None or not isinstance(contents, (str, bytes)):
            return module.importer_location
        text = contents.decode("utf-8", errors="replace") if isinstance(contents, bytes) else contents
        line, column, line_text = line_and_column(text, offset)
        return Location(file=module.path, line=line, column=column, line_text=line_text)

    def _label(self, module: _PendingModule) -> str:
        if module.namespace == FILE_NAMESPACE:
            return self._relative(module.path)
        return f"{module.namespace}:{self._relative(module.path)}"

    def _relative(self, path: str) -> str:
        if not os.path.isabs(path):
            return path
        return os.path.relpath(path, self.cwd).replace(os.sep, "/")


async def _call(callback: Any, args: Any) -> Any:
    result = callback(args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as handle:
        return handle.read()


def _write_outputs(files: List[OutputFile]) -> None:
    for output in files:
        os.makedirs(os.path.dirname(output.path), exist_ok=True)
        with open(output.path, "wb") as handle:
            handle.write(output.contents)


__all__ = ["FILE_NAMESPACE", "build"]
