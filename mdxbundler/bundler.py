"""Bundle one MDX document and everything it imports into a single script."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .bundling.assets import AssetEmissionConfig, check_build_options
from .bundling.diagnostics import to_bundle_error
from .bundling.entry import entry_path_for, register_entry
from .bundling.globals import create_globals_plugin, merge_globals
from .bundling.loaders import default_loader_table
from .bundling.resolver import ResolutionAdapter, create_mdx_plugin
from .bundling.vfs import Contents, VirtualFileTable
from .engine import BuildFailure, BuildOptions, build
from .errors import BundleError, ConfigurationError
from .frontmatter import MatterOptions, split_front_matter
from .logging import get_logger, log_messages
from .markup import MarkupCompiler, MarkupOptions
from .models import BundleResult, SourceDocument

logger = get_logger("bundler")

GLOBAL_NAME = "Component"

MarkupOptionsHook = Callable[[MarkupOptions, Dict[str, Any]], MarkupOptions]
MatterOptionsHook = Callable[[MatterOptions], MatterOptions]
BuildOptionsHook = Callable[[BuildOptions, Dict[str, Any]], BuildOptions]


async def bundle_mdx(
    source: Union[str, SourceDocument, None] = None,
    *,
    file: Union[str, Path, None] = None,
    cwd: Union[str, Path, None] = None,
    files: Optional[Mapping[str, Contents]] = None,
    globals: Optional[Mapping[str, str]] = None,
    markup_options: Optional[MarkupOptionsHook] = None,
    matter_options: Optional[MatterOptionsHook] = None,
    build_options: Optional[BuildOptionsHook] = None,
    bundle_directory: Union[str, Path, None] = None,
    bundle_path: Optional[str] = None,
) -> BundleResult:
    """Compile ``source`` (or the MDX file at ``file``) into a self-contained script.

    The returned ``code`` is the body of a function: it defines ``Component``
    and ends with ``return Component;``. Names listed in ``globals`` (plus
    ``React``, ``ReactDOM`` and ``_jsx_runtime``) must be supplied as
    parameters by whoever evaluates it.

    Raises :class:`ConfigurationError` for inconsistent options and
    :class:`BundleError` when the build reports errors.
    """
    if (source is None) == (file is None):
        raise ConfigurationError("Exactly one of `source` or `file` must be provided.")
    assets = AssetEmissionConfig(
        str(bundle_directory) if bundle_directory else None,
        bundle_path,
    )
    assets.validate()
    working_dir = os.path.abspath(str(cwd) if cwd else os.getcwd())
    merged_globals = merge_globals(globals)

    document = await _read_document(source, file)
    entry_path = entry_path_for(document, working_dir, str(file) if file else None)

    matter_settings = MatterOptions()
    if matter_options is not None:
        matter_settings = matter_options(matter_settings)
    matter = await asyncio.to_thread(split_front_matter, document.text, matter_settings, path=document.path)
    frontmatter = matter.data

    markup_settings = MarkupOptions()
    if markup_options is not None:
        markup_settings = markup_options(markup_settings, frontmatter)
    compiler = MarkupCompiler(markup_settings)
    compiled = await asyncio.to_thread(compiler.compile, matter.content, frontmatter=frontmatter, path=document.path)

    def compile_document(text: str, path: str) -> str:
        nested = split_front_matter(text, matter_settings, path=path)
        return compiler.compile(nested.content, frontmatter=nested.data, path=path).code

    table = register_entry(VirtualFileTable.from_mapping(files, working_dir), entry_path, compiled.code)
    adapter = ResolutionAdapter(table, working_dir, compile_document)

    options = BuildOptions(
        entry_points=(entry_path,),
        abs_working_dir=working_dir,
        loader=default_loader_table(emit_assets=assets.enabled),
        plugins=(
            create_globals_plugin(merged_globals),
            adapter.plugin(),
            create_mdx_plugin(compile_document),
        ),
        global_name=GLOBAL_NAME,
        jsx="automatic",
        jsx_import_source=markup_settings.jsx_import_source,
    )
    options = assets.apply(options)
    if build_options is not None:
        options = build_options(options, frontmatter)
    check_build_options(options)

    logger.debug("Bundling %s from %s", entry_path, working_dir)
    try:
        result = await build(options)
    except BuildFailure as failure:
        raise to_bundle_error(failure, working_dir) from failure

    scripts = [output for output in result.output_files if output.path.endswith(".js")]
    if not scripts:
        raise BundleError("The build produced no JavaScript output", [], result.warnings)
    log_messages(logger, result.warnings, logging.DEBUG)
    code = f"{scripts[-1].text};return {options.global_name};"
    logger.info("Bundled %s (%d bytes)", document.path or "<source>", len(code))
    return BundleResult(code=code, frontmatter=frontmatter, matter=matter.as_dict(), errors=list(result.warnings))


def bundle_mdx_sync(*args: Any, **kwargs: Any) -> BundleResult:
    """Blocking wrapper around :func:`bundle_mdx` for callers without an event loop."""
    return asyncio.run(bundle_mdx(*args, **kwargs))


async def _read_document(source: Union[str, SourceDocument, None], file: Union[str, Path, None]) -> SourceDocument:
    if isinstance(source, SourceDocument):
        return source
    if source is not None:
        return SourceDocument(text=source)
    path = os.path.abspath(str(file))
    text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
    return SourceDocument(text=text, path=path)


__all__ = ["GLOBAL_NAME", "bundle_mdx", "bundle_mdx_sync"]
