"""Glue between an MDX document and the bundling engine."""

from __future__ import annotations

from .assets import AssetEmissionConfig, check_build_options
from .diagnostics import format_messages, to_bundle_error
from .entry import entry_path_for, register_entry
from .globals import DEFAULT_GLOBALS, create_globals_plugin, merge_globals
from .loaders import default_loader_table
from .resolver import IN_MEMORY_NAMESPACE, IN_MEMORY_PLUGIN, ResolutionAdapter, create_mdx_plugin
from .vfs import VirtualFile, VirtualFileTable

__all__ = [
    "AssetEmissionConfig",
    "DEFAULT_GLOBALS",
    "IN_MEMORY_NAMESPACE",
    "IN_MEMORY_PLUGIN",
    "ResolutionAdapter",
    "VirtualFile",
    "VirtualFileTable",
    "check_build_options",
    "create_globals_plugin",
    "create_mdx_plugin",
    "default_loader_table",
    "entry_path_for",
    "format_messages",
    "merge_globals",
    "register_entry",
    "to_bundle_error",
]
