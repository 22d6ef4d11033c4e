"""A small plugin-driven JavaScript bundler producing a single IIFE."""

from __future__ import annotations

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
    Plugin,
    PluginBuild,
    message_dict,
)
from .build import FILE_NAMESPACE, build
from .loaders import LOADERS

__all__ = [
    "BuildFailure",
    "BuildOptions",
    "BuildResult",
    "FILE_NAMESPACE",
    "LOADERS",
    "Location",
    "Message",
    "OnLoadArgs",
    "OnLoadResult",
    "OnResolveArgs",
    "OnResolveResult",
    "OutputFile",
    "Plugin",
    "PluginBuild",
    "build",
    "message_dict",
]
