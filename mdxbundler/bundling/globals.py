"""Specifiers satisfied by global variables of the rendering environment."""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional

from ..engine.api import OnLoadArgs, OnLoadResult, OnResolveArgs, OnResolveResult, Plugin, PluginBuild
from ..errors import ConfigurationError

GLOBALS_PLUGIN = "globalExternals"
GLOBALS_NAMESPACE = "global-externals"

DEFAULT_GLOBALS: Mapping[str, str] = {
    "react": "React",
    "react-dom": "ReactDOM",
    "react/jsx-runtime": "_jsx_runtime",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$")


def merge_globals(caller: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Defaults first, caller entries win."""
    merged = dict(DEFAULT_GLOBALS)
    merged.update(caller or {})
    for specifier, name in merged.items():
        if not _IDENTIFIER.match(name):
            raise ConfigurationError(f'Global name {name!r} for "{specifier}" is not a valid identifier')
    return merged


def create_globals_plugin(globals: Mapping[str, str]) -> Plugin:
    names = dict(globals)

    def setup(build: PluginBuild) -> None:
        if not names:
            return
        pattern = "^(?:" + "|".join(re.escape(specifier) for specifier in sorted(names, key=len, reverse=True)) + ")$"

        def resolve(args: OnResolveArgs) -> OnResolveResult:
            return OnResolveResult(path=args.path, namespace=GLOBALS_NAMESPACE)

        def load(args: OnLoadArgs) -> OnLoadResult:
            return OnLoadResult(contents=f"module.exports = {names[args.path]};", loader="js")

        build.on_resolve(pattern, resolve)
        build.on_load(r".*", load, namespace=GLOBALS_NAMESPACE)

    return Plugin(name=GLOBALS_PLUGIN, setup=setup)


__all__ = ["DEFAULT_GLOBALS", "GLOBALS_NAMESPACE", "GLOBALS_PLUGIN", "create_globals_plugin", "merge_globals"]
