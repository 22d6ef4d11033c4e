"""Public data types of the bundling engine and its plugin interface."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Pattern, Tuple, Union

Contents = Union[str, bytes]

DEFAULT_RESOLVE_EXTENSIONS: Tuple[str, ...] = (".tsx", ".ts", ".jsx", ".js", ".mjs", ".cjs", ".json", ".mdx")
DEFAULT_MAIN_FIELDS: Tuple[str, ...] = ("browser", "module", "main")
DEFAULT_CONDITIONS: Tuple[str, ...] = ("browser", "import", "module", "require", "default")


@dataclass(frozen=True)
class Location:
    """Position of a diagnostic: 1-based line, 0-based column."""

    file: str
    line: int
    column: int
    length: int = 0
    line_text: str = ""


@dataclass
class Message:
    """A build error or warning."""

    text: str
    location: Optional[Location] = None
    plugin_name: str = ""
    notes: List[str] = field(default_factory=list)
    detail: Any = None


class BuildFailure(Exception):
    """Raised by :func:`mdxbundler.engine.build` when any error was recorded."""

    def __init__(self, errors: List[Message], warnings: Optional[List[Message]] = None) -> None:
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        count = len(self.errors)
        super().__init__(f"Build failed with {count} error{'s' if count != 1 else ''}")


@dataclass(frozen=True)
class OutputFile:
    path: str
    contents: bytes

    @property
    def text(self) -> str:
        return self.contents.decode("utf-8")


@dataclass
class BuildResult:
    output_files: List[OutputFile] = field(default_factory=list)
    errors: List[Message] = field(default_factory=list)
    warnings: List[Message] = field(default_factory=list)


@dataclass(frozen=True)
class OnResolveArgs:
    path: str
    importer: str
    namespace: str
    resolve_dir: str
    kind: str
    plugin_data: Any = None


@dataclass
class OnResolveResult:
    path: Optional[str] = None
    namespace: Optional[str] = None
    external: bool = False
    plugin_data: Any = None
    errors: List[Message] = field(default_factory=list)
    warnings: List[Message] = field(default_factory=list)


@dataclass(frozen=True)
class OnLoadArgs:
    path: str
    namespace: str
    plugin_data: Any = None


@dataclass
class OnLoadResult:
    contents: Optional[Contents] = None
    loader: Optional[str] = None
    resolve_dir: Optional[str] = None
    plugin_data: Any = None
    errors: List[Message] = field(default_factory=list)
    warnings: List[Message] = field(default_factory=list)


ResolveCallback = Callable[[OnResolveArgs], Union[Optional[OnResolveResult], Awaitable[Optional[OnResolveResult]]]]
LoadCallback = Callable[[OnLoadArgs], Union[Optional[OnLoadResult], Awaitable[Optional[OnLoadResult]]]]


@dataclass(frozen=True)
class Plugin:
    """A named bundle of resolve/load hooks registered by ``setup``."""

    name: str
    setup: Callable[["PluginBuild"], None]


@dataclass(frozen=True)
class BuildOptions:
    """Everything one build needs. Treated as an immutable value.

    Callers adjust options with :func:`dataclasses.replace` rather than by
    mutating an instance.
    """

    entry_points: Tuple[str, ...] = ()
    abs_working_dir: str = ""
    loader: Mapping[str, str] = field(default_factory=dict)
    plugins: Tuple[Plugin, ...] = ()
    write: bool = False
    outdir: Optional[str] = None
    public_path: str = ""
    global_name: str = "Component"
    jsx: str = "transform"
    jsx_factory: str = "React.createElement"
    jsx_fragment: str = "React.Fragment"
    jsx_import_source: str = "react"
    define: Mapping[str, str] = field(default_factory=dict)
    resolve_extensions: Tuple[str, ...] = DEFAULT_RESOLVE_EXTENSIONS
    main_fields: Tuple[str, ...] = DEFAULT_MAIN_FIELDS
    conditions: Tuple[str, ...] = DEFAULT_CONDITIONS
    asset_names: str = "[name]-[hash]"
    target: str = "es2020"


@dataclass(frozen=True)
class _Hook:
    plugin_name: str
    filter: Pattern[str]
    namespace: Optional[str]
    callback: Callable[..., Any]


class PluginBuild:
    """Registration surface handed to :pyattr:`Plugin.setup`."""

    def __init__(self, plugin_name: str, initial_options: BuildOptions) -> None:
        self.plugin_name = plugin_name
        self.initial_options = initial_options
        self.resolve_hooks: List[_Hook] = []
        self.load_hooks: List[_Hook] = []

    def on_resolve(self, filter: str, callback: ResolveCallback, *, namespace: Optional[str] = None) -> None:
        self.resolve_hooks.append(_Hook(self.plugin_name, re.compile(filter), namespace, callback))

    def on_load(self, filter: str, callback: LoadCallback, *, namespace: Optional[str] = None) -> None:
        self.load_hooks.append(_Hook(self.plugin_name, re.compile(filter), namespace, callback))


def message_dict(message: Message) -> Dict[str, Any]:
    """JSON-friendly view of a message for CLI and HTTP output."""
    payload: Dict[str, Any] = {"text": message.text, "plugin": message.plugin_name or None}
    if message.location is not None:
        payload["location"] = {
            "file": message.location.file,
            "line": message.location.line,
            "column": message.location.column,
            "line_text": message.location.line_text,
        }
    else:
        payload["location"] = None
    return payload


__all__ = [
    "BuildFailure",
    "BuildOptions",
    "BuildResult",
    "Contents",
    "DEFAULT_CONDITIONS",
    "DEFAULT_MAIN_FIELDS",
    "DEFAULT_RESOLVE_EXTENSIONS",
    "Location",
    "Message",
    "OnLoadArgs",
    "OnLoadResult",
    "OnResolveArgs",
    "OnResolveResult",
    "OutputFile",
    "Plugin",
    "PluginBuild",
    "message_dict",
]
