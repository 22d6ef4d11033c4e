"""Configuration loading for mdxbundler (.mdxbundler.yml)."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .bundling.loaders import is_valid_loader
from .engine.api import BuildOptions
from .frontmatter import MatterOptions
from .markup import MarkupOptions

CONFIG_FILENAME = ".mdxbundler.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ProjectConfig:
    """Represents the settings defined in .mdxbundler.yml."""

    root: Path
    cwd: Optional[Path] = None
    globals: Dict[str, str] = field(default_factory=dict)
    loaders: Dict[str, str] = field(default_factory=dict)
    bundle_directory: Optional[Path] = None
    bundle_path: Optional[str] = None
    excerpt: bool = False
    excerpt_separator: Optional[str] = None
    image_imports: bool = False

    def bundle_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for :func:`mdxbundler.bundle_mdx` reflecting this file."""
        kwargs: Dict[str, Any] = {
            "cwd": str(self.cwd or self.root),
            "globals": dict(self.globals),
        }
        if self.bundle_directory is not None:
            kwargs["bundle_directory"] = str(self.bundle_directory)
        if self.bundle_path is not None:
            kwargs["bundle_path"] = self.bundle_path
        if self.excerpt:
            kwargs["matter_options"] = self._matter_options
        if self.image_imports:
            kwargs["markup_options"] = self._markup_options
        if self.loaders:
            kwargs["build_options"] = self._build_options
        return kwargs

    def _matter_options(self, options: MatterOptions) -> MatterOptions:
        return dataclasses.replace(options, excerpt=True, excerpt_separator=self.excerpt_separator)

    def _markup_options(self, options: MarkupOptions, frontmatter: Dict[str, Any]) -> MarkupOptions:
        return dataclasses.replace(options, image_imports=True)

    def _build_options(self, options: BuildOptions, frontmatter: Dict[str, Any]) -> BuildOptions:
        loaders = dict(options.loader)
        loaders.update(self.loaders)
        return dataclasses.replace(options, loader=loaders)


def load_config(config_path: Path) -> ProjectConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProjectConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    cwd_str = _as_str(data.get("cwd"))
    bundle_directory_str = _as_str(data.get("bundle_directory"))

    loaders = _as_str_map(data.get("loaders"), "loaders")
    for extension, loader in loaders.items():
        if not extension.startswith("."):
            raise ConfigError(f"Loader key {extension!r} must be an extension starting with '.'")
        if not is_valid_loader(loader):
            raise ConfigError(f"Invalid loader value {loader!r} for {extension!r}")

    matter_data = _as_dict(data.get("frontmatter"))
    markup_data = _as_dict(data.get("markup"))

    return ProjectConfig(
        root=root,
        cwd=(root / cwd_str).resolve() if cwd_str else None,
        globals=_as_str_map(data.get("globals"), "globals"),
        loaders=loaders,
        bundle_directory=(root / bundle_directory_str).resolve() if bundle_directory_str else None,
        bundle_path=_as_str(data.get("bundle_path")),
        excerpt=_as_bool(matter_data.get("excerpt")) or False,
        excerpt_separator=_as_str(matter_data.get("excerpt_separator")),
        image_imports=_as_bool(markup_data.get("image_imports")) or False,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    return str(value)


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "on", "1"}:
            return True
        if lowered in {"false", "no", "off", "0"}:
            return False
    return None


def _as_str_map(value: Any, key: str) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return {str(name): str(item) for name, item in value.items()}


__all__ = ["CONFIG_FILENAME", "ConfigError", "ProjectConfig", "load_config"]
