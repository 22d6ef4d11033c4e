"""Filesystem and node_modules resolution."""

from __future__ import annotations

import json
import os
from typing import Any, Iterable, Optional, Sequence, Tuple

from ..logging import get_logger

logger = get_logger("engine.resolve")

_INDEX_NAME = "index"


def is_relative(specifier: str) -> bool:
    return specifier in {".", ".."} or specifier.startswith(("./", "../"))


def is_bare(specifier: str) -> bool:
    return not is_relative(specifier) and not os.path.isabs(specifier)


def split_package_specifier(specifier: str) -> Tuple[str, str]:
    """Return ``(package_name, subpath)`` where subpath is ``.`` or ``./rest``."""
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        name = "/".join(parts[:2])
        rest = parts[2:]
    else:
        name = parts[0]
        rest = parts[1:]
    subpath = "./" + "/".join(rest) if rest else "."
    return name, subpath


def resolve_path(
    specifier: str,
    resolve_dir: str,
    *,
    extensions: Sequence[str],
    main_fields: Sequence[str],
    conditions: Sequence[str],
) -> Optional[str]:
    """Resolve ``specifier`` against the real filesystem.

    Relative and absolute specifiers are looked up as files (with each of
    ``extensions`` appended) and then as directories; bare specifiers are
    looked up in ``node_modules`` directories from ``resolve_dir`` upwards.
    """
    if is_bare(specifier):
        return _resolve_package(specifier, resolve_dir, extensions, main_fields, conditions)
    base = os.path.normpath(os.path.join(resolve_dir, specifier))
    return _load_file_or_directory(base, extensions, main_fields)


def _load_file_or_directory(
    path: str, extensions: Sequence[str], main_fields: Sequence[str]
) -> Optional[str]:
    return _load_as_file(path, extensions) or _load_as_directory(path, extensions, main_fields)


def _load_as_file(path: str, extensions: Sequence[str]) -> Optional[str]:
    if os.path.isfile(path):
        return path
    for extension in extensions:
        candidate = path + extension
        if os.path.isfile(candidate):
            return candidate
    # TypeScript sources are commonly imported with the extension of their output.
    stem, extension = os.path.splitext(path)
    if extension in {".js", ".jsx"}:
        for replacement in (".ts", ".tsx"):
            if os.path.isfile(stem + replacement):
                return stem + replacement
    return None


def _load_as_directory(
    path: str, extensions: Sequence[str], main_fields: Sequence[str]
) -> Optional[str]:
    if not os.path.isdir(path):
        return None
    manifest = _read_package_json(path)
    if manifest:
        for field_name in main_fields:
            entry = manifest.get(field_name)
            if isinstance(entry, str) and entry:
                target = os.path.normpath(os.path.join(path, entry))
                found = _load_as_file(target, extensions) or _load_index(target, extensions)
                if found:
                    return found
    return _load_index(path, extensions)


def _load_index(path: str, extensions: Sequence[str]) -> Optional[str]:
    if not os.path.isdir(path):
        return None
    return _load_as_file(os.path.join(path, _INDEX_NAME), extensions)


def _resolve_package(
    specifier: str,
    resolve_dir: str,
    extensions: Sequence[str],
    main_fields: Sequence[str],
    conditions: Sequence[str],
) -> Optional[str]:
    name, subpath = split_package_specifier(specifier)
    for directory in _ancestors(resolve_dir):
        package_dir = os.path.join(directory, "node_modules", name)
        if not os.path.isdir(package_dir):
            continue
        manifest = _read_package_json(package_dir)
        exports = manifest.get("exports") if manifest else None
        if exports is not None:
            target = _resolve_exports(exports, subpath, conditions)
            if target is None:
                logger.debug("Package %s does not export %s", name, subpath)
                return None
            return _load_as_file(os.path.normpath(os.path.join(package_dir, target)), ())
        if subpath == ".":
            found = _load_as_directory(package_dir, extensions, main_fields)
        else:
            found = _load_file_or_directory(
                os.path.normpath(os.path.join(package_dir, subpath)), extensions, main_fields
            )
        if found:
            return found
    return None


def _resolve_exports(exports: Any, subpath: str, conditions: Sequence[str]) -> Optional[str]:
    if isinstance(exports, (str, list)):
        return _pick_condition(exports, conditions) if subpath == "." else None
    if not isinstance(exports, dict):
        return None
    if any(key.startswith(".") for key in exports):
        if subpath in exports:
            return _pick_condition(exports[subpath], conditions)
        for key, value in exports.items():
            if key.endswith("/*") and subpath.startswith(key[:-1]):
                picked = _pick_condition(value, conditions)
                if picked:
                    return picked.replace("*", subpath[len(key) - 1 :])
        return None
    return _pick_condition(exports, conditions) if subpath == "." else None


def _pick_condition(entry: Any, conditions: Sequence[str]) -> Optional[str]:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, list):
        for item in entry:
            picked = _pick_condition(item, conditions)
            if picked:
                return picked
        return None
    if isinstance(entry, dict):
        for key, value in entry.items():
            if key in conditions or key == "default":
                picked = _pick_condition(value, conditions)
                if picked:
                    return picked
    return None


def _read_package_json(directory: str) -> dict:
    path = os.path.join(directory, "package.json")
    try:
        with open(path, encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return {}
    return payload if isinstance(payload, dict) else {}


def _ancestors(directory: str) -> Iterable[str]:
    current = os.path.abspath(directory)
    while True:
        yield current
        parent = os.path.dirname(current)
        if parent == current:
            return
        current = parent


__all__ = ["is_bare", "is_relative", "resolve_path", "split_package_specifier"]
