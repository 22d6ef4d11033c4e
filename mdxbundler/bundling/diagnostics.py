"""Human-readable summaries of engine errors and warnings."""

from __future__ import annotations

import os
from typing import List, Sequence

from ..engine.api import BuildFailure, Message
from ..errors import BundleError

MAX_LISTED = 5


def format_message(message: Message, kind: str, cwd: str) -> str:
    """``file:line:column: ERROR: [plugin: name] text`` with the parts that are known."""
    prefix = ""
    if message.location is not None:
        location = message.location
        prefix = f"{_display_path(location.file, cwd)}:{location.line}:{location.column}: "
    plugin = f"[plugin: {message.plugin_name}] " if message.plugin_name else ""
    return f"{prefix}{kind.upper()}: {plugin}{message.text}"


def format_messages(messages: Sequence[Message], kind: str = "error", cwd: str = "") -> str:
    count = len(messages)
    noun = kind if count == 1 else f"{kind}s"
    verb = "failed" if kind == "error" else "finished"
    lines: List[str] = [f"Build {verb} with {count} {noun}:"]
    lines.extend(format_message(message, kind, cwd) for message in messages[:MAX_LISTED])
    if count > MAX_LISTED:
        lines.append("...")
    return "\n".join(lines)


def to_bundle_error(failure: BuildFailure, cwd: str) -> BundleError:
    return BundleError(format_messages(failure.errors, "error", cwd), failure.errors, failure.warnings)


def _display_path(path: str, cwd: str) -> str:
    if not cwd or not os.path.isabs(path):
        return path
    return os.path.relpath(path, cwd).replace(os.sep, "/")


__all__ = ["MAX_LISTED", "format_message", "format_messages", "to_bundle_error"]
