"""Logger hierarchy and handlers for mdxbundler.

Library modules log through :func:`get_logger`. Only the command line and the
service install handlers, so embedding applications keep control of output.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .engine.api import Message

ROOT_LOGGER = "mdxbundler"
CONSOLE_FORMAT = "[mdxbundler] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``mdxbundler`` or one of its children, e.g. ``mdxbundler.engine``."""
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send mdxbundler records to stderr and, optionally, to ``log_file``.

    Calling it again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    root = get_logger()
    root.setLevel(level)
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    # stdout carries bundle code, keep diagnostics off it.
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(sink)
    return root


def log_messages(logger: logging.Logger, messages: Iterable["Message"], level: int = logging.WARNING) -> None:
    """Log engine diagnostics one record per message, with their location when known."""
    for message in messages:
        text = f"[plugin: {message.plugin_name}] {message.text}" if message.plugin_name else message.text
        location = message.location
        if location is not None and location.file:
            logger.log(level, "%s:%d:%d: %s", location.file, location.line, location.column, text)
        else:
            logger.log(level, "%s", text)


__all__ = ["configure_logging", "get_logger", "log_messages"]
