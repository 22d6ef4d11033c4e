"""Exceptions raised by :func:`mdxbundler.bundle_mdx`."""

from __future__ import annotations

from typing import List, Optional

from .engine.api import Message


class ConfigurationError(ValueError):
    """Raised when the caller's options are inconsistent before anything is built."""


class BundleError(RuntimeError):
    """Raised when the build reports errors.

    ``str(error)`` is the human-readable summary; the structured messages are
    kept on ``errors`` and ``warnings``.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[Message]] = None,
        warnings: Optional[List[Message]] = None,
    ) -> None:
        super().__init__(message)
        self.errors = list(errors or [])
        self.warnings = list(warnings or [])


__all__ = ["BundleError", "ConfigurationError"]
