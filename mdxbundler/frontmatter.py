"""Front matter splitting for MDX documents (gray-matter compatible)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import yaml

from .logging import get_logger

logger = get_logger("frontmatter")


class FrontMatterError(ValueError):
    """Raised when a front matter block is unterminated or is not a YAML mapping."""

    def __init__(self, message: str, *, path: Optional[str] = None, line: Optional[int] = None) -> None:
        prefix = path or "<input>"
        if line is not None:
            prefix = f"{prefix}:{line}"
        super().__init__(f"{prefix}: {message}")
        self.path = path
        self.line = line


@dataclass
class MatterOptions:
    """Options handed to the matter-options hook."""

    delimiters: Tuple[str, str] = ("---", "---")
    excerpt: bool = False
    excerpt_separator: Optional[str] = None


@dataclass
class MatterResult:
    content: str
    data: Dict[str, Any] = field(default_factory=dict)
    excerpt: str = ""
    matter: str = ""
    orig: str = ""
    path: Optional[str] = None
    is_empty: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "data": self.data,
            "excerpt": self.excerpt,
            "matter": self.matter,
            "orig": self.orig,
            "path": self.path,
            "is_empty": self.is_empty,
        }


def split_front_matter(
    text: str,
    options: Optional[MatterOptions] = None,
    *,
    path: Optional[str] = None,
) -> MatterResult:
    """Separate a leading YAML block from the document body.

    A document without a block is returned unchanged with empty ``data``.
    """
    options = options or MatterOptions()
    opening, closing = options.delimiters
    if text.startswith("\ufeff"):
        text = text[1:]

    result = MatterResult(content=text, orig=text, path=path)
    first_line, newline, rest = text.partition("\n")
    if first_line.rstrip("\r").rstrip() != opening:
        _apply_excerpt(result, options)
        return result

    matter_lines = []
    body_start: Optional[int] = None
    offset = len(first_line) + len(newline)
    for line in rest.splitlines(keepends=True):
        offset += len(line)
        if line.rstrip("\r\n").rstrip() == closing:
            body_start = offset
            break
        matter_lines.append(line)
    if body_start is None:
        raise FrontMatterError(f'front matter block opened with "{opening}" is never closed', path=path, line=1)

    result.matter = "".join(matter_lines)
    result.content = text[body_start:]
    if not result.matter.strip():
        result.is_empty = True
    else:
        result.data = _parse_yaml(result.matter, path)
    _apply_excerpt(result, options)
    logger.debug("Split %d front matter keys from %s", len(result.data), path or "<input>")
    return result


def _parse_yaml(matter: str, path: Optional[str]) -> Dict[str, Any]:
    try:
        loaded = yaml.safe_load(matter)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        # The block starts on line 2 of the document.
        line = mark.line + 2 if mark is not None else None
        raise FrontMatterError(f"invalid front matter: {exc.problem or exc}", path=path, line=line) from exc
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"invalid front matter: {exc}", path=path) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise FrontMatterError("front matter must be a mapping", path=path, line=2)
    return loaded


def _apply_excerpt(result: MatterResult, options: MatterOptions) -> None:
    if not options.excerpt:
        return
    separator = options.excerpt_separator or options.delimiters[0]
    offset = 0
    for line in result.content.splitlines(keepends=True):
        if line.rstrip("\r\n").rstrip() == separator:
            result.excerpt = result.content[:offset]
            return
        offset += len(line)


__all__ = ["FrontMatterError", "MatterOptions", "MatterResult", "split_front_matter"]
