"""Core data models shared across mdxbundler components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .engine.api import Message


@dataclass
class SourceDocument:
    """MDX text with an optional logical path (a VFile-like value)."""

    text: str
    path: Optional[str] = None


@dataclass
class BundleResult:
    """Outcome of one bundle call."""

    code: str
    frontmatter: Dict[str, Any]
    matter: Dict[str, Any]
    errors: List[Message] = field(default_factory=list)
