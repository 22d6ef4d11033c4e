"""Renders linked modules into a single IIFE script."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined


@dataclass
class LinkedModule:
    id: int
    label: str
    code: str
    dependencies: Dict[str, int] = field(default_factory=dict)


class BundleEmitter:
    """Fills the bundle template with module bodies and their dependency maps."""

    TEMPLATE_NAME = "bundle.js.j2"

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )

    def emit(self, modules: Sequence[LinkedModule], *, entry_id: int, global_name: str) -> str:
        template = self._env.get_template(self.TEMPLATE_NAME)
        return template.render(
            modules=sorted(modules, key=lambda module: module.id),
            entry_id=entry_id,
            global_name=global_name,
        )


__all__ = ["BundleEmitter", "LinkedModule"]
