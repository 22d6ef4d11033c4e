"""Tests for mdxbundler.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdxbundler.config import ConfigError, ProjectConfig, load_config
from mdxbundler.engine.api import BuildOptions
from mdxbundler.frontmatter import MatterOptions
from mdxbundler.markup import MarkupOptions


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ProjectConfig)
    assert config.root == tmp_path.resolve()
    assert config.cwd is None
    assert config.globals == {}
    assert config.loaders == {}
    assert config.bundle_directory is None
    assert config.bundle_path is None
    assert config.excerpt is False
    assert config.image_imports is False


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".mdxbundler.yml"
    config_file.write_text(
        """
cwd: "content"
globals:
  left-pad: myLeftPad
loaders:
  .ts: tsx
  .png: file
bundle_directory: "public/img"
bundle_path: "/img/"
frontmatter:
  excerpt: yes
  excerpt_separator: "<!-- more -->"
markup:
  image_imports: true
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.cwd == (tmp_path / "content").resolve()
    assert config.globals == {"left-pad": "myLeftPad"}
    assert config.loaders == {".ts": "tsx", ".png": "file"}
    assert config.bundle_directory == (tmp_path / "public" / "img").resolve()
    assert config.bundle_path == "/img/"
    assert config.excerpt is True
    assert config.excerpt_separator == "<!-- more -->"
    assert config.image_imports is True


def test_load_config_accepts_file_next_to_config(tmp_path: Path) -> None:
    (tmp_path / ".mdxbundler.yml").write_text("bundle_path: /static/\n", encoding="utf-8")

    config = load_config(tmp_path / "post.mdx")

    assert config.bundle_path == "/static/"


def test_load_config_rejects_invalid_loader(tmp_path: Path) -> None:
    (tmp_path / ".mdxbundler.yml").write_text("loaders:\n  .blah: nonsense\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid loader value"):
        load_config(tmp_path)


def test_load_config_rejects_loader_key_without_dot(tmp_path: Path) -> None:
    (tmp_path / ".mdxbundler.yml").write_text("loaders:\n  ts: tsx\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".mdxbundler.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reports_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".mdxbundler.yml").write_text("globals: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_bundle_kwargs_builds_hooks(tmp_path: Path) -> None:
    config = ProjectConfig(
        root=tmp_path,
        globals={"left-pad": "myLeftPad"},
        loaders={".ts": "tsx"},
        excerpt=True,
        excerpt_separator="<!-- more -->",
        image_imports=True,
    )

    kwargs = config.bundle_kwargs()

    assert kwargs["cwd"] == str(tmp_path)
    assert kwargs["globals"] == {"left-pad": "myLeftPad"}
    matter = kwargs["matter_options"](MatterOptions())
    assert matter.excerpt is True
    assert matter.excerpt_separator == "<!-- more -->"
    assert kwargs["markup_options"](MarkupOptions(), {}).image_imports is True
    options = kwargs["build_options"](BuildOptions(loader={".ts": "ts", ".js": "js"}), {})
    assert options.loader == {".ts": "tsx", ".js": "js"}


def test_bundle_kwargs_omits_unset_hooks(tmp_path: Path) -> None:
    kwargs = ProjectConfig(root=tmp_path).bundle_kwargs()

    assert set(kwargs) == {"cwd", "globals"}
