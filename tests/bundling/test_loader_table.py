from __future__ import annotations

from mdxbundler.bundling.loaders import (
    MDX_LOADER,
    default_loader_table,
    is_valid_loader,
    loader_for_file,
    loader_for_virtual,
)


def test_default_table_inlines_assets_unless_emitting() -> None:
    assert default_loader_table()[".png"] == "dataurl"
    assert default_loader_table(emit_assets=True)[".png"] == "file"
    assert default_loader_table()[".mdx"] == MDX_LOADER
    assert default_loader_table()[".svg"] == "text"


def test_loader_validity() -> None:
    assert is_valid_loader("tsx")
    assert is_valid_loader(MDX_LOADER)
    assert not is_valid_loader("blah")


def test_virtual_file_loaders() -> None:
    table = default_loader_table()

    assert loader_for_virtual("/w/left-pad-js", table) == "jsx"
    assert loader_for_virtual("/w/demo.ts", table) == "ts"
    assert loader_for_virtual("/w/demo.blah", table) == "blah"
    assert loader_for_file("/w/post.md", table) == MDX_LOADER
    assert loader_for_file("/w/file.unknown", table) is None
