"""Tests for the virtual-file resolution adapter and the MDX-from-disk plugin."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from mdxbundler.bundling.loaders import default_loader_table
from mdxbundler.bundling.resolver import (
    IN_MEMORY_NAMESPACE,
    IN_MEMORY_PLUGIN,
    ResolutionAdapter,
    create_mdx_plugin,
)
from mdxbundler.bundling.vfs import VirtualFile, VirtualFileTable
from mdxbundler.engine.api import BuildOptions, OnLoadArgs, OnResolveArgs, PluginBuild

CWD = os.path.join(os.sep, "work")


def _compile(text: str, path: str) -> str:
    return f"/* compiled {os.path.basename(path)} */ {text!r}"


@pytest.fixture
def adapter() -> ResolutionAdapter:
    table = VirtualFileTable.from_mapping(
        {
            "./demo.tsx": "export default 1",
            "./sub/dir.tsx": "export default 2",
            "left-pad-js": "export default 3",
            "./post.mdx": "# Hi",
            "./demo.blah": "?",
        },
        CWD,
    )
    table = table.with_file(VirtualFile(path=os.path.join(CWD, "custom.data"), contents="x", loader="text"))
    adapter = ResolutionAdapter(table, CWD, _compile)
    build = PluginBuild(IN_MEMORY_PLUGIN, BuildOptions(loader=default_loader_table()))
    adapter.plugin().setup(build)
    return adapter


def _resolve_args(path: str, importer: str) -> OnResolveArgs:
    return OnResolveArgs(path=path, importer=importer, namespace="file", resolve_dir=CWD, kind="import-statement")


def test_candidate_paths(adapter: ResolutionAdapter) -> None:
    importer = os.path.join(CWD, "sub", "dir.tsx")

    assert adapter.candidate_path("./x", importer) == os.path.join(CWD, "sub", "x")
    assert adapter.candidate_path("../x", importer) == os.path.join(CWD, "x")
    assert adapter.candidate_path("/abs/x", importer) == os.path.join(os.sep, "abs", "x")
    assert adapter.candidate_path("left-pad-js", importer) == os.path.join(CWD, "left-pad-js")


def test_resolve_hits_virtual_files(adapter: ResolutionAdapter) -> None:
    importer = os.path.join(CWD, "entry.mdx")

    relative = adapter.resolve(_resolve_args("./sub/dir", importer))
    bare = adapter.resolve(_resolve_args("left-pad-js", importer))

    assert (relative.path, relative.namespace) == (os.path.join(CWD, "sub", "dir.tsx"), IN_MEMORY_NAMESPACE)
    assert bare.path == os.path.join(CWD, "left-pad-js")
    assert relative.plugin_data == "./sub/dir"
    assert adapter.resolve(_resolve_args("react", importer)) is None


def test_load_picks_loader_and_resolve_dir(adapter: ResolutionAdapter) -> None:
    loaded = adapter.load(OnLoadArgs(path=os.path.join(CWD, "sub", "dir.tsx"), namespace=IN_MEMORY_NAMESPACE))

    assert loaded.loader == "tsx"
    assert loaded.resolve_dir == os.path.join(CWD, "sub")
    assert adapter.load(OnLoadArgs(path=os.path.join(CWD, "left-pad-js"), namespace=IN_MEMORY_NAMESPACE)).loader == "jsx"
    assert adapter.load(OnLoadArgs(path=os.path.join(CWD, "custom.data"), namespace=IN_MEMORY_NAMESPACE)).loader == "text"


def test_load_compiles_virtual_mdx(adapter: ResolutionAdapter) -> None:
    loaded = adapter.load(OnLoadArgs(path=os.path.join(CWD, "post.mdx"), namespace=IN_MEMORY_NAMESPACE))

    assert loaded.loader == "jsx"
    assert loaded.contents == "/* compiled post.mdx */ '# Hi'"


def test_load_reports_invalid_loader(adapter: ResolutionAdapter) -> None:
    loaded = adapter.load(OnLoadArgs(path=os.path.join(CWD, "demo.blah"), namespace=IN_MEMORY_NAMESPACE))

    assert [message.text for message in loaded.errors] == ['Invalid loader value: "blah"']


def test_invalid_loader_names_the_import_specifier(adapter: ResolutionAdapter) -> None:
    args = OnLoadArgs(path=os.path.join(CWD, "demo.blah"), namespace=IN_MEMORY_NAMESPACE, plugin_data="./demo.blah")

    (error,) = adapter.load(args).errors

    assert error.text == 'Invalid loader value: "blah" (imported as "./demo.blah")'


def test_mdx_plugin_compiles_files_from_disk(tmp_path: Path) -> None:
    post = tmp_path / "post.mdx"
    post.write_text("# From disk", encoding="utf-8")
    build = PluginBuild("mdx", BuildOptions(loader=default_loader_table()))
    create_mdx_plugin(_compile).setup(build)
    (hook,) = build.load_hooks

    loaded = asyncio.run(hook.callback(OnLoadArgs(path=str(post), namespace="file")))

    assert hook.namespace == "file"
    assert loaded.contents == "/* compiled post.mdx */ '# From disk'"
    assert loaded.resolve_dir == str(tmp_path)
