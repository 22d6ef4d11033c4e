"""Tests for the MDX markup compiler."""

from __future__ import annotations

import datetime as dt

import pytest

from mdxbundler.markup import MarkupCompiler, MarkupError, MarkupOptions

RUNTIME_IMPORT = 'import {jsx as _jsx, jsxs as _jsxs, Fragment as _Fragment} from "react/jsx-runtime";\n'


def _compile(body: str, **options) -> str:
    return MarkupCompiler(MarkupOptions(**options)).compile(body).code


def test_heading_is_routed_through_components() -> None:
    compiled = MarkupCompiler().compile("# Hello")

    assert compiled.code.startswith(RUNTIME_IMPORT)
    assert '_jsx(_components.h1, {children: "Hello"})' in compiled.code
    assert 'Object.assign({h1: "h1"}, props.components)' in compiled.code
    assert compiled.components == ["h1"]


def test_module_exports_content_and_frontmatter() -> None:
    code = MarkupCompiler().compile("Body", frontmatter={"title": "T", "published": dt.date(2021, 2, 13)}).code

    assert 'export const frontmatter = {"title": "T", "published": new Date("2021-02-13T00:00:00.000Z")};' in code
    assert "export default function MDXContent(props = {})" in code
    assert "_jsx(MDXLayout, {...props, children: _jsx(_createMdxContent, {...props})})" in code


def test_frontmatter_export_is_not_duplicated() -> None:
    code = _compile("export const frontmatter = {custom: true}\n\n# Hi\n")

    assert code.count("export const frontmatter") == 1
    assert "{custom: true}" in code


def test_esm_and_flow_blocks_are_extracted() -> None:
    code = _compile("import Demo from './demo'\n\nSome *text*.\n\n<Demo answer={42} />\n")

    assert "\nimport Demo from './demo'\n" in code
    assert "_jsx(Demo, {answer: 42})" in code
    assert '_jsx(_components.em, {children: "text"})' in code


def test_multiline_jsx_block_spans_blank_lines() -> None:
    code = _compile("<div>\n\nInside\n\n</div>\n\nAfter\n")

    assert '_jsx("div", {children: "Inside"})' in code
    assert '_jsx(_components.p, {children: "After"})' in code


def test_multiline_esm_block() -> None:
    code = _compile("export const meta = {\n  a: 1,\n\n  b: 2,\n}\n\n# Title\n")

    assert "export const meta = {\n  a: 1,\n\n  b: 2,\n}" in code


def test_expressions_in_prose_are_kept() -> None:
    code = _compile("Hello {name}!")

    assert '_jsxs(_components.p, {children: ["Hello ", name, "!"]})' in code


def test_lists_links_and_tables() -> None:
    code = _compile(
        '- one\n- [two](https://example.com "Two")\n\n| a | b |\n|:--|--:|\n| 1 | 2 |\n'
    )

    assert '_jsx(_components.li, {children: "one"})' in code
    assert '_jsx(_components.a, {href: "https://example.com", title: "Two", children: "two"})' in code
    assert 'style: {textAlign: "left"}' in code
    assert 'style: {textAlign: "right"}' in code


def test_fenced_code_is_not_treated_as_esm() -> None:
    code = _compile("```js\nimport x from 'y'\n```\n")

    assert 'className: "language-js"' in code
    assert "\nimport x from" not in code


def test_unterminated_jsx_block_raises_with_line() -> None:
    with pytest.raises(MarkupError) as excinfo:
        MarkupCompiler().compile("# Title\n\n<div>\n\nnever closed\n", path="post.mdx")

    assert excinfo.value.line == 3
    assert str(excinfo.value).startswith("post.mdx:3: ")


def test_unterminated_esm_block_raises() -> None:
    with pytest.raises(MarkupError, match="Could not parse import/exports"):
        _compile("export const a = {\n  b: 1,\n")


def test_image_imports_are_hoisted() -> None:
    code = _compile("![Alt](./a.png) and ![Again](./a.png) and ![Remote](https://x.y/b.png)", image_imports=True)

    assert code.count('import __mdx_image_0 from "./a.png";') == 1
    assert "__mdx_image_1" not in code
    assert "src: __mdx_image_0" in code
    assert 'src: "https://x.y/b.png"' in code


def test_provider_import_source() -> None:
    code = _compile("# Hi", provider_import_source="@mdx-js/react")

    assert 'import {useMDXComponents as _provideComponents} from "@mdx-js/react";' in code
    assert 'Object.assign({h1: "h1"}, _provideComponents(), props.components)' in code


def test_jsx_import_source() -> None:
    code = _compile("# Hi", jsx_import_source="preact")

    assert code.startswith('import {jsx as _jsx, jsxs as _jsxs, Fragment as _Fragment} from "preact/jsx-runtime";')


def test_token_plugins_receive_path() -> None:
    calls = []

    def plugin(tokens, env) -> None:
        calls.append((env["path"], [token.type for token in tokens][:1]))

    MarkupCompiler(MarkupOptions(remark_plugins=[plugin])).compile("# Hi", path="/data/post.mdx")

    assert calls == [("/data/post.mdx", ["heading_open"])]


def test_empty_document_renders_null() -> None:
    assert "return null;" in _compile("")
