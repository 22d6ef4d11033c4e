"""Tests for ES module rewriting."""

from __future__ import annotations

from mdxbundler.engine.modules import DEFAULT_EXPORT_BINDING, rewrite_module


def test_imports_become_require_calls() -> None:
    result = rewrite_module(
        "import React, {useState as useS, useEffect} from 'react'\n"
        "import * as path from \"path\"\n"
        "import './side-effect.css'\n"
    )

    assert result.code.splitlines() == [
        "__export(exports, {}); var __import0 = require(\"react\"); var React = __default(__import0);"
        " var useS = __import0.useState; var useEffect = __import0.useEffect;",
        'var path = __toESM(require("path"));',
        'require("./side-effect.css");',
    ]
    assert [record.specifier for record in result.imports] == ["react", "path", "./side-effect.css"]


def test_import_records_point_at_the_string_literal() -> None:
    result = rewrite_module("const a = 1\nimport './blah-blah'\n")

    record = result.imports[0]
    assert (record.line, record.column, record.length) == (2, 7, 13)
    assert record.line_text == "import './blah-blah'"
    assert record.kind == "import-statement"


def test_exports_are_collected() -> None:
    result = rewrite_module(
        "export const a = 1\n"
        "export function b() {}\n"
        "const c = 2\n"
        "export {c as d}\n"
        "export default a + 1\n"
    )

    assert result.exports == {"a": "a", "b": "b", "d": "c", "default": DEFAULT_EXPORT_BINDING}
    assert "const a = 1" in result.code
    assert f"var {DEFAULT_EXPORT_BINDING} = a + 1" in result.code
    assert result.code.startswith(
        '__export(exports, {"d": () => c, "default": () => __default_export, "a": () => a, "b": () => b});'
    )


def test_named_default_declaration_keeps_its_name() -> None:
    result = rewrite_module("export default function Demo() { return 1 }\n")

    assert result.exports == {"default": "Demo"}
    assert "function Demo() { return 1 }" in result.code


def test_reexports() -> None:
    result = rewrite_module("export * from './a'\nexport {x, default as y} from './b'\nexport * as ns from './c'\n")

    assert '__reExport(exports, require("./a"));' in result.code
    assert result.exports == {"x": "__reexport0.x", "y": "__default(__reexport0)", "ns": "__reexport1"}
    assert [record.specifier for record in result.imports] == ["./a", "./b", "./c"]


def test_commonjs_is_left_as_is_and_requires_are_recorded() -> None:
    source = "const pad = require('left-pad')\nmodule.exports = pad\n"

    result = rewrite_module(source)

    assert result.code == source
    assert not result.is_esm
    assert [(record.specifier, record.kind) for record in result.imports] == [("left-pad", "require-call")]


def test_dynamic_require_is_a_warning() -> None:
    result = rewrite_module("module.exports = require(name)\n")

    assert result.imports == []
    assert len(result.warnings) == 1
    assert result.warnings[0][1] == 17


def test_line_count_is_preserved() -> None:
    source = "import {\n  a,\n  b,\n} from './x'\nconsole.log(a)\n"

    result = rewrite_module(source)

    assert result.code.count("\n") == source.count("\n")
    assert result.is_esm


def test_statements_sharing_a_line_are_all_rewritten() -> None:
    result = rewrite_module("export const a = 1; export const b = 2;\nimport x from './x'; import './y'\n")

    assert result.exports == {"a": "a", "b": "b"}
    assert "const a = 1; const b = 2;" in result.code
    assert "export" not in result.code.split("});", 1)[1]
    assert [record.specifier for record in result.imports] == ["./x", "./y"]


def test_statements_inside_strings_and_comments_are_ignored() -> None:
    source = (
        "const text = 'a; export const fake = 1'\n"
        "/*\nimport nope from './nope'\n*/\n"
        "// require('./commented')\n"
        "const tpl = `\nexport default 2\n`\n"
    )

    result = rewrite_module(source)

    assert result.code == source
    assert result.imports == []
    assert not result.is_esm
