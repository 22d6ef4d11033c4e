from __future__ import annotations

import pytest

from mdxbundler.engine.scanning import (
    ScanError,
    in_spans,
    line_and_column,
    literal_spans,
    regex_allowed,
    skip_balanced,
    skip_string,
)


def test_skip_balanced_ignores_brackets_in_strings_and_comments() -> None:
    source = "{ a: '}', b: /* } */ 1, c: `${ {d} }` }rest"

    assert source[skip_balanced(source, 0) :] == "rest"


def test_skip_balanced_skips_regex_literals() -> None:
    source = "(x.replace(/\\)/g, ''))tail"

    assert source[skip_balanced(source, 0) :] == "tail"


def test_unterminated_constructs_raise_with_offset() -> None:
    with pytest.raises(ScanError) as excinfo:
        skip_string("x = 'open", 4)
    assert excinfo.value.offset == 4

    with pytest.raises(ScanError):
        skip_balanced("{ a: 1", 0)


def test_regex_allowed_depends_on_previous_token() -> None:
    assert regex_allowed("x = /a/", 4) is True
    assert regex_allowed("a / b", 2) is False
    assert regex_allowed("return /a/", 7) is True


def test_line_and_column() -> None:
    assert line_and_column("ab\ncd\nef", 4) == (2, 1, "cd")
    assert line_and_column("", 10) == (1, 0, "")


def test_literal_spans_cover_strings_comments_and_regexes() -> None:
    source = "a = 'x;y' // note\nb = /re;/g; c = `t`"

    spans = literal_spans(source)

    assert [source[start:end] for start, end in spans] == ["'x;y'", "// note", "/re;/g", "`t`"]
    assert in_spans(spans, source.index("x;y"))
    assert not in_spans(spans, source.index("b ="))


def test_literal_spans_read_unclosed_quotes_as_code() -> None:
    source = "<p>don't</p>\nexport const a = 1\n"

    spans = literal_spans(source)

    assert not in_spans(spans, source.index("export"))
