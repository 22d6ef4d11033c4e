"""Tests for mdxbundler.frontmatter."""

from __future__ import annotations

import datetime as dt

import pytest

from mdxbundler.frontmatter import FrontMatterError, MatterOptions, split_front_matter


def test_document_without_front_matter_is_unchanged() -> None:
    result = split_front_matter("# Title\n\nBody\n")

    assert result.content == "# Title\n\nBody\n"
    assert result.data == {}
    assert result.matter == ""
    assert result.is_empty is False


def test_front_matter_is_parsed_as_yaml() -> None:
    text = "---\ntitle: Example Post\npublished: 2021-02-13\ntags: [a, b]\n---\n\n# Title\n"

    result = split_front_matter(text, path="post.mdx")

    assert result.data == {"title": "Example Post", "published": dt.date(2021, 2, 13), "tags": ["a", "b"]}
    assert result.content == "\n# Title\n"
    assert result.matter == "title: Example Post\npublished: 2021-02-13\ntags: [a, b]\n"
    assert result.orig == text
    assert result.path == "post.mdx"


def test_empty_block_is_flagged() -> None:
    result = split_front_matter("---\n---\nBody")

    assert result.is_empty is True
    assert result.data == {}
    assert result.content == "Body"


def test_byte_order_mark_is_ignored() -> None:
    result = split_front_matter("\ufeff---\ntitle: A\n---\nBody")

    assert result.data == {"title": "A"}


def test_unterminated_block_raises() -> None:
    with pytest.raises(FrontMatterError) as excinfo:
        split_front_matter("---\ntitle: A\n\nBody", path="post.mdx")

    assert excinfo.value.line == 1
    assert str(excinfo.value).startswith("post.mdx:1: ")


def test_invalid_yaml_reports_document_line() -> None:
    with pytest.raises(FrontMatterError) as excinfo:
        split_front_matter("---\ntitle: A\nbad: [unclosed\n---\nBody", path="post.mdx")

    assert excinfo.value.path == "post.mdx"
    assert excinfo.value.line is not None and excinfo.value.line >= 3


def test_non_mapping_front_matter_raises() -> None:
    with pytest.raises(FrontMatterError, match="must be a mapping"):
        split_front_matter("---\n- a\n- b\n---\nBody")


def test_excerpt_uses_delimiter_by_default() -> None:
    text = "---\ntitle: Sample\n---\n\nSome excerpt\n\n---\n\nThis is the rest of the content\n"

    result = split_front_matter(text, MatterOptions(excerpt=True))

    assert result.excerpt.strip() == "Some excerpt"
    assert "This is the rest of the content" in result.content


def test_excerpt_with_custom_separator() -> None:
    text = "Intro paragraph\n<!-- more -->\nRest\n"

    result = split_front_matter(text, MatterOptions(excerpt=True, excerpt_separator="<!-- more -->"))

    assert result.excerpt == "Intro paragraph\n"


def test_excerpt_is_empty_without_separator() -> None:
    result = split_front_matter("Only content\n", MatterOptions(excerpt=True))

    assert result.excerpt == ""


def test_as_dict_exposes_all_fields() -> None:
    payload = split_front_matter("---\na: 1\n---\nx").as_dict()

    assert set(payload) == {"content", "data", "excerpt", "matter", "orig", "path", "is_empty"}
    assert payload["data"] == {"a": 1}
