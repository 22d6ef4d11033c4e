from __future__ import annotations

import datetime as dt

import pytest

from mdxbundler.markup.literals import to_js_literal


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "null"),
        (True, "true"),
        (3, "3"),
        (1.5, "1.5"),
        (float("nan"), "NaN"),
        (float("-inf"), "-Infinity"),
        ('say "hi"', '"say \\"hi\\""'),
        ([1, "a"], '[1, "a"]'),
        ({"a": {"b": None}}, '{"a": {"b": null}}'),
    ],
)
def test_scalar_and_container_literals(value, expected) -> None:
    assert to_js_literal(value) == expected


def test_dates_become_utc_midnight() -> None:
    assert to_js_literal(dt.date(2021, 2, 13)) == 'new Date("2021-02-13T00:00:00.000Z")'


def test_aware_datetimes_are_converted_to_utc() -> None:
    value = dt.datetime(2021, 2, 13, 10, 30, 0, 250000, tzinfo=dt.timezone(dt.timedelta(hours=2)))

    assert to_js_literal(value) == 'new Date("2021-02-13T08:30:00.250Z")'


def test_unsupported_values_raise() -> None:
    with pytest.raises(TypeError):
        to_js_literal(object())
