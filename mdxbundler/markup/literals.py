"""Serialise Python front matter values as JavaScript expressions."""

from __future__ import annotations

import datetime as _dt
import json
import math
from typing import Any


def to_js_literal(value: Any) -> str:
    """Return JavaScript source evaluating to ``value``.

    Dates become ``new Date("...Z")`` so they survive into the bundle as
    ``Date`` objects, matching what a YAML 1.1 loader produces in JavaScript.
    """
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, _dt.datetime):
        return f"new Date({json.dumps(_iso_utc(value))})"
    if isinstance(value, _dt.date):
        return f'new Date("{value.isoformat()}T00:00:00.000Z")'
    if isinstance(value, dict):
        items = [f"{json.dumps(str(key))}: {to_js_literal(item)}" for key, item in value.items()]
        return "{" + ", ".join(items) + "}"
    if isinstance(value, (list, tuple, set, frozenset)):
        return "[" + ", ".join(to_js_literal(item) for item in value) + "]"
    if isinstance(value, bytes):
        return json.dumps(value.decode("utf-8", errors="replace"))
    raise TypeError(f"Cannot express {type(value).__name__} as a JavaScript literal")


def _iso_utc(value: _dt.datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(_dt.timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


__all__ = ["to_js_literal"]
