from __future__ import annotations

"""Render captured parameter values into SQL literals."""

import re
from datetime import date, datetime, time
from typing import Any, Sequence

__all__ = ["format_value", "build_full_sql"]


def _quote(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


def format_value(value: Any) -> str:
    """Return the SQL literal text for a single bound value.

    Unknown types fall back to ``str(value)`` so every value renders to
    something; this function never raises for ordinary Python values.
    """

    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _quote(bytes(value).decode("utf-8", errors="replace"))
    # datetime subclasses date, so it has to be checked first.
    if isinstance(value, datetime):
        return _quote(value.strftime("%Y-%m-%d %H:%M:%S"))
    if isinstance(value, date):
        return _quote(value.strftime("%Y-%m-%d"))
    if isinstance(value, time):
        return _quote(value.strftime("%H:%M:%S"))
    return str(value)


_FORMAT_TOKEN = re.compile(r"%%|%s")


def _fill_format(template: str, values: Sequence[Any]) -> str:
    # pyformat-style drivers escape a literal percent as %%.
    remaining = iter(values)

    def _replace(match: re.Match) -> str:
        if match.group(0) == "%%":
            return "%"
        try:
            return format_value(next(remaining))
        except StopIteration:
            return match.group(0)

    return _FORMAT_TOKEN.sub(_replace, template)


def build_full_sql(template: str, values: Sequence[Any] = (), placeholder: str = "?") -> str:
    """Substitute *placeholder* tokens in *template* with formatted *values*.

    Placeholders are replaced left to right. Extra placeholders stay in the
    output untouched and surplus values are ignored. Only the template is
    scanned, so a value containing the placeholder token is never re-read.
    With ``%s`` the template follows driver formatting rules: ``%%`` is a
    literal percent and never starts a placeholder.
    """

    if not values or not placeholder:
        return template
    if placeholder == "%s":
        return _fill_format(template, values)

    pieces = template.split(placeholder)
    out = [pieces[0]]
    for idx, piece in enumerate(pieces[1:]):
        if idx < len(values):
            out.append(format_value(values[idx]))
        else:
            out.append(placeholder)
        out.append(piece)
    return "".join(out)
