"""Helpers for turning isolated HTML fragments into clean values."""

from typing import Optional
import re

from bs4 import BeautifulSoup

_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_WS = re.compile(r"[ \t\r\f\v]+")


def clean_value(v):
    """Convert empty / whitespace-only strings and ``&nbsp;`` to None."""
    if v is None:
        return None
    if isinstance(v, str):
        v = v.replace("\xa0", " ").strip()
        if not v or v == "&nbsp;":
            return None
    return v


def strip_markup(fragment: Optional[str]) -> Optional[str]:
    """Drop tags, decode entities and collapse runs of spaces."""
    if fragment is None:
        return None
    text = BeautifulSoup(fragment, "html.parser").get_text()
    text = _WS.sub(" ", text.replace("\xa0", " "))
    return clean_value(text)


def split_lines(fragment: str) -> list[str]:
    """Split on ``<br>`` and newlines, strip markup, drop empty fragments."""
    lines = []
    for part in _BR.split(fragment):
        for line in part.splitlines():
            text = strip_markup(line)
            if text:
                lines.append(text)
    return lines


def split_list(fragment: str) -> list[str]:
    """Split a comma or line-break separated list into trimmed, non-empty items."""
    items = []
    for line in split_lines(fragment):
        for piece in line.split(","):
            piece = clean_value(piece)
            if piece:
                items.append(piece)
    return items


def unique(items) -> list[str]:
    """De-duplicate while keeping first-seen order."""
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def to_int(v) -> Optional[int]:
    """Convert string to int, return None for non-numeric values."""
    v = clean_value(v)
    if v is None:
        return None
    try:
        s = str(v).replace(",", "").strip()
        if not s:
            return None
        return int(float(s))
    except (ValueError, TypeError):
        return None


def to_float(v) -> Optional[float]:
    """Convert string to float, return None for non-numeric values."""
    v = clean_value(v)
    if v is None:
        return None
    try:
        return float(str(v).replace(",", "").strip())
    except (ValueError, TypeError):
        return None
