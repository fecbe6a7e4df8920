"""
pipeline/weights.py — vertical-space weight per document element.

Weights are dimensionless: 1.0 is roughly one 11pt character of flowing text.
Pure functions, no state. Unreadable formatting falls back to the defaults.
"""

import math
from typing import Any

from toc_estimator.state import IMAGE, LIST_ITEM, PARAGRAPH, TABLE, Element

DEFAULT_FONT_SIZE = 11.0
DEFAULT_SPACING = 0.0
DEFAULT_LINE_SPACING = 1.15

BLANK_PARAGRAPH_WEIGHT = 20.0
IMAGE_WEIGHT = 800.0
OTHER_WEIGHT = 50.0

_LINE_WIDTH_UNITS = 500     # avg chars per line = 500 / font size
_TABLE_CHAR_FACTOR = 1.5
_TABLE_ROW_WEIGHT = 20.0
_TABLE_OVERHEAD = 100.0
_LIST_CHAR_FACTOR = 1.2
_LIST_OVERHEAD = 30.0


def _number(value: Any, default: float, *, positive: bool = False) -> float:
    """Coerce a formatting attribute to float, or return ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    if positive and number <= 0:
        return default
    if number < 0:
        return default
    return number


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def paragraph_weight(element: Element) -> float:
    text = _text(element.get("text"))
    if not text.strip():
        return BLANK_PARAGRAPH_WEIGHT

    n = len(text)
    font_size = _number(element.get("font_size"), DEFAULT_FONT_SIZE, positive=True)
    spacing = (_number(element.get("spacing_before"), DEFAULT_SPACING)
               + _number(element.get("spacing_after"), DEFAULT_SPACING))
    line_spacing = _number(element.get("line_spacing"), DEFAULT_LINE_SPACING, positive=True)

    chars_per_line = max(1, math.floor(_LINE_WIDTH_UNITS / font_size))
    lines = max(1, math.ceil(n / chars_per_line))

    return (n * (font_size / DEFAULT_FONT_SIZE)
            + spacing
            + lines * font_size * line_spacing * 0.5)


def table_weight(element: Element) -> float:
    rows = element.get("rows") or []
    total_chars = sum(len(_text(cell)) for row in rows for cell in (row or []))
    return total_chars * _TABLE_CHAR_FACTOR + len(rows) * _TABLE_ROW_WEIGHT + _TABLE_OVERHEAD


def list_item_weight(element: Element) -> float:
    return len(_text(element.get("text"))) * _LIST_CHAR_FACTOR + _LIST_OVERHEAD


def element_weight(element: Element) -> float:
    """Weight of one element; defined for every kind, never raises."""
    kind = element.get("kind")
    if kind == PARAGRAPH:
        return paragraph_weight(element)
    if kind == TABLE:
        return table_weight(element)
    if kind == LIST_ITEM:
        return list_item_weight(element)
    if kind == IMAGE:
        return IMAGE_WEIGHT
    return OTHER_WEIGHT
