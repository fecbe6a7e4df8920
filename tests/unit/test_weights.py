from __future__ import annotations

import pytest

from toc_estimator.pipeline.weights import (
    BLANK_PARAGRAPH_WEIGHT,
    IMAGE_WEIGHT,
    OTHER_WEIGHT,
    element_weight,
)


def paragraph(text, **attrs):
    return {"kind": "PARAGRAPH", "position": 0, "text": text, **attrs}


def test_blank_paragraph_has_fixed_allowance():
    assert element_weight(paragraph("")) == BLANK_PARAGRAPH_WEIGHT
    assert element_weight(paragraph("   \t ")) == BLANK_PARAGRAPH_WEIGHT


def test_paragraph_weight_at_baseline_font():
    # 45 chars per line -> 23 lines
    weight = element_weight(paragraph("x" * 1000, font_size=11, spacing_before=0,
                                      spacing_after=0, line_spacing=1.15))
    assert weight == pytest.approx(1000 + 23 * 11 * 1.15 * 0.5)


def test_larger_font_weighs_more():
    small = element_weight(paragraph("x" * 1000, font_size=11))
    large = element_weight(paragraph("x" * 1000, font_size=16))
    assert large > small
    # 31 chars per line -> 33 lines
    assert large == pytest.approx(1000 * 16 / 11 + 33 * 16 * 1.15 * 0.5)


def test_paragraph_spacing_is_added_directly():
    weight = element_weight(paragraph("abc", font_size=11, spacing_before=6,
                                      spacing_after=12, line_spacing=1.0))
    assert weight == pytest.approx(3 + 18 + 11 * 1.0 * 0.5)


@pytest.mark.parametrize("attrs", [
    {},
    {"font_size": None, "spacing_before": None, "spacing_after": None, "line_spacing": None},
    {"font_size": "bogus", "line_spacing": "wide"},
    {"font_size": 0, "line_spacing": 0, "spacing_before": -4},
    {"font_size": float("nan")},
])
def test_unreadable_formatting_falls_back_to_defaults(attrs):
    assert element_weight(paragraph("abc", **attrs)) == pytest.approx(3 + 11 * 1.15 * 0.5)


def test_huge_font_still_has_one_char_per_line():
    weight = element_weight(paragraph("ab", font_size=1000, line_spacing=1.0))
    assert weight == pytest.approx(2 * 1000 / 11 + 2 * 1000 * 0.5)


def test_table_weight():
    table = {"kind": "TABLE", "position": 0, "rows": [["ab", "ab"]] * 3}
    assert element_weight(table) == pytest.approx(178)


def test_empty_table_keeps_overhead():
    assert element_weight({"kind": "TABLE", "position": 0, "rows": []}) == 100
    assert element_weight({"kind": "TABLE", "position": 0}) == 100


def test_list_item_weight():
    assert element_weight({"kind": "LIST_ITEM", "position": 0, "text": "hello"}) == pytest.approx(36)


def test_fixed_weights():
    assert element_weight({"kind": "IMAGE", "position": 0}) == IMAGE_WEIGHT
    assert element_weight({"kind": "OTHER", "position": 0}) == OTHER_WEIGHT
    assert element_weight({"kind": "EQUATION", "position": 0}) == OTHER_WEIGHT
    assert element_weight({"position": 0}) == OTHER_WEIGHT
