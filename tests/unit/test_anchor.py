from __future__ import annotations

from toc_estimator.pipeline.anchor import NO_ANCHOR, find_anchor, locate_anchor


def test_flagged_toc_block_uses_last_position():
    elements = [
        {"kind": "PARAGRAPH", "position": 0, "text": "Report"},
        {"kind": "PARAGRAPH", "position": 1, "text": "", "is_toc": True},
        {"kind": "PARAGRAPH", "position": 2, "text": "Intro ..... 3", "is_toc": True},
        {"kind": "PARAGRAPH", "position": 3, "text": "Contents"},
    ]
    assert find_anchor(elements) == 2


def test_title_like_contents_is_anchor():
    elements = [
        {"kind": "PARAGRAPH", "position": 0, "text": "Report"},
        {"kind": "PARAGRAPH", "position": 1, "text": "  Table of Contents "},
        {"kind": "PARAGRAPH", "position": 2, "text": "Contents"},
    ]
    assert find_anchor(elements) == 1


def test_contents_inside_sentence_is_not_anchor():
    elements = [
        {"kind": "PARAGRAPH", "position": 0, "text": "The contents of this report"},
        {"kind": "TABLE", "position": 1, "rows": [["Contents"]]},
        {"kind": "IMAGE", "position": 2},
    ]
    assert find_anchor(elements) == NO_ANCHOR


def test_locate_anchor_keeps_explicit_cutoff():
    state = {"cutoff": 4, "elements": [{"kind": "PARAGRAPH", "position": 0, "text": "TOC"}]}
    assert locate_anchor(state) == {"cutoff": 4}


def test_locate_anchor_detects_when_unset():
    state = {"cutoff": None, "elements": [{"kind": "PARAGRAPH", "position": 0, "text": "TOC:"}]}
    assert locate_anchor(state) == {"cutoff": 0}
