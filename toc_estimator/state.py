"""
Shared TypedDicts for the estimation pipeline.
"""

from typing import TypedDict

PARAGRAPH = "PARAGRAPH"
TABLE = "TABLE"
LIST_ITEM = "LIST_ITEM"
IMAGE = "IMAGE"
OTHER = "OTHER"


class Element(TypedDict, total=False):
    kind: str                 # PARAGRAPH, TABLE, LIST_ITEM, IMAGE, OTHER
    position: int             # 0-indexed body position
    text: str
    font_size: float | None   # points
    spacing_before: float | None
    spacing_after: float | None
    line_spacing: float | None  # multiple of single spacing
    heading_level: int | None   # 1 or 2 for headings
    page_break_before: bool
    rows: list[list[str]]     # table cell texts, row-major
    is_toc: bool              # part of an existing table of contents


class HeadingRecord(TypedDict):
    text: str
    level: int
    position: int


class PageAssignment(TypedDict):
    pages: dict[int, int]     # heading position -> page
    total_pages: int
    total_weight: float
