"""
pipeline/estimator.py — map headings to estimated rendered pages.

Two passes over the elements after the cutoff:
  1. aggregate: weight table, total weight, explicit page-break positions;
  2. assign: walk in position order, keeping a cumulative weight and a
     discrete page counter advanced by explicit breaks.

A heading's page depends only on what precedes it. Its own weight is added
to the running total after its page has been recorded.
"""

import logging
import math
from typing import Iterable

from toc_estimator.pipeline.weights import element_weight
from toc_estimator.state import PARAGRAPH, Element, HeadingRecord, PageAssignment

logger = logging.getLogger(__name__)

FALLBACK_TOTAL_PAGES = 10
HEADING_LEVELS = (1, 2)


def _after_cutoff(elements: Iterable[Element], cutoff: int) -> list[Element]:
    body: dict[int, Element] = {}
    for el in elements:
        position = el.get("position")
        if isinstance(position, int) and position > cutoff:
            # first element wins on a repeated position
            body.setdefault(position, el)
    return [body[position] for position in sorted(body)]


def _is_heading(element: Element) -> bool:
    if element.get("kind") != PARAGRAPH:
        return False
    level = element.get("heading_level")
    return level in HEADING_LEVELS and not isinstance(level, bool)


def resolve_total_pages(total_pages: int | None, fallback: int = FALLBACK_TOTAL_PAGES) -> int:
    """Authoritative page count, or ``fallback`` when it is unknown."""
    if total_pages is None or total_pages <= 0:
        logger.warning("Total page count unknown (%r), assuming %d pages", total_pages, fallback)
        return fallback
    return int(total_pages)


def collect_headings(elements: Iterable[Element], cutoff: int) -> list[HeadingRecord]:
    return [
        HeadingRecord(
            text=(el.get("text") or "").strip(),
            level=el["heading_level"],
            position=el["position"],
        )
        for el in _after_cutoff(elements, cutoff)
        if _is_heading(el)
    ]


def aggregate(body: list[Element]) -> tuple[dict[int, float], float, list[int]]:
    """Pass 1: weight table, total weight and page-break positions."""
    weights: dict[int, float] = {}
    page_breaks: list[int] = []

    for el in body:
        weights[el["position"]] = element_weight(el)
        if el.get("kind") == PARAGRAPH and el.get("page_break_before"):
            page_breaks.append(el["position"])

    return weights, sum(weights.values()), page_breaks


def assign_pages(
    body: list[Element],
    weights: dict[int, float],
    total_weight: float,
    page_breaks: list[int],
    total_pages: int,
) -> dict[int, int]:
    """Pass 2: page number per heading position."""
    pages: dict[int, int] = {}
    cumulative = 0.0
    current_page = 1
    cursor = 0

    for el in body:
        position = el["position"]

        if cursor < len(page_breaks) and position >= page_breaks[cursor]:
            current_page += 1
            cursor += 1

        if _is_heading(el):
            proportion = cumulative / total_weight if total_weight > 0 else 0.0
            proportional_page = max(1, math.ceil(proportion * total_pages))
            pages[position] = max(current_page, proportional_page)
            logger.debug(
                "Heading at %d: %.1f%% of weight -> page %d (floor %d)",
                position, proportion * 100, pages[position], current_page,
            )

        cumulative += weights[position]

    return pages


def estimate(
    elements: Iterable[Element],
    cutoff: int,
    total_pages: int | None,
    fallback_pages: int = FALLBACK_TOTAL_PAGES,
) -> PageAssignment:
    """Estimate the rendered page of every heading after ``cutoff``."""
    body = _after_cutoff(elements, cutoff)
    resolved = resolve_total_pages(total_pages, fallback_pages)

    weights, total_weight, page_breaks = aggregate(body)
    logger.info(
        "Aggregated %d elements: total weight %.1f, %d explicit page breaks",
        len(body), total_weight, len(page_breaks),
    )

    pages = assign_pages(body, weights, total_weight, page_breaks, resolved)
    return PageAssignment(pages=pages, total_pages=resolved, total_weight=total_weight)


def estimate_pages(state: dict) -> dict:
    """Pipeline stage: estimate pages for the loaded document."""
    elements = state["elements"]
    cutoff = state.get("cutoff", -1)
    headings = collect_headings(elements, cutoff)

    if not headings:
        logger.warning("No headings found after position %d", cutoff)

    assignment = estimate(
        elements,
        cutoff,
        state.get("total_pages"),
        state.get("fallback_pages", FALLBACK_TOTAL_PAGES),
    )
    logger.info(
        "Estimated pages for %d headings across %d pages",
        len(assignment["pages"]), assignment["total_pages"],
    )
    return {"headings": headings, "assignment": assignment}
