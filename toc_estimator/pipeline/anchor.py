"""
Locate the table-of-contents anchor. Elements at or before it are ignored.
"""

import logging
import re

from toc_estimator.state import Element

logger = logging.getLogger(__name__)

NO_ANCHOR = -1

_TOC_TITLE_RE = re.compile(r"^\s*(table\s+of\s+contents|contents|toc)\s*:?\s*$", re.IGNORECASE)


def find_anchor(elements: list[Element]) -> int:
    """Position of the existing TOC, or ``NO_ANCHOR``.

    A flagged TOC block wins (its last element is the anchor). Otherwise the
    first element titled like a table of contents is used.
    """
    toc_positions = [el["position"] for el in elements if el.get("is_toc")]
    if toc_positions:
        return max(toc_positions)

    for el in elements:
        if _TOC_TITLE_RE.match(el.get("text") or ""):
            return el["position"]

    return NO_ANCHOR


def locate_anchor(state: dict) -> dict:
    """Pipeline stage: keep an explicit cutoff, else detect one."""
    cutoff = state.get("cutoff")
    if cutoff is not None:
        logger.info("Using supplied cutoff position %d", cutoff)
        return {"cutoff": cutoff}

    cutoff = find_anchor(state["elements"])
    if cutoff == NO_ANCHOR:
        logger.info("No existing table of contents found, using the whole document")
    else:
        logger.info("Table of contents anchor at position %d", cutoff)
    return {"cutoff": cutoff}
