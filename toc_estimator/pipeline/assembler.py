"""
pipeline/assembler.py — final TOC entries.

Ordering is document order (heading position). Pure Python.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def assemble(state: dict) -> dict:
    """Pair each heading with its estimated page, in document order."""
    headings = state.get("headings", [])
    pages = state["assignment"]["pages"]

    entries: list[dict[str, Any]] = []
    for heading in sorted(headings, key=lambda h: h["position"]):
        text = heading["text"].strip()
        if not text:
            logger.debug("Skipping blank heading at position %d", heading["position"])
            continue
        entries.append({
            "text": text,
            "level": heading["level"],
            "position": heading["position"],
            "page": pages[heading["position"]],
        })

    logger.info("Assembly complete: %d entries", len(entries))
    return {"entries": entries}
