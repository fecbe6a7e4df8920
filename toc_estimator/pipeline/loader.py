"""
Document loading: python-docx for DOCX formatting, Docling for anything else.

Produces the ordered body elements the estimator walks. Formatting that
cannot be read is left as None so the weight model applies its defaults.
"""

import logging
import re
from pathlib import Path
from typing import Iterator

from docx import Document
from docx.oxml.ns import qn
from docx.shared import Length
from docx.text.paragraph import Paragraph

from toc_estimator.state import IMAGE, LIST_ITEM, OTHER, PARAGRAPH, TABLE, Element

logger = logging.getLogger(__name__)

_HEADING_STYLE_RE = re.compile(r"^heading\s+(\d)$", re.IGNORECASE)
_TOC_STYLE_RE = re.compile(r"^toc(\s+\d+|\s+heading)$", re.IGNORECASE)
_TOC_GALLERY = "Table of Contents"


# ---------------------------------------------------------------------------
# DOCX
# ---------------------------------------------------------------------------

def _style_chain(style) -> Iterator:
    while style is not None:
        yield style
        style = style.base_style


def _default_font_size(document) -> float | None:
    """Document-wide default run size from ``w:docDefaults`` (half-points)."""
    values = document.styles.element.xpath(
        "./w:docDefaults/w:rPrDefault/w:rPr/w:sz/@w:val"
    )
    try:
        return int(values[0]) / 2 if values else None
    except ValueError:
        return None


def _font_size(paragraph: Paragraph, default: float | None) -> float | None:
    for run in paragraph.runs:
        if run.text.strip() and run.font.size is not None:
            return run.font.size.pt
    for style in _style_chain(paragraph.style):
        if style.font.size is not None:
            return style.font.size.pt
    return default


def _format_value(paragraph: Paragraph, attr: str):
    """First non-None paragraph-format attribute, direct formatting first."""
    value = getattr(paragraph.paragraph_format, attr)
    if value is not None:
        return value
    for style in _style_chain(paragraph.style):
        value = getattr(style.paragraph_format, attr)
        if value is not None:
            return value
    return None


def _points(value) -> float | None:
    return value.pt if isinstance(value, Length) else None


def _line_spacing(paragraph: Paragraph, font_size: float | None) -> float | None:
    value = _format_value(paragraph, "line_spacing")
    if value is None:
        return None
    if isinstance(value, Length):
        # exact/at-least spacing: express as a multiple of single spacing
        return value.pt / (font_size or 11.0)
    return float(value)


def _outline_value(el) -> str | None:
    values = el.xpath("./w:pPr/w:outlineLvl/@w:val")
    return values[0] if values else None


def _level_from_outline(value: str) -> int | None:
    # 0-based; 9 is body text
    return int(value) + 1 if value in ("0", "1") else None


def _heading_level(paragraph: Paragraph) -> int | None:
    """Level 1 or 2 from the paragraph's outline level, else its style chain."""
    outline = _outline_value(paragraph._p)
    if outline is not None:
        return _level_from_outline(outline)

    for style in _style_chain(paragraph.style):
        m = _HEADING_STYLE_RE.match(style.name or "")
        if m:
            level = int(m.group(1))
            return level if level in (1, 2) else None
        outline = _outline_value(style.element)
        if outline is not None:
            return _level_from_outline(outline)
    return None


def _break_placement(p_el) -> tuple[bool, bool]:
    """(break before any text, break after some text) for explicit page breaks."""
    seen_text = False
    before = after = False
    for node in p_el.iter(qn("w:t"), qn("w:br")):
        if node.tag == qn("w:t"):
            if node.text and node.text.strip():
                seen_text = True
        elif node.get(qn("w:type")) == "page":
            if seen_text:
                after = True
            else:
                before = True
    return before, after


def _is_toc_paragraph(p_el, style_name: str) -> bool:
    if _TOC_STYLE_RE.match(style_name):
        return True
    return any(
        (instr.text or "").strip().upper().startswith("TOC")
        for instr in p_el.iter(qn("w:instrText"))
    )


def _is_toc_sdt(sdt_el) -> bool:
    gallery = sdt_el.find(f"{qn('w:sdtPr')}/{qn('w:docPartObj')}/{qn('w:docPartGallery')}")
    return gallery is not None and gallery.get(qn("w:val")) == _TOC_GALLERY


def _iter_blocks(container) -> Iterator:
    """Body children in order; non-TOC content controls are flattened."""
    for child in container.iterchildren():
        if child.tag == qn("w:sectPr"):
            continue
        if child.tag == qn("w:sdt") and not _is_toc_sdt(child):
            for content in child.iterchildren(qn("w:sdtContent")):
                yield from _iter_blocks(content)
            continue
        yield child


def _cell_text(tc) -> str:
    return "\n".join(
        "".join(t.text or "" for t in p.iter(qn("w:t")))
        for p in tc.iter(qn("w:p"))
    )


def _table_rows(tbl) -> list[list[str]]:
    return [
        [_cell_text(tc) for tc in tr.iterchildren(qn("w:tc"))]
        for tr in tbl.iterchildren(qn("w:tr"))
    ]


def _paragraph_element(paragraph: Paragraph, default_size: float | None) -> Element:
    p_el = paragraph._p
    text = paragraph.text
    style_name = paragraph.style.name if paragraph.style is not None else ""

    if not text.strip() and p_el.xpath(".//w:drawing | .//w:pict"):
        return Element(kind=IMAGE)

    heading_level = _heading_level(paragraph)
    if heading_level is None and (
        p_el.xpath("./w:pPr/w:numPr") or style_name.lower().startswith("list")
    ):
        return Element(kind=LIST_ITEM, text=text)

    font_size = _font_size(paragraph, default_size)
    return Element(
        kind=PARAGRAPH,
        text=text,
        font_size=font_size,
        spacing_before=_points(_format_value(paragraph, "space_before")),
        spacing_after=_points(_format_value(paragraph, "space_after")),
        line_spacing=_line_spacing(paragraph, font_size),
        heading_level=heading_level,
        page_break_before=bool(_format_value(paragraph, "page_break_before")),
        is_toc=_is_toc_paragraph(p_el, style_name),
    )


def load_docx(path: Path) -> list[Element]:
    document = Document(str(path))
    default_size = _default_font_size(document)

    elements: list[Element] = []
    pending_break = False

    for block in _iter_blocks(document.element.body):
        if block.tag == qn("w:p"):
            paragraph = Paragraph(block, document)
            element = _paragraph_element(paragraph, default_size)
            before, after = _break_placement(block)
            if element["kind"] == PARAGRAPH:
                if before or pending_break:
                    element["page_break_before"] = True
                pending_break = False
            elif before or _format_value(paragraph, "page_break_before"):
                # list items and images carry no break; the next paragraph does
                pending_break = True
            if after:
                pending_break = True
        elif block.tag == qn("w:tbl"):
            element = Element(kind=TABLE, rows=_table_rows(block))
        elif block.tag == qn("w:sdt"):
            element = Element(kind=OTHER, is_toc=True)
        else:
            element = Element(kind=OTHER)

        element["position"] = len(elements)
        elements.append(element)

    return elements


# ---------------------------------------------------------------------------
# Docling (PDF, HTML, Markdown, PPTX, ...)
# ---------------------------------------------------------------------------

_DOCLING_KINDS = {
    "TEXT": PARAGRAPH,
    "PARAGRAPH": PARAGRAPH,
    "TITLE": PARAGRAPH,
    "SECTION_HEADER": PARAGRAPH,
    "CAPTION": PARAGRAPH,
    "FOOTNOTE": PARAGRAPH,
    "CODE": PARAGRAPH,
    "LIST_ITEM": LIST_ITEM,
    "TABLE": TABLE,
    "PICTURE": IMAGE,
}


def _docling_rows(grid) -> list[list[str]]:
    """Cell texts per grid row; a merged cell is kept only at its top-left slot."""
    rows = []
    for r, row in enumerate(grid):
        cells = []
        for c, cell in enumerate(row):
            if (getattr(cell, "start_row_offset_idx", r) == r
                    and getattr(cell, "start_col_offset_idx", c) == c):
                cells.append(cell.text)
        rows.append(cells)
    return rows


def _docling_element(item) -> Element:
    label = (item.label.value if hasattr(item.label, "value") else str(item.label)).upper()

    if label == "DOCUMENT_INDEX":
        return Element(kind=OTHER, is_toc=True)

    kind = _DOCLING_KINDS.get(label, OTHER)
    if kind == TABLE:
        grid = item.data.grid if getattr(item, "data", None) is not None else []
        return Element(kind=TABLE, rows=_docling_rows(grid))
    if kind == IMAGE:
        return Element(kind=IMAGE)

    text = (getattr(item, "text", "") or "").strip()
    if kind == LIST_ITEM:
        return Element(kind=LIST_ITEM, text=text)
    if kind == OTHER:
        return Element(kind=OTHER, text=text)

    level = getattr(item, "level", None) if label == "SECTION_HEADER" else None
    return Element(
        kind=PARAGRAPH,
        text=text,
        heading_level=level if level in (1, 2) else None,
        page_break_before=False,
    )


def load_with_docling(path: Path) -> list[Element]:
    from docling.document_converter import DocumentConverter

    logger.info("Converting with Docling: %s", path)
    doc = DocumentConverter().convert(str(path)).document

    elements: list[Element] = []
    for item, _level in doc.iterate_items():
        element = _docling_element(item)
        element["position"] = len(elements)
        elements.append(element)
    return elements


def load_document(state: dict) -> dict:
    """Read the source into ordered body elements."""
    source_path = state["source_path"]
    path = Path(source_path)
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {source_path}")

    if path.suffix.lower() == ".docx":
        logger.info("Reading DOCX structure: %s", path)
        elements = load_docx(path)
    else:
        elements = load_with_docling(path)

    headings = sum(1 for el in elements if el.get("heading_level"))
    breaks = sum(1 for el in elements if el.get("page_break_before"))
    logger.info("Loaded %d elements (%d headings, %d page breaks)", len(elements), headings, breaks)
    return {"elements": elements}
