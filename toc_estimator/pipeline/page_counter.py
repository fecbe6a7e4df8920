"""
Authoritative page count: render the source to PDF and read its page count.

PDF sources are counted directly with pdfplumber. Anything else goes
through a headless LibreOffice conversion first. Failures yield 0
("unknown"); the estimator substitutes its fallback.
"""

import logging
import subprocess
import tempfile
from pathlib import Path

import pdfplumber

from toc_estimator.config import EstimatorConfig

logger = logging.getLogger(__name__)


def pdf_page_count(pdf_path: str) -> int:
    with pdfplumber.open(pdf_path) as pdf:
        return len(pdf.pages)


def render_to_pdf(source: Path, out_dir: Path, config: EstimatorConfig) -> Path:
    """Convert ``source`` to PDF in ``out_dir`` with LibreOffice."""
    args = [
        config.soffice_bin, "--headless",
        "--convert-to", "pdf",
        "--outdir", str(out_dir),
        str(source),
    ]
    logger.debug("Running command: %s", " ".join(args))
    proc = subprocess.run(
        args,
        check=False,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        timeout=config.render_timeout,
    )
    if proc.returncode != 0:
        raise RuntimeError(f"{config.soffice_bin} failed ({proc.returncode}): {proc.stderr.strip()}")

    pdf_path = out_dir / f"{source.stem}.pdf"
    if not pdf_path.exists():
        raise RuntimeError(f"{config.soffice_bin} produced no PDF for {source.name}")
    return pdf_path


def fetch_total_pages(source_path: str, config: EstimatorConfig) -> int:
    """Rendered page count of ``source_path``, or 0 when it cannot be determined."""
    source = Path(source_path)
    try:
        if source.suffix.lower() == ".pdf":
            return pdf_page_count(str(source))

        with tempfile.TemporaryDirectory(prefix="toc-render-") as tmp:
            logger.info("Rendering %s to PDF for page count", source.name)
            pdf_path = render_to_pdf(source, Path(tmp), config)
            return pdf_page_count(str(pdf_path))
    except Exception as exc:
        logger.warning("Could not determine page count for %s: %s", source, exc)
        return 0


def count_pages(state: dict) -> dict:
    """Pipeline stage: resolve the authoritative page count once per run."""
    override = state.get("total_pages")
    if override and override > 0:
        logger.info("Using supplied page count: %d", override)
        return {"total_pages": override}

    config = state.get("config") or EstimatorConfig.load()
    total = fetch_total_pages(state["source_path"], config)
    if total:
        logger.info("Rendered document has %d pages", total)
    return {"total_pages": total}
