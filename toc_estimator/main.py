"""CLI entry point for the table-of-contents page estimator."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from toc_estimator.config import EstimatorConfig
from toc_estimator.pipeline.loader import load_document
from toc_estimator.pipeline.anchor import locate_anchor
from toc_estimator.pipeline.page_counter import count_pages
from toc_estimator.pipeline.estimator import estimate_pages
from toc_estimator.pipeline.assembler import assemble

logger = logging.getLogger(__name__)

_LEADER_WIDTH = 60


def run_pipeline(
    source_path: str,
    cutoff: int | None = None,
    total_pages: int | None = None,
    config: EstimatorConfig | None = None,
) -> dict:
    """Run the full estimation pipeline, return final state."""
    config = config or EstimatorConfig.load()
    state: dict = {
        "source_path": source_path,
        "cutoff": cutoff,
        "total_pages": total_pages,
        "config": config,
        "fallback_pages": config.fallback_pages,
    }

    state.update(load_document(state))
    state.update(locate_anchor(state))
    state.update(count_pages(state))
    state.update(estimate_pages(state))
    state.update(assemble(state))

    return state


def format_text(entries: list[dict]) -> str:
    lines = []
    for entry in entries:
        indent = "  " * (entry["level"] - 1)
        label = f"{indent}{entry['text']} "
        page = f" {entry['page']}"
        dots = "." * max(3, _LEADER_WIDTH - len(label) - len(page))
        lines.append(f"{label}{dots}{page}")
    return "\n".join(lines)


def main() -> int:
    parser = argparse.ArgumentParser(description="Estimate the page each heading of a document lands on.")
    parser.add_argument("source_path", help="Path to the document (.docx, or any format Docling reads)")
    parser.add_argument("--cutoff", type=int, default=None,
                        help="Anchor position; elements at or before it are ignored (default: detect the TOC)")
    parser.add_argument("--total-pages", type=int, default=None,
                        help="Known rendered page count (default: render with LibreOffice)")
    parser.add_argument("--output", "-o", default=None, help="Write output here instead of stdout")
    parser.add_argument("--format", choices=["json", "text"], default="json")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    source_path = Path(args.source_path)
    if not source_path.exists():
        logger.error("File not found: %s", source_path)
        return 1

    start = time.time()
    logger.info("Estimating heading pages for %s", source_path)

    try:
        state = run_pipeline(str(source_path), cutoff=args.cutoff, total_pages=args.total_pages)
    except Exception:
        logger.exception("Pipeline failed")
        return 1

    entries = state.get("entries", [])
    if args.format == "text":
        rendered = format_text(entries)
    else:
        rendered = json.dumps(
            {"total_pages": state["assignment"]["total_pages"], "entries": entries},
            indent=2,
            ensure_ascii=False,
        )

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(rendered + "\n")
        logger.info("Done: %d entries -> %s (%.1fs)", len(entries), output_path, time.time() - start)
    else:
        print(rendered)
        logger.info("Done: %d entries (%.1fs)", len(entries), time.time() - start)
    return 0


if __name__ == "__main__":
    sys.exit(main())
