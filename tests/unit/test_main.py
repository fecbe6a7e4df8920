from __future__ import annotations

import json
import sys

from docx import Document

from toc_estimator import main as cli
from toc_estimator.config import EstimatorConfig


def _build_report(tmp_path):
    doc = Document()
    doc.add_heading("Contents", level=1)         # 0, anchor
    doc.add_heading("Introduction", level=1)     # 1
    doc.add_paragraph("x" * 2000)                # 2
    doc.add_page_break()                         # 3
    doc.add_heading("Methods", level=1)          # 4
    doc.add_paragraph("y" * 2000)                # 5
    doc.add_heading("Details", level=2)          # 6
    doc.add_paragraph("z" * 2000)                # 7
    target = tmp_path / "report.docx"
    doc.save(str(target))
    return target


def test_run_pipeline_end_to_end(tmp_path):
    state = cli.run_pipeline(str(_build_report(tmp_path)), total_pages=4, config=EstimatorConfig())

    entries = state["entries"]
    assert state["cutoff"] == 0
    assert [e["text"] for e in entries] == ["Introduction", "Methods", "Details"]
    assert [e["level"] for e in entries] == [1, 1, 2]
    pages = [e["page"] for e in entries]
    assert pages[0] == 1
    assert pages[1] >= 2
    assert pages == sorted(pages)
    assert all(p <= 4 for p in pages)


def test_run_pipeline_explicit_cutoff_includes_everything(tmp_path):
    state = cli.run_pipeline(str(_build_report(tmp_path)), cutoff=-1, total_pages=4,
                             config=EstimatorConfig())

    assert [e["text"] for e in state["entries"]][0] == "Contents"


def test_run_pipeline_unknown_page_count_uses_configured_fallback(tmp_path, monkeypatch):
    monkeypatch.setattr(cli, "count_pages", lambda state: {"total_pages": 0})

    state = cli.run_pipeline(str(_build_report(tmp_path)), config=EstimatorConfig(fallback_pages=3))

    assert state["assignment"]["total_pages"] == 3


def test_format_text_indents_levels():
    text = cli.format_text([
        {"text": "Intro", "level": 1, "position": 1, "page": 1},
        {"text": "Scope", "level": 2, "position": 2, "page": 12},
    ])
    first, second = text.splitlines()
    assert first.startswith("Intro ...")
    assert first.endswith(" 1")
    assert second.startswith("  Scope ...")
    assert second.endswith(" 12")


def test_main_writes_json(tmp_path, monkeypatch):
    source = _build_report(tmp_path)
    output = tmp_path / "out" / "toc.json"
    monkeypatch.setattr(sys, "argv", ["toc-estimate", str(source), "--total-pages", "4", "-o", str(output)])

    assert cli.main() == 0

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["total_pages"] == 4
    assert [e["text"] for e in data["entries"]] == ["Introduction", "Methods", "Details"]


def test_main_prints_text(tmp_path, monkeypatch, capsys):
    source = _build_report(tmp_path)
    monkeypatch.setattr(sys, "argv", ["toc-estimate", str(source), "--total-pages", "4", "--format", "text"])

    assert cli.main() == 0

    out = capsys.readouterr().out
    assert "Introduction" in out
    assert "  Details" in out


def test_main_missing_file(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["toc-estimate", str(tmp_path / "nope.docx")])
    assert cli.main() == 1


def test_main_reports_pipeline_failure(tmp_path, monkeypatch):
    source = _build_report(tmp_path)

    def boom(*args, **kwargs):
        raise RuntimeError("broken document")

    monkeypatch.setattr(cli, "run_pipeline", boom)
    monkeypatch.setattr(sys, "argv", ["toc-estimate", str(source)])

    assert cli.main() == 1
