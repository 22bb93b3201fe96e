from __future__ import annotations

import json
import sys
from pathlib import Path

import typer
from rich import print
from rich.table import Table

# If not installed in editable mode, add repo root to PYTHONPATH
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from wardres.config import get_settings
from wardres.eval.eval import evaluate_files, format_report
from wardres.ingest.fetch import fetch_document
from wardres.ingest.spans import PdfSpanProvider, capture_pages, dump_capture, write_capture
from wardres.log import setup_logging
from wardres.parse.results import (
    load_results,
    parse_document,
    write_csv,
    write_results,
)
from wardres.parse.schema import ResultSet

app = typer.Typer(add_completion=False, help="Ward election results parser")


@app.callback()
def main(
    log_level: str = typer.Option(
        None, "--log-level", help="Overrides WARDRES_LOG_LEVEL (default INFO)"
    ),
):
    cfg = get_settings()
    setup_logging(log_level or cfg.log_level)


def _require(path: Path) -> Path:
    if not path.exists():
        typer.secho(f"Not found: {path}", fg="red")
        raise typer.Exit(1)
    return path


def _stem(path: Path) -> str:
    name = path.name
    for suffix in (".spans.json", ".results.json"):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return path.stem


@app.command()
def fetch(
    url: str = typer.Option(None, help="Document URL; defaults to WARDRES_SOURCE_URL"),
    out: Path = typer.Option(None, help="Target file; defaults to <data_dir>/<name>"),
):
    """Download the published results document."""
    cfg = get_settings()
    effective_url = url or cfg.source_url
    target = out or cfg.data_dir / Path(effective_url).name
    path = fetch_document(effective_url, target, timeout_s=cfg.fetch_timeout_s)
    print(f"[green]✓[/green] {effective_url} → {path}")


@app.command()
def capture(
    pdf: Path = typer.Argument(..., help="Results PDF"),
    out: Path = typer.Option(None, help="Defaults to <output_dir>/spans/<stem>.spans.json"),
):
    """Capture every page's text spans into a *.spans.json file."""
    cfg = get_settings()
    _require(pdf)
    with PdfSpanProvider(pdf, render_scale=cfg.render_scale) as provider:
        pages = capture_pages(provider)
    cap = dump_capture(pages, source=pdf.name)
    target = out or cfg.output_dir_spans / f"{_stem(pdf)}.spans.json"
    write_capture(cap, target)
    print(f"[green]✓[/green] {pdf.name} ({cap.page_count} pages) → {target}")


@app.command()
def parse(
    src: Path = typer.Argument(..., help="Results PDF or *.spans.json capture"),
    out: Path = typer.Option(
        None, help="Defaults to <output_dir>/results/<stem>.results.json"
    ),
):
    """Parse a document into wards, candidates and votes."""
    cfg = get_settings()
    _require(src)
    rs = parse_document(src, cfg)
    target = out or cfg.output_dir_results / f"{_stem(src)}.results.json"
    write_results(rs, target)
    print(f"[green]✓[/green] {src.name} → {target} ({len(rs.wards)} wards)")
    if rs.issues:
        print(f"[yellow]{len(rs.issues)} issues[/yellow]")
        for issue in rs.issues[:50]:
            print(f"  {issue}")


@app.command()
def show(results: Path = typer.Argument(..., help="*.results.json")):
    """Render parsed wards as tables."""
    rs = load_results(_require(results))
    for ward in rs.wards:
        table = Table(title=ward.ward_name)
        for col in ("Name", "Known as", "Party", "Votes", "Elected"):
            table.add_column(col)
        for c in ward.candidates:
            table.add_row(
                c.name,
                c.known_as,
                c.party,
                str(c.votes),
                "[green]yes[/green]" if c.elected else "",
            )
        print(table)


@app.command("validate")
def validate_file(json_path: Path):
    """Validate a single *.results.json against the schema."""
    data = json.loads(_require(json_path).read_text(encoding="utf-8"))
    ResultSet(**data)
    print("[green]OK[/green]")


@app.command()
def eval(
    gold: Path = typer.Argument(..., help="Gold *.results.json"),
    pred: Path = typer.Argument(..., help="Parsed *.results.json"),
    report_out: Path = typer.Option(None, help="Optional path to write a text report"),
):
    """Evaluate parsed results against a hand-checked gold file."""
    res, errors = evaluate_files(_require(gold), _require(pred))

    text = format_report(res)
    print(text)
    if errors:
        print("\n--- Issues (first 50) ---")
        for e in errors[:50]:
            print(e)

    if report_out:
        report_out.write_text(
            text + ("\n\n" + "\n".join(errors) if errors else ""), encoding="utf-8"
        )
        print(f"[green]✓[/green] wrote {report_out}")


@app.command("export-csv")
def export_csv(
    results: Path = typer.Argument(..., help="*.results.json"),
    out: Path = typer.Option(None, help="Defaults to <results stem>.csv beside it"),
):
    """Flatten results to one CSV row per candidate."""
    rs = load_results(_require(results))
    target = out or results.with_name(f"{_stem(results)}.csv")
    n = write_csv(rs, target)
    print(f"[green]✓[/green] {n} rows → {target}")


if __name__ == "__main__":
    app()
