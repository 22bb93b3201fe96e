"""
results.py

Orchestrates span provider -> PageStitcher -> TableReconstructor -> ResultSet,
and reads/writes the ResultSet contract.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from wardres.config import Settings
from wardres.ingest.schema import Fragment
from wardres.ingest.spans import (
    CaptureSpanProvider,
    PdfSpanProvider,
    SpanProvider,
    capture_pages,
)
from wardres.parse.reconstruct import TableReconstructor
from wardres.parse.schema import ResultSet, Ward
from wardres.parse.stitch import PageStitcher

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("ward", "name", "known_as", "party", "votes", "elected")


class ResultsParser:
    """
    High-level parsing orchestrator.
    Usage:
        parser = ResultsParser()
        result = parser.parse_provider(provider, source="results.pdf")
        print(result.model_dump_json(by_alias=True, indent=2))
    """

    def __init__(
        self,
        stitcher: Optional[PageStitcher] = None,
        reconstructor: Optional[TableReconstructor] = None,
    ):
        self.stitcher = stitcher or PageStitcher()
        self.reconstructor = reconstructor or TableReconstructor()

    @classmethod
    def from_settings(cls, cfg: Settings) -> "ResultsParser":
        return cls(
            stitcher=PageStitcher(
                document_title=cfg.document_title,
                wrap_marker=cfg.wrap_marker,
                continuation_offset=cfg.continuation_offset,
            )
        )

    def parse_pages(
        self, pages: Dict[int, List[Fragment]], source: Optional[str] = None
    ) -> ResultSet:
        blocs = self.stitcher.stitch(pages)
        issues: List[str] = []
        wards: List[Ward] = [self.reconstructor.reconstruct(b, issues) for b in blocs]

        logger.info(
            "%d pages -> %d blocs -> %d wards", len(pages), len(blocs), len(wards)
        )
        if issues:
            logger.warning("%d fragments could not be classified cleanly", len(issues))

        return ResultSet(
            source=source,
            page_count=max(pages.keys(), default=0),
            wards=wards,
            issues=issues,
        )

    def parse_provider(
        self, provider: SpanProvider, source: Optional[str] = None
    ) -> ResultSet:
        return self.parse_pages(capture_pages(provider), source=source)


def parse_document(path: Path, cfg: Settings) -> ResultSet:
    """Parse a results PDF or a *.spans.json capture."""
    parser = ResultsParser.from_settings(cfg)
    if path.suffix.lower() == ".json":
        return parser.parse_provider(
            CaptureSpanProvider.from_json(path), source=path.name
        )
    with PdfSpanProvider(path, render_scale=cfg.render_scale) as provider:
        return parser.parse_provider(provider, source=path.name)


# -----------------------------
# I/O
# -----------------------------


def dump_results(rs: ResultSet) -> str:
    """Deterministic JSON for the results contract."""
    return json.dumps(
        rs.model_dump(by_alias=True, exclude_none=True),
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
    )


def write_results(rs: ResultSet, out_path: Path) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(dump_results(rs), encoding="utf-8")


def load_results(path: Path) -> ResultSet:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return ResultSet(**data)


def write_csv(rs: ResultSet, out_path: Path) -> int:
    """One row per candidate; returns the number of rows written."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    n = 0
    with out_path.open("w", encoding="utf-8", newline="") as fh:
        w = csv.writer(fh)
        w.writerow(CSV_COLUMNS)
        for ward in rs.wards:
            for c in ward.candidates:
                w.writerow(
                    [ward.ward_name, c.name, c.known_as, c.party, c.votes, int(c.elected)]
                )
                n += 1
    return n
