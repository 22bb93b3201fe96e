"""
spans.py

Span providers for results documents:
- PdfSpanProvider reads text spans with PyMuPDF and scales them to layout pixels
- CaptureSpanProvider replays a serialized SpanCapture (e.g. from a browser renderer)
- capture_pages pulls pages strictly forward until none remain uncaptured
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Tuple

import fitz  # PyMuPDF

from wardres.ingest.schema import BBox, Fragment, SpanCapture

logger = logging.getLogger(__name__)

NBSP = "\u00a0"
SOFT_HYPHEN = "\u00ad"

DEFAULT_RENDER_SCALE = 96.0 / 72.0


def normalize_text(s: str) -> str:
    """Basic normalization of a span's text."""
    if not s:
        return s
    s = s.replace(NBSP, " ").replace(SOFT_HYPHEN, "")
    s = re.sub(r"\s+", " ", s).strip()
    return s


class SpanProvider(Protocol):
    def page_count(self) -> int: ...

    def spans(self, page_number: int) -> List[Fragment]: ...


# -----------------------------
# Providers
# -----------------------------


class PdfSpanProvider:
    """Light wrapper around PyMuPDF yielding positioned spans per 1-based page."""

    def __init__(self, path: str | Path, render_scale: float = DEFAULT_RENDER_SCALE):
        self.path = str(path)
        self.render_scale = render_scale
        self.doc = fitz.open(self.path)

    def __enter__(self) -> "PdfSpanProvider":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.doc.close()

    def page_count(self) -> int:
        return len(self.doc)

    def _iter_raw_spans(self, page_index: int) -> Iterator[Dict]:
        page = self.doc[page_index]
        pd = page.get_text("dict")
        for blk in pd.get("blocks", []):
            for line in blk.get("lines", []):
                for sp in line.get("spans", []):
                    yield sp

    def spans(self, page_number: int) -> List[Fragment]:
        s = self.render_scale
        out: List[Fragment] = []
        for sp in self._iter_raw_spans(page_number - 1):
            txt = normalize_text(sp.get("text", ""))
            if not txt:
                continue
            x0, y0, x1, y1 = sp.get("bbox", (0, 0, 0, 0))
            out.append(
                Fragment(
                    text=txt,
                    bbox=BBox(top=y0 * s, left=x0 * s, bottom=y1 * s, right=x1 * s),
                    tag="SPAN",
                )
            )
        return out


class CaptureSpanProvider:
    """Replays fragments from a SpanCapture document."""

    def __init__(self, capture: SpanCapture):
        self.capture = capture

    @classmethod
    def from_json(cls, path: Path) -> "CaptureSpanProvider":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(SpanCapture(**data))

    def page_count(self) -> int:
        return self.capture.page_count

    def spans(self, page_number: int) -> List[Fragment]:
        return list(self.capture.pages.get(page_number, []))


# -----------------------------
# Sequential capture
# -----------------------------


def iter_page_ready(provider: SpanProvider) -> Iterator[Tuple[int, List[Fragment]]]:
    """
    Yield (page_number, fragments) strictly forward, one page at a time.
    A page that fails to render is reported as empty.
    """
    for page_number in range(1, provider.page_count() + 1):
        try:
            fragments = provider.spans(page_number)
        except (RuntimeError, ValueError) as e:
            logger.warning("page %d did not render: %s", page_number, e)
            fragments = []
        yield page_number, fragments


def capture_pages(provider: SpanProvider) -> Dict[int, List[Fragment]]:
    """Capture every page; returns once no page remains uncaptured."""
    pending: Dict[int, Optional[List[Fragment]]] = {
        n: None for n in range(1, provider.page_count() + 1)
    }
    ready = iter_page_ready(provider)
    while any(v is None for v in pending.values()):
        try:
            page_number, fragments = next(ready)
        except StopIteration:
            break
        pending[page_number] = fragments
        logger.debug("captured page %d (%d spans)", page_number, len(fragments))

    return {n: (frags or []) for n, frags in pending.items()}


def dump_capture(
    pages: Dict[int, List[Fragment]], source: Optional[str] = None
) -> SpanCapture:
    return SpanCapture(
        source=source,
        page_count=max(pages.keys(), default=0),
        pages={n: frags for n, frags in pages.items() if frags},
    )


def write_capture(capture: SpanCapture, out_path: Path) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(
        json.dumps(capture.model_dump(exclude_none=True), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
