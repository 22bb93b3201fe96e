"""
stitch.py

Joins per-page fragment lists into one fragment bloc per ward table:
- repairs the "... COUNCILLORS" heading when it is split into three spans
- opens a new bloc on every page that starts with the document title
- continues the open bloc otherwise, either directly below (wrapped ward name)
  or shifted down by a fixed page offset into one shared coordinate frame
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from wardres.ingest.schema import Fragment
from wardres.ingest.spans import SpanProvider, capture_pages

logger = logging.getLogger(__name__)

DOCUMENT_TITLE = "DECLARATION OF RESULT OF POLL"
WRAP_MARKER = "Ward"
SPLIT_HEADING = "COUNCILLORS"
CONTINUATION_OFFSET = 1200.0

Bloc = List[Fragment]


def merge_fragments(first: Fragment, second: Fragment) -> Fragment:
    """Concatenate text and union the bounding boxes."""
    return first.model_copy(
        update={"text": first.text + second.text, "bbox": first.bbox.union(second.bbox)}
    )


def offset_fragment(frag: Fragment, dy: float) -> Fragment:
    return frag.model_copy(update={"bbox": frag.bbox.shifted(dy)})


class PageStitcher:
    """Turns fragment lists indexed by page number into ordered blocs."""

    def __init__(
        self,
        document_title: str = DOCUMENT_TITLE,
        wrap_marker: str = WRAP_MARKER,
        continuation_offset: float = CONTINUATION_OFFSET,
        split_heading: str = SPLIT_HEADING,
    ):
        self.document_title = document_title
        self.wrap_marker = wrap_marker
        self.continuation_offset = continuation_offset
        self.split_heading = split_heading

    def repair_heading(self, page: List[Fragment]) -> List[Fragment]:
        """Fold a heading split over spans 1 and 2 back into span 1."""
        if len(page) < 3 or page[2].text != self.split_heading:
            return list(page)
        logger.debug("repairing split heading %r + %r", page[1].text, page[2].text)
        return [page[0], merge_fragments(page[1], page[2])] + list(page[3:])

    def _starts_bloc(self, page: List[Fragment]) -> bool:
        return page[0].text == self.document_title

    def _continue_bloc(self, bloc: Bloc, page: List[Fragment], page_no: int) -> None:
        if page[0].text == self.wrap_marker and len(bloc) >= 2:
            # same table continuing directly below; ward name wrapped onto this page
            logger.debug("page %d: wrapped heading merged into bloc", page_no)
            bloc[1] = merge_fragments(bloc[1], page[0])
            bloc.extend(page[1:])
            return
        logger.debug(
            "page %d: appended with offset %.1f", page_no, self.continuation_offset
        )
        bloc.extend(offset_fragment(f, self.continuation_offset) for f in page)

    def stitch(self, pages: Dict[int, List[Fragment]]) -> List[Bloc]:
        blocs: List[Bloc] = []
        open_bloc: Optional[Bloc] = None
        last_page = max(pages.keys(), default=0)

        for page_no in range(1, last_page + 1):
            page = self.repair_heading(pages.get(page_no) or [])
            if not page:
                continue
            if open_bloc is None or self._starts_bloc(page):
                logger.debug("page %d: new bloc (%r)", page_no, page[0].text)
                open_bloc = list(page)
                blocs.append(open_bloc)
            else:
                self._continue_bloc(open_bloc, page, page_no)

        return blocs

    def stitch_provider(self, provider: SpanProvider) -> List[Bloc]:
        """Capture every page of the provider, then stitch."""
        return self.stitch(capture_pages(provider))
