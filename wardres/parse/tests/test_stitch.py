from wardres.ingest.schema import BBox, Fragment
from wardres.parse.stitch import (
    CONTINUATION_OFFSET,
    DOCUMENT_TITLE,
    PageStitcher,
    merge_fragments,
)

# --- Tiny fixtures -----------------------------------------------------------


def _frag(text: str, top: float, left: float = 50.0, width: float = 200.0):
    return Fragment(
        text=text, bbox=BBox(top=top, left=left, bottom=top + 20.0, right=left + width)
    )


def _page(*texts: str):
    return [_frag(t, top=40.0 + 30.0 * i) for i, t in enumerate(texts)]


def _ward_page(ward: str, *rest: str):
    return _page(DOCUMENT_TITLE, "ELECTION OF DISTRICT COUNCILLORS", "for the", ward, *rest)


def _texts(bloc):
    return [f.text for f in bloc]


class _FakeProvider:
    def __init__(self, pages):
        self._pages = pages

    def page_count(self):
        return max(self._pages.keys(), default=0)

    def spans(self, page_number):
        return self._pages.get(page_number, [])


# --- Heading repair ----------------------------------------------------------


def test_merge_fragments_unions_bbox():
    a = Fragment(text="ELECTION OF ", bbox=BBox(top=10, left=5, bottom=30, right=100))
    b = Fragment(text="COUNCILLORS", bbox=BBox(top=12, left=100, bottom=32, right=180))
    m = merge_fragments(a, b)
    assert m.text == "ELECTION OF COUNCILLORS"
    assert m.bbox == BBox(top=10, left=5, bottom=32, right=180)


def test_split_heading_is_repaired():
    page = _page(DOCUMENT_TITLE, "ELECTION OF DISTRICT", "COUNCILLORS", "for the", "Ward One")
    out = PageStitcher().repair_heading(page)
    assert _texts(out) == [
        DOCUMENT_TITLE,
        "ELECTION OF DISTRICTCOUNCILLORS",
        "for the",
        "Ward One",
    ]
    assert out[1].bbox.top == page[1].bbox.top
    assert out[1].bbox.bottom == page[2].bbox.bottom
    # input list is left untouched
    assert len(page) == 5


def test_short_page_is_left_unmodified():
    page = [_frag(DOCUMENT_TITLE, 10.0), _frag("COUNCILLORS", 40.0)]
    assert PageStitcher().repair_heading(page) == page
    assert PageStitcher().repair_heading([]) == []


# --- Bloc boundaries ---------------------------------------------------------


def test_single_page_bloc_unchanged_without_split():
    page = [
        _frag(DOCUMENT_TITLE, 10.0),
        _frag("ELECTION OF DISTRICT COUNCILLORS", 40.0),
        _frag("for the", 70.0),
        _frag("Ward One", 100.0),
        _frag("SMITH, JOHN", 200.0),
    ]
    blocs = PageStitcher().stitch({1: page})
    assert blocs == [page]


def test_each_title_page_starts_a_bloc():
    pages = {
        1: _ward_page("Ward One", "E) : Elected"),
        2: _ward_page("Ward Two", "E) : Elected"),
        3: _ward_page("Ward Three"),
    }
    blocs = PageStitcher().stitch(pages)
    assert len(blocs) == 3
    assert [b[3].text for b in blocs] == ["Ward One", "Ward Two", "Ward Three"]


def test_first_non_empty_page_starts_a_bloc_without_title():
    pages = {1: [], 2: [_frag("Cover note", 10.0)], 3: _ward_page("Ward One")}
    blocs = PageStitcher().stitch(pages)
    assert len(blocs) == 2
    assert _texts(blocs[0]) == ["Cover note"]


def test_empty_pages_contribute_nothing():
    pages = {1: _ward_page("Ward One"), 2: [], 3: []}
    blocs = PageStitcher().stitch(pages)
    assert len(blocs) == 1
    assert len(blocs[0]) == 4
    assert PageStitcher().stitch({}) == []


# --- Continuations -----------------------------------------------------------


def test_offset_continuation_shifts_top_and_bottom_by_constant():
    cont = [_frag("1,500", 60.0), _frag("(Elected)", 90.0, left=300.0)]
    pages = {1: _ward_page("Ward One", "TOTAL"), 2: cont}
    blocs = PageStitcher().stitch(pages)
    assert len(blocs) == 1
    appended = blocs[0][-2:]
    for before, after in zip(cont, appended):
        assert after.text == before.text
        assert after.bbox.top == before.bbox.top + CONTINUATION_OFFSET
        assert after.bbox.bottom == before.bbox.bottom + CONTINUATION_OFFSET
        assert after.bbox.left == before.bbox.left
        assert after.bbox.right == before.bbox.right
    assert CONTINUATION_OFFSET == 1200.0


def test_offset_is_configurable():
    pages = {1: _ward_page("Ward One"), 2: [_frag("42", 10.0)]}
    blocs = PageStitcher(continuation_offset=900.0).stitch(pages)
    assert blocs[0][-1].bbox.top == 910.0


def test_wrap_marker_merges_into_heading_without_offset():
    cont = [_frag("Ward", 5.0), _frag("SMITH", 300.0)]
    pages = {1: _ward_page("Ward One"), 2: cont}
    blocs = PageStitcher(wrap_marker="Ward").stitch(pages)
    bloc = blocs[0]
    assert bloc[1].text == "ELECTION OF DISTRICT COUNCILLORSWard"
    assert bloc[1].bbox.top == 5.0
    assert bloc[-1] == cont[1]
    assert "Ward" not in _texts(bloc)


def test_continuation_pages_also_get_heading_repair():
    cont = [
        _frag("Note", 10.0),
        _frag("ELECTION OF", 40.0),
        _frag("COUNCILLORS", 40.0, left=300.0),
    ]
    pages = {1: _ward_page("Ward One"), 2: cont}
    bloc = PageStitcher().stitch(pages)[0]
    assert _texts(bloc)[-2:] == ["Note", "ELECTION OFCOUNCILLORS"]


def test_stitch_provider_captures_then_stitches():
    pages = {1: _ward_page("Ward One"), 2: [_frag("7", 10.0)]}
    blocs = PageStitcher().stitch_provider(_FakeProvider(pages))
    assert len(blocs) == 1
    assert blocs[0][-1].bbox.top == 1210.0
