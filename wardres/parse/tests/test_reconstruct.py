from wardres.ingest.schema import BBox, Fragment
from wardres.parse.reconstruct import TableReconstructor
from wardres.parse.results import ResultsParser
from wardres.parse.schema import Candidate, Ward
from wardres.parse.stitch import DOCUMENT_TITLE


def _frag(text: str, top: float, left: float = 50.0, height: float = 20.0):
    return Fragment(
        text=text, bbox=BBox(top=top, left=left, bottom=top + height, right=left + 150.0)
    )


def _header(ward: str = "Ward One"):
    return [
        _frag(DOCUMENT_TITLE, 10.0),
        _frag("ELECTION OF DISTRICT COUNCILLORS", 40.0),
        _frag("for the", 70.0),
        _frag(ward, 100.0),
    ]


def test_end_to_end_vote_on_continuation_page():
    page1 = _header() + [
        _frag("E) : Elected", 130.0),
        _frag("SMITH, JOHN", 1250.0),
        _frag("Labour", 1250.0, left=400.0),
        _frag("TOTAL", 200.0),
    ]
    # after the 1200px continuation offset this sits at 1250..1270
    page2 = [_frag("1,500", 50.0, left=600.0)]

    rs = ResultsParser().parse_pages({1: page1, 2: page2})

    assert list(rs.wards) == [
        Ward(
            ward_name="Ward One",
            candidates=[
                Candidate(
                    name="SMITH, JOHN",
                    known_as="N/A",
                    party="Labour ",
                    votes=1500,
                    elected=False,
                )
            ],
        )
    ]
    assert rs.issues == ()


def test_hyphenated_name_combines():
    bloc = _header() + [
        _frag("E) : Elected", 130.0),
        _frag("MARY", 200.0, left=50.0),
        _frag("-", 200.0, left=100.0),
        _frag("JANE", 200.0, left=110.0),
    ]
    ward = TableReconstructor().reconstruct(bloc)
    assert [c.name for c in ward.candidates] == ["MARY-JANE"]


def test_full_ward_with_aliases_parties_and_elected():
    bloc = _header("Seaford Central") + [
        _frag("Polling station: Town Hall", 115.0),
        _frag("(E) : Elected", 130.0),
        _frag("BROWN, ALICE", 300.0),
        _frag("Green Party", 320.0),
        _frag("JONES, ROBERT", 360.0),
        _frag("Known as Bob Jones", 380.0),
        _frag("The Conservative Party Candidate", 380.0, left=400.0),
        _frag("WHITE, CAROL", 420.0),
        _frag("TOTAL", 500.0),
        _frag("812", 310.0, left=700.0),
        _frag("1,204 (Elected)", 370.0, left=700.0),
        _frag("97", 420.0, left=700.0),
        _frag("Number of ballot papers rejected", 540.0),
    ]
    issues = []
    ward = TableReconstructor().reconstruct(bloc, issues)

    assert ward.ward_name == "Seaford Central"
    brown, jones, white = ward.candidates
    assert (brown.name, brown.party, brown.votes, brown.elected) == (
        "BROWN, ALICE",
        "Green",
        812,
        False,
    )
    assert (jones.name, jones.known_as, jones.party, jones.votes, jones.elected) == (
        "JONES, ROBERT",
        "Bob Jones",
        "Conservative",
        1204,
        True,
    )
    assert (white.party, white.votes, white.known_as) == ("Independent", 97, "N/A")
    # the trailing line after the tally is the only thing that could not be used
    assert len(issues) == 1
    assert issues[0].startswith("Seaford Central: vote_unparsed")


def test_ward_without_candidates_keeps_placeholder():
    bloc = _header() + [_frag("Uncontested", 130.0)]
    issues = []
    ward = TableReconstructor().reconstruct(bloc, issues)
    assert len(ward.candidates) == 1
    c = ward.candidates[0]
    assert (c.name, c.known_as, c.party, c.votes, c.elected) == (
        "unknown",
        "N/A",
        "Independent",
        -1,
        False,
    )
    assert any("unknown_candidate" in s for s in issues)


def test_blank_and_hyphen_fragments_keep_unknown_sentinel():
    bloc = _header() + [
        _frag("E) : Elected", 130.0),
        _frag("", 200.0),
        _frag("-", 210.0),
        _frag("Labour", 220.0),
    ]
    issues = []
    ward = TableReconstructor().reconstruct(bloc, issues)
    assert [c.name for c in ward.candidates] == ["unknown"]
    assert ward.candidates[0].party == "Labour "
    assert any("unknown_candidate" in s for s in issues)


def test_short_bloc_never_raises():
    issues = []
    ward = TableReconstructor().reconstruct([_frag("stray", 10.0)], issues)
    assert ward.ward_name == ""
    assert len(ward.candidates) == 1
    assert any("short_bloc" in s for s in issues)
    assert len(TableReconstructor().reconstruct([]).candidates) == 1


def test_every_parsed_ward_has_a_candidate():
    pages = {
        1: _header("Ward One") + [_frag("E) : Elected", 130.0), _frag("SMITH", 200.0)],
        2: _header("Ward Two"),
        3: [],
        4: _header("Ward Three") + [_frag("TOTAL", 300.0), _frag("12", 310.0)],
    }
    rs = ResultsParser().parse_pages(pages)
    assert [w.ward_name for w in rs.wards] == ["Ward One", "Ward Two", "Ward Three"]
    assert all(len(w.candidates) >= 1 for w in rs.wards)
    assert rs.page_count == 4
