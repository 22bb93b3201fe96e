"""
rules.py

Ordered classification rules for the fragments of one ward bloc.

Each rule takes the scan state and a fragment and returns True when it
consumed the fragment. The first rule that returns True wins; a fragment
no rule consumes leaves the state unchanged.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from wardres.ingest.schema import BBox, Fragment
from wardres.parse.schema import (
    DEFAULT_KNOWN_AS,
    DEFAULT_PARTY,
    UNKNOWN_NAME,
    UNRESOLVED_VOTES,
    Candidate,
)

ELECTED_LEGEND = "E) : Elected"
ELECTED_MARK = "(Elected"
KNOWN_AS_PREFIX = "Known as "
SECTION_BREAK_KEYWORDS = ("TOTAL", "unmarked", "ejected")

# keyword found in the fragment -> party label (first match wins)
PARTY_LABELS: Tuple[Tuple[str, str], ...] = (
    ("Liberal", "Liberal Democrat"),
    ("Labour", "Labour "),
    ("UKIP", "UKIP"),
    ("Conservative", "Conservative"),
    ("Green", "Green"),
)

_RE_ELECTED_SUFFIX = re.compile(r"\s*\(Elected\)\s*$")
_RE_VOTES = re.compile(r"^\d+$")


def parse_votes(text: str) -> Optional[int]:
    """
    "1,234" -> 1234, "987 (Elected)" -> 987; None if not a non-negative integer.
    """
    if not text:
        return None
    s = _RE_ELECTED_SUFFIX.sub("", text).replace(",", "").strip()
    if not _RE_VOTES.match(s):
        return None
    return int(s)


def party_for(text: str) -> Optional[str]:
    for keyword, label in PARTY_LABELS:
        if keyword in text:
            return label
    return None


def is_upper(text: str) -> bool:
    # no lower-case letters; digits and punctuation count as upper-case
    return text == text.upper()


# -----------------------------
# Scan state
# -----------------------------


@dataclass
class CandidateBand:
    """Vertical extent of the fragments attributed to one candidate."""

    top: float = math.inf
    bottom: float = -math.inf

    @classmethod
    def from_bbox(cls, bbox: BBox) -> "CandidateBand":
        return cls(top=bbox.top, bottom=bbox.bottom)

    def extend(self, bbox: BBox) -> None:
        self.top = min(self.top, bbox.top)
        self.bottom = max(self.bottom, bbox.bottom)

    def contains(self, y: float) -> bool:
        return self.top <= y <= self.bottom


@dataclass
class CandidateDraft:
    name: str = UNKNOWN_NAME
    known_as: str = DEFAULT_KNOWN_AS
    party: str = DEFAULT_PARTY
    votes: int = UNRESOLVED_VOTES
    elected: bool = False

    def freeze(self) -> Candidate:
        return Candidate(
            name=self.name,
            known_as=self.known_as,
            party=self.party,
            votes=self.votes,
            elected=self.elected,
        )


@dataclass
class ScanState:
    ward_name: str = ""
    candidates: List[CandidateDraft] = field(
        default_factory=lambda: [CandidateDraft()]
    )
    bands: List[CandidateBand] = field(default_factory=lambda: [CandidateBand()])
    candidates_ready: bool = False
    votes_ready: bool = False
    prev_text: Optional[str] = None
    prev_bbox: Optional[BBox] = None
    issues: List[str] = field(default_factory=list)

    @property
    def current(self) -> CandidateDraft:
        return self.candidates[-1]

    @property
    def current_band(self) -> CandidateBand:
        return self.bands[-1]

    def claim(self, frag: Fragment) -> None:
        self.current_band.extend(frag.bbox)

    def start_candidate(self, frag: Fragment) -> None:
        self.candidates.append(CandidateDraft(name=frag.text))
        self.bands.append(CandidateBand.from_bbox(frag.bbox))

    def candidate_at(self, y: float) -> Optional[CandidateDraft]:
        """First candidate (in scan order) whose band contains y."""
        for cand, band in zip(self.candidates, self.bands):
            if band.contains(y):
                return cand
        return None

    def remember(self, frag: Fragment) -> None:
        self.prev_text = frag.text
        self.prev_bbox = frag.bbox

    def note(self, kind: str, message: str) -> None:
        prefix = f"{self.ward_name}: " if self.ward_name else ""
        self.issues.append(f"{prefix}{kind}: {message}")


# -----------------------------
# Rules, in priority order
# -----------------------------


def rule_votes(state: ScanState, frag: Fragment) -> bool:
    """Votes section: join figures to candidates by band containment."""
    if not state.votes_ready:
        return False
    votes = parse_votes(frag.text)
    elected = ELECTED_MARK in frag.text
    if votes is None and not elected:
        if frag.text:
            state.note("vote_unparsed", repr(frag.text))
        return True
    cand = state.candidate_at(frag.bbox.mid_y)
    if cand is None:
        state.note("vote_unmatched", f"{frag.text!r} at y={frag.bbox.mid_y:.1f}")
        return True
    if votes is not None:
        cand.votes = votes
    if elected:
        cand.elected = True
    return True


def rule_preamble(state: ScanState, frag: Fragment) -> bool:
    """Before the elected legend everything is preamble."""
    if state.candidates_ready or state.votes_ready:
        return False
    if ELECTED_LEGEND in frag.text:
        state.candidates_ready = True
    return True


def rule_section_break(state: ScanState, frag: Fragment) -> bool:
    if not any(k in frag.text for k in SECTION_BREAK_KEYWORDS):
        return False
    state.candidates_ready = False
    state.votes_ready = True
    return True


def rule_known_as(state: ScanState, frag: Fragment) -> bool:
    if not frag.text.startswith(KNOWN_AS_PREFIX):
        return False
    state.current.known_as = frag.text[len(KNOWN_AS_PREFIX) :]
    state.claim(frag)
    return True


def rule_party(state: ScanState, frag: Fragment) -> bool:
    label = party_for(frag.text)
    if label is None:
        return False
    state.current.party = label
    state.claim(frag)
    return True


def rule_hyphen(state: ScanState, frag: Fragment) -> bool:
    """A lone "-" continues a hyphenated name."""
    if frag.text != "-" or not state.prev_text:
        return False
    if state.prev_text not in state.current.name:
        return False
    state.current.name += "-"
    state.claim(frag)
    return True


def rule_upper_case(state: ScanState, frag: Fragment) -> bool:
    """Upper-case print marks candidate names."""
    if not is_upper(frag.text):
        return False
    usable = bool(frag.text) and frag.text != "-"
    cand = state.current
    if cand.name == UNKNOWN_NAME:
        if not usable:
            return False
        cand.name = frag.text
        state.claim(frag)
        return True
    prev = state.prev_bbox
    if (
        prev is not None
        and prev.top <= frag.bbox.mid_y <= prev.bottom
        and state.prev_text is not None
        and state.prev_text in cand.name
    ):
        # wrapped continuation of the same name
        cand.name += frag.text
        state.claim(frag)
        return True
    if usable:
        state.start_candidate(frag)
        return True
    return False


Rule = Callable[[ScanState, Fragment], bool]

RULES: Tuple[Tuple[str, Rule], ...] = (
    ("votes", rule_votes),
    ("preamble", rule_preamble),
    ("section_break", rule_section_break),
    ("known_as", rule_known_as),
    ("party", rule_party),
    ("hyphen", rule_hyphen),
    ("upper_case", rule_upper_case),
)


def apply_rules(
    state: ScanState, frag: Fragment, rules: Tuple[Tuple[str, Rule], ...] = RULES
) -> Optional[str]:
    """Classify one fragment; returns the name of the rule that consumed it."""
    matched: Optional[str] = None
    for name, rule in rules:
        if rule(state, frag):
            matched = name
            break
    if matched is None and frag.text:
        state.note("unclassified", repr(frag.text))
    state.remember(frag)
    return matched
