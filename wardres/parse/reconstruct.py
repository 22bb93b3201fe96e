from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from wardres.ingest.schema import Fragment
from wardres.parse.rules import RULES, Rule, ScanState, apply_rules
from wardres.parse.schema import UNKNOWN_NAME, Ward

logger = logging.getLogger(__name__)

# title + two heading spans precede the ward name
WARD_NAME_INDEX = 3


class TableReconstructor:
    """
    Reads one bloc into a Ward.

    The candidate listing and the vote tally are laid out as two separate
    sections whose rows do not interleave, so vote figures are joined to
    candidates by the vertical band each candidate's name/party spans cover.
    """

    def __init__(
        self,
        rules: Sequence[Tuple[str, Rule]] = RULES,
        ward_name_index: int = WARD_NAME_INDEX,
    ):
        self.rules = tuple(rules)
        self.ward_name_index = ward_name_index

    def reconstruct(
        self, bloc: Sequence[Fragment], issues: Optional[List[str]] = None
    ) -> Ward:
        state = ScanState()
        idx = self.ward_name_index
        if len(bloc) > idx:
            state.ward_name = bloc[idx].text
            state.remember(bloc[idx])
        else:
            state.note("short_bloc", f"{len(bloc)} fragments")

        for frag in bloc[idx + 1 :]:
            was_votes = state.votes_ready
            was_candidates = state.candidates_ready
            apply_rules(state, frag, self.rules)
            if state.candidates_ready and not was_candidates:
                logger.debug("%s: candidate listing starts", state.ward_name)
            if state.votes_ready and not was_votes:
                logger.debug("%s: vote tally starts at %r", state.ward_name, frag.text)

        for cand in state.candidates:
            if cand.name == UNKNOWN_NAME:
                state.note("unknown_candidate", "no candidate name found")

        if issues is not None:
            issues.extend(state.issues)

        return Ward(
            ward_name=state.ward_name,
            candidates=[c.freeze() for c in state.candidates],
        )
