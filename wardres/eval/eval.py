from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from wardres.parse.results import load_results
from wardres.parse.schema import Candidate, ResultSet

__all__ = ["EvalResult", "evaluate", "evaluate_files", "format_report", "load_results"]

# --- Matching & metrics -------------------------------------------------------


def _by_name(cands: Sequence[Candidate]) -> Dict[str, Candidate]:
    # keeps the first occurrence when a ward repeats a name
    out: Dict[str, Candidate] = {}
    for c in cands:
        out.setdefault(c.name, c)
    return out


@dataclass
class EvalResult:
    n_wards_gold: int
    n_wards_found: int
    n_candidates_gold: int
    n_candidates_found: int
    n_votes_correct: int
    n_elected_correct: int
    n_party_correct: int
    # rates
    ward_recall: float
    candidate_recall: float
    vote_accuracy: float


def evaluate(gold: ResultSet, pred: ResultSet) -> Tuple[EvalResult, List[str]]:
    n_wards_found = 0
    n_candidates_gold = 0
    n_candidates_found = 0
    n_votes_correct = 0
    n_elected_correct = 0
    n_party_correct = 0
    errors: List[str] = []

    for gw in gold.wards:
        n_candidates_gold += len(gw.candidates)
        pw = pred.ward(gw.ward_name)
        if pw is None:
            errors.append(f"MISSING ward {gw.ward_name}")
            continue
        n_wards_found += 1
        preds = _by_name(pw.candidates)
        for gc in gw.candidates:
            pc = preds.get(gc.name)
            if pc is None:
                errors.append(f"MISSING {gw.ward_name}/{gc.name}")
                continue
            n_candidates_found += 1
            if pc.votes == gc.votes:
                n_votes_correct += 1
            else:
                errors.append(
                    f"WRONG votes {gw.ward_name}/{gc.name} pred={pc.votes} gold={gc.votes}"
                )
            if pc.elected == gc.elected:
                n_elected_correct += 1
            else:
                errors.append(
                    f"WRONG elected {gw.ward_name}/{gc.name} pred={pc.elected} gold={gc.elected}"
                )
            if pc.party == gc.party:
                n_party_correct += 1
            else:
                errors.append(
                    f"WRONG party {gw.ward_name}/{gc.name} pred={pc.party!r} gold={gc.party!r}"
                )

    n_wards_gold = len(gold.wards)
    res = EvalResult(
        n_wards_gold=n_wards_gold,
        n_wards_found=n_wards_found,
        n_candidates_gold=n_candidates_gold,
        n_candidates_found=n_candidates_found,
        n_votes_correct=n_votes_correct,
        n_elected_correct=n_elected_correct,
        n_party_correct=n_party_correct,
        ward_recall=(n_wards_found / n_wards_gold) if n_wards_gold else 0.0,
        candidate_recall=(
            (n_candidates_found / n_candidates_gold) if n_candidates_gold else 0.0
        ),
        vote_accuracy=(n_votes_correct / n_candidates_gold) if n_candidates_gold else 0.0,
    )
    return res, errors


def evaluate_files(gold_path: Path, pred_path: Path) -> Tuple[EvalResult, List[str]]:
    """Load two *.results.json files and compare them."""
    return evaluate(load_results(gold_path), load_results(pred_path))


def format_report(res: EvalResult) -> str:
    lines = []

    def pct(x: float) -> str:
        return f"{100*x:.1f}%"

    lines.append("=== Results Evaluation ===")
    lines.append(
        f"Wards found           : {res.n_wards_found} / {res.n_wards_gold}  (recall={pct(res.ward_recall)})"
    )
    lines.append(
        f"Candidates found      : {res.n_candidates_found} / {res.n_candidates_gold}  (recall={pct(res.candidate_recall)})"
    )
    lines.append(
        f"Votes correct         : {res.n_votes_correct} / {res.n_candidates_gold}  (accuracy={pct(res.vote_accuracy)})"
    )
    lines.append(f"Elected flag correct  : {res.n_elected_correct}")
    lines.append(f"Party correct         : {res.n_party_correct}")
    return "\n".join(lines)
