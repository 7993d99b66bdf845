"""
Review operations over match records: manual re-selection, clearing a match,
filtering for the validation step and the final import summary.

Records are immutable; every edit returns a new MatchRecord.
"""
from dataclasses import replace
from typing import List
from loguru import logger

from movie_matcher.config import MAX_ALTERNATIVES
from movie_matcher.models import CatalogCandidate, ImportSummary, MatchRecord, MatchStatus

FILTER_MODES = frozenset({"all", "matched", "errors"})


def apply_override(record: MatchRecord, candidate: CatalogCandidate) -> MatchRecord:
    """
    Record a user's manual choice of catalog movie for a row.

    A manual selection is always fully trusted: confidence 1.0, status
    matched. The previously selected movie is kept among the alternatives.

    Args:
        record (MatchRecord): Record being corrected.
        candidate (CatalogCandidate): Movie chosen by the user.

    Returns:
        MatchRecord: New record; the input is left untouched.
    """
    pool = list(record.alternatives)
    if record.matched_movie is not None:
        pool.insert(0, record.matched_movie)

    alternatives: List[CatalogCandidate] = []
    for cand in pool:
        if cand.id == candidate.id or any(a.id == cand.id for a in alternatives):
            continue
        alternatives.append(cand)

    logger.debug(f"✏️ Manual match for '{record.detected_title}' → {candidate.title} ({candidate.id})")
    return replace(
        record,
        matched_movie=candidate,
        confidence=1.0,
        status=MatchStatus.MATCHED,
        alternatives=alternatives[:MAX_ALTERNATIVES],
        error_message=None,
        manually_selected=True,
    )


def clear_match(record: MatchRecord) -> MatchRecord:
    """Drop the selected movie, leaving the row unmatched."""
    return replace(
        record,
        matched_movie=None,
        confidence=0.0,
        status=MatchStatus.UNMATCHED,
        manually_selected=False,
    )


def filter_matches(records: List[MatchRecord], mode: str = "all") -> List[MatchRecord]:
    """
    Select records for review.

    Args:
        records (List[MatchRecord]): All match records.
        mode (str): "all", "matched", or "errors" (anything not matched or
                    carrying an error message).

    Returns:
        List[MatchRecord]: Records in their original order.
    """
    if mode not in FILTER_MODES:
        raise ValueError(f"Unknown filter mode '{mode}', expected one of {sorted(FILTER_MODES)}")
    if mode == "matched":
        return [r for r in records if r.status == MatchStatus.MATCHED]
    if mode == "errors":
        return [r for r in records if r.status != MatchStatus.MATCHED or r.error_message]
    return list(records)


def unmatched(records: List[MatchRecord]) -> List[MatchRecord]:
    """Records left without any catalog movie."""
    return [r for r in records if r.matched_movie is None]


def summarize(records: List[MatchRecord]) -> ImportSummary:
    # uncertain rows still carry a movie and are imported as such
    imported = sum(1 for r in records if r.matched_movie is not None)
    return ImportSummary(
        total=len(records),
        imported=imported,
        skipped=0,
        failed=len(records) - imported,
    )
