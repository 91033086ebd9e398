"""Match engine: exact pass, street-number pre-filter, fuzzy scoring, tiering."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from addrmatch.config import ConfidenceTiers, MatchOptions
from addrmatch.normalize import normalize_address
from addrmatch.scoring import calculate_similarity, confidence_for, street_numbers_conflict
from addrmatch.types import Candidate, MatchResult, as_candidate

log = structlog.get_logger()


def _prepare(candidates: Iterable | None) -> list[Candidate]:
    return [as_candidate(c) for c in candidates or ()]


def match_one(
    query: str | None,
    candidates: Iterable | None,
    options: MatchOptions | None = None,
    *,
    default_min_score: float = 0.8,
    tiers: ConfidenceTiers | None = None,
) -> MatchResult | None:
    """Return the single best candidate for *query*, or None.

    Exact normalized equality wins first, in input order. Otherwise every
    candidate whose street number does not conflict with the query's is
    scored; the highest score at or above the threshold wins, ties going to
    the earlier candidate.
    """
    options = options or MatchOptions()
    pool = _prepare(candidates)
    if not query or not pool:
        return None

    min_score = options.resolve(default_min_score)
    norm_query = normalize_address(query)
    if not norm_query:
        return None
    normalized = [(c, normalize_address(c.address)) for c in pool]

    # Stage 1: Exact pass
    for cand, norm in normalized:
        if norm == norm_query:
            log.debug("match_one_exact", query=norm_query, candidate_id=cand.id)
            return MatchResult(
                candidate_id=cand.id,
                candidate_address=cand.address,
                score=1.0,
                method="exact",
                confidence="high",
                candidate_name=cand.name,
            )

    if options.exact_match_only:
        return None

    # Stage 2: Pre-filter and score
    matches: list[MatchResult] = []
    skipped = 0
    for cand, norm in normalized:
        if street_numbers_conflict(norm_query, norm):
            skipped += 1
            continue
        score = calculate_similarity(norm_query, norm)
        if score >= min_score:
            matches.append(
                MatchResult(
                    candidate_id=cand.id,
                    candidate_address=cand.address,
                    score=score,
                    method="fuzzy",
                    confidence=confidence_for(score, tiers),
                    candidate_name=cand.name,
                )
            )

    log.debug(
        "match_one_done",
        query=norm_query,
        candidates=len(pool),
        street_number_skipped=skipped,
        above_threshold=len(matches),
        min_score=min_score,
    )

    if not matches:
        return None

    # Stable: equal scores keep input order
    matches.sort(key=lambda m: m.score, reverse=True)
    return matches[0]


def match_all(
    query: str | None,
    candidates: Iterable | None,
    options: MatchOptions | None = None,
    *,
    default_min_score: float = 0.7,
    tiers: ConfidenceTiers | None = None,
) -> list[MatchResult]:
    """Return every candidate scoring at or above the threshold, best first.

    No street-number pre-filter: this feeds a manual-review list, so
    borderline candidates are surfaced rather than hidden.
    """
    options = options or MatchOptions()
    pool = _prepare(candidates)
    if not query or not pool:
        return []

    min_score = options.resolve(default_min_score)
    norm_query = normalize_address(query)
    if not norm_query:
        return []

    matches: list[MatchResult] = []
    for cand in pool:
        norm = normalize_address(cand.address)
        score = calculate_similarity(norm_query, norm)
        if score >= min_score:
            matches.append(
                MatchResult(
                    candidate_id=cand.id,
                    candidate_address=cand.address,
                    score=score,
                    method="exact" if norm == norm_query else "fuzzy",
                    confidence=confidence_for(score, tiers),
                    candidate_name=cand.name,
                )
            )

    matches.sort(key=lambda m: m.score, reverse=True)
    log.debug("match_all_done", query=norm_query, candidates=len(pool), matches=len(matches))
    return matches


def manual_match(candidate_id: str, candidates: Sequence[Candidate]) -> MatchResult | None:
    """Build a manual-link result if *candidate_id* is still among *candidates*."""
    for cand in candidates:
        if cand.id == candidate_id:
            return MatchResult(
                candidate_id=cand.id,
                candidate_address=cand.address,
                score=1.0,
                method="manual",
                confidence="high",
                candidate_name=cand.name,
            )
    return None
