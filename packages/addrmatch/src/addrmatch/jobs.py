"""Submission-to-job matching: link imported field submissions to existing jobs."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from addrmatch.config import MatchConfig, MatchOptions
from addrmatch.manual_matches import ManualLinkStore
from addrmatch.matcher import manual_match, match_all, match_one
from addrmatch.types import Candidate, MatchResult, as_candidate

log = structlog.get_logger()

ENTITY = "job"


def match_address_to_job(
    address: str | None,
    jobs: Iterable | None,
    options: MatchOptions | None = None,
    config: MatchConfig | None = None,
    manual_links: ManualLinkStore | None = None,
) -> MatchResult | None:
    """Best job for a submission address (default threshold 0.8), or None."""
    config = config or MatchConfig()
    candidates = [as_candidate(j) for j in jobs or ()]

    if manual_links is not None:
        linked_id = manual_links.lookup(ENTITY, address)
        if linked_id is not None:
            result = manual_match(linked_id, candidates)
            if result is not None:
                return result

    return match_one(
        address,
        candidates,
        options,
        default_min_score=config.jobs.best,
        tiers=config.tiers,
    )


def find_all_matches(
    address: str | None,
    jobs: Iterable | None,
    options: MatchOptions | None = None,
    config: MatchConfig | None = None,
) -> list[MatchResult]:
    """Every job at or above the review threshold (default 0.7), best first."""
    config = config or MatchConfig()
    return match_all(
        address,
        jobs,
        options,
        default_min_score=config.jobs.review,
        tiers=config.tiers,
    )


def batch_match_addresses(
    addresses: Iterable[str],
    jobs: Iterable | None,
    options: MatchOptions | None = None,
    config: MatchConfig | None = None,
    manual_links: ManualLinkStore | None = None,
) -> dict[str, MatchResult | None]:
    """Match many submission addresses against one job list.

    Keyed by the raw address; repeated addresses share one entry.
    """
    candidates: list[Candidate] = [as_candidate(j) for j in jobs or ()]
    results: dict[str, MatchResult | None] = {}
    for address in addresses:
        results[address] = match_address_to_job(
            address, candidates, options, config, manual_links
        )

    matched = sum(1 for r in results.values() if r is not None)
    log.info(
        "batch_match_addresses_done",
        addresses=len(results),
        jobs=len(candidates),
        matched=matched,
        unmatched=len(results) - matched,
    )
    return results


def find_existing_job(address: str | None, jobs: Iterable | None) -> str | None:
    """Id of a job whose normalized address equals *address*, first in order."""
    match = match_one(address, jobs, MatchOptions(exact_match_only=True))
    if match is None:
        log.debug("existing_job_not_found", address=address)
        return None
    log.info("existing_job_found", job_id=match.candidate_id, address=match.candidate_address)
    return match.candidate_id
