"""Job-to-customer matching against customers fetched from a candidate source."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from addrmatch.config import MatchConfig, MatchOptions
from addrmatch.manual_matches import ManualLinkStore
from addrmatch.matcher import manual_match, match_all, match_one
from addrmatch.normalize import normalize_for_linking
from addrmatch.scoring import link_ratio
from addrmatch.sources import CandidateSource, CandidateSourceError
from addrmatch.types import Candidate, MatchResult, as_candidate

log = structlog.get_logger()

ENTITY = "customer"


@dataclass
class BatchStats:
    """Counters collected by batch customer matching."""

    checked: int = 0
    matched: int = 0
    unmatched: int = 0
    fetch_errors: int = 0


class CustomerMatcher:
    """Associates job addresses with customer records.

    Customers are fetched from *source* on every call; a fetch failure is
    logged and treated as "no candidates".
    """

    def __init__(
        self,
        source: CandidateSource,
        config: MatchConfig | None = None,
        manual_links: ManualLinkStore | None = None,
    ) -> None:
        self.source = source
        self.config = config or MatchConfig()
        self.manual_links = manual_links
        self.stats = BatchStats()

    def match_job_to_customer(
        self, address: str | None, options: MatchOptions | None = None
    ) -> MatchResult | None:
        """Best customer for a job address (default threshold 0.85), or None."""
        if not address:
            return None
        customers = self._fetch()
        if not customers:
            return None
        return self._best(address, customers, options)

    def find_all_customer_matches(
        self, address: str | None, options: MatchOptions | None = None
    ) -> list[MatchResult]:
        """Every customer at or above the review threshold (default 0.75), best first."""
        if not address:
            return []
        customers = self._fetch()
        if not customers:
            return []
        return match_all(
            address,
            customers,
            options,
            default_min_score=self.config.customers.review,
            tiers=self.config.tiers,
        )

    def batch_match_jobs_to_customers(
        self, jobs: Iterable, options: MatchOptions | None = None
    ) -> dict[str, MatchResult | None]:
        """Match many jobs against one customer fetch, keyed by job id."""
        job_list = [as_candidate(j) for j in jobs]
        results: dict[str, MatchResult | None] = {}

        customers = self._fetch()
        if not customers:
            for job in job_list:
                results[job.id] = None
            self.stats.checked += len(job_list)
            self.stats.unmatched += len(job_list)
            return results

        for job in job_list:
            match = self._best(job.address, customers, options) if job.address else None
            results[job.id] = match
            self.stats.checked += 1
            if match is None:
                self.stats.unmatched += 1
            else:
                self.stats.matched += 1

        log.info(
            "batch_match_jobs_to_customers_done",
            jobs=len(job_list),
            customers=len(customers),
            matched=sum(1 for r in results.values() if r is not None),
        )
        return results

    def link_customer_id(self, address: str | None) -> str | None:
        """Quick linker: customer id whose address ratio clears the linking threshold.

        Scores every customer, keeps the first strictly-best one and accepts
        it only at or above ``config.linking.threshold`` (0-100 scale).
        """
        if not isinstance(address, str) or not address.strip():
            log.debug("link_customer_empty_address")
            return None

        customers = self._fetch()
        if not customers:
            return None

        linking = self.config.linking
        query = normalize_for_linking(address, linking.strip_units)
        best: Candidate | None = None
        best_score = 0.0
        for cust in customers:
            score = link_ratio(query, normalize_for_linking(cust.address, linking.strip_units))
            if score > best_score:
                best, best_score = cust, score

        if best is not None and best_score >= linking.threshold:
            log.info(
                "link_customer_accepted",
                address=address,
                customer_id=best.id,
                customer_name=best.name,
                score=round(best_score, 1),
            )
            return best.id

        log.info(
            "link_customer_rejected",
            address=address,
            best_customer_id=best.id if best else None,
            score=round(best_score, 1),
            threshold=linking.threshold,
        )
        return None

    def _best(
        self, address: str, customers: list[Candidate], options: MatchOptions | None
    ) -> MatchResult | None:
        if self.manual_links is not None:
            linked_id = self.manual_links.lookup(ENTITY, address)
            if linked_id is not None:
                result = manual_match(linked_id, customers)
                if result is not None:
                    return result
        return match_one(
            address,
            customers,
            options,
            default_min_score=self.config.customers.best,
            tiers=self.config.tiers,
        )

    def _fetch(self) -> list[Candidate]:
        try:
            customers = self.source.fetch()
        except CandidateSourceError as exc:
            self.stats.fetch_errors += 1
            log.error("customer_fetch_failed", source=exc.source, error=exc.detail)
            return []
        if not customers:
            log.warning("customer_fetch_empty")
        return customers
