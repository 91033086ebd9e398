"""Tests for job-to-customer matching."""

from pathlib import Path

import pytest

from addrmatch.config import MatchConfig, MatchOptions
from addrmatch.customers import CustomerMatcher
from addrmatch.manual_matches import ManualLinkStore
from addrmatch.sources import CandidateSourceError, StaticCandidateSource
from addrmatch.types import Candidate

CUSTOMERS = [
    Candidate("c1", "123 Main Street, Asheville, NC", "Jane Doe"),
    Candidate("c2", "500 Birchwood Trail", "Birchwood HOA"),
    Candidate("c3", "500 Birchwood Pass", "Pass Holdings"),
    Candidate("c4", "45 Oak Street Apt 4B, Asheville", "Oak Rentals"),
]


class FakeSource:
    """Counts fetches and optionally fails."""

    def __init__(self, candidates=None, fail: bool = False):
        self.candidates = candidates or []
        self.fail = fail
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.fail:
            raise CandidateSourceError("customers", "connection reset")
        return list(self.candidates)


@pytest.fixture()
def matcher() -> CustomerMatcher:
    return CustomerMatcher(StaticCandidateSource(CUSTOMERS))


class TestMatchJobToCustomer:
    def test_exact(self, matcher: CustomerMatcher):
        result = matcher.match_job_to_customer("123 Main St Asheville North Carolina")
        assert result.candidate_id == "c1"
        assert result.method == "exact"
        assert result.to_dict("customer")["customer_name"] == "Jane Doe"

    def test_fuzzy_above_customer_threshold(self, matcher: CustomerMatcher):
        result = matcher.match_job_to_customer("500 Birchwood Trl")
        assert result.candidate_id == "c2"
        assert result.method == "fuzzy"
        assert result.score >= 0.85

    def test_customer_threshold_is_stricter_than_jobs(self):
        config = MatchConfig()
        assert config.customers.best > config.jobs.best
        assert config.customers.review > config.jobs.review

    def test_below_threshold(self, matcher: CustomerMatcher):
        assert matcher.match_job_to_customer("500 Birchwood Trl", MatchOptions(min_score=0.9)) is None

    def test_empty_address_skips_fetch(self):
        source = FakeSource(CUSTOMERS)
        m = CustomerMatcher(source)
        assert m.match_job_to_customer("") is None
        assert m.match_job_to_customer(None) is None
        assert source.calls == 0

    def test_fetch_failure_is_no_match(self):
        m = CustomerMatcher(FakeSource(fail=True))
        assert m.match_job_to_customer("500 Birchwood Trl") is None
        assert m.stats.fetch_errors == 1

    def test_no_customers(self):
        m = CustomerMatcher(FakeSource([]))
        assert m.match_job_to_customer("500 Birchwood Trl") is None

    def test_fetched_per_call(self):
        source = FakeSource(CUSTOMERS)
        m = CustomerMatcher(source)
        m.match_job_to_customer("500 Birchwood Trl")
        m.match_job_to_customer("500 Birchwood Trl")
        assert source.calls == 2

    def test_manual_link(self, tmp_path: Path):
        store = ManualLinkStore(tmp_path / "links.json")
        store.add_link("customer", "500 Birchwood Trl", "c3")
        m = CustomerMatcher(StaticCandidateSource(CUSTOMERS), manual_links=store)
        result = m.match_job_to_customer("500 Birchwood Trl")
        assert result.candidate_id == "c3"
        assert result.method == "manual"
        assert result.candidate_name == "Pass Holdings"


class TestFindAllCustomerMatches:
    def test_review_list(self, matcher: CustomerMatcher):
        results = matcher.find_all_customer_matches("500 Birchwood Trl")
        assert [r.candidate_id for r in results] == ["c2", "c3"]

    def test_custom_min_score(self, matcher: CustomerMatcher):
        results = matcher.find_all_customer_matches("500 Birchwood Trl", MatchOptions(min_score=0.85))
        assert [r.candidate_id for r in results] == ["c2"]

    def test_fetch_failure(self):
        m = CustomerMatcher(FakeSource(fail=True))
        assert m.find_all_customer_matches("500 Birchwood Trl") == []

    def test_empty_address(self, matcher: CustomerMatcher):
        assert matcher.find_all_customer_matches("") == []


class TestBatch:
    def test_batch_fetches_once(self):
        source = FakeSource(CUSTOMERS)
        m = CustomerMatcher(source)
        results = m.batch_match_jobs_to_customers(
            [
                {"id": "j1", "address": "123 Main St, Asheville, NC"},
                {"id": "j2", "address": "500 Birchwood Trl"},
                {"id": "j3", "address": "77 Unknown Rd"},
                {"id": "j4", "address": None},
            ]
        )
        assert source.calls == 1
        assert results["j1"].candidate_id == "c1"
        assert results["j2"].candidate_id == "c2"
        assert results["j3"] is None
        assert results["j4"] is None
        assert m.stats.checked == 4
        assert m.stats.matched == 2
        assert m.stats.unmatched == 2

    def test_batch_fetch_failure(self):
        m = CustomerMatcher(FakeSource(fail=True))
        results = m.batch_match_jobs_to_customers([Candidate("j1", "500 Birchwood Trl"), Candidate("j2", "1 A St")])
        assert results == {"j1": None, "j2": None}
        assert m.stats.fetch_errors == 1
        assert m.stats.unmatched == 2


class TestLinkCustomerId:
    def test_unit_stripped_match(self, matcher: CustomerMatcher):
        assert matcher.link_customer_id("45 Oak St, Asheville") == "c4"

    def test_below_ninety_rejected(self, matcher: CustomerMatcher):
        assert matcher.link_customer_id("9 Completely Different Pl") is None

    def test_threshold_configurable(self):
        config = MatchConfig()
        config.linking.threshold = 101.0
        m = CustomerMatcher(StaticCandidateSource(CUSTOMERS), config)
        assert m.link_customer_id("500 Birchwood Trail") is None

    def test_empty(self, matcher: CustomerMatcher):
        assert matcher.link_customer_id("   ") is None

    def test_fetch_failure(self):
        assert CustomerMatcher(FakeSource(fail=True)).link_customer_id("500 Birchwood Trail") is None


def test_link_customer_id_non_string_address(matcher: CustomerMatcher):
    assert matcher.link_customer_id(float("nan")) is None
