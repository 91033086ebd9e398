"""addrmatch - Fuzzy postal address matching for jobs and customers."""

from addrmatch.config import MatchConfig, MatchOptions
from addrmatch.customers import BatchStats, CustomerMatcher
from addrmatch.jobs import (
    batch_match_addresses,
    find_all_matches,
    find_existing_job,
    match_address_to_job,
)
from addrmatch.matcher import match_all, match_one
from addrmatch.normalize import normalize_address
from addrmatch.scoring import calculate_similarity
from addrmatch.sources import CandidateSource, CandidateSourceError, FrameCandidateSource
from addrmatch.types import Candidate, MatchResult

__all__ = [
    "BatchStats",
    "Candidate",
    "CandidateSource",
    "CandidateSourceError",
    "CustomerMatcher",
    "FrameCandidateSource",
    "MatchConfig",
    "MatchOptions",
    "MatchResult",
    "batch_match_addresses",
    "calculate_similarity",
    "find_all_matches",
    "find_existing_job",
    "match_address_to_job",
    "match_all",
    "match_one",
    "normalize_address",
]
