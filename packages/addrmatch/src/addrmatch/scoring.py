"""Edit-distance similarity and confidence tiering."""

from __future__ import annotations

import re

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from addrmatch.config import ConfidenceTiers
from addrmatch.types import Confidence

_STREET_NUMBER = re.compile(r"^\d+")


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost insert/delete/substitute edit distance."""
    return Levenshtein.distance(a, b)


def calculate_similarity(a: str | None, b: str | None) -> float:
    """Similarity in [0, 1]: ``1 - distance / max(len(a), len(b))``.

    Identical strings (including two empty ones) score 1.0 without running
    the distance; one empty side scores 0.0.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    distance = levenshtein_distance(a, b)
    return 1 - distance / max(len(a), len(b))


def link_ratio(a: str, b: str) -> float:
    """Indel ratio on a 0-100 scale, used by the quick customer linker."""
    return fuzz.ratio(a, b)


def confidence_for(score: float, tiers: ConfidenceTiers | None = None) -> Confidence:
    tiers = tiers or ConfidenceTiers()
    if score >= tiers.high:
        return "high"
    if score >= tiers.medium:
        return "medium"
    return "low"


def extract_street_number(address: str) -> str | None:
    """Leading digit run of a normalized address, if any."""
    m = _STREET_NUMBER.match(address)
    return m.group(0) if m else None


def street_numbers_conflict(a: str, b: str) -> bool:
    """True when both addresses carry a street number and the numbers differ."""
    num_a = extract_street_number(a)
    num_b = extract_street_number(b)
    return bool(num_a and num_b and num_a != num_b)
