"""Core types for the addrmatch address matching system."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

MatchMethod = Literal["exact", "fuzzy", "manual"]
Confidence = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class Candidate:
    """A job or customer row that a query address may be matched against."""

    id: str
    address: str
    name: str | None = None


@dataclass(frozen=True)
class MatchResult:
    candidate_id: str
    candidate_address: str
    score: float  # 0.0-1.0
    method: MatchMethod
    confidence: Confidence
    candidate_name: str | None = None

    def to_dict(self, entity: str = "job") -> dict[str, Any]:
        """Render as a plain dict keyed by entity type (``job_id``, ``customer_id``...)."""
        record: dict[str, Any] = {
            f"{entity}_id": self.candidate_id,
            f"{entity}_address": self.candidate_address,
            "match_score": self.score,
            "match_method": self.method,
            "confidence": self.confidence,
        }
        if self.candidate_name is not None:
            record[f"{entity}_name"] = self.candidate_name
        return record


def as_candidate(row: Candidate | Mapping[str, Any] | tuple) -> Candidate:
    """Coerce a ``Candidate``, an ``{id, address[, name]}`` mapping or an
    ``(id, address)`` tuple into a ``Candidate``.

    Missing or non-string addresses (a NaN from a DataFrame row) become "".
    """
    if isinstance(row, Candidate):
        return row
    if isinstance(row, Mapping):
        name = row.get("name")
        return Candidate(
            id=str(row["id"]),
            address=_clean_address(row.get("address")),
            name=str(name) if name is not None else None,
        )
    item_id, address = row[0], row[1]
    return Candidate(id=str(item_id), address=_clean_address(address))


def _clean_address(value: Any) -> str:
    return value if isinstance(value, str) else ""
