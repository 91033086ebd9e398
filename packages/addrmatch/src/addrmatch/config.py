"""Configuration for the addrmatch address matching system."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ConfidenceTiers:
    high: float = 0.95
    medium: float = 0.85


@dataclass
class DomainThresholds:
    best: float = 0.8  # single best match, unattended linking
    review: float = 0.7  # all candidates, manual review lists


@dataclass
class LinkingConfig:
    threshold: float = 90.0  # rapidfuzz ratio, 0-100
    strip_units: bool = True


@dataclass
class MatchConfig:
    tiers: ConfidenceTiers = field(default_factory=ConfidenceTiers)
    jobs: DomainThresholds = field(default_factory=lambda: DomainThresholds(best=0.8, review=0.7))
    customers: DomainThresholds = field(
        default_factory=lambda: DomainThresholds(best=0.85, review=0.75)
    )
    linking: LinkingConfig = field(default_factory=LinkingConfig)


@dataclass
class MatchOptions:
    """Per-call matching options.

    ``min_score=None`` defers to the default of the adapter and mode in use.
    """

    min_score: float | None = None
    exact_match_only: bool = False

    def resolve(self, default: float) -> float:
        return default if self.min_score is None else self.min_score
