"""Ranking of journey options."""

from collections.abc import Iterable
from dataclasses import dataclass

from ns_planner.domain.models.option import Option


@dataclass(frozen=True)
class ScoringPolicy:
    """Score = duration + weight * (shortest transfer - threshold) above the threshold.

    Lower is better. Options without a transfer are not penalized.
    """

    penalty_threshold_minutes: int = 10
    penalty_weight: float = 2.0

    def score(self, option: Option) -> float:
        min_transfer = option.min_transfer_minutes
        penalty = 0.0
        if min_transfer is not None and min_transfer > self.penalty_threshold_minutes:
            penalty = self.penalty_weight * (min_transfer - self.penalty_threshold_minutes)
        return option.duration_minutes + penalty

    def rank(self, options: Iterable[Option]) -> list[Option]:
        """Sort by score; equal scores keep their input order."""
        return sorted(options, key=self.score)


def dedupe_by_signature(options: Iterable[Option]) -> list[Option]:
    """Keep the first option of every signature, preserving order."""
    seen: set[str] = set()
    unique = []
    for option in options:
        signature = option.signature
        if signature in seen:
            continue
        seen.add(signature)
        unique.append(option)
    return unique
