"""
Score Aggregator Module

Combines the seven domain scores into the global score and derives the
alert band. The alert band is never stored independently: it is always
recomputed from how many domains score below 60.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
import math

from .domains import Domain, AlertState, clamp
from .state import append_bounded


@dataclass
class AggregateScore:
    """Result of one aggregation pass."""
    global_score: float
    weighted_sum: float
    multiplier: float
    under_threshold: int
    alert_state: AlertState
    domain_scores: Dict[Domain, float] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "global_score": round(self.global_score, 2),
            "weighted_sum": round(self.weighted_sum, 2),
            "multiplier": self.multiplier,
            "under_threshold": self.under_threshold,
            "alert_state": self.alert_state.value,
            "domain_scores": {d.value: round(s, 2) for d, s in self.domain_scores.items()},
        }


class ScoreAggregator:
    """
    Weighted composite with a discrete under-performance penalty.

    Domains below 60 → multiplier / alert:
    - 0  → ×1.00  NORMAL
    - 1  → ×0.85  ALERT
    - 2  → ×0.65  RESTRICTED
    - 3+ → ×0.40  FAILED
    """

    WEIGHTS: Dict[Domain, float] = {
        Domain.TRAINING: 0.20,
        Domain.DIET: 0.20,
        Domain.FINANCE: 0.15,
        Domain.ACADEMICS: 0.15,
        Domain.SPIRITUAL: 0.10,
        Domain.MENTAL: 0.10,
        Domain.CONTENT: 0.10,
    }

    UNDER_PERFORMANCE_THRESHOLD = 60.0

    PENALTY_BANDS: List[Tuple[float, AlertState]] = [
        (1.0, AlertState.NORMAL),
        (0.85, AlertState.ALERT),
        (0.65, AlertState.RESTRICTED),
        (0.4, AlertState.FAILED),
    ]

    def __init__(self, weights: Optional[Dict[Domain, float]] = None):
        self.weights = dict(weights or self.WEIGHTS)
        if set(self.weights) != set(Domain):
            raise ValueError("Weights must cover exactly the seven domains")
        if not math.isclose(sum(self.weights.values()), 1.0, abs_tol=1e-9):
            raise ValueError(f"Weights must sum to 1.0, got {sum(self.weights.values())}")

    def band_for(self, under_threshold: int) -> Tuple[float, AlertState]:
        """Penalty multiplier and alert state for an under-60 count."""
        index = min(max(under_threshold, 0), len(self.PENALTY_BANDS) - 1)
        return self.PENALTY_BANDS[index]

    def aggregate(
        self,
        scores: Dict[Domain, float],
        excluded: Iterable[Domain] = ()
    ) -> AggregateScore:
        """
        Args:
            scores: Current score per domain
            excluded: Domains blocked by strict mode; they count as 0

        Returns:
            AggregateScore with the clamped global score and alert state
        """
        excluded = set(excluded)
        effective = {
            domain: 0.0 if domain in excluded else clamp(scores.get(domain, 0.0))
            for domain in Domain
        }

        weighted = sum(effective[d] * self.weights[d] for d in Domain)
        under = sum(1 for s in effective.values() if s < self.UNDER_PERFORMANCE_THRESHOLD)
        multiplier, alert = self.band_for(under)

        return AggregateScore(
            global_score=clamp(weighted * multiplier),
            weighted_sum=weighted,
            multiplier=multiplier,
            under_threshold=under,
            alert_state=alert,
            domain_scores=effective,
        )

    @staticmethod
    def record(history: List[float], global_score: float, cap: int) -> None:
        """Append one evaluation-cycle snapshot to the rolling score history."""
        append_bounded(history, round(global_score, 4), cap)
