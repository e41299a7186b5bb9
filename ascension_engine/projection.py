"""
Projection Module

Short and long horizon forecasts of the global score from its recent
velocity, the regression-risk band, and a least-squares trend detector
used by the weekly report. Pure Python, no numpy needed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from .domains import clamp
from .state import CoreState, MentalState, ProjectionState


class TrendDirection(Enum):
    """Direction of the global score trend."""
    IMPROVING = "improving"   # slope >= +1 point per cycle
    STABLE = "stable"
    DECLINING = "declining"   # slope <= -1 point per cycle


@dataclass
class TrendAnalysis:
    direction: TrendDirection
    slope: float           # points per cycle
    intercept: float
    r_squared: float       # goodness of fit (0-1)
    data_points: int
    predicted_next: float

    def to_dict(self) -> dict:
        return {
            "direction": self.direction.value,
            "slope": round(self.slope, 4),
            "intercept": round(self.intercept, 4),
            "r_squared": round(self.r_squared, 4),
            "data_points": self.data_points,
            "predicted_next": round(self.predicted_next, 2),
        }


class TrendDetector:
    """Least-squares linear regression over a sliding window of scores."""

    def __init__(
        self,
        window_size: int = 7,
        improving_threshold: float = 1.0,
        declining_threshold: float = -1.0
    ):
        self.window_size = window_size
        self.improving_threshold = improving_threshold
        self.declining_threshold = declining_threshold

    def linear_regression(self, y_values: List[float]) -> Tuple[float, float, float]:
        """
        slope = Σ((x - x̄)(y - ȳ)) / Σ((x - x̄)²)
        intercept = ȳ - slope × x̄

        Returns:
            Tuple of (slope, intercept, r_squared); x values are 0, 1, 2, ...
        """
        n = len(y_values)
        if n < 2:
            return 0.0, y_values[0] if y_values else 0.0, 0.0

        x_mean = (n - 1) / 2
        y_mean = sum(y_values) / n

        numerator = sum((x - x_mean) * (y - y_mean) for x, y in enumerate(y_values))
        denominator = sum((x - x_mean) ** 2 for x in range(n))
        if denominator == 0:
            return 0.0, y_mean, 0.0

        slope = numerator / denominator
        intercept = y_mean - slope * x_mean

        ss_res = sum((y - (slope * x + intercept)) ** 2 for x, y in enumerate(y_values))
        ss_tot = sum((y - y_mean) ** 2 for y in y_values)
        r_squared = 1 - (ss_res / ss_tot) if ss_tot != 0 else 0.0

        return slope, intercept, max(0.0, min(1.0, r_squared))

    def get_trend_direction(self, slope: float) -> TrendDirection:
        if slope >= self.improving_threshold:
            return TrendDirection.IMPROVING
        if slope <= self.declining_threshold:
            return TrendDirection.DECLINING
        return TrendDirection.STABLE

    def analyze(self, scores: List[float]) -> TrendAnalysis:
        window = scores[-self.window_size:] if len(scores) > self.window_size else list(scores)
        slope, intercept, r_squared = self.linear_regression(window)
        return TrendAnalysis(
            direction=self.get_trend_direction(slope),
            slope=slope,
            intercept=intercept,
            r_squared=r_squared,
            data_points=len(window),
            predicted_next=clamp(slope * len(window) + intercept),
        )


class ProjectionEstimator:
    """
    Forecasts from 14-cycle score velocity.

    velocity = (current − score 14 cycles ago) / 14   (0 with short history)
    90 days  = current + velocity·90
    3 years  = current + velocity·1095·(discipline / 100)

    Regression risk is banded: HIGH (70-100) when relapses >= 3,
    discipline < 60 or velocity < 0; LOW (20-40) otherwise.
    """

    VELOCITY_SPAN = 14
    SHORT_HORIZON_DAYS = 90
    LONG_HORIZON_DAYS = 1095

    HIGH_RISK_RELAPSES = 3
    HIGH_RISK_DISCIPLINE = 60.0
    HIGH_BAND = (70.0, 100.0)
    LOW_BAND = (20.0, 40.0)
    HIGH_RISK_DISPLAY = 60.0

    def growth_velocity(self, current: float, history: List[float]) -> float:
        lookback = self.VELOCITY_SPAN + 1
        if len(history) < lookback:
            return 0.0
        return (current - history[-lookback]) / self.VELOCITY_SPAN

    def is_high_risk(self, relapses: int, discipline_index: float, velocity: float) -> bool:
        return (
            relapses >= self.HIGH_RISK_RELAPSES or
            discipline_index < self.HIGH_RISK_DISCIPLINE or
            velocity < 0
        )

    def regression_risk(
        self,
        relapses: int,
        discipline_index: float,
        stability_index: float,
        velocity: float
    ) -> float:
        """Banded risk; position inside the band is an interpolation."""
        if self.is_high_risk(relapses, discipline_index, velocity):
            low, high = self.HIGH_BAND
            pressure = (
                relapses * 3 +
                max(0.0, self.HIGH_RISK_DISCIPLINE - discipline_index) * 0.25 +
                max(0.0, -velocity) * 5
            )
            return min(high, low + pressure)

        low, high = self.LOW_BAND
        return min(high, low + (100 - clamp(stability_index)) * 0.2)

    def estimate(
        self,
        core: CoreState,
        mental: MentalState
    ) -> ProjectionState:
        current = core.global_score
        velocity = self.growth_velocity(current, core.score_history)
        # both counts are windowed (relapse window and last 7 days)
        relapses = max(mental.relapse_count, mental.recent_relapses)

        return ProjectionState(
            growth_velocity=velocity,
            projected_90_days_score=clamp(current + velocity * self.SHORT_HORIZON_DAYS),
            projected_3_years_score=clamp(
                current + velocity * self.LONG_HORIZON_DAYS * (core.discipline_index / 100)
            ),
            regression_risk=clamp(self.regression_risk(
                relapses, core.discipline_index, core.stability_index, velocity
            )),
        )
