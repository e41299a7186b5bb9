"""
Engine State Module

Plain dataclasses for everything the engine tracks. Module states are
replaced wholesale by their updaters; core and discipline state live for
the lifetime of the engine and are only persisted and restored.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Dict, Optional, Any
import math

from .domains import Domain, AlertState, DayType, UnknownDomainError


def level_for_xp(xp: int) -> int:
    """level = 1 + floor(sqrt(xp / 50))"""
    return 1 + int(math.floor(math.sqrt(max(0, xp) / 50)))


def append_bounded(values: List, value, cap: int) -> None:
    """Append and drop the oldest entries beyond `cap`."""
    values.append(value)
    if cap > 0 and len(values) > cap:
        del values[:len(values) - cap]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ----------------------------------------------------------------------
# Module states
# ----------------------------------------------------------------------

@dataclass
class Exercise:
    """One exercise as performed, plus the load prescribed for next time."""
    name: str
    sets: int
    reps: int
    load: float
    target_reps: Optional[int] = None
    rpe: float = 8.0
    rest_seconds: int = 120
    next_load: float = 0.0
    consecutive_failures: int = 0
    one_rep_max: float = 0.0


@dataclass
class TrainingState:
    score: float = 0.0
    current_cycle: int = 1
    week: int = 1
    day_type: DayType = DayType.PUSH
    exercises: List[Exercise] = field(default_factory=list)
    weekly_volume: float = 0.0
    fatigue_index: float = 0.0
    strength_index: float = 0.0
    long_term_goal_kg: float = 200.0
    performance_trend: List[float] = field(default_factory=list)
    deload_recommended: bool = False


@dataclass
class Meal:
    meal: int
    rice_grams: int
    chicken_grams: int
    adjustment_margin_calories: int = 100


@dataclass
class DietState:
    score: float = 0.0
    weight: float = 86.0
    height: float = 171.0
    age: int = 25
    body_fat_estimate: float = 24.0
    calorie_target: int = 0
    protein_target: int = 0
    carb_target: int = 0
    fat_target: int = 0
    deficit_level: float = 0.2
    adherence_score: float = 0.0
    binge_flag: bool = False
    weekly_weight_trend: List[float] = field(default_factory=list)
    meal_plan: List[Meal] = field(default_factory=list)


@dataclass
class FinanceState:
    score: float = 0.0
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    savings_rate: float = 0.0
    savings: float = 0.0
    investment_value: float = 0.0
    net_worth: float = 0.0
    gambling_flag: bool = False
    projection_1y: float = 0.0
    projection_3y: float = 0.0
    projection_5y: float = 0.0
    growth_trend: List[float] = field(default_factory=list)


@dataclass
class Subject:
    name: str
    mastery: float = 0.0
    exam_performance: float = 0.0  # 0 - 10 grade scale


@dataclass
class AcademicsState:
    score: float = 0.0
    study_hours_week: float = 0.0
    study_hours_total: float = 0.0
    target_hours_week: float = 20.0
    subjects: List[Subject] = field(default_factory=list)
    average_mastery: float = 0.0
    authority_index: float = 0.0
    mastery_trend: List[float] = field(default_factory=list)


@dataclass
class SpiritualState:
    score: float = 0.0
    clean_days: int = 0
    prayer_streak: int = 0
    sacramental_frequency: float = 0.0
    moral_stability_score: float = 0.0
    relapse_flag: bool = False
    confession_count: int = 0


@dataclass
class MentalState:
    score: float = 0.0
    relapse_count: int = 0  # recent: violations inside the relapse window, not lifetime
    relapse_log: List[int] = field(default_factory=list)  # day numbers of violations
    recent_relapses: int = 0
    dopamine_index: float = 50.0
    impulse_resistance_score: float = 50.0
    emotional_volatility_index: float = 50.0
    stability_trend: List[float] = field(default_factory=list)
    mood_trend: List[float] = field(default_factory=list)
    trigger_patterns: List[str] = field(default_factory=list)


@dataclass
class ContentState:
    score: float = 0.0
    content_produced_week: int = 0
    engagement_score: float = 0.0
    growth_rate: float = 0.0
    authority_score: float = 0.0
    consistency_index: float = 0.0
    days_since_publish: int = 0


@dataclass
class ModuleStates:
    """The seven domain states, addressable by Domain."""
    training: TrainingState = field(default_factory=TrainingState)
    diet: DietState = field(default_factory=DietState)
    finance: FinanceState = field(default_factory=FinanceState)
    academics: AcademicsState = field(default_factory=AcademicsState)
    spiritual: SpiritualState = field(default_factory=SpiritualState)
    mental: MentalState = field(default_factory=MentalState)
    content: ContentState = field(default_factory=ContentState)

    def get(self, domain: Domain):
        if not isinstance(domain, Domain):
            raise UnknownDomainError(domain)
        return getattr(self, domain.value)

    def set(self, domain: Domain, state) -> None:
        if not isinstance(domain, Domain):
            raise UnknownDomainError(domain)
        setattr(self, domain.value, state)

    def scores(self) -> Dict[Domain, float]:
        return {domain: self.get(domain).score for domain in Domain}


# ----------------------------------------------------------------------
# Core, discipline, projection
# ----------------------------------------------------------------------

@dataclass
class CoreState:
    current_day: int = 1
    total_days: int = 90
    xp: int = 0
    level: int = 1
    global_score: float = 0.0
    discipline_index: float = 0.0
    stability_index: float = 0.0
    growth_index: float = 0.0
    streak: int = 0
    alert_state: AlertState = AlertState.NORMAL
    last_evaluation_date: Optional[str] = None
    score_history: List[float] = field(default_factory=list)

    def apply_xp(self, delta: int) -> int:
        """Add (or subtract) xp, never going below zero. Returns applied delta."""
        before = self.xp
        self.xp = max(0, self.xp + int(delta))
        self.level = level_for_xp(self.xp)
        return self.xp - before


@dataclass
class DisciplineState:
    strict_mode_enabled: bool = False
    failed_days_count: int = 0
    restriction_level: int = 0
    last_penalty_date: Optional[str] = None
    violation_penalty: float = 0.0


@dataclass
class ProjectionState:
    growth_velocity: float = 0.0
    projected_90_days_score: float = 0.0
    projected_3_years_score: float = 0.0
    regression_risk: float = 50.0


@dataclass
class LogEntry:
    timestamp: str
    kind: str
    message: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "timestamp": self.timestamp,
            "kind": self.kind,
            "message": self.message,
            "payload": self.payload,
        }
