"""
Module Updaters

One updater per domain. Each is a pure transform:
(previous state, validated payload, context) -> UpdateResult.
The previous state is never mutated; violations are returned as events
instead of being applied to other domains.
"""

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .domains import Domain, ViolationKind, clamp, avg, round_half_up, tail
from .payloads import (
    ExecutionPayload, TrainingPayload, DietPayload, FinancePayload,
    AcademicsPayload, SpiritualPayload, MentalPayload, ContentPayload,
)
from .state import (
    Exercise, TrainingState, DietState, FinanceState, AcademicsState,
    SpiritualState, MentalState, ContentState, Subject, append_bounded,
)
from .violations import ViolationEvent
from .guides import build_meal_plan


@dataclass
class UpdateContext:
    """Read-only information an updater may consult."""
    current_day: int
    mental: MentalState
    trend_cap: int = 90


@dataclass
class UpdateResult:
    """New domain state plus anything the engine must act on."""
    domain: Domain
    state: object
    violations: List[ViolationEvent] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def score(self) -> float:
        return self.state.score


class ModuleUpdater:
    """Base updater: copies the previous state and applies the domain algorithm."""

    domain: Domain

    def update(self, previous, payload: ExecutionPayload, context: UpdateContext) -> UpdateResult:
        state = copy.deepcopy(previous)
        result = UpdateResult(domain=self.domain, state=state)
        self.apply(state, payload, context, result)
        state.score = clamp(state.score)
        return result

    def apply(self, state, payload, context: UpdateContext, result: UpdateResult) -> None:
        raise NotImplementedError

    def violation(self, kind: ViolationKind, **metadata) -> ViolationEvent:
        return ViolationEvent(kind=kind, domain=self.domain, metadata=metadata)


# ----------------------------------------------------------------------
# Training
# ----------------------------------------------------------------------

def estimate_one_rep_max(load: float, reps: int) -> float:
    """Epley estimate: load × (1 + reps / 30)"""
    return load * (1 + reps / 30)


class TrainingUpdater(ModuleUpdater):
    """
    Progressive overload with a fatigue guard.

    Success on an exercise = reps >= target and RPE <= 8.
    - success: next load +2.5%
    - first failure: hold load
    - second consecutive failure (and beyond): next load -2.5%
    """

    domain = Domain.TRAINING

    PROGRESSION = 0.025
    MAX_SUCCESS_RPE = 8.0
    DELOAD_FATIGUE = 80.0

    @classmethod
    def progress_load(
        cls,
        load: float,
        reps: int,
        target_reps: int,
        rpe: float,
        consecutive_failures: int = 0
    ) -> Tuple[float, int]:
        """Returns (next_load, consecutive_failures)."""
        if reps >= target_reps and rpe <= cls.MAX_SUCCESS_RPE:
            return round(load * (1 + cls.PROGRESSION), 2), 0

        failures = consecutive_failures + 1
        if failures >= 2:
            return round(load * (1 - cls.PROGRESSION), 2), failures
        return load, failures

    @staticmethod
    def fatigue_index(weekly_volume: float, avg_rpe: float, consecutive_days: int) -> float:
        return clamp((weekly_volume / 500) * 0.5 + avg_rpe * 5 + consecutive_days * 7)

    def apply(self, state: TrainingState, payload: TrainingPayload, context, result):
        if payload.day_type is not None:
            state.day_type = payload.day_type

        previous = {ex.name: ex for ex in state.exercises}
        exercises: List[Exercise] = []
        for item in payload.exercises:
            prior = previous.get(item.name)
            target = item.target_reps or item.reps
            next_load, failures = self.progress_load(
                item.load, item.reps, target, item.rpe,
                prior.consecutive_failures if prior else 0
            )
            exercises.append(Exercise(
                name=item.name,
                sets=item.sets,
                reps=item.reps,
                load=item.load,
                target_reps=target,
                rpe=item.rpe,
                rest_seconds=item.rest_seconds,
                next_load=next_load,
                consecutive_failures=failures,
                one_rep_max=round(estimate_one_rep_max(item.load, item.reps), 2),
            ))
        state.exercises = exercises

        state.weekly_volume = sum(ex.sets * ex.reps * ex.load for ex in exercises)
        avg_rpe = avg(ex.rpe for ex in exercises)
        state.fatigue_index = self.fatigue_index(
            state.weekly_volume, avg_rpe, payload.consecutive_days
        )

        goal = state.long_term_goal_kg or 200.0
        state.strength_index = clamp(avg(ex.one_rep_max for ex in exercises) / goal * 100)
        append_bounded(state.performance_trend, round(state.strength_index, 2), context.trend_cap)

        state.deload_recommended = state.fatigue_index > self.DELOAD_FATIGUE
        if state.deload_recommended:
            result.notes.append("deload")

        bonus = 30 if avg_rpe <= self.MAX_SUCCESS_RPE else 10
        state.score = 0.5 * state.strength_index + 0.3 * (100 - state.fatigue_index) + bonus


# ----------------------------------------------------------------------
# Diet
# ----------------------------------------------------------------------

@dataclass
class DietTargets:
    bmr: float
    tdee: float
    calorie_target: int
    protein_target: int
    fat_target: int
    carb_target: int


def diet_targets(weight: float, height: float, age: int, deficit_level: float) -> DietTargets:
    """
    Mifflin-St-Jeor targets.

    BMR  = 10·weight + 6.25·height − 5·age + 5
    TDEE = BMR × 1.55
    """
    bmr = 10 * weight + 6.25 * height - 5 * age + 5
    tdee = bmr * 1.55
    calories = round_half_up(tdee * (1 - deficit_level))
    protein = round_half_up(2.2 * weight)
    fat = round_half_up(0.8 * weight)
    carbs = max(0, round_half_up((calories - 4 * protein - 9 * fat) / 4))
    return DietTargets(
        bmr=bmr,
        tdee=tdee,
        calorie_target=calories,
        protein_target=protein,
        fat_target=fat,
        carb_target=carbs,
    )


class DietUpdater(ModuleUpdater):
    """Macro adherence against computed targets, with a self-tuning deficit."""

    domain = Domain.DIET

    MIN_DEFICIT = 0.10
    MAX_DEFICIT = 0.35
    DEFICIT_STEP = 0.05
    FAST_LOSS_PCT = 1.0   # weekly loss above this relaxes the deficit
    SLOW_LOSS_PCT = 0.3   # weekly loss below this tightens it
    BINGE_PENALTY = 20.0
    WEIGHT_TREND_CAP = 12

    # Points lost per unit of deviation
    DEVIATION_WEIGHTS = {
        "calories": 0.08,
        "protein": 0.4,
        "carbs": 0.2,
        "fat": 0.3,
    }

    @classmethod
    def tune_deficit(cls, deficit_level: float, older_weight: float, recent_weight: float) -> float:
        loss_pct = (older_weight - recent_weight) / older_weight * 100
        if loss_pct > cls.FAST_LOSS_PCT:
            deficit_level = max(cls.MIN_DEFICIT, deficit_level - cls.DEFICIT_STEP)
        elif loss_pct < cls.SLOW_LOSS_PCT:
            deficit_level = min(cls.MAX_DEFICIT, deficit_level + cls.DEFICIT_STEP)
        return round(deficit_level, 2)

    @classmethod
    def adherence(cls, payload: DietPayload, targets: DietTargets) -> float:
        w = cls.DEVIATION_WEIGHTS
        deviation = (
            abs(payload.calories - targets.calorie_target) * w["calories"] +
            abs(payload.protein - targets.protein_target) * w["protein"] +
            abs(payload.carbs - targets.carb_target) * w["carbs"] +
            abs(payload.fat - targets.fat_target) * w["fat"]
        )
        return clamp(100 - deviation)

    @staticmethod
    def _store_targets(state: DietState, targets: DietTargets) -> None:
        state.calorie_target = targets.calorie_target
        state.protein_target = targets.protein_target
        state.fat_target = targets.fat_target
        state.carb_target = targets.carb_target

    def apply(self, state: DietState, payload: DietPayload, context, result):
        targets = diet_targets(state.weight, state.height, state.age, state.deficit_level)
        self._store_targets(state, targets)

        state.adherence_score = self.adherence(payload, targets)
        state.binge_flag = payload.binge_flag

        if payload.weight is not None:
            state.weight = payload.weight
            append_bounded(state.weekly_weight_trend, payload.weight, self.WEIGHT_TREND_CAP)
            if len(state.weekly_weight_trend) >= 2:
                state.deficit_level = self.tune_deficit(
                    state.deficit_level,
                    state.weekly_weight_trend[-2],
                    state.weekly_weight_trend[-1],
                )

        # Targets for the next submission reflect the new weight/deficit
        self._store_targets(
            state, diet_targets(state.weight, state.height, state.age, state.deficit_level)
        )
        state.meal_plan = build_meal_plan(state.carb_target, state.protein_target)

        score = state.adherence_score
        if payload.binge_flag:
            score -= self.BINGE_PENALTY
            result.violations.append(self.violation(ViolationKind.BINGE))
        state.score = score


# ----------------------------------------------------------------------
# Finance
# ----------------------------------------------------------------------

class FinanceUpdater(ModuleUpdater):
    """Savings-rate scoring with fixed-multiplier net worth projections."""

    domain = Domain.FINANCE

    # Illustrative compounding proxies, not an annuity model
    PROJECTION_MULTIPLIERS = {"1y": 1.08, "3y": 1.25, "5y": 1.6}
    GAMBLING_PENALTY = 30.0

    def apply(self, state: FinanceState, payload: FinancePayload, context, result):
        state.monthly_income = payload.monthly_income
        state.monthly_expenses = payload.monthly_expenses
        if payload.savings is not None:
            state.savings = payload.savings
        if payload.investment_value is not None:
            state.investment_value = payload.investment_value
        state.gambling_flag = payload.gambling_flag

        if state.monthly_income > 0:
            state.savings_rate = (state.monthly_income - state.monthly_expenses) / state.monthly_income
        else:
            state.savings_rate = 0.0

        state.net_worth = state.savings + state.investment_value
        state.projection_1y = state.net_worth * self.PROJECTION_MULTIPLIERS["1y"]
        state.projection_3y = state.net_worth * self.PROJECTION_MULTIPLIERS["3y"]
        state.projection_5y = state.net_worth * self.PROJECTION_MULTIPLIERS["5y"]
        append_bounded(state.growth_trend, state.net_worth, context.trend_cap)

        score = clamp(state.savings_rate * 100 + 40)
        if state.gambling_flag:
            score -= self.GAMBLING_PENALTY
            result.violations.append(self.violation(ViolationKind.GAMBLING))
        state.score = score


# ----------------------------------------------------------------------
# Academics
# ----------------------------------------------------------------------

class AcademicsUpdater(ModuleUpdater):
    """Hours-vs-target, average mastery and an authority bonus."""

    domain = Domain.ACADEMICS

    SUSTAINED_WINDOW = 4
    SUSTAINED_MASTERY = 80.0
    HIGH_EXAM_GRADE = 8.0

    def authority_index(self, mastery_trend: List[float], subjects: List[Subject]) -> float:
        recent = tail(mastery_trend, self.SUSTAINED_WINDOW)
        sustained = (
            len(recent) == self.SUSTAINED_WINDOW and
            all(m >= self.SUSTAINED_MASTERY for m in recent)
        )
        base = self.SUSTAINED_MASTERY if sustained else avg(recent)
        exam_avg = avg(s.exam_performance for s in subjects)
        bonus = 20 if subjects and exam_avg >= self.HIGH_EXAM_GRADE else 0
        return clamp(base + bonus)

    def apply(self, state: AcademicsState, payload: AcademicsPayload, context, result):
        state.study_hours_week = payload.study_hours_week
        state.study_hours_total += payload.study_hours_week
        if payload.target_hours is not None:
            state.target_hours_week = payload.target_hours
        if payload.subjects is not None:
            state.subjects = [
                Subject(name=s.name, mastery=s.mastery, exam_performance=s.exam_performance)
                for s in payload.subjects
            ]

        state.average_mastery = avg(s.mastery for s in state.subjects)
        append_bounded(state.mastery_trend, round(state.average_mastery, 2), context.trend_cap)
        state.authority_index = self.authority_index(state.mastery_trend, state.subjects)

        hours_ratio = min(1.0, state.study_hours_week / state.target_hours_week)
        state.score = hours_ratio * 50 + state.average_mastery * 0.4 + state.authority_index * 0.2


# ----------------------------------------------------------------------
# Spiritual
# ----------------------------------------------------------------------

class SpiritualUpdater(ModuleUpdater):
    """Streak-based: prayer streak, clean days, sacrament frequency."""

    domain = Domain.SPIRITUAL

    WEIGHTS = {"prayer_streak": 2.0, "clean_days": 1.5, "sacramental": 10.0}

    def apply(self, state: SpiritualState, payload: SpiritualPayload, context, result):
        state.relapse_flag = payload.relapse_flag
        if payload.relapse_flag:
            state.clean_days = 0
            result.violations.append(self.violation(ViolationKind.RELAPSE))
        else:
            state.clean_days += 1

        state.prayer_streak = state.prayer_streak + 1 if payload.prayed else 0
        if payload.sacramental_frequency is not None:
            state.sacramental_frequency = payload.sacramental_frequency
        if payload.confession:
            state.confession_count += 1

        state.moral_stability_score = clamp(
            state.prayer_streak * self.WEIGHTS["prayer_streak"] +
            state.clean_days * self.WEIGHTS["clean_days"] +
            state.sacramental_frequency * self.WEIGHTS["sacramental"]
        )
        state.score = state.moral_stability_score


# ----------------------------------------------------------------------
# Mental
# ----------------------------------------------------------------------

class MentalUpdater(ModuleUpdater):
    """
    Composite of dopamine proxy, impulse resistance and inverse volatility,
    penalized by relapse count. Three or more recent relapses raise
    volatility and flag elevated regression risk.
    """

    domain = Domain.MENTAL

    RECENT_WINDOW_DAYS = 7
    RELAPSE_ALARM = 3
    VOLATILITY_SURGE = 15.0
    RELAPSE_PENALTY = 2.0
    TRIGGER_CAP = 20

    def recent_relapses(self, state: MentalState, current_day: int) -> int:
        first_day = current_day - self.RECENT_WINDOW_DAYS + 1
        return sum(1 for day in state.relapse_log if day >= first_day)

    def apply(self, state: MentalState, payload: MentalPayload, context, result):
        state.emotional_volatility_index = clamp(payload.emotional_volatility)
        if payload.dopamine_index is not None:
            state.dopamine_index = payload.dopamine_index
        if payload.impulse_resistance is not None:
            state.impulse_resistance_score = payload.impulse_resistance
        if payload.mood_score is not None:
            append_bounded(state.mood_trend, payload.mood_score, context.trend_cap)
        for trigger in payload.triggers:
            if trigger not in state.trigger_patterns:
                append_bounded(state.trigger_patterns, trigger, self.TRIGGER_CAP)

        state.recent_relapses = max(
            payload.recent_relapses,
            self.recent_relapses(state, context.current_day)
        )
        if state.recent_relapses >= self.RELAPSE_ALARM:
            state.emotional_volatility_index = clamp(
                state.emotional_volatility_index + self.VOLATILITY_SURGE
            )
            result.notes.append("elevated_risk")

        append_bounded(
            state.stability_trend,
            clamp((state.dopamine_index + state.impulse_resistance_score) / 2),
            context.trend_cap
        )

        state.score = (
            state.dopamine_index * 0.35 +
            state.impulse_resistance_score * 0.4 +
            (100 - state.emotional_volatility_index) * 0.25 -
            state.relapse_count * self.RELAPSE_PENALTY
        )


# ----------------------------------------------------------------------
# Content
# ----------------------------------------------------------------------

class ContentUpdater(ModuleUpdater):
    """Publishing consistency, engagement and growth."""

    domain = Domain.CONTENT

    PUBLISH_GAP_DAYS = 7
    GAP_PENALTY = 20.0

    def apply(self, state: ContentState, payload: ContentPayload, context, result):
        state.content_produced_week = payload.content_produced_week
        state.engagement_score = payload.engagement_score
        state.growth_rate = payload.growth_rate
        state.days_since_publish = payload.days_since_publish

        penalty = self.GAP_PENALTY if payload.days_since_publish >= self.PUBLISH_GAP_DAYS else 0.0
        state.consistency_index = clamp(state.content_produced_week * 10 + 30 - penalty)
        state.authority_score = clamp(state.consistency_index * 0.5 + state.engagement_score * 0.5)
        state.score = (
            state.consistency_index * 0.4 +
            state.engagement_score * 0.35 +
            state.growth_rate * 0.25
        )


UPDATERS: Dict[Domain, ModuleUpdater] = {
    Domain.TRAINING: TrainingUpdater(),
    Domain.DIET: DietUpdater(),
    Domain.FINANCE: FinanceUpdater(),
    Domain.ACADEMICS: AcademicsUpdater(),
    Domain.SPIRITUAL: SpiritualUpdater(),
    Domain.MENTAL: MentalUpdater(),
    Domain.CONTENT: ContentUpdater(),
}

_missing = set(Domain) - set(UPDATERS)
if _missing:
    raise RuntimeError(f"No updater registered for: {sorted(d.value for d in _missing)}")


def updater_for(domain: Domain) -> ModuleUpdater:
    return UPDATERS[Domain.parse(domain)]
