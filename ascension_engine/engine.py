"""
Ascension Engine

The orchestrator. One trigger at a time runs to completion:

    submit_execution:  validate → update one domain → drain violations
                       → grant xp → recompute all → persist
    daily_evaluation:  recompute → record history → discipline transition
                       → advance day → recompute → persist

A rejected execution changes nothing except the journal.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .aggregator import AggregateScore, ScoreAggregator
from .config import EngineConfig
from .discipline import DisciplineTracker, DisciplineTransition
from .domains import Domain, AlertState, round_half_up
from .guides import diet_guide, guided_session, strict_mode_view, build_meal_plan
from .mentor import MentorAdvisor, MentorDirective
from .projection import ProjectionEstimator
from .reports import build_weekly_report, render_report
from .snapshot import EngineSnapshot
from .state import LogEntry, append_bounded, level_for_xp, utc_now_iso
from .updaters import UpdateContext, diet_targets, updater_for
from .validator import ExecutionValidator
from .violations import ViolationChannel

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of one submitted execution."""
    domain: Domain
    accepted: bool
    reason: Optional[str] = None
    xp_granted: int = 0
    global_score: Optional[float] = None
    violations: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "domain": self.domain.value,
            "accepted": self.accepted,
            "reason": self.reason,
            "xp_granted": self.xp_granted,
            "global_score": round(self.global_score, 2) if self.global_score is not None else None,
            "violations": self.violations,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class DashboardSnapshot:
    """Read-only view of the headline numbers."""
    day: int
    total_days: int
    global_score: float
    level: int
    xp: int
    streak: int
    discipline_index: float
    stability_index: float
    growth_index: float
    alert_state: AlertState
    domain_scores: Dict[str, float]
    strict_mode_enabled: bool
    restriction_level: int
    regression_risk: float
    high_risk_flag: bool

    def to_dict(self) -> Dict:
        return {
            "day": self.day,
            "total_days": self.total_days,
            "global_score": round(self.global_score, 2),
            "level": self.level,
            "xp": self.xp,
            "streak": self.streak,
            "discipline_index": round(self.discipline_index, 2),
            "stability_index": round(self.stability_index, 2),
            "growth_index": round(self.growth_index, 2),
            "alert_state": self.alert_state.value,
            "domain_scores": dict(self.domain_scores),
            "strict_mode_enabled": self.strict_mode_enabled,
            "restriction_level": self.restriction_level,
            "regression_risk": round(self.regression_risk, 2),
            "high_risk_flag": self.high_risk_flag,
        }


class AscensionEngine:
    """
    Composite scoring and discipline engine over the seven life domains.

    Usage:
        engine = AscensionEngine(store=JsonFileStore("state.json"))
        engine.submit_execution("diet", {"calories": 2200, ...})
        engine.daily_evaluation()
        print(engine.get_dashboard_snapshot())
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        store=None,
        snapshot: Optional[Union[EngineSnapshot, Dict[str, Any]]] = None
    ):
        """
        Args:
            config: Engine tunables (defaults to EngineConfig())
            store: Anything with load() -> dict | None and save(dict)
            snapshot: Explicit starting state; takes precedence over store.load()
        """
        self.config = config or EngineConfig()
        self.store = store

        self.validator = ExecutionValidator()
        self.aggregator = ScoreAggregator()
        self.tracker = DisciplineTracker(self.config)
        self.estimator = ProjectionEstimator()
        self.mentor = MentorAdvisor()
        self.violations = ViolationChannel()

        if snapshot is None and store is not None:
            snapshot = store.load()
        self.restore(snapshot)

    # ------------------------------------------------------------------
    # State lifecycle
    # ------------------------------------------------------------------

    def restore(self, snapshot: Optional[Union[EngineSnapshot, Dict[str, Any]]]) -> None:
        """Replace the whole engine state. None starts a fresh program."""
        if snapshot is None:
            loaded = EngineSnapshot()
            loaded.core.total_days = self.config.total_days
            self._seed_diet_targets(loaded)
            logger.info("Starting a fresh program")
        elif isinstance(snapshot, EngineSnapshot):
            loaded = snapshot.model_copy(deep=True)
        else:
            loaded = EngineSnapshot.from_dict(snapshot)
            logger.info(f"Restored snapshot at day {loaded.core.current_day}")

        self.core = loaded.core
        self.modules = loaded.modules
        self.discipline = loaded.discipline
        self.projections = loaded.projections
        self.logs: List[LogEntry] = loaded.logs
        self.core.level = level_for_xp(self.core.xp)
        self.violations.discard()
        self._recompute_all()

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            saved_at=utc_now_iso(),
            core=copy.deepcopy(self.core),
            modules=copy.deepcopy(self.modules),
            discipline=copy.deepcopy(self.discipline),
            projections=copy.deepcopy(self.projections),
            logs=copy.deepcopy(self.logs),
        )

    @staticmethod
    def _seed_diet_targets(snapshot: EngineSnapshot) -> None:
        diet = snapshot.modules.diet
        targets = diet_targets(diet.weight, diet.height, diet.age, diet.deficit_level)
        diet.calorie_target = targets.calorie_target
        diet.protein_target = targets.protein_target
        diet.fat_target = targets.fat_target
        diet.carb_target = targets.carb_target
        diet.meal_plan = build_meal_plan(diet.carb_target, diet.protein_target)

    def _checkpoint(self) -> Optional[EngineSnapshot]:
        return self.snapshot() if self.store is not None else None

    def _persist(self, before: Optional[EngineSnapshot]) -> None:
        """Save the new state. A failed save rolls the trigger back and re-raises."""
        if self.store is None:
            return
        try:
            self.store.save(self.snapshot().to_dict())
        except Exception:
            logger.error("Snapshot save failed, rolling back to the previous state")
            self.restore(before)
            raise

    def _log(self, kind: str, message: str, payload: Optional[Dict[str, Any]] = None) -> None:
        append_bounded(
            self.logs,
            LogEntry(timestamp=utc_now_iso(), kind=kind, message=message, payload=payload or {}),
            self.config.log_window
        )

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def submit_execution(self, domain: Union[Domain, str], payload: Any) -> ExecutionResult:
        """
        Validate and apply one domain execution.

        Raises:
            UnknownDomainError: domain outside the fixed seven
        """
        domain = Domain.parse(domain)
        before = self._checkpoint()
        blocked = self.tracker.blocked_domains(self.discipline)
        validation = self.validator.validate(domain, payload, blocked)

        if not validation.valid:
            self._log(
                "execution_invalid",
                f"{domain.value} execution rejected: {validation.reason}",
                {"domain": domain.value, "reason": validation.reason},
            )
            self._persist(before)
            return ExecutionResult(domain=domain, accepted=False, reason=validation.reason)

        parsed = validation.payload
        context = UpdateContext(
            current_day=self.core.current_day,
            mental=self.modules.mental,
            trend_cap=self.config.trend_window,
        )
        result = updater_for(domain).update(self.modules.get(domain), parsed, context)
        self.modules.set(domain, result.state)

        self.violations.extend(result.violations)
        events = self.violations.drain()
        self.tracker.consume(
            events, self.core, self.discipline, self.modules.mental, self.core.current_day
        )
        for event in events:
            self._log(
                "violation",
                f"{event.kind.value} reported in {event.domain.value}",
                event.to_dict()
            )

        xp = self.core.apply_xp(round_half_up(parsed.completion / 10 + 5))
        self._log(
            "execution",
            f"{domain.value} execution accepted (score {result.score:.1f}, +{xp} xp)",
            {"domain": domain.value, "score": round(result.score, 2), "xp": xp},
        )
        if "deload" in result.notes:
            self._log(
                "deload",
                f"Fatigue at {result.state.fatigue_index:.0f}: deload recommended",
                {"fatigue_index": round(result.state.fatigue_index, 2)},
            )

        self._recompute_all()
        self._persist(before)

        logger.info(
            f"{domain.value} accepted: +{xp} xp, global {self.core.global_score:.1f} "
            f"({self.core.alert_state.value})"
        )
        return ExecutionResult(
            domain=domain,
            accepted=True,
            xp_granted=xp,
            global_score=self.core.global_score,
            violations=[event.kind.value for event in events],
            notes=list(result.notes),
        )

    def daily_evaluation(self) -> DisciplineTransition:
        """Close the current day: record the score and run the discipline transition."""
        before = self._checkpoint()
        aggregate = self._recompute_all()
        self.aggregator.record(
            self.core.score_history, self.core.global_score, self.config.history_window
        )

        transition = self.tracker.evaluate_day(
            self.core, self.discipline, self.modules.mental, aggregate.domain_scores
        )

        if transition.failed:
            self._log(
                "daily_failed",
                f"Day {transition.day} failed: {aggregate.under_threshold} domains under "
                f"{self.aggregator.UNDER_PERFORMANCE_THRESHOLD:.0f}",
                transition.to_dict()
            )
        else:
            self._log(
                "daily_passed",
                f"Day {transition.day} closed at {self.core.global_score:.1f}",
                transition.to_dict()
            )
        if transition.strict_mode_entered:
            self._log(
                "strict_mode_on",
                f"Strict mode enabled (restriction level {transition.restriction_level})",
                {"restriction_level": transition.restriction_level},
            )
        if transition.strict_mode_exited:
            self._log(
                "strict_mode_off",
                f"Strict mode cleared (restriction level {transition.restriction_level})",
                {"restriction_level": transition.restriction_level},
            )

        self.tracker.decay_violation_penalty(self.discipline)
        self.core.last_evaluation_date = transition.timestamp
        self.core.current_day += 1
        self.tracker.refresh_relapse_count(self.modules.mental, self.core.current_day)

        self._recompute_all()
        self._persist(before)
        return transition

    def _recompute_all(self) -> AggregateScore:
        blocked = self.tracker.blocked_domains(self.discipline)
        aggregate = self.aggregator.aggregate(self.modules.scores(), excluded=blocked)
        self.core.global_score = aggregate.global_score
        self.core.alert_state = aggregate.alert_state
        self.tracker.recompute_indices(self.core, self.discipline, self.modules.mental)
        self.projections = self.estimator.estimate(self.core, self.modules.mental)
        return aggregate

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def get_guided_session(self) -> List[str]:
        return guided_session(self.modules.training)

    def get_diet_guide(self, consumed: Optional[Dict[str, float]] = None) -> Dict[str, Any]:
        return diet_guide(self.modules.diet, consumed)

    def mentor_directive(self, context: Optional[Dict[str, Any]] = None) -> MentorDirective:
        return self.mentor.advise(
            self.core,
            self.discipline,
            self.modules,
            context,
            excluded=self.tracker.blocked_domains(self.discipline),
        )

    def get_mentor_directive(self, context: Optional[Dict[str, Any]] = None) -> str:
        return self.mentor_directive(context).message

    def get_dashboard_snapshot(self) -> DashboardSnapshot:
        blocked = self.tracker.blocked_domains(self.discipline)
        scores = {
            domain.value: round(0.0 if domain in blocked else score, 2)
            for domain, score in self.modules.scores().items()
        }
        return DashboardSnapshot(
            day=self.core.current_day,
            total_days=self.core.total_days,
            global_score=self.core.global_score,
            level=self.core.level,
            xp=self.core.xp,
            streak=self.core.streak,
            discipline_index=self.core.discipline_index,
            stability_index=self.core.stability_index,
            growth_index=self.core.growth_index,
            alert_state=self.core.alert_state,
            domain_scores=scores,
            strict_mode_enabled=self.discipline.strict_mode_enabled,
            restriction_level=self.discipline.restriction_level,
            regression_risk=self.projections.regression_risk,
            high_risk_flag=self.projections.regression_risk > self.estimator.HIGH_RISK_DISPLAY,
        )

    def export_weekly_report(self, fmt: str = "json") -> str:
        report = build_weekly_report(self.core, self.modules, self.projections, self.logs)
        return render_report(report, fmt)

    def strict_mode_view(self) -> Optional[Dict[str, Any]]:
        """Restricted checklist while strict mode is on, else None."""
        if not self.discipline.strict_mode_enabled:
            return None
        return strict_mode_view(
            self.modules.training,
            self.modules.diet,
            list(self.tracker.blocked_domains(self.discipline)),
        )
