"""
Discipline Tracker Module

State machine over failed days, streaks and strict mode, plus the
continuous discipline / stability / growth indices.

State flow (once per daily evaluation):
    NORMAL OPERATION → (restriction >= 3) → STRICT MODE
    STRICT MODE → (7 cycles >= 75, no relapses) → NORMAL OPERATION, restriction - 1
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .config import EngineConfig
from .domains import Domain, AlertState, clamp, avg, tail
from .state import CoreState, DisciplineState, MentalState, utc_now_iso
from .violations import ViolationEvent

logger = logging.getLogger(__name__)


@dataclass
class DisciplineTransition:
    """Record of one daily discipline transition."""
    day: int
    alert_state: AlertState
    failed: bool
    streak: int
    xp_delta: int
    restriction_level: int
    strict_mode_enabled: bool
    strict_mode_entered: bool = False
    strict_mode_exited: bool = False
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "day": self.day,
            "alert_state": self.alert_state.value,
            "failed": self.failed,
            "streak": self.streak,
            "xp_delta": self.xp_delta,
            "restriction_level": self.restriction_level,
            "strict_mode_enabled": self.strict_mode_enabled,
            "strict_mode_entered": self.strict_mode_entered,
            "strict_mode_exited": self.strict_mode_exited,
            "timestamp": self.timestamp,
        }


class DisciplineTracker:
    """
    Applies failure penalties, enters and leaves strict mode, consumes
    violation events and recomputes the discipline-related indices.

    Key rules:
    1. A FAILED day resets the streak and raises the restriction level
    2. Restriction level 3 turns strict mode on
    3. Strict mode is left only after a sustained clean run; the
       restriction level is decremented, not reset
    """

    THRESHOLDS = {
        "strict_entry_restriction": 3,
        "strict_exit_score": 75.0,
        "strict_exit_window": 7,
        "core_domain_exit_score": 75.0,
    }

    FAILED_DAY_XP_PENALTY = 20
    PASSED_DAY_XP_BONUS = 5
    INDEX_WINDOW = 7
    GROWTH_LOOKBACK = 8
    STABILITY_VOLATILITY_WEIGHT = 0.5
    STABILITY_RELAPSE_WEIGHT = 2.0

    CORE_EXIT_DOMAINS = (Domain.TRAINING, Domain.DIET)

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def blocked_domains(self, discipline: DisciplineState) -> Tuple[Domain, ...]:
        if discipline.strict_mode_enabled:
            return tuple(self.config.strict_blocked_domains)
        return ()

    # ------------------------------------------------------------------
    # Violations
    # ------------------------------------------------------------------

    def consume(
        self,
        events: List[ViolationEvent],
        core: CoreState,
        discipline: DisciplineState,
        mental: MentalState,
        current_day: int
    ) -> None:
        """Apply each violation exactly once: relapse count up, discipline down."""
        for event in events:
            mental.relapse_log.append(current_day)
            discipline.violation_penalty += event.penalty
            core.discipline_index = clamp(core.discipline_index - event.penalty)
            logger.info(
                f"Violation {event.kind.value} from {event.domain.value}: "
                f"discipline -{event.penalty:.0f}"
            )
        self.refresh_relapse_count(mental, current_day)

    def refresh_relapse_count(self, mental: MentalState, current_day: int) -> None:
        """
        Drop violations that fell out of the relapse window and recount.

        `relapse_count` is therefore the recent count over
        `relapse_window_days`, not a lifetime total.
        """
        first_day = current_day - self.config.relapse_window_days + 1
        mental.relapse_log = [day for day in mental.relapse_log if day >= first_day]
        mental.relapse_count = len(mental.relapse_log)

    def decay_violation_penalty(self, discipline: DisciplineState) -> None:
        remaining = discipline.violation_penalty * self.config.violation_penalty_decay
        discipline.violation_penalty = round(remaining, 4) if remaining >= 0.01 else 0.0

    # ------------------------------------------------------------------
    # Daily transition
    # ------------------------------------------------------------------

    def evaluate_day(
        self,
        core: CoreState,
        discipline: DisciplineState,
        mental: MentalState,
        domain_scores: Dict[Domain, float]
    ) -> DisciplineTransition:
        """
        Run the once-per-day transition against the current alert state.

        Returns:
            DisciplineTransition describing what changed
        """
        was_strict = discipline.strict_mode_enabled
        failed = core.alert_state == AlertState.FAILED

        if failed:
            core.streak = 0
            discipline.failed_days_count += 1
            discipline.restriction_level += 1
            discipline.last_penalty_date = utc_now_iso()
            xp_delta = core.apply_xp(-self.FAILED_DAY_XP_PENALTY)
        else:
            core.streak += 1
            xp_delta = core.apply_xp(self.PASSED_DAY_XP_BONUS)

        entered = False
        exited = False
        if (not discipline.strict_mode_enabled and
                discipline.restriction_level >= self.THRESHOLDS["strict_entry_restriction"]):
            discipline.strict_mode_enabled = True
            entered = True
            logger.warning(
                f"Strict mode enabled at restriction level {discipline.restriction_level}"
            )
        elif was_strict and self.can_exit_strict(core, mental, domain_scores):
            discipline.strict_mode_enabled = False
            discipline.restriction_level = max(0, discipline.restriction_level - 1)
            exited = True
            logger.info(
                f"Strict mode cleared, restriction level now {discipline.restriction_level}"
            )

        return DisciplineTransition(
            day=core.current_day,
            alert_state=core.alert_state,
            failed=failed,
            streak=core.streak,
            xp_delta=xp_delta,
            restriction_level=discipline.restriction_level,
            strict_mode_enabled=discipline.strict_mode_enabled,
            strict_mode_entered=entered,
            strict_mode_exited=exited,
            timestamp=utc_now_iso(),
        )

    def can_exit_strict(
        self,
        core: CoreState,
        mental: MentalState,
        domain_scores: Dict[Domain, float]
    ) -> bool:
        window = self.THRESHOLDS["strict_exit_window"]
        recent = tail(core.score_history, window)
        if len(recent) < window:
            return False
        if any(score < self.THRESHOLDS["strict_exit_score"] for score in recent):
            return False
        if mental.relapse_count != 0:
            return False
        if self.config.strict_exit_requires_core_domains:
            floor = self.THRESHOLDS["core_domain_exit_score"]
            if any(domain_scores.get(d, 0.0) < floor for d in self.CORE_EXIT_DOMAINS):
                return False
        return True

    # ------------------------------------------------------------------
    # Indices
    # ------------------------------------------------------------------

    def recompute_indices(
        self,
        core: CoreState,
        discipline: DisciplineState,
        mental: MentalState
    ) -> None:
        """
        discipline = 0.4·streak + 0.4·avg(last 7) − 0.2·failed days − violation penalty
        stability  = avg(last 7 stability) − 0.5·volatility − 2·relapses
        growth     = 5·(global − score 7 cycles ago)
        """
        history = core.score_history

        core.discipline_index = clamp(
            0.4 * core.streak +
            0.4 * avg(tail(history, self.INDEX_WINDOW)) -
            0.2 * discipline.failed_days_count -
            discipline.violation_penalty
        )

        core.stability_index = clamp(
            avg(tail(mental.stability_trend, self.INDEX_WINDOW)) -
            self.STABILITY_VOLATILITY_WEIGHT * mental.emotional_volatility_index -
            self.STABILITY_RELAPSE_WEIGHT * mental.relapse_count
        )

        if len(history) >= self.GROWTH_LOOKBACK:
            baseline = history[-self.GROWTH_LOOKBACK]
        else:
            baseline = core.global_score
        core.growth_index = clamp(5 * (core.global_score - baseline))
