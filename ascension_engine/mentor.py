"""
Mentor Advisor Module

A priority-ordered decision list that turns the current state into one
direct instruction. First matching rule wins; rules are never blended.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .domains import Domain
from .state import CoreState, DisciplineState, ModuleStates


class MentorRule(Enum):
    WEAKEST_DOMAIN = "weakest_domain"
    ACTIVE_VIOLATION = "active_violation"
    ENCOURAGEMENT = "encouragement"
    DEFAULT = "default"


@dataclass
class MentorDirective:
    """The directive chosen for the current state."""
    rule: MentorRule
    message: str
    domain: Optional[Domain] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "rule": self.rule.value,
            "message": self.message,
            "domain": self.domain.value if self.domain else None,
            "metadata": self.metadata,
        }


# Corrective instruction per domain
CORRECTIVE_ACTIONS: Dict[Domain, str] = {
    Domain.TRAINING: "Run today's guided session in full and log every set.",
    Domain.DIET: "Hit the protein target and cut 20g of carbs tomorrow.",
    Domain.FINANCE: "Log income and expenses and move the surplus to savings.",
    Domain.ACADEMICS: "Book the missing study hours and do one active revision.",
    Domain.SPIRITUAL: "Pray today and keep the clean streak alive.",
    Domain.MENTAL: "Log mood and triggers; sleep before midnight.",
    Domain.CONTENT: "Publish one piece of content today.",
}


class MentorAdvisor:
    """
    Rules, in priority order:
    1. Weakest domain under threshold → corrective directive naming it
    2. Active relapse/binge → strict-mode notice
    3. High discipline and positive growth → encouragement
    4. Otherwise → complete the remaining required tasks
    """

    WEAK_DOMAIN_THRESHOLD = 60.0
    ENCOURAGE_DISCIPLINE = 75.0

    def __init__(self):
        self.rules: List[Callable[..., Optional[MentorDirective]]] = [
            self._weakest_domain,
            self._active_violation,
            self._encouragement,
        ]

    def advise(
        self,
        core: CoreState,
        discipline: DisciplineState,
        modules: ModuleStates,
        context: Optional[Dict[str, Any]] = None,
        excluded: tuple = ()
    ) -> MentorDirective:
        context = context or {}
        for rule in self.rules:
            directive = rule(core, discipline, modules, context, excluded)
            if directive is not None:
                return directive
        return MentorDirective(
            rule=MentorRule.DEFAULT,
            message="Complete the remaining required tasks and submit full data.",
        )

    def _weakest_domain(self, core, discipline, modules, context, excluded):
        threshold = float(context.get("threshold", self.WEAK_DOMAIN_THRESHOLD))
        candidates = {
            domain: score for domain, score in modules.scores().items()
            if domain not in excluded
        }
        if not candidates:
            return None
        weakest = min(candidates, key=candidates.get)
        score = candidates[weakest]
        if score >= threshold:
            return None
        return MentorDirective(
            rule=MentorRule.WEAKEST_DOMAIN,
            message=f"{weakest.value.capitalize()} is at {score:.0f}. {CORRECTIVE_ACTIONS[weakest]}",
            domain=weakest,
            metadata={"score": round(score, 2), "threshold": threshold},
        )

    def _active_violation(self, core, discipline, modules, context, excluded):
        mental = modules.mental
        violation_today = core.current_day in mental.relapse_log
        if not (context.get("relapse") or context.get("binge") or violation_today):
            return None
        if discipline.strict_mode_enabled:
            message = "Violation recorded. Strict mode is active: essentials only."
        else:
            message = "Violation recorded. Another failed day moves you toward strict mode."
        return MentorDirective(
            rule=MentorRule.ACTIVE_VIOLATION,
            message=message,
            metadata={"relapse_count": mental.relapse_count},
        )

    def _encouragement(self, core, discipline, modules, context, excluded):
        if core.discipline_index >= self.ENCOURAGE_DISCIPLINE and core.growth_index > 0:
            return MentorDirective(
                rule=MentorRule.ENCOURAGEMENT,
                message="Real progress. Keep going.",
                metadata={
                    "discipline_index": round(core.discipline_index, 2),
                    "growth_index": round(core.growth_index, 2),
                },
            )
        return None
