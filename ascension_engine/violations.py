"""
Violation Event Channel

Module updaters never reach into other domains. When an update carries a
binge, relapse or gambling flag it emits a typed ViolationEvent; the engine
drains the channel once per accepted execution and hands every event to the
DisciplineTracker, which is the only place the penalty is applied.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from .domains import Domain, ViolationKind


# Discipline-index points removed per violation
VIOLATION_PENALTIES: Dict[ViolationKind, float] = {
    ViolationKind.BINGE: 10.0,
    ViolationKind.RELAPSE: 10.0,
    ViolationKind.GAMBLING: 15.0,
}


@dataclass
class ViolationEvent:
    """A single violation raised by a module update."""
    kind: ViolationKind
    domain: Domain
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def penalty(self) -> float:
        return VIOLATION_PENALTIES[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "domain": self.domain.value,
            "timestamp": self.timestamp.isoformat(),
            "penalty": self.penalty,
            "metadata": self.metadata,
        }


class ViolationChannel:
    """Queue of pending violation events; each event is drained exactly once."""

    def __init__(self):
        self._pending: List[ViolationEvent] = []

    def emit(self, event: ViolationEvent) -> None:
        self._pending.append(event)

    def extend(self, events: List[ViolationEvent]) -> None:
        self._pending.extend(events)

    def drain(self) -> List[ViolationEvent]:
        events, self._pending = self._pending, []
        return events

    def discard(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)
