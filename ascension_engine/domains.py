"""
Domain Definitions Module

The closed set of tracked life domains, the alert bands derived from them,
and the small numeric helpers every scoring layer shares.
"""

from enum import Enum
from typing import Iterable, Sequence, Union
import math


class Domain(Enum):
    """The seven tracked life domains."""
    TRAINING = "training"
    DIET = "diet"
    FINANCE = "finance"
    ACADEMICS = "academics"
    SPIRITUAL = "spiritual"
    MENTAL = "mental"
    CONTENT = "content"

    @classmethod
    def parse(cls, value: Union["Domain", str]) -> "Domain":
        """
        Resolve a domain from its enum member or name.

        Raises UnknownDomainError for anything outside the fixed set.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for domain in cls:
                if domain.value == key:
                    return domain
        raise UnknownDomainError(value)


class AlertState(Enum):
    """
    Health band derived from the number of domains scoring below 60.

    NORMAL (0) → ALERT (1) → RESTRICTED (2) → FAILED (3+)
    """
    NORMAL = "NORMAL"
    ALERT = "ALERT"
    RESTRICTED = "RESTRICTED"
    FAILED = "FAILED"


class ViolationKind(Enum):
    """Behavioral violations a module update can raise."""
    BINGE = "binge"
    RELAPSE = "relapse"
    GAMBLING = "gambling"


class DayType(Enum):
    """Training split rotation."""
    PUSH = "PUSH"
    PULL = "PULL"
    LEGS = "LEGS"


class UnknownDomainError(ValueError):
    """Engine invoked with a domain outside the fixed set of seven."""

    def __init__(self, domain):
        self.domain = domain
        super().__init__(f"Unknown domain: {domain!r}")


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp to [low, high]; non-finite input collapses to low."""
    if value is None or not math.isfinite(value):
        return low
    return max(low, min(high, value))


def avg(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive targets (nutrition labels)."""
    return int(math.floor(value + 0.5))


def tail(values: Sequence, count: int) -> list:
    """Last `count` entries (fewer if the sequence is shorter)."""
    if count <= 0:
        return []
    return list(values[-count:])
