"""
Engine Configuration

Tunables that differ between deployments. Everything else (weights,
thresholds, penalties) lives as class constants next to the code using it.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from .domains import Domain


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class EngineConfig:
    """
    Args:
        total_days: Length of the tracked program
        history_window: Rolling cap on score history entries
        log_window: Rolling cap on journal entries
        trend_window: Rolling cap on per-domain trend lists
        relapse_window_days: Violations older than this stop counting as relapses
        strict_exit_requires_core_domains: Also require training and diet >= 75 to leave strict mode
        strict_blocked_domains: Domains rejected and zeroed while strict mode is on
        violation_penalty_decay: Share of accumulated violation penalty kept per daily evaluation
    """
    total_days: int = 90
    history_window: int = 90
    log_window: int = 200
    trend_window: int = 90
    relapse_window_days: int = 14
    strict_exit_requires_core_domains: bool = True
    strict_blocked_domains: Tuple[Domain, ...] = field(default=(Domain.CONTENT,))
    violation_penalty_decay: float = 0.5

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "EngineConfig":
        """Read ASCENSION_* overrides (after loading a .env file if present)."""
        if env_file is not None and env_file.exists():
            load_dotenv(env_file)
        else:
            load_dotenv()

        defaults = cls()
        blocked = os.getenv("ASCENSION_STRICT_BLOCKED_DOMAINS")
        return cls(
            total_days=int(os.getenv("ASCENSION_TOTAL_DAYS", defaults.total_days)),
            history_window=int(os.getenv("ASCENSION_HISTORY_WINDOW", defaults.history_window)),
            log_window=int(os.getenv("ASCENSION_LOG_WINDOW", defaults.log_window)),
            trend_window=int(os.getenv("ASCENSION_TREND_WINDOW", defaults.trend_window)),
            relapse_window_days=int(
                os.getenv("ASCENSION_RELAPSE_WINDOW_DAYS", defaults.relapse_window_days)
            ),
            strict_exit_requires_core_domains=_env_bool(
                "ASCENSION_STRICT_EXIT_REQUIRES_CORE_DOMAINS",
                defaults.strict_exit_requires_core_domains
            ),
            strict_blocked_domains=(
                tuple(Domain.parse(name) for name in blocked.split(",") if name.strip())
                if blocked is not None else defaults.strict_blocked_domains
            ),
            violation_penalty_decay=float(
                os.getenv("ASCENSION_VIOLATION_PENALTY_DECAY", defaults.violation_penalty_decay)
            ),
        )
