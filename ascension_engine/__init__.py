"""
Ascension Engine - Composite Life Scoring & Discipline Tracking

Tracks seven life domains over a fixed program, folds them into one
global score, and enforces discipline through streaks, restrictions
and strict mode.

Layers:
1. Execution Validation (gate) - payloads.py, validator.py
2. Module Updaters (per-domain algorithms) - updaters.py
3. Violation Channel (cross-domain events) - violations.py
4. Score Aggregation (global score, alert band) - aggregator.py
5. Discipline Tracker (state machine, indices) - discipline.py
6. Projections (forecasts, regression risk, trends) - projection.py
7. Mentor (directives) - mentor.py

Orchestration & I/O:
8. Engine (orchestrator) - engine.py
9. Guides & Reports (read-only views) - guides.py, reports.py
10. Snapshots & Stores (persistence) - snapshot.py, persistence.py
"""

from .domains import (
    Domain,
    AlertState,
    ViolationKind,
    DayType,
    UnknownDomainError,
)

from .config import EngineConfig

from .state import (
    CoreState,
    ModuleStates,
    DisciplineState,
    ProjectionState,
    LogEntry,
)

from .validator import (
    ExecutionValidator,
    ValidationResult,
    ValidationRejected,
)

from .violations import (
    ViolationEvent,
    ViolationChannel,
    VIOLATION_PENALTIES,
)

from .updaters import (
    ModuleUpdater,
    UpdateContext,
    UpdateResult,
    UPDATERS,
    updater_for,
)

from .aggregator import (
    ScoreAggregator,
    AggregateScore,
)

from .discipline import (
    DisciplineTracker,
    DisciplineTransition,
)

from .projection import (
    ProjectionEstimator,
    TrendDetector,
    TrendAnalysis,
    TrendDirection,
)

from .mentor import (
    MentorAdvisor,
    MentorDirective,
    MentorRule,
)

from .snapshot import (
    EngineSnapshot,
    SnapshotVersionError,
    SNAPSHOT_VERSION,
)

from .persistence import (
    MemoryStore,
    JsonFileStore,
)

from .engine import (
    AscensionEngine,
    ExecutionResult,
    DashboardSnapshot,
)

__version__ = "0.1.0"
__all__ = [
    # Domains
    "Domain",
    "AlertState",
    "ViolationKind",
    "DayType",
    "UnknownDomainError",
    # Config
    "EngineConfig",
    # State
    "CoreState",
    "ModuleStates",
    "DisciplineState",
    "ProjectionState",
    "LogEntry",
    # Validation
    "ExecutionValidator",
    "ValidationResult",
    "ValidationRejected",
    # Violations
    "ViolationEvent",
    "ViolationChannel",
    "VIOLATION_PENALTIES",
    # Updaters
    "ModuleUpdater",
    "UpdateContext",
    "UpdateResult",
    "UPDATERS",
    "updater_for",
    # Aggregation
    "ScoreAggregator",
    "AggregateScore",
    # Discipline
    "DisciplineTracker",
    "DisciplineTransition",
    # Projections
    "ProjectionEstimator",
    "TrendDetector",
    "TrendAnalysis",
    "TrendDirection",
    # Mentor
    "MentorAdvisor",
    "MentorDirective",
    "MentorRule",
    # Persistence
    "EngineSnapshot",
    "SnapshotVersionError",
    "SNAPSHOT_VERSION",
    "MemoryStore",
    "JsonFileStore",
    # Engine
    "AscensionEngine",
    "ExecutionResult",
    "DashboardSnapshot",
]
