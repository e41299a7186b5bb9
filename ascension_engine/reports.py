"""
Weekly Report Module

Seven-day evolution of strength, weight and global score, the recent
failure points and the current projections, as JSON or plain text.
"""

import json
from typing import Any, Dict, List, Optional

from .domains import tail
from .projection import TrendDetector
from .state import CoreState, ModuleStates, ProjectionState, LogEntry

REPORT_WINDOW = 7
FAILURE_POINT_LIMIT = 10
FAILURE_KINDS = ("daily_failed", "violation", "execution_invalid")

REPORT_FORMATS = ("json", "text")


def build_weekly_report(
    core: CoreState,
    modules: ModuleStates,
    projections: ProjectionState,
    logs: List[LogEntry],
    detector: Optional[TrendDetector] = None
) -> Dict[str, Any]:
    detector = detector or TrendDetector(window_size=REPORT_WINDOW)
    failures = [entry for entry in logs if entry.kind in FAILURE_KINDS]
    return {
        "day": core.current_day,
        "training_evolution": tail(modules.training.performance_trend, REPORT_WINDOW),
        "weight_evolution": tail(modules.diet.weekly_weight_trend, REPORT_WINDOW),
        "score_evolution": tail(core.score_history, REPORT_WINDOW),
        "score_trend": detector.analyze(core.score_history).to_dict(),
        "failure_points": [entry.to_dict() for entry in tail(failures, FAILURE_POINT_LIMIT)],
        "projection": {
            "growth_velocity": round(projections.growth_velocity, 4),
            "projected_90_days_score": round(projections.projected_90_days_score, 2),
            "projected_3_years_score": round(projections.projected_3_years_score, 2),
            "regression_risk": round(projections.regression_risk, 2),
        },
    }


def render_report(report: Dict[str, Any], fmt: str = "json") -> str:
    """
    Args:
        report: Output of build_weekly_report
        fmt: "json" or "text" ("txt" accepted)

    Raises:
        ValueError: for any other format
    """
    fmt = (fmt or "json").lower()
    if fmt == "txt":
        fmt = "text"
    if fmt not in REPORT_FORMATS:
        raise ValueError(f"Unsupported report format: {fmt!r} (expected one of {REPORT_FORMATS})")

    if fmt == "json":
        return json.dumps(report, indent=2)

    trend = report["score_trend"]
    lines = [
        f"WEEKLY REPORT - day {report['day']}",
        f"TRAINING: {json.dumps(report['training_evolution'])}",
        f"WEIGHT: {json.dumps(report['weight_evolution'])}",
        f"SCORE: {json.dumps(report['score_evolution'])}",
        f"TREND: {trend['direction']} ({trend['slope']:+.2f}/day)",
        f"PROJECTION: {json.dumps(report['projection'])}",
        f"FAILURE POINTS: {len(report['failure_points'])}",
    ]
    for point in report["failure_points"]:
        lines.append(f"  - [{point['kind']}] {point['message']}")
    return "\n".join(lines)
