#!/usr/bin/env python3
"""
Ascension Engine - Main Runner

Local runner for driving the engine against a JSON state file.

Usage:
    python main.py demo                                   # Simulate two weeks
    python main.py submit --domain diet --payload '{...}' # Submit one execution
    python main.py evaluate                               # Close the current day
    python main.py dashboard                              # Print headline numbers
    python main.py report --format text                   # Weekly report
"""

import json
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

from ascension_engine import AscensionEngine, EngineConfig, JsonFileStore, MemoryStore

DEFAULT_STATE_FILE = Path(__file__).parent / "ascension_state.json"


def print_header(text: str):
    """Print a formatted header."""
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


def print_section(text: str):
    """Print a formatted section header."""
    print(f"\n--- {text} ---")


def print_dashboard(engine: AscensionEngine):
    dashboard = engine.get_dashboard_snapshot()
    print(f"Day {dashboard.day}/{dashboard.total_days} | Level {dashboard.level} ({dashboard.xp} xp)")
    print(f"Global score: {dashboard.global_score:.1f} [{dashboard.alert_state.value}]")
    print(f"Discipline: {dashboard.discipline_index:.1f} | "
          f"Stability: {dashboard.stability_index:.1f} | "
          f"Growth: {dashboard.growth_index:.1f}")
    print(f"Streak: {dashboard.streak} | Restriction: {dashboard.restriction_level} | "
          f"Strict mode: {'ON' if dashboard.strict_mode_enabled else 'off'}")
    for domain, score in dashboard.domain_scores.items():
        bar = "#" * int(score // 5)
        print(f"  {domain:<10} {score:6.1f} {bar}")
    if dashboard.high_risk_flag:
        print(f"  ⚠️  Regression risk {dashboard.regression_risk:.0f}")


def demo_day(day: int, slip: bool) -> List[Tuple[str, Dict[str, Any]]]:
    """Scripted executions for one simulated day."""
    return [
        ("training", {
            "exercises": [
                {"name": "Bench Press", "sets": 4, "reps": 6, "load": 80 + day, "targetReps": 6, "rpe": 8},
                {"name": "Overhead Press", "sets": 3, "reps": 8, "load": 45, "targetReps": 8, "rpe": 7.5},
            ],
            "dayType": ["PUSH", "PULL", "LEGS"][day % 3],
        }),
        ("diet", {
            "calories": 2600 if slip else 2250,
            "protein": 185, "carbs": 210, "fat": 70,
            "weight": round(86 - day * 0.1, 1),
            "bingeFlag": slip,
        }),
        ("finance", {"monthlyIncome": 4000, "monthlyExpenses": 2600, "savings": 9000 + day * 50}),
        ("academics", {
            "studyHoursWeek": 18,
            "subjects": [{"name": "Calculus", "mastery": 70 + day}, {"name": "Physics", "mastery": 65}],
        }),
        ("spiritual", {"relapseFlag": False, "prayed": True, "sacramentalFrequency": 1}),
        ("mental", {"emotionalVolatility": 35, "dopamineIndex": 70, "impulseResistance": 75}),
        ("content", {"contentProducedWeek": 3, "engagementScore": 60, "growthRate": 40}),
    ]


def run_demo(days: int = 14):
    """Simulate a fortnight in memory and print the outcome."""
    print_header("Ascension Engine Demo")
    engine = AscensionEngine(store=MemoryStore())

    for day in range(1, days + 1):
        slip = day % 5 == 0
        for domain, payload in demo_day(day, slip):
            result = engine.submit_execution(domain, payload)
            if not result.accepted:
                print(f"  ✗ {domain}: {result.reason}")
        transition = engine.daily_evaluation()
        marker = "FAILED" if transition.failed else "ok"
        print(f"Day {transition.day:>2}: global {engine.core.score_history[-1]:5.1f} "
              f"[{transition.alert_state.value}] {marker}")

    print_section("Dashboard")
    print_dashboard(engine)

    print_section("Guided Session")
    for line in engine.get_guided_session():
        print(f"  • {line}")

    print_section("Mentor")
    print(f"  {engine.get_mentor_directive()}")

    print_section("Weekly Report")
    print(engine.export_weekly_report("text"))


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Ascension Engine - Composite Life Scoring & Discipline Tracking"
    )
    parser.add_argument(
        "mode",
        nargs="?",
        default="demo",
        choices=["demo", "submit", "evaluate", "dashboard", "report"],
        help="Run mode: demo, submit, evaluate, dashboard, or report"
    )
    parser.add_argument(
        "--state",
        type=Path,
        default=DEFAULT_STATE_FILE,
        help="JSON state file (ignored by demo)"
    )
    parser.add_argument("--domain", type=str, help="Domain for submit mode")
    parser.add_argument("--payload", type=str, default="{}", help="JSON payload for submit mode")
    parser.add_argument("--format", type=str, default="json", help="Report format: json or text")
    parser.add_argument("--env-file", type=Path, help="Optional .env file with ASCENSION_* settings")
    parser.add_argument("--verbose", action="store_true", help="Show engine logs")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.mode == "demo":
        run_demo()
        return

    engine = AscensionEngine(
        config=EngineConfig.from_env(args.env_file),
        store=JsonFileStore(args.state),
    )

    if args.mode == "submit":
        if not args.domain:
            parser.error("submit requires --domain")
        result = engine.submit_execution(args.domain, json.loads(args.payload))
        print(json.dumps(result.to_dict(), indent=2))
    elif args.mode == "evaluate":
        transition = engine.daily_evaluation()
        print(json.dumps(transition.to_dict(), indent=2))
    elif args.mode == "dashboard":
        print_dashboard(engine)
    elif args.mode == "report":
        print(engine.export_weekly_report(args.format))


if __name__ == "__main__":
    main()
