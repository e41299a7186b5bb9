"""
Tests for Discipline Tracker Module

Tests the failed-day transition, strict mode entry and exit, violation
consumption and the discipline / stability / growth indices.
"""

import pytest
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ascension_engine.config import EngineConfig
from ascension_engine.discipline import DisciplineTracker
from ascension_engine.domains import Domain, AlertState, ViolationKind
from ascension_engine.state import CoreState, DisciplineState, MentalState
from ascension_engine.violations import ViolationEvent, ViolationChannel


PERFECT = {domain: 100.0 for domain in Domain}


class TestDailyTransition:
    """Test cases for DisciplineTracker.evaluate_day."""

    @pytest.fixture
    def tracker(self):
        return DisciplineTracker()

    def test_failed_day(self, tracker):
        core = CoreState(alert_state=AlertState.FAILED, streak=4, xp=100)
        discipline = DisciplineState()

        transition = tracker.evaluate_day(core, discipline, MentalState(), PERFECT)

        assert transition.failed
        assert core.streak == 0
        assert discipline.failed_days_count == 1
        assert discipline.restriction_level == 1
        assert discipline.last_penalty_date is not None
        assert core.xp == 80
        assert transition.xp_delta == -20

    def test_passed_day(self, tracker):
        core = CoreState(alert_state=AlertState.ALERT, streak=2)
        discipline = DisciplineState()

        transition = tracker.evaluate_day(core, discipline, MentalState(), PERFECT)

        assert not transition.failed
        assert core.streak == 3
        assert core.xp == 5
        assert discipline.restriction_level == 0

    def test_xp_never_negative(self, tracker):
        core = CoreState(alert_state=AlertState.FAILED, xp=5)

        transition = tracker.evaluate_day(core, DisciplineState(), MentalState(), PERFECT)

        assert core.xp == 0
        assert transition.xp_delta == -5

    def test_three_failed_days_enable_strict_mode(self, tracker):
        core = CoreState(alert_state=AlertState.FAILED)
        discipline = DisciplineState()

        transitions = [
            tracker.evaluate_day(core, discipline, MentalState(), PERFECT)
            for _ in range(3)
        ]

        assert discipline.restriction_level == 3
        assert discipline.strict_mode_enabled
        assert [t.strict_mode_entered for t in transitions] == [False, False, True]
        assert tracker.blocked_domains(discipline) == (Domain.CONTENT,)

    def test_strict_exit_after_seven_strong_cycles(self, tracker):
        core = CoreState(alert_state=AlertState.ALERT, score_history=[76.5] * 7)
        discipline = DisciplineState(strict_mode_enabled=True, restriction_level=3)

        transition = tracker.evaluate_day(core, discipline, MentalState(), PERFECT)

        assert transition.strict_mode_exited
        assert not discipline.strict_mode_enabled
        assert discipline.restriction_level == 2

    def test_no_exit_with_short_history(self, tracker):
        core = CoreState(alert_state=AlertState.ALERT, score_history=[0.0] + [76.5] * 6)
        discipline = DisciplineState(strict_mode_enabled=True, restriction_level=3)

        tracker.evaluate_day(core, discipline, MentalState(), PERFECT)

        assert discipline.strict_mode_enabled
        assert discipline.restriction_level == 3

    def test_no_exit_with_relapses(self, tracker):
        core = CoreState(alert_state=AlertState.ALERT, score_history=[80.0] * 7)
        discipline = DisciplineState(strict_mode_enabled=True, restriction_level=3)

        tracker.evaluate_day(core, discipline, MentalState(relapse_count=1), PERFECT)

        assert discipline.strict_mode_enabled

    def test_core_domains_gate_exit(self):
        weak_diet = {**PERFECT, Domain.DIET: 70.0}
        history = [80.0] * 7

        strict_rule = DisciplineTracker()
        core = CoreState(alert_state=AlertState.NORMAL, score_history=list(history))
        discipline = DisciplineState(strict_mode_enabled=True, restriction_level=3)
        strict_rule.evaluate_day(core, discipline, MentalState(), weak_diet)
        assert discipline.strict_mode_enabled

        lenient_rule = DisciplineTracker(EngineConfig(strict_exit_requires_core_domains=False))
        core = CoreState(alert_state=AlertState.NORMAL, score_history=list(history))
        discipline = DisciplineState(strict_mode_enabled=True, restriction_level=3)
        lenient_rule.evaluate_day(core, discipline, MentalState(), weak_diet)
        assert not discipline.strict_mode_enabled


class TestViolations:
    """Test cases for violation consumption."""

    @pytest.fixture
    def tracker(self):
        return DisciplineTracker()

    def test_consume_applies_penalty_once(self, tracker):
        channel = ViolationChannel()
        channel.emit(ViolationEvent(kind=ViolationKind.RELAPSE, domain=Domain.SPIRITUAL))
        core = CoreState(current_day=5, discipline_index=50)
        discipline = DisciplineState()
        mental = MentalState()

        tracker.consume(channel.drain(), core, discipline, mental, core.current_day)
        tracker.consume(channel.drain(), core, discipline, mental, core.current_day)

        assert mental.relapse_log == [5]
        assert mental.relapse_count == 1
        assert discipline.violation_penalty == 10
        assert core.discipline_index == 40
        assert len(channel) == 0

    def test_gambling_costs_more(self, tracker):
        core = CoreState(discipline_index=50)
        discipline = DisciplineState()
        event = ViolationEvent(kind=ViolationKind.GAMBLING, domain=Domain.FINANCE)

        tracker.consume([event], core, discipline, MentalState(), 1)

        assert core.discipline_index == 35

    def test_relapses_expire_from_window(self, tracker):
        mental = MentalState(relapse_log=[1, 10])

        tracker.refresh_relapse_count(mental, current_day=15)

        assert mental.relapse_log == [10]
        assert mental.relapse_count == 1

    def test_penalty_decays(self, tracker):
        discipline = DisciplineState(violation_penalty=10)

        tracker.decay_violation_penalty(discipline)
        assert discipline.violation_penalty == 5

        tracker.decay_violation_penalty(discipline)
        assert discipline.violation_penalty == 2.5


class TestIndices:
    """Test cases for recompute_indices."""

    @pytest.fixture
    def tracker(self):
        return DisciplineTracker()

    def test_discipline_index(self, tracker):
        core = CoreState(streak=10, score_history=[80.0] * 7, global_score=80)
        discipline = DisciplineState(failed_days_count=5, violation_penalty=2)

        tracker.recompute_indices(core, discipline, MentalState())

        assert core.discipline_index == pytest.approx(4 + 32 - 1 - 2)

    def test_stability_index(self, tracker):
        core = CoreState()
        mental = MentalState(stability_trend=[70.0] * 7, emotional_volatility_index=20, relapse_count=1)

        tracker.recompute_indices(core, DisciplineState(), mental)

        assert core.stability_index == pytest.approx(70 - 10 - 2)

    def test_growth_index(self, tracker):
        core = CoreState(global_score=70, score_history=[60.0] + [65.0] * 7)

        tracker.recompute_indices(core, DisciplineState(), MentalState())

        assert core.growth_index == pytest.approx(50)

    def test_growth_without_history_is_zero(self, tracker):
        core = CoreState(global_score=70, score_history=[50.0] * 3)

        tracker.recompute_indices(core, DisciplineState(), MentalState())

        assert core.growth_index == 0

    def test_indices_clamped(self, tracker):
        core = CoreState(streak=1000, score_history=[100.0] * 7)
        mental = MentalState(emotional_volatility_index=100, relapse_count=50)

        tracker.recompute_indices(core, DisciplineState(), mental)

        assert core.discipline_index == 100
        assert core.stability_index == 0
