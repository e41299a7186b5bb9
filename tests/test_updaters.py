"""
Tests for Module Updaters

Tests each domain algorithm and that updates never mutate the previous state.
"""

import pytest
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ascension_engine.domains import Domain, ViolationKind
from ascension_engine.payloads import (
    TrainingPayload, DietPayload, FinancePayload, AcademicsPayload,
    SpiritualPayload, MentalPayload, ContentPayload,
)
from ascension_engine.state import (
    TrainingState, DietState, FinanceState, AcademicsState,
    SpiritualState, MentalState, ContentState,
)
from ascension_engine.updaters import (
    UPDATERS, UpdateContext, TrainingUpdater, DietUpdater, FinanceUpdater,
    AcademicsUpdater, SpiritualUpdater, MentalUpdater, ContentUpdater,
    diet_targets, estimate_one_rep_max, updater_for,
)


@pytest.fixture
def context():
    return UpdateContext(current_day=3, mental=MentalState())


class TestTrainingUpdater:
    """Test cases for progressive overload and fatigue."""

    def test_successful_set_progresses_load(self):
        assert TrainingUpdater.progress_load(80, 6, 6, 8) == (82.0, 0)

    def test_high_rpe_counts_as_failure(self):
        next_load, failures = TrainingUpdater.progress_load(80, 6, 6, 9)

        assert next_load == 80
        assert failures == 1

    def test_first_failure_holds_second_deloads(self):
        held, failures = TrainingUpdater.progress_load(80, 5, 6, 8, 0)
        dropped, failures = TrainingUpdater.progress_load(80, 5, 6, 8, failures)

        assert held == 80
        assert dropped == 78.0
        assert failures == 2

    def test_failure_streak_carries_between_sessions(self, context):
        updater = TrainingUpdater()
        payload = TrainingPayload.model_validate({
            "exercises": [{"name": "Squat", "sets": 3, "reps": 5, "load": 100, "targetReps": 6}]
        })

        first = updater.update(TrainingState(), payload, context)
        second = updater.update(first.state, payload, context)

        assert first.state.exercises[0].next_load == 100
        assert second.state.exercises[0].next_load == 97.5
        assert second.state.exercises[0].consecutive_failures == 2

    def test_update_does_not_mutate_previous(self, context):
        previous = TrainingState()
        payload = TrainingPayload.model_validate({
            "exercises": [{"name": "Bench Press", "sets": 4, "reps": 6, "load": 80}]
        })

        result = TrainingUpdater().update(previous, payload, context)

        assert previous.exercises == []
        assert previous.score == 0.0
        assert result.state is not previous
        assert len(result.state.exercises) == 1

    def test_volume_strength_and_score(self, context):
        payload = TrainingPayload.model_validate({
            "exercises": [{"name": "Deadlift", "sets": 1, "reps": 1, "load": 200, "rpe": 0}],
            "consecutiveDays": 0,
        })

        result = TrainingUpdater().update(TrainingState(), payload, context)

        assert result.state.weekly_volume == 200
        assert result.state.strength_index == 100
        assert result.state.fatigue_index == pytest.approx(0.2)
        assert result.score == 100  # clamped
        assert not result.state.deload_recommended

    def test_heavy_week_recommends_deload(self, context):
        payload = TrainingPayload.model_validate({
            "exercises": [{"name": "Squat", "sets": 10, "reps": 10, "load": 150, "rpe": 9.5}],
            "consecutiveDays": 6,
        })

        result = TrainingUpdater().update(TrainingState(), payload, context)

        assert result.state.fatigue_index > 80
        assert result.state.deload_recommended
        assert "deload" in result.notes

    def test_one_rep_max_estimate(self):
        assert estimate_one_rep_max(100, 3) == pytest.approx(110)


class TestDietUpdater:
    """Test cases for diet targets, adherence and the deficit tuner."""

    def test_targets_follow_mifflin_st_jeor(self):
        targets = diet_targets(86, 171, 25, 0.2)

        assert targets.bmr == pytest.approx(1808.75)
        assert targets.tdee == pytest.approx(2803.5625)
        assert targets.calorie_target == 2243
        assert targets.protein_target == 189
        assert targets.fat_target == 69
        assert targets.carb_target == 217

    def test_on_target_day_scores_full(self, context):
        payload = DietPayload.model_validate({"calories": 2243, "protein": 189, "carbs": 217, "fat": 69})

        result = DietUpdater().update(DietState(), payload, context)

        assert result.state.adherence_score == 100
        assert result.score == 100
        assert result.violations == []
        assert len(result.state.meal_plan) == 4
        assert result.state.meal_plan[0].rice_grams == 71
        assert result.state.meal_plan[0].chicken_grams == 57

    def test_binge_penalizes_and_emits_violation(self, context):
        payload = DietPayload.model_validate({
            "calories": 2243, "protein": 189, "carbs": 217, "fat": 69, "bingeFlag": True
        })

        result = DietUpdater().update(DietState(), payload, context)

        assert result.score == 80
        assert [v.kind for v in result.violations] == [ViolationKind.BINGE]
        assert result.violations[0].domain == Domain.DIET

    def test_adherence_deviation(self, context):
        # 100 kcal over and 10 g protein short: 100*0.08 + 10*0.4 = 12 points
        payload = DietPayload.model_validate({"calories": 2343, "protein": 179, "carbs": 217, "fat": 69})

        result = DietUpdater().update(DietState(), payload, context)

        assert result.state.adherence_score == pytest.approx(88)

    @pytest.mark.parametrize("deficit,older,recent,expected", [
        (0.20, 86, 84, 0.15),   # fast loss relaxes
        (0.20, 86, 86, 0.25),   # stalled tightens
        (0.20, 86, 85.5, 0.20), # on pace
        (0.10, 86, 84, 0.10),   # floor
        (0.35, 86, 86, 0.35),   # cap
    ])
    def test_deficit_tuning(self, deficit, older, recent, expected):
        assert DietUpdater.tune_deficit(deficit, older, recent) == pytest.approx(expected)

    def test_weight_update_recomputes_targets(self, context):
        updater = DietUpdater()
        base = {"calories": 2243, "protein": 189, "carbs": 217, "fat": 69}

        first = updater.update(DietState(), DietPayload.model_validate({**base, "weight": 86}), context)
        second = updater.update(first.state, DietPayload.model_validate({**base, "weight": 84}), context)

        assert second.state.weekly_weight_trend == [86, 84]
        assert second.state.deficit_level == pytest.approx(0.15)
        assert second.state.calorie_target == diet_targets(84, 171, 25, 0.15).calorie_target


class TestFinanceUpdater:
    def test_savings_rate_and_projections(self, context):
        payload = FinancePayload.model_validate({
            "monthlyIncome": 4000, "monthlyExpenses": 3000, "savings": 1000, "investmentValue": 1000
        })

        result = FinanceUpdater().update(FinanceState(), payload, context)

        assert result.state.savings_rate == pytest.approx(0.25)
        assert result.score == pytest.approx(65)
        assert result.state.net_worth == 2000
        assert result.state.projection_1y == pytest.approx(2160)
        assert result.state.projection_3y == pytest.approx(2500)
        assert result.state.projection_5y == pytest.approx(3200)
        assert result.state.growth_trend == [2000]

    def test_zero_income(self, context):
        payload = FinancePayload.model_validate({"monthlyIncome": 0, "monthlyExpenses": 500})

        result = FinanceUpdater().update(FinanceState(), payload, context)

        assert result.state.savings_rate == 0
        assert result.score == 40

    def test_gambling_penalty_and_violation(self, context):
        payload = FinancePayload.model_validate({
            "monthlyIncome": 4000, "monthlyExpenses": 3000, "gamblingFlag": True
        })

        result = FinanceUpdater().update(FinanceState(), payload, context)

        assert result.score == pytest.approx(35)
        assert [v.kind for v in result.violations] == [ViolationKind.GAMBLING]


class TestAcademicsUpdater:
    def test_hours_mastery_authority(self, context):
        payload = AcademicsPayload.model_validate({
            "studyHoursWeek": 20, "subjects": [{"name": "Calculus", "mastery": 80}]
        })

        result = AcademicsUpdater().update(AcademicsState(), payload, context)

        assert result.state.average_mastery == 80
        assert result.state.authority_index == 80
        assert result.score == pytest.approx(98)
        assert result.state.study_hours_total == 20

    def test_high_exam_grades_add_authority_bonus(self, context):
        updater = AcademicsUpdater()
        subjects = [{"name": "Physics", "mastery": 85, "examPerformance": 9}]

        state = AcademicsState()
        for _ in range(4):
            state = updater.update(
                state,
                AcademicsPayload.model_validate({"studyHoursWeek": 10, "subjects": subjects}),
                context
            ).state

        assert state.mastery_trend == [85, 85, 85, 85]
        assert state.authority_index == 100
        assert state.study_hours_total == 40


class TestSpiritualUpdater:
    def test_clean_day_and_prayer(self, context):
        payload = SpiritualPayload.model_validate({"relapseFlag": False, "prayed": True})

        result = SpiritualUpdater().update(SpiritualState(clean_days=4, prayer_streak=2), payload, context)

        assert result.state.clean_days == 5
        assert result.state.prayer_streak == 3
        assert result.score == pytest.approx(3 * 2 + 5 * 1.5)
        assert result.violations == []

    def test_relapse_resets_and_emits_violation(self, context):
        payload = SpiritualPayload.model_validate({"relapseFlag": True, "confession": "Saturday"})

        result = SpiritualUpdater().update(SpiritualState(clean_days=10, prayer_streak=5), payload, context)

        assert result.state.clean_days == 0
        assert result.state.prayer_streak == 0
        assert result.state.confession_count == 1
        assert [v.kind for v in result.violations] == [ViolationKind.RELAPSE]


class TestMentalUpdater:
    def test_score_composite(self, context):
        payload = MentalPayload.model_validate({
            "emotionalVolatility": 20, "dopamineIndex": 80, "impulseResistance": 70
        })

        result = MentalUpdater().update(MentalState(), payload, context)

        assert result.score == pytest.approx(80 * 0.35 + 70 * 0.4 + 80 * 0.25)
        assert result.state.stability_trend == [75]

    def test_recent_relapses_raise_volatility(self, context):
        payload = MentalPayload.model_validate({"emotionalVolatility": 40, "triggers": ["late nights"]})

        result = MentalUpdater().update(MentalState(relapse_log=[1, 2, 3]), payload, context)

        assert result.state.recent_relapses == 3
        assert result.state.emotional_volatility_index == 55
        assert "elevated_risk" in result.notes
        assert result.score == pytest.approx(48.75)
        assert result.state.trigger_patterns == ["late nights"]

    def test_relapse_count_penalizes_score(self, context):
        payload = MentalPayload.model_validate({"emotionalVolatility": 0})

        clean = MentalUpdater().update(MentalState(), payload, context)
        relapsed = MentalUpdater().update(MentalState(relapse_count=2), payload, context)

        assert clean.score - relapsed.score == pytest.approx(4)


class TestContentUpdater:
    def test_publish_gap_penalty(self, context):
        fresh = ContentPayload.model_validate({"contentProducedWeek": 2, "daysSincePublish": 1})
        stale = ContentPayload.model_validate({"contentProducedWeek": 2, "daysSincePublish": 8})

        assert ContentUpdater().update(ContentState(), fresh, context).state.consistency_index == 50
        assert ContentUpdater().update(ContentState(), stale, context).state.consistency_index == 30

    def test_blend(self, context):
        payload = ContentPayload.model_validate({
            "contentProducedWeek": 7, "engagementScore": 60, "growthRate": 40
        })

        result = ContentUpdater().update(ContentState(), payload, context)

        assert result.state.consistency_index == 100
        assert result.score == pytest.approx(40 + 21 + 10)
        assert result.state.authority_score == pytest.approx(80)


class TestDispatch:
    def test_every_domain_has_an_updater(self):
        assert set(UPDATERS) == set(Domain)
        for domain, updater in UPDATERS.items():
            assert updater.domain == domain

    def test_updater_for_accepts_names(self):
        assert isinstance(updater_for("diet"), DietUpdater)
