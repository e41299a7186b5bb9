"""
Tests for Execution Validator Module

Tests the per-domain payload schemas and the strict-mode gate.
"""

import pytest
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ascension_engine.domains import Domain, UnknownDomainError
from ascension_engine.validator import ExecutionValidator, ValidationRejected
from ascension_engine.payloads import TrainingPayload


def bench(**overrides):
    exercise = {"name": "Bench Press", "sets": 4, "reps": 6, "load": 80}
    exercise.update(overrides)
    return {"exercises": [exercise]}


class TestExecutionValidator:
    """Test cases for ExecutionValidator class."""

    @pytest.fixture
    def validator(self):
        return ExecutionValidator()

    def test_valid_training_payload(self, validator):
        result = validator.validate("training", bench())

        assert result.valid
        assert result.reason is None
        assert isinstance(result.payload, TrainingPayload)
        assert result.payload.exercises[0].load == 80

    def test_zero_load_rejected(self, validator):
        result = validator.validate(Domain.TRAINING, bench(load=0))

        assert not result.valid
        assert "load" in result.reason
        assert result.payload is None

    def test_empty_exercise_list_rejected(self, validator):
        result = validator.validate("training", {"exercises": []})

        assert not result.valid

    def test_negative_macros_rejected(self, validator):
        result = validator.validate("diet", {"calories": 2000, "protein": -5, "carbs": 200, "fat": 60})

        assert not result.valid
        assert "protein" in result.reason

    def test_spiritual_requires_explicit_relapse_flag(self, validator):
        missing = validator.validate("spiritual", {"prayed": True})
        not_bool = validator.validate("spiritual", {"relapseFlag": "yes"})
        explicit = validator.validate("spiritual", {"relapseFlag": False})

        assert not missing.valid
        assert "relapse" in missing.reason.lower()
        assert not not_bool.valid
        assert explicit.valid

    def test_mental_requires_numeric_volatility(self, validator):
        assert not validator.validate("mental", {}).valid
        assert not validator.validate("mental", {"emotionalVolatility": "high"}).valid
        assert validator.validate("mental", {"emotionalVolatility": 40}).valid

    def test_accepts_snake_and_camel_case(self, validator):
        camel = validator.validate("finance", {"monthlyIncome": 3000, "monthlyExpenses": 2000})
        snake = validator.validate("finance", {"monthly_income": 3000, "monthly_expenses": 2000})

        assert camel.valid and snake.valid
        assert camel.payload.monthly_income == snake.payload.monthly_income

    def test_non_mapping_payload_rejected(self, validator):
        result = validator.validate("content", [1, 2, 3])

        assert not result.valid

    def test_blocked_domain_rejected(self, validator):
        payload = {"contentProducedWeek": 3}
        result = validator.validate("content", payload, blocked=(Domain.CONTENT,))

        assert not result.valid
        assert "Strict mode" in result.reason
        assert validator.validate("content", payload).valid

    def test_unknown_domain_raises(self, validator):
        with pytest.raises(UnknownDomainError):
            validator.validate("gaming", {})

        # Programmer error, but still a ValueError for callers
        with pytest.raises(ValueError):
            validator.validate(None, {})

    def test_require_raises_on_rejection(self, validator):
        with pytest.raises(ValidationRejected) as exc_info:
            validator.require("training", bench(sets=0))

        assert exc_info.value.domain == Domain.TRAINING
        assert "sets" in exc_info.value.reason

    def test_validation_has_no_side_effects(self, validator):
        payload = bench()
        snapshot = {"exercises": [dict(payload["exercises"][0])]}

        validator.validate("training", payload)

        assert payload == snapshot


class TestDomainParsing:
    """Test cases for Domain.parse."""

    def test_case_insensitive(self):
        assert Domain.parse("Training") == Domain.TRAINING
        assert Domain.parse(" diet ") == Domain.DIET

    def test_member_passthrough(self):
        assert Domain.parse(Domain.MENTAL) is Domain.MENTAL

    def test_unknown_reports_value(self):
        with pytest.raises(UnknownDomainError) as exc_info:
            Domain.parse("treino")

        assert exc_info.value.domain == "treino"
