"""
Execution Payload Schemas

Pydantic models describing what each domain accepts as a daily execution.
Field names are snake_case; camelCase aliases are accepted as well.
"""

from typing import Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic.alias_generators import to_camel

from .domains import Domain, DayType


class _PayloadModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ExecutionPayload(_PayloadModel):
    """Fields shared by every execution."""
    completion: float = Field(100.0, ge=0, le=100, allow_inf_nan=False)


# --- Training ---------------------------------------------------------

class ExerciseInput(_PayloadModel):
    name: str = Field(min_length=1)
    sets: int = Field(gt=0)
    reps: int = Field(gt=0)
    load: float = Field(gt=0, allow_inf_nan=False)
    target_reps: Optional[int] = Field(None, gt=0)
    rpe: float = Field(8.0, ge=0, le=10, allow_inf_nan=False)
    rest_seconds: int = Field(120, ge=0)


class TrainingPayload(ExecutionPayload):
    exercises: List[ExerciseInput] = Field(min_length=1)
    day_type: Optional[DayType] = None
    consecutive_days: int = Field(1, ge=0)


# --- Diet -------------------------------------------------------------

class DietPayload(ExecutionPayload):
    calories: float = Field(gt=0, allow_inf_nan=False)
    protein: float = Field(ge=0, allow_inf_nan=False)
    carbs: float = Field(ge=0, allow_inf_nan=False)
    fat: float = Field(ge=0, allow_inf_nan=False)
    weight: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    binge_flag: StrictBool = False


# --- Finance ----------------------------------------------------------

class FinancePayload(ExecutionPayload):
    monthly_income: float = Field(ge=0, allow_inf_nan=False)
    monthly_expenses: float = Field(ge=0, allow_inf_nan=False)
    savings: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    investment_value: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    gambling_flag: StrictBool = False


# --- Academics --------------------------------------------------------

class SubjectInput(_PayloadModel):
    name: str = Field(min_length=1)
    mastery: float = Field(ge=0, le=100, allow_inf_nan=False)
    exam_performance: float = Field(0.0, ge=0, le=10, allow_inf_nan=False)


class AcademicsPayload(ExecutionPayload):
    study_hours_week: float = Field(ge=0, le=168, allow_inf_nan=False)
    target_hours: Optional[float] = Field(None, gt=0, le=168, allow_inf_nan=False)
    subjects: Optional[List[SubjectInput]] = None


# --- Spiritual --------------------------------------------------------

class SpiritualPayload(ExecutionPayload):
    relapse_flag: StrictBool
    prayed: StrictBool = False
    sacramental_frequency: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    confession: Optional[str] = None


# --- Mental -----------------------------------------------------------

class MentalPayload(ExecutionPayload):
    emotional_volatility: float = Field(ge=0, le=100, allow_inf_nan=False)
    dopamine_index: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    impulse_resistance: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    mood_score: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    recent_relapses: int = Field(0, ge=0)
    triggers: List[str] = Field(default_factory=list)


# --- Content ----------------------------------------------------------

class ContentPayload(ExecutionPayload):
    content_produced_week: int = Field(ge=0)
    engagement_score: float = Field(0.0, ge=0, le=100, allow_inf_nan=False)
    growth_rate: float = Field(0.0, ge=0, le=100, allow_inf_nan=False)
    days_since_publish: int = Field(0, ge=0)


PAYLOAD_MODELS: Dict[Domain, Type[ExecutionPayload]] = {
    Domain.TRAINING: TrainingPayload,
    Domain.DIET: DietPayload,
    Domain.FINANCE: FinancePayload,
    Domain.ACADEMICS: AcademicsPayload,
    Domain.SPIRITUAL: SpiritualPayload,
    Domain.MENTAL: MentalPayload,
    Domain.CONTENT: ContentPayload,
}
