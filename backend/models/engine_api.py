"""
Engine API Models

Pydantic request/response bodies for the HTTP surface and the MongoDB
document schema for stored snapshots.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone


class SnapshotDocument(BaseModel):
    """MongoDB document schema for one program's engine snapshot."""
    model_config = ConfigDict(extra="ignore")  # Ignore MongoDB's _id field

    key: str
    snapshot: Dict[str, Any] = {}
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ExecutionResponse(BaseModel):
    """API response for a submitted execution."""
    domain: str
    accepted: bool
    reason: Optional[str] = None
    xp_granted: int = 0
    global_score: Optional[float] = None
    violations: List[str] = []
    notes: List[str] = []


class DailyEvaluationResponse(BaseModel):
    """API response from closing a day."""
    day: int
    alert_state: str
    failed: bool
    streak: int
    xp_delta: int
    restriction_level: int
    strict_mode_enabled: bool
    strict_mode_entered: bool = False
    strict_mode_exited: bool = False
    timestamp: Optional[str] = None


class DashboardResponse(BaseModel):
    day: int
    total_days: int
    global_score: float
    level: int
    xp: int
    streak: int
    discipline_index: float
    stability_index: float
    growth_index: float
    alert_state: str
    domain_scores: Dict[str, float]
    strict_mode_enabled: bool
    restriction_level: int
    regression_risk: float
    high_risk_flag: bool


class GuidedSessionResponse(BaseModel):
    day_type: str
    directives: List[str] = []
    deload_recommended: bool = False


class DietGuideRequest(BaseModel):
    """Macros already consumed today."""
    calories: float = Field(0.0, ge=0)
    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fat: float = Field(0.0, ge=0)


class MentorRequest(BaseModel):
    relapse: bool = False
    binge: bool = False
    threshold: Optional[float] = Field(None, ge=0, le=100)


class MentorResponse(BaseModel):
    rule: str
    message: str
    domain: Optional[str] = None
