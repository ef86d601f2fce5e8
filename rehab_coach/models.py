# models.py
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SessionRecord(BaseModel):
    date: str                       # ISO-8601
    reps: int = Field(1, ge=1)
    accuracy: float = Field(..., ge=0.0, le=100.0)


class ExerciseProgress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_reps: int = Field(0, ge=0, alias="totalReps")
    sessions: List[SessionRecord] = Field(default_factory=list)


# exerciseId -> ExerciseProgress, the whole persisted document
ProgressDocument = Dict[str, ExerciseProgress]


class KeypointIn(BaseModel):
    name: str
    x: float
    y: float
    confidence: float = Field(
        0.0,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("confidence", "score"),
    )


class EvaluateRequest(BaseModel):
    exercise_id: str
    keypoints: List[KeypointIn]


class EvaluateResponse(BaseModel):
    exercise_id: str
    accuracy: float
    feedback: str
    engaged: bool
    side: Optional[str] = None      # "left" / "right", None when out of view
    angle: Optional[float] = None


class AngleRangeOut(BaseModel):
    joints: List[str]
    min: float
    max: float


class ExerciseSummary(BaseModel):
    id: str
    name: str
    target_area: str
    short_description: str
    instructions: List[str]
    sides: Dict[str, AngleRangeOut]
