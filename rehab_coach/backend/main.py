# backend/main.py
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Dict, List

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .. import log
from ..client.exercises import EXERCISES, ExerciseDefinition, UnknownExerciseError, get_exercise
from ..client.pose_utils import pose_from_keypoints
from ..client.progress import JsonFileProgressStore, ProgressStore, ProgressStoreError
from ..client.scoring import evaluate
from ..models import (
    AngleRangeOut,
    EvaluateRequest,
    EvaluateResponse,
    ExerciseProgress,
    ExerciseSummary,
    SessionRecord,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.setup_logging()
    yield


app = FastAPI(title="Rehab Form Coach Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_store() -> ProgressStore:
    return JsonFileProgressStore()


def _require_exercise(exercise_id: str) -> ExerciseDefinition:
    try:
        return get_exercise(exercise_id)
    except UnknownExerciseError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _summary(exercise: ExerciseDefinition) -> ExerciseSummary:
    return ExerciseSummary(
        id=exercise.id,
        name=exercise.name,
        target_area=exercise.target_area,
        short_description=exercise.short_description,
        instructions=list(exercise.instructions),
        sides={
            side.value: AngleRangeOut(
                joints=list(spec.joints),
                min=spec.acceptable.min,
                max=spec.acceptable.max,
            )
            for side, spec in exercise.angle_specs_by_side.items()
        },
    )


@app.get("/")
def health_check():
    return {"status": "ok", "exercises": len(EXERCISES)}


@app.get("/exercises", response_model=List[ExerciseSummary])
def list_exercises():
    return [_summary(ex) for ex in EXERCISES.values()]


@app.post("/evaluate", response_model=EvaluateResponse)
def evaluate_pose(req: EvaluateRequest):
    exercise = _require_exercise(req.exercise_id)
    pose = pose_from_keypoints(kp.model_dump() for kp in req.keypoints)
    result = evaluate(pose, exercise)
    return EvaluateResponse(
        exercise_id=exercise.id,
        accuracy=result.accuracy,
        feedback=result.feedback,
        engaged=result.engaged,
        side=result.side.value if result.side else None,
        angle=result.angle,
    )


@app.post("/progress/{exercise_id}/sessions", response_model=ExerciseProgress)
def append_session(exercise_id: str, record: SessionRecord, store: ProgressStore = Depends(get_store)):
    _require_exercise(exercise_id)
    try:
        progress = store.append(exercise_id, record)
    except ProgressStoreError as e:
        logger.error("Append failed for %s: %s", exercise_id, e)
        raise HTTPException(status_code=503, detail="Progress store unavailable")
    return progress.model_dump(by_alias=True)


@app.get("/progress", response_model=Dict[str, ExerciseProgress])
def read_progress(store: ProgressStore = Depends(get_store)):
    try:
        document = store.load()
    except ProgressStoreError as e:
        logger.error("Progress read failed: %s", e)
        raise HTTPException(status_code=503, detail="Progress store unavailable")
    return {ex_id: p.model_dump(by_alias=True) for ex_id, p in document.items()}


@app.get("/progress/{exercise_id}", response_model=ExerciseProgress)
def read_exercise_progress(exercise_id: str, store: ProgressStore = Depends(get_store)):
    _require_exercise(exercise_id)
    try:
        progress = store.get(exercise_id)
    except ProgressStoreError as e:
        logger.error("Progress read failed for %s: %s", exercise_id, e)
        raise HTTPException(status_code=503, detail="Progress store unavailable")
    return progress.model_dump(by_alias=True)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
