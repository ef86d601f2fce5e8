# client/session.py

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ..models import SessionRecord
from .exercises import ExerciseDefinition, get_exercise
from .pose_utils import Pose
from .progress import ProgressStore, ProgressStoreError
from .rep_logic import DEBOUNCE_SECONDS, Phase, RepState, reset_rep_state, update_rep_state
from .scoring import ScoreResult, evaluate

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TickResult:
    score: ScoreResult
    rep_count: int
    phase: Phase
    rep_completed: bool = False
    record: Optional[SessionRecord] = None
    # Set when a rep counted but its record could not be persisted,
    # on this tick or in an earlier queued append
    store_error: Optional[str] = None


class ExerciseSession:
    """
    One active exercise for one user.

    Owns the RepState and serializes ticks with a lock, so the debounce
    guard and the rep count are always read and written together.
    Separate sessions share nothing and can run in parallel.
    """

    def __init__(
        self,
        exercise_id: str,
        store: ProgressStore,
        clock: Callable[[], float] = time.time,
        debounce_s: float = DEBOUNCE_SECONDS,
        wall_clock: Callable[[], datetime] = utc_now,
    ):
        # Unknown ids raise before any state exists
        self.exercise: ExerciseDefinition = get_exercise(exercise_id)
        self.store = store
        # clock drives the debounce guard, wall_clock dates the saved records
        self.clock = clock
        self.wall_clock = wall_clock
        self.debounce_s = debounce_s
        self.state = RepState()
        self._lock = threading.Lock()

    @property
    def exercise_id(self) -> str:
        return self.exercise.id

    @property
    def rep_count(self) -> int:
        return self.state.rep_count

    def tick(self, pose: Pose, now: Optional[float] = None) -> TickResult:
        with self._lock:
            if now is None:
                now = self.clock()

            score = evaluate(pose, self.exercise)
            event = update_rep_state(self.state, score.engaged, score.accuracy, now, self.debounce_s)

            # Failures of earlier queued appends surface on the next tick
            pending = self.store.drain_errors()

            if event is None:
                return TickResult(
                    score=score,
                    rep_count=self.state.rep_count,
                    phase=self.state.phase,
                    store_error="; ".join(pending) or None,
                )

            record = SessionRecord(date=self.wall_clock().isoformat(), reps=1, accuracy=event.accuracy)
            logger.info("Rep %d completed for %s (accuracy %.1f)",
                        event.rep_count, self.exercise.id, event.accuracy)

            try:
                self.store.append(self.exercise.id, record)
            except ProgressStoreError as e:
                # The rep was real; only its history entry is lost
                logger.warning("Could not persist rep %d for %s: %s", event.rep_count, self.exercise.id, e)
                pending.append(str(e))

            return TickResult(
                score=score,
                rep_count=self.state.rep_count,
                phase=self.state.phase,
                rep_completed=True,
                record=record,
                store_error="; ".join(pending) or None,
            )

    def reset(self, now: Optional[float] = None) -> None:
        """Restart counting. Persisted history is left untouched."""
        with self._lock:
            self.state = reset_rep_state(self.clock() if now is None else now)

    def switch_exercise(self, exercise_id: str, now: Optional[float] = None) -> None:
        exercise = get_exercise(exercise_id)
        with self._lock:
            self.exercise = exercise
            self.state = reset_rep_state(self.clock() if now is None else now)
        logger.info("Switched session to %s", exercise_id)
