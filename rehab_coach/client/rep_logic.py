# client/rep_logic.py

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Minimum time between two accepted phase transitions (seconds)
DEBOUNCE_SECONDS = 1.0


class Phase(str, Enum):
    DISENGAGED = "DISENGAGED"   # initial, released position
    ENGAGED = "ENGAGED"         # holding the target position


@dataclass
class RepState:
    phase: Phase = Phase.DISENGAGED
    rep_count: int = 0
    # None until the first transition of a fresh session
    last_transition_at: Optional[float] = None


@dataclass(frozen=True)
class RepEvent:
    """A confirmed repetition: ENGAGED -> DISENGAGED."""
    rep_count: int
    timestamp: float
    accuracy: float


def _guard_open(state: RepState, now: float, debounce_s: float) -> bool:
    if state.last_transition_at is None:
        return True
    return now - state.last_transition_at > debounce_s


def reset_rep_state(now: float) -> RepState:
    """Fresh state for a restarted or switched session."""
    return RepState(phase=Phase.DISENGAGED, rep_count=0, last_transition_at=now)


# -------------------------------------------------------------
# Main update function
# -------------------------------------------------------------

def update_rep_state(
    state: RepState,
    engaged: bool,
    accuracy: float,
    now: float,
    debounce_s: float = DEBOUNCE_SECONDS,
) -> Optional[RepEvent]:
    """
    Two-state rep detection with a refractory period.

    - DISENGAGED -> ENGAGED when the pose reaches the target position.
    - ENGAGED -> DISENGAGED when it leaves it again; this completes a rep.
    - Either transition is only accepted if more than debounce_s seconds
      passed since the previous accepted transition.

    Mutates state in place. Returns a RepEvent when a rep completed,
    otherwise None.
    """
    if state.phase == Phase.DISENGAGED:
        if engaged and _guard_open(state, now, debounce_s):
            state.phase = Phase.ENGAGED
            state.last_transition_at = now
        return None

    # Phase.ENGAGED
    if not engaged and _guard_open(state, now, debounce_s):
        state.phase = Phase.DISENGAGED
        state.rep_count += 1
        state.last_transition_at = now
        return RepEvent(rep_count=state.rep_count, timestamp=now, accuracy=float(accuracy))

    return None
