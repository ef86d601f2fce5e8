# client/rep_demo.py
"""
Replay a recorded keypoint stream through an exercise session.

Input is JSON lines, one pose observation per line:
  {"t": 12.34, "keypoints": [{"name": "left_knee", "x": 310, "y": 402, "score": 0.91}, ...]}

"t" is in seconds and only drives the rep debounce, so relative times are
fine; when it is missing the wall clock is used. Saved reps are always
dated with the current wall-clock time.
"""

import argparse
import json
import logging
import sys
from typing import Iterator, Optional, TextIO, Tuple

from .. import config
from ..log import setup_logging
from .exercises import EXERCISES, UnknownExerciseError, get_exercise
from .pose_utils import Pose, pose_from_keypoints
from .progress import (
    HttpProgressStore,
    InMemoryProgressStore,
    JsonFileProgressStore,
    ProgressStore,
    QueuedProgressStore,
)
from .session import ExerciseSession

logger = logging.getLogger(__name__)

# ---------- Exercise options ----------
EXERCISE_OPTIONS = {str(i): ex_id for i, ex_id in enumerate(EXERCISES, start=1)}


def choose_exercise() -> str:
    print("Select exercise to track:")
    for key, ex_id in EXERCISE_OPTIONS.items():
        print(f"  {key}. {EXERCISES[ex_id].name}")
    choice = input(f"Enter 1-{len(EXERCISE_OPTIONS)}: ").strip()
    exercise = EXERCISE_OPTIONS.get(choice, EXERCISE_OPTIONS["1"])
    print(f"\nYou selected: {exercise}\n")
    return exercise


def build_store(kind: str, progress_path: Optional[str] = None) -> ProgressStore:
    if kind == "memory":
        return InMemoryProgressStore()
    # I/O-backed stores write from a background thread so replay never blocks
    if kind == "http":
        return QueuedProgressStore(HttpProgressStore(config.BACKEND_URL))
    return QueuedProgressStore(JsonFileProgressStore(progress_path or config.PROGRESS_PATH))


def read_frames(stream: TextIO) -> Iterator[Tuple[Optional[float], Pose]]:
    """Yield (timestamp, pose) per line; malformed lines are logged and skipped."""
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            frame = json.loads(line)
            t = frame.get("t")
            t = float(t) if t is not None else None
            pose = pose_from_keypoints(frame.get("keypoints", []))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Skipping line %d: %s", lineno, e)
            continue
        yield t, pose


def run(session: ExerciseSession, stream: TextIO, out: TextIO = sys.stdout) -> int:
    last_feedback = None
    for t, pose in read_frames(stream):
        result = session.tick(pose, now=t)

        # Only print feedback when it changes, like a UI overlay would
        if result.score.feedback != last_feedback:
            last_feedback = result.score.feedback
            print(f"[{result.score.accuracy:5.1f}%] {last_feedback}", file=out)

        if result.rep_completed:
            print(f"=== REP COMPLETED (rep={result.rep_count}) ===", file=out)
        if result.store_error:
            print(f"    (not saved: {result.store_error})", file=out)

    print(f"\nTotal reps: {session.rep_count}", file=out)
    return session.rep_count


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Replay recorded keypoints through the form coach.")
    parser.add_argument("input", nargs="?", default="-", help="JSON lines file ('-' for stdin)")
    parser.add_argument("-e", "--exercise", help="exercise id, e.g. knee-extension")
    parser.add_argument("--store", choices=("file", "memory", "http"), default="file")
    parser.add_argument("--progress-path", help="progress JSON file for --store file")
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    exercise_id = args.exercise or choose_exercise()
    try:
        get_exercise(exercise_id)
    except UnknownExerciseError as e:
        print(f"Error: {e}. Known: {', '.join(EXERCISES)}", file=sys.stderr)
        return 2

    store = build_store(args.store, args.progress_path)
    session = ExerciseSession(exercise_id, store)
    try:
        if args.input == "-":
            run(session, sys.stdin)
        else:
            with open(args.input, "r", encoding="utf-8") as f:
                run(session, f)
    finally:
        if isinstance(store, QueuedProgressStore):
            store.close()
            for error in store.drain_errors():
                print(f"Not saved: {error}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
