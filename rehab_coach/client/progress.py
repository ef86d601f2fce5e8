# client/progress.py

import json
import logging
import os
import queue
import tempfile
import threading
from abc import ABC, abstractmethod
from copy import deepcopy
from typing import Dict, List, Optional, Tuple

import requests
from pydantic import ValidationError

from .. import config
from ..models import ExerciseProgress, ProgressDocument, SessionRecord

logger = logging.getLogger(__name__)


class ProgressStoreError(Exception):
    """The store could not read or append a session record."""


class ProgressStore(ABC):
    """
    Append-only, exercise-keyed history of completed reps.

    Shape: exerciseId -> {totalReps, sessions: [{date, reps, accuracy}]}.
    totalReps always equals the number of appended sessions.
    """

    @abstractmethod
    def append(self, exercise_id: str, record: SessionRecord) -> Optional[ExerciseProgress]:
        """Updated progress, or None when the write was only queued."""

    @abstractmethod
    def load(self) -> ProgressDocument:
        ...

    def get(self, exercise_id: str) -> ExerciseProgress:
        return self.load().get(exercise_id) or ExerciseProgress()

    def drain_errors(self) -> List[str]:
        """Failures of earlier background appends since the last call."""
        return []


def _append_to(document: ProgressDocument, exercise_id: str, record: SessionRecord) -> ExerciseProgress:
    progress = document.get(exercise_id) or ExerciseProgress()
    progress.sessions.append(record)
    progress.total_reps += 1
    document[exercise_id] = progress
    return progress


# ----------------- In-memory -----------------

class InMemoryProgressStore(ProgressStore):
    def __init__(self):
        self._document: ProgressDocument = {}
        self._lock = threading.Lock()

    def append(self, exercise_id, record):
        with self._lock:
            progress = _append_to(self._document, exercise_id, record)
            return progress.model_copy(deep=True)

    def load(self):
        with self._lock:
            return deepcopy(self._document)


# ----------------- JSON file -----------------

class JsonFileProgressStore(ProgressStore):
    """
    Whole document kept in one JSON file. Every append rewrites the file
    through a temp file + os.replace so readers never see a partial write.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or config.PROGRESS_PATH
        self._lock = threading.Lock()

    def _read(self) -> ProgressDocument:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ProgressStoreError(f"Could not read progress file {self.path}: {e}") from e

        if not isinstance(raw, dict):
            raise ProgressStoreError(f"Progress file {self.path} is not a JSON object")
        try:
            return {ex_id: ExerciseProgress.model_validate(entry) for ex_id, entry in raw.items()}
        except ValidationError as e:
            raise ProgressStoreError(f"Progress file {self.path} is malformed: {e}") from e

    def _write(self, document: ProgressDocument) -> None:
        payload = {ex_id: p.model_dump(by_alias=True) for ex_id, p in document.items()}
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".progress-", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise ProgressStoreError(f"Could not write progress file {self.path}: {e}") from e

    def append(self, exercise_id, record):
        with self._lock:
            document = self._read()
            progress = _append_to(document, exercise_id, record)
            self._write(document)
        logger.debug("Appended rep for %s to %s (total %d)", exercise_id, self.path, progress.total_reps)
        return progress

    def load(self):
        with self._lock:
            return self._read()


# ----------------- HTTP (backend) -----------------

class HttpProgressStore(ProgressStore):
    """Posts every record to the backend's /progress endpoints."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or config.BACKEND_URL).rstrip("/")
        self.timeout = config.HTTP_TIMEOUT if timeout is None else timeout
        self._http = session or requests.Session()

    def append(self, exercise_id, record):
        url = f"{self.base_url}/progress/{exercise_id}/sessions"
        try:
            resp = self._http.post(url, json=record.model_dump(), timeout=self.timeout)
            resp.raise_for_status()
            return ExerciseProgress.model_validate(resp.json())
        except (requests.RequestException, ValueError) as e:
            raise ProgressStoreError(f"Backend append failed for {exercise_id}: {e}") from e

    def load(self):
        url = f"{self.base_url}/progress"
        try:
            resp = self._http.get(url, timeout=self.timeout)
            resp.raise_for_status()
            raw: Dict[str, dict] = resp.json()
            return {ex_id: ExerciseProgress.model_validate(entry) for ex_id, entry in raw.items()}
        except (requests.RequestException, ValueError) as e:
            raise ProgressStoreError(f"Backend read failed: {e}") from e


# ----------------- Background writer -----------------

class QueuedProgressStore(ProgressStore):
    """
    Hands appends to a background worker thread so the caller never waits
    on the inner store's I/O. Failed appends are collected and reported
    through drain_errors().
    """

    def __init__(self, inner: ProgressStore):
        self.inner = inner
        self._queue: "queue.Queue[Optional[Tuple[str, SessionRecord]]]" = queue.Queue()
        self._errors: List[str] = []
        self._errors_lock = threading.Lock()
        self._worker = threading.Thread(target=self._run, name="progress-writer", daemon=True)
        self._worker.start()

    def _run(self):
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                exercise_id, record = item
                self.inner.append(exercise_id, record)
            except ProgressStoreError as e:
                logger.warning("Background append failed for %s: %s", item[0], e)
                with self._errors_lock:
                    self._errors.append(str(e))
            except Exception as e:
                logger.exception("Progress writer crashed on %s", item[0])
                with self._errors_lock:
                    self._errors.append(f"{type(e).__name__}: {e}")
            finally:
                self._queue.task_done()

    def append(self, exercise_id, record):
        self._queue.put((exercise_id, record))
        return None

    def load(self):
        return self.inner.load()

    def drain_errors(self):
        with self._errors_lock:
            errors, self._errors = self._errors, []
        return errors

    def flush(self) -> None:
        """Block until every queued append was attempted."""
        self._queue.join()

    def close(self) -> None:
        self.flush()
        self._queue.put(None)
        self._worker.join()
