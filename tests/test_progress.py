import json

import pytest
import requests

from rehab_coach.client.progress import (
    HttpProgressStore,
    InMemoryProgressStore,
    JsonFileProgressStore,
    ProgressStoreError,
    QueuedProgressStore,
)
from rehab_coach.models import SessionRecord


def record(accuracy=52.5, date="2024-05-01T10:00:00+00:00"):
    return SessionRecord(date=date, reps=1, accuracy=accuracy)


def test_in_memory_totals_follow_appends():
    store = InMemoryProgressStore()
    store.append("knee-extension", record(50.0))
    progress = store.append("knee-extension", record(60.0))
    store.append("hip-bridge", record(40.0))

    assert progress.total_reps == 2
    assert [s.accuracy for s in store.get("knee-extension").sessions] == [50.0, 60.0]
    assert store.get("hip-bridge").total_reps == 1
    assert store.get("ankle-dorsiflexion").total_reps == 0


def test_in_memory_load_is_a_copy():
    store = InMemoryProgressStore()
    store.append("knee-extension", record())
    snapshot = store.load()
    snapshot["knee-extension"].sessions.clear()
    assert store.get("knee-extension").total_reps == 1


def test_json_file_document_shape(tmp_path):
    path = tmp_path / "progress.json"
    store = JsonFileProgressStore(str(path))
    store.append("knee-extension", record(52.5))
    store.append("knee-extension", record(60.0, date="2024-05-01T10:00:05+00:00"))

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw == {
        "knee-extension": {
            "totalReps": 2,
            "sessions": [
                {"date": "2024-05-01T10:00:00+00:00", "reps": 1, "accuracy": 52.5},
                {"date": "2024-05-01T10:00:05+00:00", "reps": 1, "accuracy": 60.0},
            ],
        }
    }


def test_json_file_survives_reopen(tmp_path):
    path = str(tmp_path / "nested" / "progress.json")
    JsonFileProgressStore(path).append("hip-bridge", record())
    reopened = JsonFileProgressStore(path)
    assert reopened.get("hip-bridge").total_reps == 1
    reopened.append("hip-bridge", record())
    assert JsonFileProgressStore(path).get("hip-bridge").total_reps == 2


def test_json_file_missing_is_empty(tmp_path):
    assert JsonFileProgressStore(str(tmp_path / "none.json")).load() == {}


def test_json_file_corrupt_raises_store_error(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileProgressStore(str(path))
    with pytest.raises(ProgressStoreError):
        store.load()
    with pytest.raises(ProgressStoreError):
        store.append("knee-extension", record())


def test_json_file_wrong_shape_raises_store_error(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text(json.dumps({"knee-extension": {"totalReps": "many"}}), encoding="utf-8")
    with pytest.raises(ProgressStoreError):
        JsonFileProgressStore(str(path)).load()


class FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append(("POST", url, json, timeout))
        if self.exc:
            raise self.exc
        return self.response

    def get(self, url, timeout=None):
        self.calls.append(("GET", url, None, timeout))
        if self.exc:
            raise self.exc
        return self.response


def test_http_append_posts_record():
    fake = FakeSession(FakeResponse({"totalReps": 3, "sessions": [record().model_dump()] * 3}))
    store = HttpProgressStore("http://coach.local/", timeout=1.0, session=fake)

    progress = store.append("knee-extension", record())

    assert progress.total_reps == 3
    method, url, body, timeout = fake.calls[0]
    assert method == "POST"
    assert url == "http://coach.local/progress/knee-extension/sessions"
    assert body == {"date": "2024-05-01T10:00:00+00:00", "reps": 1, "accuracy": 52.5}
    assert timeout == 1.0


def test_http_connection_error_becomes_store_error():
    store = HttpProgressStore("http://coach.local", session=FakeSession(exc=requests.ConnectionError("refused")))
    with pytest.raises(ProgressStoreError):
        store.append("knee-extension", record())


def test_http_error_status_becomes_store_error():
    store = HttpProgressStore("http://coach.local", session=FakeSession(FakeResponse({}, status=503)))
    with pytest.raises(ProgressStoreError):
        store.load()


def test_http_load_parses_document():
    payload = {"hip-bridge": {"totalReps": 1, "sessions": [record().model_dump()]}}
    store = HttpProgressStore("http://coach.local", session=FakeSession(FakeResponse(payload)))
    document = store.load()
    assert document["hip-bridge"].total_reps == 1


def test_queued_store_writes_in_background():
    inner = InMemoryProgressStore()
    queued = QueuedProgressStore(inner)
    assert queued.append("knee-extension", record(50.0)) is None
    queued.append("knee-extension", record(60.0))
    queued.flush()

    assert inner.get("knee-extension").total_reps == 2
    assert queued.get("knee-extension").total_reps == 2
    assert queued.drain_errors() == []
    queued.close()


def test_queued_store_collects_failures_once():
    class Unreachable(InMemoryProgressStore):
        def append(self, exercise_id, record):
            raise ProgressStoreError("connection refused")

    queued = QueuedProgressStore(Unreachable())
    queued.append("knee-extension", record())
    queued.append("hip-bridge", record())
    queued.close()

    assert queued.drain_errors() == ["connection refused", "connection refused"]
    assert queued.drain_errors() == []


def test_queued_store_close_stops_worker():
    queued = QueuedProgressStore(InMemoryProgressStore())
    queued.append("knee-extension", record())
    queued.close()
    assert not queued._worker.is_alive()
    assert queued.inner.get("knee-extension").total_reps == 1
