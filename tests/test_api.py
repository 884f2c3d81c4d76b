from fastapi.testclient import TestClient

from delayq.config import settings
from delayq.main import app
from delayq.models import ScheduledJob
from delayq.queue import InMemoryJobQueue
from delayq.runtime import runtime
from delayq.store import InMemoryTimestampStore

client = TestClient(app)
ADMIN = {"x-admin-key": "dev-admin-key"}


def setup_function() -> None:
    settings.proctitle_enabled = False
    runtime.set_test_backends(InMemoryTimestampStore(), InMemoryJobQueue())


def test_health() -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_schedule_requires_admin_key() -> None:
    response = client.post("/delayed", json={"queue": "emails", "class": "Send", "at": 100})
    assert response.status_code == 401
    assert runtime.store.get_delayed_queue_schedule_size() == 0


def test_schedule_requires_exactly_one_due_time() -> None:
    response = client.post(
        "/delayed",
        json={"queue": "emails", "class": "Send", "at": 100, "in_seconds": 5},
        headers=ADMIN,
    )
    assert response.status_code == 422


def test_schedule_then_summary() -> None:
    response = client.post(
        "/delayed",
        json={"queue": "emails", "class": "Send", "args": ["x"], "at": 100},
        headers=ADMIN,
    )

    assert response.status_code == 200
    assert response.json() == {"status": "scheduled", "timestamp": 100}
    assert client.get("/delayed").json() == {"timestamps": 1, "size": 1, "next_timestamp": 100}


def test_manual_drain_dispatches_due_jobs_only() -> None:
    runtime.store.delayed_push(100, ScheduledJob(queue="emails", task="Send", args=["x"]))
    runtime.store.delayed_push(100, ScheduledJob(queue="emails", task="Send", args=["y"]))
    client.post(
        "/delayed",
        json={"queue": "emails", "class": "Send", "args": ["z"], "in_seconds": 3600},
        headers=ADMIN,
    )

    response = client.post("/delayed/drain", headers=ADMIN)

    assert response.json() == {"status": "ok", "dispatched": 2}
    assert isinstance(runtime.queue, InMemoryJobQueue)
    assert [job.args for job in runtime.queue.items] == [["x"], ["y"]]
    assert client.get("/delayed").json()["size"] == 1
    assert client.get("/delayed").json()["timestamps"] == 1
