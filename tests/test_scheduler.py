import pytest

from delayq import scheduler
from delayq.config import settings
from delayq.queue import InMemoryJobQueue
from delayq.runtime import runtime
from delayq.store import InMemoryTimestampStore


def setup_function() -> None:
    settings.proctitle_enabled = False
    runtime.set_test_backends(InMemoryTimestampStore(), InMemoryJobQueue())


def test_loop_does_not_start_without_redis(monkeypatch) -> None:
    monkeypatch.setattr(runtime, "initialize", lambda: None)
    assert scheduler.run_scheduler_loop(0.1) is False


def test_loop_runs_worker_with_interval(monkeypatch) -> None:
    intervals = []

    class FakeWorker:
        status = None

        def work(self, interval):
            intervals.append(interval)

    monkeypatch.setattr(runtime, "initialize", lambda: None)
    monkeypatch.setattr(runtime, "redis", object())
    monkeypatch.setattr(runtime, "worker", lambda: FakeWorker())

    assert scheduler.run_scheduler_loop(0.1) is True
    assert intervals == [0.1]


def test_worker_errors_propagate(monkeypatch) -> None:
    class CrashingWorker:
        status = "Processing Delayed Items"

        def work(self, interval):
            raise ConnectionError("redis went away")

    monkeypatch.setattr(runtime, "initialize", lambda: None)
    monkeypatch.setattr(runtime, "redis", object())
    monkeypatch.setattr(runtime, "worker", lambda: CrashingWorker())

    with pytest.raises(ConnectionError):
        scheduler.run_scheduler_loop()
