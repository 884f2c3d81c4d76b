from __future__ import annotations

import time
from typing import Any

from delayq.models import ScheduledJob, Timestamp, to_timestamp
from delayq.store import TimestampStore


def enqueue_at(store: TimestampStore, at: Timestamp, queue: str, task: str, *args: Any) -> int:
    """Store a job to be enqueued on ``queue`` once ``at`` has passed."""
    job = ScheduledJob(queue=queue, task=task, args=list(args))
    timestamp = to_timestamp(at)
    store.delayed_push(timestamp, job)
    return timestamp


def enqueue_in(store: TimestampStore, seconds: float, queue: str, task: str, *args: Any) -> int:
    return enqueue_at(store, int(time.time() + seconds), queue, task, *args)
