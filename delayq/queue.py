from __future__ import annotations

import time
import uuid
from typing import Any, Protocol

import redis

from delayq.models import QueuedJob


class JobQueue(Protocol):
    def enqueue(self, queue: str, task: str, *args: Any) -> str:
        ...


def _new_job(queue: str, task: str, args: tuple[Any, ...]) -> QueuedJob:
    if not queue:
        raise ValueError("Jobs must be put in a queue")
    if not task:
        raise ValueError("Jobs must be given a class")
    return QueuedJob(id=uuid.uuid4().hex, queue=queue, task=task, args=list(args), queue_time=time.time())


class RedisJobQueue:
    """Immediate-execution queues in the Resque layout."""

    def __init__(self, redis_client: redis.Redis, namespace: str = "resque"):
        self.redis = redis_client
        self.namespace = namespace

    def queue_key(self, queue: str) -> str:
        return f"{self.namespace}:queue:{queue}"

    def enqueue(self, queue: str, task: str, *args: Any) -> str:
        job = _new_job(queue, task, args)
        payload = job.model_dump_json(by_alias=True, exclude={"queue"})
        pipe = self.redis.pipeline()
        pipe.sadd(f"{self.namespace}:queues", queue)
        pipe.rpush(self.queue_key(queue), payload)
        pipe.execute()
        return job.id

    def size(self, queue: str) -> int:
        return self.redis.llen(self.queue_key(queue))


class InMemoryJobQueue:
    def __init__(self):
        self.items: list[QueuedJob] = []

    def enqueue(self, queue: str, task: str, *args: Any) -> str:
        job = _new_job(queue, task, args)
        self.items.append(job)
        return job.id

    def size(self, queue: str) -> int:
        return sum(1 for job in self.items if job.queue == queue)
