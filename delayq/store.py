from __future__ import annotations

import json
from collections import deque
from typing import Protocol

import redis

from delayq.models import ScheduledJob, Timestamp, to_timestamp


class TimestampStore(Protocol):
    def delayed_push(self, timestamp: Timestamp, job: ScheduledJob) -> None:
        ...

    def next_delayed_timestamp(self, at: Timestamp | None = None) -> int | None:
        ...

    def next_item_for_timestamp(self, timestamp: Timestamp) -> ScheduledJob | None:
        ...

    def get_delayed_timestamp_count(self) -> int:
        ...

    def get_delayed_queue_schedule_size(self) -> int:
        ...

    def get_delayed_timestamp_size(self, timestamp: Timestamp) -> int:
        ...


class RedisTimestampStore:
    """Delayed jobs kept in the Resque scheduler layout.

    ``<ns>:delayed_queue_schedule`` is a sorted set of due timestamps (score and
    member are both the epoch seconds) and ``<ns>:delayed:<timestamp>`` is the
    list of JSON jobs due at that second.
    """

    def __init__(self, redis_client: redis.Redis, namespace: str = "resque"):
        self.redis = redis_client
        self.namespace = namespace

    @property
    def schedule_key(self) -> str:
        return f"{self.namespace}:delayed_queue_schedule"

    def timestamp_key(self, timestamp: int) -> str:
        return f"{self.namespace}:delayed:{timestamp}"

    def delayed_push(self, timestamp: Timestamp, job: ScheduledJob) -> None:
        ts = to_timestamp(timestamp)
        pipe = self.redis.pipeline()
        pipe.rpush(self.timestamp_key(ts), job.model_dump_json(by_alias=True))
        pipe.zadd(self.schedule_key, {str(ts): ts})
        pipe.execute()

    def next_delayed_timestamp(self, at: Timestamp | None = None) -> int | None:
        items = self.redis.zrangebyscore(self.schedule_key, "-inf", to_timestamp(at), start=0, num=1)
        if not items:
            return None
        return int(items[0])

    def next_item_for_timestamp(self, timestamp: Timestamp) -> ScheduledJob | None:
        ts = to_timestamp(timestamp)
        key = self.timestamp_key(ts)
        raw = self.redis.lpop(key)
        self._cleanup_timestamp(key, ts)
        if raw is None:
            return None
        return ScheduledJob.model_validate(json.loads(raw))

    def _cleanup_timestamp(self, key: str, timestamp: int) -> None:
        def _remove_if_empty(pipe: redis.client.Pipeline) -> None:
            if pipe.llen(key) != 0:
                return
            pipe.multi()
            pipe.delete(key)
            pipe.zrem(self.schedule_key, str(timestamp))

        # A concurrent delayed_push to the same key aborts and retries the removal.
        self.redis.transaction(_remove_if_empty, key)

    def get_delayed_timestamp_count(self) -> int:
        return self.redis.zcard(self.schedule_key)

    def get_delayed_queue_schedule_size(self) -> int:
        total = 0
        for member in self.redis.zrange(self.schedule_key, 0, -1):
            total += self.redis.llen(self.timestamp_key(int(member)))
        return total

    def get_delayed_timestamp_size(self, timestamp: Timestamp) -> int:
        return self.redis.llen(self.timestamp_key(to_timestamp(timestamp)))


class InMemoryTimestampStore:
    def __init__(self):
        self.items: dict[int, deque[ScheduledJob]] = {}

    def delayed_push(self, timestamp: Timestamp, job: ScheduledJob) -> None:
        self.items.setdefault(to_timestamp(timestamp), deque()).append(job)

    def next_delayed_timestamp(self, at: Timestamp | None = None) -> int | None:
        bound = to_timestamp(at)
        due = [ts for ts in self.items if ts <= bound]
        if not due:
            return None
        return min(due)

    def next_item_for_timestamp(self, timestamp: Timestamp) -> ScheduledJob | None:
        ts = to_timestamp(timestamp)
        jobs = self.items.get(ts)
        if not jobs:
            return None
        job = jobs.popleft()
        if not jobs:
            del self.items[ts]
        return job

    def get_delayed_timestamp_count(self) -> int:
        return len(self.items)

    def get_delayed_queue_schedule_size(self) -> int:
        return sum(len(jobs) for jobs in self.items.values())

    def get_delayed_timestamp_size(self, timestamp: Timestamp) -> int:
        return len(self.items.get(to_timestamp(timestamp), ()))
