from __future__ import annotations

import redis

from delayq.config import settings
from delayq.events import Events
from delayq.log import get_logger
from delayq.queue import InMemoryJobQueue, JobQueue, RedisJobQueue
from delayq.store import InMemoryTimestampStore, RedisTimestampStore, TimestampStore
from delayq.worker import SchedulerWorker

logger = get_logger(__name__)


class Runtime:
    def __init__(self) -> None:
        self.store: TimestampStore = InMemoryTimestampStore()
        self.queue: JobQueue = InMemoryJobQueue()
        self.events = Events()
        self.redis: redis.Redis | None = None

    def initialize(self) -> None:
        if settings.app_env == "test" or self.redis is not None:
            return
        try:
            client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
            client.ping()
        except redis.RedisError as exc:
            logger.warning("redis_unavailable", redis_url=settings.redis_url, error=str(exc))
            self.redis = None
            return
        self.redis = client
        self.store = RedisTimestampStore(client, settings.redis_namespace)
        self.queue = RedisJobQueue(client, settings.redis_namespace)

    def worker(self) -> SchedulerWorker:
        return SchedulerWorker(self.store, self.queue, self.events)

    def set_test_backends(self, store: TimestampStore, queue: JobQueue) -> None:
        self.store = store
        self.queue = queue
        self.events = Events()
        self.redis = None


runtime = Runtime()
