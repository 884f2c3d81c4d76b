from __future__ import annotations

import json
import os
import signal
import socket
import threading
import time
from typing import Any

from setproctitle import setproctitle

from delayq.config import __version__, settings
from delayq.events import BEFORE_DELAYED_ENQUEUE, Events
from delayq.log import get_logger, log_notice
from delayq.models import Timestamp, format_timestamp, to_timestamp
from delayq.queue import JobQueue
from delayq.store import TimestampStore

STATUS_STARTING = "Starting"
STATUS_PROCESSING = "Processing Delayed Items"

SHUTDOWN_SIGNALS = ("SIGTERM", "SIGINT", "SIGQUIT")


class SchedulerWorker:
    """Moves due jobs from the delayed store onto their execution queues.

    Every ``interval`` seconds the worker drains all timestamps that are due,
    one timestamp at a time, then sleeps. TERM, INT and QUIT ask it to stop
    once the current drain pass has finished.
    """

    def __init__(
        self,
        store: TimestampStore,
        queue: JobQueue,
        events: Events | None = None,
        logger: Any = None,
    ) -> None:
        self.store = store
        self.queue = queue
        self.events = events or Events()
        self.hostname = socket.gethostname()
        self.id = f"{self.hostname}:{os.getpid()}"
        self.logger = logger or get_logger(worker=self.id)
        self.interval = settings.poll_interval_seconds
        self.status: str | None = None
        self.signals_registered = False
        self.shutdown_requested = False

    def __str__(self) -> str:
        return self.id

    def set_logger(self, logger: Any) -> None:
        self.logger = logger

    def work(self, interval: float | None = None) -> None:
        """Poll the delayed store until shutdown is requested."""
        if interval is not None:
            self.interval = interval

        self.update_status(STATUS_STARTING)
        self.register_signal_handlers()
        log_notice(self.logger, "scheduler_started", interval=self.interval)

        while not self.shutdown_requested:
            self.handle_delayed_items()
            if self.shutdown_requested:
                break
            self.sleep()

        log_notice(self.logger, "shutting_down")

    def handle_delayed_items(self, timestamp: Timestamp | None = None) -> int:
        """Enqueue every job due at or before ``timestamp`` (now when None).

        An unset horizon is re-read on every query, so timestamps that fall
        due while the pass is running are drained in the same pass.
        """
        dispatched = 0
        while True:
            due = self.store.next_delayed_timestamp(timestamp)
            if due is None:
                break
            self.update_status(STATUS_PROCESSING)
            dispatched += self.enqueue_delayed_items_for_timestamp(due)
        return dispatched

    def enqueue_delayed_items_for_timestamp(self, timestamp: Timestamp) -> int:
        """Pop every job stored under ``timestamp`` and enqueue it."""
        dispatched = 0
        while True:
            job = self.store.next_item_for_timestamp(timestamp)
            if job is None:
                break
            due_at = to_timestamp(timestamp)
            log_notice(
                self.logger,
                "queueing_delayed_job",
                task=job.task,
                queue=job.queue,
                args=json.dumps(job.args),
                scheduled_at=format_timestamp(due_at),
            )

            self.events.trigger(
                BEFORE_DELAYED_ENQUEUE,
                {"queue": job.queue, "class": job.task, "args": job.args},
            )

            self.queue.enqueue(job.queue, job.task, *job.args)
            dispatched += 1
        return dispatched

    def sleep(self) -> None:
        time.sleep(self.interval)

    def update_status(self, status: str) -> None:
        self.status = status
        if settings.proctitle_enabled:
            setproctitle(f"delayq-{__version__}: {status}")

    def register_signal_handlers(self) -> bool:
        """Install TERM, INT and QUIT handlers that request a shutdown.

        Python only accepts handlers from the main thread, and some platforms
        lack QUIT. Without handlers the worker can only be killed.
        """
        if threading.current_thread() is not threading.main_thread():
            self.logger.warning("signal_handlers_unavailable", reason="not running in the main thread")
            return False

        registered = []
        for name in SHUTDOWN_SIGNALS:
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            signal.signal(signum, self._handle_signal)
            registered.append(name)

        if not registered:
            self.logger.warning("signal_handlers_unavailable", reason="platform has no termination signals")
            return False

        self.signals_registered = True
        self.logger.debug("registered_signals", signals=registered)
        return True

    def _handle_signal(self, signum: int, frame: object) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        """Stop after the current drain pass. Repeated calls do nothing.

        Runs inside signal handlers, so it only flips the flag; the loop
        logs the shutdown once it sees it.
        """
        self.shutdown_requested = True
