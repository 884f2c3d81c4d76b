from __future__ import annotations

from delayq.log import configure_logging, get_logger
from delayq.runtime import runtime

logger = get_logger(__name__)


def run_scheduler_loop(interval_seconds: float | None = None) -> bool:
    """Run the delayed-job worker until it is signalled to stop.

    Returns False without starting when Redis is unreachable. Errors raised
    while draining are logged and re-raised so a supervisor can restart us.
    """
    runtime.initialize()
    if runtime.redis is None:
        logger.error("scheduler_not_started", reason="redis unavailable")
        return False

    worker = runtime.worker()
    try:
        worker.work(interval_seconds)
    except Exception:
        logger.exception("worker_crashed", worker=str(worker), status=worker.status)
        raise
    return True


if __name__ == "__main__":
    configure_logging()
    raise SystemExit(0 if run_scheduler_loop() else 1)
