"""Command line entry points for delayq."""

from __future__ import annotations

import json
from typing import Optional

import typer

from delayq.log import configure_logging, get_logger
from delayq.runtime import runtime
from delayq.scheduler import run_scheduler_loop
from delayq.scheduling import enqueue_at, enqueue_in

app = typer.Typer(
    name="delayq",
    help="Move due delayed jobs onto their execution queues.",
    no_args_is_help=True,
)

logger = get_logger(__name__)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Override DELAYQ_LOG_LEVEL"),
    log_format: Optional[str] = typer.Option(None, help="console or json"),
):
    try:
        configure_logging(log_level, log_format)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


def _require_redis() -> None:
    runtime.initialize()
    if runtime.redis is None:
        typer.echo("Redis is unavailable", err=True)
        raise typer.Exit(1)


@app.command("work")
def work(
    interval: Optional[float] = typer.Option(
        None, "--interval", "-i", min=0.0, help="Seconds to sleep between drain passes"
    ),
):
    """Run the scheduler loop until TERM, INT or QUIT."""
    if not run_scheduler_loop(interval):
        raise typer.Exit(1)


@app.command("drain")
def drain(
    until: Optional[int] = typer.Option(None, help="Drain jobs due at or before this epoch second"),
):
    """Run a single drain pass and exit."""
    _require_redis()
    dispatched = runtime.worker().handle_delayed_items(until)
    typer.echo(f"Dispatched {dispatched} job(s)")


@app.command("schedule")
def schedule(
    queue: str = typer.Argument(..., help="Destination queue"),
    task: str = typer.Argument(..., help="Job class to run"),
    args: str = typer.Option("[]", help="JSON list of job arguments"),
    at: Optional[int] = typer.Option(None, help="Epoch second the job becomes due"),
    delay: Optional[float] = typer.Option(None, "--in", help="Seconds from now the job becomes due"),
):
    """Store a job for later execution."""
    if (at is None) == (delay is None):
        typer.echo("Pass exactly one of --at or --in", err=True)
        raise typer.Exit(2)
    try:
        job_args = json.loads(args)
    except json.JSONDecodeError:
        job_args = None
    if not isinstance(job_args, list):
        typer.echo("--args must be a JSON list", err=True)
        raise typer.Exit(2)

    _require_redis()
    if at is not None:
        timestamp = enqueue_at(runtime.store, at, queue, task, *job_args)
    else:
        timestamp = enqueue_in(runtime.store, delay, queue, task, *job_args)
    logger.info("job_scheduled", queue=queue, task=task, timestamp=timestamp)
    typer.echo(f"Scheduled {task} on {queue} at {timestamp}")


@app.command("size")
def size():
    """Print the number of delayed jobs waiting."""
    _require_redis()
    typer.echo(runtime.store.get_delayed_queue_schedule_size())


if __name__ == "__main__":
    app()
