from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel, Field, model_validator

from delayq.config import __version__, settings
from delayq.runtime import runtime
from delayq.scheduling import enqueue_at, enqueue_in

app = FastAPI(title="delayq", version=__version__)

# Upper bound for "earliest pending timestamp", far beyond any real schedule.
FAR_FUTURE = 2**53


@app.on_event("startup")
async def startup_event() -> None:
    runtime.initialize()


class DelayedJobRequest(BaseModel):
    queue: str = Field(min_length=1)
    task: str = Field(alias="class", min_length=1)
    args: list[Any] = Field(default_factory=list)
    at: int | None = None
    in_seconds: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _one_due_time(self) -> "DelayedJobRequest":
        if (self.at is None) == (self.in_seconds is None):
            raise ValueError("Exactly one of 'at' or 'in_seconds' is required")
        return self


def _require_admin_key(key: str | None) -> None:
    if key != settings.admin_api_key:
        raise HTTPException(status_code=401, detail="Unauthorized")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/delayed")
async def delayed_summary() -> dict[str, int | None]:
    return {
        "timestamps": runtime.store.get_delayed_timestamp_count(),
        "size": runtime.store.get_delayed_queue_schedule_size(),
        "next_timestamp": runtime.store.next_delayed_timestamp(FAR_FUTURE),
    }


@app.post("/delayed")
async def schedule_job(
    request: DelayedJobRequest, x_admin_key: str | None = Header(default=None)
) -> dict[str, int | str]:
    _require_admin_key(x_admin_key)
    if request.at is not None:
        timestamp = enqueue_at(runtime.store, request.at, request.queue, request.task, *request.args)
    else:
        timestamp = enqueue_in(runtime.store, request.in_seconds, request.queue, request.task, *request.args)
    return {"status": "scheduled", "timestamp": timestamp}


@app.post("/delayed/drain")
async def drain_delayed(x_admin_key: str | None = Header(default=None)) -> dict[str, int | str]:
    _require_admin_key(x_admin_key)
    dispatched = runtime.worker().handle_delayed_items()
    return {"status": "ok", "dispatched": dispatched}
