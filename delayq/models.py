from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

# Epoch seconds or an aware/naive datetime. None stands for "now".
Timestamp = Union[datetime, int]


def to_timestamp(value: Timestamp | None = None) -> int:
    """Resolve a timestamp argument to epoch seconds.

    ``None`` resolves to the current wall-clock time at the moment of the
    call, so callers that pass it through on every query see "now" move.
    Naive datetimes are taken as UTC.
    """
    if value is None:
        return int(time.time())
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    return int(value)


def format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


class ScheduledJob(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    queue: str = Field(min_length=1)
    task: str = Field(alias="class", min_length=1)
    args: list[Any] = Field(default_factory=list)


class QueuedJob(BaseModel):
    id: str
    queue: str
    task: str = Field(alias="class")
    args: list[Any] = Field(default_factory=list)
    queue_time: float

    model_config = ConfigDict(populate_by_name=True)
