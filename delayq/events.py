from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable

BEFORE_DELAYED_ENQUEUE = "beforeDelayedEnqueue"

Listener = Callable[[dict[str, Any]], Any]


class Events:
    """Named one-way notifications.

    ``trigger`` calls every listener in registration order and ignores what
    they return. A listener that raises stops the trigger and the exception
    reaches the caller.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def listen(self, event: str, callback: Listener) -> None:
        self._listeners[event].append(callback)

    def stop_listening(self, event: str, callback: Listener) -> bool:
        listeners = self._listeners.get(event, [])
        if callback not in listeners:
            return False
        listeners.remove(callback)
        return True

    def clear(self) -> None:
        self._listeners.clear()

    def trigger(self, event: str, data: dict[str, Any]) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback(data)
