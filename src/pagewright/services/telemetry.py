"""Event sinks recording lifecycle actions (request/success/error/cancel)."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Mapping

from ..ui.application.context import CONTROLLER_EVENTS
from ..utils.telemetry import TelemetryClient

LOGGER = logging.getLogger(__name__)

_EVENT_LISTENERS: dict[str, list[Callable[[dict[str, Any]], None]]] = {}


@dataclass(slots=True, frozen=True)
class RecordedEvent:
    category: str
    outcome: str
    action: str
    weight: int


class InMemoryEventSink:
    """Ring buffer of recorded events for local inspection and tests."""

    def __init__(self, capacity: int = 200) -> None:
        self._buffer: deque[RecordedEvent] = deque(maxlen=max(10, capacity))
        self._lock = Lock()

    def record_event(self, category: str, outcome: str, action: str, weight: int) -> None:
        with self._lock:
            self._buffer.append(RecordedEvent(category, outcome, action, int(weight)))

    def tail(self, limit: int | None = None) -> list[RecordedEvent]:
        with self._lock:
            events = list(self._buffer)
        if limit is None or limit >= len(events):
            return events
        return events[-limit:]

    def matching(self, *, outcome: str | None = None, action: str | None = None) -> list[RecordedEvent]:
        return [
            event
            for event in self.tail()
            if (outcome is None or event.outcome == outcome) and (action is None or event.action == action)
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)


class TelemetryEventSink:
    """Forwards recorded events to the opt-in :class:`TelemetryClient` and in-process listeners."""

    def __init__(self, client: TelemetryClient | None = None) -> None:
        self._client = client or TelemetryClient()

    @property
    def client(self) -> TelemetryClient:
        return self._client

    def record_event(self, category: str, outcome: str, action: str, weight: int) -> None:
        self._client.track_action(category, outcome, action, weight)
        emit(
            f"{category}.{outcome}",
            {"category": category, "outcome": outcome, "action": action, "weight": int(weight)},
        )

    def flush(self) -> None:
        path = self._client.flush()
        if path is not None:
            LOGGER.debug("Telemetry flushed to %s", path)


def register_event_listener(event_name: str, callback: Callable[[dict[str, Any]], None]) -> None:
    """Call ``callback`` whenever :func:`emit` fires ``event_name``."""

    if not event_name or callback is None:
        return
    listeners = _EVENT_LISTENERS.setdefault(event_name, [])
    if callback not in listeners:
        listeners.append(callback)


def unregister_event_listener(event_name: str, callback: Callable[[dict[str, Any]], None]) -> None:
    listeners = _EVENT_LISTENERS.get(event_name)
    if listeners and callback in listeners:
        listeners.remove(callback)


def emit(event_name: str, payload: Mapping[str, Any] | None = None) -> None:
    """Broadcast a structured event to in-process listeners."""

    if not event_name:
        return
    event_payload = {"event": event_name}
    if payload:
        event_payload.update(payload)
    for callback in list(_EVENT_LISTENERS.get(event_name, ())):
        try:
            callback(dict(event_payload))
        except Exception:  # pragma: no cover - listeners must not break emitters
            LOGGER.debug("Telemetry listener %s failed", callback, exc_info=True)
    LOGGER.debug("Telemetry emit %s: %s", event_name, event_payload)


__all__ = [
    "CONTROLLER_EVENTS",
    "RecordedEvent",
    "InMemoryEventSink",
    "TelemetryEventSink",
    "register_event_listener",
    "unregister_event_listener",
    "emit",
]
