"""Shared collaborators handed to every lifecycle use case."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..events import Event, EventBus
from .ports import (
    DocumentStoreProtocol,
    EventSink,
    NotificationChannel,
    RecentFiles,
    UndoHistory,
    Workspace,
)

LOGGER = logging.getLogger(__name__)

CONTROLLER_EVENTS = "controller-events"
ACTION_NEW = "file.new"
ACTION_OPEN = "file.open"
ACTION_PUBLISH = "file.publish"

# Fixed weights reported with each outcome.
WEIGHT_REQUEST = 0
WEIGHT_SUCCESS = 1
WEIGHT_ERROR = -1
WEIGHT_CANCEL = 0

Continuation = Callable[..., Any]


@dataclass(slots=True)
class LifecycleContext:
    """Collaborators shared by the new/open/publish use cases.

    ``event_bus`` and ``recent_files`` are optional; everything else is
    required.
    """

    store: DocumentStoreProtocol
    notifications: NotificationChannel
    events: EventSink
    undo: UndoHistory
    workspace: Workspace
    event_bus: EventBus | None = None
    recent_files: RecentFiles | None = None

    def track(self, outcome: str, action: str, weight: int) -> None:
        try:
            self.events.record_event(CONTROLLER_EVENTS, outcome, action, weight)
        except Exception:  # pragma: no cover - event sinks must not break lifecycle flows
            LOGGER.debug("Event sink failed for %s/%s", outcome, action, exc_info=True)

    def document_id(self) -> str:
        document = getattr(self.store, "document", None)
        return getattr(document, "document_id", "") or ""

    def publish(self, event: Event) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)


class Continuations:
    """Caller-supplied success/error/cancel callbacks, each fired at most once.

    Callbacks may be plain functions or coroutine functions. A callback that
    raises is logged; the failure never reaches the use case.
    """

    __slots__ = ("_callbacks", "_fired")

    def __init__(
        self,
        on_success: Continuation | None = None,
        on_error: Continuation | None = None,
        on_cancel: Continuation | None = None,
    ) -> None:
        self._callbacks = {"success": on_success, "error": on_error, "cancel": on_cancel}
        self._fired: set[str] = set()

    def fired(self, name: str) -> bool:
        return name in self._fired

    async def success(self, *args: Any) -> None:
        await self._fire("success", *args)

    async def error(self, error: BaseException) -> None:
        await self._fire("error", error)

    async def cancel(self) -> None:
        await self._fire("cancel")

    async def _fire(self, name: str, *args: Any) -> None:
        if name in self._fired:
            LOGGER.debug("Continuation %s already fired; ignoring", name)
            return
        self._fired.add(name)
        callback = self._callbacks.get(name)
        if callback is None:
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            LOGGER.exception("%s continuation raised", name)
