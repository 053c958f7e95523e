"""Typed event bus used to broadcast document lifecycle changes.

Use cases publish dataclass events here; presentation code (window title,
status bar, menus) subscribes without holding references to the use cases.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Generic, TypeVar
from weakref import WeakMethod

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from typing import DefaultDict

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for bus events; subclasses are ``@dataclass(slots=True)``."""


# Published on every poll tick; kept out of the debug log.
_QUIET_EVENT_TYPES: set[type] = set()


# =============================================================================
# Document events
# =============================================================================


@dataclass(slots=True)
class DocumentLoaded(Event):
    """A document replaced the current content.

    Attributes:
        document_id: Identifier of the newly loaded document.
        source: ``"template"``, ``"recent"`` or ``"file"``.
        title: Title read from the document head, if any.
        path: Storage path for file-backed documents.
    """

    document_id: str
    source: str
    title: str | None = None
    path: str | None = None


@dataclass(slots=True)
class DocumentLoadFailed(Event):
    """Loading a document failed; ``fell_back`` is set when the blank template was loaded instead."""

    source: str
    message: str
    fell_back: bool = False


# =============================================================================
# Publish events
# =============================================================================


@dataclass(slots=True)
class PublishStarted(Event):
    target_path: str


@dataclass(slots=True)
class PublishProgress(Event):
    """Status text reported by one poll of the publish job."""

    target_path: str
    status: str
    poll_count: int


_QUIET_EVENT_TYPES.add(PublishProgress)


@dataclass(slots=True)
class PublishFinished(Event):
    """The publish job left the polling state.

    Attributes:
        target_path: Publication path the job was deploying to.
        state: Final job state name (``"done"``, ``"failed"`` or ``"stopped"``).
        result_url: Link to the deployed site when the job completed.
    """

    target_path: str
    state: str
    result_url: str | None = None


@dataclass(slots=True)
class SettingsPaneRequested(Event):
    pane: str


class EventBus(Generic[E]):
    """Publish/subscribe dispatcher keyed by event class.

    Bound-method handlers are held through :class:`~weakref.WeakMethod` so a
    closed window does not keep receiving events; plain functions are held
    strongly. Not thread-safe: publish from the event-loop thread only.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Register ``handler`` for ``event_type``; duplicate subscriptions fire twice."""

        self._handlers[event_type].append(_HandlerRef.create(handler))
        logger.debug("Subscribed %s to %s", _handler_name(handler), event_type.__name__)

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Remove the first registration of ``handler``; unknown handlers are ignored."""

        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        for index, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(index)
                logger.debug("Unsubscribed %s from %s", _handler_name(handler), event_type.__name__)
                return

    def publish(self, event: E) -> None:
        """Invoke every live handler for ``type(event)`` in subscription order.

        A handler that raises is logged and does not stop the remaining
        handlers.
        """

        event_type = type(event)
        handlers = self._handlers.get(event_type)
        quiet = event_type in _QUIET_EVENT_TYPES
        if not handlers:
            if not quiet:
                logger.debug("No handlers for %s", event_type.__name__)
            return
        if not quiet:
            logger.debug("Publishing %s to %d handler(s)", event_type.__name__, len(handlers))

        for handler_ref in list(handlers):
            handler = handler_ref.resolve()
            if handler is None:
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s", _handler_name(handler), event_type.__name__
                )
        handlers[:] = [ref for ref in handlers if ref.resolve() is not None]

    def clear(self) -> None:
        self._handlers.clear()

    def handler_count(self, event_type: type[E] | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())


class _HandlerRef:
    __slots__ = ("_target", "_weak")

    def __init__(self, target: WeakMethod | Handler, weak: bool) -> None:
        self._target = target
        self._weak = weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), weak=True)
            except TypeError:
                pass
        return cls(handler, weak=False)

    def resolve(self) -> Handler | None:
        if not self._weak:
            return self._target  # type: ignore[return-value]
        return self._target()  # type: ignore[operator]

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        return resolved is not None and resolved == handler


def _handler_name(handler: Handler) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        return f"{type(handler.__self__).__name__}.{handler.__func__.__name__}"
    return getattr(handler, "__name__", repr(handler))


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "DocumentLoaded",
    "DocumentLoadFailed",
    "PublishStarted",
    "PublishProgress",
    "PublishFinished",
    "SettingsPaneRequested",
]
