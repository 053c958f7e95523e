"""UI package holding the lifecycle use cases, domain stores and Qt shell."""

from .events import EventBus

__all__ = ["EventBus"]
