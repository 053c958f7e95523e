"""Lifecycle orchestrator facade.

This module provides the LifecycleOrchestrator - a facade that delegates
to the new/open/publish use cases and gives the presentation layer a
single entry point for the File menu.

The orchestrator:
- Owns the use case instances and the context they share
- Provides async facade methods that delegate to use cases
- Exposes the running publish job so the window can show its state
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from .context import Continuation, LifecycleContext
from .document_ops import (
    DEFAULT_BLANK_TEMPLATE_URL,
    LoadResult,
    NewDocumentUseCase,
    OpenDocumentUseCase,
)
from .publish_ops import DEFAULT_INFO_PANEL_DELAY, DEFAULT_POLL_INTERVAL, PublishJob, PublishState, PublishUseCase

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..events import EventBus
    from .ports import (
        DocumentStoreProtocol,
        EventSink,
        FilePicker,
        NotificationChannel,
        PublishTransport,
        RecentFiles,
        SettingsDialog,
        TemplateDialog,
        UndoHistory,
        Workspace,
    )

LOGGER = logging.getLogger(__name__)


class LifecycleOrchestrator:
    """Facade sequencing the document lifecycle flows.

    The orchestrator never holds document content; it reads and replaces it
    through the document store. All three operations return an outcome value
    and also accept optional continuations, each invoked at most once.

    Example:
        orchestrator = LifecycleOrchestrator(
            store=document_store,
            notifications=notifications,
            events=event_sink,
            undo=undo_history,
            workspace=workspace,
            file_picker=picker,
            template_dialog=dialog,
            settings_dialog=settings_dialog,
            transport=transport,
        )

        await orchestrator.new_document()
        await orchestrator.open_document(on_success=remember)
        await orchestrator.publish()
    """

    __slots__ = (
        "_context",
        "_new_document_uc",
        "_open_document_uc",
        "_publish_uc",
    )

    def __init__(
        self,
        *,
        store: "DocumentStoreProtocol",
        notifications: "NotificationChannel",
        events: "EventSink",
        undo: "UndoHistory",
        workspace: "Workspace",
        file_picker: "FilePicker",
        template_dialog: "TemplateDialog",
        settings_dialog: "SettingsDialog",
        transport: "PublishTransport",
        event_bus: "EventBus | None" = None,
        recent_files: "RecentFiles | None" = None,
        blank_template_url: str = DEFAULT_BLANK_TEMPLATE_URL,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_polls: int | None = None,
        info_panel_factory: Callable[[], Any] | None = None,
        info_panel_delay: float = DEFAULT_INFO_PANEL_DELAY,
    ) -> None:
        self._context = LifecycleContext(
            store=store,
            notifications=notifications,
            events=events,
            undo=undo,
            workspace=workspace,
            event_bus=event_bus,
            recent_files=recent_files,
        )
        self._new_document_uc = NewDocumentUseCase(
            self._context,
            template_dialog,
            blank_template_url=blank_template_url,
        )
        self._open_document_uc = OpenDocumentUseCase(self._context, file_picker)
        self._publish_uc = PublishUseCase(
            self._context,
            transport,
            settings_dialog,
            poll_interval=poll_interval,
            max_polls=max_polls,
            info_panel_factory=info_panel_factory,
            info_panel_delay=info_panel_delay,
        )

    @property
    def context(self) -> LifecycleContext:
        return self._context

    # ------------------------------------------------------------------
    # Document operations
    # ------------------------------------------------------------------

    async def new_document(
        self,
        on_success: Continuation | None = None,
        on_error: Continuation | None = None,
    ) -> LoadResult:
        """Show the new-website dialog and load the chosen template or recent file."""

        return await self._new_document_uc.execute(on_success, on_error)

    async def open_document(
        self,
        on_success: Continuation | None = None,
        on_error: Continuation | None = None,
        on_cancel: Continuation | None = None,
    ) -> LoadResult:
        """Let the user pick an HTML file and load it.

        ``on_success`` receives the opened :class:`FileInfo`.
        """

        return await self._open_document_uc.execute(on_success, on_error, on_cancel)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish(self) -> PublishState:
        """Publish the current website, or open the publish settings when no target is set."""

        return await self._publish_uc.execute()

    @property
    def publish_job(self) -> PublishJob | None:
        return self._publish_uc.job

    @property
    def publishing(self) -> bool:
        return self._publish_uc.busy

    def stop_publishing(self) -> None:
        LOGGER.debug("LifecycleOrchestrator.stop_publishing")
        self._publish_uc.stop()

    async def wait_for_publish(self) -> PublishJob | None:
        poller = self._publish_uc.poller
        if poller is None:
            return None
        return await poller.wait()


__all__ = ["LifecycleOrchestrator"]
