"""Application bootstrap module.

This module provides the factory function that creates and wires together
all components of the editor, returning them ready to run.

The bootstrap process:
1. Creates the event bus
2. Creates the services (templates, publish transport, telemetry)
3. Instantiates the domain stores
4. Creates the main window and the Qt adapters
5. Instantiates the orchestrator with all dependencies

Usage:
    from pagewright.ui.bootstrap import create_application

    components = create_application(settings, settings_store=store)
    components.window.show()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..services.publish_transport import HttpPublishTransport
from ..services.settings import Settings, SettingsStore
from ..services.telemetry import TelemetryEventSink
from ..services.templates import TemplateFetcher
from ..utils.telemetry import TelemetryClient, telemetry_enabled
from .application.coordinator import LifecycleOrchestrator
from .domain.document_store import DocumentStore
from .domain.session_store import SessionStore
from .events import EventBus
from .presentation.dialogs import QtFilePicker, QtSettingsDialog, QtTemplateDialog
from .presentation.main_window import MainWindow, create_tip_panel
from .presentation.notifications import QtNotificationChannel

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationComponents:
    """Everything :func:`create_application` wires together."""

    event_bus: EventBus
    store: DocumentStore
    session_store: SessionStore
    orchestrator: LifecycleOrchestrator
    window: MainWindow
    notifications: QtNotificationChannel
    template_fetcher: TemplateFetcher
    transport: HttpPublishTransport
    event_sink: TelemetryEventSink

    async def aclose(self) -> None:
        """Stop publishing, close HTTP clients and flush telemetry."""

        self.orchestrator.stop_publishing()
        await self.transport.aclose()
        await self.template_fetcher.aclose()
        self.event_sink.flush()


def create_application(
    settings: Settings,
    *,
    settings_store: SettingsStore | None = None,
    telemetry_client: TelemetryClient | None = None,
) -> ApplicationComponents:
    """Create and wire all application components.

    Args:
        settings: The effective settings for this session.
        settings_store: Store used to persist the recent files list; when
            omitted recent files are kept in memory only.
        telemetry_client: Optional pre-built telemetry client.

    Returns:
        The wired :class:`ApplicationComponents`.
    """

    _LOGGER.info("Bootstrapping application...")

    event_bus = EventBus()

    templates_dir = Path(settings.templates_dir).expanduser() if settings.templates_dir else None
    template_fetcher = TemplateFetcher(
        base_dir=templates_dir,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        retry_min_seconds=settings.retry_min_seconds,
        retry_max_seconds=settings.retry_max_seconds,
    )
    transport = HttpPublishTransport(
        settings.publish_server_url,
        token=settings.publish_token or None,
        timeout=settings.request_timeout,
    )
    client = telemetry_client or TelemetryClient(enabled=telemetry_enabled(settings))
    event_sink = TelemetryEventSink(client)
    _LOGGER.debug("Created services (publish server %s)", transport.base_url)

    store = DocumentStore(template_fetcher=template_fetcher.fetch)
    session_store = SessionStore(
        lambda: settings,
        persist=settings_store.save if settings_store is not None else None,
    )

    window = MainWindow(event_bus, store)
    store.set_loading_listener(window.set_loading)
    notifications = QtNotificationChannel(lambda: window)

    orchestrator = LifecycleOrchestrator(
        store=store,
        notifications=notifications,
        events=event_sink,
        undo=window.undo_history,
        workspace=window,
        file_picker=QtFilePicker(parent_provider=lambda: window, start_dir_resolver=_last_directory(settings)),
        template_dialog=QtTemplateDialog(
            parent_provider=lambda: window,
            templates_dir=templates_dir,
            recent_provider=session_store.recent_files,
        ),
        settings_dialog=QtSettingsDialog(store, parent_provider=lambda: window),
        transport=transport,
        event_bus=event_bus,
        recent_files=session_store,
        blank_template_url=settings.blank_template,
        poll_interval=settings.publish_poll_interval,
        max_polls=settings.publish_max_polls,
        info_panel_factory=create_tip_panel,
        info_panel_delay=settings.info_panel_delay,
    )
    window.attach(orchestrator)
    _LOGGER.info("Application bootstrapped")

    return ApplicationComponents(
        event_bus=event_bus,
        store=store,
        session_store=session_store,
        orchestrator=orchestrator,
        window=window,
        notifications=notifications,
        template_fetcher=template_fetcher,
        transport=transport,
        event_sink=event_sink,
    )


def _last_directory(settings: Settings):
    def _resolve() -> Path | None:
        last = settings.last_open_file or {}
        path = last.get("path") if isinstance(last, dict) else None
        if not path:
            return None
        parent = Path(path).expanduser().parent
        return parent if parent.is_dir() else None

    return _resolve


__all__ = ["ApplicationComponents", "create_application"]
