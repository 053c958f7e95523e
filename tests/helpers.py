"""Shared test helpers and stub collaborators.

Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Sequence

from pagewright.editor.document_model import FileInfo, PublicationTarget, embed_publication_target
from pagewright.services.telemetry import InMemoryEventSink
from pagewright.ui.application.coordinator import LifecycleOrchestrator
from pagewright.ui.application.errors import DocumentOpenError
from pagewright.ui.application.ports import DialogSignal, PublishStatus
from pagewright.ui.domain.document_store import DocumentStore
from pagewright.ui.events import Event, EventBus

BLANK_URL = "blank/editable.html"
BLANK_HTML = "<!DOCTYPE html><html><head><title>Blank</title></head><body></body></html>"


def page(title: str, *, target: PublicationTarget | None = None) -> str:
    markup = f"<html><head><title>{title}</title></head><body><h1>{title}</h1></body></html>"
    return embed_publication_target(markup, target) if target is not None else markup


class FakeTemplateSource:
    """Async template fetcher answering from a dict; exceptions in the dict are raised."""

    def __init__(self, templates: dict[str, Any] | None = None) -> None:
        self.templates: dict[str, Any] = {BLANK_URL: BLANK_HTML}
        self.templates.update(templates or {})
        self.calls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        value = self.templates.get(url)
        if value is None:
            raise DocumentOpenError(f"No template at {url}", location=url)
        if isinstance(value, BaseException):
            raise value
        return value

    def count(self, url: str) -> int:
        return self.calls.count(url)


class FakeStorageProvider:
    """Storage provider answering from a dict keyed by path."""

    def __init__(self, files: dict[str, Any] | None = None) -> None:
        self.files: dict[str, Any] = dict(files or {})
        self.reads: list[FileInfo] = []

    async def read(self, file_info: FileInfo) -> str:
        self.reads.append(file_info)
        value = self.files.get(file_info.path)
        if value is None:
            raise DocumentOpenError(f"{file_info.path} not found", service=file_info.service, location=file_info.path)
        if isinstance(value, BaseException):
            raise value
        return value


class RecordingNotifications:
    """Notification channel that records calls; alerts stay open until :meth:`close_alert`."""

    def __init__(self, *, active: bool = False) -> None:
        self.active = active
        self.alerts: list[tuple[str, Callable[[], None] | None, str | None]] = []
        self.errors: list[str] = []
        self.texts: list[str] = []
        self.info_panels: list[Any] = []

    @property
    def is_active(self) -> bool:
        return self.active

    def alert(self, message: str, on_close: Callable[[], None] | None = None, *, button_label: str | None = None) -> None:
        self.alerts.append((message, on_close, button_label))

    def notify_error(self, message: str) -> None:
        self.errors.append(message)

    def set_text(self, message: str) -> None:
        self.texts.append(message)

    def set_info_panel(self, panel: Any) -> None:
        self.info_panels.append(panel)

    def close_alert(self) -> None:
        _message, on_close, _label = self.alerts[-1]
        if on_close is not None:
            on_close()


class ScriptedTemplateDialog:
    """Template dialog yielding a fixed list of signals each time it opens."""

    def __init__(self, *signals: DialogSignal, error: BaseException | None = None) -> None:
        self._signals = signals
        self._error = error
        self.opened = 0

    def script(self, *signals: DialogSignal, error: BaseException | None = None) -> None:
        self._signals = signals
        self._error = error

    async def signals(self) -> AsyncIterator[DialogSignal]:
        self.opened += 1
        for signal in self._signals:
            yield signal
        if self._error is not None:
            raise self._error


class FakeFilePicker:
    def __init__(self, result: FileInfo | BaseException | None = None) -> None:
        self.result = result
        self.mimetypes: list[str] = []

    async def open_file(self, mimetype: str) -> FileInfo | None:
        self.mimetypes.append(mimetype)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class RecordingSettingsDialog:
    def __init__(self) -> None:
        self.panes: list[str] = []

    def open_dialog(self, pane: str, on_close: Callable[[], None] | None = None) -> None:
        self.panes.append(pane)


class ScriptedTransport:
    """Publish transport replaying scripted responses; exceptions are raised.

    With a ``gate`` the publish request stays in flight until the event is set.
    """

    def __init__(
        self,
        statuses: Sequence[PublishStatus | BaseException] = (),
        *,
        accept: PublishStatus | BaseException | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.statuses = list(statuses)
        self.gate = gate
        self.accept = accept or PublishStatus("Publication started")
        self.requests: list[tuple[str, str | None, str]] = []
        self.queries = 0

    async def request_publish(self, target_path: str, source_path: str | None, content: str) -> PublishStatus:
        self.requests.append((target_path, source_path, content))
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.accept, BaseException):
            raise self.accept
        return self.accept

    async def query_status(self) -> PublishStatus:
        self.queries += 1
        if not self.statuses:
            return PublishStatus("Still working")
        value = self.statuses.pop(0)
        if isinstance(value, BaseException):
            raise value
        return value


class RecordingUndo:
    def __init__(self) -> None:
        self.resets = 0

    def reset(self) -> None:
        self.resets += 1


class RecordingWorkspace:
    def __init__(self) -> None:
        self.redraws = 0
        self.messages: list[tuple[str | None, bool]] = []

    def redraw(self) -> None:
        self.redraws += 1

    def file_operation_success(self, message: str | None, *, update_title: bool = False) -> None:
        self.messages.append((message, update_title))


class RecordingRecentFiles:
    def __init__(self) -> None:
        self.remembered: list[FileInfo] = []

    def remember_recent_file(self, file_info: FileInfo) -> None:
        self.remembered.append(file_info)


@dataclass
class Harness:
    """An orchestrator wired to recording collaborators."""

    orchestrator: LifecycleOrchestrator
    store: DocumentStore
    templates: FakeTemplateSource
    storage: FakeStorageProvider
    notifications: RecordingNotifications
    events: InMemoryEventSink
    undo: RecordingUndo
    workspace: RecordingWorkspace
    picker: FakeFilePicker
    dialog: ScriptedTemplateDialog
    settings_dialog: RecordingSettingsDialog
    transport: ScriptedTransport
    recent: RecordingRecentFiles
    bus: EventBus
    published: list[Event] = field(default_factory=list)

    def events_for(self, action: str) -> list[tuple[str, int]]:
        return [(event.outcome, event.weight) for event in self.events.matching(action=action)]


def build_harness(
    *,
    dialog: ScriptedTemplateDialog | None = None,
    picker: FakeFilePicker | None = None,
    transport: ScriptedTransport | None = None,
    templates: dict[str, Any] | None = None,
    files: dict[str, Any] | None = None,
    notifications: RecordingNotifications | None = None,
    poll_interval: float = 0.01,
    max_polls: int | None = None,
    info_panel_factory: Callable[[], Any] | None = None,
    info_panel_delay: float = 2.0,
) -> Harness:
    template_source = FakeTemplateSource(templates)
    storage = FakeStorageProvider(files)
    store = DocumentStore(template_fetcher=template_source.fetch, providers={"local": storage, "cloud": storage})
    bus: EventBus = EventBus()
    harness_notifications = notifications or RecordingNotifications()
    events = InMemoryEventSink()
    undo = RecordingUndo()
    workspace = RecordingWorkspace()
    harness_picker = picker or FakeFilePicker()
    harness_dialog = dialog or ScriptedTemplateDialog()
    settings_dialog = RecordingSettingsDialog()
    harness_transport = transport or ScriptedTransport()
    recent = RecordingRecentFiles()
    orchestrator = LifecycleOrchestrator(
        store=store,
        notifications=harness_notifications,
        events=events,
        undo=undo,
        workspace=workspace,
        file_picker=harness_picker,
        template_dialog=harness_dialog,
        settings_dialog=settings_dialog,
        transport=harness_transport,
        event_bus=bus,
        recent_files=recent,
        blank_template_url=BLANK_URL,
        poll_interval=poll_interval,
        max_polls=max_polls,
        info_panel_factory=info_panel_factory,
        info_panel_delay=info_panel_delay,
    )
    harness = Harness(
        orchestrator=orchestrator,
        store=store,
        templates=template_source,
        storage=storage,
        notifications=harness_notifications,
        events=events,
        undo=undo,
        workspace=workspace,
        picker=harness_picker,
        dialog=harness_dialog,
        settings_dialog=settings_dialog,
        transport=harness_transport,
        recent=recent,
        bus=bus,
    )
    for event_type in Event.__subclasses__():
        bus.subscribe(event_type, harness.published.append)
    return harness
