"""Thin presentation layer main window.

This module provides the MainWindow shell that:
1. Creates the preview widget and the status bar
2. Installs the File menu (New / Open / Publish)
3. Subscribes to lifecycle events for the window title and status messages
4. Delegates every operation to the LifecycleOrchestrator
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Any, Awaitable

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence, QUndoStack
from PySide6.QtWidgets import QApplication, QLabel, QMainWindow, QStatusBar, QTextBrowser, QWidget

from ..events import DocumentLoaded, DocumentLoadFailed, PublishFinished, PublishStarted

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..application.coordinator import LifecycleOrchestrator
    from ..domain.document_store import DocumentStore
    from ..events import EventBus

LOGGER = logging.getLogger(__name__)

# Window constants
WINDOW_APP_NAME = "Pagewright"
UNTITLED_WEBSITE_NAME = "Untitled website"
STATUS_TIMEOUT_MS = 5000

TIPS = (
    "Press <b>Ctrl+Shift+P</b> to publish the website again once you have edited it.",
    "Set the site URL in the publication settings to get a preview link when publishing ends.",
    "Recently opened websites are listed in the New Website dialog.",
    "Publishing runs in the background; closing this message stops following it.",
)


def create_tip_panel(parent: QWidget | None = None) -> QLabel:
    """Informational panel shown in the publish alert while the job runs."""

    label = QLabel(f"<p><i>Tip:</i> {random.choice(TIPS)}</p>", parent)
    label.setTextFormat(Qt.TextFormat.RichText)
    label.setWordWrap(True)
    return label


class QtUndoHistory:
    """``UndoHistory`` adapter over a :class:`QUndoStack`."""

    __slots__ = ("_stack",)

    def __init__(self, stack: QUndoStack) -> None:
        self._stack = stack

    @property
    def stack(self) -> QUndoStack:
        return self._stack

    def reset(self) -> None:
        self._stack.clear()
        self._stack.setClean()


class MainWindow(QMainWindow):
    """Presentation shell for the editor window.

    The window also serves as the ``Workspace`` for the lifecycle use cases:
    :meth:`redraw` re-renders the preview from the document store and
    :meth:`file_operation_success` reports in the status bar.

    Example:
        window = MainWindow(event_bus, document_store)
        window.attach(orchestrator)
        window.show()
    """

    def __init__(self, event_bus: "EventBus", store: "DocumentStore", *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._event_bus = event_bus
        self._store = store
        self._orchestrator: LifecycleOrchestrator | None = None
        self._pending: set[asyncio.Future[Any]] = set()

        self.undo_stack = QUndoStack(self)
        self.undo_history = QtUndoHistory(self.undo_stack)

        self._preview = QTextBrowser(self)
        self._preview.setOpenExternalLinks(True)
        self.setCentralWidget(self._preview)
        self.setStatusBar(QStatusBar(self))
        self.resize(1024, 720)

        self.actions_by_name: dict[str, QAction] = {}
        self._install_menus()
        self._subscribe_to_events()
        self._update_title()

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def attach(self, orchestrator: "LifecycleOrchestrator") -> None:
        self._orchestrator = orchestrator

    def _install_menus(self) -> None:
        specs = (
            ("new", "&New Website...", QKeySequence(QKeySequence.StandardKey.New), self.trigger_new),
            ("open", "&Open...", QKeySequence(QKeySequence.StandardKey.Open), self.trigger_open),
            ("publish", "&Publish", QKeySequence("Ctrl+Shift+P"), self.trigger_publish),
        )
        menu = self.menuBar().addMenu("&File")
        for name, text, shortcut, handler in specs:
            action = QAction(text, self)
            action.setShortcut(shortcut)
            action.triggered.connect(lambda _checked=False, h=handler: h())
            menu.addAction(action)
            self.actions_by_name[name] = action
        menu.addSeparator()
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence(QKeySequence.StandardKey.Quit))
        quit_action.triggered.connect(self.close)
        menu.addAction(quit_action)
        self.actions_by_name["quit"] = quit_action

    def _subscribe_to_events(self) -> None:
        self._event_bus.subscribe(DocumentLoaded, self._on_document_loaded)
        self._event_bus.subscribe(DocumentLoadFailed, self._on_document_load_failed)
        self._event_bus.subscribe(PublishStarted, self._on_publish_started)
        self._event_bus.subscribe(PublishFinished, self._on_publish_finished)

    def _unsubscribe_from_events(self) -> None:
        self._event_bus.unsubscribe(DocumentLoaded, self._on_document_loaded)
        self._event_bus.unsubscribe(DocumentLoadFailed, self._on_document_load_failed)
        self._event_bus.unsubscribe(PublishStarted, self._on_publish_started)
        self._event_bus.unsubscribe(PublishFinished, self._on_publish_finished)

    # ------------------------------------------------------------------
    # Menu actions
    # ------------------------------------------------------------------

    def trigger_new(self) -> asyncio.Future[Any] | None:
        if self._orchestrator is None:
            return None
        return self.schedule_coroutine(self._orchestrator.new_document())

    def trigger_open(self) -> asyncio.Future[Any] | None:
        if self._orchestrator is None:
            return None
        return self.schedule_coroutine(self._orchestrator.open_document())

    def trigger_publish(self) -> asyncio.Future[Any] | None:
        if self._orchestrator is None:
            return None
        return self.schedule_coroutine(self._orchestrator.publish())

    def schedule_coroutine(self, coro: Awaitable[Any]) -> asyncio.Future[Any]:
        future = asyncio.ensure_future(coro)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)
        return future

    # ------------------------------------------------------------------
    # Workspace
    # ------------------------------------------------------------------

    def redraw(self) -> None:
        self._preview.setHtml(self._store.get_content())

    def file_operation_success(self, message: str | None, *, update_title: bool = False) -> None:
        self.redraw()
        if update_title:
            self._update_title()
        if message:
            self.statusBar().showMessage(message, STATUS_TIMEOUT_MS)

    def set_loading(self, loading: bool) -> None:
        if loading:
            QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        else:
            QApplication.restoreOverrideCursor()

    def _update_title(self) -> None:
        if self._store.document is None:
            self.setWindowTitle(WINDOW_APP_NAME)
            return
        title = self._store.get_title() or UNTITLED_WEBSITE_NAME
        self.setWindowTitle(f"{title} - {WINDOW_APP_NAME}")

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_document_loaded(self, event: DocumentLoaded) -> None:
        LOGGER.debug("MainWindow: document loaded from %s", event.source)
        self._update_title()

    def _on_document_load_failed(self, event: DocumentLoadFailed) -> None:
        if event.fell_back:
            self.statusBar().showMessage("Loaded the blank website instead.", STATUS_TIMEOUT_MS)

    def _on_publish_started(self, event: PublishStarted) -> None:
        self.actions_by_name["publish"].setEnabled(False)
        self.statusBar().showMessage(f"Publishing to {event.target_path}...")

    def _on_publish_finished(self, event: PublishFinished) -> None:
        self.actions_by_name["publish"].setEnabled(True)
        self.statusBar().showMessage(f"Publication {event.state}.", STATUS_TIMEOUT_MS)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def closeEvent(self, event: Any) -> None:
        LOGGER.debug("MainWindow: close event")
        if self._orchestrator is not None:
            self._orchestrator.stop_publishing()
        for future in list(self._pending):
            future.cancel()
        self._unsubscribe_from_events()
        event.accept()


__all__ = [
    "MainWindow",
    "QtUndoHistory",
    "create_tip_panel",
    "TIPS",
    "WINDOW_APP_NAME",
    "UNTITLED_WEBSITE_NAME",
]
