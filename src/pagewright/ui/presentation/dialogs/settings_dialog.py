"""Settings dialog with the publication pane."""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ....editor.document_model import PublicationTarget
from ...application.publish_ops import PUBLISH_PANE
from ...domain.document_store import DocumentStore

LOGGER = logging.getLogger(__name__)


class PublishSettingsDialog(QDialog):
    """Edits the publication target stored in the website head."""

    def __init__(self, parent: QWidget | None = None, *, target: PublicationTarget | None, editable: bool) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(460)

        self._tabs = QTabWidget(self)
        publish_pane = QWidget(self._tabs)
        form = QFormLayout(publish_pane)
        self.path_edit = QLineEdit(target.path if target else "", publish_pane)
        self.path_edit.setPlaceholderText("/var/www/my-site")
        self.url_edit = QLineEdit((target.url or "") if target else "", publish_pane)
        self.url_edit.setPlaceholderText("https://example.com")
        form.addRow("Publication folder", self.path_edit)
        form.addRow("Site URL", self.url_edit)
        if not editable:
            self.path_edit.setEnabled(False)
            self.url_edit.setEnabled(False)
            form.addRow(QLabel("Open or create a website first.", publish_pane))
        self._tabs.addTab(publish_pane, "Publication")
        self._panes = {PUBLISH_PANE: 0}

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel,
            parent=self,
        )
        buttons.button(QDialogButtonBox.StandardButton.Save).setEnabled(editable)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addWidget(self._tabs)
        layout.addWidget(buttons)

    def show_pane(self, pane: str) -> None:
        index = self._panes.get(pane)
        if index is None:
            LOGGER.warning("Unknown settings pane %r", pane)
            return
        self._tabs.setCurrentIndex(index)

    def target(self) -> PublicationTarget | None:
        path = self.path_edit.text().strip()
        if not path:
            return None
        url = self.url_edit.text().strip().rstrip("/") or None
        return PublicationTarget(path=path, url=url)


class QtSettingsDialog:
    """``SettingsDialog`` writing the publication target back into the document store."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        parent_provider: Callable[[], QWidget | None] | None = None,
    ) -> None:
        self._store = store
        self._parent_provider = parent_provider
        self._dialog: PublishSettingsDialog | None = None

    @property
    def dialog(self) -> PublishSettingsDialog | None:
        return self._dialog

    def open_dialog(self, pane: str, on_close: Callable[[], None] | None = None) -> None:
        if self._dialog is not None:
            self._dialog.show_pane(pane)
            self._dialog.raise_()
            return
        parent = self._parent_provider() if self._parent_provider else None
        dialog = PublishSettingsDialog(
            parent,
            target=self._store.get_publication_target(),
            editable=self._store.document is not None,
        )
        dialog.show_pane(pane)

        def _on_finished(result: int) -> None:
            self._dialog = None
            if result == QDialog.DialogCode.Accepted.value:
                self._apply(dialog.target())
            dialog.deleteLater()
            if on_close is not None:
                on_close()

        dialog.finished.connect(_on_finished)
        self._dialog = dialog
        dialog.open()

    def _apply(self, target: PublicationTarget | None) -> None:
        try:
            self._store.set_publication_target(target)
        except RuntimeError as exc:
            LOGGER.warning("Publication target not saved: %s", exc)
            return
        LOGGER.info("Publication target set to %s", target.path if target else None)


__all__ = ["PublishSettingsDialog", "QtSettingsDialog"]
