"""File and template dialogs for the presentation layer.

This module provides the Qt classes that implement the ``FilePicker`` and
``TemplateDialog`` protocols from the application layer.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import AsyncIterator, Callable, Sequence

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ....editor.document_model import FileInfo
from ....services.templates import TemplateInfo, list_templates
from ...application.errors import FilePickerError, TemplateListingError
from ...application.ports import HTML_MIMETYPE, DialogFailed, DialogSignal, FileInfoChosen, Ready, TemplateChosen
from ...domain.document_store import LOCAL_SERVICE

LOGGER = logging.getLogger(__name__)

_MIMETYPE_FILTERS = {
    HTML_MIMETYPE: "Websites (*.html *.htm)",
}
_ALL_FILES_FILTER = "All files (*)"


def file_filter_for(mimetype: str | None) -> str:
    specific = _MIMETYPE_FILTERS.get(mimetype or "")
    return f"{specific};;{_ALL_FILES_FILTER}" if specific else _ALL_FILES_FILTER


class QtFilePicker:
    """Local file picker backed by :class:`QFileDialog`.

    Example:
        picker = QtFilePicker(parent_provider=lambda: main_window)
        file_info = await picker.open_file("text/html")
    """

    __slots__ = ("_parent_provider", "_start_dir_resolver", "_caption")

    def __init__(
        self,
        *,
        parent_provider: Callable[[], QWidget | None] | None = None,
        start_dir_resolver: Callable[[], Path | None] | None = None,
        caption: str = "Open Website",
    ) -> None:
        self._parent_provider = parent_provider
        self._start_dir_resolver = start_dir_resolver
        self._caption = caption

    async def open_file(self, mimetype: str) -> FileInfo | None:
        parent = self._parent_provider() if self._parent_provider else None
        start_dir = self._start_dir_resolver() if self._start_dir_resolver else None
        try:
            selected, _filter = QFileDialog.getOpenFileName(
                parent,
                self._caption,
                str(start_dir or Path.home()),
                file_filter_for(mimetype),
            )
        except RuntimeError as exc:
            raise FilePickerError("The file dialog could not be opened", cause=exc) from exc
        if not selected:
            return None
        path = Path(selected)
        LOGGER.debug("QtFilePicker: selected %s", path)
        return FileInfo(service=LOCAL_SERVICE, path=str(path), url=path.as_uri(), name=path.name)


class NewWebsiteDialog(QDialog):
    """Lists bundled templates and recently opened websites."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        templates: Sequence[TemplateInfo] = (),
        recent_files: Sequence[FileInfo] = (),
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("New Website")
        self.setMinimumWidth(420)

        self._templates = QListWidget(self)
        for template in templates:
            item = QListWidgetItem(template.name.replace("-", " ").title())
            item.setData(Qt.ItemDataRole.UserRole, template)
            item.setToolTip(template.url)
            self._templates.addItem(item)

        self._recent = QListWidget(self)
        for file_info in recent_files:
            item = QListWidgetItem(file_info.display_name)
            item.setData(Qt.ItemDataRole.UserRole, file_info)
            item.setToolTip(f"{file_info.service}: {file_info.path}")
            self._recent.addItem(item)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
            parent=self,
        )
        buttons.button(QDialogButtonBox.StandardButton.Ok).setText("Create")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Start from a template", self))
        layout.addWidget(self._templates)
        if recent_files:
            layout.addWidget(QLabel("Or open a recent website", self))
            layout.addWidget(self._recent)
        else:
            self._recent.hide()
        layout.addWidget(buttons)

        self._templates.itemDoubleClicked.connect(lambda _item: self.accept())
        self._recent.itemDoubleClicked.connect(lambda _item: self.accept())
        self._templates.itemClicked.connect(lambda _item: self._recent.clearSelection())
        self._recent.itemClicked.connect(lambda _item: self._templates.clearSelection())

    def selection(self) -> TemplateInfo | FileInfo | None:
        for widget in (self._recent, self._templates):
            item = widget.currentItem()
            if item is not None and item.isSelected():
                return item.data(Qt.ItemDataRole.UserRole)
        return None

    def select_template(self, index: int) -> None:
        self._recent.clearSelection()
        self._templates.setCurrentRow(index)

    def select_recent(self, index: int) -> None:
        self._templates.clearSelection()
        self._recent.setCurrentRow(index)


class QtTemplateDialog:
    """``TemplateDialog`` showing :class:`NewWebsiteDialog` and yielding its outcome.

    Yields ``Ready`` once the dialog is on screen, then a single
    ``TemplateChosen`` or ``FileInfoChosen``; dismissing the dialog yields
    ``TemplateChosen(None)``.
    """

    def __init__(
        self,
        *,
        parent_provider: Callable[[], QWidget | None] | None = None,
        templates_dir: Path | str | None = None,
        recent_provider: Callable[[], Sequence[FileInfo]] | None = None,
    ) -> None:
        self._parent_provider = parent_provider
        self._templates_dir = templates_dir
        self._recent_provider = recent_provider
        self._dialog: NewWebsiteDialog | None = None

    @property
    def dialog(self) -> NewWebsiteDialog | None:
        return self._dialog

    async def signals(self) -> AsyncIterator[DialogSignal]:
        try:
            templates = await asyncio.to_thread(list_templates, self._templates_dir)
        except OSError as exc:
            yield DialogFailed(TemplateListingError("Could not list templates", cause=exc))
            return
        recent = list(self._recent_provider()) if self._recent_provider else []

        parent = self._parent_provider() if self._parent_provider else None
        dialog = NewWebsiteDialog(parent, templates=templates, recent_files=recent)
        finished: asyncio.Future[int] = asyncio.get_running_loop().create_future()

        def _on_finished(result: int) -> None:
            if not finished.done():
                finished.set_result(result)

        dialog.finished.connect(_on_finished)
        self._dialog = dialog
        dialog.open()
        try:
            yield Ready()
            result = await finished
            choice = dialog.selection() if result == QDialog.DialogCode.Accepted.value else None
        finally:
            if dialog.isVisible():
                dialog.reject()
            self._dialog = None
            dialog.deleteLater()

        if isinstance(choice, FileInfo):
            yield FileInfoChosen(choice)
        elif isinstance(choice, TemplateInfo):
            yield TemplateChosen(choice.url)
        else:
            yield TemplateChosen(None)


__all__ = [
    "QtFilePicker",
    "QtTemplateDialog",
    "NewWebsiteDialog",
    "file_filter_for",
]
