"""Qt implementation of the notification channel.

Alerts are non-modal :class:`QMessageBox` instances so the asyncio loop
(and the publish poller) keeps running while one is on screen. Only one
alert is shown at a time; :attr:`QtNotificationChannel.is_active` reports
whether it is still open.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QMessageBox, QWidget

LOGGER = logging.getLogger(__name__)

DEFAULT_TITLE = "Pagewright"


class QtNotificationChannel:
    """Shows alerts, errors and progress text in a message box.

    Args:
        parent_provider: Returns the widget alerts are parented to.
        title: Window title used for every message box.
    """

    def __init__(
        self,
        parent_provider: Callable[[], QWidget | None] | None = None,
        *,
        title: str = DEFAULT_TITLE,
    ) -> None:
        self._parent_provider = parent_provider
        self._title = title
        self._box: QMessageBox | None = None
        self._on_close: Callable[[], None] | None = None
        self._info_panel: QWidget | None = None

    @property
    def is_active(self) -> bool:
        return self._box is not None and self._box.isVisible()

    @property
    def current_box(self) -> QMessageBox | None:
        return self._box

    def alert(
        self,
        message: str,
        on_close: Callable[[], None] | None = None,
        *,
        button_label: str | None = None,
    ) -> None:
        self._show(QMessageBox.Icon.Information, _as_rich_text(message), on_close, button_label)

    def notify_error(self, message: str) -> None:
        LOGGER.debug("Notifying error: %s", message)
        self._show(QMessageBox.Icon.Critical, _as_rich_text(message), None, None)

    def set_text(self, message: str) -> None:
        if self._box is None:
            LOGGER.debug("set_text without an open alert: %s", message)
            return
        self._box.setText(message)

    def set_info_panel(self, panel: Any) -> None:
        """Attach ``panel`` below the alert text; strings become a label."""

        box = self._box
        if box is None:
            return
        widget = panel if isinstance(panel, QWidget) else QLabel(str(panel))
        if isinstance(widget, QLabel):
            widget.setWordWrap(True)
            widget.setTextFormat(Qt.TextFormat.RichText)
            widget.setOpenExternalLinks(True)
        if self._info_panel is not None:
            self._info_panel.deleteLater()
        self._info_panel = widget
        layout = box.layout()
        layout.addWidget(widget, layout.rowCount(), 0, 1, layout.columnCount())

    def close(self) -> None:
        if self._box is not None:
            self._box.done(0)

    def _show(
        self,
        icon: QMessageBox.Icon,
        message: str,
        on_close: Callable[[], None] | None,
        button_label: str | None,
    ) -> None:
        if self._box is not None:
            # replacing an open alert counts as closing it
            self.close()
        parent = self._parent_provider() if self._parent_provider else None
        box = QMessageBox(parent)
        box.setWindowTitle(self._title)
        box.setIcon(icon)
        box.setTextFormat(Qt.TextFormat.RichText)
        box.setText(message)
        box.setWindowModality(Qt.WindowModality.NonModal)
        box.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose, True)
        if button_label:
            box.addButton(button_label, QMessageBox.ButtonRole.AcceptRole)
        else:
            box.setStandardButtons(QMessageBox.StandardButton.Ok)
        box.finished.connect(lambda _result, b=box: self._on_finished(b))
        self._box = box
        self._on_close = on_close
        self._info_panel = None
        box.show()

    def _on_finished(self, box: QMessageBox) -> None:
        if box is not self._box:
            return
        callback = self._on_close
        self._box = None
        self._on_close = None
        self._info_panel = None
        if callback is None:
            return
        try:
            callback()
        except Exception:
            LOGGER.exception("Alert close callback failed")


def _as_rich_text(message: str) -> str:
    return message.replace("\n", "<br>")


__all__ = ["QtNotificationChannel", "DEFAULT_TITLE"]
