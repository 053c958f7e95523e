"""Collaborator protocols consumed by the lifecycle use cases.

Everything the use cases touch outside their own state is injected through
these protocols so tests can substitute plain stubs and the Qt presentation
layer can provide the real widgets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Protocol, Union, runtime_checkable

from ...editor.document_model import FileInfo, PublicationTarget

__all__ = [
    "HTML_MIMETYPE",
    "PublishStatus",
    "Ready",
    "FileInfoChosen",
    "TemplateChosen",
    "DialogFailed",
    "DialogSignal",
    "DocumentStoreProtocol",
    "FilePicker",
    "TemplateDialog",
    "SettingsDialog",
    "PublishTransport",
    "NotificationChannel",
    "EventSink",
    "UndoHistory",
    "Workspace",
    "RecentFiles",
]

HTML_MIMETYPE = "text/html"


@dataclass(slots=True, frozen=True)
class PublishStatus:
    """One status report for a publish job.

    ``stop`` is the terminal flag: once it is ``True`` the job will not
    report again.
    """

    status: str
    stop: bool = False
    url: str | None = None


# -----------------------------------------------------------------------------
# Template dialog signals
# -----------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class Ready:
    """The dialog finished listing templates and is interactive."""


@dataclass(slots=True, frozen=True)
class FileInfoChosen:
    """A recent file was picked, or ``None`` when the dialog was dismissed."""

    file_info: FileInfo | None


@dataclass(slots=True, frozen=True)
class TemplateChosen:
    """A template URL was picked, or ``None`` when the dialog was dismissed."""

    url: str | None


@dataclass(slots=True, frozen=True)
class DialogFailed:
    error: BaseException


DialogSignal = Union[Ready, FileInfoChosen, TemplateChosen, DialogFailed]


# -----------------------------------------------------------------------------
# Collaborators
# -----------------------------------------------------------------------------


class DocumentStoreProtocol(Protocol):
    """Single source of truth for the edited document."""

    def has_content(self) -> bool: ...

    async def open(self, file_info: FileInfo) -> str:
        """Return the raw markup stored at ``file_info``; raise ``DocumentOpenError``."""
        ...

    async def open_from_url(self, url: str) -> str:
        """Return the raw markup of a template; raise ``DocumentOpenError``."""
        ...

    async def set_content(
        self,
        content: str,
        *,
        file_info: FileInfo | None = None,
        validate_compat: bool = True,
        show_loader: bool = True,
    ) -> None: ...

    def get_content(self) -> str: ...

    def get_file_info(self) -> FileInfo | None: ...

    def get_publication_target(self) -> PublicationTarget | None: ...

    def get_title(self) -> str | None: ...


class FilePicker(Protocol):
    async def open_file(self, mimetype: str) -> FileInfo | None:
        """Let the user choose a file; ``None`` means the user cancelled.

        Raises:
            FilePickerError: When the picker itself fails.
        """
        ...


class TemplateDialog(Protocol):
    def signals(self) -> AsyncIterator[DialogSignal]:
        """Open the new-website dialog and yield its signals until it closes."""
        ...


class SettingsDialog(Protocol):
    def open_dialog(self, pane: str, on_close: Callable[[], None] | None = None) -> None: ...


class PublishTransport(Protocol):
    async def request_publish(self, target_path: str, source_path: str | None, content: str) -> PublishStatus:
        """Start a publish job; raise ``PublishRejectedError`` when refused."""
        ...

    async def query_status(self) -> PublishStatus:
        """Return the current job status; raise ``PublishStatusError`` on failure."""
        ...


@runtime_checkable
class NotificationChannel(Protocol):
    """User-facing alerts, error messages and progress text."""

    @property
    def is_active(self) -> bool: ...

    def alert(
        self,
        message: str,
        on_close: Callable[[], None] | None = None,
        *,
        button_label: str | None = None,
    ) -> None: ...

    def notify_error(self, message: str) -> None: ...

    def set_text(self, message: str) -> None: ...

    def set_info_panel(self, panel: Any) -> None: ...


class EventSink(Protocol):
    def record_event(self, category: str, outcome: str, action: str, weight: int) -> None: ...


class UndoHistory(Protocol):
    def reset(self) -> None: ...


class Workspace(Protocol):
    def redraw(self) -> None: ...

    def file_operation_success(self, message: str | None, *, update_title: bool = False) -> None: ...


class RecentFiles(Protocol):
    def remember_recent_file(self, file_info: FileInfo) -> None: ...
