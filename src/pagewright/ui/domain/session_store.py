"""Session state persisted through settings: recent files and the last opened website."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from ...editor.document_model import FileInfo

if TYPE_CHECKING:  # pragma: no cover
    from ...services.settings import Settings

LOGGER = logging.getLogger(__name__)

MAX_RECENT_FILES = 10


class SessionStore:
    """Keeps the most-recent-first list of opened websites in :class:`Settings`.

    Args:
        settings_provider: Returns the live settings object (or ``None``).
        persist: Called with the settings after each change, usually
            :meth:`SettingsStore.save`.
    """

    def __init__(
        self,
        settings_provider: Callable[[], Settings | None],
        *,
        persist: Callable[[Settings], object] | None = None,
    ) -> None:
        self._settings_provider = settings_provider
        self._persist = persist

    def recent_files(self) -> list[FileInfo]:
        settings = self._settings_provider()
        if settings is None:
            return []
        entries: list[FileInfo] = []
        for payload in settings.recent_files:
            try:
                entries.append(FileInfo.from_dict(payload))
            except (KeyError, TypeError):
                LOGGER.debug("Skipping malformed recent file entry %r", payload)
        return entries

    def remember_recent_file(self, file_info: FileInfo) -> None:
        """Move ``file_info`` to the front of the recent list and persist settings."""

        settings = self._settings_provider()
        if settings is None:
            return
        updated = [file_info.to_dict()]
        for existing in self.recent_files():
            if (existing.service, existing.path) == (file_info.service, file_info.path):
                continue
            updated.append(existing.to_dict())
            if len(updated) >= MAX_RECENT_FILES:
                break
        settings.recent_files = updated
        settings.last_open_file = file_info.to_dict()
        LOGGER.debug("SessionStore.remember_recent_file: %s, total=%d", file_info.path, len(updated))
        self.persist_settings(settings)

    def persist_settings(self, settings: Settings) -> None:
        if self._persist is None:
            return
        try:
            self._persist(settings)
        except OSError as exc:
            LOGGER.warning("Failed to persist settings: %s", exc)
