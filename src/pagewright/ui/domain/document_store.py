"""Document store domain manager.

Holds the single edited website document. Use cases never keep markup
themselves; they read and replace it through this store.
"""

from __future__ import annotations

import asyncio
import html
import logging
import re
from pathlib import Path
from typing import Awaitable, Callable, Mapping, Protocol

from ...editor.document_model import (
    Document,
    FileInfo,
    PublicationTarget,
    embed_publication_target,
)
from ...utils import file_io
from ..application.errors import DocumentOpenError

LOGGER = logging.getLogger(__name__)

LOCAL_SERVICE = "local"
_LEGACY_TARGET_META_RE = re.compile(
    r"<meta\s+name=[\"']publicationPath[\"']\s+content=(?P<quote>[\"'])(?P<content>.*?)(?P=quote)\s*/?>",
    re.IGNORECASE | re.DOTALL,
)


class StorageProvider(Protocol):
    """Reads documents stored on one service (local disk, cloud drive...)."""

    async def read(self, file_info: FileInfo) -> str: ...


class LocalStorageProvider:
    """Reads documents from the local filesystem off the event loop thread."""

    async def read(self, file_info: FileInfo) -> str:
        path = Path(file_info.path).expanduser()
        if not path.exists():
            raise DocumentOpenError(
                f"{path} does not exist", service=file_info.service, location=file_info.path
            )
        try:
            return await asyncio.to_thread(file_io.read_text, path)
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentOpenError(
                f"Could not read {path}", service=file_info.service, location=file_info.path, cause=exc
            ) from exc


class DocumentStore:
    """Single source of truth for the edited website.

    Args:
        template_fetcher: Coroutine returning template markup for a URL.
        providers: Storage providers keyed by :attr:`FileInfo.service`; a
            local filesystem provider is always registered.
        loading_listener: Called with ``True``/``False`` around loads made with
            ``show_loader=True`` (the Qt shell shows a busy cursor).
    """

    def __init__(
        self,
        *,
        template_fetcher: Callable[[str], Awaitable[str]] | None = None,
        providers: Mapping[str, StorageProvider] | None = None,
        loading_listener: Callable[[bool], None] | None = None,
    ) -> None:
        self._document: Document | None = None
        self._template_fetcher = template_fetcher
        self._providers: dict[str, StorageProvider] = {LOCAL_SERVICE: LocalStorageProvider()}
        if providers:
            self._providers.update(providers)
        self._loading_listener = loading_listener

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def set_loading_listener(self, listener: Callable[[bool], None] | None) -> None:
        self._loading_listener = listener

    async def open(self, file_info: FileInfo) -> str:
        """Return the raw markup stored at ``file_info``.

        Raises:
            DocumentOpenError: Unknown service or unreadable document.
        """

        provider = self._providers.get(file_info.service)
        if provider is None:
            raise DocumentOpenError(
                f"No storage provider for {file_info.service}",
                service=file_info.service,
                location=file_info.path,
            )
        LOGGER.debug("DocumentStore.open: service=%s path=%s", file_info.service, file_info.path)
        return await provider.read(file_info)

    async def open_from_url(self, url: str) -> str:
        if self._template_fetcher is None:
            raise DocumentOpenError("Templates are not available", location=url)
        LOGGER.debug("DocumentStore.open_from_url: %s", url)
        return await self._template_fetcher(url)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def set_content(
        self,
        content: str,
        *,
        file_info: FileInfo | None = None,
        validate_compat: bool = True,
        show_loader: bool = True,
    ) -> None:
        """Replace the current document with ``content``.

        With ``validate_compat`` the markup must look like an HTML page and
        a legacy ``publicationPath`` meta tag is upgraded to the current
        ``publication-target`` format. The previous document is kept when
        validation fails.

        Raises:
            DocumentOpenError: ``content`` is not a website document.
        """

        if show_loader:
            self._notify_loading(True)
        try:
            if validate_compat:
                if not file_io.looks_like_html(content):
                    raise DocumentOpenError("This file is not a website document")
                content = _upgrade_legacy_markup(content)
            document = Document.from_markup(content, file_info=file_info)
            # one loop turn for the loader to paint
            await asyncio.sleep(0)
            self._document = document
        finally:
            if show_loader:
                self._notify_loading(False)
        LOGGER.debug(
            "DocumentStore.set_content: document_id=%s title=%r file=%s",
            document.document_id,
            document.metadata.title,
            file_info.path if file_info else None,
        )

    def has_content(self) -> bool:
        return self._document is not None and bool(self._document.content)

    def get_content(self) -> str:
        return self._document.content if self._document is not None else ""

    @property
    def document(self) -> Document | None:
        return self._document

    def get_file_info(self) -> FileInfo | None:
        return self._document.metadata.file_info if self._document is not None else None

    def get_publication_target(self) -> PublicationTarget | None:
        return self._document.metadata.publication_target if self._document is not None else None

    def get_title(self) -> str | None:
        return self._document.metadata.title if self._document is not None else None

    def set_publication_target(self, target: PublicationTarget | None) -> None:
        """Write ``target`` into the document head (``None`` removes it)."""

        if self._document is None:
            raise RuntimeError("No document is loaded")
        content = embed_publication_target(self._document.content, target)
        self._document = Document.from_markup(content, file_info=self._document.metadata.file_info)
        LOGGER.debug("DocumentStore.set_publication_target: %s", target)

    def _notify_loading(self, loading: bool) -> None:
        if self._loading_listener is None:
            return
        try:
            self._loading_listener(loading)
        except Exception:  # pragma: no cover - UI listeners must not break loads
            LOGGER.debug("Loading listener failed", exc_info=True)


def _upgrade_legacy_markup(content: str) -> str:
    match = _LEGACY_TARGET_META_RE.search(content)
    if match is None:
        return content
    path = html.unescape(match.group("content")).strip()
    stripped = content[: match.start()] + content[match.end():]
    if not path:
        return stripped
    LOGGER.info("Upgrading legacy publicationPath meta tag (%s)", path)
    return embed_publication_target(stripped, PublicationTarget(path=path))


__all__ = [
    "LOCAL_SERVICE",
    "StorageProvider",
    "LocalStorageProvider",
    "DocumentStore",
]
