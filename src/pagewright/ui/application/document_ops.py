"""Document lifecycle use cases.

This module provides the use cases behind the File menu:
- NewDocumentUseCase: pick a template or recent website, or fall back to the blank template
- OpenDocumentUseCase: open a website chosen with the file picker
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

from ...editor.document_model import FileInfo
from ..events import DocumentLoaded, DocumentLoadFailed
from .context import (
    ACTION_NEW,
    ACTION_OPEN,
    WEIGHT_ERROR,
    WEIGHT_REQUEST,
    WEIGHT_SUCCESS,
    Continuation,
    Continuations,
    LifecycleContext,
)
from .errors import LifecycleError, TemplateListingError
from .ports import (
    HTML_MIMETYPE,
    DialogFailed,
    FileInfoChosen,
    FilePicker,
    Ready,
    TemplateChosen,
    TemplateDialog,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_BLANK_TEMPLATE_URL = "blank/editable.html"
UNTITLED_WEBSITE = "Untitled website"


class LoadStatus(Enum):
    LOADED = "loaded"
    READY = "ready"
    DISMISSED = "dismissed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class LoadResult:
    """Outcome of a new/open call, returned alongside the continuations.

    Attributes:
        status: How the call ended.
        file_info: File that was opened, for file-backed loads.
        error: The error reported to ``on_error``, if any.
        fell_back: ``True`` when the blank template was loaded after a failure.
    """

    status: LoadStatus
    file_info: FileInfo | None = None
    error: BaseException | None = None
    fell_back: bool = False

    @property
    def ok(self) -> bool:
        return self.status in (LoadStatus.LOADED, LoadStatus.READY)


class TemplateLoader:
    """Loads templates and recent websites into the store for the new-document flow."""

    __slots__ = ("_context", "_blank_template_url")

    def __init__(self, context: LifecycleContext, *, blank_template_url: str = DEFAULT_BLANK_TEMPLATE_URL) -> None:
        self._context = context
        self._blank_template_url = blank_template_url

    @property
    def blank_template_url(self) -> str:
        return self._blank_template_url

    async def load_blank(self, callbacks: Continuations, *, allow_fallback: bool = True) -> LoadResult:
        return await self.load_template(self._blank_template_url, callbacks, allow_fallback=allow_fallback)

    async def load_template(
        self,
        url: str,
        callbacks: Continuations,
        *,
        allow_fallback: bool = True,
    ) -> LoadResult:
        store = self._context.store
        return await self._load(
            "template",
            lambda: store.open_from_url(url),
            None,
            callbacks,
            failure_message=None,
            allow_fallback=allow_fallback,
        )

    async def load_recent(self, file_info: FileInfo, callbacks: Continuations) -> LoadResult:
        store = self._context.store
        return await self._load(
            "recent",
            lambda: store.open(file_info),
            file_info,
            callbacks,
            failure_message=f"Could not open this recent file, are you connected to {file_info.service}?",
        )

    async def _load(
        self,
        source: str,
        fetch: Callable[[], Awaitable[str]],
        file_info: FileInfo | None,
        callbacks: Continuations,
        *,
        failure_message: str | None,
        allow_fallback: bool = True,
    ) -> LoadResult:
        context = self._context
        try:
            content = await fetch()
            await context.store.set_content(content, file_info=file_info, validate_compat=True, show_loader=True)
        except LifecycleError as exc:
            return await self.fail(exc, failure_message or exc.message, callbacks, source=source, allow_fallback=allow_fallback)
        except Exception as exc:  # pragma: no cover - unexpected collaborator failures
            LOGGER.exception("Unexpected failure while loading %s", source)
            error = LifecycleError(str(exc) or type(exc).__name__, cause=exc)
            return await self.fail(error, failure_message or error.message, callbacks, source=source, allow_fallback=allow_fallback)

        context.undo.reset()
        context.workspace.file_operation_success(None, update_title=True)
        context.track("success", ACTION_NEW, WEIGHT_SUCCESS)
        await callbacks.success()
        if file_info is not None and context.recent_files is not None:
            context.recent_files.remember_recent_file(file_info)
        context.publish(
            DocumentLoaded(
                document_id=context.document_id(),
                source=source,
                title=context.store.get_title(),
                path=file_info.path if file_info else None,
            )
        )
        LOGGER.debug("TemplateLoader: loaded %s (%s)", source, file_info.path if file_info else "template")
        return LoadResult(LoadStatus.LOADED, file_info=file_info)

    async def fail(
        self,
        error: BaseException,
        message: str,
        callbacks: Continuations,
        *,
        source: str,
        allow_fallback: bool = True,
    ) -> LoadResult:
        """Report a failed load and fall back to the blank template when nothing is loaded."""

        context = self._context
        LOGGER.error("Opening %s failed: %s", source, error)
        context.notifications.alert(f"An error occured. {message}")
        await callbacks.error(error)
        context.track("error", ACTION_NEW, WEIGHT_ERROR)

        fell_back = False
        if allow_fallback and not context.store.has_content():
            LOGGER.info("No website loaded after failure; loading the blank template")
            fallback = await self.load_blank(Continuations(), allow_fallback=False)
            fell_back = fallback.status is LoadStatus.LOADED
        context.publish(DocumentLoadFailed(source=source, message=message, fell_back=fell_back))
        return LoadResult(LoadStatus.FAILED, error=error, fell_back=fell_back)


class NewDocumentUseCase:
    """Use case for creating a website from the new-website dialog.

    The dialog may report ``Ready``, then at most one choice. Dismissing it
    while no website is loaded loads the blank template.
    """

    __slots__ = ("_context", "_dialog", "_loader")

    def __init__(
        self,
        context: LifecycleContext,
        dialog: TemplateDialog,
        *,
        blank_template_url: str = DEFAULT_BLANK_TEMPLATE_URL,
    ) -> None:
        self._context = context
        self._dialog = dialog
        self._loader = TemplateLoader(context, blank_template_url=blank_template_url)

    async def execute(
        self,
        on_success: Continuation | None = None,
        on_error: Continuation | None = None,
    ) -> LoadResult:
        context = self._context
        callbacks = Continuations(on_success, on_error)
        context.track("request", ACTION_NEW, WEIGHT_REQUEST)

        ready = False
        result: LoadResult | None = None
        signals = self._dialog.signals()
        try:
            async for signal in signals:
                if isinstance(signal, Ready):
                    ready = True
                    await callbacks.success()
                    continue
                result = await self._handle(signal, callbacks)
                break
        except LifecycleError as exc:
            result = await self._loader.fail(exc, "Loading templates error", callbacks, source="dialog")
        except Exception as exc:
            LOGGER.exception("New website dialog failed")
            error = TemplateListingError(str(exc) or type(exc).__name__, cause=exc)
            result = await self._loader.fail(error, "Loading templates error", callbacks, source="dialog")
        finally:
            aclose = getattr(signals, "aclose", None)
            if aclose is not None:
                await aclose()

        if result is None:
            result = LoadResult(LoadStatus.READY if ready else LoadStatus.DISMISSED)
        return result

    async def _handle(self, signal: object, callbacks: Continuations) -> LoadResult:
        store = self._context.store
        if isinstance(signal, DialogFailed):
            LOGGER.error("Loading templates error: %s", signal.error)
            return await self._loader.fail(signal.error, "Loading templates error", callbacks, source="dialog")
        if isinstance(signal, FileInfoChosen):
            if signal.file_info is not None:
                return await self._loader.load_recent(signal.file_info, callbacks)
        elif isinstance(signal, TemplateChosen):
            if signal.url:
                return await self._loader.load_template(signal.url, callbacks)
        else:
            LOGGER.warning("Ignoring unknown dialog signal %r", signal)
            return LoadResult(LoadStatus.DISMISSED)

        if not store.has_content():
            LOGGER.debug("New website dialog dismissed with nothing loaded")
            return await self._loader.load_blank(callbacks)
        return LoadResult(LoadStatus.DISMISSED)


class OpenDocumentUseCase:
    """Use case for opening a website chosen with the file picker.

    Handles:
    - the picker being cancelled or failing
    - replacing the document and resetting the undo history
    - updating the recent files list
    """

    __slots__ = ("_context", "_picker")

    def __init__(self, context: LifecycleContext, picker: FilePicker) -> None:
        self._context = context
        self._picker = picker

    async def execute(
        self,
        on_success: Continuation | None = None,
        on_error: Continuation | None = None,
        on_cancel: Continuation | None = None,
    ) -> LoadResult:
        context = self._context
        callbacks = Continuations(on_success, on_error, on_cancel)
        context.track("request", ACTION_OPEN, WEIGHT_REQUEST)

        try:
            file_info = await self._picker.open_file(HTML_MIMETYPE)
        except LifecycleError as exc:
            return await self._fail(exc, callbacks)
        except Exception as exc:
            LOGGER.exception("File picker failed")
            return await self._fail(LifecycleError(str(exc) or type(exc).__name__, cause=exc), callbacks)

        if file_info is None:
            LOGGER.debug("OpenDocumentUseCase: picker cancelled")
            await callbacks.cancel()
            return LoadResult(LoadStatus.CANCELLED)

        try:
            content = await context.store.open(file_info)
            await context.store.set_content(content, file_info=file_info, validate_compat=True, show_loader=True)
        except LifecycleError as exc:
            return await self._fail(exc, callbacks, file_info=file_info)
        except Exception as exc:
            LOGGER.exception("Unexpected failure while opening %s", file_info.path)
            return await self._fail(LifecycleError(str(exc) or type(exc).__name__, cause=exc), callbacks, file_info=file_info)

        context.undo.reset()
        title = context.store.get_title() or UNTITLED_WEBSITE
        context.workspace.file_operation_success(f"{title} opened.", update_title=True)
        context.track("success", ACTION_OPEN, WEIGHT_SUCCESS)
        await callbacks.success(file_info)
        if context.recent_files is not None:
            context.recent_files.remember_recent_file(file_info)
        context.publish(DocumentLoaded(document_id=context.document_id(), source="file", title=title, path=file_info.path))
        LOGGER.info("Opened %s from %s", file_info.path, file_info.service)
        return LoadResult(LoadStatus.LOADED, file_info=file_info)

    async def _fail(
        self,
        error: LifecycleError,
        callbacks: Continuations,
        *,
        file_info: FileInfo | None = None,
    ) -> LoadResult:
        context = self._context
        LOGGER.error("Error: I did not manage to open this file: %s", error)
        context.notifications.notify_error(f"Error: I did not manage to open this file. \n{error.message}")
        context.track("error", ACTION_OPEN, WEIGHT_ERROR)
        await callbacks.error(error)
        context.publish(DocumentLoadFailed(source="file", message=error.message))
        return LoadResult(LoadStatus.FAILED, file_info=file_info, error=error)


__all__ = [
    "DEFAULT_BLANK_TEMPLATE_URL",
    "UNTITLED_WEBSITE",
    "LoadStatus",
    "LoadResult",
    "TemplateLoader",
    "NewDocumentUseCase",
    "OpenDocumentUseCase",
]
