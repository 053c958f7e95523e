"""Publish use case and the status poller that follows a publish job."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ..events import EventBus, PublishFinished, PublishProgress, PublishStarted, SettingsPaneRequested
from .context import (
    ACTION_PUBLISH,
    WEIGHT_CANCEL,
    WEIGHT_ERROR,
    WEIGHT_REQUEST,
    WEIGHT_SUCCESS,
    LifecycleContext,
)
from .errors import LifecycleError
from .ports import NotificationChannel, PublishTransport, SettingsDialog

LOGGER = logging.getLogger(__name__)

PUBLISH_PANE = "publish-pane"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_INFO_PANEL_DELAY = 2.0

NO_TARGET_MESSAGE = (
    "I do not know where to publish your site. "
    'Select a folder in the settings panel and do "publish" again.'
    "\nNow I will open the publish settings."
)
PUBLISH_STARTED_MESSAGE = "<strong>I am about to publish your site. This may take several minutes.</strong>"
PUBLISH_REJECTED_MESSAGE = (
    "I did not manage to publish the file. You may want to check the publication settings "
    "and your internet connection. \nError message: {message}"
)
POLL_FAILED_TEXT = "<strong>An unknown error occurred.</strong>"
POLL_TIMEOUT_TEXT = "<strong>The publication is taking too long, I stopped waiting for it.</strong>"
PREVIEW_LINK = '<p>Preview <a target="_blank" href="{url}/index.html">your published site here</a>.</p>'


class PublishState(Enum):
    IDLE = "idle"
    SETTINGS_PROMPTED = "settings_prompted"
    REQUESTING = "requesting"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"
    STOPPED = "stopped"


_FINAL_STATES = frozenset({PublishState.DONE, PublishState.FAILED, PublishState.STOPPED})


@dataclass(slots=True)
class PublishJob:
    """One in-flight publish request and the last status it reported."""

    target_path: str
    target_url: str | None = None
    status_text: str = ""
    terminal: bool = False
    result_url: str | None = None
    state: PublishState = PublishState.REQUESTING
    poll_count: int = 0

    @property
    def finished(self) -> bool:
        return self.state in _FINAL_STATES


class PublishStatusPoller:
    """Polls the transport at a fixed interval until the job reports ``stop``.

    The first query happens one interval after :meth:`start`. A failed query
    ends the job immediately; it is never retried.
    """

    __slots__ = (
        "_job",
        "_transport",
        "_notifications",
        "_interval",
        "_max_polls",
        "_event_bus",
        "_task",
    )

    def __init__(
        self,
        job: PublishJob,
        transport: PublishTransport,
        notifications: NotificationChannel,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_polls: int | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self._job = job
        self._transport = transport
        self._notifications = notifications
        self._interval = interval
        self._max_polls = max_polls if max_polls and max_polls > 0 else None
        self._event_bus = event_bus
        self._task: asyncio.Task[None] | None = None

    @property
    def job(self) -> PublishJob:
        return self._job

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        if self._task is not None:
            raise RuntimeError("Poller already started")
        self._job.state = PublishState.POLLING
        task = asyncio.get_running_loop().create_task(self.run(), name=f"publish-poll:{self._job.target_path}")
        task.add_done_callback(self._on_task_done)
        self._task = task
        return task

    def stop(self) -> None:
        """Stop polling; the job ends in ``STOPPED`` unless it already finished."""

        if self._task is None:
            if not self._job.finished:
                self._finish(PublishState.STOPPED)
            return
        if not self._task.done():
            LOGGER.debug("Stopping publish poller for %s", self._job.target_path)
            self._task.cancel()

    async def wait(self) -> PublishJob:
        if self._task is not None:
            await asyncio.wait({self._task})
        return self._job

    async def run(self) -> None:
        job = self._job
        while True:
            await asyncio.sleep(self._interval)
            if self._max_polls is not None and job.poll_count >= self._max_polls:
                LOGGER.warning("Publish to %s still running after %d polls", job.target_path, job.poll_count)
                self._notifications.set_text(POLL_TIMEOUT_TEXT)
                self._finish(PublishState.FAILED)
                return
            job.poll_count += 1
            try:
                status = await self._transport.query_status()
            except LifecycleError as exc:
                self._fail(exc)
                return
            except Exception as exc:
                LOGGER.exception("Unexpected publish status failure")
                self._fail(exc)
                return

            text = f"<strong>{status.status}</strong>"
            job.status_text = status.status
            if status.stop:
                job.terminal = True
                if job.target_url:
                    job.result_url = f"{job.target_url}/index.html"
                    text += PREVIEW_LINK.format(url=job.target_url)
                elif status.url:
                    job.result_url = status.url
            self._notifications.set_text(text)
            self._publish(PublishProgress(target_path=job.target_path, status=status.status, poll_count=job.poll_count))
            if status.stop:
                LOGGER.info("Publish to %s finished: %s", job.target_path, status.status)
                self._finish(PublishState.DONE)
                return

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled() and not self._job.finished:
            self._finish(PublishState.STOPPED)

    def _fail(self, error: BaseException) -> None:
        LOGGER.error("Publish status query failed: %s", error)
        self._notifications.set_text(POLL_FAILED_TEXT)
        self._finish(PublishState.FAILED)

    def _finish(self, state: PublishState) -> None:
        self._job.state = state
        self._publish(PublishFinished(target_path=self._job.target_path, state=state.value, result_url=self._job.result_url))

    def _publish(self, event: Any) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)


class PublishUseCase:
    """Use case for publishing the current website to its publication target.

    Without a target the user is sent to the publish settings pane. With one,
    the transport is asked to start a job and a :class:`PublishStatusPoller`
    follows it until a terminal status, an error, or the user closing the
    progress alert.
    """

    __slots__ = (
        "_context",
        "_transport",
        "_settings_dialog",
        "_poll_interval",
        "_max_polls",
        "_info_panel_factory",
        "_info_panel_delay",
        "_poller",
        "_requesting",
    )

    def __init__(
        self,
        context: LifecycleContext,
        transport: PublishTransport,
        settings_dialog: SettingsDialog,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_polls: int | None = None,
        info_panel_factory: Callable[[], Any] | None = None,
        info_panel_delay: float = DEFAULT_INFO_PANEL_DELAY,
    ) -> None:
        self._context = context
        self._transport = transport
        self._settings_dialog = settings_dialog
        self._poll_interval = poll_interval
        self._max_polls = max_polls
        self._info_panel_factory = info_panel_factory
        self._info_panel_delay = info_panel_delay
        self._poller: PublishStatusPoller | None = None
        self._requesting = False

    @property
    def poller(self) -> PublishStatusPoller | None:
        return self._poller

    @property
    def job(self) -> PublishJob | None:
        return self._poller.job if self._poller is not None else None

    @property
    def busy(self) -> bool:
        """``True`` while a publish request is in flight or its poller is running."""

        return self._requesting or (self._poller is not None and self._poller.running)

    async def execute(self) -> PublishState:
        context = self._context
        notifications = context.notifications
        if notifications.is_active:
            LOGGER.warning("Publish canceled because a modal dialog is opened already.")
            return PublishState.IDLE
        if self.busy:
            LOGGER.warning("Publish canceled because a publication is already in progress.")
            return PublishState.IDLE

        context.track("request", ACTION_PUBLISH, WEIGHT_REQUEST)
        target = context.store.get_publication_target()
        if target is None or not target.path:
            self._prompt_settings()
            return PublishState.SETTINGS_PROMPTED

        file_info = context.store.get_file_info()
        source_path = file_info.path if file_info is not None else None
        job = PublishJob(target_path=target.path, target_url=target.url)
        LOGGER.info("Publishing to %s", target.path)
        self._requesting = True
        try:
            initial = await self._transport.request_publish(target.path, source_path, context.store.get_content())
        except LifecycleError as exc:
            return self._rejected(job, exc.message)
        except Exception as exc:
            LOGGER.exception("Unexpected publish failure")
            return self._rejected(job, str(exc) or type(exc).__name__)
        finally:
            self._requesting = False

        job.status_text = initial.status
        poller = PublishStatusPoller(
            job,
            self._transport,
            notifications,
            interval=self._poll_interval,
            max_polls=self._max_polls,
            event_bus=context.event_bus,
        )
        self._poller = poller
        info_panel = self._schedule_info_panel()

        def _on_close() -> None:
            poller.stop()
            if info_panel is not None:
                info_panel.cancel()

        notifications.alert(PUBLISH_STARTED_MESSAGE, _on_close, button_label="Close")
        poller.start()
        context.track("success", ACTION_PUBLISH, WEIGHT_SUCCESS)
        context.publish(PublishStarted(target_path=target.path))
        return PublishState.POLLING

    def stop(self) -> None:
        if self._poller is not None:
            self._poller.stop()

    def _prompt_settings(self) -> None:
        context = self._context

        def _open_settings() -> None:
            self._settings_dialog.open_dialog(PUBLISH_PANE)
            context.publish(SettingsPaneRequested(pane=PUBLISH_PANE))
            context.workspace.redraw()
            context.track("cancel", ACTION_PUBLISH, WEIGHT_CANCEL)

        context.notifications.alert(NO_TARGET_MESSAGE, _open_settings)

    def _rejected(self, job: PublishJob, message: str) -> PublishState:
        context = self._context
        LOGGER.error("Error: I did not manage to publish the file: %s", message)
        job.state = PublishState.FAILED
        context.notifications.notify_error(PUBLISH_REJECTED_MESSAGE.format(message=message))
        context.track("error", ACTION_PUBLISH, WEIGHT_ERROR)
        context.publish(PublishFinished(target_path=job.target_path, state=job.state.value))
        return PublishState.FAILED

    def _schedule_info_panel(self) -> asyncio.TimerHandle | None:
        factory = self._info_panel_factory
        if factory is None:
            return None
        notifications = self._context.notifications

        def _show() -> None:
            try:
                notifications.set_info_panel(factory())
            except Exception:  # pragma: no cover - decorative panel only
                LOGGER.debug("Info panel failed", exc_info=True)

        return asyncio.get_running_loop().call_later(self._info_panel_delay, _show)


__all__ = [
    "PUBLISH_PANE",
    "PublishState",
    "PublishJob",
    "PublishStatusPoller",
    "PublishUseCase",
]
