"""Tests for the new/open document use cases."""

from __future__ import annotations

import pytest

from pagewright.editor.document_model import FileInfo
from pagewright.ui.application.document_ops import LoadStatus
from pagewright.ui.application.errors import DocumentOpenError, FilePickerError
from pagewright.ui.application.ports import HTML_MIMETYPE, DialogFailed, FileInfoChosen, Ready, TemplateChosen
from pagewright.ui.events import DocumentLoaded, DocumentLoadFailed
from tests.helpers import BLANK_URL, FakeFilePicker, ScriptedTemplateDialog, build_harness, page


async def _load_existing(harness, title: str = "Existing") -> str:
    content = page(title)
    await harness.store.set_content(content)
    return content


# ---------------------------------------------------------------------------
# open_document
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_open_document_success_calls_on_success_with_file_info() -> None:
    file_info = FileInfo(service="local", path="/a.html")
    harness = build_harness(picker=FakeFilePicker(file_info), files={"/a.html": "<html>ok</html>"})
    received: list[FileInfo] = []

    result = await harness.orchestrator.open_document(on_success=received.append)

    assert result.status is LoadStatus.LOADED
    assert received == [file_info]
    assert harness.undo.resets == 1
    assert harness.events_for("file.open") == [("request", 0), ("success", 1)]
    assert harness.store.get_content() == "<html>ok</html>"
    assert harness.picker.mimetypes == [HTML_MIMETYPE]


@pytest.mark.asyncio
async def test_open_document_reports_title_and_remembers_file() -> None:
    file_info = FileInfo(service="local", path="/site/index.html")
    harness = build_harness(picker=FakeFilePicker(file_info), files={"/site/index.html": page("Portfolio")})

    await harness.orchestrator.open_document()

    assert harness.workspace.messages == [("Portfolio opened.", True)]
    assert harness.recent.remembered == [file_info]
    loaded = [event for event in harness.published if isinstance(event, DocumentLoaded)]
    assert loaded and loaded[0].source == "file" and loaded[0].path == "/site/index.html"


@pytest.mark.asyncio
async def test_open_document_without_title_uses_untitled_website() -> None:
    file_info = FileInfo(service="local", path="/b.html")
    harness = build_harness(picker=FakeFilePicker(file_info), files={"/b.html": "<html><body></body></html>"})

    await harness.orchestrator.open_document()

    assert harness.workspace.messages == [("Untitled website opened.", True)]


@pytest.mark.asyncio
async def test_open_document_cancel_only_calls_on_cancel() -> None:
    harness = build_harness(picker=FakeFilePicker(None))
    calls: list[str] = []

    result = await harness.orchestrator.open_document(
        on_success=lambda _info: calls.append("success"),
        on_error=lambda _err: calls.append("error"),
        on_cancel=lambda: calls.append("cancel"),
    )

    assert result.status is LoadStatus.CANCELLED
    assert calls == ["cancel"]
    assert harness.events_for("file.open") == [("request", 0)]
    assert harness.notifications.errors == []
    assert harness.undo.resets == 0


@pytest.mark.asyncio
async def test_open_document_picker_error_notifies_and_calls_on_error() -> None:
    failure = FilePickerError("picker exploded")
    harness = build_harness(picker=FakeFilePicker(failure))
    errors: list[BaseException] = []

    result = await harness.orchestrator.open_document(on_error=errors.append)

    assert result.status is LoadStatus.FAILED
    assert errors == [failure]
    assert harness.notifications.errors == ["Error: I did not manage to open this file. \npicker exploded"]
    assert harness.events_for("file.open") == [("request", 0), ("error", -1)]


@pytest.mark.asyncio
async def test_open_document_read_error_keeps_previous_document() -> None:
    file_info = FileInfo(service="local", path="/missing.html")
    harness = build_harness(picker=FakeFilePicker(file_info))
    previous = await _load_existing(harness)
    errors: list[BaseException] = []

    await harness.orchestrator.open_document(on_error=errors.append)

    assert harness.store.get_content() == previous
    assert len(errors) == 1 and isinstance(errors[0], DocumentOpenError)
    assert harness.notifications.errors[0].startswith("Error: I did not manage to open this file. \n")
    assert harness.undo.resets == 0
    assert harness.recent.remembered == []


@pytest.mark.asyncio
async def test_open_document_rejects_non_html_content() -> None:
    file_info = FileInfo(service="local", path="/notes.txt")
    harness = build_harness(picker=FakeFilePicker(file_info), files={"/notes.txt": "just some notes"})
    previous = await _load_existing(harness)

    result = await harness.orchestrator.open_document()

    assert result.status is LoadStatus.FAILED
    assert harness.store.get_content() == previous


@pytest.mark.asyncio
async def test_open_document_swallows_continuation_errors() -> None:
    file_info = FileInfo(service="local", path="/a.html")
    harness = build_harness(picker=FakeFilePicker(file_info), files={"/a.html": "<html>ok</html>"})

    def _boom(_info: FileInfo) -> None:
        raise RuntimeError("callback failure")

    result = await harness.orchestrator.open_document(on_success=_boom)

    assert result.status is LoadStatus.LOADED
    assert harness.events_for("file.open") == [("request", 0), ("success", 1)]


@pytest.mark.asyncio
async def test_open_document_awaits_async_continuations() -> None:
    file_info = FileInfo(service="local", path="/a.html")
    harness = build_harness(picker=FakeFilePicker(file_info), files={"/a.html": "<html>ok</html>"})
    received: list[FileInfo] = []

    async def _on_success(info: FileInfo) -> None:
        received.append(info)

    await harness.orchestrator.open_document(on_success=_on_success)

    assert received == [file_info]


# ---------------------------------------------------------------------------
# new_document
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_new_document_dismissed_without_content_loads_blank_once() -> None:
    harness = build_harness(dialog=ScriptedTemplateDialog(FileInfoChosen(None)))
    content_at_success: list[bool] = []

    result = await harness.orchestrator.new_document(
        on_success=lambda: content_at_success.append(harness.store.has_content())
    )

    assert result.status is LoadStatus.LOADED
    assert harness.templates.count(BLANK_URL) == 1
    assert content_at_success == [True]
    assert harness.events_for("file.new") == [("request", 0), ("success", 1)]


@pytest.mark.asyncio
async def test_new_document_template_dismissed_without_content_loads_blank() -> None:
    harness = build_harness(dialog=ScriptedTemplateDialog(TemplateChosen(None)))

    await harness.orchestrator.new_document()

    assert harness.templates.calls == [BLANK_URL]
    assert harness.store.get_title() == "Blank"


@pytest.mark.asyncio
async def test_new_document_dismissed_with_content_keeps_document() -> None:
    harness = build_harness(dialog=ScriptedTemplateDialog(Ready(), TemplateChosen(None)))
    previous = await _load_existing(harness)
    calls: list[str] = []

    result = await harness.orchestrator.new_document(on_success=lambda: calls.append("success"))

    assert result.status is LoadStatus.DISMISSED
    assert harness.templates.calls == []
    assert harness.store.get_content() == previous
    assert calls == ["success"]
    assert harness.events_for("file.new") == [("request", 0)]


@pytest.mark.asyncio
async def test_new_document_ready_invokes_on_success_once_before_load() -> None:
    url = "landing/editable.html"
    harness = build_harness(
        dialog=ScriptedTemplateDialog(Ready(), TemplateChosen(url)),
        templates={url: page("Landing")},
    )
    calls: list[str] = []

    result = await harness.orchestrator.new_document(on_success=lambda: calls.append("success"))

    assert result.status is LoadStatus.LOADED
    assert calls == ["success"]
    assert harness.store.get_title() == "Landing"
    assert harness.undo.resets == 1
    assert harness.workspace.messages == [(None, True)]


@pytest.mark.asyncio
async def test_new_document_ready_only_leaves_state_unchanged() -> None:
    harness = build_harness(dialog=ScriptedTemplateDialog(Ready()))

    result = await harness.orchestrator.new_document()

    assert result.status is LoadStatus.READY
    assert not harness.store.has_content()
    assert harness.templates.calls == []


@pytest.mark.asyncio
async def test_new_document_opens_recent_file() -> None:
    recent = FileInfo(service="cloud", path="/sites/shop.html")
    harness = build_harness(
        dialog=ScriptedTemplateDialog(FileInfoChosen(recent)),
        files={"/sites/shop.html": page("Shop")},
    )

    result = await harness.orchestrator.new_document()

    assert result.status is LoadStatus.LOADED
    assert harness.store.get_file_info() == recent
    assert harness.recent.remembered == [recent]


@pytest.mark.asyncio
async def test_new_document_recent_file_failure_falls_back_to_blank() -> None:
    recent = FileInfo(service="cloud", path="/sites/gone.html")
    harness = build_harness(dialog=ScriptedTemplateDialog(FileInfoChosen(recent)))
    errors: list[BaseException] = []

    result = await harness.orchestrator.new_document(on_error=errors.append)

    assert result.status is LoadStatus.FAILED
    assert result.fell_back is True
    assert [alert[0] for alert in harness.notifications.alerts] == [
        "An error occured. Could not open this recent file, are you connected to cloud?"
    ]
    assert len(errors) == 1
    assert harness.store.get_title() == "Blank"
    assert ("error", -1) in harness.events_for("file.new")
    failed = [event for event in harness.published if isinstance(event, DocumentLoadFailed)]
    assert failed and failed[0].fell_back is True


@pytest.mark.asyncio
async def test_new_document_failure_with_content_keeps_previous_document() -> None:
    url = "broken/editable.html"
    harness = build_harness(
        dialog=ScriptedTemplateDialog(TemplateChosen(url)),
        templates={url: DocumentOpenError("template server down", location=url)},
    )
    previous = await _load_existing(harness)

    result = await harness.orchestrator.new_document()

    assert result.fell_back is False
    assert harness.store.get_content() == previous
    assert harness.templates.count(BLANK_URL) == 0
    assert harness.notifications.alerts[0][0] == "An error occured. template server down"


@pytest.mark.asyncio
async def test_new_document_blank_fallback_never_falls_back_again() -> None:
    url = "broken/editable.html"
    harness = build_harness(
        dialog=ScriptedTemplateDialog(TemplateChosen(url)),
        templates={
            url: DocumentOpenError("broken", location=url),
            BLANK_URL: DocumentOpenError("blank missing", location=BLANK_URL),
        },
    )

    result = await harness.orchestrator.new_document()

    assert result.status is LoadStatus.FAILED
    assert result.fell_back is False
    assert harness.templates.count(BLANK_URL) == 1
    assert not harness.store.has_content()


@pytest.mark.asyncio
async def test_new_document_blank_load_failure_retries_blank_only_once() -> None:
    harness = build_harness(
        dialog=ScriptedTemplateDialog(TemplateChosen(None)),
        templates={BLANK_URL: DocumentOpenError("blank missing", location=BLANK_URL)},
    )

    await harness.orchestrator.new_document()

    assert harness.templates.count(BLANK_URL) == 2
    assert len(harness.notifications.alerts) == 2


@pytest.mark.asyncio
async def test_new_document_dialog_error_reports_loading_templates_error() -> None:
    failure = RuntimeError("listing failed")
    harness = build_harness(dialog=ScriptedTemplateDialog(DialogFailed(failure)))
    errors: list[BaseException] = []

    await harness.orchestrator.new_document(on_error=errors.append)

    assert harness.notifications.alerts[0][0] == "An error occured. Loading templates error"
    assert errors == [failure]
    assert harness.store.get_title() == "Blank"


@pytest.mark.asyncio
async def test_new_document_dialog_raising_is_reported_as_listing_error() -> None:
    harness = build_harness(dialog=ScriptedTemplateDialog(Ready(), error=OSError("disk gone")))
    previous = await _load_existing(harness)
    errors: list[BaseException] = []

    result = await harness.orchestrator.new_document(on_error=errors.append)

    assert result.status is LoadStatus.FAILED
    assert harness.notifications.alerts[0][0] == "An error occured. Loading templates error"
    assert len(errors) == 1
    assert harness.store.get_content() == previous


@pytest.mark.asyncio
async def test_store_never_left_empty_after_error_when_it_had_content() -> None:
    recent = FileInfo(service="cloud", path="/gone.html")
    url = "broken/editable.html"
    harness = build_harness(
        templates={url: DocumentOpenError("broken", location=url)},
    )
    previous = await _load_existing(harness)

    for signal in (FileInfoChosen(recent), TemplateChosen(url), DialogFailed(RuntimeError("x"))):
        harness.dialog.script(signal)
        await harness.orchestrator.new_document()
        assert harness.store.get_content() == previous

    harness.picker.result = FileInfo(service="local", path="/also-missing.html")
    await harness.orchestrator.open_document()
    assert harness.store.get_content() == previous
