"""Tests for template listing and fetching."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from pagewright.services.templates import DEFAULT_TEMPLATES_DIR, TemplateFetcher, TemplateInfo, list_templates
from pagewright.ui.application.errors import DocumentOpenError


def _make_template(root: Path, name: str, body: str = "<html><body></body></html>") -> None:
    folder = root / name
    folder.mkdir(parents=True)
    (folder / "editable.html").write_text(body, encoding="utf-8")


def test_list_templates_only_returns_folders_with_entry_file(tmp_path: Path) -> None:
    _make_template(tmp_path, "portfolio")
    _make_template(tmp_path, "blog")
    (tmp_path / "empty").mkdir()
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")

    assert list_templates(tmp_path) == [
        TemplateInfo(name="blog", url="blog/editable.html"),
        TemplateInfo(name="portfolio", url="portfolio/editable.html"),
    ]


def test_list_templates_missing_dir_is_empty(tmp_path: Path) -> None:
    assert list_templates(tmp_path / "missing") == []


def test_bundled_templates_include_blank() -> None:
    names = [info.name for info in list_templates()]
    assert "blank" in names
    assert (DEFAULT_TEMPLATES_DIR / "blank" / "editable.html").is_file()


@pytest.mark.asyncio
async def test_fetch_bundled_relative_path() -> None:
    fetcher = TemplateFetcher()

    content = await fetcher.fetch("blank/editable.html")

    assert "<title>Untitled website</title>" in content


@pytest.mark.asyncio
async def test_fetch_file_url_and_missing_file(tmp_path: Path) -> None:
    _make_template(tmp_path, "shop", "<html><head><title>Shop</title></head></html>")
    fetcher = TemplateFetcher(base_dir=tmp_path)

    content = await fetcher.fetch((tmp_path / "shop" / "editable.html").as_uri())

    assert "Shop" in content
    with pytest.raises(DocumentOpenError):
        await fetcher.fetch("nope/editable.html")


@pytest.mark.asyncio
async def test_fetch_rejects_unknown_scheme() -> None:
    with pytest.raises(DocumentOpenError, match="Unsupported"):
        await TemplateFetcher().fetch("ftp://example.com/t.html")


@pytest.mark.asyncio
async def test_fetch_remote_template() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/templates/blog.html"
        return httpx.Response(200, text="<html>remote</html>")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = TemplateFetcher(client=client)
    try:
        assert await fetcher.fetch("https://cdn.example/templates/blog.html") == "<html>remote</html>"
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_fetch_remote_error_status_is_not_retried() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(404, text="missing")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = TemplateFetcher(client=client, max_retries=3, retry_min_seconds=0, retry_max_seconds=0)
    try:
        with pytest.raises(DocumentOpenError, match="404"):
            await fetcher.fetch("https://cdn.example/t.html")
    finally:
        await client.aclose()
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_fetch_remote_transport_errors_are_retried() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        if len(calls) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, text="<html>third time</html>")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = TemplateFetcher(client=client, max_retries=3, retry_min_seconds=0, retry_max_seconds=0)
    try:
        assert await fetcher.fetch("https://cdn.example/t.html") == "<html>third time</html>"
    finally:
        await client.aclose()
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_fetch_remote_gives_up_after_max_retries() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = TemplateFetcher(client=client, max_retries=2, retry_min_seconds=0, retry_max_seconds=0)
    try:
        with pytest.raises(DocumentOpenError, match="Could not download"):
            await fetcher.fetch("https://cdn.example/t.html")
    finally:
        await client.aclose()
