"""Tests for the HTTP publish transport."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from pagewright.services.publish_transport import HttpPublishTransport, parse_publish_status
from pagewright.ui.application.errors import PublishRejectedError, PublishStatusError
from pagewright.ui.application.ports import PublishStatus


def _transport(handler: Callable[[httpx.Request], httpx.Response]) -> HttpPublishTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://publish.test/")
    return HttpPublishTransport("http://publish.test", client=client)


def test_parse_publish_status_valid_payload() -> None:
    assert parse_publish_status({"status": "Uploading", "stop": False}) == PublishStatus("Uploading")
    assert parse_publish_status({"status": "Done", "stop": True, "url": "http://site"}) == PublishStatus(
        "Done", stop=True, url="http://site"
    )


@pytest.mark.parametrize(
    "payload",
    [{"status": "x"}, {"status": 3, "stop": False}, ["status"], {"status": "x", "stop": "yes"}],
)
def test_parse_publish_status_rejects_malformed(payload: object) -> None:
    with pytest.raises(PublishStatusError) as excinfo:
        parse_publish_status(payload)
    assert excinfo.value.payload == payload


@pytest.mark.asyncio
async def test_request_publish_posts_body() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/tasks/publish"
        seen.append(json.loads(request.content))
        return httpx.Response(200)

    transport = _transport(handler)
    status = await transport.request_publish("/www/site", "/home/me/site.html", "<html></html>")
    await transport.aclose()

    assert status == PublishStatus("Publication started")
    assert seen == [{"publicationPath": "/www/site", "file": "/home/me/site.html", "html": "<html></html>"}]


@pytest.mark.asyncio
async def test_request_publish_returns_initial_status_object() -> None:
    transport = _transport(lambda request: httpx.Response(200, json={"status": "Queued", "stop": False}))

    assert await transport.request_publish("/www", None, "<html></html>") == PublishStatus("Queued")


@pytest.mark.asyncio
async def test_request_publish_error_body_becomes_message() -> None:
    transport = _transport(lambda request: httpx.Response(500, text="Disk full"))

    with pytest.raises(PublishRejectedError) as excinfo:
        await transport.request_publish("/www", None, "<html></html>")

    assert excinfo.value.message == "Disk full"
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_request_publish_json_error_message() -> None:
    transport = _transport(lambda request: httpx.Response(403, json={"message": "Not allowed"}))

    with pytest.raises(PublishRejectedError, match="Not allowed"):
        await transport.request_publish("/www", None, "<html></html>")


@pytest.mark.asyncio
async def test_request_publish_connection_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PublishRejectedError, match="connection refused"):
        await _transport(handler).request_publish("/www", None, "<html></html>")


@pytest.mark.asyncio
async def test_query_status_reads_publish_state() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/tasks/publishState"
        return httpx.Response(200, json={"status": "Done", "stop": True})

    assert await _transport(handler).query_status() == PublishStatus("Done", stop=True)


@pytest.mark.asyncio
async def test_query_status_errors() -> None:
    with pytest.raises(PublishStatusError):
        await _transport(lambda request: httpx.Response(502, text="Bad gateway")).query_status()
    with pytest.raises(PublishStatusError, match="not JSON"):
        await _transport(lambda request: httpx.Response(200, text="<html>")).query_status()
    with pytest.raises(PublishStatusError, match="Malformed"):
        await _transport(lambda request: httpx.Response(200, json={"stop": True})).query_status()


def test_token_sets_authorization_header() -> None:
    transport = HttpPublishTransport("http://publish.test/api", token="abc")

    assert transport.base_url == "http://publish.test/api/"
    assert transport._client.headers["Authorization"] == "Bearer abc"
