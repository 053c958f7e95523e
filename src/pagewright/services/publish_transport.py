"""HTTP transport for the hosting server's publish task endpoints.

The server exposes two endpoints relative to ``publish_server_url``:

* ``POST tasks/publish`` with ``{"publicationPath", "file", "html"}`` starts a
  job and answers 2xx (optionally with an initial status object);
* ``GET tasks/publishState`` answers ``{"status": str, "stop": bool, "url"?: str}``.

Error responses carry a plain text (or ``{"message"}``) body that is shown to
the user verbatim.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx
import jsonschema

from ..ui.application.errors import PublishRejectedError, PublishStatusError
from ..ui.application.ports import PublishStatus

__all__ = ["PUBLISH_STATUS_SCHEMA", "HttpPublishTransport", "parse_publish_status"]

LOGGER = logging.getLogger(__name__)

PUBLISH_STATUS_SCHEMA: Mapping[str, Any] = {
    "type": "object",
    "properties": {
        "status": {"type": "string"},
        "stop": {"type": "boolean"},
        "url": {"type": ["string", "null"]},
    },
    "required": ["status", "stop"],
}
_PUBLISH_ENDPOINT = "tasks/publish"
_STATE_ENDPOINT = "tasks/publishState"


def parse_publish_status(payload: Any) -> PublishStatus:
    """Validate a status payload and convert it to :class:`PublishStatus`.

    Raises:
        PublishStatusError: When the payload does not match the schema.
    """

    try:
        jsonschema.validate(payload, PUBLISH_STATUS_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise PublishStatusError(f"Malformed publish status: {exc.message}", payload=payload, cause=exc) from exc
    return PublishStatus(status=payload["status"], stop=payload["stop"], url=payload.get("url") or None)


class HttpPublishTransport:
    """:class:`~pagewright.ui.application.ports.PublishTransport` over ``httpx``.

    Neither endpoint is retried: a rejected publish is reported once and a
    failed status query ends the job.
    """

    def __init__(
        self,
        server_url: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        base_url = server_url.rstrip("/") + "/"
        headers = {"Authorization": f"Bearer {token}"} if token else None
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout, headers=headers)
        self._base_url = base_url

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request_publish(self, target_path: str, source_path: str | None, content: str) -> PublishStatus:
        body = {"publicationPath": target_path, "file": source_path, "html": content}
        LOGGER.debug("Requesting publish to %s (%d bytes)", target_path, len(content))
        try:
            response = await self._client.post(_PUBLISH_ENDPOINT, json=body)
        except httpx.HTTPError as exc:
            raise PublishRejectedError(_describe_transport_error(exc), cause=exc) from exc
        if response.is_error:
            raise PublishRejectedError(_error_message(response), status_code=response.status_code)
        payload = _json_or_none(response)
        if payload is None:
            return PublishStatus(status="Publication started")
        try:
            return parse_publish_status(payload)
        except PublishStatusError:
            LOGGER.debug("Publish accepted without a status object: %r", payload)
            return PublishStatus(status="Publication started")

    async def query_status(self) -> PublishStatus:
        try:
            response = await self._client.get(_STATE_ENDPOINT)
        except httpx.HTTPError as exc:
            raise PublishStatusError(_describe_transport_error(exc), cause=exc) from exc
        if response.is_error:
            raise PublishStatusError(_error_message(response))
        payload = _json_or_none(response)
        if payload is None:
            raise PublishStatusError("Publish status is not JSON", payload=response.text)
        return parse_publish_status(payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(response: httpx.Response) -> str:
    payload = _json_or_none(response)
    if isinstance(payload, Mapping) and payload.get("message"):
        return str(payload["message"])
    text = response.text.strip()
    return text or f"HTTP {response.status_code} {response.reason_phrase}".strip()


def _describe_transport_error(exc: httpx.HTTPError) -> str:
    message = str(exc).strip()
    return message or type(exc).__name__
