"""Fetching website templates from the bundled library or over HTTP."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..ui.application.errors import DocumentOpenError
from ..utils import file_io

__all__ = ["DEFAULT_TEMPLATES_DIR", "TemplateInfo", "TemplateFetcher", "list_templates"]

LOGGER = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
_TEMPLATE_ENTRY = "editable.html"


@dataclass(slots=True, frozen=True)
class TemplateInfo:
    """A template offered in the new-website dialog."""

    name: str
    url: str


class TemplateFetcher:
    """Returns template markup for bundled paths, ``file://`` URLs and ``http(s)`` URLs.

    Remote fetches are retried with exponential backoff on transport errors;
    HTTP error statuses are not retried.
    """

    def __init__(
        self,
        *,
        base_dir: Path | str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_min_seconds: float = 0.5,
        retry_max_seconds: float = 6.0,
    ) -> None:
        self._base_dir = Path(base_dir).expanduser() if base_dir else DEFAULT_TEMPLATES_DIR
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._max_retries = max(1, int(max_retries))
        self._retry_min = retry_min_seconds
        self._retry_max = retry_max_seconds

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def fetch(self, url: str) -> str:
        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            return await self._fetch_remote(url)
        if parsed.scheme == "file":
            path = Path(unquote(parsed.path))
        elif parsed.scheme:
            raise DocumentOpenError(f"Unsupported template location: {url}", location=url)
        else:
            path = Path(url)
            if not path.is_absolute():
                path = self._base_dir / path
        return await self._read_local(path, url)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _read_local(self, path: Path, url: str) -> str:
        try:
            return await asyncio.to_thread(file_io.read_text, path)
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentOpenError(f"Could not read template {url}", location=url, cause=exc) from exc

    async def _fetch_remote(self, url: str) -> str:
        client = self._get_client()
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DocumentOpenError(
                f"Template server answered {exc.response.status_code} for {url}",
                location=url,
                cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise DocumentOpenError(f"Could not download template {url}", location=url, cause=exc) from exc
        LOGGER.debug("Fetched template %s (%d bytes)", url, len(response.content))
        return response.text

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
        return self._client

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=self._retry_min, max=self._retry_max),
            retry=retry_if_exception_type(httpx.TransportError),
        )


def list_templates(base_dir: Path | str | None = None) -> list[TemplateInfo]:
    """List bundled templates: every sub-directory holding an ``editable.html``."""

    root = Path(base_dir).expanduser() if base_dir else DEFAULT_TEMPLATES_DIR
    if not root.is_dir():
        return []
    templates: list[TemplateInfo] = []
    for entry in sorted(root.iterdir()):
        candidate = entry / _TEMPLATE_ENTRY
        if entry.is_dir() and candidate.is_file():
            templates.append(TemplateInfo(name=entry.name, url=f"{entry.name}/{_TEMPLATE_ENTRY}"))
    return templates
