"""Dataclasses describing the website document and where it lives."""

from __future__ import annotations

import hashlib
import html
import json
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Mapping, Optional

__all__ = [
    "FileInfo",
    "PublicationTarget",
    "DocumentMetadata",
    "Document",
    "extract_title",
    "extract_publication_target",
    "embed_publication_target",
]

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_TARGET_META_RE = re.compile(
    r"<meta\s+name=[\"']publication-target[\"']\s+content=(?P<quote>[\"'])(?P<content>.*?)(?P=quote)\s*/?>",
    re.IGNORECASE | re.DOTALL,
)
_HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _hash_text(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


@dataclass(slots=True, frozen=True)
class FileInfo:
    """Reference to a document's storage location.

    ``service`` names the storage provider (``"local"`` for the filesystem),
    ``path`` is the provider-relative path.
    """

    service: str
    path: str
    url: str | None = None
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or PurePosixPath(self.path).name or self.path

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"service": self.service, "path": self.path}
        if self.url:
            payload["url"] = self.url
        if self.name:
            payload["name"] = self.name
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> FileInfo:
        return cls(
            service=str(payload.get("service") or "local"),
            path=str(payload["path"]),
            url=payload.get("url") or None,
            name=payload.get("name") or None,
        )


@dataclass(slots=True, frozen=True)
class PublicationTarget:
    """Destination a finished website is deployed to."""

    path: str
    url: str | None = None
    service: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"path": self.path}
        if self.url:
            payload["url"] = self.url
        if self.service:
            payload["service"] = self.service
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> PublicationTarget | None:
        path = payload.get("path")
        if not path:
            return None
        return cls(
            path=str(path),
            url=(str(payload["url"]).rstrip("/") if payload.get("url") else None),
            service=payload.get("service") or None,
        )


@dataclass(slots=True)
class DocumentMetadata:
    title: Optional[str] = None
    publication_target: Optional[PublicationTarget] = None
    file_info: Optional[FileInfo] = None
    loaded_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class Document:
    """Serialized website markup plus the metadata read from its head."""

    content: str = ""
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    document_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    content_hash: str = field(default_factory=str)

    def __post_init__(self) -> None:
        if not self.content_hash:
            self.content_hash = _hash_text(self.content)

    @classmethod
    def from_markup(cls, content: str, *, file_info: FileInfo | None = None) -> Document:
        metadata = DocumentMetadata(
            title=extract_title(content),
            publication_target=extract_publication_target(content),
            file_info=file_info,
        )
        return cls(content=content, metadata=metadata)


def extract_title(content: str) -> str | None:
    match = _TITLE_RE.search(content or "")
    if match is None:
        return None
    title = html.unescape(match.group(1)).strip()
    return title or None


def extract_publication_target(content: str) -> PublicationTarget | None:
    """Read the ``publication-target`` meta tag from the document head."""

    match = _TARGET_META_RE.search(content or "")
    if match is None:
        return None
    try:
        payload = json.loads(html.unescape(match.group("content")))
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, Mapping):
        return None
    return PublicationTarget.from_dict(payload)


def embed_publication_target(content: str, target: PublicationTarget | None) -> str:
    """Return ``content`` with its publication target meta tag replaced (or removed)."""

    stripped = _TARGET_META_RE.sub("", content or "")
    if target is None:
        return stripped
    encoded = html.escape(json.dumps(target.to_dict(), sort_keys=True), quote=True)
    tag = f'<meta name="publication-target" content="{encoded}">'
    match = _HEAD_CLOSE_RE.search(stripped)
    if match is None:
        return f"{tag}\n{stripped}"
    return f"{stripped[:match.start()]}{tag}\n{stripped[match.start():]}"
