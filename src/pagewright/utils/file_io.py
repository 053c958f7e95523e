"""File reading helpers for website documents."""

from __future__ import annotations

import codecs
import locale
import re
from pathlib import Path

__all__ = ["read_text", "looks_like_html", "HTML_SUFFIXES"]

_BOM_MAP: dict[bytes, str] = {
    codecs.BOM_UTF8: "utf-8-sig",
    codecs.BOM_UTF16_LE: "utf-16-le",
    codecs.BOM_UTF16_BE: "utf-16-be",
}
_HTML_MARKERS = re.compile(r"<!doctype\s+html|<html[\s>]|<body[\s>]|<head[\s>]", re.IGNORECASE)
HTML_SUFFIXES: frozenset[str] = frozenset({".html", ".htm", ".xhtml"})


def read_text(
    path: Path | str,
    *,
    encoding: str | None = None,
    errors: str = "strict",
    normalize_newlines: bool = True,
) -> str:
    """Read a text file, sniffing the encoding from its BOM or contents."""

    raw = Path(path).read_bytes()
    text = raw.decode(encoding or _detect_encoding(raw), errors=errors)
    if text.startswith("\ufeff"):
        text = text[1:]
    return _normalize_newlines(text) if normalize_newlines else text


def looks_like_html(text: str) -> bool:
    """Return ``True`` when ``text`` carries a doctype, html, head or body tag."""

    return bool(text) and _HTML_MARKERS.search(text) is not None


def _detect_encoding(raw: bytes) -> str:
    for bom, encoding in _BOM_MAP.items():
        if raw.startswith(bom):
            return encoding

    preferred = locale.getpreferredencoding(False) or "utf-8"
    seen: set[str] = set()
    for candidate in ("utf-8", preferred, "latin-1"):
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        try:
            raw.decode(candidate)
            return candidate
        except UnicodeDecodeError:
            continue
    return "utf-8"


def _normalize_newlines(text: str) -> str:
    if "\r" not in text:
        return text
    return text.replace("\r\n", "\n").replace("\r", "\n")
