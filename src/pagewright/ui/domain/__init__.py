"""Domain layer for the document lifecycle.

Domain Managers:
    - DocumentStore: the single edited website and its storage providers
    - SessionStore: recent files persisted through settings

Neither manager depends on Qt.
"""

from __future__ import annotations

from .document_store import LOCAL_SERVICE, DocumentStore, LocalStorageProvider, StorageProvider
from .session_store import SessionStore

__all__: list[str] = [
    "LOCAL_SERVICE",
    "DocumentStore",
    "LocalStorageProvider",
    "StorageProvider",
    "SessionStore",
]
