"""Application layer for the document lifecycle.

This package contains the use cases behind the File menu. Each use case
encapsulates one user action and talks to the outside world only through
the protocols in :mod:`.ports`.

Use Cases:
    - NewDocumentUseCase: new-website dialog, templates and recent files
    - OpenDocumentUseCase: open an HTML file from the file picker
    - PublishUseCase: request a publish job and poll it to completion

Coordinator:
    - LifecycleOrchestrator: Facade that owns the use cases and their
      shared :class:`LifecycleContext`.
"""

from __future__ import annotations

from .context import (
    ACTION_NEW,
    ACTION_OPEN,
    ACTION_PUBLISH,
    CONTROLLER_EVENTS,
    Continuations,
    LifecycleContext,
)
from .coordinator import LifecycleOrchestrator
from .document_ops import (
    DEFAULT_BLANK_TEMPLATE_URL,
    LoadResult,
    LoadStatus,
    NewDocumentUseCase,
    OpenDocumentUseCase,
    TemplateLoader,
)
from .errors import (
    DocumentOpenError,
    FilePickerError,
    LifecycleError,
    PublishRejectedError,
    PublishStatusError,
    TemplateListingError,
)
from .publish_ops import (
    PUBLISH_PANE,
    PublishJob,
    PublishState,
    PublishStatusPoller,
    PublishUseCase,
)

__all__: list[str] = [
    # Context
    "ACTION_NEW",
    "ACTION_OPEN",
    "ACTION_PUBLISH",
    "CONTROLLER_EVENTS",
    "Continuations",
    "LifecycleContext",
    # Document operations
    "DEFAULT_BLANK_TEMPLATE_URL",
    "LoadResult",
    "LoadStatus",
    "NewDocumentUseCase",
    "OpenDocumentUseCase",
    "TemplateLoader",
    # Publish operations
    "PUBLISH_PANE",
    "PublishJob",
    "PublishState",
    "PublishStatusPoller",
    "PublishUseCase",
    # Errors
    "LifecycleError",
    "FilePickerError",
    "DocumentOpenError",
    "TemplateListingError",
    "PublishRejectedError",
    "PublishStatusError",
    # Coordinator
    "LifecycleOrchestrator",
]
