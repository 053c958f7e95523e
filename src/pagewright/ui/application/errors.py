"""Exceptions raised by lifecycle collaborators and caught by the use cases."""

from __future__ import annotations

from typing import Any

__all__ = [
    "LifecycleError",
    "FilePickerError",
    "DocumentOpenError",
    "TemplateListingError",
    "PublishRejectedError",
    "PublishStatusError",
]


class LifecycleError(Exception):
    """Base class for errors surfaced to the user by the lifecycle use cases.

    Attributes:
        message: Human readable description shown in notifications.
        cause: The underlying exception, when one exists.
    """

    def __init__(self, message: str = "", *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message or (str(self.cause) if self.cause is not None else "")


class FilePickerError(LifecycleError):
    """The file picker could not list or return a selection."""


class DocumentOpenError(LifecycleError):
    """A document could not be read or parsed."""

    def __init__(
        self,
        message: str = "",
        *,
        service: str | None = None,
        location: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.service = service
        self.location = location


class TemplateListingError(LifecycleError):
    """The new-website dialog failed to list or fetch templates."""


class PublishRejectedError(LifecycleError):
    """The publish transport refused to start a publish job."""

    def __init__(self, message: str = "", *, status_code: int | None = None, cause: BaseException | None = None) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code


class PublishStatusError(LifecycleError):
    """A publish status query failed at the transport level or returned garbage."""

    def __init__(self, message: str = "", *, payload: Any = None, cause: BaseException | None = None) -> None:
        super().__init__(message, cause=cause)
        self.payload = payload
