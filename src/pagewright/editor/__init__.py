"""Editor package containing the website document model."""

from . import document_model

__all__ = ["document_model"]
