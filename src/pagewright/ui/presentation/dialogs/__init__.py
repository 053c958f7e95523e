"""Dialog implementations for the presentation layer.

Dialogs:
    - QtFilePicker: open an HTML file from disk
    - QtTemplateDialog / NewWebsiteDialog: templates and recent websites
    - QtSettingsDialog / PublishSettingsDialog: publication target
"""

from __future__ import annotations

from .file_dialogs import NewWebsiteDialog, QtFilePicker, QtTemplateDialog, file_filter_for
from .settings_dialog import PublishSettingsDialog, QtSettingsDialog

__all__: list[str] = [
    "NewWebsiteDialog",
    "PublishSettingsDialog",
    "QtFilePicker",
    "QtSettingsDialog",
    "QtTemplateDialog",
    "file_filter_for",
]
