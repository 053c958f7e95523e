"""Presentation layer: Qt widgets implementing the application ports.

- QtNotificationChannel: non-modal alerts, errors and publish progress
- dialogs: file picker, new-website dialog, publication settings
- MainWindow: File menu shell delegating to the LifecycleOrchestrator
"""

from __future__ import annotations

from .dialogs import QtFilePicker, QtSettingsDialog, QtTemplateDialog
from .main_window import MainWindow, QtUndoHistory, create_tip_panel
from .notifications import QtNotificationChannel

__all__: list[str] = [
    "MainWindow",
    "QtFilePicker",
    "QtNotificationChannel",
    "QtSettingsDialog",
    "QtTemplateDialog",
    "QtUndoHistory",
    "create_tip_panel",
]
