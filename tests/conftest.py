"""Shared pytest fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def _isolate_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep settings, logs and telemetry written by tests out of the real home directory."""

    monkeypatch.setenv("PAGEWRIGHT_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("PAGEWRIGHT_TELEMETRY_DIR", str(tmp_path / "telemetry"))
    for name in list(os.environ):
        if name.startswith("PAGEWRIGHT_") and name not in {"PAGEWRIGHT_LOG_DIR", "PAGEWRIGHT_TELEMETRY_DIR"}:
            monkeypatch.delenv(name, raising=False)

