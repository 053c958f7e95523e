"""Opt-in telemetry buffer persisted as JSON lines."""

from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

__all__ = ["TelemetryClient", "TelemetryRecord", "telemetry_enabled"]

_DEFAULT_TELEMETRY_DIR = Path.home() / ".pagewright" / "telemetry"
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class TelemetryRecord:
    """One tracked action waiting to be written."""

    category: str
    outcome: str
    action: str
    weight: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def serialize(self, session_id: str) -> str:
        payload = {
            "session_id": session_id,
            "category": self.category,
            "outcome": self.outcome,
            "action": self.action,
            "weight": self.weight,
            "timestamp": self.timestamp.isoformat(),
        }
        return json.dumps(payload, ensure_ascii=False)


@dataclass(slots=True)
class TelemetryClient:
    """Buffers tracked actions and appends them to ``actions.jsonl`` when enabled."""

    enabled: bool = False
    storage_dir: Path | str | None = None
    max_buffer: int = 32
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    _buffer: list[TelemetryRecord] = field(default_factory=list, init=False, repr=False)

    def track_action(self, category: str, outcome: str, action: str, weight: int) -> None:
        if not self.enabled:
            return
        self._buffer.append(
            TelemetryRecord(category=category, outcome=outcome, action=action, weight=int(weight))
        )
        if len(self._buffer) >= self.max_buffer:
            self.flush()

    def flush(self) -> Path | None:
        """Write buffered records to disk and clear the buffer."""

        if not self.enabled or not self._buffer:
            return None

        target_dir = _resolve_storage_dir(self.storage_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        log_path = target_dir / "actions.jsonl"
        with log_path.open("a", encoding="utf-8") as handle:
            for record in self._buffer:
                handle.write(record.serialize(self.session_id))
                handle.write("\n")
        self._buffer.clear()
        return log_path

    def pending_records(self) -> int:
        return len(self._buffer)


def telemetry_enabled(settings: Any | None = None) -> bool:
    """Return ``True`` when telemetry is switched on by env var or settings."""

    env_value = os.environ.get("PAGEWRIGHT_TELEMETRY")
    if env_value is not None:
        return env_value.strip().lower() in _TRUE_VALUES
    if settings is None:
        return False
    return bool(getattr(settings, "telemetry_opt_in", False))


def _resolve_storage_dir(storage_dir: Path | str | None) -> Path:
    env_override = os.environ.get("PAGEWRIGHT_TELEMETRY_DIR")
    return Path(storage_dir or env_override or _DEFAULT_TELEMETRY_DIR).expanduser()
