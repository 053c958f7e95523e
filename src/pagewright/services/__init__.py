"""Service layer helpers (settings, templates, publishing, telemetry)."""

from .publish_transport import HttpPublishTransport, parse_publish_status
from .settings import SecretVault, Settings, SettingsStore
from .telemetry import InMemoryEventSink, TelemetryEventSink
from .templates import TemplateFetcher, TemplateInfo, list_templates

__all__ = [
    "HttpPublishTransport",
    "parse_publish_status",
    "SecretVault",
    "Settings",
    "SettingsStore",
    "InMemoryEventSink",
    "TelemetryEventSink",
    "TemplateFetcher",
    "TemplateInfo",
    "list_templates",
]
