"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from lms_cache.shared.telemetry.logging import setup_logging
from lms_cache.shared.telemetry.telemetry import TelemetryConfig
from lms_cache.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "setup_logging",
    "TelemetryConfig",
    "traced",
    "add_span_attributes",
]
