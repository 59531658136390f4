"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from preschool.shared.telemetry.logging import get_logger, mask_code, setup_logging
from preschool.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    get_tracer,
    set_telemetry,
)
from preschool.shared.telemetry.tracing import (
    TracedOperation,
    add_span_attributes,
    add_span_event,
    get_trace_id,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "mask_code",
    "TelemetryConfig",
    "get_telemetry",
    "set_telemetry",
    "get_tracer",
    "traced",
    "add_span_attributes",
    "add_span_event",
    "get_trace_id",
    "TracedOperation",
]
