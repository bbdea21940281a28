"""Utility functions for spanlab."""

from spanlab.utils.helpers import (
    duration_ns,
    format_span_id,
    format_trace_id,
    parse_span_id,
    parse_trace_id,
    span_id_from_bytes,
    trace_id_from_bytes,
)

__all__ = [
    "duration_ns",
    "format_trace_id",
    "format_span_id",
    "parse_trace_id",
    "parse_span_id",
    "trace_id_from_bytes",
    "span_id_from_bytes",
]
