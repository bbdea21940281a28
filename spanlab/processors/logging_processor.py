"""Span processor that logs spans when they end."""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry.sdk.trace import ReadableSpan, SpanProcessor

from spanlab.utils.helpers import duration_ns, format_span_id, format_trace_id


class LoggingSpanProcessor(SpanProcessor):
    """Logs a span summary on end using the standard logging module."""

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG) -> None:
        self.logger = logger or logging.getLogger("spanlab.traces")
        self.level = level

    def on_end(self, span: ReadableSpan) -> None:
        if not self.logger.isEnabledFor(self.level):
            return
        ctx = span.context
        parent = format_span_id(span.parent.span_id) if span.parent else None
        self.logger.log(
            self.level,
            "[trace] name=%s trace_id=%s span_id=%s parent_id=%s status=%s duration_ns=%s attrs=%s",
            span.name,
            format_trace_id(ctx.trace_id),
            format_span_id(ctx.span_id),
            parent,
            span.status.status_code.name,
            duration_ns(span.start_time, span.end_time),
            dict(span.attributes or {}),
        )

    def shutdown(self) -> None:
        return None

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True
