"""Span implementation - thin wrapper around an OpenTelemetry Span."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

from opentelemetry.trace import Span as OTelSpan, Status, StatusCode

from spanlab.tracer.span_context import SpanContext
from spanlab.utils.helpers import duration_ns

if TYPE_CHECKING:
    from spanlab.tracer.tracer import Tracer

logger = logging.getLogger(__name__)


class SpanStatus(Enum):
    UNSET = 0
    OK = 1
    ERROR = 2


_OTEL_STATUS_CODES = {
    SpanStatus.UNSET: StatusCode.UNSET,
    SpanStatus.OK: StatusCode.OK,
    SpanStatus.ERROR: StatusCode.ERROR,
}


class Span:
    """
    Minimal wrapper around an OpenTelemetry Span.

    Mutators only touch this span. They are skipped once the span has ended
    or when it was not sampled for recording, so late calls never reach an
    exported span.
    """

    def __init__(
        self,
        otel_span: OTelSpan,
        tracer: Optional["Tracer"] = None,
        parent_span_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Initialize span wrapper.

        Args:
            otel_span: OpenTelemetry Span instance
            tracer: Tracer that started the span (None for non-recording fallbacks)
            parent_span_id: Parent span ID (hex string), None for a root span
            name: Span name, used when the OTel span does not expose one
        """
        self._otel_span = otel_span
        self.tracer = tracer
        self.parent_span_id = parent_span_id
        self.name = getattr(otel_span, "name", None) or name or "unknown"
        self.context = SpanContext.from_otel(otel_span.get_span_context())

        self.status = SpanStatus.UNSET
        self.status_description: Optional[str] = None
        self.start_time_ns: Optional[int] = getattr(otel_span, "start_time", None)
        self.end_time_ns: Optional[int] = None

        self._ended = False
        self._end_lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"Span(name={self.name!r}, trace_id={self.context.trace_id}, "
            f"span_id={self.context.span_id}, ended={self._ended})"
        )

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def duration_ns(self) -> Optional[int]:
        return duration_ns(self.start_time_ns, self.end_time_ns)

    @property
    def attributes(self) -> Dict[str, Any]:
        """Snapshot of the attributes recorded so far (empty when not recording)."""
        return dict(getattr(self._otel_span, "attributes", None) or {})

    def is_recording(self) -> bool:
        return not self._ended and self._otel_span.is_recording()

    def set_attribute(self, key: str, value: Any) -> None:
        if not self.is_recording():
            return
        self._otel_span.set_attribute(key, value)

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        if not self.is_recording():
            return
        self._otel_span.set_attributes(dict(attributes))

    def add_event(
        self,
        name: str,
        attributes: Optional[Dict[str, Any]] = None,
        timestamp_ns: Optional[int] = None,
    ) -> None:
        """Add a timestamped event (a span log) to the span."""
        if not self.is_recording():
            return
        self._otel_span.add_event(name, attributes=attributes, timestamp=timestamp_ns)

    def record_error(
        self,
        error: BaseException,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record an exception event. Status is left to set_status()."""
        if not self.is_recording():
            return
        self._otel_span.record_exception(error, attributes=attributes)

    def set_status(self, status: SpanStatus, description: Optional[str] = None) -> None:
        if not self.is_recording():
            return
        self.status = status
        # OTel ignores descriptions on anything but ERROR
        self.status_description = description if status == SpanStatus.ERROR else None
        self._otel_span.set_status(Status(_OTEL_STATUS_CODES[status], self.status_description))

    def update_name(self, name: str) -> None:
        if not self.is_recording():
            return
        self.name = name
        self._otel_span.update_name(name)

    def end(self, end_time_ns: Optional[int] = None) -> None:
        """
        End the span and hand it to the span processors.

        Only the first call has an effect.
        """
        with self._end_lock:
            if self._ended:
                return
            self._ended = True
        self._otel_span.end(end_time=end_time_ns)
        self.end_time_ns = getattr(self._otel_span, "end_time", None) or end_time_ns

    # Context manager support. Entering does not activate the span anywhere,
    # children still receive it through the context returned by start_span().
    def __enter__(self) -> "Span":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc is not None:
                self.record_error(exc)
                self.set_status(SpanStatus.ERROR, str(exc))
        finally:
            self.end()
        return False
