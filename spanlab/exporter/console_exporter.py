"""Console exporter for developer visibility."""

from __future__ import annotations

import sys
import threading
from typing import Sequence

from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from spanlab.utils.helpers import duration_ns, format_span_id, format_trace_id


class ConsoleExporter(SpanExporter):
    """
    Writes finished spans to stdout (or the provided stream).

    ``pretty`` dumps each span as indented JSON; otherwise one summary line
    per span is printed.
    """

    def __init__(self, stream=None, pretty: bool = True) -> None:
        self.stream = stream or sys.stdout
        self.pretty = pretty
        self._lock = threading.Lock()

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        with self._lock:
            for span in spans:
                if self.pretty:
                    print(span.to_json(indent=4), file=self.stream)
                else:
                    print(self._format_line(span), file=self.stream)
            self.stream.flush()
        return SpanExportResult.SUCCESS

    @staticmethod
    def _format_line(span: ReadableSpan) -> str:
        line = (
            f"[span] name={span.name} trace_id={format_trace_id(span.context.trace_id)} "
            f"span_id={format_span_id(span.context.span_id)} "
            f"status={span.status.status_code.name} "
            f"duration_ns={duration_ns(span.start_time, span.end_time)}"
        )
        if span.attributes:
            line += f" attrs={dict(span.attributes)}"
        if span.events:
            line += f" events={[event.name for event in span.events]}"
        return line

    def shutdown(self) -> None:
        return None

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True
