"""Immutable trace metadata."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from opentelemetry.trace import SpanContext as OTelSpanContext, TraceFlags, TraceState
from opentelemetry.trace import Link as OTelLink

from spanlab.utils.helpers import format_span_id, format_trace_id, parse_span_id, parse_trace_id


@dataclass(frozen=True)
class SpanContext:
    trace_id: str
    span_id: str
    trace_flags: int = 1  # 1 = sampled, 0 = not sampled
    trace_state: Optional[str] = None
    is_remote: bool = False

    def is_valid(self) -> bool:
        try:
            return parse_trace_id(self.trace_id) != 0 and parse_span_id(self.span_id) != 0
        except ValueError:
            return False

    @property
    def sampled(self) -> bool:
        return bool(self.trace_flags & TraceFlags.SAMPLED)

    def to_otel(self) -> OTelSpanContext:
        """Convert to an OpenTelemetry SpanContext."""
        trace_state = TraceState()
        if self.trace_state:
            # Local import: propagators imports this module.
            from spanlab.context.propagators import parse_tracestate

            parsed = parse_tracestate(self.trace_state)
            if parsed:
                trace_state = TraceState(list(parsed.items()))
        return OTelSpanContext(
            trace_id=parse_trace_id(self.trace_id),
            span_id=parse_span_id(self.span_id),
            is_remote=self.is_remote,
            trace_flags=TraceFlags(self.trace_flags),
            trace_state=trace_state,
        )

    @classmethod
    def from_otel(cls, otel_context: OTelSpanContext) -> "SpanContext":
        trace_state = None
        if otel_context.trace_state:
            trace_state = otel_context.trace_state.to_header() or None
        return cls(
            trace_id=format_trace_id(otel_context.trace_id),
            span_id=format_span_id(otel_context.span_id),
            trace_flags=1 if otel_context.trace_flags.sampled else 0,
            trace_state=trace_state,
            is_remote=otel_context.is_remote,
        )


@dataclass(frozen=True)
class Link:
    """A reference from a span to another span, possibly in another trace."""

    context: SpanContext
    attributes: Dict[str, Any] = field(default_factory=dict)

    def to_otel(self) -> OTelLink:
        return OTelLink(self.context.to_otel(), attributes=dict(self.attributes) or None)
