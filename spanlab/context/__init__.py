"""Context passing and propagation utilities."""

from spanlab.context.context import (
    baggage_from_context,
    context_with_baggage,
    empty_context,
    parse_baggage,
    span_context_from_context,
    span_from_context,
)
from spanlab.context.propagators import (
    BAGGAGE_HEADER,
    TRACEPARENT_HEADER,
    TRACESTATE_HEADER,
    Carrier,
    Propagator,
    format_traceparent,
    format_tracestate,
    parse_traceparent,
    parse_tracestate,
)

__all__ = [
    "BAGGAGE_HEADER",
    "TRACEPARENT_HEADER",
    "TRACESTATE_HEADER",
    "Carrier",
    "Propagator",
    "baggage_from_context",
    "context_with_baggage",
    "empty_context",
    "format_traceparent",
    "format_tracestate",
    "parse_baggage",
    "parse_traceparent",
    "parse_tracestate",
    "span_context_from_context",
    "span_from_context",
]
