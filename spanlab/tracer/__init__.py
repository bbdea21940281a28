"""Tracer components."""

from spanlab.tracer.provider import TracerProvider
from spanlab.tracer.span import Span, SpanStatus
from spanlab.tracer.span_context import Link, SpanContext
from spanlab.tracer.tracer import Tracer

__all__ = [
    "Link",
    "Span",
    "SpanStatus",
    "SpanContext",
    "Tracer",
    "TracerProvider",
]
