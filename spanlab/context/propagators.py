"""W3C trace context and baggage propagation using OpenTelemetry's propagators."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, MutableMapping, Optional, Sequence

from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.context import Context
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.propagators.textmap import TextMapPropagator
from opentelemetry.trace import NonRecordingSpan, get_current_span, set_span_in_context
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from spanlab.errors import PropagationError
from spanlab.tracer.span_context import SpanContext

logger = logging.getLogger(__name__)

TRACEPARENT_HEADER = "traceparent"
TRACESTATE_HEADER = "tracestate"
BAGGAGE_HEADER = "baggage"

_traceparent_propagator = TraceContextTextMapPropagator()


class Carrier(MutableMapping[str, str]):
    """
    Mutable string-to-string mapping that carries serialized context.

    The injecting side fills it, the extracting side reads it. Values must be
    strings; anything else raises PropagationError.
    """

    def __init__(self, items: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = {}
        for key, value in (items or {}).items():
            self[key] = value

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __setitem__(self, key: str, value: str) -> None:
        if not isinstance(key, str) or not isinstance(value, str):
            raise PropagationError("carrier keys and values must be strings", {"key": key})
        self._items[key] = value

    def __delitem__(self, key: str) -> None:
        del self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Carrier({self._items!r})"

    def set(self, key: str, value: str) -> None:
        self[key] = value


class Propagator:
    """
    Serializes trace context and baggage into a Carrier and back.

    Defaults to the W3C ``traceparent``/``tracestate`` headers plus the W3C
    ``baggage`` header. Neither direction raises: problems are logged and the
    input context is returned unchanged.
    """

    def __init__(self, propagators: Optional[Sequence[TextMapPropagator]] = None) -> None:
        if propagators is None:
            propagators = [TraceContextTextMapPropagator(), W3CBaggagePropagator()]
        self._propagator = CompositePropagator(list(propagators))

    @property
    def fields(self) -> set:
        """Header names this propagator may write."""
        return self._propagator.fields

    def inject(self, context: Optional[Context], carrier: MutableMapping[str, str]) -> None:
        try:
            self._propagator.inject(carrier, context=context if context is not None else Context())
        except Exception:
            logger.exception("Failed to inject trace context into carrier")

    def extract(
        self,
        carrier: MutableMapping[str, str],
        context: Optional[Context] = None,
    ) -> Context:
        base = context if context is not None else Context()
        try:
            return self._propagator.extract(carrier, context=base)
        except Exception:
            logger.exception("Failed to extract trace context from carrier")
            return base


def format_traceparent(context: SpanContext) -> str:
    """Format a traceparent header value, or "" for an invalid context."""
    if not context.is_valid():
        return ""
    carrier: Dict[str, str] = {}
    _traceparent_propagator.inject(
        carrier, context=set_span_in_context(NonRecordingSpan(context.to_otel()))
    )
    return carrier.get(TRACEPARENT_HEADER, "")


def parse_traceparent(header_value: str, trace_state: Optional[str] = None) -> Optional[SpanContext]:
    """Parse a traceparent header into a remote SpanContext, None when malformed."""
    if not header_value:
        return None
    carrier = {TRACEPARENT_HEADER: header_value}
    if trace_state:
        carrier[TRACESTATE_HEADER] = trace_state
    ctx = _traceparent_propagator.extract(carrier, context=Context())
    otel_context = get_current_span(ctx).get_span_context()
    if not otel_context.is_valid:
        return None
    return SpanContext.from_otel(otel_context)


def format_tracestate(state: Dict[str, str]) -> str:
    """
    Format a tracestate header value from a dict.

    Formats according to W3C Trace Context: key1=value1,key2=value2
    """
    if not state:
        return ""

    items = []
    for k, v in state.items():
        key = str(k).strip().lower()[:256]
        value = str(v).strip().replace(",", "_").replace("=", "_")[:256]
        if key and value:
            items.append(f"{key}={value}")

    return ",".join(items)


def parse_tracestate(header_value: str) -> Dict[str, str]:
    """
    Parse a tracestate header into a dict.

    Malformed members are skipped.
    """
    if not header_value:
        return {}

    result = {}
    for item in header_value.split(","):
        item = item.strip()
        if not item or "=" not in item:
            continue
        key, value = item.split("=", 1)
        key = key.strip().lower()
        value = value.strip()
        if key and value:
            result[key] = value

    return result
