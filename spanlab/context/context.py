"""Helpers for passing trace context explicitly between calls."""

from __future__ import annotations

from typing import Dict, Mapping, Optional
from urllib.parse import unquote

from opentelemetry import baggage as otel_baggage
from opentelemetry.context import Context
from opentelemetry.trace import get_current_span

from spanlab.tracer.span import Span
from spanlab.tracer.span_context import SpanContext


def empty_context() -> Context:
    """A context with no span and no baggage, the root of a new trace."""
    return Context()


def span_context_from_context(context: Optional[Context]) -> Optional[SpanContext]:
    """Return the SpanContext carried by ``context``, or None if there is no valid one."""
    if context is None:
        return None
    otel_context = get_current_span(context).get_span_context()
    if not otel_context.is_valid:
        return None
    return SpanContext.from_otel(otel_context)


def span_from_context(context: Optional[Context]) -> Optional[Span]:
    """
    Wrap the span carried by ``context``.

    The wrapper is a read/annotate view; ending it ends the underlying span.
    """
    if context is None:
        return None
    otel_span = get_current_span(context)
    if not otel_span.get_span_context().is_valid:
        return None
    return Span(otel_span)


def parse_baggage(header_value: str) -> Dict[str, str]:
    """
    Parse ``key=value`` members separated by commas.

    Keys and values are percent-decoded. Properties after ``;`` are dropped
    and malformed members are skipped.
    """
    result: Dict[str, str] = {}
    if not header_value:
        return result
    for member in header_value.split(","):
        member = member.split(";", 1)[0].strip()
        if "=" not in member:
            continue
        key, value = member.split("=", 1)
        key = key.strip()
        if key:
            result[unquote(key)] = unquote(value.strip())
    return result


def context_with_baggage(context: Optional[Context], items: Mapping[str, str]) -> Context:
    """Return a copy of ``context`` with each baggage entry added."""
    ctx = context if context is not None else Context()
    for key, value in items.items():
        ctx = otel_baggage.set_baggage(key, value, context=ctx)
    return ctx


def baggage_from_context(context: Optional[Context]) -> Dict[str, str]:
    if context is None:
        return {}
    return {key: str(value) for key, value in otel_baggage.get_all(context).items()}
