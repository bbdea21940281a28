"""Tracer facade issuing spans for one instrumentation scope."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Tuple, TYPE_CHECKING

from opentelemetry.context import Context
from opentelemetry.trace import INVALID_SPAN, SpanKind
from opentelemetry.trace import Tracer as OTelTracer
from opentelemetry.trace import get_current_span, set_span_in_context

from spanlab.tracer.span import Span
from spanlab.tracer.span_context import Link
from spanlab.utils.helpers import format_span_id

if TYPE_CHECKING:
    from spanlab.tracer.provider import TracerProvider

logger = logging.getLogger(__name__)


class Tracer:
    """
    Issues spans tied to a logical instrumentation name.

    The parent of a new span is taken only from the context passed in; there
    is no ambient "current span". Callers thread the returned context into
    nested calls.
    """

    def __init__(
        self,
        provider: "TracerProvider",
        instrumentation_scope: str,
        version: Optional[str] = None,
    ):
        """
        Initialize tracer with an OpenTelemetry Tracer.

        Args:
            provider: spanlab TracerProvider instance
            instrumentation_scope: Name of the module or library being instrumented
            version: Optional version of the instrumented library
        """
        self._provider = provider
        self.instrumentation_scope = instrumentation_scope
        self.version = version
        self._otel_tracer: OTelTracer = provider.otel_tracer_provider.get_tracer(
            instrumentation_scope, version
        )

    def start_span(
        self,
        context: Optional[Context],
        name: str,
        *,
        attributes: Optional[Dict[str, Any]] = None,
        links: Iterable[Link] = (),
        start_time: Optional[int] = None,
        kind: SpanKind = SpanKind.INTERNAL,
    ) -> Tuple[Context, Span]:
        """
        Start a new span.

        Args:
            context: Parent context, or None to start a new trace
            name: Span name; the most general string identifying a class of spans
            attributes: Optional attributes set at creation (visible to the sampler)
            links: Links to other spans, each with its own attributes
            start_time: Explicit start timestamp in nanoseconds since the epoch
            kind: OpenTelemetry span kind

        Returns:
            (derived context carrying the new span, the span). This never
            raises; on internal failure the span is non-recording.
        """
        parent_context = context if context is not None else Context()
        try:
            parent = get_current_span(parent_context).get_span_context()
            parent_span_id = format_span_id(parent.span_id) if parent.is_valid else None

            otel_span = self._otel_tracer.start_span(
                name=name,
                context=parent_context,
                kind=kind,
                attributes=attributes,
                links=[link.to_otel() for link in links],
                start_time=start_time,
            )
        except Exception:
            logger.exception("Failed to start span %r, continuing with a non-recording span", name)
            return parent_context, Span(INVALID_SPAN, None, name=name)

        span = Span(otel_span, self, parent_span_id, name=name)
        return set_span_in_context(otel_span, parent_context), span
