"""spanlab: a tracing facade over OpenTelemetry and a workshop showing its use.

Applications build a TracerProvider (see spanlab.app.init) and hand tracers
to libraries explicitly. Libraries only start spans and annotate them.
"""

from spanlab.app import Workshop, init
from spanlab.context import Carrier, Propagator
from spanlab.processors import SamplingDecision, SamplingPolicy
from spanlab.tracer import Link, Span, SpanContext, SpanStatus, Tracer, TracerProvider

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Carrier",
    "Link",
    "Propagator",
    "SamplingDecision",
    "SamplingPolicy",
    "Span",
    "SpanContext",
    "SpanStatus",
    "Tracer",
    "TracerProvider",
    "Workshop",
    "init",
]
