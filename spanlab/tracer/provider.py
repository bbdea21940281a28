"""TracerProvider using the OpenTelemetry SDK."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Tuple

from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanLimits
from opentelemetry.sdk.trace import SpanProcessor as OTelSpanProcessor
from opentelemetry.sdk.trace import TracerProvider as OTelTracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import Sampler

from spanlab.processors.sampler import SamplingPolicy, build_sampler
from spanlab.tracer.tracer import Tracer

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT = 10.0


class TracerProvider:
    """
    Owns the OpenTelemetry SDK provider for one application.

    Only the application creates a provider. Libraries receive a Tracer (or
    the provider) from their caller; nothing here registers a process-wide
    global.
    """

    def __init__(
        self,
        resource: Optional[Resource] = None,
        sampler: Optional[object] = None,
        span_limits: Optional[SpanLimits] = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            resource: OTel Resource attached to every span (defaults to Resource.create())
            sampler: SamplingPolicy or a ready OTel Sampler (defaults to always on)
            span_limits: Optional OTel span limits
        """
        if isinstance(sampler, SamplingPolicy):
            sampler = build_sampler(sampler)
        self.sampler: Optional[Sampler] = sampler
        self.resource = resource if resource is not None else Resource.create()

        # shutdown() owns the lifecycle; the SDK exit hook would wait without a bound.
        self._otel_provider = OTelTracerProvider(
            resource=self.resource,
            sampler=sampler,
            span_limits=span_limits,
            shutdown_on_exit=False,
        )
        self._tracers: Dict[Tuple[str, Optional[str]], Tracer] = {}
        self._lock = threading.Lock()
        self._is_shutdown = False

    def get_tracer(self, name: str, version: Optional[str] = None) -> Tracer:
        """
        Get a tracer by instrumentation scope name.

        The name should be the module or library being instrumented, not the
        application.
        """
        key = (name, version)
        with self._lock:
            tracer = self._tracers.get(key)
            if tracer is None:
                tracer = Tracer(self, name, version)
                self._tracers[key] = tracer
            return tracer

    def add_span_processor(self, processor: OTelSpanProcessor) -> None:
        self._otel_provider.add_span_processor(processor)

    def add_exporter(self, exporter: SpanExporter, *, batch: bool = True) -> OTelSpanProcessor:
        """
        Attach an exporter behind a batching (default) or synchronous processor.

        Returns the processor that was registered.
        """
        processor = BatchSpanProcessor(exporter) if batch else SimpleSpanProcessor(exporter)
        self.add_span_processor(processor)
        return processor

    def force_flush(self, timeout: Optional[float] = None) -> bool:
        timeout_millis = int(timeout * 1000) if timeout is not None else 30000
        return self._otel_provider.force_flush(timeout_millis=timeout_millis)

    def shutdown(self, timeout: float = DEFAULT_SHUTDOWN_TIMEOUT) -> bool:
        """
        Flush and shut down every processor, waiting at most ``timeout`` seconds.

        Returns False when the processors did not finish in time; the
        remaining work continues on a daemon thread and is abandoned at exit.
        """
        with self._lock:
            if self._is_shutdown:
                return True
            self._is_shutdown = True

        worker = threading.Thread(
            target=self._shutdown_processors,
            name="spanlab-shutdown",
            daemon=True,
        )
        worker.start()
        worker.join(timeout)
        if worker.is_alive():
            logger.warning("Tracer provider shutdown did not finish within %.1fs", timeout)
            return False
        return True

    def _shutdown_processors(self) -> None:
        try:
            self._otel_provider.shutdown()
        except Exception:
            logger.exception("Error while shutting down span processors")

    @property
    def otel_tracer_provider(self) -> OTelTracerProvider:
        """The underlying OpenTelemetry TracerProvider."""
        return self._otel_provider
