"""OTLP/HTTP exporter built on OpenTelemetry's OTLP HTTP span exporter."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence
from urllib.parse import urlparse

from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter as OTelOTLPSpanExporter
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from spanlab.errors import ExportError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "localhost:4318"
TRACES_PATH = "/v1/traces"


def build_traces_url(endpoint: str, insecure: bool = True) -> str:
    """
    Turn a collector endpoint into the OTLP/HTTP traces URL.

    ``host:port`` becomes ``http://host:port/v1/traces`` (``https`` when not
    insecure). Full URLs are kept, with ``/v1/traces`` added if they have no
    path.
    """
    endpoint = (endpoint or "").strip()
    if not endpoint:
        raise ExportError("OTLP endpoint must not be empty")

    if "://" not in endpoint:
        scheme = "http" if insecure else "https"
        endpoint = f"{scheme}://{endpoint}"

    parsed = urlparse(endpoint)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ExportError("invalid OTLP endpoint", {"endpoint": endpoint})
    try:
        parsed.port
    except ValueError:
        raise ExportError("invalid OTLP endpoint port", {"endpoint": endpoint}) from None

    if parsed.path in ("", "/"):
        return endpoint.rstrip("/") + TRACES_PATH
    return endpoint


class OTLPExporter(SpanExporter):
    """
    Sends span batches to a collector over OTLP/HTTP.

    Payload encoding, retries and backoff are left to the OpenTelemetry
    exporter. Export failures are logged and reported as FAILURE, never
    raised into the span processor.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        insecure: bool = True,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Initialize OTLP exporter.

        Args:
            endpoint: Collector ``host:port`` or full URL
            insecure: Use plain-text HTTP for ``host:port`` endpoints
            headers: Optional additional HTTP headers
            timeout: Request timeout in seconds

        Raises:
            ExportError: the endpoint cannot be used
        """
        self.endpoint = build_traces_url(endpoint, insecure)
        self.insecure = insecure
        self.timeout = timeout
        self._otel_exporter = OTelOTLPSpanExporter(
            endpoint=self.endpoint,
            timeout=timeout,
            headers=dict(headers) if headers else None,
        )

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        if not spans:
            return SpanExportResult.SUCCESS
        try:
            return self._otel_exporter.export(spans)
        except Exception:
            logger.exception("Failed to export %d spans to %s", len(spans), self.endpoint)
            return SpanExportResult.FAILURE

    def shutdown(self) -> None:
        try:
            self._otel_exporter.shutdown()
        except Exception:
            logger.exception("Error while shutting down OTLP exporter")

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._otel_exporter.force_flush(timeout_millis=timeout_millis)
