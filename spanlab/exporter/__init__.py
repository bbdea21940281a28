"""Exporters for delivering finished spans to backends."""

from spanlab.exporter.console_exporter import ConsoleExporter
from spanlab.exporter.otlp_exporter import DEFAULT_ENDPOINT, OTLPExporter, build_traces_url

__all__ = ["ConsoleExporter", "OTLPExporter", "DEFAULT_ENDPOINT", "build_traces_url"]
