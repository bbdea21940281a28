"""The workshop application: wires the SDK and drives the library.

Only the application links against exporters, samplers and resources.
Everything it builds is passed down explicitly; no global tracer provider
or propagator is registered.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence, TextIO

from spanlab.config import SAMPLER_NAMES, SpanlabConfig, load_config
from spanlab.context import Propagator
from spanlab.errors import ConfigError, InitializationError, SpanlabError
from spanlab.exporter import ConsoleExporter, OTLPExporter
from spanlab.processors import LoggingSpanProcessor, SamplingPolicy, policy_from_name
from spanlab.resource import build_resource
from spanlab.tracer import Tracer, TracerProvider
from spanlab.workshop import INSTRUMENTATION_NAME, UserRejectedError, example_context_propagation, insert_user

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False, level: str = "INFO") -> None:
    """Set up root logging for the command line. Libraries never call this."""
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def init(
    config: Optional[SpanlabConfig] = None,
    *,
    sampler: Optional[SamplingPolicy] = None,
    stream: Optional[TextIO] = None,
) -> TracerProvider:
    """
    Build a TracerProvider from configuration.

    Args:
        config: Loaded configuration (defaults to load_config())
        sampler: Policy overriding the configured sampler, e.g. a custom one
        stream: Where the console exporter writes (stdout by default)

    Raises:
        InitializationError: the configuration cannot be turned into a pipeline
    """
    try:
        config = config or load_config()
        policy = sampler or policy_from_name(config.sampling.sampler, config.sampling.ratio)
        resource = build_resource(
            config.tracing.service_name,
            config.tracing.service_version,
            attributes=config.resource.attributes,
            detectors=None if config.resource.detect else [],
        )
        exporters = []
        if config.exporters.enable_console:
            exporters.append(ConsoleExporter(stream=stream, pretty=config.exporters.console_pretty))
        if config.exporters.enable_otlp:
            exporters.append(
                OTLPExporter(
                    endpoint=config.exporters.endpoint,
                    insecure=config.exporters.insecure,
                    headers=config.exporters.headers,
                    timeout=config.exporters.timeout,
                )
            )
    except SpanlabError as exc:
        raise InitializationError("failed to initialize tracer provider", {"cause": exc}) from exc

    provider = TracerProvider(resource=resource, sampler=policy)
    for exporter in exporters:
        provider.add_exporter(exporter)
    if config.logging.debug:
        provider.add_span_processor(LoggingSpanProcessor())

    logger.info(
        "Tracing initialized: service=%s sampler=%s exporters=%s",
        config.tracing.service_name,
        provider.sampler.get_description() if provider.sampler else None,
        [type(exporter).__name__ for exporter in exporters],
    )
    return provider


class Workshop:
    """Holds what the application built and runs the library operations."""

    def __init__(self, provider: TracerProvider, propagator: Optional[Propagator] = None) -> None:
        self.provider = provider
        self.propagator = propagator or Propagator()
        self.tracer: Tracer = provider.get_tracer(INSTRUMENTATION_NAME)

    def insert_users(self, users: Sequence[str], out: Optional[TextIO] = None) -> Dict[str, Optional[str]]:
        """
        Insert each user in its own trace.

        Returns user -> error message (None when the insert succeeded).
        """
        results: Dict[str, Optional[str]] = {}
        for user in users:
            try:
                insert_user(self.tracer, None, user, out=out)
                results[user] = None
            except UserRejectedError as exc:
                logger.warning("Insert of user %r rejected: %s", user, exc)
                results[user] = str(exc)
        return results

    def run(
        self,
        users: Sequence[str],
        propagation: bool = False,
        out: Optional[TextIO] = None,
    ) -> Dict[str, Optional[str]]:
        results = self.insert_users(users, out=out)
        if propagation:
            example_context_propagation(self.tracer, self.propagator, out=out)
        return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spanlab",
        description="Tracing workshop: an application and a library using the tracing API",
    )
    parser.add_argument("--config", help="Path to a spanlab.toml file")
    parser.add_argument(
        "--user",
        dest="users",
        action="append",
        help="User to insert (repeatable, default: Foo). 'Bar' produces an error span",
    )
    parser.add_argument("--sampler", choices=SAMPLER_NAMES, help="Sampling policy")
    parser.add_argument("--ratio", type=float, help="Sample ratio for ratio/parent_based")
    parser.add_argument("--endpoint", help="OTLP collector host:port")
    parser.add_argument("--no-otlp", action="store_true", help="Disable the OTLP exporter")
    parser.add_argument("--no-console", action="store_true", help="Disable the stdout exporter")
    parser.add_argument("--propagation", action="store_true", help="Also run the propagation example")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def _overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Dict[str, Any]] = {}
    if args.sampler:
        overrides.setdefault("sampling", {})["sampler"] = args.sampler
    if args.ratio is not None:
        overrides.setdefault("sampling", {})["ratio"] = args.ratio
    if args.endpoint:
        overrides.setdefault("exporters", {})["endpoint"] = args.endpoint
    if args.no_otlp:
        overrides.setdefault("exporters", {})["enable_otlp"] = False
    if args.no_console:
        overrides.setdefault("exporters", {})["enable_console"] = False
    if args.debug:
        overrides.setdefault("logging", {})["debug"] = True
    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(config_file=args.config, overrides=_overrides_from_args(args))
        configure_logging(config.logging.debug, config.logging.level)
        provider = init(config)
    except (ConfigError, InitializationError) as exc:
        print(f"spanlab: {exc}", file=sys.stderr)
        return 1

    try:
        Workshop(provider).run(args.users or ["Foo"], propagation=args.propagation)
    finally:
        if not provider.shutdown(timeout=config.tracing.shutdown_timeout):
            logger.warning("Some spans may not have been exported")
    return 0
