import pytest
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from spanlab.processors import SamplingPolicy
from spanlab.tracer import TracerProvider


def make_provider(sampler=None):
    """Provider exporting synchronously into memory."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider(
        resource=Resource.create({"service.name": "spanlab-tests"}),
        sampler=sampler or SamplingPolicy.always_on(),
    )
    provider.add_exporter(exporter, batch=False)
    return provider, exporter


@pytest.fixture
def provider_and_exporter():
    provider, exporter = make_provider()
    yield provider, exporter
    provider.shutdown(timeout=5)


@pytest.fixture
def tracer(provider_and_exporter):
    provider, _ = provider_and_exporter
    return provider.get_tracer("spanlab.tests")


@pytest.fixture
def exporter(provider_and_exporter):
    return provider_and_exporter[1]
