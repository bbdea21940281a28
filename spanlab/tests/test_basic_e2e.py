"""Basic smoke tests for spanlab.

Quick sanity checks that core functionality works. Detailed behavior is
covered by the per-module tests.
"""

import pytest

import spanlab


def test_version_exposed():
    """Smoke test: version is accessible."""
    assert hasattr(spanlab, '__version__')
    assert isinstance(spanlab.__version__, str)
    assert len(spanlab.__version__.split('.')) >= 2


def test_start_and_end_span(tracer, exporter):
    """Smoke test: a span can be started, annotated and exported."""
    _, span = tracer.start_span(None, "smoke")
    span.set_attribute("answer", 42)
    span.end()

    finished = exporter.get_finished_spans()
    assert [s.name for s in finished] == ["smoke"]
    assert finished[0].attributes["answer"] == 42


def test_public_api_importable():
    """Smoke test: the public names can be imported from the package root."""
    from spanlab import Carrier, Propagator, SamplingPolicy, Workshop, init

    assert init is not None
    assert Workshop is not None
    assert Carrier() == {}
    assert Propagator().fields
    assert SamplingPolicy.always_on() is not None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
