"""Tests for the instrumented workshop library."""

import io

import pytest
from opentelemetry.trace import StatusCode

from conftest import make_provider
from spanlab.context import Propagator
from spanlab.processors import SamplingPolicy
from spanlab.utils import format_span_id, format_trace_id
from spanlab.workshop import (
    INSTRUMENTATION_NAME,
    UserRejectedError,
    example_context_propagation,
    insert_user,
)


@pytest.fixture
def workshop_tracer(provider_and_exporter):
    provider, _ = provider_and_exporter
    return provider.get_tracer(INSTRUMENTATION_NAME)


def spans_by_name(exporter):
    return {span.name: span for span in exporter.get_finished_spans()}


class TestInsertUser:
    def test_accepted_user(self, workshop_tracer, exporter):
        out = io.StringIO()
        insert_user(workshop_tracer, None, "Foo", out=out)

        spans = exporter.get_finished_spans()
        assert sorted(s.name for s in spans) == ["InsertUser", "LogOperation"]
        by_name = spans_by_name(exporter)
        insert, log = by_name["InsertUser"], by_name["LogOperation"]

        assert insert.attributes["user.username"] == "Foo"
        assert insert.status.status_code in (StatusCode.UNSET, StatusCode.OK)
        assert [e.name for e in insert.events] == ["Got the mutex lock, doing work..."]
        assert insert.parent is None
        assert log.parent.span_id == insert.context.span_id
        assert log.context.trace_id == insert.context.trace_id
        assert insert.instrumentation_scope.name == INSTRUMENTATION_NAME
        assert out.getvalue() == "User 'Foo' has been added\n"

    def test_link_to_related_work(self, workshop_tracer, exporter):
        insert_user(workshop_tracer, None, "Foo", out=io.StringIO())

        link = spans_by_name(exporter)["InsertUser"].links[0]
        assert format_trace_id(link.context.trace_id) == "01" + "0" * 30
        assert format_span_id(link.context.span_id) == "01" + "0" * 14
        assert link.context.trace_flags.sampled
        assert dict(link.attributes) == {"one": True, "two": True}

    def test_rejected_user(self, workshop_tracer, exporter):
        out = io.StringIO()
        with pytest.raises(UserRejectedError, match="Bar"):
            insert_user(workshop_tracer, None, "Bar", out=out)

        spans = exporter.get_finished_spans()
        assert [s.name for s in spans] == ["InsertUser"]
        insert = spans[0]
        assert insert.attributes["user.username"] == "Bar"
        assert insert.status.status_code == StatusCode.ERROR
        assert "Bar" in insert.status.description
        errors = [e for e in insert.events if e.name == "exception"]
        assert len(errors) == 1
        assert "Bar" in errors[0].attributes["exception.message"]
        assert out.getvalue() == ""

    def test_unsampled_insert_still_works(self):
        provider, exporter = make_provider(SamplingPolicy.always_off())
        out = io.StringIO()
        insert_user(provider.get_tracer(INSTRUMENTATION_NAME), None, "Foo", out=out)

        assert exporter.get_finished_spans() == ()
        assert out.getvalue() == "User 'Foo' has been added\n"
        with pytest.raises(UserRejectedError):
            insert_user(provider.get_tracer(INSTRUMENTATION_NAME), None, "Bar", out=out)
        provider.shutdown(timeout=5)


class TestContextPropagationExample:
    def test_sender_and_receiver_share_trace(self, workshop_tracer, exporter):
        out = io.StringIO()
        carrier = example_context_propagation(workshop_tracer, Propagator(), out=out)

        by_name = spans_by_name(exporter)
        sender, receiver = by_name["Sender"], by_name["Receiver"]
        assert receiver.context.trace_id == sender.context.trace_id
        assert receiver.parent.span_id == sender.context.span_id
        assert receiver.parent.is_remote

        assert carrier["baggage"] == "foo=bar"
        assert "traceparent" in carrier
        text = out.getvalue()
        assert text.startswith("Carrier dump [Carrier(")
        assert "Properties of the baggage:\nfoo:bar\n" in text
