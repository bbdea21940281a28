"""A small library instrumented against the tracing API only.

A library receives a Tracer (or provider) from the application and never
configures exporters, samplers or resources itself. Span creation must not
fail and must not change what the library does.
"""

from __future__ import annotations

import sys
import time
from typing import Optional, TextIO

from opentelemetry.context import Context

from spanlab.context import Carrier, Propagator, baggage_from_context, context_with_baggage, parse_baggage
from spanlab.tracer import Link, SpanContext, SpanStatus, Tracer
from spanlab.utils.helpers import span_id_from_bytes, trace_id_from_bytes

# Tracers are named after the instrumented module or library, not the application.
INSTRUMENTATION_NAME = "module-or-library-name"

USERNAME_ATTRIBUTE = "user.username"
REJECTED_USERS = frozenset({"Bar"})


class UserRejectedError(Exception):
    """The user was refused by the library. Recorded on the span, then raised."""

    def __init__(self, user: str) -> None:
        super().__init__(f"user {user} is trying to hack")
        self.user = user


def related_work_link() -> Link:
    """A link to some other (made up) piece of work this insert relates to."""
    return Link(
        context=SpanContext(
            trace_id=trace_id_from_bytes(b"\x01"),
            span_id=span_id_from_bytes(b"\x01"),
            trace_flags=1,
        ),
        attributes={"one": True, "two": True},
    )


def insert_user(tracer: Tracer, context: Optional[Context], user: str, out: TextIO = None) -> None:
    """
    Insert ``user``, traced as an "InsertUser" span.

    Raises:
        UserRejectedError: the user is not allowed; the span carries the
            error and ERROR status
    """
    ctx, span = tracer.start_span(context, "InsertUser", links=[related_work_link()])
    try:
        # Annotating costs something, skip it for spans that are not recorded.
        if span.is_recording():
            span.set_attributes({USERNAME_ATTRIBUTE: user})
            span.add_event("Got the mutex lock, doing work...")

        if user in REJECTED_USERS:
            err = UserRejectedError(user)
            span.record_error(err)
            span.set_status(SpanStatus.ERROR, str(err))
            raise err

        time.sleep(0.0005)

        # The derived context makes LogOperation a child of InsertUser.
        log_operation(tracer, ctx, user, out=out)
    finally:
        span.end()


def log_operation(tracer: Tracer, context: Optional[Context], user: str, out: TextIO = None) -> None:
    _, span = tracer.start_span(context, "LogOperation")
    try:
        print(f"User '{user}' has been added", file=out or sys.stdout)
    finally:
        span.end()


def example_context_propagation(
    tracer: Tracer,
    propagator: Propagator,
    out: TextIO = None,
) -> Carrier:
    """
    Serialize a sender's context into a carrier and continue the trace from it.

    Both sides would normally live in different processes, with the carrier
    travelling as request headers. Returns the carrier that crossed the
    boundary.
    """
    out = out or sys.stdout

    sender_ctx = context_with_baggage(None, parse_baggage("foo=bar"))
    sender_ctx, sender = tracer.start_span(sender_ctx, "Sender")
    try:
        carrier = Carrier()
        propagator.inject(sender_ctx, carrier)
        print(f"Carrier dump [{carrier!r}]", file=out)

        # Propagation boundary

        receiver_ctx = propagator.extract(carrier)
        print("Properties of the baggage:", file=out)
        for key, value in baggage_from_context(receiver_ctx).items():
            print(f"{key}:{value}", file=out)

        _, receiver = tracer.start_span(receiver_ctx, "Receiver")
        receiver.end()
    finally:
        sender.end()
    return carrier
