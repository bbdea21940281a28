"""Workshop library code, instrumented with the tracing API only."""

from spanlab.workshop.users import (
    INSTRUMENTATION_NAME,
    UserRejectedError,
    example_context_propagation,
    insert_user,
    log_operation,
)

__all__ = [
    "INSTRUMENTATION_NAME",
    "UserRejectedError",
    "example_context_propagation",
    "insert_user",
    "log_operation",
]
