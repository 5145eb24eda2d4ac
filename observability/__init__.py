"""Logging and optional Logfire tracing.

setup_logging / run_context:
    Console plus rotating file logging (text or JSON), with every record
    of a bot cycle tagged by its run id.

setup_tracing / trace_operation:
    Logfire spans, no-ops unless ENABLE_LOGFIRE=true.

Example:
    >>> from observability import setup_logging, setup_tracing, trace_operation
    >>> setup_logging(config)
    >>> setup_tracing(enabled=config.enable_logfire, token=config.logfire_token)
    >>> with trace_operation("aggregate"):
    ...     pass
"""

from observability.logging import run_context, setup_logging
from observability.tracing import TracingContext, setup_tracing, trace_operation

__all__ = [
    "setup_logging",
    "run_context",
    "setup_tracing",
    "trace_operation",
    "TracingContext",
]
