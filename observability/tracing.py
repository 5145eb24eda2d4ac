"""Optional Logfire tracing.

When ENABLE_LOGFIRE is set, aggregation runs, gateway refreshes and bot
cycles are wrapped in Logfire spans and the article writer's PydanticAI
calls are instrumented automatically. Otherwise every helper here is a
cheap no-op that only logs the elapsed time at DEBUG.

Requirements:
    pip install 'trendwise[tracing]'

Usage:
    >>> from observability.tracing import setup_tracing, trace_operation
    >>> setup_tracing(enabled=True, service_name="trendwise")
    >>> with trace_operation("aggregate", {"sources": 4}) as attrs:
    ...     attrs["topics"] = 15
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

logger = logging.getLogger(__name__)


@dataclass
class TracingContext:
    """Tracing state for the process."""
    enabled: bool = False
    service_name: str = "trendwise"
    token: str = ""
    _logfire_configured: bool = field(default=False, init=False)

    @property
    def active(self) -> bool:
        return self.enabled and self._logfire_configured


_context = TracingContext()


def setup_tracing(
    enabled: bool = False,
    service_name: str = "trendwise",
    token: str = "",
) -> TracingContext:
    """Configure Logfire and instrument PydanticAI.

    A missing logfire install or a configuration failure disables tracing
    with a log line; it never stops the application.
    """
    _context.enabled = enabled
    _context.service_name = service_name
    _context.token = token

    if not enabled:
        logger.debug("Tracing disabled")
        return _context

    try:
        import logfire

        logfire.configure(service_name=service_name, token=token or None)
        logfire.instrument_pydantic_ai()
        _context._logfire_configured = True
        logger.info("Logfire tracing enabled | service=%s", service_name)
    except ImportError:
        logger.warning("Logfire not installed, tracing disabled")
        _context.enabled = False
    except Exception as e:
        logger.error("Logfire setup failed | error=%s", e)
        _context.enabled = False

    return _context


@contextmanager
def trace_operation(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Iterator[dict[str, Any]]:
    """Trace a block as a span.

    Yields a dict; keys set on it during the block are attached to the
    span as result attributes when the block exits.
    """
    started = time.monotonic()
    result_attrs: dict[str, Any] = {}
    try:
        if _context.active:
            import logfire

            with logfire.span(name, **(attributes or {})) as span:
                yield result_attrs
                for key, value in result_attrs.items():
                    span.set_attribute(key, value)
        else:
            yield result_attrs
    finally:
        logger.debug("Operation finished | name=%s duration=%.2fs", name, time.monotonic() - started)
