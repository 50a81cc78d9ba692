"""Context variables for invocation-scoped logging data.

One diagnosis flow invocation owns one correlation id; the owner and the
current flow stage ride along as extra context so every record emitted by
the gateway, invoker and persister can be joined back to the invocation.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any
from uuid import uuid4

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

_extra_context: ContextVar[dict[str, Any] | None] = ContextVar("extra_context", default=None)


def get_correlation_id() -> str:
    """Get the current correlation ID."""
    return correlation_id.get()


def set_correlation_id(value: str) -> None:
    """Set the correlation ID for the current context.

    Args:
        value: The correlation ID.
    """
    correlation_id.set(value)


@contextmanager
def invocation_scope() -> Iterator[str]:
    """Scope the correlation ID and extra context to one flow invocation.

    An ID already set by the caller (the Lambda adapter) is kept; otherwise a
    fresh one is generated for this invocation. Both are restored on exit.

    Yields:
        The correlation ID in effect for the invocation.
    """
    id_token = correlation_id.set(correlation_id.get() or str(uuid4()))
    extra_token = _extra_context.set(get_extra_context())
    try:
        yield correlation_id.get()
    finally:
        _extra_context.reset(extra_token)
        correlation_id.reset(id_token)


def get_extra_context() -> dict[str, Any]:
    """Get a copy of the current extra context."""
    context = _extra_context.get()
    if context is None:
        return {}
    return context.copy()


def set_extra_context(**kwargs: Any) -> None:
    """Set additional context fields to include in all log messages.

    Args:
        **kwargs: Key-value pairs to include in log messages.
    """
    current = _extra_context.get()
    current = {} if current is None else current.copy()
    current.update(kwargs)
    _extra_context.set(current)


def set_flow_stage(stage: str) -> None:
    """Record the active flow stage on every subsequent log record."""
    set_extra_context(flow_stage=stage)


def clear_context() -> None:
    """Clear all context (correlation ID and extra context)."""
    correlation_id.set("")
    _extra_context.set(None)
