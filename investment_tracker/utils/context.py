# investment_tracker/utils/context.py
"""
Execution context management for the Investment Tracker engine.

This module provides context-local storage for tracing data:
- Correlation ID for tying log lines of one calculation or import together

Uses Python's contextvars so values propagate through async/await calls
and never leak between threads.

Usage:
    from investment_tracker.utils.context import get_correlation_id, set_correlation_id

    # At the boundary (request handler, CLI command, import batch)
    set_correlation_id("abc-123")

    # In any service
    correlation_id = get_correlation_id()  # Returns "abc-123"
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# =============================================================================
# CONTEXT VARIABLES
# =============================================================================

# Correlation ID for tracing
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


# =============================================================================
# CORRELATION ID
# =============================================================================

def get_correlation_id() -> str | None:
    """
    Get the current correlation ID.

    Returns:
        The correlation ID for the current context, or None if not set.
    """
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current context.

    Args:
        correlation_id: Unique identifier for this unit of work
    """
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID."""
    _correlation_id_var.set(None)


def new_correlation_id() -> str:
    """Generate a fresh correlation ID (UUID4 hex)."""
    return uuid.uuid4().hex


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Run a block under a correlation ID, restoring the previous one afterwards.

    An existing correlation ID is reused when none is given, so nested
    scopes (an import inside a traced request) keep the outer ID.

    Args:
        correlation_id: ID to use; defaults to the current or a new one

    Yields:
        The correlation ID in effect inside the block
    """
    effective = correlation_id or get_correlation_id() or new_correlation_id()
    token = _correlation_id_var.set(effective)
    try:
        yield effective
    finally:
        _correlation_id_var.reset(token)
