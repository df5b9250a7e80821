"""Invocation context: correlation IDs, deadlines and cancellation."""

from __future__ import annotations

import contextvars
import threading
import time
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from .errors import ReconcileCancelled

# Context variable for storing correlation ID
correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def set_correlation_id(corr_id: str) -> None:
    """Set the correlation ID in the current context."""
    correlation_id.set(corr_id)


def get_correlation_id() -> str | None:
    """Get the correlation ID from the current context."""
    return correlation_id.get()


@contextmanager
def with_correlation_id(corr_id: str) -> Iterator[str]:
    """Context manager to set a correlation ID for the duration of a block.

    Args:
        corr_id: Correlation ID to use

    Yields:
        The correlation ID
    """
    token = correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        correlation_id.reset(token)


def get_context_dict(additional: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get a dictionary of context values.

    Args:
        additional: Additional key-value pairs to include

    Returns:
        Dictionary with context values including correlation_id
    """
    ctx: dict[str, Any] = {}

    corr_id = get_correlation_id()
    if corr_id:
        ctx["correlation_id"] = corr_id

    if additional:
        ctx.update(additional)

    return ctx


class ReconcileContext:
    """Deadline and cancellation signal carried by one reconcile invocation.

    Store calls check the context before going to the network, and poll
    loops sleep through it so that cancellation interrupts the wait.
    """

    def __init__(
        self,
        timeout: float | None = None,
        reconcile_id: str | None = None,
        clock: Any = time.monotonic,
    ):
        self.reconcile_id = reconcile_id or uuid.uuid4().hex[:12]
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Signal cancellation to every pending and future check."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def now(self) -> float:
        return self._clock()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def check(self) -> None:
        """Raise ReconcileCancelled if the invocation was cancelled or timed out."""
        if self._cancelled.is_set():
            raise ReconcileCancelled(f"reconcile {self.reconcile_id} was cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise ReconcileCancelled(f"reconcile {self.reconcile_id} exceeded its deadline")

    def sleep(self, seconds: float) -> None:
        """Sleep for up to ``seconds``, waking early on cancellation.

        Raises:
            ReconcileCancelled: If cancelled or the deadline passes while sleeping
        """
        self.check()
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        if self._cancelled.wait(seconds):
            raise ReconcileCancelled(f"reconcile {self.reconcile_id} was cancelled")
        self.check()
