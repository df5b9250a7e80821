"""Status engine: derive and commit the owning entity's conditions."""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, TypeVar

from .. import metrics
from ..config import OperatorConfig
from ..constants import KIND_POWER_MONITOR
from ..models import Condition, ResourceHandle, RolloutCounters
from ..services.k8s.base import ResourceStore
from ..tracing import trace_span
from ..utils.conditions import (
    conditions_to_status,
    invalid_resource_conditions,
    now_timestamp,
    reconciled_condition,
)
from ..utils.context import ReconcileContext
from ..utils.errors import ConflictError, NotFoundError, OperatorError
from .availability import available_condition, available_condition_for_error

_T = TypeVar("_T")

logger = logging.getLogger(__name__)


def retry_on_conflict(
    fn: Callable[[], _T],
    steps: int = 4,
    initial_delay: float = 0.01,
    factor: float = 5.0,
    jitter: float = 0.1,
    sleep: Callable[[float], Any] = time.sleep,
) -> _T:
    """Call ``fn`` until it stops raising ConflictError or the budget runs out.

    Delays grow exponentially from ``initial_delay`` by ``factor`` with up to
    ``jitter`` fractional noise. Any other exception propagates immediately.

    Raises:
        ConflictError: The last conflict, once ``steps`` attempts have failed
    """
    delay = initial_delay
    for attempt in range(1, steps + 1):
        try:
            return fn()
        except ConflictError:
            metrics.status_conflicts_total.inc()
            if attempt == steps:
                raise
            sleep(delay + delay * jitter * random.random())
            delay *= factor
    raise ValueError("retry budget must allow at least one attempt")


class StatusEngine:
    """Recompute and commit the owner's condition set once per invocation.

    The owner is re-fetched on every attempt and the condition set is built
    from scratch, so a commit that survives conflicts reflects only what the
    final attempt observed.
    """

    def __init__(
        self,
        store: ResourceStore,
        config: OperatorConfig,
        workload_for: Callable[[ResourceHandle], ResourceHandle],
        sleep: Callable[[float], Any] | None = None,
    ):
        self.store = store
        self.config = config
        self.workload_for = workload_for
        self.sleep = sleep

    def _retry(self, fn: Callable[[], _T], ctx: ReconcileContext) -> _T:
        return retry_on_conflict(
            fn,
            steps=self.config.status_retry_steps,
            initial_delay=self.config.status_retry_initial_delay_seconds,
            factor=self.config.status_retry_factor,
            jitter=self.config.status_retry_jitter,
            sleep=self.sleep or ctx.sleep,
        )

    def _fetch_live_owner(self, owner_key: ResourceHandle, ctx: ReconcileContext) -> ResourceHandle | None:
        try:
            owner = self.store.get(owner_key.identity(), ctx)
        except NotFoundError:
            logger.debug(f"{owner_key.display_name} is gone; skipping status update")
            return None
        if owner.deletion_requested:
            logger.debug(f"{owner_key.display_name} is being deleted; skipping status update")
            return None
        return owner

    def observe_workload(
        self, owner: ResourceHandle, ctx: ReconcileContext
    ) -> tuple[Condition, RolloutCounters | None]:
        """Fetch the managed workload and derive the Available condition."""
        workload_key = self.workload_for(owner)
        try:
            workload = self.store.get(workload_key, ctx)
        except OperatorError as e:
            return available_condition_for_error(e, workload_key.namespaced_name), None

        counters = RolloutCounters.from_daemonset(workload.payload)
        return available_condition(counters, workload_key.namespaced_name), counters

    def build_status(
        self,
        owner: ResourceHandle,
        reconcile_error: BaseException | None,
        ctx: ReconcileContext,
    ) -> dict[str, Any]:
        """Build a fresh status document; previous conditions are not merged."""
        generation = owner.generation
        available, counters = self.observe_workload(owner, ctx)
        available.observed_generation = generation
        metrics.availability_total.labels(status=available.status, reason=available.reason).inc()

        conditions = [reconciled_condition(reconcile_error, generation), available]
        status: dict[str, Any] = {
            "observedGeneration": generation,
            "conditions": conditions_to_status(conditions, now_timestamp()),
        }
        if counters is not None:
            status["daemonset"] = counters.to_status()
        return status

    def commit_status(
        self,
        owner_key: ResourceHandle,
        reconcile_error: BaseException | None,
        ctx: ReconcileContext,
    ) -> None:
        """Commit Reconciled and Available conditions for the owner.

        Args:
            owner_key: Identity of the owning entity
            reconcile_error: Error from the reconciler pass, or None on success
            ctx: Invocation context

        Raises:
            ConflictError: If the retry budget is exhausted
            OperatorError: On any other store failure
        """
        def attempt() -> None:
            owner = self._fetch_live_owner(owner_key, ctx)
            if owner is None:
                return
            status = self.build_status(owner, reconcile_error, ctx)
            self.store.update_status(owner, status, ctx)

        with trace_span("commit_status", kind=KIND_POWER_MONITOR, attributes={"owner.name": owner_key.name}):
            try:
                self._retry(attempt, ctx)
            except OperatorError:
                metrics.status_update_total.labels(result="failed").inc()
                raise
            metrics.status_update_total.labels(result="success").inc()

    def commit_invalid_status(self, owner_key: ResourceHandle, message: str, ctx: ReconcileContext) -> None:
        """Mark an owner that will not be reconciled as invalid.

        Raises:
            ConflictError: If the retry budget is exhausted
            OperatorError: On any other store failure
        """
        def attempt() -> None:
            owner = self._fetch_live_owner(owner_key, ctx)
            if owner is None:
                return
            conditions = invalid_resource_conditions(message, owner.generation)
            status = {
                "observedGeneration": owner.generation,
                "conditions": conditions_to_status(conditions, now_timestamp()),
            }
            self.store.update_status(owner, status, ctx)

        with trace_span("commit_invalid_status", kind=KIND_POWER_MONITOR, attributes={"owner.name": owner_key.name}):
            try:
                self._retry(attempt, ctx)
            except OperatorError:
                metrics.status_update_total.labels(result="failed").inc()
                raise
            metrics.status_update_total.labels(result="invalid").inc()
