"""Runner: execute an ordered list of reconcilers for one invocation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .. import metrics
from ..logging import log_reconciler_step
from ..services.k8s.base import ResourceStore
from ..utils.context import ReconcileContext
from ..utils.errors import ReconcileCancelled
from .base import Action, Reconciler


@dataclass
class RunResult:
    """Aggregate outcome of a runner pass.

    ``requeue_after`` is set when the pass stopped on a requeue; ``error``
    holds the error that halted the pass, if any.
    """

    requeue_after: float | None = None
    error: BaseException | None = None
    completed: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.requeue_after is None


class Runner:
    """Run reconcilers strictly in list order, halting on the first one
    that does not converge.

    Ordering is part of correctness (namespace before contents on create,
    contents before namespace on teardown), so nothing runs in parallel and
    a halted pass leaves partial state for the next invocation to finish.
    """

    def __init__(
        self,
        store: ResourceStore,
        requeue_after: float = 5.0,
        logger: logging.Logger | None = None,
    ):
        self.store = store
        self.requeue_after = requeue_after
        self.logger = logger or logging.getLogger(__name__)

    def run(self, reconcilers: Sequence[Reconciler], ctx: ReconcileContext) -> RunResult:
        result = RunResult()
        for reconciler in reconcilers:
            try:
                ctx.check()
            except ReconcileCancelled as e:
                result.error = e
                log_reconciler_step(self.logger, reconciler.name, reconciler.resource.display_name, "cancelled")
                return result

            outcome = reconciler.reconcile(self.store, ctx)
            metrics.reconciler_step_total.labels(reconciler=reconciler.name, action=outcome.action.value).inc()
            log_reconciler_step(
                self.logger,
                reconciler.name,
                reconciler.resource.display_name,
                outcome.action.value,
                error=str(outcome.error) if outcome.error else None,
            )

            if outcome.action is Action.CONTINUE and outcome.error is None:
                result.completed.append(repr(reconciler))
                continue

            result.error = outcome.error
            if outcome.action is Action.REQUEUE or outcome.error is None:
                result.requeue_after = self.requeue_after
            return result

        return result
