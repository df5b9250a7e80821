"""Deleter: remove a managed object, optionally waiting until it is gone."""

from __future__ import annotations

import logging

from .. import metrics
from ..logging import log_reconciler_step
from ..models import ResourceHandle
from ..services.k8s.base import ResourceStore
from ..utils.context import ReconcileContext
from ..utils.errors import DeletionTimeoutError, NotFoundError, OperatorError, ReconcileCancelled
from .base import ErrorPolicy, Reconciler, Result


class Deleter(Reconciler):
    """Delete one object by identity.

    An already absent object counts as converged. With ``wait_timeout`` set,
    the deleter polls the store until the object disappears so that later
    teardown steps never run while it is still terminating.
    """

    name = "deleter"

    def __init__(
        self,
        resource: ResourceHandle,
        wait_timeout: float | None = None,
        poll_interval: float = 5.0,
        on_error: ErrorPolicy | None = None,
        logger: logging.Logger | None = None,
    ):
        super().__init__(on_error=on_error, logger=logger)
        self._resource = resource.identity()
        self.wait_timeout = wait_timeout
        self.poll_interval = poll_interval

    @property
    def resource(self) -> ResourceHandle:
        return self._resource

    def _reconcile(self, store: ResourceStore, ctx: ReconcileContext) -> Result:
        kind = self._resource.gvk.kind
        try:
            store.delete(self._resource, ctx)
        except NotFoundError:
            log_reconciler_step(self.logger, self.name, self._resource.display_name, "absent")
            return Result.converged()
        except OperatorError as e:
            metrics.resource_operations_total.labels(kind=kind, operation="delete", result="failed").inc()
            return self.error("failed to delete", e)

        metrics.resource_operations_total.labels(kind=kind, operation="delete", result="success").inc()
        log_reconciler_step(self.logger, self.name, self._resource.display_name, "deleted")

        if self.wait_timeout is None:
            return Result.converged()
        return self._wait_for_removal(store, ctx)

    def _wait_for_removal(self, store: ResourceStore, ctx: ReconcileContext) -> Result:
        deadline = ctx.now() + self.wait_timeout
        while True:
            try:
                store.get(self._resource, ctx)
            except NotFoundError:
                log_reconciler_step(self.logger, self.name, self._resource.display_name, "gone")
                return Result.converged()
            except ReconcileCancelled as e:
                return self.error("cancelled while waiting for deletion", e)
            except OperatorError as e:
                # Transient read failures do not end the wait
                log_reconciler_step(self.logger, self.name, self._resource.display_name, "poll-failed", error=str(e))

            remaining = deadline - ctx.now()
            if remaining <= 0:
                return self.error(
                    "timed out waiting for deletion",
                    DeletionTimeoutError(f"still present after {self.wait_timeout}s"),
                )

            log_reconciler_step(self.logger, self.name, self._resource.display_name, "terminating")
            try:
                ctx.sleep(min(self.poll_interval, remaining))
            except ReconcileCancelled as e:
                return self.error("cancelled while waiting for deletion", e)
