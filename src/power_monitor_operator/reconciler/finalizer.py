"""Finalizer: add or remove the owning entity's finalizer marker."""

from __future__ import annotations

import logging

from ..logging import log_reconciler_step
from ..models import ResourceHandle
from ..services.k8s.base import ResourceStore
from ..utils.context import ReconcileContext
from ..utils.errors import NotFoundError, OperatorError
from .base import ErrorPolicy, Reconciler, Result


class Finalizer(Reconciler):
    """Keep the finalizer marker in step with the owner's lifecycle.

    Runs last in both lists. While the owner is live the marker is added so
    the store cannot drop the owner before teardown; once the owner is marked
    for deletion and every earlier teardown step has converged, the marker is
    removed and the store completes the delete.
    """

    name = "finalizer"

    def __init__(
        self,
        owner: ResourceHandle,
        marker: str,
        on_error: ErrorPolicy | None = None,
        logger: logging.Logger | None = None,
    ):
        super().__init__(on_error=on_error, logger=logger)
        self.owner = owner
        self.marker = marker

    @property
    def resource(self) -> ResourceHandle:
        return self.owner

    def _reconcile(self, store: ResourceStore, ctx: ReconcileContext) -> Result:
        # Refresh the owner so the marker edit applies to the latest version
        try:
            refreshed = store.get(self.owner.identity(), ctx)
        except NotFoundError:
            log_reconciler_step(self.logger, self.name, self.owner.display_name, "owner-gone")
            return Result.converged()
        except OperatorError as e:
            return self.error("failed to refresh", e)

        deleted = refreshed.deletion_requested
        finalizers = refreshed.finalizers
        has_marker = self.marker in finalizers

        if deleted and has_marker:
            finalizers.remove(self.marker)
            action = "removed"
        elif not deleted and not has_marker:
            finalizers.append(self.marker)
            action = "added"
        else:
            return Result.converged()

        refreshed.metadata["finalizers"] = finalizers
        try:
            store.update(refreshed, ctx)
        except NotFoundError:
            return Result.converged()
        except OperatorError as e:
            return self.error(f"failed to update after marker was {action}", e)

        log_reconciler_step(self.logger, self.name, self.owner.display_name, f"marker-{action}", marker=self.marker)
        return Result.converged()
