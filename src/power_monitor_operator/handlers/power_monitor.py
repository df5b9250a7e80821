"""Handler for the PowerMonitor owning entity."""

from __future__ import annotations

from ..builders.power_monitor import build_all, workload_key
from ..config import OperatorConfig
from ..constants import (
    API_GROUP,
    API_VERSION,
    FINALIZER,
    KIND_POWER_MONITOR,
    POWER_MONITOR_INSTANCE_NAME,
)
from ..models import GroupVersionKind, ResourceHandle
from ..reconciler import Deleter, ErrorPolicy, Finalizer, Reconciler, Runner, Updater
from ..services.k8s.base import ResourceStore
from ..status import StatusEngine
from ..tracing import add_span_attribute, trace_span
from ..utils.context import ReconcileContext, with_correlation_id
from ..utils.errors import NotFoundError, OperatorError
from .base import BaseHandler, ReconcileResult

POWER_MONITOR_GVK = GroupVersionKind(API_GROUP, API_VERSION, KIND_POWER_MONITOR)


def owner_key(name: str) -> ResourceHandle:
    """Identity of a cluster-scoped PowerMonitor."""
    return ResourceHandle(gvk=POWER_MONITOR_GVK, name=name)


class PowerMonitorHandler(BaseHandler):
    """Turn one PowerMonitor key into a reconciler pass and a status commit."""

    def __init__(self, store: ResourceStore, config: OperatorConfig):
        super().__init__(KIND_POWER_MONITOR)
        self.store = store
        self.config = config
        self.runner = Runner(store, requeue_after=config.requeue_after_seconds, logger=self.logger)
        self.status = StatusEngine(store, config, workload_for=lambda owner: workload_key(owner, config))

    def reconcilers_for(self, owner: ResourceHandle) -> list[Reconciler]:
        """Build the ordered reconciler list for the owner's lifecycle phase.

        Live owners get updaters in creation order. Owners marked for deletion
        get deleters in reverse order, ending with a namespace deleter that
        waits for termination. The finalizer always runs last.
        """
        namespace, *contents = build_all(owner, self.config)
        reconcilers: list[Reconciler]

        if not owner.deletion_requested:
            reconcilers = [Updater(owner, namespace, on_error=ErrorPolicy.REQUEUE, logger=self.logger)]
            reconcilers += [Updater(owner, resource, logger=self.logger) for resource in contents]
        else:
            reconcilers = [Deleter(resource, logger=self.logger) for resource in reversed(contents)]
            reconcilers.append(
                Deleter(
                    namespace,
                    wait_timeout=self.config.delete_wait_timeout_seconds,
                    poll_interval=self.config.delete_poll_interval_seconds,
                    on_error=ErrorPolicy.REQUEUE,
                    logger=self.logger,
                )
            )

        reconcilers.append(Finalizer(owner, FINALIZER, logger=self.logger))
        return reconcilers

    def reconcile(self, name: str, ctx: ReconcileContext | None = None) -> ReconcileResult:
        """Reconcile the PowerMonitor with the given name.

        Args:
            name: Name of the cluster-scoped PowerMonitor
            ctx: Invocation context; a fresh one with the configured deadline if omitted

        Returns:
            ReconcileResult; a set requeue_after or error asks for redelivery
        """
        ctx = ctx or ReconcileContext(timeout=self.config.reconcile_timeout_seconds)
        key = owner_key(name)

        with with_correlation_id(ctx.reconcile_id), trace_span(
            "reconcile_power_monitor", kind=KIND_POWER_MONITOR, attributes={"owner.name": name}
        ):
            try:
                owner = self.store.get(key, ctx)
            except NotFoundError:
                self.log_info({"name": name}, "PowerMonitor not found; may have been deleted", reason="NotFound")
                return ReconcileResult()
            except OperatorError as e:
                return ReconcileResult(error=e)

            return self.reconcile_with_metrics(owner.metadata, lambda: self._reconcile(owner, ctx))

    def _reconcile(self, owner: ResourceHandle, ctx: ReconcileContext) -> ReconcileResult:
        key = owner.identity()

        # Admission normally rejects other names; record it rather than retry forever
        if owner.name != POWER_MONITOR_INSTANCE_NAME:
            message = f"Only a single instance of PowerMonitor named {POWER_MONITOR_INSTANCE_NAME} is reconciled"
            self.log_warning(owner.metadata, message, reason="InvalidResource")
            try:
                self.status.commit_invalid_status(key, message, ctx)
            except OperatorError as e:
                return ReconcileResult(error=e)
            return ReconcileResult()

        reconcilers = self.reconcilers_for(owner)
        add_span_attribute("reconcilers", len(reconcilers))
        add_span_attribute("owner.deleting", owner.deletion_requested)
        self.log_info(
            owner.metadata,
            "Running reconcilers",
            reason="ReconcileStarted",
            count=len(reconcilers),
            deleting=owner.deletion_requested,
        )
        run = self.runner.run(reconcilers, ctx)

        status_error: BaseException | None = None
        try:
            self.status.commit_status(key, run.error, ctx)
        except OperatorError as e:
            self.log_error(owner.metadata, "Status update failed", error=e, reason="StatusUpdateFailed")
            status_error = e

        return ReconcileResult(requeue_after=run.requeue_after, error=run.error or status_error)
