"""Updater: create or converge a single desired object."""

from __future__ import annotations

import copy
import logging
from typing import Any

from .. import metrics
from ..logging import log_reconciler_step
from ..models import OwnerReference, ResourceHandle
from ..services.k8s.base import ResourceStore
from ..utils.context import ReconcileContext
from ..utils.errors import AlreadyExistsError, NotFoundError, OperatorError
from .base import ErrorPolicy, Reconciler, Result

# Top-level keys owned by the API server rather than by the desired payload
UNCONTROLLED_KEYS = frozenset({"apiVersion", "kind", "metadata", "status"})
CONTROLLED_METADATA_KEYS = ("labels", "annotations")


def is_contained(desired: Any, live: Any) -> bool:
    """Return True if every field set in ``desired`` has the same value in ``live``.

    Fields present only in ``live`` (server defaults, fields written by other
    controllers) are not drift. Lists must match element by element.
    """
    if isinstance(desired, dict):
        if not isinstance(live, dict):
            return False
        for key, value in desired.items():
            if value is None:
                if live.get(key) is not None:
                    return False
                continue
            if key not in live or not is_contained(value, live[key]):
                return False
        return True
    if isinstance(desired, list):
        if not isinstance(live, list) or len(desired) != len(live):
            return False
        return all(is_contained(d, l) for d, l in zip(desired, live))
    return desired == live


def controlled_fields(payload: dict[str, Any]) -> dict[str, Any]:
    """Extract the fields of a payload that the engine manages."""
    fields = {key: value for key, value in payload.items() if key not in UNCONTROLLED_KEYS}
    metadata = payload.get("metadata") or {}
    fields["metadata"] = {
        key: metadata[key] for key in CONTROLLED_METADATA_KEYS if metadata.get(key)
    }
    return fields


def needs_update(desired: dict[str, Any], live: dict[str, Any]) -> bool:
    """Return True if the live object has drifted from the desired controlled fields."""
    return not is_contained(controlled_fields(desired), live)


def apply_desired(desired: dict[str, Any], live: dict[str, Any]) -> dict[str, Any]:
    """Overlay the desired controlled fields onto a copy of the live object.

    Server-assigned metadata (uid, resourceVersion, ownerReferences, ...) is
    kept from the live object.
    """
    merged = copy.deepcopy(live)
    for key, value in desired.items():
        if key not in UNCONTROLLED_KEYS:
            merged[key] = copy.deepcopy(value)

    desired_meta = desired.get("metadata") or {}
    merged_meta = merged.setdefault("metadata", {})
    for key in CONTROLLED_METADATA_KEYS:
        if desired_meta.get(key):
            current = dict(merged_meta.get(key) or {})
            current.update(desired_meta[key])
            merged_meta[key] = current
    return merged


class Updater(Reconciler):
    """Converge one managed object to its desired payload.

    Absent objects are created with the owner back-reference stamped before
    the first write. Present objects are updated only when a controlled field
    differs. A resource version conflict is reported as an error; the error
    policy decides whether it becomes a requeue.
    """

    name = "updater"

    def __init__(
        self,
        owner: ResourceHandle,
        desired: ResourceHandle,
        on_error: ErrorPolicy | None = None,
        logger: logging.Logger | None = None,
    ):
        super().__init__(on_error=on_error, logger=logger)
        self.owner = owner
        self.desired = desired

    @property
    def resource(self) -> ResourceHandle:
        return self.desired

    def _reconcile(self, store: ResourceStore, ctx: ReconcileContext) -> Result:
        try:
            live = store.get(self.desired.identity(), ctx)
        except NotFoundError:
            return self._create(store, ctx)
        except OperatorError as e:
            return self.error("fetch failed", e)
        return self._update(store, live, ctx)

    def _with_owner_reference(self) -> ResourceHandle:
        obj = ResourceHandle(
            gvk=self.desired.gvk,
            name=self.desired.name,
            namespace=self.desired.namespace,
            payload=copy.deepcopy(self.desired.payload),
        )
        # Cluster-scoped owners may own anything; namespaced owners only their own namespace
        if not self.owner.namespace or self.owner.namespace == obj.namespace:
            obj.metadata["ownerReferences"] = [OwnerReference.for_owner(self.owner).to_dict()]
        return obj

    def _create(self, store: ResourceStore, ctx: ReconcileContext) -> Result:
        kind = self.desired.gvk.kind
        try:
            obj = self._with_owner_reference()
        except ValueError as e:
            return self.error("setting owner reference failed", e)

        try:
            store.create(obj, ctx)
        except AlreadyExistsError:
            # Created concurrently or the earlier read was stale; compare against it
            log_reconciler_step(self.logger, self.name, self.desired.display_name, "already-exists")
            try:
                live = store.get(self.desired.identity(), ctx)
            except OperatorError as e:
                return self.error("fetch after create conflict failed", e)
            return self._update(store, live, ctx)
        except OperatorError as e:
            metrics.resource_operations_total.labels(kind=kind, operation="create", result="failed").inc()
            return self.error("create failed", e)

        metrics.resource_operations_total.labels(kind=kind, operation="create", result="success").inc()
        log_reconciler_step(self.logger, self.name, self.desired.display_name, "created")
        return Result.converged()

    def _update(self, store: ResourceStore, live: ResourceHandle, ctx: ReconcileContext) -> Result:
        kind = self.desired.gvk.kind
        if not needs_update(self.desired.payload, live.payload):
            log_reconciler_step(self.logger, self.name, self.desired.display_name, "unchanged")
            return Result.converged()

        updated = ResourceHandle(
            gvk=live.gvk,
            name=live.name,
            namespace=live.namespace,
            payload=apply_desired(self.desired.payload, live.payload),
            resource_version=live.resource_version,
        )
        try:
            store.update(updated, ctx)
        except OperatorError as e:
            metrics.resource_operations_total.labels(kind=kind, operation="update", result="failed").inc()
            return self.error("update failed", e)

        metrics.resource_operations_total.labels(kind=kind, operation="update", result="success").inc()
        log_reconciler_step(self.logger, self.name, self.desired.display_name, "updated")
        return Result.converged()
