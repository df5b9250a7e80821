"""Kubernetes implementation of the resource store."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from kubernetes import dynamic
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic.exceptions import ResourceNotFoundError
from urllib3.exceptions import HTTPError

from ... import metrics
from ...constants import FIELD_MANAGER
from ...models import GroupVersionKind, ResourceHandle
from ...utils.context import ReconcileContext
from ...utils.errors import AlreadyExistsError, ConflictError, NotFoundError, StoreError
from ...utils.rate_limit import handle_rate_limit_error, rate_limit_k8s

logger = logging.getLogger(__name__)

_DELETE_OPTIONS = {
    "apiVersion": "v1",
    "kind": "DeleteOptions",
    "propagationPolicy": "Background",
}


def translate_api_exception(e: ApiException, operation: str, handle: ResourceHandle) -> StoreError:
    """Map a Kubernetes API exception onto the store error taxonomy.

    Args:
        e: Exception raised by the API client
        operation: Store operation that failed ("get", "create", ...)
        handle: Handle identifying the object

    Returns:
        The matching StoreError subclass instance
    """
    message = f"{handle.display_name}: {operation} failed: {e.status} {e.reason}"
    if e.status == 404:
        return NotFoundError(message, status=404)
    if e.status == 409:
        if operation == "create":
            return AlreadyExistsError(message, status=409)
        return ConflictError(message, status=409)
    return StoreError(message, status=e.status)


class KubernetesStore:
    """Resource store backed by the Kubernetes dynamic client.

    The dynamic client resolves any group/version/kind through API
    discovery, so the same store serves namespaces, workloads and the
    owning custom resource.
    """

    def __init__(self, dynamic_client: dynamic.DynamicClient):
        self.client = dynamic_client

    def _resource(self, gvk: GroupVersionKind) -> Any:
        try:
            return self.client.resources.get(api_version=gvk.api_version, kind=gvk.kind)
        except ResourceNotFoundError as e:
            raise StoreError(f"{gvk} is not served by the API server: {e}") from e

    def _call(
        self,
        operation: str,
        handle: ResourceHandle,
        fn: Callable[[Any, dict[str, Any]], Any],
        ctx: ReconcileContext | None,
    ) -> Any:
        """Run one API call with cancellation, rate limiting and metrics."""
        resource = self._resource(handle.gvk)
        attempt = 0
        while True:
            kwargs: dict[str, Any] = {}
            if ctx is not None:
                ctx.check()
                remaining = ctx.remaining()
                if remaining is not None:
                    kwargs["_request_timeout"] = remaining

            start_time = time.time()
            try:
                result = rate_limit_k8s(fn)(resource, kwargs)
                metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
                return result
            except ApiException as e:
                if e.status == 404:
                    result_label = "not_found"
                elif e.status == 409:
                    result_label = "conflict"
                else:
                    result_label = "error"
                metrics.api_call_total.labels(api_type="k8s", operation=operation, result=result_label).inc()
                if handle_rate_limit_error(e, attempt, sleep=ctx.sleep if ctx is not None else None):
                    attempt += 1
                    continue
                raise translate_api_exception(e, operation, handle) from e
            except (HTTPError, OSError) as e:
                metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
                raise StoreError(f"{handle.display_name}: {operation} failed: {e}") from e
            finally:
                duration = time.time() - start_time
                metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    @staticmethod
    def _namespace(handle: ResourceHandle) -> str | None:
        return handle.namespace or None

    def get(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> ResourceHandle:
        obj = self._call(
            "get",
            handle,
            lambda res, kw: res.get(name=handle.name, namespace=self._namespace(handle), **kw),
            ctx,
        )
        return ResourceHandle.from_object(obj.to_dict())

    def create(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> ResourceHandle:
        body = handle.to_object()
        body["metadata"].pop("resourceVersion", None)
        obj = self._call(
            "create",
            handle,
            lambda res, kw: res.create(
                body=body, namespace=self._namespace(handle), field_manager=FIELD_MANAGER, **kw
            ),
            ctx,
        )
        return ResourceHandle.from_object(obj.to_dict())

    def update(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> ResourceHandle:
        body = handle.to_object()
        obj = self._call(
            "update",
            handle,
            lambda res, kw: res.replace(
                body=body, namespace=self._namespace(handle), field_manager=FIELD_MANAGER, **kw
            ),
            ctx,
        )
        return ResourceHandle.from_object(obj.to_dict())

    def update_status(
        self,
        handle: ResourceHandle,
        status: dict[str, Any],
        ctx: ReconcileContext | None = None,
    ) -> ResourceHandle:
        body = handle.to_object()
        body["status"] = status
        obj = self._call(
            "update_status",
            handle,
            lambda res, kw: res.status.replace(
                body=body, namespace=self._namespace(handle), field_manager=FIELD_MANAGER, **kw
            ),
            ctx,
        )
        return ResourceHandle.from_object(obj.to_dict())

    def delete(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> None:
        self._call(
            "delete",
            handle,
            lambda res, kw: res.delete(
                name=handle.name, namespace=self._namespace(handle), body=_DELETE_OPTIONS, **kw
            ),
            ctx,
        )
