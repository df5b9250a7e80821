"""Shared fixtures: an in-memory resource store and operator configuration."""

from __future__ import annotations

import copy
import itertools
from typing import Any

import pytest

from power_monitor_operator.config import OperatorConfig
from power_monitor_operator.constants import API_GROUP_VERSION, KIND_POWER_MONITOR
from power_monitor_operator.models import ResourceHandle
from power_monitor_operator.utils.context import ReconcileContext
from power_monitor_operator.utils.errors import AlreadyExistsError, ConflictError, NotFoundError

_WRITE_OPERATIONS = {"create", "update", "update_status", "delete"}


def store_key(handle: ResourceHandle) -> tuple[str, str, str]:
    return (f"{handle.gvk.api_version}/{handle.gvk.kind}", handle.namespace, handle.name)


class FakeStore:
    """In-memory ResourceStore with resource versions, finalizers and fault injection."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.failures: dict[str, list[Exception]] = {}
        # key -> number of further reads an object survives after delete (None: forever)
        self.linger_on_delete: dict[tuple[str, str, str], int | None] = {}
        self._lingering: dict[tuple[str, str, str], int | None] = {}
        self._versions = itertools.count(1)
        self._uids = itertools.count(1)

    # Test helpers

    def add(self, obj: dict[str, Any]) -> ResourceHandle:
        obj = copy.deepcopy(obj)
        metadata = obj.setdefault("metadata", {})
        metadata.setdefault("uid", f"uid-{next(self._uids)}")
        metadata.setdefault("generation", 1)
        metadata["resourceVersion"] = str(next(self._versions))
        handle = ResourceHandle.from_object(obj)
        self.objects[store_key(handle)] = obj
        return ResourceHandle.from_object(copy.deepcopy(obj))

    def lookup(self, handle: ResourceHandle) -> dict[str, Any] | None:
        return self.objects.get(store_key(handle))

    def mark_deleted(self, handle: ResourceHandle) -> None:
        """Simulate a user deleting the object: finalizers block removal."""
        key = store_key(handle)
        obj = self.objects[key]
        if obj["metadata"].get("finalizers"):
            obj["metadata"]["deletionTimestamp"] = "2024-01-01T00:00:00Z"
            obj["metadata"]["resourceVersion"] = str(next(self._versions))
        else:
            del self.objects[key]

    def fail(self, operation: str, *errors: Exception) -> None:
        self.failures.setdefault(operation, []).extend(errors)

    def writes(self) -> list[tuple[str, str, str]]:
        return [call for call in self.calls if call[0] in _WRITE_OPERATIONS]

    # ResourceStore protocol

    def _enter(self, operation: str, handle: ResourceHandle, ctx: ReconcileContext | None) -> None:
        if ctx is not None:
            ctx.check()
        self.calls.append((operation, handle.gvk.kind, handle.name))
        pending = self.failures.get(operation)
        if pending:
            raise pending.pop(0)

    def _require(self, handle: ResourceHandle) -> dict[str, Any]:
        obj = self.objects.get(store_key(handle))
        if obj is None:
            raise NotFoundError(f"{handle.display_name} not found", status=404)
        return obj

    def get(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> ResourceHandle:
        self._enter("get", handle, ctx)
        key = store_key(handle)
        if key in self._lingering:
            remaining = self._lingering[key]
            if remaining is not None:
                if remaining <= 0:
                    del self._lingering[key]
                    self.objects.pop(key, None)
                else:
                    self._lingering[key] = remaining - 1
        return ResourceHandle.from_object(copy.deepcopy(self._require(handle)))

    def create(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> ResourceHandle:
        self._enter("create", handle, ctx)
        if store_key(handle) in self.objects:
            raise AlreadyExistsError(f"{handle.display_name} already exists", status=409)
        obj = handle.to_object()
        obj["metadata"].pop("resourceVersion", None)
        return self.add(obj)

    def update(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> ResourceHandle:
        self._enter("update", handle, ctx)
        current = self._require(handle)
        if handle.resource_version != current["metadata"]["resourceVersion"]:
            raise ConflictError(f"{handle.display_name} has been modified", status=409)

        obj = handle.to_object()
        obj["metadata"]["uid"] = current["metadata"]["uid"]
        if "status" in current:
            obj["status"] = copy.deepcopy(current["status"])
        else:
            obj.pop("status", None)
        generation = current["metadata"].get("generation", 1)
        if obj.get("spec") != current.get("spec"):
            generation += 1
        obj["metadata"]["generation"] = generation
        obj["metadata"]["resourceVersion"] = str(next(self._versions))

        key = store_key(handle)
        if obj["metadata"].get("deletionTimestamp") and not obj["metadata"].get("finalizers"):
            del self.objects[key]
        else:
            self.objects[key] = obj
        return ResourceHandle.from_object(copy.deepcopy(obj))

    def update_status(
        self,
        handle: ResourceHandle,
        status: dict[str, Any],
        ctx: ReconcileContext | None = None,
    ) -> ResourceHandle:
        self._enter("update_status", handle, ctx)
        current = self._require(handle)
        if handle.resource_version != current["metadata"]["resourceVersion"]:
            raise ConflictError(f"{handle.display_name} has been modified", status=409)
        current["status"] = copy.deepcopy(status)
        current["metadata"]["resourceVersion"] = str(next(self._versions))
        return ResourceHandle.from_object(copy.deepcopy(current))

    def delete(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> None:
        self._enter("delete", handle, ctx)
        key = store_key(handle)
        obj = self._require(handle)
        if key in self.linger_on_delete:
            obj["metadata"]["deletionTimestamp"] = "2024-01-01T00:00:00Z"
            self._lingering[key] = self.linger_on_delete.pop(key)
        elif obj["metadata"].get("finalizers"):
            obj["metadata"]["deletionTimestamp"] = "2024-01-01T00:00:00Z"
        else:
            del self.objects[key]


class TickingClock:
    """Monotonic clock that advances by a fixed step every time it is read."""

    def __init__(self, step: float = 1.0) -> None:
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


def power_monitor_object(name: str = "power-monitor", **spec: Any) -> dict[str, Any]:
    return {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_POWER_MONITOR,
        "metadata": {"name": name},
        "spec": spec or {"kepler": {"config": {"logLevel": "info"}}},
    }


def daemonset_object(
    name: str = "power-monitor",
    namespace: str = "power-monitor",
    generation: int = 1,
    observed_generation: int = 1,
    **status: int,
) -> dict[str, Any]:
    return {
        "apiVersion": "apps/v1",
        "kind": "DaemonSet",
        "metadata": {"name": name, "namespace": namespace, "generation": generation},
        "status": {"observedGeneration": observed_generation, **status},
    }


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def config() -> OperatorConfig:
    return OperatorConfig(
        delete_wait_timeout_seconds=3.0,
        delete_poll_interval_seconds=0.0,
        status_retry_initial_delay_seconds=0.0,
        reconcile_timeout_seconds=None,  # type: ignore[arg-type]
    )


@pytest.fixture
def ctx() -> ReconcileContext:
    return ReconcileContext(reconcile_id="test")


@pytest.fixture
def owner(store: FakeStore) -> ResourceHandle:
    return store.add(power_monitor_object())
