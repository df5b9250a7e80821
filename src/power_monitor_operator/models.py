"""Data model shared by the reconcilers and the status engine."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class GroupVersionKind:
    """Kind identity of a Kubernetes object."""

    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> GroupVersionKind:
        """Build a GVK from an ``apiVersion`` string such as ``apps/v1`` or ``v1``."""
        group, _, version = api_version.rpartition("/")
        return cls(group=group, version=version, kind=kind)

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind}"


@dataclass(frozen=True)
class OwnerReference:
    """Back-reference from a managed object to its owning entity.

    Children point at the owner; the owner never lists its children.
    """

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = True
    block_owner_deletion: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }

    @classmethod
    def for_owner(cls, owner: ResourceHandle) -> OwnerReference:
        uid = owner.metadata.get("uid")
        if not uid:
            raise ValueError(f"owner {owner.display_name} has no uid")
        return cls(
            api_version=owner.gvk.api_version,
            kind=owner.gvk.kind,
            name=owner.name,
            uid=uid,
        )


@dataclass
class ResourceHandle:
    """Identity and payload of one desired or observed object.

    ``payload`` is the full object document (``apiVersion``, ``kind``,
    ``metadata``, ...). ``resource_version`` is the optimistic concurrency
    token from the last read or write and is empty for desired objects.
    """

    gvk: GroupVersionKind
    name: str
    namespace: str = ""
    payload: dict[str, Any] = field(default_factory=dict)
    resource_version: str = ""

    @classmethod
    def from_object(cls, obj: dict[str, Any]) -> ResourceHandle:
        """Wrap an object document returned by the store."""
        metadata = obj.get("metadata", {})
        return cls(
            gvk=GroupVersionKind.from_api_version(obj.get("apiVersion", ""), obj.get("kind", "")),
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", "") or "",
            payload=obj,
            resource_version=metadata.get("resourceVersion", "") or "",
        )

    @property
    def metadata(self) -> dict[str, Any]:
        return self.payload.setdefault("metadata", {})

    @property
    def namespaced_name(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name

    @property
    def display_name(self) -> str:
        return f"{self.namespaced_name} ({self.gvk})"

    @property
    def generation(self) -> int:
        return int(self.metadata.get("generation", 0) or 0)

    @property
    def deletion_requested(self) -> bool:
        return bool(self.metadata.get("deletionTimestamp"))

    @property
    def finalizers(self) -> list[str]:
        return list(self.metadata.get("finalizers") or [])

    @property
    def owner_references(self) -> list[dict[str, Any]]:
        return list(self.metadata.get("ownerReferences") or [])

    def identity(self) -> ResourceHandle:
        """Return a payload-free handle carrying only this object's identity."""
        return ResourceHandle(gvk=self.gvk, name=self.name, namespace=self.namespace)

    def to_object(self) -> dict[str, Any]:
        """Render the full object document, identity fields filled in."""
        obj = copy.deepcopy(self.payload)
        obj["apiVersion"] = self.gvk.api_version
        obj["kind"] = self.gvk.kind
        metadata = obj.setdefault("metadata", {})
        metadata["name"] = self.name
        if self.namespace:
            metadata["namespace"] = self.namespace
        if self.resource_version:
            metadata["resourceVersion"] = self.resource_version
        return obj


@dataclass
class Condition:
    """A typed status fact attached to the owning entity."""

    type: str
    status: str
    reason: str
    message: str
    observed_generation: int = 0
    last_transition_time: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "status": self.status,
            "reason": self.reason,
            "message": self.message,
            "observedGeneration": self.observed_generation,
            "lastTransitionTime": self.last_transition_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        return cls(
            type=data.get("type", ""),
            status=data.get("status", ""),
            reason=data.get("reason", ""),
            message=data.get("message", ""),
            observed_generation=int(data.get("observedGeneration", 0) or 0),
            last_transition_time=data.get("lastTransitionTime", ""),
        )


@dataclass(frozen=True)
class RolloutCounters:
    """Snapshot of a managed workload's live rollout state."""

    desired: int = 0
    current: int = 0
    updated: int = 0
    available: int = 0
    unavailable: int = 0
    ready: int = 0
    misscheduled: int = 0
    generation: int = 0
    observed_generation: int = 0

    @classmethod
    def from_daemonset(cls, obj: dict[str, Any]) -> RolloutCounters:
        """Read rollout counters from a DaemonSet object document."""
        status = obj.get("status") or {}
        metadata = obj.get("metadata") or {}
        return cls(
            desired=int(status.get("desiredNumberScheduled", 0) or 0),
            current=int(status.get("currentNumberScheduled", 0) or 0),
            updated=int(status.get("updatedNumberScheduled", 0) or 0),
            available=int(status.get("numberAvailable", 0) or 0),
            unavailable=int(status.get("numberUnavailable", 0) or 0),
            ready=int(status.get("numberReady", 0) or 0),
            misscheduled=int(status.get("numberMisscheduled", 0) or 0),
            generation=int(metadata.get("generation", 0) or 0),
            observed_generation=int(status.get("observedGeneration", 0) or 0),
        )

    def to_status(self) -> dict[str, int]:
        """Render the counters as they are copied into the owner's status."""
        return {
            "desiredNumberScheduled": self.desired,
            "currentNumberScheduled": self.current,
            "updatedNumberScheduled": self.updated,
            "numberAvailable": self.available,
            "numberUnavailable": self.unavailable,
            "numberReady": self.ready,
            "numberMisscheduled": self.misscheduled,
        }
