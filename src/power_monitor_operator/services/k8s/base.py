"""Base resource store interface."""

from __future__ import annotations

from typing import Any, Protocol

from ...models import ResourceHandle
from ...utils.context import ReconcileContext


class ResourceStore(Protocol):
    """Protocol defining the store operations the engine consumes.

    Every call raises ``NotFoundError`` when the object is absent,
    ``ConflictError`` on a resource version mismatch, ``AlreadyExistsError``
    when a create finds an existing object and ``StoreError`` otherwise.
    """

    def get(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> ResourceHandle:
        """Fetch the live object with the handle's identity."""
        ...

    def create(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> ResourceHandle:
        """Create the object and return it as stored."""
        ...

    def update(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> ResourceHandle:
        """Replace the object, expecting ``handle.resource_version`` to be current."""
        ...

    def update_status(
        self,
        handle: ResourceHandle,
        status: dict[str, Any],
        ctx: ReconcileContext | None = None,
    ) -> ResourceHandle:
        """Replace the status sub-resource, expecting ``handle.resource_version`` to be current."""
        ...

    def delete(self, handle: ResourceHandle, ctx: ReconcileContext | None = None) -> None:
        """Delete the object with the handle's identity."""
        ...
