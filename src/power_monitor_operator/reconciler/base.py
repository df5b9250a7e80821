"""Reconciler outcome types and the shared base class."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from ..models import ResourceHandle
from ..services.k8s.base import ResourceStore
from ..utils.context import ReconcileContext
from ..utils.errors import ReconcilerError


class Action(enum.Enum):
    """What the runner does after a reconciler returns."""

    CONTINUE = "Continue"
    REQUEUE = "Requeue"
    STOP = "Stop"


class ErrorPolicy(enum.Enum):
    """Declarative mapping applied to a reconciler's error outcome."""

    REQUEUE = "Requeue"


@dataclass(frozen=True)
class Result:
    """Outcome of one reconciler: Converged, Requeue(reason) or Error(err)."""

    action: Action = Action.CONTINUE
    error: BaseException | None = None
    reason: str = ""

    @classmethod
    def converged(cls) -> Result:
        return cls()

    @classmethod
    def requeue(cls, reason: str) -> Result:
        return cls(action=Action.REQUEUE, reason=reason)

    @classmethod
    def failed(cls, error: BaseException) -> Result:
        return cls(action=Action.STOP, error=error, reason=str(error))

    @property
    def is_converged(self) -> bool:
        return self.action is Action.CONTINUE and self.error is None


class Reconciler:
    """Base class of the closed set of reconciler variants.

    Subclasses implement ``_reconcile``; ``reconcile`` applies the error
    policy so that an error outcome becomes a requeue when requested.
    """

    name = "reconciler"

    def __init__(self, on_error: ErrorPolicy | None = None, logger: logging.Logger | None = None):
        self.on_error = on_error
        self.logger = logger or logging.getLogger(__name__)

    @property
    def resource(self) -> ResourceHandle:
        raise NotImplementedError

    def reconcile(self, store: ResourceStore, ctx: ReconcileContext) -> Result:
        result = self._reconcile(store, ctx)
        if result.error is not None and self.on_error is ErrorPolicy.REQUEUE:
            return Result(action=Action.REQUEUE, error=result.error, reason=str(result.error))
        return result

    def _reconcile(self, store: ResourceStore, ctx: ReconcileContext) -> Result:
        raise NotImplementedError

    def error(self, msg: str, err: BaseException) -> Result:
        """Build an error outcome naming the reconciler and its resource."""
        wrapped = ReconcilerError(f"{self.resource.display_name}: {self.name}: {msg}: {err}", cause=err)
        wrapped.__cause__ = err
        return Result.failed(wrapped)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.resource.display_name})"
