"""Utility functions for the Power Monitor Operator."""

from .conditions import (
    find_condition,
    invalid_resource_conditions,
    reconciled_condition,
    update_condition,
)
from .context import (
    ReconcileContext,
    get_context_dict,
    get_correlation_id,
    set_correlation_id,
    with_correlation_id,
)
from .errors import (
    AlreadyExistsError,
    ConflictError,
    DeletionTimeoutError,
    NotFoundError,
    OperatorError,
    ReconcileCancelled,
    StoreError,
    sanitize_exception,
)
from .events import emit_event
from .rate_limit import handle_rate_limit_error, rate_limit_k8s

__all__ = [
    "update_condition",
    "find_condition",
    "reconciled_condition",
    "invalid_resource_conditions",
    "ReconcileContext",
    "set_correlation_id",
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
    "OperatorError",
    "StoreError",
    "NotFoundError",
    "ConflictError",
    "AlreadyExistsError",
    "ReconcileCancelled",
    "DeletionTimeoutError",
    "sanitize_exception",
    "emit_event",
    "rate_limit_k8s",
    "handle_rate_limit_error",
]
