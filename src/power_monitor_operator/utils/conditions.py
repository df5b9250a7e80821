"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_AVAILABLE,
    COND_RECONCILED,
    REASON_INVALID_RESOURCE,
    REASON_RECONCILE_COMPLETE,
    REASON_RECONCILE_ERROR,
    STATUS_FALSE,
    STATUS_TRUE,
    STATUS_UNKNOWN,
)
from ..models import Condition


def now_timestamp() -> str:
    """Current time formatted the way Kubernetes serializes metav1.Time."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
    transition_time: str | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Conditions are keyed by type: an existing entry of the same type is
    replaced in place, so at most one condition per type is ever present.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed
        transition_time: Timestamp to stamp; defaults to now

    Returns:
        Updated list of conditions
    """
    now = transition_time or now_timestamp()

    existing_idx = None
    for idx, cond in enumerate(conditions):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition: dict[str, Any] = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        existing = conditions[existing_idx]
        # Only update lastTransitionTime if status changed
        if transition_time is None and existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        conditions[existing_idx] = new_condition
    else:
        conditions.append(new_condition)

    return conditions


def find_condition(conditions: list[dict[str, Any]], condition_type: str) -> Condition | None:
    """Return the condition of the given type, or None if absent."""
    for cond in conditions:
        if cond.get("type") == condition_type:
            return Condition.from_dict(cond)
    return None


def reconciled_condition(reconcile_error: BaseException | None, observed_generation: int) -> Condition:
    """Build the Reconciled condition from the outcome of the reconciler run."""
    if reconcile_error is None:
        return Condition(
            type=COND_RECONCILED,
            status=STATUS_TRUE,
            reason=REASON_RECONCILE_COMPLETE,
            message="Reconcile succeeded",
            observed_generation=observed_generation,
        )
    return Condition(
        type=COND_RECONCILED,
        status=STATUS_FALSE,
        reason=REASON_RECONCILE_ERROR,
        message=str(reconcile_error),
        observed_generation=observed_generation,
    )


def invalid_resource_conditions(message: str, observed_generation: int) -> list[Condition]:
    """Conditions recorded for an owning entity the operator refuses to reconcile."""
    return [
        Condition(
            type=COND_RECONCILED,
            status=STATUS_FALSE,
            reason=REASON_INVALID_RESOURCE,
            message=message,
            observed_generation=observed_generation,
        ),
        Condition(
            type=COND_AVAILABLE,
            status=STATUS_UNKNOWN,
            reason=REASON_INVALID_RESOURCE,
            message="This instance of PowerMonitor is invalid",
            observed_generation=observed_generation,
        ),
    ]


def conditions_to_status(conditions: list[Condition], transition_time: str) -> list[dict[str, Any]]:
    """Serialize a fresh condition set, stamping one transition time on all of them."""
    result: list[dict[str, Any]] = []
    for cond in conditions:
        update_condition(
            result,
            cond.type,
            cond.status,
            cond.reason,
            cond.message,
            observed_generation=cond.observed_generation,
            transition_time=transition_time,
        )
    return result
