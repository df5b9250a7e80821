"""Availability verdict derived from a workload's rollout counters."""

from __future__ import annotations

from ..constants import (
    COND_AVAILABLE,
    REASON_OUT_OF_SYNC,
    REASON_PARTIALLY_AVAILABLE,
    REASON_PODS_NOT_RUNNING,
    REASON_READY,
    REASON_ROLLOUT_IN_PROGRESS,
    REASON_WORKLOAD_ERROR,
    REASON_WORKLOAD_NOT_FOUND,
    STATUS_FALSE,
    STATUS_TRUE,
    STATUS_UNKNOWN,
)
from ..models import Condition, RolloutCounters
from ..utils.errors import NotFoundError


def available_condition_for_error(error: BaseException, workload_name: str) -> Condition:
    """Availability when the workload could not be fetched."""
    if isinstance(error, NotFoundError):
        return Condition(
            type=COND_AVAILABLE,
            status=STATUS_FALSE,
            reason=REASON_WORKLOAD_NOT_FOUND,
            message=f"power-monitor daemonset {workload_name!r} not found: {error}",
        )
    return Condition(
        type=COND_AVAILABLE,
        status=STATUS_UNKNOWN,
        reason=REASON_WORKLOAD_ERROR,
        message=f"failed to get power-monitor daemonset {workload_name!r}: {error}",
    )


def available_condition(counters: RolloutCounters, workload_name: str) -> Condition:
    """Availability from rollout counters.

    The checks form a priority list; the first one that matches decides.
    """
    if counters.generation > counters.observed_generation:
        return Condition(
            type=COND_AVAILABLE,
            status=STATUS_UNKNOWN,
            reason=REASON_OUT_OF_SYNC,
            message=(
                f"Generation {counters.generation} of power-monitor daemonset {workload_name!r} "
                f"is out of sync with the observed generation: {counters.observed_generation}"
            ),
        )

    # Nothing scheduled, or nothing ready yet
    if counters.ready == 0 or counters.desired == 0:
        return Condition(
            type=COND_AVAILABLE,
            status=STATUS_FALSE,
            reason=REASON_PODS_NOT_RUNNING,
            message=(
                f"power-monitor daemonset {workload_name!r} is not rolled out to any node; "
                f"ready {counters.ready}/{counters.desired}; check nodeSelector and tolerations"
            ),
        )

    # Old and new pods coexist
    if counters.updated < counters.desired:
        return Condition(
            type=COND_AVAILABLE,
            status=STATUS_UNKNOWN,
            reason=REASON_ROLLOUT_IN_PROGRESS,
            message=(
                f"Waiting for power-monitor daemonset {workload_name!r} rollout to finish: "
                f"{counters.updated} out of {counters.desired} new pods have been updated"
            ),
        )

    # Updated pods exist but not all have passed minReadySeconds
    if counters.available < counters.desired:
        return Condition(
            type=COND_AVAILABLE,
            status=STATUS_UNKNOWN,
            reason=REASON_PARTIALLY_AVAILABLE,
            message=(
                f"Rollout of power-monitor daemonset {workload_name!r} is in progress: "
                f"{counters.available} of {counters.desired} updated pods are available"
            ),
        )

    if counters.unavailable > 0:
        return Condition(
            type=COND_AVAILABLE,
            status=STATUS_FALSE,
            reason=REASON_PARTIALLY_AVAILABLE,
            message=(
                f"Waiting for power-monitor daemonset {workload_name!r} to rollout on "
                f"{counters.unavailable} nodes; available {counters.available}/{counters.desired}"
            ),
        )

    return Condition(
        type=COND_AVAILABLE,
        status=STATUS_TRUE,
        reason=REASON_READY,
        message=(
            f"power-monitor daemonset {workload_name!r} is deployed to all nodes and available; "
            f"ready {counters.ready}/{counters.desired}"
        ),
    )
