"""Operator configuration loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class OperatorConfig:
    """Configuration values threaded through builders and reconcilers.

    Every reconcile invocation receives the same instance, so template
    builders never read process-wide state directly.
    """

    deployment_namespace: str = "power-monitor"
    image: str = "quay.io/sustainable_computing_io/kepler:latest"
    exporter_port: int = 28282
    requeue_after_seconds: float = 5.0
    delete_wait_timeout_seconds: float = 30.0
    delete_poll_interval_seconds: float = 5.0
    status_retry_steps: int = 4
    status_retry_initial_delay_seconds: float = 0.01
    status_retry_factor: float = 5.0
    status_retry_jitter: float = 0.1
    reconcile_timeout_seconds: float = 120.0
    status_resync_interval_seconds: float = 60.0
    metrics_port: int = 8080


def load_config() -> OperatorConfig:
    """Load operator configuration from environment variables.

    Environment Variables:
        POWER_MONITOR_DEPLOYMENT_NAMESPACE: Namespace for managed resources (default: power-monitor)
        POWER_MONITOR_IMAGE: Exporter image deployed by the DaemonSet
        POWER_MONITOR_EXPORTER_PORT: Port exposed by the exporter (default: 28282)
        REQUEUE_AFTER_SECONDS: Delay before a requeued reconcile (default: 5)
        DELETE_WAIT_TIMEOUT_SECONDS: Wait for namespace termination (default: 30)
        DELETE_POLL_INTERVAL_SECONDS: Poll interval while waiting on deletion (default: 5)
        STATUS_RETRY_STEPS: Status commit attempts on conflict (default: 4)
        STATUS_RETRY_INITIAL_DELAY_SECONDS: First backoff delay (default: 0.01)
        STATUS_RETRY_FACTOR: Backoff multiplier (default: 5.0)
        STATUS_RETRY_JITTER: Backoff jitter fraction (default: 0.1)
        RECONCILE_TIMEOUT_SECONDS: Deadline for a single invocation (default: 120)
        STATUS_RESYNC_INTERVAL_SECONDS: Periodic status refresh interval (default: 60)
        METRICS_PORT: Port for metrics and health endpoints (default: 8080)

    Returns:
        OperatorConfig instance
    """
    return OperatorConfig(
        deployment_namespace=os.getenv("POWER_MONITOR_DEPLOYMENT_NAMESPACE", "power-monitor"),
        image=os.getenv("POWER_MONITOR_IMAGE", "quay.io/sustainable_computing_io/kepler:latest"),
        exporter_port=int(os.getenv("POWER_MONITOR_EXPORTER_PORT", "28282")),
        requeue_after_seconds=float(os.getenv("REQUEUE_AFTER_SECONDS", "5.0")),
        delete_wait_timeout_seconds=float(os.getenv("DELETE_WAIT_TIMEOUT_SECONDS", "30.0")),
        delete_poll_interval_seconds=float(os.getenv("DELETE_POLL_INTERVAL_SECONDS", "5.0")),
        status_retry_steps=int(os.getenv("STATUS_RETRY_STEPS", "4")),
        status_retry_initial_delay_seconds=float(os.getenv("STATUS_RETRY_INITIAL_DELAY_SECONDS", "0.01")),
        status_retry_factor=float(os.getenv("STATUS_RETRY_FACTOR", "5.0")),
        status_retry_jitter=float(os.getenv("STATUS_RETRY_JITTER", "0.1")),
        reconcile_timeout_seconds=float(os.getenv("RECONCILE_TIMEOUT_SECONDS", "120.0")),
        status_resync_interval_seconds=float(os.getenv("STATUS_RESYNC_INTERVAL_SECONDS", "60.0")),
        metrics_port=int(os.getenv("METRICS_PORT", "8080")),
    )
