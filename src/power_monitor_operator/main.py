"""Main entry point for the Power Monitor Operator."""

from __future__ import annotations

import logging
import threading
from typing import Any

import kopf

from . import health
from . import logging as structured_logging
from . import tracing
from .config import OperatorConfig, load_config
from .constants import API_GROUP_VERSION, KIND_POWER_MONITOR, POWER_MONITOR_INSTANCE_NAME
from .handlers.base import ReconcileResult
from .handlers.power_monitor import PowerMonitorHandler
from .handlers.shared import get_resource_store
from .utils.errors import sanitize_exception
from .utils.events import (
    emit_invalid_resource,
    emit_reconcile_failed,
    emit_reconcile_requeued,
    emit_reconcile_started,
    emit_reconcile_succeeded,
)

logger = logging.getLogger(__name__)

CONFIG: OperatorConfig = load_config()

_handler: PowerMonitorHandler | None = None

# kopf runs timers outside the per-object queue; one lock per PowerMonitor name
_reconcile_locks: dict[str, threading.Lock] = {}
_reconcile_locks_guard = threading.Lock()


def get_handler() -> PowerMonitorHandler:
    """Return the process-wide PowerMonitor handler, creating it on first use."""
    global _handler
    if _handler is None:
        _handler = PowerMonitorHandler(get_resource_store(), CONFIG)
    return _handler


def reconcile_lock(name: str) -> threading.Lock:
    """Return the lock serializing invocations for one PowerMonitor."""
    with _reconcile_locks_guard:
        return _reconcile_locks.setdefault(name, threading.Lock())


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    tracing.initialize_tracing()

    # Keep kopf's bookkeeping out of the status sub-resource the engine owns
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = 4

    health.start_metrics_server(CONFIG.metrics_port)
    get_handler()


def run_reconcile(name: str, body: Any, emit_events: bool = True) -> None:
    """Invoke the reconcile engine and translate its result for kopf.

    Invocations for the same name never overlap, whichever kopf handler
    triggers them.

    Raises:
        kopf.TemporaryError: If the invocation failed or asked to be requeued
        kopf.PermanentError: If the failure cannot be fixed by retrying
    """
    if emit_events:
        emit_reconcile_started(body)

    with reconcile_lock(name):
        result: ReconcileResult = get_handler().reconcile(name)

    if result.error is not None:
        message = f"Reconciliation failed: {sanitize_exception(result.error)}"
        emit_reconcile_failed(body, message)
        if result.requeue_after is None and not getattr(result.error, "retryable", True):
            raise kopf.PermanentError(message)
        raise kopf.TemporaryError(message, delay=result.requeue_after or CONFIG.requeue_after_seconds)

    if result.requeue_after is not None:
        if emit_events:
            emit_reconcile_requeued(body, f"Reconciliation requeued after {result.requeue_after}s")
        raise kopf.TemporaryError("Reconciliation requeued", delay=result.requeue_after)

    if name != POWER_MONITOR_INSTANCE_NAME:
        if emit_events:
            emit_invalid_resource(
                body, f"Only a single instance of PowerMonitor named {POWER_MONITOR_INSTANCE_NAME} is reconciled"
            )
        return

    if emit_events:
        emit_reconcile_succeeded(body)


@kopf.on.create(API_GROUP_VERSION, KIND_POWER_MONITOR)
@kopf.on.update(API_GROUP_VERSION, KIND_POWER_MONITOR)
@kopf.on.resume(API_GROUP_VERSION, KIND_POWER_MONITOR)
def handle_power_monitor(name: str, body: kopf.Body, **_: Any) -> None:
    """Handle PowerMonitor resource reconciliation."""
    run_reconcile(name, body)


@kopf.on.delete(API_GROUP_VERSION, KIND_POWER_MONITOR, optional=True)
def handle_power_monitor_delete(name: str, body: kopf.Body, **_: Any) -> None:
    """Run ordered teardown; the engine's own finalizer blocks removal until it completes."""
    run_reconcile(name, body)


@kopf.timer(API_GROUP_VERSION, KIND_POWER_MONITOR, interval=CONFIG.status_resync_interval_seconds)
def resync_power_monitor(name: str, body: kopf.Body, **_: Any) -> None:
    """Periodically reconcile so the Available condition tracks the live rollout."""
    run_reconcile(name, body, emit_events=False)
