"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_INVALID_RESOURCE,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_REQUEUED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_RECONCILE_SUCCEEDED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Object the event refers to (must carry apiVersion, kind and metadata)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(body: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(body, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_succeeded(body: dict[str, Any]) -> None:
    """Emit reconcile succeeded event."""
    emit_event(body, EVENT_REASON_RECONCILE_SUCCEEDED, "Reconciliation succeeded")


def emit_reconcile_requeued(body: dict[str, Any], message: str) -> None:
    """Emit reconcile requeued event."""
    emit_event(body, EVENT_REASON_RECONCILE_REQUEUED, message)


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_invalid_resource(body: dict[str, Any], message: str) -> None:
    """Emit invalid resource event."""
    emit_event(body, EVENT_REASON_INVALID_RESOURCE, message, type_="Warning")
