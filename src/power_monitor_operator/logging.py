"""Structured logging configuration for the Power Monitor Operator."""

import json
import logging
import sys
from typing import Any

from .utils.context import get_context_dict


def setup_structured_logging(level: int = logging.INFO) -> None:
    """Configure structured JSON logging."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event."""
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(get_context_dict(kwargs))
    logger.log(level, json.dumps(log_data, default=str))


def log_reconciler_step(
    logger: logging.Logger,
    reconciler: str,
    resource: str,
    action: str,
    **kwargs: Any,
) -> None:
    """Log the outcome of a single reconciler step at debug level."""
    log_data = {
        "reconciler": reconciler,
        "resource": resource,
        "action": action,
    }
    log_data.update(get_context_dict(kwargs))
    logger.debug(json.dumps(log_data, default=str))
