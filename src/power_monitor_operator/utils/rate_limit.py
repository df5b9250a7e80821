"""Rate limiting utilities for API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))
_K8S_RATE_LIMIT_MAX_RETRIES = int(os.getenv("K8S_RATE_LIMIT_MAX_RETRIES", "3"))

# Track last call time; shared by every invocation in the process
_k8s_last_call_time: float = 0.0
_k8s_lock = threading.Lock()


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls.

    Enforces a minimum interval between calls so that concurrent reconciles
    for different owners do not overwhelm the API server.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        with _k8s_lock:
            min_interval = 1.0 / _K8S_RATE_LIMIT_PER_SECOND
            time_since_last_call = time.time() - _k8s_last_call_time
            if time_since_last_call < min_interval:
                time.sleep(min_interval - time_since_last_call)
            _k8s_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def is_rate_limit_error(e: Exception) -> bool:
    """Check whether an API exception signals server-side throttling."""
    status = getattr(e, "status", None)
    return status == 429 or (status == 503 and "rate limit" in str(e).lower())


def handle_rate_limit_error(
    e: Exception,
    attempt: int,
    max_retries: int = _K8S_RATE_LIMIT_MAX_RETRIES,
    sleep: Callable[[float], Any] | None = None,
) -> bool:
    """Back off after a rate limit error if retries remain.

    Args:
        e: Exception raised by the API call
        attempt: Zero-based number of retries already made for this call
        max_retries: Maximum number of retries
        sleep: Sleep used for the backoff (default: time.sleep)

    Returns:
        True if the caller should retry, False otherwise
    """
    if not is_rate_limit_error(e) or attempt >= max_retries:
        return False

    metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
    # Exponential backoff: 1s, 2s, 4s
    (sleep or time.sleep)(2 ** attempt)
    return True
