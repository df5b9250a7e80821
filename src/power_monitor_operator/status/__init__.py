"""Status engine and availability decision procedure."""

from .availability import available_condition, available_condition_for_error
from .engine import StatusEngine, retry_on_conflict

__all__ = [
    "available_condition",
    "available_condition_for_error",
    "StatusEngine",
    "retry_on_conflict",
]
