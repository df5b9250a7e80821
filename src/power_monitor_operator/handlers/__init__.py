"""Handler modules for the owning entity."""

from .base import BaseHandler, ReconcileResult
from .power_monitor import PowerMonitorHandler, owner_key

__all__ = ["BaseHandler", "ReconcileResult", "PowerMonitorHandler", "owner_key"]
