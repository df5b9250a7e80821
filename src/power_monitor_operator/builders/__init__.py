"""Builders for managed resource templates."""

from .power_monitor import build_all, workload_key

__all__ = ["build_all", "workload_key"]
