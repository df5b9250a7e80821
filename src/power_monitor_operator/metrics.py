"""Prometheus metrics for the Power Monitor Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "power_monitor_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "power_monitor_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

# Per-reconciler step outcomes
reconciler_step_total = Counter(
    "power_monitor_operator_reconciler_step_total",
    "Total number of reconciler steps executed by the runner",
    ["reconciler", "action"],
)

# Managed resource write metrics
resource_operations_total = Counter(
    "power_monitor_operator_resource_operations_total",
    "Total number of managed resource operations",
    ["kind", "operation", "result"],
)

# Status commit metrics
status_update_total = Counter(
    "power_monitor_operator_status_update_total",
    "Total number of status commits",
    ["result"],
)

status_conflicts_total = Counter(
    "power_monitor_operator_status_conflicts_total",
    "Total number of resource version conflicts while committing status",
)

availability_total = Counter(
    "power_monitor_operator_availability_total",
    "Availability verdicts computed from rollout counters",
    ["status", "reason"],
)

# Error metrics
error_total = Counter(
    "power_monitor_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

# API call metrics
api_call_total = Counter(
    "power_monitor_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "power_monitor_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "power_monitor_operator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)
