"""Constants for the Power Monitor Operator."""

# API Group
API_GROUP = "kepler.system.sustainable.computing.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Owning entity
KIND_POWER_MONITOR = "PowerMonitor"
PLURAL_POWER_MONITOR = "powermonitors"
POWER_MONITOR_INSTANCE_NAME = "power-monitor"

# Managed resource kinds
KIND_NAMESPACE = "Namespace"
KIND_SERVICE_ACCOUNT = "ServiceAccount"
KIND_CONFIG_MAP = "ConfigMap"
KIND_DAEMON_SET = "DaemonSet"
KIND_SERVICE = "Service"
KIND_CLUSTER_ROLE = "ClusterRole"
KIND_CLUSTER_ROLE_BINDING = "ClusterRoleBinding"

RBAC_API_GROUP = "rbac.authorization.k8s.io"

# Labels
LABEL_APP_NAME = "app.kubernetes.io/name"
LABEL_APP_COMPONENT = "app.kubernetes.io/component"
LABEL_APP_PART_OF = "app.kubernetes.io/part-of"
LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"

# Finalizers
FINALIZER = f"{API_GROUP}/finalizer"

# Field Manager
FIELD_MANAGER = "power-monitor-operator"

# Condition Types
COND_RECONCILED = "Reconciled"
COND_AVAILABLE = "Available"

# Condition Statuses
STATUS_TRUE = "True"
STATUS_FALSE = "False"
STATUS_UNKNOWN = "Unknown"

# Condition Reasons
REASON_RECONCILE_COMPLETE = "Complete"
REASON_RECONCILE_ERROR = "Error"
REASON_INVALID_RESOURCE = "InvalidPowerMonitorResource"
REASON_WORKLOAD_NOT_FOUND = "WorkloadNotFound"
REASON_WORKLOAD_ERROR = "WorkloadError"
REASON_OUT_OF_SYNC = "OutOfSync"
REASON_PODS_NOT_RUNNING = "PodsNotRunning"
REASON_ROLLOUT_IN_PROGRESS = "RolloutInProgress"
REASON_PARTIALLY_AVAILABLE = "PartiallyAvailable"
REASON_READY = "Ready"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_RECONCILE_SUCCEEDED = "ReconcileSucceeded"
EVENT_REASON_RECONCILE_REQUEUED = "ReconcileRequeued"
EVENT_REASON_INVALID_RESOURCE = "InvalidResource"
