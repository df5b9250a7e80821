"""Builders for the resources managed on behalf of a PowerMonitor."""

from __future__ import annotations

from typing import Any

from ..config import OperatorConfig
from ..constants import (
    KIND_CLUSTER_ROLE,
    KIND_CLUSTER_ROLE_BINDING,
    KIND_CONFIG_MAP,
    KIND_DAEMON_SET,
    KIND_NAMESPACE,
    KIND_SERVICE,
    KIND_SERVICE_ACCOUNT,
    LABEL_APP_COMPONENT,
    LABEL_APP_NAME,
    LABEL_APP_PART_OF,
    LABEL_MANAGED_BY,
    RBAC_API_GROUP,
)
from ..models import GroupVersionKind, ResourceHandle

NAMESPACE_GVK = GroupVersionKind("", "v1", KIND_NAMESPACE)
SERVICE_ACCOUNT_GVK = GroupVersionKind("", "v1", KIND_SERVICE_ACCOUNT)
CONFIG_MAP_GVK = GroupVersionKind("", "v1", KIND_CONFIG_MAP)
DAEMON_SET_GVK = GroupVersionKind("apps", "v1", KIND_DAEMON_SET)
SERVICE_GVK = GroupVersionKind("", "v1", KIND_SERVICE)
CLUSTER_ROLE_GVK = GroupVersionKind(RBAC_API_GROUP, "v1", KIND_CLUSTER_ROLE)
CLUSTER_ROLE_BINDING_GVK = GroupVersionKind(RBAC_API_GROUP, "v1", KIND_CLUSTER_ROLE_BINDING)

CONFIG_FILE_NAME = "config.yaml"


def common_labels(owner: ResourceHandle) -> dict[str, str]:
    """Labels stamped on every managed resource."""
    return {
        LABEL_APP_NAME: "power-monitor-exporter",
        LABEL_APP_PART_OF: owner.name,
        LABEL_MANAGED_BY: "power-monitor-operator",
    }


def selector_labels(owner: ResourceHandle) -> dict[str, str]:
    """Labels selecting the exporter pods."""
    return {
        LABEL_APP_COMPONENT: "exporter",
        LABEL_APP_PART_OF: owner.name,
    }


def workload_key(owner: ResourceHandle, config: OperatorConfig) -> ResourceHandle:
    """Identity of the DaemonSet whose rollout drives availability."""
    return ResourceHandle(gvk=DAEMON_SET_GVK, name=owner.name, namespace=config.deployment_namespace)


def build_namespace(owner: ResourceHandle, config: OperatorConfig) -> ResourceHandle:
    """Create the deployment namespace."""
    return ResourceHandle(
        gvk=NAMESPACE_GVK,
        name=config.deployment_namespace,
        payload={
            "metadata": {
                "labels": {
                    **common_labels(owner),
                    "pod-security.kubernetes.io/enforce": "privileged",
                },
            },
        },
    )


def build_cluster_role(owner: ResourceHandle, config: OperatorConfig) -> ResourceHandle:
    """Create the cluster role granting the exporter read access to node and pod stats."""
    return ResourceHandle(
        gvk=CLUSTER_ROLE_GVK,
        name=owner.name,
        payload={
            "metadata": {"labels": common_labels(owner)},
            "rules": [
                {
                    "apiGroups": [""],
                    "resources": ["nodes/metrics", "nodes/proxy", "nodes/stats", "pods"],
                    "verbs": ["get", "watch", "list"],
                }
            ],
        },
    )


def build_cluster_role_binding(owner: ResourceHandle, config: OperatorConfig) -> ResourceHandle:
    """Bind the exporter cluster role to the exporter's service account."""
    return ResourceHandle(
        gvk=CLUSTER_ROLE_BINDING_GVK,
        name=owner.name,
        payload={
            "metadata": {"labels": common_labels(owner)},
            "roleRef": {"apiGroup": RBAC_API_GROUP, "kind": KIND_CLUSTER_ROLE, "name": owner.name},
            "subjects": [
                {"kind": KIND_SERVICE_ACCOUNT, "name": owner.name, "namespace": config.deployment_namespace}
            ],
        },
    )


def build_service_account(owner: ResourceHandle, config: OperatorConfig) -> ResourceHandle:
    """Create the exporter's service account."""
    return ResourceHandle(
        gvk=SERVICE_ACCOUNT_GVK,
        name=owner.name,
        namespace=config.deployment_namespace,
        payload={"metadata": {"labels": common_labels(owner)}},
    )


def build_config_map(owner: ResourceHandle, config: OperatorConfig) -> ResourceHandle:
    """Create the exporter configuration from the PowerMonitor spec.

    Args:
        owner: PowerMonitor resource
        config: Operator configuration

    Returns:
        ConfigMap handle with the rendered exporter configuration
    """
    spec = owner.payload.get("spec", {})
    kepler_config = spec.get("kepler", {}).get("config", {})
    log_level = kepler_config.get("logLevel", "info")

    rendered = "\n".join([
        "log:",
        f"  level: {log_level}",
        "  format: text",
        "web:",
        f"  listenAddresses: [':{config.exporter_port}']",
        "",
    ])
    return ResourceHandle(
        gvk=CONFIG_MAP_GVK,
        name=owner.name,
        namespace=config.deployment_namespace,
        payload={
            "metadata": {"labels": common_labels(owner)},
            "data": {CONFIG_FILE_NAME: rendered},
        },
    )


def build_daemonset(owner: ResourceHandle, config: OperatorConfig) -> ResourceHandle:
    """Create the exporter DaemonSet from the PowerMonitor spec.

    Args:
        owner: PowerMonitor resource
        config: Operator configuration

    Returns:
        DaemonSet handle
    """
    spec = owner.payload.get("spec", {})
    deployment = spec.get("kepler", {}).get("deployment", {})
    node_selector = deployment.get("nodeSelector") or {"kubernetes.io/os": "linux"}
    tolerations = deployment.get("tolerations") or [{"operator": "Exists"}]

    pod_labels = {**common_labels(owner), **selector_labels(owner)}
    container: dict[str, Any] = {
        "name": "power-monitor",
        "image": config.image,
        "imagePullPolicy": "IfNotPresent",
        "args": [f"--config.file=/etc/power-monitor/{CONFIG_FILE_NAME}"],
        "ports": [{"name": "http", "containerPort": config.exporter_port, "protocol": "TCP"}],
        "securityContext": {"privileged": True},
        "env": [{"name": "NODE_NAME", "valueFrom": {"fieldRef": {"fieldPath": "spec.nodeName"}}}],
        "volumeMounts": [
            {"name": "sysfs", "mountPath": "/host/sys", "readOnly": True},
            {"name": "procfs", "mountPath": "/host/proc", "readOnly": True},
            {"name": "cfm", "mountPath": "/etc/power-monitor"},
        ],
    }

    return ResourceHandle(
        gvk=DAEMON_SET_GVK,
        name=owner.name,
        namespace=config.deployment_namespace,
        payload={
            "metadata": {"labels": common_labels(owner)},
            "spec": {
                "selector": {"matchLabels": selector_labels(owner)},
                "template": {
                    "metadata": {"labels": pod_labels},
                    "spec": {
                        "serviceAccountName": owner.name,
                        "hostPID": True,
                        "nodeSelector": node_selector,
                        "tolerations": tolerations,
                        "containers": [container],
                        "volumes": [
                            {"name": "sysfs", "hostPath": {"path": "/sys"}},
                            {"name": "procfs", "hostPath": {"path": "/proc"}},
                            {"name": "cfm", "configMap": {"name": owner.name}},
                        ],
                    },
                },
            },
        },
    )


def build_service(owner: ResourceHandle, config: OperatorConfig) -> ResourceHandle:
    """Create the headless service exposing exporter metrics."""
    return ResourceHandle(
        gvk=SERVICE_GVK,
        name=owner.name,
        namespace=config.deployment_namespace,
        payload={
            "metadata": {"labels": common_labels(owner)},
            "spec": {
                "clusterIP": "None",
                "selector": selector_labels(owner),
                "ports": [{"name": "http", "port": config.exporter_port, "targetPort": "http"}],
            },
        },
    )


def build_all(owner: ResourceHandle, config: OperatorConfig) -> list[ResourceHandle]:
    """Build every managed resource in creation order.

    The namespace comes first. The cluster role precedes its binding, so the
    reverse order used for teardown removes the binding first.
    """
    return [
        build_namespace(owner, config),
        build_cluster_role(owner, config),
        build_cluster_role_binding(owner, config),
        build_service_account(owner, config),
        build_config_map(owner, config),
        build_daemonset(owner, config),
        build_service(owner, config),
    ]
