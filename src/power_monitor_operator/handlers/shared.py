"""Shared utilities for handlers."""

from __future__ import annotations

from kubernetes import client, config, dynamic

from ..services.k8s.client import KubernetesStore


def get_dynamic_client() -> dynamic.DynamicClient:
    """Get a Kubernetes dynamic client.

    Uses the in-cluster service account when available and falls back to
    the local kubeconfig.

    Returns:
        DynamicClient instance
    """
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return dynamic.DynamicClient(client.ApiClient())


def get_resource_store() -> KubernetesStore:
    """Get the resource store used by reconcile invocations."""
    return KubernetesStore(get_dynamic_client())
