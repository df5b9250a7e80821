"""Kubernetes resource store."""

from .base import ResourceStore
from .client import KubernetesStore

__all__ = ["ResourceStore", "KubernetesStore"]
