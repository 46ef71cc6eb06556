"""Kubernetes interaction module."""

from .client import K8sClient, resolve_kubeconfig_path
from .provisioner import ClusterOperatorProvisioner, ClusterProvisioner
from .resources import build_cluster_deployment, build_cluster_version

__all__ = [
    "K8sClient",
    "resolve_kubeconfig_path",
    "ClusterProvisioner",
    "ClusterOperatorProvisioner",
    "build_cluster_deployment",
    "build_cluster_version",
]
