"""Data models for the dedicated portal services."""

from .cluster import Cluster, ClusterNodes, ClusterSpec, CLUSTER_STATE_ERROR, CLUSTER_STATE_INSTALLING
from .customer import Customer, CustomerSpec, CustomersList
from .provisioning import ProvisionerSettings

__all__ = [
    "Cluster",
    "ClusterNodes",
    "ClusterSpec",
    "CLUSTER_STATE_ERROR",
    "CLUSTER_STATE_INSTALLING",
    "Customer",
    "CustomerSpec",
    "CustomersList",
    "ProvisionerSettings",
]
