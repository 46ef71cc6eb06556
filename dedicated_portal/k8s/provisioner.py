"""Cluster provisioning through the Cluster-Operator custom resources."""

from abc import ABC, abstractmethod
from typing import Optional

from kubernetes.client.rest import ApiException

from .client import API_ERRORS, CLUSTER_DEPLOYMENTS, CLUSTER_VERSIONS, K8sClient, describe_api_error
from .resources import build_cluster_deployment, build_cluster_version
from ..exceptions import ProvisioningError
from ..model.cluster import ClusterSpec
from ..model.provisioning import ProvisionerSettings
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ClusterProvisioner(ABC):
    """Interface used by the clusters service to provision clusters."""

    @abstractmethod
    def provision(self, cluster: ClusterSpec) -> None:
        """Submit the cluster for provisioning; raises ``ProvisioningError``."""
        pass

    def close(self) -> None:
        """Release connections held by the provisioner."""


class ClusterOperatorProvisioner(ClusterProvisioner):
    """Provisions clusters on AWS using the Cluster-Operator.

    Provisioning returns once the API server accepted the ClusterDeployment;
    the controller installs the cluster asynchronously.
    """

    def __init__(self, k8s_client: K8sClient, settings: Optional[ProvisionerSettings] = None):
        self.client = k8s_client
        self.settings = settings or ProvisionerSettings()

    @property
    def namespace(self) -> str:
        return self.settings.namespace

    def provision(self, cluster: ClusterSpec) -> None:
        logger.info(f"Provisioning cluster '{cluster.name}' in namespace {self.namespace}")

        try:
            self.ensure_cluster_version()
        except ProvisioningError as e:
            raise ProvisioningError(f"Failed to create ClusterVersion object: {e}") from e
        except API_ERRORS as e:
            raise ProvisioningError(f"Failed to create ClusterVersion object: {describe_api_error(e)}") from e

        body = build_cluster_deployment(cluster, self.settings)
        try:
            self.client.create_custom_object(CLUSTER_DEPLOYMENTS, body, self.namespace)
        except API_ERRORS as e:
            raise ProvisioningError(f"Failed to create ClusterDeployment object: {describe_api_error(e)}") from e

        logger.info(f"ClusterDeployment '{body['metadata']['name']}' accepted")

    def ensure_cluster_version(self) -> bool:
        """Create the shared ClusterVersion unless it exists.

        Returns True when this call created it. An existing object is left
        untouched. Losing a concurrent creation race (409 from the API server)
        counts as the object existing.
        """
        name = self.settings.cluster_version.name

        try:
            self.client.get_custom_object(CLUSTER_VERSIONS, name, self.namespace)
            logger.debug(f"ClusterVersion '{name}' already exists")
            return False
        except ApiException as e:
            if e.status != 404:
                raise ProvisioningError(
                    f"Error getting cluster version {name} in namespace {self.namespace}: {e.reason}"
                ) from e

        try:
            self.client.create_custom_object(
                CLUSTER_VERSIONS, build_cluster_version(self.settings), self.namespace
            )
        except ApiException as e:
            if e.status == 409:
                logger.info(f"ClusterVersion '{name}' was created concurrently")
                return False
            raise

        logger.info(f"Created ClusterVersion '{name}'")
        return True

    def close(self) -> None:
        self.client.close()
